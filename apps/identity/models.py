import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager


class CauseFocus(models.TextChoices):
    ENVIRONMENT = 'environment', 'Environment'
    EDUCATION = 'education', 'Education'
    HEALTH = 'health', 'Health'
    ELDERLY = 'elderly', 'Elderly Care'
    LOCAL_AID = 'local_aid', 'Local Aid'


class UserManager(BaseUserManager):
    """
    Manager for email-identified users.
    Emails are stored lower-cased so uniqueness is case-insensitive.
    """
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        from .security import hash_password

        if not email:
            raise ValueError("The email must be set")
        user = self.model(email=email.strip().lower(), **extra_fields)
        if password:
            user.password = hash_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', False)
        extra_fields.setdefault('is_superuser', False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    """
    Marketplace account. The same user can organize tasks and volunteer for others.

    application_history holds ids of applications the user submitted,
    application_ids holds ids of applications received on the user's tasks.
    Both are denormalized from Application rows (no FK to keep apps independent).
    """
    username = None
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    display_name = models.CharField(max_length=150, unique=True)
    location = models.CharField(max_length=255, blank=True)
    cause_focus = models.CharField(
        max_length=20,
        choices=CauseFocus.choices,
        default=CauseFocus.ENVIRONMENT
    )
    skills = models.TextField(blank=True)

    application_history = models.JSONField(default=list, blank=True)
    application_ids = models.JSONField(default=list, blank=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['display_name']

    class Meta:
        ordering = ['display_name']

    def __str__(self):
        return self.display_name or self.email
