"""
Authentication backend for email + password login.
"""
from django.contrib.auth.backends import ModelBackend

from .models import User
from .security import hash_password, verify_password


class EmailPasswordBackend(ModelBackend):
    """
    Looks the user up by lower-cased email and checks the password with
    security.verify_password. Permission lookups come from ModelBackend.
    """

    def authenticate(self, request, username=None, password=None, email=None, **kwargs):
        email = (email or username or '').strip().lower()
        if not email or not password:
            return None

        user = User.objects.filter(email=email).first()
        if user is None:
            # Same hashing cost for unknown emails
            hash_password(password)
            return None

        if verify_password(password, user.password) and self.user_can_authenticate(user):
            return user
        return None
