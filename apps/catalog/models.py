import uuid
from django.db import models

from apps.identity.models import CauseFocus


class PriorityLevel(models.TextChoices):
    NORMAL = 'normal', 'Normal'
    HIGH = 'high', 'High'
    CRITICAL = 'critical', 'Critical'


class TaskStatus(models.TextChoices):
    DRAFT = 'DRAFT', 'Draft'
    PENDING_REVIEW = 'PENDING_REVIEW', 'Pending Review'
    ACTIVE_OPEN = 'ACTIVE_OPEN', 'Active - Open'
    ACTIVE_FULL = 'ACTIVE_FULL', 'Active - Full'
    IN_PROGRESS = 'IN_PROGRESS', 'In Progress'
    COMPLETED = 'COMPLETED', 'Completed'
    TERMINATED = 'TERMINATED', 'Terminated'
    FAILED = 'FAILED', 'Failed'


# Statuses listed on the public board
LISTED_STATUSES = [
    TaskStatus.ACTIVE_OPEN,
    TaskStatus.ACTIVE_FULL,
    TaskStatus.PENDING_REVIEW,
]

# Allowed lifecycle moves. Statuses missing from the map are final.
STATUS_TRANSITIONS = {
    TaskStatus.DRAFT: {TaskStatus.PENDING_REVIEW, TaskStatus.TERMINATED},
    TaskStatus.PENDING_REVIEW: {TaskStatus.ACTIVE_OPEN, TaskStatus.DRAFT, TaskStatus.TERMINATED},
    TaskStatus.ACTIVE_OPEN: {TaskStatus.ACTIVE_FULL, TaskStatus.IN_PROGRESS, TaskStatus.TERMINATED},
    TaskStatus.ACTIVE_FULL: {TaskStatus.ACTIVE_OPEN, TaskStatus.IN_PROGRESS, TaskStatus.TERMINATED},
    TaskStatus.IN_PROGRESS: {TaskStatus.COMPLETED, TaskStatus.FAILED, TaskStatus.TERMINATED},
}


class Task(models.Model):
    """
    A volunteer opportunity posted by an organizer.

    volunteers holds ids of users with an approved application and
    application_ids holds ids of every live application. Both lists are
    maintained by apps.applications and can be rebuilt from Application rows.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=60)
    description = models.TextField()
    # Store organizer as UUID field (no FK to maintain app independence)
    organizer_id = models.UUIDField(db_index=True)

    start_time = models.DateTimeField()
    end_time = models.DateTimeField(null=True, blank=True)
    location = models.CharField(max_length=255)
    application_deadline = models.DateTimeField()

    max_volunteers = models.PositiveIntegerField(default=1)
    volunteers = models.JSONField(default=list, blank=True)

    cause_focus = models.CharField(
        max_length=20,
        choices=CauseFocus.choices,
        db_index=True
    )
    required_skills = models.JSONField(default=list, blank=True)
    priority_level = models.CharField(
        max_length=10,
        choices=PriorityLevel.choices,
        default=PriorityLevel.NORMAL
    )

    status = models.CharField(
        max_length=20,
        choices=TaskStatus.choices,
        default=TaskStatus.DRAFT,
        db_index=True
    )
    is_accepting_applications = models.BooleanField(default=True)
    termination_reason = models.TextField(null=True, blank=True)

    application_ids = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['start_time']

    def __str__(self):
        return f"{self.title} ({self.status})"

    @property
    def slots_remaining(self) -> int:
        """Derived at read time, never stored."""
        return self.max_volunteers - len(self.volunteers or [])
