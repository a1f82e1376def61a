import uuid
from django.db import models
from django.utils import timezone


class ApplicationStatus(models.TextChoices):
    PENDING = 'PENDING', 'Pending'
    APPROVED = 'APPROVED', 'Approved'
    REJECTED = 'REJECTED', 'Rejected'
    WITHDRAWN = 'WITHDRAWN', 'Withdrawn'


# Statuses an organizer may still judge. REJECTED can be re-judged,
# APPROVED and WITHDRAWN are final.
JUDGEABLE_STATUSES = [ApplicationStatus.PENDING, ApplicationStatus.REJECTED]

VERDICTS = [ApplicationStatus.APPROVED, ApplicationStatus.REJECTED]


class Application(models.Model):
    """
    A volunteer's bid for a task.

    Source of truth for Task.volunteers, Task.application_ids and the
    applicant/organizer lists on User. References are plain UUIDs (no FK).
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    task_id = models.UUIDField(db_index=True)
    applicant_id = models.UUIDField(db_index=True)

    motivation_statement = models.TextField()
    relevant_experience = models.TextField(blank=True, default='')
    availability_note = models.TextField(blank=True, default='')

    status = models.CharField(
        max_length=20,
        choices=ApplicationStatus.choices,
        default=ApplicationStatus.PENDING,
        db_index=True
    )

    verdict_reason = models.TextField(null=True, blank=True)
    verdict_by_id = models.UUIDField(null=True, blank=True)

    applied_at = models.DateTimeField(default=timezone.now)
    reviewed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ['-applied_at']
        constraints = [
            models.UniqueConstraint(
                fields=['task_id', 'applicant_id'],
                name='unique_application_per_task',
            ),
        ]

    def __str__(self):
        return f"Application {self.id} ({self.status})"
