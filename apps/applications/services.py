"""
Application workflow services.

Submit, verdict and withdraw keep the denormalized id lists on Task and
User in step with Application status. Each operation runs its writes in a
single transaction, and status changes are conditional updates on the
status that was read.

State machine:
    PENDING -> APPROVED | REJECTED | WITHDRAWN
    REJECTED -> APPROVED | REJECTED   (re-judging)
    APPROVED, WITHDRAWN are final.
"""
import logging
from typing import Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.catalog.models import Task, TaskStatus
from apps.core.results import ErrorKind, ServiceResult, service_boundary
from apps.core.revalidation import CATALOG, revalidate
from apps.core.utils import parse_id, to_iso
from apps.identity.models import User
from apps.identity.services import get_contacts, get_display_names, normalize_email
from .dtos import (
    ApplicationDetailDTO, ApplicationHistoryItemDTO, ApplicationResult, HistoryResult,
    ReceivedApplicationDTO, ReceivedResult, SubmitResult,
)
from .models import JUDGEABLE_STATUSES, VERDICTS, Application, ApplicationStatus
from .schemas import ApplicationIn

logger = logging.getLogger(__name__)

MIN_MOTIVATION_LENGTH = 20
WITHDRAWAL_REASON = "Volunteer withdrawal"


# =============================================================================
# Denormalized list helpers
# =============================================================================

def _push_id(model, pk, field_name: str, value) -> bool:
    """
    Append ``value`` to a JSON id list, skipping ids already present.
    Locks the row, so callers must be inside a transaction.
    Returns False when the row does not exist.
    """
    obj = model.objects.select_for_update().filter(pk=pk).first()
    if obj is None:
        logger.warning(f"{model.__name__} {pk} missing, cannot push {field_name}")
        return False
    ids = list(getattr(obj, field_name) or [])
    if str(value) not in ids:
        ids.append(str(value))
        model.objects.filter(pk=pk).update(**{field_name: ids})
    return True


def _pull_id(model, pk, field_name: str, value) -> bool:
    """Remove every occurrence of ``value`` from a JSON id list."""
    obj = model.objects.select_for_update().filter(pk=pk).first()
    if obj is None:
        logger.warning(f"{model.__name__} {pk} missing, cannot pull {field_name}")
        return False
    ids = list(getattr(obj, field_name) or [])
    kept = [i for i in ids if i != str(value)]
    if len(kept) != len(ids):
        model.objects.filter(pk=pk).update(**{field_name: kept})
    return True


def _has_applied(task_id: UUID, applicant_id: UUID) -> bool:
    return Application.objects.filter(task_id=task_id, applicant_id=applicant_id).exists()


# =============================================================================
# Workflow
# =============================================================================

@service_boundary(SubmitResult, "A server error occurred during submission.")
def submit_application(payload: ApplicationIn) -> SubmitResult:
    """
    Submit a PENDING application.

    Writes, in one transaction: the Application row, Task.application_ids,
    the applicant's application_history and the organizer's application_ids.
    """
    if not payload.task_id or not normalize_email(payload.applicant_email):
        return SubmitResult.failure("Missing required Task ID or Applicant Email.")

    motivation = (payload.motivation_statement or '').strip()
    if len(motivation) < MIN_MOTIVATION_LENGTH:
        return SubmitResult.failure(
            f"Motivation statement must be at least {MIN_MOTIVATION_LENGTH} characters."
        )

    task_id = parse_id(payload.task_id)
    if not task_id:
        return SubmitResult.failure("Invalid Task ID format.")

    applicant = User.objects.filter(email=normalize_email(payload.applicant_email)).first()
    if not applicant:
        return SubmitResult.failure("Applicant profile not found.", ErrorKind.NOT_FOUND)

    task = Task.objects.filter(id=task_id).first()
    if not task:
        return SubmitResult.failure("Target task not found.", ErrorKind.NOT_FOUND)

    if task.status != TaskStatus.ACTIVE_OPEN or not task.is_accepting_applications:
        return SubmitResult.failure("Applications are closed for this task.", ErrorKind.CONFLICT)

    if task.application_deadline <= timezone.now():
        return SubmitResult.failure(
            "The application deadline for this task has passed.", ErrorKind.CONFLICT
        )

    if task.organizer_id == applicant.id:
        return SubmitResult.failure("You cannot apply to your own task.", ErrorKind.CONFLICT)

    if _has_applied(task.id, applicant.id):
        return SubmitResult.failure("You have already applied for this task.", ErrorKind.CONFLICT)

    try:
        with transaction.atomic():
            application = Application.objects.create(
                task_id=task.id,
                applicant_id=applicant.id,
                motivation_statement=motivation,
                relevant_experience=(payload.relevant_experience or '').strip(),
                availability_note=(payload.availability_note or '').strip(),
            )
            _push_id(Task, task.id, 'application_ids', application.id)
            _push_id(User, applicant.id, 'application_history', application.id)
            _push_id(User, task.organizer_id, 'application_ids', application.id)
    except IntegrityError:
        # Concurrent submit for the same pair won the unique constraint
        logger.info(f"Duplicate application for task {task.id} by {applicant.id}")
        return SubmitResult.failure(
            "Duplicate application detected. You already applied.", ErrorKind.CONFLICT
        )

    logger.info(f"Application {application.id} submitted for task {task.id}")
    return SubmitResult.ok(
        "Application submitted successfully! It is now pending organizer review.",
        application_id=str(application.id),
    )


@service_boundary(ServiceResult, "A server error occurred while finalizing the verdict.")
def update_application_verdict(
    application_id: str,
    organizer_id,
    verdict: str,
    reason: Optional[str] = None,
) -> ServiceResult:
    """
    Approve or reject an application on one of the organizer's tasks.

    Approving adds the applicant to the task roster at most once and is
    refused when the roster is full. Taking the last slot flips the task
    from ACTIVE_OPEN to ACTIVE_FULL.
    """
    app_id = parse_id(application_id)
    if not app_id:
        return ServiceResult.failure("Invalid Application ID format.")
    if verdict not in VERDICTS:
        return ServiceResult.failure("Verdict must be APPROVED or REJECTED.")
    judge_id = parse_id(organizer_id)
    if not judge_id:
        return ServiceResult.failure("Invalid organizer ID format.")

    reason = (reason or '').strip() or None

    with transaction.atomic():
        application = Application.objects.filter(id=app_id).first()
        if not application:
            return ServiceResult.failure("Application record not found.", ErrorKind.NOT_FOUND)

        task = Task.objects.select_for_update().filter(id=application.task_id).first()
        if not task:
            return ServiceResult.failure("Target task not found.", ErrorKind.NOT_FOUND)
        if task.organizer_id != judge_id:
            return ServiceResult.failure(
                "Only the task organizer can judge this application.", ErrorKind.FORBIDDEN
            )

        if application.status not in JUDGEABLE_STATUSES:
            return ServiceResult.failure(
                f"Application status is already {application.status}.", ErrorKind.CONFLICT
            )

        applicant_key = str(application.applicant_id)
        volunteers = list(task.volunteers or [])
        if (
            verdict == ApplicationStatus.APPROVED
            and applicant_key not in volunteers
            and len(volunteers) >= task.max_volunteers
        ):
            return ServiceResult.failure(
                "This task has no remaining volunteer slots.", ErrorKind.CONFLICT
            )

        updated = Application.objects.filter(
            id=application.id,
            status__in=JUDGEABLE_STATUSES,
        ).update(
            status=verdict,
            verdict_reason=reason,
            verdict_by_id=judge_id,
            reviewed_at=timezone.now(),
        )
        if not updated:
            current = Application.objects.filter(id=application.id).values_list(
                'status', flat=True
            ).first()
            return ServiceResult.failure(
                f"Application status is already {current}.", ErrorKind.CONFLICT
            )

        if verdict == ApplicationStatus.APPROVED:
            if applicant_key not in volunteers:
                volunteers.append(applicant_key)
            task.volunteers = volunteers
            if task.status == TaskStatus.ACTIVE_OPEN and len(volunteers) >= task.max_volunteers:
                task.status = TaskStatus.ACTIVE_FULL
                logger.info(f"Task {task.id} is now full")
            task.save(update_fields=['volunteers', 'status', 'updated_at'])

    logger.info(f"Application {app_id} set to {verdict} by {judge_id}")
    if verdict == ApplicationStatus.APPROVED:
        revalidate(CATALOG)

    return ServiceResult.ok(f"Application successfully set to {verdict}.")


@service_boundary(ServiceResult, "A server error occurred during withdrawal.")
def withdraw_application(
    application_id: str,
    status: str = ApplicationStatus.WITHDRAWN,
    applicant_id=None,
) -> ServiceResult:
    """
    Withdraw a PENDING application.

    Pulls the id from Task.application_ids and the applicant's
    application_history. The organizer's application_ids keeps it.
    """
    app_id = parse_id(application_id)
    if not app_id:
        return ServiceResult.failure("Invalid Application ID format.")
    if status != ApplicationStatus.WITHDRAWN:
        return ServiceResult.failure("Only withdrawal is supported here.")

    owner_id = None
    if applicant_id is not None:
        owner_id = parse_id(applicant_id)
        if not owner_id:
            return ServiceResult.failure("Invalid applicant ID format.")

    with transaction.atomic():
        application = Application.objects.filter(id=app_id).first()
        if not application:
            return ServiceResult.failure("Application record not found.", ErrorKind.NOT_FOUND)
        if owner_id and application.applicant_id != owner_id:
            return ServiceResult.failure(
                "You can only withdraw your own application.", ErrorKind.FORBIDDEN
            )

        updated = Application.objects.filter(
            id=application.id,
            status=ApplicationStatus.PENDING,
        ).update(
            status=ApplicationStatus.WITHDRAWN,
            verdict_reason=WITHDRAWAL_REASON,
            reviewed_at=timezone.now(),
        )
        if not updated:
            current = Application.objects.filter(id=application.id).values_list(
                'status', flat=True
            ).first()
            return ServiceResult.failure(
                f"Cannot withdraw. Status is already {current}.", ErrorKind.CONFLICT
            )

        _pull_id(Task, application.task_id, 'application_ids', application.id)
        _pull_id(User, application.applicant_id, 'application_history', application.id)

    logger.info(f"Application {app_id} withdrawn")
    return ServiceResult.ok("Your application has been successfully withdrawn.")


# =============================================================================
# Read paths
# =============================================================================

@service_boundary(ApplicationResult, "A server error occurred while fetching application details.")
def get_application_details(application_id: str) -> ApplicationResult:
    app_id = parse_id(application_id)
    if not app_id:
        return ApplicationResult.failure("Invalid Application ID format.")

    application = Application.objects.filter(id=app_id).first()
    if not application:
        return ApplicationResult.failure("Application record not found.", ErrorKind.NOT_FOUND)

    task = Task.objects.filter(id=application.task_id).only('title', 'organizer_id').first()
    contacts = get_contacts(
        [application.applicant_id] + ([task.organizer_id] if task else [])
    )
    applicant_name, applicant_email = contacts.get(
        str(application.applicant_id), ('Unknown Applicant', '')
    )
    if task:
        organizer_name = contacts.get(str(task.organizer_id), ('Unknown Organizer', ''))[0]
    else:
        organizer_name = 'Task Deleted'

    return ApplicationResult.ok(
        "Application details retrieved.",
        application=ApplicationDetailDTO(
            id=str(application.id),
            task_id=str(application.task_id),
            task_title=task.title if task else 'Task Not Found',
            organizer_id=str(task.organizer_id) if task else None,
            organizer_name=organizer_name,
            applicant_id=str(application.applicant_id),
            applicant_name=applicant_name,
            applicant_email=applicant_email,
            motivation_statement=application.motivation_statement,
            relevant_experience=application.relevant_experience,
            availability_note=application.availability_note,
            status=application.status,
            verdict_reason=application.verdict_reason,
            verdict_by=str(application.verdict_by_id) if application.verdict_by_id else None,
            applied_at=to_iso(application.applied_at),
            reviewed_at=to_iso(application.reviewed_at),
        ),
    )


@service_boundary(HistoryResult, "A database error occurred while loading application history.")
def list_applications_for_applicant(email: str) -> HistoryResult:
    """A volunteer's applications, newest first."""
    email = normalize_email(email)
    if not email:
        return HistoryResult.failure("Applicant email is required.")

    applicant_id = User.objects.filter(email=email).values_list('id', flat=True).first()
    if not applicant_id:
        return HistoryResult.failure("Applicant profile not found.", ErrorKind.NOT_FOUND)

    applications = list(
        Application.objects.filter(applicant_id=applicant_id).order_by('-applied_at')
    )
    if not applications:
        return HistoryResult.ok("No application history found.")

    tasks = {
        task.id: task
        for task in Task.objects.filter(
            id__in={a.task_id for a in applications}
        ).only('title', 'organizer_id', 'priority_level')
    }
    names = get_display_names(task.organizer_id for task in tasks.values())

    items = []
    for application in applications:
        task = tasks.get(application.task_id)
        items.append(ApplicationHistoryItemDTO(
            id=str(application.id),
            task_id=str(application.task_id),
            task_title=task.title if task else 'Task Data Missing',
            organizer_name=names.get(str(task.organizer_id), 'N/A') if task else 'N/A',
            priority_level=task.priority_level if task else 'normal',
            status=application.status,
            applied_at=to_iso(application.applied_at),
        ))

    return HistoryResult.ok(f"Retrieved {len(items)} applications.", applications=items)


@service_boundary(ReceivedResult, "A database error occurred while loading received applications.")
def list_applications_for_organizer(email: str) -> ReceivedResult:
    """Applications referenced by the organizer's application_ids, newest first."""
    email = normalize_email(email)
    if not email:
        return ReceivedResult.failure("Organizer email is required.")

    organizer = User.objects.filter(email=email).only('id', 'application_ids').first()
    if not organizer:
        return ReceivedResult.failure("Organizer not found.", ErrorKind.NOT_FOUND)

    ids = [i for i in (parse_id(v) for v in organizer.application_ids or []) if i]
    applications = list(Application.objects.filter(id__in=ids).order_by('-applied_at'))
    if not applications:
        return ReceivedResult.ok("No applications found.")

    tasks = {
        task.id: task
        for task in Task.objects.filter(
            id__in={a.task_id for a in applications}
        ).only('title', 'priority_level')
    }
    names = get_display_names(a.applicant_id for a in applications)

    items = []
    for application in applications:
        task = tasks.get(application.task_id)
        items.append(ReceivedApplicationDTO(
            id=str(application.id),
            task_id=str(application.task_id),
            task_title=task.title if task else 'Task Deleted',
            applicant_id=str(application.applicant_id),
            applicant_name=names.get(str(application.applicant_id), 'Unknown Applicant'),
            priority_level=task.priority_level if task else 'N/A',
            status=application.status,
            applied_at=to_iso(application.applied_at),
        ))

    return ReceivedResult.ok(f"Retrieved {len(items)} applications.", applications=items)
