"""
Services for Catalog app.

Task create/edit/status change and the read paths of the public board.
Derived fields (slots remaining, organizer display name) are computed at
read time and never stored.
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional, Union

from django.db import transaction
from django.db.models import Case, IntegerField, Value, When
from django.utils import timezone

from apps.core.results import ErrorKind, service_boundary
from apps.core.revalidation import CATALOG, revalidate
from apps.core.utils import ensure_aware, parse_id, to_iso
from apps.identity.models import CauseFocus
from apps.identity.services import get_display_names, get_user_id_by_email
from .dtos import (
    OrganizerTaskDTO, OrganizerTasksResult, PublicTaskDTO, TaskDetailDTO,
    TaskListResult, TaskResult, TaskWriteResult,
)
from .models import LISTED_STATUSES, STATUS_TRANSITIONS, PriorityLevel, Task, TaskStatus
from .schemas import TaskIn

logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 60
DEFAULT_PAGE_SIZE = 4
MAX_PAGE_SIZE = 50

# Semantic priority order, higher sorts first
PRIORITY_RANK = Case(
    When(priority_level=PriorityLevel.CRITICAL, then=Value(3)),
    When(priority_level=PriorityLevel.HIGH, then=Value(2)),
    default=Value(1),
    output_field=IntegerField(),
)


# =============================================================================
# Helpers
# =============================================================================

def parse_skills(value: Union[List[str], str, None]) -> List[str]:
    """Split a comma-separated skills string, dropping blanks."""
    if not value:
        return []
    parts = value.split(',') if isinstance(value, str) else value
    return [s.strip() for s in parts if s and s.strip()]


def organizer_label(names: Dict[str, str], organizer_id) -> str:
    key = str(organizer_id)
    return names.get(key) or f"Unknown Org (ID: {key[-6:]})"


def validate_task_input(payload: TaskIn, now: Optional[datetime] = None) -> Optional[str]:
    """Return the first validation error message, or None when valid."""
    now = now or timezone.now()
    start = ensure_aware(payload.start_time)
    deadline = ensure_aware(payload.application_deadline)
    end = ensure_aware(payload.end_time)
    title = (payload.title or '').strip()

    if not title:
        return "Task title is required."
    if len(title) > TITLE_MAX_LENGTH:
        return f"Task title must be at most {TITLE_MAX_LENGTH} characters."
    if not (payload.description or '').strip():
        return "Task description is required."
    if not (payload.location or '').strip():
        return "Task location is required."
    if deadline >= start:
        return "Deadline must be before the Start Time."
    if start <= now:
        return "Task must be scheduled for a future date."
    if deadline <= now:
        return "Application deadline must be in the future."
    if end is not None and end <= start:
        return "End time must be after the Start Time."
    if payload.max_volunteers < 1:
        return "Maximum volunteers must be at least 1."
    if payload.cause_focus not in CauseFocus.values:
        return f"Unknown cause focus: {payload.cause_focus}"
    if payload.priority_level not in PriorityLevel.values:
        return f"Unknown priority level: {payload.priority_level}"
    return None


def task_fields(payload: TaskIn) -> dict:
    return {
        'title': payload.title.strip(),
        'description': payload.description.strip(),
        'start_time': ensure_aware(payload.start_time),
        'end_time': ensure_aware(payload.end_time),
        'location': payload.location.strip(),
        'application_deadline': ensure_aware(payload.application_deadline),
        'max_volunteers': payload.max_volunteers,
        'cause_focus': payload.cause_focus,
        'required_skills': parse_skills(payload.required_skills),
        'priority_level': payload.priority_level,
        'is_accepting_applications': payload.is_accepting_applications,
    }


def to_public_dto(task: Task, names: Dict[str, str]) -> PublicTaskDTO:
    return PublicTaskDTO(
        id=str(task.id),
        title=task.title,
        organizer=organizer_label(names, task.organizer_id),
        location=task.location,
        application_deadline=to_iso(task.application_deadline),
        priority_level=task.priority_level,
        cause_focus=task.cause_focus,
        slots=task.max_volunteers,
        slots_remaining=task.slots_remaining,
    )


def to_detail_dto(task: Task, names: Dict[str, str]) -> TaskDetailDTO:
    return TaskDetailDTO(
        id=str(task.id),
        title=task.title,
        description=task.description,
        organizer=organizer_label(names, task.organizer_id),
        organizer_id=str(task.organizer_id),
        location=task.location,
        start_time=to_iso(task.start_time),
        end_time=to_iso(task.end_time),
        application_deadline=to_iso(task.application_deadline),
        max_volunteers=task.max_volunteers,
        slots=task.max_volunteers,
        slots_remaining=task.slots_remaining,
        volunteers=[str(v) for v in task.volunteers or []],
        cause_focus=task.cause_focus,
        required_skills=list(task.required_skills or []),
        priority_level=task.priority_level,
        status=task.status,
        is_accepting_applications=task.is_accepting_applications,
        created_at=to_iso(task.created_at),
        updated_at=to_iso(task.updated_at),
    )


def to_organizer_dto(task: Task) -> OrganizerTaskDTO:
    return OrganizerTaskDTO(
        id=str(task.id),
        title=task.title,
        description=task.description,
        organizer_id=str(task.organizer_id),
        location=task.location,
        start_time=to_iso(task.start_time),
        end_time=to_iso(task.end_time),
        application_deadline=to_iso(task.application_deadline),
        max_volunteers=task.max_volunteers,
        slots_remaining=task.slots_remaining,
        volunteers=[str(v) for v in task.volunteers or []],
        application_ids=[str(a) for a in task.application_ids or []],
        cause_focus=task.cause_focus,
        required_skills=list(task.required_skills or []),
        priority_level=task.priority_level,
        status=task.status,
        is_accepting_applications=task.is_accepting_applications,
        termination_reason=task.termination_reason,
        created_at=to_iso(task.created_at),
    )


# =============================================================================
# Write paths
# =============================================================================

@service_boundary(TaskWriteResult, "An unhandled server error occurred. Check server logs.")
def create_task(organizer_email: str, payload: TaskIn) -> TaskWriteResult:
    """
    Create a task owned by the organizer with this email.

    Initial status is PENDING_REVIEW when the task accepts applications,
    DRAFT otherwise.
    """
    error = validate_task_input(payload)
    if error:
        return TaskWriteResult.failure(error)

    organizer_id = get_user_id_by_email(organizer_email)
    if not organizer_id:
        return TaskWriteResult.failure("Organizer user not found.", ErrorKind.NOT_FOUND)

    initial_status = (
        TaskStatus.PENDING_REVIEW if payload.is_accepting_applications else TaskStatus.DRAFT
    )
    task = Task.objects.create(
        organizer_id=organizer_id,
        status=initial_status,
        **task_fields(payload),
    )

    logger.info(f"Task {task.id} created by organizer {organizer_id} as {initial_status}")
    revalidate(CATALOG)

    return TaskWriteResult.ok(
        f"Task successfully submitted for review. Task ID: {task.id}.",
        task_id=str(task.id),
    )


@service_boundary(TaskWriteResult, "A database error occurred during the update.")
def update_task(task_id: str, organizer_email: str, payload: TaskIn) -> TaskWriteResult:
    """Edit a task. Only its organizer may do so."""
    task_uuid = parse_id(task_id)
    if not task_uuid:
        return TaskWriteResult.failure("Invalid Task ID provided.")

    error = validate_task_input(payload)
    if error:
        return TaskWriteResult.failure(error)

    organizer_id = get_user_id_by_email(organizer_email)
    if not organizer_id:
        return TaskWriteResult.failure(
            "Task not found or organizer unauthorized.", ErrorKind.NOT_FOUND
        )

    with transaction.atomic():
        task = (
            Task.objects.select_for_update()
            .filter(id=task_uuid, organizer_id=organizer_id)
            .first()
        )
        if not task:
            return TaskWriteResult.failure(
                "Task not found or organizer unauthorized.", ErrorKind.NOT_FOUND
            )

        if task.status not in STATUS_TRANSITIONS:
            return TaskWriteResult.failure(
                f"Task is {task.status} and can no longer be edited.", ErrorKind.CONFLICT
            )

        committed = len(task.volunteers or [])
        if payload.max_volunteers < committed:
            return TaskWriteResult.failure(
                f"Maximum volunteers cannot be lower than the {committed} committed volunteers.",
                ErrorKind.CONFLICT,
            )

        for key, value in task_fields(payload).items():
            setattr(task, key, value)

        # Capacity edits move the task between open and full
        if task.status == TaskStatus.ACTIVE_OPEN and task.slots_remaining <= 0:
            task.status = TaskStatus.ACTIVE_FULL
            logger.info(f"Task {task.id} is now full after a capacity change")
        elif task.status == TaskStatus.ACTIVE_FULL and task.slots_remaining > 0:
            task.status = TaskStatus.ACTIVE_OPEN
            logger.info(f"Task {task.id} reopened after a capacity change")
        task.save()

    logger.info(f"Task {task.id} updated by organizer {organizer_id}")
    revalidate(CATALOG)

    return TaskWriteResult.ok(f'Task "{task.title}" updated successfully.', task_id=str(task.id))


@service_boundary(TaskWriteResult, "A server error occurred while changing the task status.")
def set_task_status(
    task_id: str,
    organizer_email: str,
    status: str,
    reason: Optional[str] = None,
) -> TaskWriteResult:
    """
    Move a task along its lifecycle.

    The change is a conditional update on the status that was read, so two
    concurrent moves cannot both succeed.
    """
    task_uuid = parse_id(task_id)
    if not task_uuid:
        return TaskWriteResult.failure("Invalid Task ID provided.")
    if status not in TaskStatus.values:
        return TaskWriteResult.failure(f"Unknown task status: {status}")

    reason = (reason or '').strip()
    if status == TaskStatus.TERMINATED and not reason:
        return TaskWriteResult.failure("A termination reason is required to terminate a task.")

    organizer_id = get_user_id_by_email(organizer_email)
    task = None
    if organizer_id:
        task = Task.objects.filter(id=task_uuid, organizer_id=organizer_id).first()
    if not task:
        return TaskWriteResult.failure(
            "Task not found or organizer unauthorized.", ErrorKind.NOT_FOUND
        )

    if status not in STATUS_TRANSITIONS.get(task.status, set()):
        return TaskWriteResult.failure(
            f"Cannot move task from {task.status} to {status}.", ErrorKind.CONFLICT
        )

    if status == TaskStatus.ACTIVE_OPEN and task.slots_remaining <= 0:
        return TaskWriteResult.failure("Task has no remaining slots.", ErrorKind.CONFLICT)

    updates = {'status': status, 'updated_at': timezone.now()}
    if status == TaskStatus.TERMINATED:
        updates['termination_reason'] = reason

    updated = Task.objects.filter(id=task.id, status=task.status).update(**updates)
    if not updated:
        return TaskWriteResult.failure(
            "Task status was changed by another request. Please retry.", ErrorKind.CONFLICT
        )

    logger.info(f"Task {task.id} moved from {task.status} to {status}")
    revalidate(CATALOG)

    return TaskWriteResult.ok(f"Task status set to {status}.", task_id=str(task.id))


# =============================================================================
# Read paths
# =============================================================================

@service_boundary(TaskListResult, "A server error occurred while fetching the task list.")
def list_active_tasks(
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    search: Optional[str] = None,
    cause_focus: Optional[str] = None,
) -> TaskListResult:
    """
    Public board: listed statuses accepting applications, optional title
    search and cause filter, critical first then soonest start.
    """
    page = max(1, int(page or 1))
    page_size = min(max(1, int(page_size or DEFAULT_PAGE_SIZE)), MAX_PAGE_SIZE)

    queryset = Task.objects.filter(
        status__in=LISTED_STATUSES,
        is_accepting_applications=True,
    )

    search = (search or '').strip()
    if search:
        queryset = queryset.filter(title__icontains=search)

    cause_focus = (cause_focus or '').strip()
    if cause_focus and cause_focus != 'all':
        queryset = queryset.filter(cause_focus=cause_focus)

    queryset = queryset.annotate(priority_rank=PRIORITY_RANK).order_by(
        '-priority_rank', 'start_time', 'id'
    )

    total = queryset.count()
    offset = (page - 1) * page_size
    tasks = list(queryset[offset:offset + page_size])

    names = get_display_names(task.organizer_id for task in tasks)
    cards = [to_public_dto(task, names) for task in tasks]

    return TaskListResult.ok(
        f"Successfully retrieved {len(cards)} tasks.",
        tasks=cards,
        total=total,
        page=page,
        page_size=page_size,
    )


@service_boundary(TaskResult, "Server error fetching task details.")
def get_task(task_id: str) -> TaskResult:
    task_uuid = parse_id(task_id)
    if not task_uuid:
        return TaskResult.failure("Invalid Task ID format.")

    task = Task.objects.filter(id=task_uuid).first()
    if not task:
        return TaskResult.failure(f"Task not found with ID: {task_id}", ErrorKind.NOT_FOUND)

    names = get_display_names([task.organizer_id])
    return TaskResult.ok("Task details retrieved.", task=to_detail_dto(task, names))


@service_boundary(OrganizerTasksResult, "A server error occurred while fetching the organizer's tasks.")
def list_tasks_by_organizer(email: str) -> OrganizerTasksResult:
    organizer_id = get_user_id_by_email(email)
    if not organizer_id:
        return OrganizerTasksResult.failure("Organizer user not found.", ErrorKind.NOT_FOUND)

    tasks = Task.objects.filter(organizer_id=organizer_id).order_by('-created_at')
    dtos = [to_organizer_dto(task) for task in tasks]
    return OrganizerTasksResult.ok(f"Found {len(dtos)} tasks.", tasks=dtos)
