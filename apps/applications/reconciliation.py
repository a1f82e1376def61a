"""
Rebuild denormalized id lists from Application rows.

Application rows are the source of truth. The lists they feed:
    Task.volunteers           applicants of APPROVED applications
    Task.application_ids      applications that are not WITHDRAWN
    User.application_history  the user's applications that are not WITHDRAWN
    User.application_ids      every application on the user's tasks

Reconciliation is idempotent. Ids already in a list keep their position,
missing ids are appended in application order and stale ids are dropped.
"""
import logging
from typing import Dict, Iterable, List
from uuid import UUID

from django.contrib.auth import get_user_model
from django.db import transaction

from apps.catalog.models import Task
from .models import Application, ApplicationStatus

logger = logging.getLogger(__name__)


def merge_ids(current: Iterable, expected: Iterable) -> List[str]:
    """Keep the order of ``current`` for ids still expected, then append the rest."""
    expected = [str(i) for i in expected]
    wanted = set(expected)
    merged = []
    for value in current or []:
        value = str(value)
        if value in wanted and value not in merged:
            merged.append(value)
    for value in expected:
        if value not in merged:
            merged.append(value)
    return merged


def _apply(obj, lists: Dict[str, List[str]]) -> bool:
    """Write the lists that differ. Returns True when anything changed."""
    changed = [name for name, ids in lists.items() if list(getattr(obj, name) or []) != ids]
    if changed:
        type(obj).objects.filter(pk=obj.pk).update(**{name: lists[name] for name in changed})
        logger.info(f"Repaired {type(obj).__name__} {obj.pk}: {', '.join(changed)}")
    return bool(changed)


def reconcile_task(task_id: UUID) -> bool:
    """Rebuild Task.volunteers and Task.application_ids for one task."""
    with transaction.atomic():
        task = Task.objects.select_for_update().filter(id=task_id).first()
        if task is None:
            logger.warning(f"Task {task_id} not found for reconciliation")
            return False

        applications = list(
            Application.objects.filter(task_id=task.id)
            .order_by('applied_at')
            .values_list('id', 'applicant_id', 'status')
        )
        approved = [
            applicant for _, applicant, status in applications
            if status == ApplicationStatus.APPROVED
        ]
        live = [
            app_id for app_id, _, status in applications
            if status != ApplicationStatus.WITHDRAWN
        ]

        return _apply(task, {
            'volunteers': merge_ids(task.volunteers, approved),
            'application_ids': merge_ids(task.application_ids, live),
        })


def reconcile_user(user_id: UUID) -> bool:
    """Rebuild User.application_history and User.application_ids for one user."""
    User = get_user_model()
    with transaction.atomic():
        user = User.objects.select_for_update().filter(id=user_id).first()
        if user is None:
            logger.warning(f"User {user_id} not found for reconciliation")
            return False

        submitted = (
            Application.objects.filter(applicant_id=user.id)
            .exclude(status=ApplicationStatus.WITHDRAWN)
            .order_by('applied_at')
            .values_list('id', flat=True)
        )
        own_task_ids = Task.objects.filter(organizer_id=user.id).values_list('id', flat=True)
        received = (
            Application.objects.filter(task_id__in=list(own_task_ids))
            .order_by('applied_at')
            .values_list('id', flat=True)
        )

        return _apply(user, {
            'application_history': merge_ids(user.application_history, submitted),
            'application_ids': merge_ids(user.application_ids, received),
        })


def reconcile_all() -> Dict[str, int]:
    """
    Reconcile every task and user in this process.
    Returns counts of checked and repaired rows.
    """
    stats = {'tasks': 0, 'tasks_repaired': 0, 'users': 0, 'users_repaired': 0}

    for task_id in list(Task.objects.values_list('id', flat=True)):
        stats['tasks'] += 1
        if reconcile_task(task_id):
            stats['tasks_repaired'] += 1

    for user_id in list(get_user_model().objects.values_list('id', flat=True)):
        stats['users'] += 1
        if reconcile_user(user_id):
            stats['users_repaired'] += 1

    logger.info(f"Reconciliation finished: {stats}")
    return stats
