from uuid import UUID

from celery import shared_task
import logging

from .reconciliation import reconcile_task, reconcile_user

logger = logging.getLogger(__name__)


@shared_task
def reconcile_task_lists_task(task_id):
    """Rebuild the roster and application list of one task."""
    changed = reconcile_task(UUID(str(task_id)))
    return {'task_id': str(task_id), 'repaired': changed}


@shared_task
def reconcile_user_lists_task(user_id):
    """Rebuild the application lists of one user."""
    changed = reconcile_user(UUID(str(user_id)))
    return {'user_id': str(user_id), 'repaired': changed}


@shared_task
def reconcile_all_lists_task():
    """
    Nightly fan-out: one reconcile task per Task and per User.
    Scheduled by celery beat (config/celery.py).
    """
    from django.contrib.auth import get_user_model
    from apps.catalog.models import Task

    task_ids = list(Task.objects.values_list('id', flat=True))
    user_ids = list(get_user_model().objects.values_list('id', flat=True))

    for task_id in task_ids:
        reconcile_task_lists_task.delay(str(task_id))
    for user_id in user_ids:
        reconcile_user_lists_task.delay(str(user_id))

    logger.info(f"Queued reconciliation for {len(task_ids)} tasks and {len(user_ids)} users")
    return {'tasks': len(task_ids), 'users': len(user_ids)}
