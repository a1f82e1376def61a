"""
Celery Task Backend - Async execution via Celery + Redis.

Usage:
    Set TASK_BACKEND=celery in your .env file.
    Requires Redis and Celery worker running.
"""

import uuid
import logging
from typing import Any, Dict
from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)


# Map task names to registered Celery task names, and the payload key
# passed as the single positional argument (None for no arguments)
CELERY_TASKS = {
    "reconcile_task_lists": ("apps.applications.tasks.reconcile_task_lists_task", "task_id"),
    "reconcile_user_lists": ("apps.applications.tasks.reconcile_user_lists_task", "user_id"),
    "reconcile_all_lists": ("apps.applications.tasks.reconcile_all_lists_task", None),
}


def _get_celery_task(task_name: str):
    """Get the Celery task function for a task name."""
    entry = CELERY_TASKS.get(task_name)
    if not entry:
        raise ValueError(f"No Celery task mapped for: {task_name}")

    from celery import current_app
    return current_app.tasks.get(entry[0])


class CeleryTaskService(TaskServiceInterface):
    """
    Execute tasks via Celery + Redis.
    """

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """Queue task via Celery."""
        task_id = str(uuid.uuid4())

        logger.info(f"[CELERY] Queueing task {task_name} (id={task_id})")

        task = _get_celery_task(task_name)

        if task is None:
            logger.error(f"[CELERY] Task not found: {task_name}")
            raise ValueError(f"Celery task not found: {task_name}")

        arg_key = CELERY_TASKS[task_name][1]
        args = [payload.get(arg_key)] if arg_key else []

        if delay_seconds > 0:
            task.apply_async(args=args, countdown=delay_seconds, task_id=task_id)
        else:
            task.apply_async(args=args, task_id=task_id)

        return task_id
