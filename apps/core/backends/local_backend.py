"""
Local Task Backend - Synchronous execution for development.

This backend executes tasks immediately in the same process.
No Redis, SQS, or external dependencies required.

Usage:
    Set TASK_BACKEND=local in your .env file.
"""

import uuid
import logging
from typing import Any, Dict
from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)


# Task handler registry - maps task names to handler functions.
# Also used by lambda_handlers.sqs_task_handler to dispatch SQS messages.
TASK_HANDLERS = {}


def register_handler(task_name: str):
    """Decorator to register a task handler."""
    def decorator(func):
        TASK_HANDLERS[task_name] = func
        return func
    return decorator


class LocalTaskService(TaskServiceInterface):
    """
    Execute tasks synchronously in the same process.

    Note: Tasks run in the same request cycle, so they block
    the response. Only use for development and tests.
    """

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """Execute task synchronously."""
        task_id = str(uuid.uuid4())

        logger.info(f"[LOCAL] Executing task {task_name} (id={task_id})")

        if delay_seconds > 0:
            logger.warning(
                f"[LOCAL] delay_seconds={delay_seconds} ignored in local backend"
            )

        handler = TASK_HANDLERS.get(task_name)
        if handler:
            try:
                result = handler(**payload)
                logger.info(f"[LOCAL] Task {task_name} completed: {result}")
            except Exception as e:
                logger.exception(f"[LOCAL] Task {task_name} failed: {e}")
                raise
        else:
            logger.warning(f"[LOCAL] No handler registered for task: {task_name}")

        return task_id


# =============================================================================
# Task Handlers
# =============================================================================

@register_handler("reconcile_task_lists")
def handle_reconcile_task_lists(task_id: str):
    """Rebuild the roster and application list of one task."""
    from uuid import UUID
    from apps.applications.reconciliation import reconcile_task

    changed = reconcile_task(UUID(task_id))
    return f"Task {task_id} {'repaired' if changed else 'consistent'}"


@register_handler("reconcile_user_lists")
def handle_reconcile_user_lists(user_id: str):
    """Rebuild the application lists of one user."""
    from uuid import UUID
    from apps.applications.reconciliation import reconcile_user

    changed = reconcile_user(UUID(user_id))
    return f"User {user_id} {'repaired' if changed else 'consistent'}"


@register_handler("reconcile_all_lists")
def handle_reconcile_all_lists():
    """Fan out reconciliation to every task and user."""
    from django.contrib.auth import get_user_model
    from apps.catalog.models import Task
    from apps.core.task_service import TaskService

    task_ids = list(Task.objects.values_list('id', flat=True))
    user_ids = list(get_user_model().objects.values_list('id', flat=True))

    # In local mode, these execute synchronously
    for task_id in task_ids:
        TaskService.reconcile_task_lists(task_id)
    for user_id in user_ids:
        TaskService.reconcile_user_lists(user_id)

    return f"Queued {len(task_ids)} tasks and {len(user_ids)} users"
