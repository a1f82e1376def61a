"""
TaskService - Abstraction layer for async task execution.

This module provides a platform-agnostic interface for executing background tasks.
The actual backend is determined by the TASK_BACKEND environment variable.

Usage:
    from apps.core.task_service import TaskService

    # Rebuild the denormalized lists of one task
    TaskService.reconcile_task_lists(task_id=uuid)

    # Fan out a full reconciliation
    TaskService.reconcile_all_lists()

Environment Configuration:
    TASK_BACKEND=local   # Sync execution (development)
    TASK_BACKEND=lambda  # AWS Lambda + SQS (production)
    TASK_BACKEND=celery  # Celery + Redis (fallback)
"""

import os
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict
from uuid import UUID

logger = logging.getLogger(__name__)


class TaskServiceInterface(ABC):
    """
    Abstract interface for async task execution.

    Implementations:
    - LocalTaskService: Sync execution for development/testing
    - LambdaTaskService: AWS Lambda + SQS for production
    - CeleryTaskService: Celery + Redis as fallback
    """

    @abstractmethod
    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """
        Queue a task for async execution.

        Args:
            task_name: Identifier for the task handler
            payload: Data to pass to the task
            delay_seconds: Delay before execution (0 = immediate)

        Returns:
            Task ID for tracking
        """
        pass


def _get_backend() -> TaskServiceInterface:
    """Get the configured task backend based on TASK_BACKEND env var."""
    backend = os.getenv('TASK_BACKEND', 'local')

    if backend == 'local':
        from apps.core.backends.local_backend import LocalTaskService
        return LocalTaskService()
    elif backend == 'lambda':
        from apps.core.backends.lambda_backend import LambdaTaskService
        return LambdaTaskService()
    elif backend == 'celery':
        from apps.core.backends.celery_backend import CeleryTaskService
        return CeleryTaskService()
    else:
        raise ValueError(f"Unknown TASK_BACKEND: {backend}")


class TaskService:
    """
    Facade for sending async tasks.

    This class provides static methods for each task type,
    delegating to the configured backend.
    """

    @staticmethod
    def reconcile_task_lists(task_id: UUID) -> str:
        """
        Queue a rebuild of Task.volunteers and Task.application_ids.

        Idempotent, safe to queue more than once.
        """
        logger.info(f"Queueing reconcile_task_lists for task {task_id}")
        return _get_backend().send_task(
            task_name="reconcile_task_lists",
            payload={"task_id": str(task_id)}
        )

    @staticmethod
    def reconcile_user_lists(user_id: UUID) -> str:
        """
        Queue a rebuild of User.application_history and User.application_ids.
        """
        logger.info(f"Queueing reconcile_user_lists for user {user_id}")
        return _get_backend().send_task(
            task_name="reconcile_user_lists",
            payload={"user_id": str(user_id)}
        )

    @staticmethod
    def reconcile_all_lists() -> str:
        """
        Queue the reconciliation fan-out.

        The handler queues one reconcile_task_lists per task and one
        reconcile_user_lists per user.
        """
        logger.info("Queueing reconcile_all_lists fan-out")
        return _get_backend().send_task(
            task_name="reconcile_all_lists",
            payload={}
        )
