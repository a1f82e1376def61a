"""
Lambda Task Backend - Async execution via AWS SQS + Lambda.

Reconcile jobs are sent to SQS as JSON envelopes and consumed by
lambda_handlers.sqs_task_handler.

Usage:
    Set TASK_BACKEND=lambda in your .env file.

Environment Variables:
    TASK_QUEUE_URL: SQS queue URL for task messages (standard or .fifo)
    AWS_REGION: AWS region (default: us-east-1)

FIFO queues group messages by the entity being reconciled, so two jobs
for the same task or user never run concurrently. Per-message delays are
not supported on FIFO queues and are dropped.
"""

import os
import json
import uuid
import logging
from typing import Any, Dict
from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)

SQS_MAX_DELAY_SECONDS = 900


def build_message(task_id: str, task_name: str, payload: Dict[str, Any]) -> str:
    """JSON envelope understood by the SQS consumer."""
    return json.dumps({
        "task_id": task_id,
        "task_name": task_name,
        "payload": payload,
    })


def parse_message(body: str) -> Dict[str, Any]:
    """Inverse of build_message. Raises KeyError when task_name is missing."""
    message = json.loads(body)
    return {
        "task_id": message.get("task_id", "unknown"),
        "task_name": message["task_name"],
        "payload": message.get("payload") or {},
    }


def message_group(task_name: str, payload: Dict[str, Any]) -> str:
    """FIFO group: the entity id for per-entity jobs, the task name otherwise."""
    entity = payload.get("task_id") or payload.get("user_id")
    return f"{task_name}:{entity}" if entity else task_name


class LambdaTaskService(TaskServiceInterface):
    """
    Execute tasks via AWS SQS + Lambda.
    """

    def __init__(self):
        self._sqs_client = None
        self._queue_url = os.getenv('TASK_QUEUE_URL')

        if not self._queue_url:
            logger.warning("[LAMBDA] TASK_QUEUE_URL not set, send_task will fail")

    @property
    def is_fifo(self) -> bool:
        return bool(self._queue_url) and self._queue_url.endswith('.fifo')

    @property
    def sqs_client(self):
        """Lazy initialization of SQS client."""
        if self._sqs_client is None:
            import boto3
            self._sqs_client = boto3.client(
                'sqs',
                region_name=os.getenv('AWS_REGION', 'us-east-1')
            )
        return self._sqs_client

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """Queue task via SQS."""
        task_id = str(uuid.uuid4())

        if not self._queue_url:
            raise RuntimeError("TASK_QUEUE_URL is not set, cannot queue reconcile jobs.")

        params = {
            'QueueUrl': self._queue_url,
            'MessageBody': build_message(task_id, task_name, payload),
            'MessageAttributes': {
                'TaskName': {'DataType': 'String', 'StringValue': task_name},
                'TaskId': {'DataType': 'String', 'StringValue': task_id},
            },
        }
        if self.is_fifo:
            params['MessageGroupId'] = message_group(task_name, payload)
            params['MessageDeduplicationId'] = task_id
            if delay_seconds:
                logger.warning(f"[LAMBDA] delay_seconds={delay_seconds} ignored on FIFO queue")
        else:
            params['DelaySeconds'] = min(delay_seconds, SQS_MAX_DELAY_SECONDS)

        logger.info(f"[LAMBDA] Sending task {task_name} to SQS (id={task_id})")

        try:
            response = self.sqs_client.send_message(**params)
        except Exception as e:
            logger.exception(f"[LAMBDA] Failed to send task {task_name}: {e}")
            raise

        logger.info(f"[LAMBDA] Task {task_name} queued, MessageId {response['MessageId']}")
        return task_id
