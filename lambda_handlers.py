"""
Lambda Handlers - Entry points for AWS Lambda functions.

1. sqs_task_handler: consumes reconcile jobs from the task queue
2. scheduled_reconcile_lists: EventBridge trigger for the nightly fan-out
3. api_handler: HTTP requests through API Gateway (Mangum)
"""

import os
import sys
import json
import logging

# Ensure the project root is in the path for Lambda
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Configure Django before importing any models
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

import django
django.setup()

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def sqs_task_handler(event, context):
    """
    Dispatch SQS messages to the registered task handlers.

    Record bodies are envelopes built by
    apps.core.backends.lambda_backend.build_message. Unknown task names are
    counted and dropped. A handler error re-raises so the batch is retried
    and eventually lands in the dead-letter queue. Handlers are idempotent,
    so retrying the already processed records is harmless.
    """
    from apps.core.backends.lambda_backend import parse_message
    from apps.core.backends.local_backend import TASK_HANDLERS

    processed = 0
    skipped = 0

    for record in event.get('Records', []):
        message = parse_message(record['body'])
        task_name = message['task_name']

        handler = TASK_HANDLERS.get(task_name)
        if handler is None:
            logger.error(f"No handler for task: {task_name}")
            skipped += 1
            continue

        logger.info(f"Processing task {task_name} (id={message['task_id']})")
        try:
            result = handler(**message['payload'])
        except Exception as e:
            logger.exception(f"Task {task_name} failed: {e}")
            raise
        logger.info(f"Task {task_name} completed: {result}")
        processed += 1

    return {
        'statusCode': 200,
        'body': json.dumps({
            'processed': processed,
            'skipped': skipped,
        })
    }


def scheduled_reconcile_lists(event, context):
    """
    EventBridge scheduled handler: queue list reconciliation.

    Schedule: daily at 03:00 UTC
    """
    from apps.core.task_service import TaskService

    logger.info("Running scheduled reconcile_lists")
    job_id = TaskService.reconcile_all_lists()

    return {
        'statusCode': 200,
        'body': json.dumps({
            'queued': job_id
        })
    }


# =============================================================================
# Django API Handler (Mangum)
# =============================================================================

_asgi_handler = None


def api_handler(event, context):
    """
    AWS Lambda handler for HTTP requests via API Gateway.
    Wraps Django's ASGI application, built on first use.
    """
    global _asgi_handler

    if _asgi_handler is None:
        from mangum import Mangum
        from config.asgi import application
        _asgi_handler = Mangum(application, lifespan="off")

    return _asgi_handler(event, context)
