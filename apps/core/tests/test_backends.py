"""
Tests for the task backends, the SQS consumer and the result contract.
"""
import json
import os
from unittest import mock

from django.test import SimpleTestCase
from ninja.errors import HttpError

from apps.core.backends import celery_backend, local_backend
from apps.core.backends.lambda_backend import (
    LambdaTaskService, build_message, message_group, parse_message,
)
from apps.core.results import ErrorKind, ServiceResult, raise_for_result, service_boundary
from apps.core.task_service import TaskService, _get_backend


class BackendSelectionTest(SimpleTestCase):

    def test_unknown_backend(self):
        with mock.patch.dict(os.environ, {'TASK_BACKEND': 'carrier-pigeon'}):
            with self.assertRaises(ValueError):
                _get_backend()

    def test_local_dispatch_calls_registered_handler(self):
        handler = mock.Mock(return_value='done')
        with mock.patch.dict(os.environ, {'TASK_BACKEND': 'local'}), \
                mock.patch.dict(local_backend.TASK_HANDLERS, {'reconcile_user_lists': handler}):
            TaskService.reconcile_user_lists('0b0f8f4e-61a4-4f3e-9d43-7d2f0f6b2a11')

        handler.assert_called_once_with(user_id='0b0f8f4e-61a4-4f3e-9d43-7d2f0f6b2a11')

    def test_local_dispatch_reraises(self):
        handler = mock.Mock(side_effect=RuntimeError('boom'))
        with mock.patch.dict(os.environ, {'TASK_BACKEND': 'local'}), \
                mock.patch.dict(local_backend.TASK_HANDLERS, {'reconcile_all_lists': handler}):
            with self.assertRaises(RuntimeError):
                TaskService.reconcile_all_lists()


class CeleryBackendTest(SimpleTestCase):

    def test_single_argument_from_payload(self):
        celery_task = mock.Mock()
        with mock.patch.object(celery_backend, '_get_celery_task', return_value=celery_task):
            job_id = celery_backend.CeleryTaskService().send_task(
                'reconcile_task_lists', {'task_id': 'abc'}
            )

        celery_task.apply_async.assert_called_once_with(args=['abc'], task_id=job_id)

    def test_no_argument_fan_out(self):
        celery_task = mock.Mock()
        with mock.patch.object(celery_backend, '_get_celery_task', return_value=celery_task):
            celery_backend.CeleryTaskService().send_task('reconcile_all_lists', {}, delay_seconds=30)

        _, kwargs = celery_task.apply_async.call_args
        self.assertEqual(kwargs['args'], [])
        self.assertEqual(kwargs['countdown'], 30)

    def test_unmapped_task(self):
        with self.assertRaises(ValueError):
            celery_backend.CeleryTaskService().send_task('send_newsletter', {})


class LambdaBackendTest(SimpleTestCase):

    def service(self, queue_url):
        with mock.patch.dict(os.environ, {'TASK_QUEUE_URL': queue_url}):
            service = LambdaTaskService()
        service._sqs_client = mock.Mock()
        service._sqs_client.send_message.return_value = {'MessageId': 'm-1'}
        return service

    def test_standard_queue(self):
        service = self.service('https://sqs.us-east-1.amazonaws.com/1/reconcile')

        job_id = service.send_task('reconcile_task_lists', {'task_id': 't-1'}, delay_seconds=2000)

        params = service._sqs_client.send_message.call_args.kwargs
        self.assertEqual(params['DelaySeconds'], 900)
        self.assertNotIn('MessageGroupId', params)
        message = parse_message(params['MessageBody'])
        self.assertEqual(message['task_id'], job_id)
        self.assertEqual(message['payload'], {'task_id': 't-1'})

    def test_fifo_queue_groups_by_entity(self):
        service = self.service('https://sqs.us-east-1.amazonaws.com/1/reconcile.fifo')

        job_id = service.send_task('reconcile_user_lists', {'user_id': 'u-1'}, delay_seconds=5)

        params = service._sqs_client.send_message.call_args.kwargs
        self.assertEqual(params['MessageGroupId'], 'reconcile_user_lists:u-1')
        self.assertEqual(params['MessageDeduplicationId'], job_id)
        self.assertNotIn('DelaySeconds', params)

    def test_missing_queue_url(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            service = LambdaTaskService()
        with self.assertRaises(RuntimeError):
            service.send_task('reconcile_all_lists', {})

    def test_message_group_without_entity(self):
        self.assertEqual(message_group('reconcile_all_lists', {}), 'reconcile_all_lists')


class SqsConsumerTest(SimpleTestCase):

    def event(self, *messages):
        return {'Records': [{'body': body} for body in messages]}

    def test_dispatches_and_skips_unknown(self):
        import lambda_handlers

        handler = mock.Mock(return_value='ok')
        with mock.patch.dict(local_backend.TASK_HANDLERS, {'reconcile_task_lists': handler}):
            response = lambda_handlers.sqs_task_handler(self.event(
                build_message('1', 'reconcile_task_lists', {'task_id': 't-1'}),
                build_message('2', 'send_newsletter', {}),
            ), None)

        handler.assert_called_once_with(task_id='t-1')
        self.assertEqual(json.loads(response['body']), {'processed': 1, 'skipped': 1})

    def test_handler_error_fails_batch(self):
        import lambda_handlers

        handler = mock.Mock(side_effect=RuntimeError('db down'))
        with mock.patch.dict(local_backend.TASK_HANDLERS, {'reconcile_all_lists': handler}):
            with self.assertRaises(RuntimeError):
                lambda_handlers.sqs_task_handler(
                    self.event(build_message('1', 'reconcile_all_lists', {})), None
                )


class ResultContractTest(SimpleTestCase):

    def test_boundary_hides_exception_details(self):
        @service_boundary(ServiceResult, "A server error occurred.")
        def explode():
            raise RuntimeError("password=hunter2")

        with self.assertLogs('apps.core.results', level='ERROR'):
            result = explode()

        self.assertFalse(result.success)
        self.assertEqual(result.error, ErrorKind.SERVER_ERROR)
        self.assertEqual(result.message, "A server error occurred.")

    def test_raise_for_result_maps_status(self):
        with self.assertRaises(HttpError) as ctx:
            raise_for_result(ServiceResult.failure("Nope.", ErrorKind.FORBIDDEN))
        self.assertEqual(ctx.exception.status_code, 403)

        ok = ServiceResult.ok("Fine.")
        self.assertIs(raise_for_result(ok), ok)
