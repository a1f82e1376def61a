"""
Tests for rebuilding the denormalized id lists from Application rows,
the celery tasks and the reconcile_lists command.
"""
import os
from datetime import timedelta
from io import StringIO
from unittest import mock

from django.core.management import call_command
from django.test import SimpleTestCase, TestCase
from django.utils import timezone

from apps.applications import services, tasks
from apps.applications.reconciliation import merge_ids, reconcile_all, reconcile_task, reconcile_user
from apps.applications.schemas import ApplicationIn
from apps.catalog.models import Task, TaskStatus
from apps.core.task_service import TaskService
from apps.identity.models import User


class MergeIdsTest(SimpleTestCase):

    def test_keeps_order_drops_stale_appends_missing(self):
        self.assertEqual(merge_ids(['b', 'x', 'a'], ['a', 'b', 'c']), ['b', 'a', 'c'])

    def test_collapses_duplicates(self):
        self.assertEqual(merge_ids(['a', 'a', 'b'], ['a', 'b']), ['a', 'b'])

    def test_empty(self):
        self.assertEqual(merge_ids(None, []), [])


class ReconciliationTestCase(TestCase):

    def setUp(self):
        self.organizer = User.objects.create_user(
            email='org@example.com', password='secret123', display_name='Org'
        )
        self.approved = User.objects.create_user(
            email='a@example.com', password='secret123', display_name='Approved'
        )
        self.withdrawn = User.objects.create_user(
            email='w@example.com', password='secret123', display_name='Withdrawn'
        )
        now = timezone.now()
        self.task = Task.objects.create(
            title='Food bank shift',
            description='Sort donations.',
            organizer_id=self.organizer.id,
            start_time=now + timedelta(days=3),
            location='Porto',
            application_deadline=now + timedelta(days=2),
            max_volunteers=5,
            status=TaskStatus.ACTIVE_OPEN,
        )
        self.approved_app = self._apply(self.approved)
        self.withdrawn_app = self._apply(self.withdrawn)
        services.update_application_verdict(self.approved_app, self.organizer.id, 'APPROVED')
        services.withdraw_application(self.withdrawn_app)

    def _apply(self, user):
        return services.submit_application(ApplicationIn(
            task_id=str(self.task.id),
            applicant_email=user.email,
            motivation_statement='Happy to help every weekend.',
        )).application_id

    def corrupt(self):
        """Drop the approved entries and leave the withdrawn ones behind."""
        Task.objects.filter(id=self.task.id).update(
            volunteers=[], application_ids=[self.withdrawn_app],
        )
        User.objects.filter(id=self.approved.id).update(application_history=[])
        User.objects.filter(id=self.withdrawn.id).update(application_history=[self.withdrawn_app])
        User.objects.filter(id=self.organizer.id).update(application_ids=[])

    def assert_consistent(self):
        for obj in (self.task, self.organizer, self.approved, self.withdrawn):
            obj.refresh_from_db()
        self.assertEqual(self.task.volunteers, [str(self.approved.id)])
        self.assertEqual(self.task.application_ids, [self.approved_app])
        self.assertEqual(self.approved.application_history, [self.approved_app])
        self.assertEqual(self.withdrawn.application_history, [])
        self.assertEqual(
            set(self.organizer.application_ids), {self.approved_app, self.withdrawn_app}
        )


class ReconcileTest(ReconciliationTestCase):

    def test_workflow_leaves_lists_consistent(self):
        self.assertFalse(reconcile_task(self.task.id))
        self.assertFalse(reconcile_user(self.organizer.id))
        self.assert_consistent()

    def test_repairs_task(self):
        self.corrupt()

        self.assertTrue(reconcile_task(self.task.id))

        self.task.refresh_from_db()
        self.assertEqual(self.task.volunteers, [str(self.approved.id)])
        self.assertEqual(self.task.application_ids, [self.approved_app])

    def test_repair_all_is_idempotent(self):
        self.corrupt()

        first = reconcile_all()
        second = reconcile_all()

        self.assertEqual(first['tasks'], 1)
        self.assertEqual(first['tasks_repaired'], 1)
        self.assertEqual(first['users'], 3)
        self.assertEqual(first['users_repaired'], 3)
        self.assertEqual(second['tasks_repaired'], 0)
        self.assertEqual(second['users_repaired'], 0)
        self.assert_consistent()

    def test_missing_rows(self):
        Task.objects.all().delete()
        self.assertFalse(reconcile_task(self.task.id))
        self.assertFalse(reconcile_user(self.task.id))


class ReconcileDispatchTest(ReconciliationTestCase):

    @mock.patch.dict(os.environ, {'TASK_BACKEND': 'local'})
    def test_local_backend_runs_fan_out_inline(self):
        self.corrupt()

        job_id = TaskService.reconcile_all_lists()

        self.assertTrue(job_id)
        self.assert_consistent()

    @mock.patch.dict(os.environ, {'TASK_BACKEND': 'local'})
    def test_local_backend_single_task(self):
        self.corrupt()

        TaskService.reconcile_task_lists(self.task.id)

        self.task.refresh_from_db()
        self.assertEqual(self.task.application_ids, [self.approved_app])

    def test_celery_task_body(self):
        self.corrupt()

        result = tasks.reconcile_user_lists_task(str(self.approved.id))

        self.assertEqual(result, {'user_id': str(self.approved.id), 'repaired': True})
        self.approved.refresh_from_db()
        self.assertEqual(self.approved.application_history, [self.approved_app])

    def test_celery_fan_out_queues_one_job_per_row(self):
        with mock.patch('apps.applications.tasks.reconcile_task_lists_task') as task_job, \
                mock.patch('apps.applications.tasks.reconcile_user_lists_task') as user_job:
            result = tasks.reconcile_all_lists_task()

        self.assertEqual(result, {'tasks': 1, 'users': 3})
        task_job.delay.assert_called_once_with(str(self.task.id))
        self.assertEqual(user_job.delay.call_count, 3)

    def test_command_runs_inline(self):
        self.corrupt()
        out = StringIO()

        call_command('reconcile_lists', stdout=out)

        self.assertIn('Checked 1 tasks (1 repaired) and 3 users (3 repaired).', out.getvalue())
        self.assert_consistent()

    @mock.patch.dict(os.environ, {'TASK_BACKEND': 'local'})
    def test_command_queue(self):
        self.corrupt()
        out = StringIO()

        call_command('reconcile_lists', '--queue', stdout=out)

        self.assertIn('Queued reconciliation', out.getvalue())
        self.assert_consistent()
