"""
Integration tests for catalog API endpoints.
"""
import json
from datetime import timedelta

from django.core.cache import cache
from django.test import Client, TestCase
from django.utils import timezone

from apps.catalog.models import Task, TaskStatus
from apps.identity.models import CauseFocus, User


class TaskAPITest(TestCase):
    """Test the task board and organizer endpoints."""

    def setUp(self):
        cache.clear()
        self.client = Client()
        self.organizer = User.objects.create_user(
            email='org@example.com', password='secret123', display_name='Green Org'
        )
        now = timezone.now()
        self.task = Task.objects.create(
            title='Tree planting',
            description='Plant saplings.',
            organizer_id=self.organizer.id,
            start_time=now + timedelta(days=8),
            location='Sintra',
            application_deadline=now + timedelta(days=4),
            max_volunteers=5,
            cause_focus=CauseFocus.ENVIRONMENT,
            status=TaskStatus.ACTIVE_OPEN,
        )

    def _task_body(self, **overrides):
        now = timezone.now()
        body = {
            'title': 'Library sorting',
            'description': 'Sort donated books.',
            'start_time': (now + timedelta(days=12)).isoformat(),
            'location': 'Porto',
            'application_deadline': (now + timedelta(days=6)).isoformat(),
            'max_volunteers': 4,
            'cause_focus': CauseFocus.EDUCATION,
            'required_skills': 'reading, patience',
            'priority_level': 'high',
            'is_accepting_applications': True,
        }
        body.update(overrides)
        return json.dumps(body)

    def test_list_is_public(self):
        response = self.client.get('/api/tasks/')

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['total'], 1)
        self.assertEqual(body['tasks'][0]['organizer'], 'Green Org')
        self.assertEqual(body['tasks'][0]['slots_remaining'], 5)

    def test_list_is_served_from_cache(self):
        self.client.get('/api/tasks/')
        # Written behind the service's back, no revalidation
        Task.objects.filter(id=self.task.id).update(status=TaskStatus.DRAFT)

        response = self.client.get('/api/tasks/')
        self.assertEqual(response.json()['total'], 1)

    def test_list_cache_is_revalidated_on_create(self):
        self.assertEqual(self.client.get('/api/tasks/').json()['total'], 1)
        self.client.force_login(self.organizer)

        create = self.client.post('/api/tasks/', data=self._task_body(), content_type='application/json')
        self.assertEqual(create.status_code, 201)

        # New task is PENDING_REVIEW and accepting, so it is listed
        response = self.client.get('/api/tasks/')
        self.assertEqual(response.json()['total'], 2)

    def test_list_cache_is_revalidated_on_organizer_rename(self):
        self.assertEqual(self.client.get('/api/tasks/').json()['tasks'][0]['organizer'], 'Green Org')
        self.client.force_login(self.organizer)

        rename = self.client.put(
            '/api/identity/me',
            data=json.dumps({'display_name': 'Blue Org'}),
            content_type='application/json',
        )
        self.assertEqual(rename.status_code, 200)

        response = self.client.get('/api/tasks/')
        self.assertEqual(response.json()['tasks'][0]['organizer'], 'Blue Org')

    def test_create_requires_auth(self):
        response = self.client.post('/api/tasks/', data=self._task_body(), content_type='application/json')
        self.assertEqual(response.status_code, 401)

    def test_create_validation_error(self):
        self.client.force_login(self.organizer)
        response = self.client.post(
            '/api/tasks/', data=self._task_body(max_volunteers=0), content_type='application/json'
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['detail'], "Maximum volunteers must be at least 1.")

    def test_get_task(self):
        response = self.client.get(f'/api/tasks/{self.task.id}')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['task']['title'], 'Tree planting')

    def test_get_task_bad_id(self):
        self.assertEqual(self.client.get('/api/tasks/xyz').status_code, 400)

    def test_my_tasks(self):
        self.client.force_login(self.organizer)

        response = self.client.get('/api/tasks/mine')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()['tasks']), 1)

    def test_status_change(self):
        self.client.force_login(self.organizer)

        response = self.client.post(
            f'/api/tasks/{self.task.id}/status',
            data=json.dumps({'status': TaskStatus.IN_PROGRESS}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200)
        self.task.refresh_from_db()
        self.assertEqual(self.task.status, TaskStatus.IN_PROGRESS)

    def test_status_change_by_stranger(self):
        stranger = User.objects.create_user(
            email='x@example.com', password='secret123', display_name='Stranger'
        )
        self.client.force_login(stranger)

        response = self.client.post(
            f'/api/tasks/{self.task.id}/status',
            data=json.dumps({'status': TaskStatus.IN_PROGRESS}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 404)
