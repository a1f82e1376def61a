"""
Integration tests for identity API endpoints.
"""
import json

from django.test import Client, TestCase

from apps.identity.jwt_auth import create_refresh_token, decode_token
from apps.identity.models import CauseFocus, User


class AuthAPITest(TestCase):
    """Test signup, login, refresh and logout."""

    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(
            email='ana@example.com',
            password='secret123',
            display_name='Ana',
            cause_focus=CauseFocus.ELDERLY,
        )

    def _post(self, path, data):
        return self.client.post(path, data=json.dumps(data), content_type='application/json')

    def test_signup(self):
        response = self._post('/api/identity/signup', {
            'email': 'Ben@Example.com',
            'password': 'secret123',
            'display_name': 'Ben',
            'cause_focus': CauseFocus.LOCAL_AID,
        })

        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertTrue(body['success'])
        self.assertTrue(User.objects.filter(email='ben@example.com').exists())

    def test_signup_duplicate_email_is_conflict(self):
        response = self._post('/api/identity/signup', {
            'email': 'ANA@example.com',
            'password': 'secret123',
            'display_name': 'Another Ana',
            'cause_focus': CauseFocus.HEALTH,
        })

        self.assertEqual(response.status_code, 409)

    def test_login_sets_cookies(self):
        response = self._post('/api/identity/login', {
            'email': 'Ana@example.com',
            'password': 'secret123',
        })

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['principal'], {'email': 'ana@example.com', 'name': 'Ana'})
        self.assertIn('access_token', response.cookies)
        self.assertIn('refresh_token', response.cookies)
        self.assertTrue(response.cookies['access_token']['httponly'])

        claims = decode_token(response.cookies['access_token'].value, expected_type='access')
        self.assertEqual(claims['sub'], 'ana@example.com')
        self.assertEqual(claims['name'], 'Ana')

    def test_login_wrong_password(self):
        response = self._post('/api/identity/login', {
            'email': 'ana@example.com',
            'password': 'wrong-password',
        })
        self.assertEqual(response.status_code, 401)

    def test_me_with_access_cookie(self):
        self._post('/api/identity/login', {'email': 'ana@example.com', 'password': 'secret123'})

        response = self.client.get('/api/identity/me')

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['user']['display_name'], 'Ana')
        self.assertNotIn('password', response.json()['user'])

    def test_me_requires_auth(self):
        response = self.client.get('/api/identity/me')
        self.assertEqual(response.status_code, 401)

    def test_refresh_issues_access_token(self):
        self.client.cookies['refresh_token'] = create_refresh_token('ana@example.com', 'Ana')

        response = self._post('/api/identity/refresh', {})

        self.assertEqual(response.status_code, 200)
        self.assertIn('access_token', response.cookies)

    def test_refresh_rejects_access_token(self):
        self._post('/api/identity/login', {'email': 'ana@example.com', 'password': 'secret123'})
        self.client.cookies['refresh_token'] = self.client.cookies['access_token'].value

        response = self._post('/api/identity/refresh', {})

        self.assertEqual(response.status_code, 401)

    def test_logout_clears_cookies(self):
        self._post('/api/identity/login', {'email': 'ana@example.com', 'password': 'secret123'})

        response = self._post('/api/identity/logout', {})

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.cookies['access_token'].value, '')


class ProfileAPITest(TestCase):
    """Test profile edit endpoint."""

    def setUp(self):
        self.client = Client()
        self.user = User.objects.create_user(
            email='ana@example.com', password='secret123', display_name='Ana'
        )
        User.objects.create_user(email='ben@example.com', password='secret123', display_name='Ben')
        self.client.force_login(self.user)

    def test_update_me(self):
        response = self.client.put(
            '/api/identity/me',
            data=json.dumps({'location': 'Braga', 'skills': 'driving'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.location, 'Braga')
        self.assertEqual(self.user.skills, 'driving')

    def test_update_me_taken_name(self):
        response = self.client.put(
            '/api/identity/me',
            data=json.dumps({'display_name': 'Ben'}),
            content_type='application/json',
        )

        self.assertEqual(response.status_code, 409)
        self.assertEqual(
            response.json()['detail'],
            "This display name is already taken. Please choose another.",
        )

    def test_other_users_profile_hides_application_lists(self):
        response = self.client.get('/api/identity/users/ben@example.com')

        self.assertEqual(response.status_code, 200)
        user = response.json()['user']
        self.assertEqual(user['display_name'], 'Ben')
        self.assertNotIn('application_history', user)
        self.assertNotIn('application_ids', user)
        self.assertNotIn('email', user)

    def test_own_profile_keeps_application_lists(self):
        user = self.client.get('/api/identity/me').json()['user']
        self.assertEqual(user['application_history'], [])
