from datetime import timedelta
from django.utils import timezone
from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model

from apps.applications.models import Application
from apps.catalog import services as catalog_services
from apps.catalog.models import Task, TaskStatus
from apps.catalog.schemas import TaskIn
from apps.identity import services as identity_services
from apps.identity.schemas import SignUpIn

User = get_user_model()

DEMO_PASSWORD = 'password123'

DEMO_USERS = [
    {
        'email': 'organizer@example.com',
        'display_name': 'Riverside Green Team',
        'cause_focus': 'environment',
        'location': 'Nagpur, India',
        'skills': 'Event Coordination, Logistics',
    },
    {
        'email': 'carehub@example.com',
        'display_name': 'Care Hub',
        'cause_focus': 'elderly',
        'location': 'Pune, India',
        'skills': 'Nursing, Scheduling',
    },
    {
        'email': 'volunteer@example.com',
        'display_name': 'Shruti',
        'cause_focus': 'health',
        'location': 'Nagpur, India',
        'skills': 'Event Coordination, nurse',
    },
]

# (organizer email, title, cause, priority, days until start, capacity, open)
DEMO_TASKS = [
    ('organizer@example.com', 'Volunteer Coordinator Meeting', 'environment', 'high', 14, 10, True),
    ('organizer@example.com', 'Lakeside Cleanup Drive', 'environment', 'critical', 7, 25, True),
    ('organizer@example.com', 'Tree Census Weekend', 'environment', 'normal', 30, 8, False),
    ('carehub@example.com', 'Grocery Runs for Seniors', 'elderly', 'critical', 5, 6, True),
    ('carehub@example.com', 'Reading Afternoon', 'education', 'normal', 21, 4, True),
    ('carehub@example.com', 'Health Camp Registration Desk', 'health', 'high', 10, 5, True),
]


class Command(BaseCommand):
    help = 'Seeds the database with demo users and tasks.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clean',
            action='store_true',
            help='Delete existing marketplace data before seeding',
        )
        parser.add_argument(
            '--users',
            action='store_true',
            help='Seed users only',
        )

    def handle(self, *args, **options):
        if options['clean']:
            self.stdout.write(self.style.WARNING('Cleaning database...'))
            self._clean_database()
            self.stdout.write(self.style.SUCCESS('Database cleaned.'))

        self._seed_users()
        if not options['users']:
            self._seed_tasks()

        self.stdout.write(self.style.SUCCESS('Seeding completed successfully.'))

    def _clean_database(self):
        Application.objects.all().delete()
        Task.objects.all().delete()
        User.objects.exclude(is_superuser=True).delete()

    def _seed_users(self):
        self.stdout.write('Seeding Users...')

        for data in DEMO_USERS:
            result = identity_services.sign_up_user(SignUpIn(password=DEMO_PASSWORD, **data))
            if result.success:
                self.stdout.write(f" - Created {data['email']} ({DEMO_PASSWORD})")
            else:
                self.stdout.write(f" - Skipped {data['email']}: {result.message}")

    def _seed_tasks(self):
        self.stdout.write('Seeding Tasks...')
        now = timezone.now().replace(minute=0, second=0, microsecond=0)

        for email, title, cause, priority, days, capacity, open_now in DEMO_TASKS:
            if Task.objects.filter(title=title).exists():
                self.stdout.write(f' - Skipped "{title}": already exists')
                continue

            start = now + timedelta(days=days)
            result = catalog_services.create_task(email, TaskIn(
                title=title,
                description=f'{title}. Demo task created by the seed command.',
                start_time=start,
                end_time=start + timedelta(hours=3),
                location='Community Center',
                application_deadline=start - timedelta(days=2),
                max_volunteers=capacity,
                cause_focus=cause,
                required_skills='Teamwork, Communication',
                priority_level=priority,
                is_accepting_applications=True,
            ))
            if not result.success:
                self.stdout.write(self.style.ERROR(f' - Failed "{title}": {result.message}'))
                continue

            if open_now:
                catalog_services.set_task_status(result.task_id, email, TaskStatus.ACTIVE_OPEN)
            self.stdout.write(f' - Created "{title}"')
