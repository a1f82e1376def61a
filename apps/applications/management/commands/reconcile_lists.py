from django.core.management.base import BaseCommand

from apps.applications.reconciliation import reconcile_all
from apps.core.task_service import TaskService


class Command(BaseCommand):
    help = 'Rebuilds task rosters and application id lists from Application records.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--queue',
            action='store_true',
            help='Queue the fan-out on the configured TASK_BACKEND instead of running inline',
        )

    def handle(self, *args, **options):
        if options['queue']:
            task_id = TaskService.reconcile_all_lists()
            self.stdout.write(self.style.SUCCESS(f'Queued reconciliation (id={task_id}).'))
            return

        stats = reconcile_all()
        self.stdout.write(
            f"Checked {stats['tasks']} tasks ({stats['tasks_repaired']} repaired) and "
            f"{stats['users']} users ({stats['users_repaired']} repaired)."
        )
        self.stdout.write(self.style.SUCCESS('Reconciliation completed.'))
