import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Task',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=60)),
                ('description', models.TextField()),
                ('organizer_id', models.UUIDField(db_index=True)),
                ('start_time', models.DateTimeField()),
                ('end_time', models.DateTimeField(blank=True, null=True)),
                ('location', models.CharField(max_length=255)),
                ('application_deadline', models.DateTimeField()),
                ('max_volunteers', models.PositiveIntegerField(default=1)),
                ('volunteers', models.JSONField(blank=True, default=list)),
                ('cause_focus', models.CharField(choices=[('environment', 'Environment'), ('education', 'Education'), ('health', 'Health'), ('elderly', 'Elderly Care'), ('local_aid', 'Local Aid')], db_index=True, max_length=20)),
                ('required_skills', models.JSONField(blank=True, default=list)),
                ('priority_level', models.CharField(choices=[('normal', 'Normal'), ('high', 'High'), ('critical', 'Critical')], default='normal', max_length=10)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('PENDING_REVIEW', 'Pending Review'), ('ACTIVE_OPEN', 'Active - Open'), ('ACTIVE_FULL', 'Active - Full'), ('IN_PROGRESS', 'In Progress'), ('COMPLETED', 'Completed'), ('TERMINATED', 'Terminated'), ('FAILED', 'Failed')], db_index=True, default='DRAFT', max_length=20)),
                ('is_accepting_applications', models.BooleanField(default=True)),
                ('termination_reason', models.TextField(blank=True, null=True)),
                ('application_ids', models.JSONField(blank=True, default=list)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['start_time'],
            },
        ),
    ]
