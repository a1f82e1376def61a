from django.contrib import admin
from .models import Task


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['title', 'status', 'priority_level', 'cause_focus', 'max_volunteers', 'start_time', 'organizer_id']
    list_filter = ['status', 'priority_level', 'cause_focus', 'is_accepting_applications']
    search_fields = ['title', 'description', 'location']
    date_hierarchy = 'start_time'
    readonly_fields = ['volunteers', 'application_ids', 'created_at', 'updated_at']
