from django.contrib import admin
from .models import Application


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ['id', 'task_id', 'applicant_id', 'status', 'applied_at', 'reviewed_at']
    list_filter = ['status']
    search_fields = ['motivation_statement', 'verdict_reason']
    date_hierarchy = 'applied_at'
    readonly_fields = ['applied_at', 'reviewed_at', 'verdict_by_id']
