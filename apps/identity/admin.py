from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ['email', 'display_name', 'cause_focus', 'location', 'is_active', 'date_joined']
    list_filter = ['cause_focus', 'is_active', 'is_staff']
    search_fields = ['email', 'display_name', 'skills']
    readonly_fields = ['application_history', 'application_ids', 'date_joined', 'last_login']
    exclude = ['password']
