"""
URL configuration for the Volunteer Marketplace project.
"""
from django.contrib import admin
from django.urls import path
from ninja import NinjaAPI

api = NinjaAPI(
    title="Volunteer Marketplace API",
    version="1.0.0",
    description="Volunteer task marketplace: tasks, applications and profiles",
    docs_url="/docs",
)

from apps.identity.api import router as identity_router
from apps.catalog.api import router as catalog_router
from apps.applications.api import router as applications_router

api.add_router("/identity/", identity_router)
api.add_router("/tasks/", catalog_router)
api.add_router("/applications/", applications_router)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]
