"""
ASGI config for the Volunteer Marketplace.

Each request is an independent, stateless handler invocation. The same
application object serves Uvicorn/Daphne locally and API Gateway through
Mangum (see lambda_handlers.api_handler).
"""
import os

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

# Initialize Django at container startup, not on the first request
from django.core.asgi import get_asgi_application

application = get_asgi_application()
