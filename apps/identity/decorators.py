"""Request authentication helpers shared by the API routers."""
import os
from typing import Optional

from django.conf import settings
from django.http import HttpRequest
from ninja.errors import HttpError

from .jwt_auth import ACCESS_COOKIE, get_email_from_token
from .models import User


def get_current_user(request: HttpRequest) -> Optional[User]:
    """
    Resolve the caller from the access-token cookie.
    Falls back to the Django session user (admin, tests).
    """
    access_token = request.COOKIES.get(ACCESS_COOKIE)
    if access_token:
        email = get_email_from_token(access_token)
        if email:
            user = User.objects.filter(email=email.lower(), is_active=True).first()
            if user:
                return user

    session_user = getattr(request, 'user', None)
    if session_user is not None and session_user.is_authenticated and session_user.is_active:
        return session_user
    return None


def require_auth(request: HttpRequest) -> User:
    """Require authentication. Raises 401 if not authenticated."""
    user = get_current_user(request)
    if not user:
        raise HttpError(401, "Authentication required")
    return user


def is_production() -> bool:
    """Check if running in production (Lambda or DEBUG=False)."""
    return bool(os.getenv('AWS_LAMBDA_FUNCTION_NAME')) or not settings.DEBUG
