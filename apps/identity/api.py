"""
Identity API endpoints with JWT authentication.

Provides signup, login, logout, token refresh and profile endpoints.
Uses JWT tokens in httpOnly cookies for stateless authentication.
"""
from django.http import HttpRequest, HttpResponse
from ninja import Router
from ninja.errors import HttpError

from apps.core.results import raise_for_result
from .decorators import is_production, require_auth
from .jwt_auth import (
    ACCESS_COOKIE,
    REFRESH_COOKIE,
    create_access_token,
    create_token_pair,
    decode_token,
    get_access_token_cookie_settings,
    get_refresh_token_cookie_settings,
)
from .models import User
from .schemas import (
    AuthOut, LoginIn, MessageOut, ProfileResultOut, ProfileUpdateIn, PublicProfileResultOut,
    SignUpIn, SignUpOut,
)
from . import services

router = Router(tags=["Identity"])


# =============================================================================
# Auth Endpoints
# =============================================================================

@router.post("/signup", response={201: SignUpOut}, auth=None)
def sign_up(request: HttpRequest, payload: SignUpIn):
    """Create a community account."""
    result = raise_for_result(services.sign_up_user(payload))
    return 201, result


@router.post("/login", response=AuthOut, auth=None)
def login_user(request: HttpRequest, payload: LoginIn):
    """
    Authenticate user and set JWT tokens in httpOnly cookies.

    Returns the principal on success, sets access_token and refresh_token cookies.
    """
    result = raise_for_result(
        services.authenticate_user(payload.email, payload.password, request=request)
    )
    principal = result.principal

    access_token, refresh_token = create_token_pair(principal.email, principal.name)

    response = HttpResponse(
        AuthOut(
            success=True,
            message=result.message,
            principal={'email': principal.email, 'name': principal.name},
        ).model_dump_json(),
        content_type='application/json'
    )

    prod = is_production()
    response.set_cookie(ACCESS_COOKIE, access_token, **get_access_token_cookie_settings(prod))
    response.set_cookie(REFRESH_COOKIE, refresh_token, **get_refresh_token_cookie_settings(prod))

    return response


@router.post("/logout", response=MessageOut, auth=None)
def logout_user(request: HttpRequest):
    """Clear authentication cookies."""
    response = HttpResponse(
        MessageOut(success=True, message="Logged out").model_dump_json(),
        content_type='application/json'
    )
    response.delete_cookie(ACCESS_COOKIE, path='/')
    response.delete_cookie(REFRESH_COOKIE, path='/')
    return response


@router.post("/refresh", response=AuthOut, auth=None)
def refresh_token(request: HttpRequest):
    """Issue a new access token from a valid refresh token."""
    refresh_token_value = request.COOKIES.get(REFRESH_COOKIE)
    if not refresh_token_value:
        raise HttpError(401, "No refresh token")

    payload = decode_token(refresh_token_value, expected_type='refresh')
    if not payload:
        raise HttpError(401, "Invalid refresh token")

    user = User.objects.filter(email=payload.get('sub', ''), is_active=True).first()
    if not user:
        raise HttpError(401, "Invalid refresh token")

    new_access_token = create_access_token(user.email, user.display_name)

    response = HttpResponse(
        AuthOut(
            success=True,
            message="Token refreshed",
            principal={'email': user.email, 'name': user.display_name},
        ).model_dump_json(),
        content_type='application/json'
    )
    response.set_cookie(
        ACCESS_COOKIE, new_access_token, **get_access_token_cookie_settings(is_production())
    )
    return response


# =============================================================================
# Profile Endpoints
# =============================================================================

@router.get("/me", response=ProfileResultOut, auth=None)
def get_me(request: HttpRequest):
    """Get current authenticated user's profile."""
    user = require_auth(request)
    return raise_for_result(services.get_user_profile(user.email))


@router.put("/me", response=ProfileResultOut, auth=None)
def update_me(request: HttpRequest, payload: ProfileUpdateIn):
    """Edit display name, location, cause focus or skills."""
    user = require_auth(request)
    return raise_for_result(services.update_profile(user.email, payload))


@router.get("/users/{email}", response=PublicProfileResultOut, auth=None)
def get_user(request: HttpRequest, email: str):
    """Public profile lookup by email. Application lists stay private."""
    require_auth(request)
    return raise_for_result(services.get_user_profile(email))
