"""
Services for Identity app.

Signup, credential login and profile read/edit. Every function returns a
result object and never raises to the caller.
"""
import logging
from typing import Dict, Iterable, Optional, Tuple
from uuid import UUID

from django.contrib.auth import authenticate
from django.db import IntegrityError, transaction
from django.db.models import Q

from apps.core.results import ErrorKind, service_boundary
from apps.core.revalidation import CATALOG, revalidate
from .dtos import AuthResult, PrincipalDTO, ProfileResult, SignUpResult, UserProfileDTO
from .models import CauseFocus, User
from .schemas import ProfileUpdateIn, SignUpIn

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
PROFILE_FIELDS = ('display_name', 'location', 'cause_focus', 'skills')


def normalize_email(email: Optional[str]) -> str:
    return (email or '').strip().lower()


def to_profile_dto(user: User) -> UserProfileDTO:
    return UserProfileDTO(
        id=str(user.id),
        email=user.email,
        display_name=user.display_name,
        location=user.location,
        cause_focus=user.cause_focus,
        skills=user.skills,
        application_history=list(user.application_history or []),
        application_ids=list(user.application_ids or []),
    )


def get_user_id_by_email(email: str) -> Optional[UUID]:
    """Resolve a user id for other apps. None when no such user."""
    return User.objects.filter(email=normalize_email(email)).values_list('id', flat=True).first()


def get_display_names(user_ids: Iterable) -> Dict[str, str]:
    """
    Batch lookup of display names keyed by user id string.
    One query regardless of how many ids are passed.
    """
    ids = {str(uid) for uid in user_ids if uid}
    if not ids:
        return {}
    return {
        str(uid): name
        for uid, name in User.objects.filter(id__in=ids).values_list('id', 'display_name')
    }


def get_contacts(user_ids: Iterable) -> Dict[str, Tuple[str, str]]:
    """Batch lookup of (display_name, email) keyed by user id string."""
    ids = {str(uid) for uid in user_ids if uid}
    if not ids:
        return {}
    return {
        str(uid): (name, email)
        for uid, name, email in User.objects.filter(id__in=ids).values_list(
            'id', 'display_name', 'email'
        )
    }


@service_boundary(SignUpResult, "A server error occurred during signup.")
def sign_up_user(payload: SignUpIn) -> SignUpResult:
    email = normalize_email(payload.email)
    display_name = (payload.display_name or '').strip()

    if not email or not payload.password or not display_name or not payload.cause_focus:
        return SignUpResult.failure("Missing required authentication and community fields.")

    if len(payload.password) < MIN_PASSWORD_LENGTH:
        return SignUpResult.failure(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long."
        )

    if payload.cause_focus not in CauseFocus.values:
        return SignUpResult.failure(f"Unknown cause focus: {payload.cause_focus}")

    # One query covers both uniqueness rules, an email clash is reported first
    clashes = list(
        User.objects.filter(Q(email=email) | Q(display_name=display_name))
        .values_list('email', flat=True)[:2]
    )
    if email in clashes:
        return SignUpResult.failure(
            "A user with this email address already exists.", ErrorKind.CONFLICT
        )
    if clashes:
        return SignUpResult.failure("This display name is already taken.", ErrorKind.CONFLICT)

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=payload.password,
                display_name=display_name,
                cause_focus=payload.cause_focus,
                location=(payload.location or '').strip(),
                skills=(payload.skills or '').strip(),
            )
    except IntegrityError:
        # Lost a race with a concurrent signup
        return SignUpResult.failure(
            "A user with this email address or display name already exists.",
            ErrorKind.CONFLICT,
        )

    logger.info(f"User {user.id} signed up")
    return SignUpResult.ok(
        "Success! Your community account has been created. You can now log in.",
        user_id=str(user.id),
    )


@service_boundary(AuthResult, "A server error occurred during login.")
def authenticate_user(email: str, password: str, request=None) -> AuthResult:
    """Verify credentials and issue the session principal."""
    email = normalize_email(email)
    if not email or not password:
        return AuthResult.failure("Email and password are required.")

    user = authenticate(request, username=email, password=password)
    if user is None:
        logger.info(f"Failed login for {email}")
        return AuthResult.failure("Invalid email or password.", ErrorKind.UNAUTHENTICATED)

    return AuthResult.ok(
        "Login successful.",
        principal=PrincipalDTO(email=user.email, name=user.display_name),
    )


@service_boundary(ProfileResult, "A server error occurred while loading the profile.")
def get_user_profile(email: str) -> ProfileResult:
    email = normalize_email(email)
    if not email:
        return ProfileResult.failure("Email parameter is required.")

    user = User.objects.filter(email=email).first()
    if not user:
        return ProfileResult.failure(f"User not found for email: {email}", ErrorKind.NOT_FOUND)

    return ProfileResult.ok("User profile retrieved.", user=to_profile_dto(user))


@service_boundary(ProfileResult, "A server error occurred while updating the profile.")
def update_profile(email: str, payload: ProfileUpdateIn) -> ProfileResult:
    """
    Update display name, location, cause focus and skills by email match.
    Fields left unset are not touched.
    """
    email = normalize_email(email)
    if not email:
        return ProfileResult.failure("Email parameter is required.")

    data = payload.model_dump(exclude_unset=True)
    updates = {}
    for key in PROFILE_FIELDS:
        value = data.get(key)
        if value is not None:
            updates[key] = value.strip()

    if 'display_name' in updates and not updates['display_name']:
        return ProfileResult.failure("Display name cannot be empty.")
    if 'cause_focus' in updates and updates['cause_focus'] not in CauseFocus.values:
        return ProfileResult.failure(f"Unknown cause focus: {updates['cause_focus']}")
    if not updates:
        return ProfileResult.failure("User not found or nothing was changed.")

    try:
        with transaction.atomic():
            updated = User.objects.filter(email=email).update(**updates)
    except IntegrityError:
        return ProfileResult.failure(
            "This display name is already taken. Please choose another.",
            ErrorKind.CONFLICT,
        )

    if not updated:
        return ProfileResult.failure("User not found or nothing was changed.", ErrorKind.NOT_FOUND)

    user = User.objects.get(email=email)
    logger.info(f"Profile of user {user.id} updated: {sorted(updates)}")
    if 'display_name' in updates:
        # Organizer names are shown on the cached task board
        revalidate(CATALOG)
    return ProfileResult.ok(
        f"Profile for {user.display_name} updated successfully!",
        user=to_profile_dto(user),
    )
