"""
API Router for Applications app.
Volunteer submissions and withdrawals, organizer verdicts, and listings.
"""
from django.http import HttpRequest
from ninja import Router
from ninja.errors import HttpError

from apps.core.results import raise_for_result
from apps.identity.decorators import require_auth
from .schemas import (
    ApplicationIn, ApplicationOut, ApplyIn, HistoryOut, MessageOut, ReceivedOut,
    SubmitOut, VerdictIn,
)
from . import services

router = Router(tags=["Applications"])


# =============================================================================
# Volunteer Endpoints
# =============================================================================

@router.post("/", response={201: SubmitOut}, auth=None)
def submit_application(request: HttpRequest, payload: ApplyIn):
    """Apply to an open task as the current user."""
    user = require_auth(request)
    result = raise_for_result(services.submit_application(
        ApplicationIn(applicant_email=user.email, **payload.model_dump())
    ))
    return 201, result


@router.get("/mine", response=HistoryOut, auth=None)
def my_applications(request: HttpRequest):
    """Application history of the current user."""
    user = require_auth(request)
    return raise_for_result(services.list_applications_for_applicant(user.email))


@router.post("/{application_id}/withdraw", response=MessageOut, auth=None)
def withdraw_application(request: HttpRequest, application_id: str):
    """Withdraw one of the current user's pending applications."""
    user = require_auth(request)
    return raise_for_result(
        services.withdraw_application(application_id, applicant_id=user.id)
    )


# =============================================================================
# Organizer Endpoints
# =============================================================================

@router.get("/received", response=ReceivedOut, auth=None)
def received_applications(request: HttpRequest):
    """Applications received on the current user's tasks."""
    user = require_auth(request)
    return raise_for_result(services.list_applications_for_organizer(user.email))


@router.post("/{application_id}/verdict", response=MessageOut, auth=None)
def judge_application(request: HttpRequest, application_id: str, payload: VerdictIn):
    """Approve or reject an application on one of the current user's tasks."""
    user = require_auth(request)
    return raise_for_result(services.update_application_verdict(
        application_id, user.id, payload.verdict, payload.reason
    ))


# =============================================================================
# Shared
# =============================================================================

@router.get("/{application_id}", response=ApplicationOut, auth=None)
def get_application(request: HttpRequest, application_id: str):
    """Application details, visible to its applicant and the task organizer."""
    user = require_auth(request)
    result = raise_for_result(services.get_application_details(application_id))

    viewer = str(user.id)
    application = result.application
    if viewer not in (application.applicant_id, application.organizer_id):
        raise HttpError(403, "You cannot view this application.")
    return result
