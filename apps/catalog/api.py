"""
API Router for Catalog app.
Public task board, task details and organizer task management.
"""
from dataclasses import asdict
from typing import Optional

from django.core.cache import cache
from django.http import HttpRequest
from ninja import Router

from apps.core.results import raise_for_result
from apps.core.revalidation import CATALOG, versioned_key
from apps.identity.decorators import require_auth
from .schemas import (
    OrganizerTasksOut, TaskIn, TaskOut, TaskPageOut, TaskStatusIn, TaskWriteOut,
)
from . import services

router = Router(tags=["Catalog"])

LIST_CACHE_TIMEOUT = 60 * 5


# =============================================================================
# Public Endpoints
# =============================================================================

@router.get("/", response=TaskPageOut, auth=None)
def list_tasks(
    request: HttpRequest,
    page: int = 1,
    page_size: int = services.DEFAULT_PAGE_SIZE,
    search: Optional[str] = None,
    cause_focus: Optional[str] = None,
):
    """
    Paginated public board.
    Pages are cached until the next catalog change revalidates them.
    """
    key = versioned_key(CATALOG, "list", page, page_size, search or "", cause_focus or "")
    cached = cache.get(key)
    if cached is not None:
        return cached

    result = raise_for_result(
        services.list_active_tasks(
            page=page, page_size=page_size, search=search, cause_focus=cause_focus
        )
    )
    data = asdict(result)
    cache.set(key, data, LIST_CACHE_TIMEOUT)
    return data


@router.get("/mine", response=OrganizerTasksOut, auth=None)
def list_my_tasks(request: HttpRequest):
    """Tasks created by the current user."""
    user = require_auth(request)
    return raise_for_result(services.list_tasks_by_organizer(user.email))


@router.get("/{task_id}", response=TaskOut, auth=None)
def get_task(request: HttpRequest, task_id: str):
    """Task details for the detail page."""
    return raise_for_result(services.get_task(task_id))


# =============================================================================
# Organizer Endpoints
# =============================================================================

@router.post("/", response={201: TaskWriteOut}, auth=None)
def create_task(request: HttpRequest, payload: TaskIn):
    """Post a new task. The current user becomes its organizer."""
    user = require_auth(request)
    result = raise_for_result(services.create_task(user.email, payload))
    return 201, result


@router.put("/{task_id}", response=TaskWriteOut, auth=None)
def update_task(request: HttpRequest, task_id: str, payload: TaskIn):
    """Edit a task owned by the current user."""
    user = require_auth(request)
    return raise_for_result(services.update_task(task_id, user.email, payload))


@router.post("/{task_id}/status", response=TaskWriteOut, auth=None)
def set_task_status(request: HttpRequest, task_id: str, payload: TaskStatusIn):
    """Move a task along its lifecycle."""
    user = require_auth(request)
    return raise_for_result(
        services.set_task_status(task_id, user.email, payload.status, payload.reason)
    )
