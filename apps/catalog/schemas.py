"""
API Schemas for Catalog app.
"""
from datetime import datetime
from typing import List, Optional, Union
from ninja import Schema


# =============================================================================
# Request Schemas
# =============================================================================

class TaskIn(Schema):
    """Schema for creating or editing a task."""
    title: str
    description: str
    start_time: datetime
    end_time: Optional[datetime] = None
    location: str
    application_deadline: datetime
    max_volunteers: int
    cause_focus: str
    # Comma-separated string as sent by forms, or a list
    required_skills: Union[List[str], str] = ""
    priority_level: str = "normal"
    is_accepting_applications: bool = True


class TaskStatusIn(Schema):
    status: str
    reason: Optional[str] = None


# =============================================================================
# Response Schemas
# =============================================================================

class PublicTaskOut(Schema):
    id: str
    title: str
    organizer: str
    location: str
    application_deadline: str
    priority_level: str
    cause_focus: str
    slots: int
    slots_remaining: int


class TaskDetailOut(Schema):
    id: str
    title: str
    description: str
    organizer: str
    organizer_id: str
    location: str
    start_time: str
    end_time: Optional[str] = None
    application_deadline: str
    max_volunteers: int
    slots: int
    slots_remaining: int
    volunteers: List[str]
    cause_focus: str
    required_skills: List[str]
    priority_level: str
    status: str
    is_accepting_applications: bool
    created_at: str
    updated_at: Optional[str] = None


class OrganizerTaskOut(Schema):
    id: str
    title: str
    description: str
    organizer_id: str
    location: str
    start_time: str
    end_time: Optional[str] = None
    application_deadline: str
    max_volunteers: int
    slots_remaining: int
    volunteers: List[str]
    application_ids: List[str]
    cause_focus: str
    required_skills: List[str]
    priority_level: str
    status: str
    is_accepting_applications: bool
    termination_reason: Optional[str] = None
    created_at: str


class TaskWriteOut(Schema):
    success: bool
    message: str
    task_id: Optional[str] = None


class TaskOut(Schema):
    success: bool
    message: str
    task: Optional[TaskDetailOut] = None


class TaskPageOut(Schema):
    success: bool
    message: str
    tasks: List[PublicTaskOut]
    total: int
    page: int
    page_size: int


class OrganizerTasksOut(Schema):
    success: bool
    message: str
    tasks: List[OrganizerTaskOut]
