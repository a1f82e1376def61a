"""DTOs for Catalog app - task views and operation results."""
from dataclasses import dataclass, field
from typing import List, Optional

from apps.core.results import ServiceResult


@dataclass(frozen=True)
class PublicTaskDTO:
    """Minimal task card for the public board."""
    id: str
    title: str
    organizer: str
    location: str
    application_deadline: str
    priority_level: str
    cause_focus: str
    slots: int
    slots_remaining: int


@dataclass(frozen=True)
class TaskDetailDTO:
    """Full task view. The termination reason is not exposed."""
    id: str
    title: str
    description: str
    organizer: str
    organizer_id: str
    location: str
    start_time: str
    end_time: Optional[str]
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
    updated_at: Optional[str]


@dataclass(frozen=True)
class OrganizerTaskDTO:
    """A task as its organizer sees it, every field included."""
    id: str
    title: str
    description: str
    organizer_id: str
    location: str
    start_time: str
    end_time: Optional[str]
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
    termination_reason: Optional[str]
    created_at: str


@dataclass(frozen=True)
class TaskWriteResult(ServiceResult):
    task_id: Optional[str] = None


@dataclass(frozen=True)
class TaskResult(ServiceResult):
    task: Optional[TaskDetailDTO] = None


@dataclass(frozen=True)
class TaskListResult(ServiceResult):
    tasks: List[PublicTaskDTO] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = 0


@dataclass(frozen=True)
class OrganizerTasksResult(ServiceResult):
    tasks: List[OrganizerTaskDTO] = field(default_factory=list)
