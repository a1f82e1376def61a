"""DTOs for Applications app."""
from dataclasses import dataclass, field
from typing import List, Optional

from apps.core.results import ServiceResult


@dataclass(frozen=True)
class ApplicationDetailDTO:
    id: str
    task_id: str
    task_title: str
    organizer_id: Optional[str]
    organizer_name: str
    applicant_id: str
    applicant_name: str
    applicant_email: str
    motivation_statement: str
    relevant_experience: str
    availability_note: str
    status: str
    verdict_reason: Optional[str]
    verdict_by: Optional[str]
    applied_at: str
    reviewed_at: Optional[str]


@dataclass(frozen=True)
class ApplicationHistoryItemDTO:
    """One row of a volunteer's application history."""
    id: str
    task_id: str
    task_title: str
    organizer_name: str
    priority_level: str
    status: str
    applied_at: str


@dataclass(frozen=True)
class ReceivedApplicationDTO:
    """One application received on an organizer's task."""
    id: str
    task_id: str
    task_title: str
    applicant_id: str
    applicant_name: str
    priority_level: str
    status: str
    applied_at: str


@dataclass(frozen=True)
class SubmitResult(ServiceResult):
    application_id: Optional[str] = None


@dataclass(frozen=True)
class ApplicationResult(ServiceResult):
    application: Optional[ApplicationDetailDTO] = None


@dataclass(frozen=True)
class HistoryResult(ServiceResult):
    applications: List[ApplicationHistoryItemDTO] = field(default_factory=list)


@dataclass(frozen=True)
class ReceivedResult(ServiceResult):
    applications: List[ReceivedApplicationDTO] = field(default_factory=list)
