"""
API Schemas for Applications app.
"""
from typing import List, Optional
from ninja import Schema


# =============================================================================
# Request Schemas
# =============================================================================

class ApplyIn(Schema):
    """Application form as sent by a signed-in volunteer."""
    task_id: str
    motivation_statement: str
    relevant_experience: str = ""
    availability_note: str = ""


class ApplicationIn(ApplyIn):
    """Submission input for the workflow service."""
    applicant_email: str


class VerdictIn(Schema):
    verdict: str  # 'APPROVED' or 'REJECTED'
    reason: Optional[str] = None


# =============================================================================
# Response Schemas
# =============================================================================

class MessageOut(Schema):
    success: bool
    message: str


class SubmitOut(MessageOut):
    application_id: Optional[str] = None


class ApplicationDetailOut(Schema):
    id: str
    task_id: str
    task_title: str
    organizer_id: Optional[str] = None
    organizer_name: str
    applicant_id: str
    applicant_name: str
    applicant_email: str
    motivation_statement: str
    relevant_experience: str
    availability_note: str
    status: str
    verdict_reason: Optional[str] = None
    verdict_by: Optional[str] = None
    applied_at: str
    reviewed_at: Optional[str] = None


class ApplicationOut(MessageOut):
    application: Optional[ApplicationDetailOut] = None


class ApplicationHistoryItemOut(Schema):
    id: str
    task_id: str
    task_title: str
    organizer_name: str
    priority_level: str
    status: str
    applied_at: str


class HistoryOut(MessageOut):
    applications: List[ApplicationHistoryItemOut]


class ReceivedApplicationOut(Schema):
    id: str
    task_id: str
    task_title: str
    applicant_id: str
    applicant_name: str
    priority_level: str
    status: str
    applied_at: str


class ReceivedOut(MessageOut):
    applications: List[ReceivedApplicationOut]
