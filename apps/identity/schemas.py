"""
API Schemas for Identity app.
"""
from typing import List, Optional
from ninja import Schema


# =============================================================================
# Request Schemas
# =============================================================================

class SignUpIn(Schema):
    email: str
    password: str
    display_name: str
    cause_focus: str
    location: str = ""
    skills: str = ""


class LoginIn(Schema):
    email: str
    password: str


class ProfileUpdateIn(Schema):
    """Only the fields that are sent are changed."""
    display_name: Optional[str] = None
    location: Optional[str] = None
    cause_focus: Optional[str] = None
    skills: Optional[str] = None


# =============================================================================
# Response Schemas
# =============================================================================

class PrincipalOut(Schema):
    email: str
    name: str


class ProfileOut(Schema):
    id: str
    email: str
    display_name: str
    location: str
    cause_focus: str
    skills: str
    application_history: List[str]
    application_ids: List[str]


class MessageOut(Schema):
    success: bool
    message: str


class SignUpOut(MessageOut):
    user_id: Optional[str] = None


class AuthOut(MessageOut):
    principal: Optional[PrincipalOut] = None


class ProfileResultOut(MessageOut):
    user: Optional[ProfileOut] = None


class PublicProfileOut(Schema):
    """Profile as other users see it, without the application id lists."""
    id: str
    display_name: str
    location: str
    cause_focus: str
    skills: str


class PublicProfileResultOut(MessageOut):
    user: Optional[PublicProfileOut] = None
