"""DTOs for Identity app."""
from dataclasses import dataclass, field
from typing import List, Optional

from apps.core.results import ServiceResult


@dataclass(frozen=True)
class PrincipalDTO:
    """Session principal: email and display name only."""
    email: str
    name: str


@dataclass(frozen=True)
class UserProfileDTO:
    """Profile of a user. The password hash never leaves the identity app."""
    id: str
    email: str
    display_name: str
    location: str
    cause_focus: str
    skills: str
    application_history: List[str] = field(default_factory=list)
    application_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class SignUpResult(ServiceResult):
    user_id: Optional[str] = None


@dataclass(frozen=True)
class AuthResult(ServiceResult):
    principal: Optional[PrincipalDTO] = None


@dataclass(frozen=True)
class ProfileResult(ServiceResult):
    user: Optional[UserProfileDTO] = None
