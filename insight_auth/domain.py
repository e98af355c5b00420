"""Results handed back by the identity and session services"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class UserIdentity:
    """Authenticated user, detached from any database session"""
    id: str
    organization_id: str
    email: str
    role: str
    full_name: Optional[str] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, user) -> "UserIdentity":
        return cls(
            id=user.id,
            organization_id=user.organization_id,
            email=user.email,
            role=user.role,
            full_name=user.full_name,
            created_at=user.created_at,
        )


@dataclass(frozen=True)
class SignupResult:
    """Organization and owner created by a signup, with the raw signup token"""
    organization_id: str
    user_id: str
    email: str
    token: str


@dataclass(frozen=True)
class InviteResult:
    """Stored team invite; ``token`` is only set right after creation"""
    id: str
    organization_id: str
    creator_id: str
    email: str
    role: str
    created_at: datetime
    token: Optional[str] = None

    @classmethod
    def from_model(cls, invite, token: Optional[str] = None) -> "InviteResult":
        return cls(
            id=invite.id,
            organization_id=invite.organization_id,
            creator_id=invite.creator_id,
            email=invite.email,
            role=invite.role,
            created_at=invite.created_at,
            token=token,
        )


@dataclass(frozen=True)
class SsoLogin:
    """Outcome of a federated login: where to send the browser, and its session"""
    location: str
    session_id: str
    user: UserIdentity
    is_new_user: bool = False
