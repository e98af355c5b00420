"""Team invite routes"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, field_validator

from insight_auth.api.dependencies import get_invite_service
from insight_auth.database.models import ROLE_OWNER, ROLE_STANDARD, USER_ROLES
from insight_auth.domain import InviteResult, UserIdentity
from insight_auth.middleware.auth_middleware import require_user
from insight_auth.security.password import validate_password
from insight_auth.services.invite_service import InviteService

router = APIRouter()


class CreateInviteRequest(BaseModel):
    email: EmailStr
    role: str = ROLE_STANDARD

    @field_validator("role")
    @classmethod
    def check_role(cls, v: str) -> str:
        if v not in USER_ROLES:
            raise ValueError(f"Role must be one of: {', '.join(USER_ROLES)}")
        return v


class AcceptInviteRequest(BaseModel):
    email: EmailStr
    organization_id: str
    token: str
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)


class InviteResponse(BaseModel):
    id: str
    organization_id: str
    creator_id: str
    email: str
    role: str
    created_at: str

    @classmethod
    def from_result(cls, invite: InviteResult) -> "InviteResponse":
        return cls(
            id=invite.id,
            organization_id=invite.organization_id,
            creator_id=invite.creator_id,
            email=invite.email,
            role=invite.role,
            created_at=invite.created_at.isoformat(),
        )


@router.post("", status_code=status.HTTP_201_CREATED, response_model=InviteResponse)
async def create_invite(
    request: CreateInviteRequest,
    user: UserIdentity = Depends(require_user),
    service: InviteService = Depends(get_invite_service),
):
    """Invite someone into the caller's organization. Owners only."""
    if user.role != ROLE_OWNER:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only organization owners can invite users",
        )

    invite = await service.invite(user, user.organization_id, request.email, request.role)
    return InviteResponse.from_result(invite)


@router.get("", response_model=List[InviteResponse])
async def list_invites(
    user: UserIdentity = Depends(require_user),
    service: InviteService = Depends(get_invite_service),
):
    """Outstanding invites of the caller's organization"""
    return [InviteResponse.from_result(invite) for invite in service.list_invites(user.organization_id)]


@router.post("/accept")
async def accept_invite(
    request: AcceptInviteRequest,
    service: InviteService = Depends(get_invite_service),
):
    """Create the invitee's account from an invite link"""
    user = await service.accept_invite(
        request.email, request.organization_id, request.token, request.password
    )
    return {
        "user_id": user.id,
        "email": user.email,
        "organization_id": user.organization_id,
        "role": user.role,
    }
