"""Password reset routes"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, field_validator

from insight_auth.api.dependencies import get_password_service
from insight_auth.security.password import validate_password
from insight_auth.services.password_service import PasswordService

router = APIRouter()


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    email: EmailStr
    organization_id: str
    token: str
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)


@router.post("/forgot")
async def forgot_password(
    request: ForgotPasswordRequest,
    service: PasswordService = Depends(get_password_service),
):
    """Email a password reset link"""
    await service.forgot(request.email)
    return {"message": "A password reset link has been sent"}


@router.post("/reset")
async def reset_password(
    request: ResetPasswordRequest,
    service: PasswordService = Depends(get_password_service),
):
    """Set a new password using the token from the reset link"""
    await service.reset(request.email, request.organization_id, request.token, request.password)
    return {"message": "Password reset successfully"}
