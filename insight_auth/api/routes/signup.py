"""Organization signup routes"""

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, field_validator

from insight_auth.api.dependencies import get_signup_service
from insight_auth.security.password import validate_password
from insight_auth.services.signup_service import SignupService

router = APIRouter()


class SignupRequest(BaseModel):
    email: EmailStr


class SignupResponse(BaseModel):
    organization_id: str
    user_id: str
    email: str
    message: str = "Please check your email to complete your signup"


class VerifySignupRequest(BaseModel):
    email: EmailStr
    organization_id: str
    token: str


class CompleteSignupRequest(BaseModel):
    email: EmailStr
    organization_id: str
    token: str
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SignupResponse)
async def signup(
    request: SignupRequest,
    service: SignupService = Depends(get_signup_service),
):
    """Create an organization and its owner; the signup link is emailed"""
    result = await service.signup(request.email)
    return SignupResponse(
        organization_id=result.organization_id,
        user_id=result.user_id,
        email=result.email,
    )


@router.post("/verify")
async def verify_signup(
    request: VerifySignupRequest,
    service: SignupService = Depends(get_signup_service),
):
    """Tell the frontend whether a signup link is still usable"""
    exists = service.signup_exists(request.email, request.organization_id, request.token)
    return {"exists": exists}


@router.post("/complete")
async def complete_signup(
    request: CompleteSignupRequest,
    service: SignupService = Depends(get_signup_service),
):
    """Set the owner's password and activate the account"""
    await service.complete_signup(
        request.email, request.organization_id, request.token, request.password
    )
    return {"message": "Signup completed successfully"}
