from .organization_repository import OrganizationRepository
from .user_repository import UserRepository
from .signup_repository import SignupRepository
from .invite_repository import InviteRepository
from .password_reset_repository import PasswordResetRepository
from .session_repository import SessionRepository

__all__ = [
    "OrganizationRepository",
    "UserRepository",
    "SignupRepository",
    "InviteRepository",
    "PasswordResetRepository",
    "SessionRepository",
]
