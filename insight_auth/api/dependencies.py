"""FastAPI dependency providers for services and their collaborators"""

from fastapi import Depends
from sqlalchemy.orm import sessionmaker

from insight_auth.database.database import get_session_factory
from insight_auth.services.invite_service import InviteService
from insight_auth.services.notification_service import Mailer, NotificationService, SmtpMailer
from insight_auth.services.oauth import OAuthProviderFactory, OAuthProviderInterface
from insight_auth.services.password_service import PasswordService
from insight_auth.services.session_service import SessionService
from insight_auth.services.signup_service import SignupService
from insight_auth.services.sso_service import GoogleSsoService


def get_mailer() -> Mailer:
    return SmtpMailer()


def get_notification_service(mailer: Mailer = Depends(get_mailer)) -> NotificationService:
    return NotificationService(mailer)


def get_oauth_provider() -> OAuthProviderInterface:
    return OAuthProviderFactory.from_settings()


def get_signup_service(
    session_factory: sessionmaker = Depends(get_session_factory),
    notifications: NotificationService = Depends(get_notification_service),
) -> SignupService:
    return SignupService(session_factory, notifications)


def get_invite_service(
    session_factory: sessionmaker = Depends(get_session_factory),
    notifications: NotificationService = Depends(get_notification_service),
) -> InviteService:
    return InviteService(session_factory, notifications)


def get_password_service(
    session_factory: sessionmaker = Depends(get_session_factory),
    notifications: NotificationService = Depends(get_notification_service),
) -> PasswordService:
    return PasswordService(session_factory, notifications)


def get_session_service(
    session_factory: sessionmaker = Depends(get_session_factory),
) -> SessionService:
    return SessionService(session_factory)


def get_sso_service(
    session_factory: sessionmaker = Depends(get_session_factory),
    provider: OAuthProviderInterface = Depends(get_oauth_provider),
    sessions: SessionService = Depends(get_session_service),
) -> GoogleSsoService:
    return GoogleSsoService(session_factory, provider, sessions)
