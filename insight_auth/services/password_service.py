"""Password reset service"""

import asyncio
from datetime import datetime, timedelta

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from insight_auth.config import settings
from insight_auth.exceptions import DispatchError, NotFoundError, PersistenceError
from insight_auth.repositories import PasswordResetRepository, SessionRepository, UserRepository
from insight_auth.security.password import hash_password, validate_password
from insight_auth.security.tokens import hash_token, new_token
from insight_auth.services.notification_service import NotificationService

logger = structlog.get_logger()


class PasswordService:
    """
    Forgot / reset password flow.

    Every ``forgot`` call issues a new, independently usable reset request;
    earlier requests stay valid until one of them is consumed by ``reset``,
    which removes them all.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        notifications: NotificationService,
        expiry_hours: int = settings.PASSWORD_RESET_EXPIRY_HOURS,
        revoke_sessions: bool = settings.REVOKE_SESSIONS_ON_PASSWORD_RESET,
    ):
        self.session_factory = session_factory
        self.notifications = notifications
        self.expiry_hours = expiry_hours
        self.revoke_sessions = revoke_sessions

    async def _send_reset_email(self, email: str, organization_id: str, token: str) -> bool:
        try:
            return await self.notifications.send_password_reset_email(email, organization_id, token)
        except Exception as e:
            logger.error("password_reset_email_error", email=email, error=str(e))
            return False

    async def forgot(self, email: str) -> bool:
        """
        Issue a password reset request and email its token.

        Raises:
            NotFoundError: No user has this email
            DispatchError: The email could not be sent (request not persisted)
            PersistenceError: The transaction could not be written or committed
        """
        logger.info("password_forgot_request", email=email)
        token = new_token()

        db = self.session_factory()
        try:
            try:
                user = UserRepository.get_by_email(db, email)
                if user is None:
                    logger.info("password_forgot_user_missing", email=email)
                    raise NotFoundError("User not found")

                organization_id = user.organization_id
                PasswordResetRepository.create(
                    db,
                    organization_id=organization_id,
                    user_id=user.id,
                    email=email,
                    token_hash=hash_token(token),
                )
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("password_forgot_create_failed", email=email, error=str(e))
                raise PersistenceError()

            if not await self._send_reset_email(email, organization_id, token):
                db.rollback()
                logger.error("password_forgot_email_failed", email=email)
                raise DispatchError("Failed to send password reset email")

            try:
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("password_forgot_commit_failed", email=email, error=str(e))
                raise PersistenceError()
        finally:
            db.close()

        logger.info("password_forgot_sent", email=email, organization_id=organization_id)
        return True

    async def reset(self, email: str, organization_id: str, token: str, password: str) -> bool:
        """
        Consume a reset request and replace the user's password.

        Raises:
            NotFoundError: No live request matches; unknown, expired and already
                consumed tokens are reported the same way
            InvalidPasswordError: The password does not meet the length policy
            PersistenceError: The transaction failed
        """
        logger.info("password_reset_request", email=email, organization_id=organization_id)
        validate_password(password)
        created_after = datetime.utcnow() - timedelta(hours=self.expiry_hours)

        db = self.session_factory()
        try:
            request = PasswordResetRepository.find_active(
                db, email, organization_id, hash_token(token), created_after
            )
            if request is None:
                logger.info("password_reset_request_missing", email=email, organization_id=organization_id)
                raise NotFoundError("Password reset request not found")

            user_id = request.user_id
            password_hash = await asyncio.to_thread(hash_password, password)
            UserRepository.store_password(db, user_id, password_hash)

            if PasswordResetRepository.delete_for_user(db, user_id) == 0:
                db.rollback()
                logger.warning("password_reset_request_delete_failed", email=email, user_id=user_id)
                raise PersistenceError()

            if self.revoke_sessions:
                revoked = SessionRepository.delete_for_user(db, user_id)
                logger.info("password_reset_sessions_revoked", user_id=user_id, count=revoked)

            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("password_reset_failed", email=email, error=str(e))
            raise PersistenceError()
        finally:
            db.close()

        logger.info("password_reset_complete", email=email, user_id=user_id)
        return True
