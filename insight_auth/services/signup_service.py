"""Signup service: organization provisioning and signup completion"""

import asyncio
from datetime import datetime, timedelta

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from insight_auth.config import settings
from insight_auth.database.models import ROLE_OWNER, User
from insight_auth.domain import SignupResult
from insight_auth.exceptions import (
    ConflictError,
    DispatchError,
    ExpiredError,
    NotFoundError,
    PersistenceError,
)
from insight_auth.repositories import (
    InviteRepository,
    OrganizationRepository,
    SignupRepository,
    UserRepository,
)
from insight_auth.security.password import hash_password, validate_password
from insight_auth.security.tokens import hash_token, new_token
from insight_auth.services.notification_service import NotificationService

logger = structlog.get_logger()


def _is_unfinished_signup(db: Session, user: User) -> bool:
    """Sole, password-less owner of an organization that still has a pending signup"""
    return (
        user.password_hash is None
        and bool(user.signup_requests)
        and not user.sessions
        and len(user.organization.users) == 1
        and not InviteRepository.list_for_organization(db, user.organization_id)
    )


class SignupService:
    """
    Drives organization signup.

    ``signup`` creates the organization, its owner and a pending signup in
    one transaction and only commits once the welcome email went out.
    ``complete_signup`` consumes the pending signup exactly once and sets
    the owner's password.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        notifications: NotificationService,
        expiry_hours: int = settings.SIGNUP_EXPIRY_HOURS,
    ):
        self.session_factory = session_factory
        self.notifications = notifications
        self.expiry_hours = expiry_hours

    async def _send_welcome_email(self, result: SignupResult) -> bool:
        try:
            return await self.notifications.send_welcome_email(
                result.email, result.organization_id, result.token
            )
        except Exception as e:
            logger.error("signup_email_error", email=result.email, error=str(e))
            return False

    async def signup(self, email: str) -> SignupResult:
        """
        Create organization, owner and pending signup, then send the welcome email.

        Raises:
            ConflictError: If the email already belongs to a user other than an
                owner whose signup was never completed
            DispatchError: If the welcome email could not be sent (nothing persisted)
            PersistenceError: If the transaction could not be written or committed
        """
        logger.info("signup_request", email=email)
        token = new_token()

        db = self.session_factory()
        try:
            try:
                existing = UserRepository.get_by_email(db, email)
                if existing:
                    if not _is_unfinished_signup(db, existing):
                        # Avoid disclosing account existence.
                        raise ConflictError("Registration could not be completed")
                    logger.info(
                        "signup_replacing_unfinished",
                        email=email,
                        user_id=existing.id,
                        organization_id=existing.organization_id,
                    )
                    OrganizationRepository.delete(db, existing.organization)

                organization = OrganizationRepository.create(db)
                user = UserRepository.create(
                    db, organization_id=organization.id, email=email, role=ROLE_OWNER
                )
                SignupRepository.create(
                    db,
                    organization_id=organization.id,
                    user_id=user.id,
                    email=email,
                    token_hash=hash_token(token),
                )
            except IntegrityError:
                db.rollback()
                raise ConflictError("Registration could not be completed")
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("signup_create_failed", email=email, error=str(e))
                raise PersistenceError()

            result = SignupResult(
                organization_id=organization.id,
                user_id=user.id,
                email=email,
                token=token,
            )

            if not await self._send_welcome_email(result):
                db.rollback()
                logger.error("signup_email_failed", email=email)
                raise DispatchError("Failed to send signup email")

            try:
                db.commit()
            except SQLAlchemyError as e:
                # The welcome email is already out; the link will not resolve.
                db.rollback()
                logger.error("signup_commit_failed", email=email, error=str(e))
                raise PersistenceError()
        finally:
            db.close()

        logger.info(
            "signup_created",
            email=email,
            user_id=result.user_id,
            organization_id=result.organization_id,
        )
        return result

    def _is_expired(self, created_at: datetime) -> bool:
        return datetime.utcnow() > created_at + timedelta(hours=self.expiry_hours)

    def signup_exists(self, email: str, organization_id: str, token: str) -> bool:
        """Check that an unexpired pending signup matches the triple"""
        db = self.session_factory()
        try:
            signup = SignupRepository.find(db, email, organization_id, hash_token(token))
            return signup is not None and not self._is_expired(signup.created_at)
        except SQLAlchemyError as e:
            logger.error("signup_lookup_failed", email=email, error=str(e))
            raise PersistenceError()
        finally:
            db.close()

    async def complete_signup(
        self, email: str, organization_id: str, token: str, password: str
    ) -> bool:
        """
        Consume a pending signup and set the owner's password.

        Raises:
            NotFoundError: No pending signup matches (unknown, or already completed)
            ExpiredError: The pending signup is older than the expiry window
            InvalidPasswordError: The password does not meet the length policy
            PersistenceError: The pending signup was consumed concurrently, or
                the transaction failed
        """
        logger.info("signup_complete_request", email=email, organization_id=organization_id)
        validate_password(password)

        db = self.session_factory()
        try:
            signup = SignupRepository.find(db, email, organization_id, hash_token(token))
            if signup is None:
                logger.info("signup_request_missing", email=email, organization_id=organization_id)
                raise NotFoundError("Signup request does not exist")

            if self._is_expired(signup.created_at):
                logger.info("signup_request_expired", email=email, organization_id=organization_id)
                raise ExpiredError("Signup request expired")

            user_id = signup.user_id
            if SignupRepository.delete_for_user(db, user_id) == 0:
                db.rollback()
                logger.warning("signup_request_delete_failed", email=email, user_id=user_id)
                raise PersistenceError()

            password_hash = await asyncio.to_thread(hash_password, password)
            UserRepository.store_password(db, user_id, password_hash)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("signup_complete_failed", email=email, error=str(e))
            raise PersistenceError()
        finally:
            db.close()

        logger.info("signup_complete", email=email, user_id=user_id, organization_id=organization_id)
        return True
