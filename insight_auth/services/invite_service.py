"""Invite service for team onboarding via email invitations"""

import asyncio
from datetime import datetime, timedelta
from typing import List

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from insight_auth.config import settings
from insight_auth.database.models import USER_ROLES
from insight_auth.domain import InviteResult, UserIdentity
from insight_auth.exceptions import (
    ConflictError,
    DispatchError,
    ExpiredError,
    NotFoundError,
    PersistenceError,
)
from insight_auth.repositories import InviteRepository, UserRepository
from insight_auth.security.password import hash_password, validate_password
from insight_auth.security.tokens import hash_token, new_token
from insight_auth.services.notification_service import NotificationService

logger = structlog.get_logger()


class InviteService:
    """Service for issuing and accepting team invites"""

    def __init__(
        self,
        session_factory: sessionmaker,
        notifications: NotificationService,
        expiry_days: int = settings.INVITE_EXPIRY_DAYS,
    ):
        self.session_factory = session_factory
        self.notifications = notifications
        self.expiry_days = expiry_days

    async def _send_invite_email(self, creator: UserIdentity, invite: InviteResult) -> bool:
        try:
            return await self.notifications.send_invite_email(
                invite.email,
                invite.organization_id,
                invite.token,
                creator=creator.full_name or creator.email,
                role=invite.role,
            )
        except Exception as e:
            logger.error("invite_email_error", email=invite.email, error=str(e))
            return False

    async def invite(
        self,
        creator: UserIdentity,
        organization_id: str,
        email: str,
        role: str,
    ) -> InviteResult:
        """
        Create a team invite and email it to the invitee.

        Args:
            creator: Authenticated user sending the invite
            organization_id: Organization the invitee joins
            email: Invitee email address
            role: Role assigned on acceptance (owner, standard)

        Returns:
            The stored invite, including the raw token

        Raises:
            ValueError: If the role is unknown
            DispatchError: If the invite email could not be sent (nothing persisted)
            PersistenceError: If the transaction could not be written or committed
        """
        if role not in USER_ROLES:
            raise ValueError(f"Unknown role: {role}")

        logger.info(
            "invite_request",
            email=email,
            organization_id=organization_id,
            creator_id=creator.id,
        )
        token = new_token()

        db = self.session_factory()
        try:
            try:
                invite = InviteRepository.create(
                    db,
                    organization_id=organization_id,
                    creator_id=creator.id,
                    email=email,
                    role=role,
                    token_hash=hash_token(token),
                )
                result = InviteResult.from_model(invite, token=token)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("invite_create_failed", email=email, error=str(e))
                raise PersistenceError()

            if not await self._send_invite_email(creator, result):
                db.rollback()
                logger.error("invite_email_failed", email=email, organization_id=organization_id)
                raise DispatchError("Failed to send invite email")

            try:
                db.commit()
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("invite_commit_failed", email=email, error=str(e))
                raise PersistenceError()
        finally:
            db.close()

        logger.info("invite_created", invite_id=result.id, email=email, organization_id=organization_id)
        return result

    def list_invites(self, organization_id: str) -> List[InviteResult]:
        """List outstanding invites of an organization, newest first"""
        db = self.session_factory()
        try:
            invites = InviteRepository.list_for_organization(db, organization_id)
            return [InviteResult.from_model(invite) for invite in invites]
        except SQLAlchemyError as e:
            logger.error("invite_list_failed", organization_id=organization_id, error=str(e))
            raise PersistenceError()
        finally:
            db.close()

    async def accept_invite(
        self, email: str, organization_id: str, token: str, password: str
    ) -> UserIdentity:
        """
        Consume an invite and create the invitee's account.

        Raises:
            NotFoundError: No invite matches (unknown, or already accepted)
            ExpiredError: The invite is older than the expiry window
            ConflictError: The email already belongs to a user
            InvalidPasswordError: The password does not meet the length policy
            PersistenceError: The invite was consumed concurrently, or the
                transaction failed
        """
        validate_password(password)

        db = self.session_factory()
        try:
            invite = InviteRepository.find(db, email, organization_id, hash_token(token))
            if invite is None:
                logger.info("invite_missing", email=email, organization_id=organization_id)
                raise NotFoundError("Invite does not exist")

            if datetime.utcnow() > invite.created_at + timedelta(days=self.expiry_days):
                logger.info("invite_expired", email=email, organization_id=organization_id)
                raise ExpiredError("Invite expired")

            if UserRepository.get_by_email(db, email):
                raise ConflictError("User with this email already exists")

            role = invite.role
            if InviteRepository.delete(db, invite.id) == 0:
                db.rollback()
                raise PersistenceError()

            password_hash = await asyncio.to_thread(hash_password, password)
            user = UserRepository.create(
                db,
                organization_id=organization_id,
                email=email,
                role=role,
                password_hash=password_hash,
            )
            identity = UserIdentity.from_model(user)
            db.commit()
        except IntegrityError:
            db.rollback()
            raise ConflictError("User with this email already exists")
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("invite_accept_failed", email=email, error=str(e))
            raise PersistenceError()
        finally:
            db.close()

        logger.info("invite_accepted", email=email, user_id=identity.id, organization_id=organization_id)
        return identity
