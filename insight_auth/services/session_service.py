"""Session service: password login and the session id lifecycle"""

import asyncio
from typing import Optional, Tuple

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from insight_auth.domain import UserIdentity
from insight_auth.exceptions import InvalidCredentialsError, PersistenceError
from insight_auth.repositories import SessionRepository, UserRepository
from insight_auth.security.password import dummy_verify, verify_password
from insight_auth.security.tokens import hash_token, new_token

logger = structlog.get_logger()


class SessionService:
    """
    Issues, resolves and revokes sessions.

    A session id is handed to the client once and only its hash is stored.
    Revocation deletes the row and commits before returning, so no later
    lookup of the same id can succeed.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    async def login(self, email: str, password: str) -> Tuple[str, UserIdentity]:
        """
        Authenticate with email and password and issue a session.

        Returns:
            Tuple of (session_id, user identity)

        Raises:
            InvalidCredentialsError: Unknown email, no password set, or wrong
                password; the three cases are indistinguishable
        """
        db = self.session_factory()
        try:
            user = UserRepository.get_by_email(db, email)
            identity = UserIdentity.from_model(user) if user else None
            password_hash = user.password_hash if user else None
        except SQLAlchemyError as e:
            logger.error("login_lookup_failed", email=email, error=str(e))
            raise PersistenceError()
        finally:
            db.close()

        if identity is None:
            await asyncio.to_thread(dummy_verify)
            logger.info("login_failed", email=email)
            raise InvalidCredentialsError()

        if not await asyncio.to_thread(verify_password, password, password_hash):
            logger.info("login_failed", email=email)
            raise InvalidCredentialsError()

        session_id = self.create_session(identity.id)
        logger.info("login_succeeded", email=email, user_id=identity.id)
        return session_id, identity

    def create_session(self, user_id: str) -> str:
        """Issue a new session bound to a user; returns the raw session id"""
        session_id = new_token()
        db = self.session_factory()
        try:
            SessionRepository.create(db, user_id=user_id, token_hash=hash_token(session_id))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("session_create_failed", user_id=user_id, error=str(e))
            raise PersistenceError()
        finally:
            db.close()

        logger.info("session_created", user_id=user_id)
        return session_id

    def lookup(self, session_id: str) -> Optional[UserIdentity]:
        """Resolve a session id to its user; None when unknown or revoked"""
        if not session_id:
            return None

        db = self.session_factory()
        try:
            user = SessionRepository.get_user(db, hash_token(session_id))
            return UserIdentity.from_model(user) if user else None
        except SQLAlchemyError as e:
            logger.error("session_lookup_failed", error=str(e))
            raise PersistenceError()
        finally:
            db.close()

    def revoke(self, session_id: str) -> bool:
        """
        Revoke a session. Idempotent.

        Returns:
            True if a live session was removed, False if it was unknown or
            already revoked
        """
        if not session_id:
            return False

        db = self.session_factory()
        try:
            deleted = SessionRepository.delete(db, hash_token(session_id))
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("session_revoke_failed", error=str(e))
            raise PersistenceError()
        finally:
            db.close()

        if deleted:
            logger.info("session_revoked")
        return deleted > 0

    def revoke_user_sessions(self, user_id: str) -> int:
        """Revoke every session of a user; returns how many were removed"""
        db = self.session_factory()
        try:
            deleted = SessionRepository.delete_for_user(db, user_id)
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("session_revoke_all_failed", user_id=user_id, error=str(e))
            raise PersistenceError()
        finally:
            db.close()

        logger.info("user_sessions_revoked", user_id=user_id, count=deleted)
        return deleted
