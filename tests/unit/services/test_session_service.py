"""Unit tests for SessionService"""

import pytest

from insight_auth.database.models import Session
from insight_auth.exceptions import InvalidCredentialsError
from insight_auth.security.tokens import hash_token


class TestLogin:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_login_issues_session(self, session_service, owner, password, db):
        session_id, user = await session_service.login(owner.email, password)

        assert user.id == owner.id
        stored = db.query(Session).one()
        assert stored.token_hash == hash_token(session_id)
        assert stored.token_hash != session_id

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_wrong_password_and_unknown_email_fail_alike(self, session_service, owner):
        with pytest.raises(InvalidCredentialsError) as wrong_password:
            await session_service.login(owner.email, "not-the-password")
        with pytest.raises(InvalidCredentialsError) as unknown_email:
            await session_service.login("nobody@example.com", "not-the-password")

        assert wrong_password.value.message == unknown_email.value.message == "Invalid email or password"
        assert wrong_password.value.status_code == unknown_email.value.status_code == 400

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_user_without_password_cannot_login(self, session_service, signup_service):
        result = await signup_service.signup("pending@example.com")

        with pytest.raises(InvalidCredentialsError):
            await session_service.login(result.email, "")


class TestSessionLifecycle:

    @pytest.mark.unit
    def test_lookup_resolves_user(self, session_service, owner):
        session_id = session_service.create_session(owner.id)

        user = session_service.lookup(session_id)

        assert user is not None
        assert user.id == owner.id
        assert user.email == owner.email

    @pytest.mark.unit
    def test_lookup_unknown_session(self, session_service):
        assert session_service.lookup("unknown-session-id") is None
        assert session_service.lookup("") is None

    @pytest.mark.unit
    def test_revoke_is_idempotent(self, session_service, owner):
        session_id = session_service.create_session(owner.id)

        assert session_service.revoke(session_id) is True
        assert session_service.lookup(session_id) is None
        assert session_service.revoke(session_id) is False
        assert session_service.revoke("never-issued") is False

    @pytest.mark.unit
    def test_revoke_leaves_other_sessions(self, session_service, owner):
        first = session_service.create_session(owner.id)
        second = session_service.create_session(owner.id)

        session_service.revoke(first)

        assert session_service.lookup(second) is not None

    @pytest.mark.unit
    def test_revoke_user_sessions(self, session_service, owner):
        sessions = [session_service.create_session(owner.id) for _ in range(3)]

        assert session_service.revoke_user_sessions(owner.id) == 3
        assert all(session_service.lookup(session_id) is None for session_id in sessions)
        assert session_service.revoke_user_sessions(owner.id) == 0
