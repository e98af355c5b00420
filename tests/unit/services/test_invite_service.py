"""Unit tests for InviteService"""

from datetime import datetime, timedelta

import pytest

from insight_auth.database.models import ROLE_STANDARD, TeamInvite, User
from insight_auth.exceptions import (
    ConflictError,
    DispatchError,
    ExpiredError,
    InvalidPasswordError,
    NotFoundError,
    PersistenceError,
)
from insight_auth.security.password import verify_password
from insight_auth.services.invite_service import InviteService
from insight_auth.services.notification_service import NotificationService

from mocks.database import commit_failing_factory
from mocks.mailer import MockMailer, extract_link_params


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invite_stores_invite_and_emails_link(invite_service, mailer, owner, db):
    invite = await invite_service.invite(owner, owner.organization_id, "teammate@example.com", ROLE_STANDARD)

    assert invite.creator_id == owner.id
    assert invite.role == ROLE_STANDARD
    assert db.query(TeamInvite).count() == 1

    email = mailer.get_latest_email(to="teammate@example.com")
    assert email["subject"] == "You've been invited to Insight"
    assert "Olive Owner" in email["body"]
    assert extract_link_params(email)["token"] == invite.token


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invite_rejects_unknown_role(invite_service, owner):
    with pytest.raises(ValueError):
        await invite_service.invite(owner, owner.organization_id, "teammate@example.com", "admin")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invite_mailer_failure_persists_nothing(session_factory, owner, db):
    service = InviteService(session_factory, NotificationService(MockMailer(fail=True)))

    with pytest.raises(DispatchError):
        await service.invite(owner, owner.organization_id, "teammate@example.com", ROLE_STANDARD)

    assert db.query(TeamInvite).count() == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_list_invites_newest_first(invite_service, owner, db):
    first = await invite_service.invite(owner, owner.organization_id, "a@example.com", ROLE_STANDARD)
    db.query(TeamInvite).filter(TeamInvite.id == first.id).update(
        {TeamInvite.created_at: datetime.utcnow() - timedelta(hours=1)}
    )
    db.commit()
    second = await invite_service.invite(owner, owner.organization_id, "b@example.com", ROLE_STANDARD)

    invites = invite_service.list_invites(owner.organization_id)

    assert [invite.id for invite in invites] == [second.id, first.id]
    assert all(invite.token is None for invite in invites)
    assert invite_service.list_invites("other1") == []


@pytest.mark.unit
@pytest.mark.asyncio
async def test_accept_invite_creates_user(invite_service, owner, db):
    invite = await invite_service.invite(owner, owner.organization_id, "teammate@example.com", ROLE_STANDARD)

    user = await invite_service.accept_invite(
        "teammate@example.com", owner.organization_id, invite.token, "teammate-pass"
    )

    assert user.organization_id == owner.organization_id
    assert user.role == ROLE_STANDARD
    stored = db.query(User).filter(User.id == user.id).one()
    assert verify_password("teammate-pass", stored.password_hash)
    assert db.query(TeamInvite).count() == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_accept_invite_only_once(invite_service, owner):
    invite = await invite_service.invite(owner, owner.organization_id, "teammate@example.com", ROLE_STANDARD)
    await invite_service.accept_invite("teammate@example.com", owner.organization_id, invite.token, "teammate-pass")

    with pytest.raises(NotFoundError, match="Invite does not exist"):
        await invite_service.accept_invite(
            "teammate@example.com", owner.organization_id, invite.token, "teammate-pass"
        )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_accept_expired_invite(invite_service, owner, db):
    invite = await invite_service.invite(owner, owner.organization_id, "teammate@example.com", ROLE_STANDARD)
    db.query(TeamInvite).update({TeamInvite.created_at: datetime.utcnow() - timedelta(days=8)})
    db.commit()

    with pytest.raises(ExpiredError, match="Invite expired"):
        await invite_service.accept_invite(
            "teammate@example.com", owner.organization_id, invite.token, "teammate-pass"
        )


@pytest.mark.unit
@pytest.mark.asyncio
async def test_accept_invite_for_existing_email(invite_service, owner, db):
    invite = await invite_service.invite(owner, owner.organization_id, owner.email, ROLE_STANDARD)

    with pytest.raises(ConflictError):
        await invite_service.accept_invite(owner.email, owner.organization_id, invite.token, "teammate-pass")

    assert db.query(TeamInvite).count() == 1


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invite_commit_failure_after_send_persists_nothing(session_factory, mailer, owner, db):
    service = InviteService(commit_failing_factory(session_factory), NotificationService(mailer))

    with pytest.raises(PersistenceError):
        await service.invite(owner, owner.organization_id, "teammate@example.com", ROLE_STANDARD)

    assert len(mailer.sent_emails) == 1
    assert db.query(TeamInvite).count() == 0


@pytest.mark.unit
@pytest.mark.asyncio
async def test_accept_invite_rejects_password_longer_than_72_bytes(invite_service, owner, db):
    invite = await invite_service.invite(owner, owner.organization_id, "teammate@example.com", ROLE_STANDARD)

    with pytest.raises(InvalidPasswordError):
        await invite_service.accept_invite(
            "teammate@example.com", owner.organization_id, invite.token, "é" * 37
        )

    assert db.query(TeamInvite).count() == 1
    assert db.query(User).filter(User.email == "teammate@example.com").count() == 0
