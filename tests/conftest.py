"""Pytest configuration and fixtures"""

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["SMTP_HOST"] = ""
os.environ["FRONTEND_URL"] = "http://localhost:3000"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from insight_auth.api.dependencies import get_mailer, get_oauth_provider
from insight_auth.database.database import Base, get_session_factory
from insight_auth.database.models import ROLE_OWNER
from insight_auth.domain import UserIdentity
from insight_auth.main import app
from insight_auth.repositories import OrganizationRepository, UserRepository
from insight_auth.security.password import hash_password
from insight_auth.services.invite_service import InviteService
from insight_auth.services.notification_service import NotificationService
from insight_auth.services.password_service import PasswordService
from insight_auth.services.session_service import SessionService
from insight_auth.services.signup_service import SignupService
from insight_auth.services.sso_service import GoogleSsoService

from mocks.mailer import MockMailer
from mocks.oauth_provider import MockOAuthProvider

PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="function")
def engine():
    """In-memory SQLite shared by every session of a test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db(session_factory):
    """Session for arranging and inspecting rows; commit anything you write"""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def mailer():
    return MockMailer()


@pytest.fixture(scope="function")
def notifications(mailer):
    return NotificationService(mailer, frontend_url="http://localhost:3000")


@pytest.fixture(scope="function")
def signup_service(session_factory, notifications):
    return SignupService(session_factory, notifications)


@pytest.fixture(scope="function")
def invite_service(session_factory, notifications):
    return InviteService(session_factory, notifications)


@pytest.fixture(scope="function")
def password_service(session_factory, notifications):
    return PasswordService(session_factory, notifications)


@pytest.fixture(scope="function")
def session_service(session_factory):
    return SessionService(session_factory)


@pytest.fixture(scope="function")
def oauth_provider():
    return MockOAuthProvider()


@pytest.fixture(scope="function")
def sso_service(session_factory, oauth_provider, session_service):
    return GoogleSsoService(
        session_factory,
        oauth_provider,
        session_service,
        frontend_url="http://localhost:3000",
    )


@pytest.fixture(scope="function")
def client(session_factory, mailer, oauth_provider):
    """Test client wired to the in-memory database, mock mailer and mock provider"""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_oauth_provider] = lambda: oauth_provider
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def password():
    return PASSWORD


@pytest.fixture(scope="function")
def owner(db):
    """Organization owner with PASSWORD set, as left behind by a completed signup"""
    organization = OrganizationRepository.create(db)
    user = UserRepository.create(
        db,
        organization_id=organization.id,
        email="owner@example.com",
        role=ROLE_OWNER,
        password_hash=hash_password(PASSWORD),
        full_name="Olive Owner",
    )
    identity = UserIdentity.from_model(user)
    db.commit()
    return identity
