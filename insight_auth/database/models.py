"""SQLAlchemy models"""

from datetime import datetime
import uuid

import sqlalchemy as sa
from sqlalchemy import Column, String, ForeignKey, TIMESTAMP
from sqlalchemy.orm import relationship

from insight_auth.database.database import Base


ROLE_OWNER = "owner"
ROLE_STANDARD = "standard"
USER_ROLES = (ROLE_OWNER, ROLE_STANDARD)


def generate_id():
    """Generate a unique ID"""
    return str(uuid.uuid4())


class Organization(Base):
    """Organization model"""
    __tablename__ = "organizations"

    id = Column(String(32), primary_key=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)

    # Relationships
    users = relationship("User", back_populates="organization", cascade="all, delete-orphan")


class User(Base):
    """User model"""
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=generate_id)
    organization_id = Column(String(32), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    # Globally unique, which also keeps it unique within the organization
    email = Column(String, unique=True, nullable=False)
    password_hash = Column(String, nullable=True)  # Null until signup completes, or for social-only users
    role = Column(String(20), default=ROLE_STANDARD, nullable=False)
    full_name = Column(String, nullable=True)
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)

    # Relationships
    organization = relationship("Organization", back_populates="users")
    sessions = relationship("Session", back_populates="user", cascade="all, delete-orphan")
    signup_requests = relationship("SignupRequest", back_populates="user", cascade="all, delete-orphan")
    password_reset_requests = relationship(
        "PasswordResetRequest", back_populates="user", cascade="all, delete-orphan"
    )

    __table_args__ = (
        sa.UniqueConstraint("organization_id", "email", name="uq_users_organization_email"),
    )


class SignupRequest(Base):
    """
    Pending signup awaiting password completion.

    Created together with the organization and its owner; deleted when the
    signup completes. A request older than SIGNUP_EXPIRY_HOURS is never
    consumed.
    """
    __tablename__ = "signup_requests"

    id = Column(String, primary_key=True, default=generate_id)
    organization_id = Column(String(32), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    email = Column(String, nullable=False)
    token_hash = Column(String, unique=True, nullable=False)  # SHA-256 hash of token
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="signup_requests")

    __table_args__ = (
        sa.Index("ix_signup_requests_user_id", "user_id"),
        sa.Index("ix_signup_requests_email", "email"),
    )


class TeamInvite(Base):
    """
    Invitation for a new user to join an organization.

    Flow:
        1. Organization owner creates invite (email + role)
        2. System emails invite link with token
        3. Invitee follows the link and sets a password
        4. User account created with invited role, invite deleted
    """
    __tablename__ = "team_invites"

    id = Column(String, primary_key=True, default=generate_id)
    organization_id = Column(String(32), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    creator_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    email = Column(String, nullable=False)
    role = Column(String(20), default=ROLE_STANDARD, nullable=False)
    token_hash = Column(String, unique=True, nullable=False)  # SHA-256 hash of token
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)

    # Relationships
    organization = relationship("Organization")
    creator = relationship("User", foreign_keys=[creator_id])

    __table_args__ = (
        sa.Index("ix_team_invites_organization_id", "organization_id"),
        sa.Index("ix_team_invites_email", "email"),
    )


class PasswordResetRequest(Base):
    """Password reset request; several may be outstanding for one user"""
    __tablename__ = "password_reset_requests"

    id = Column(String, primary_key=True, default=generate_id)
    organization_id = Column(String(32), ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    email = Column(String, nullable=False)
    token_hash = Column(String, unique=True, nullable=False)  # SHA-256 hash of token
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="password_reset_requests")

    __table_args__ = (
        sa.Index("ix_password_reset_requests_user_id", "user_id"),
    )


class Session(Base):
    """Session model"""
    __tablename__ = "sessions"

    id = Column(String, primary_key=True, default=generate_id)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = Column(String, unique=True, nullable=False)  # SHA-256 hash of the session id
    created_at = Column(TIMESTAMP, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="sessions")
