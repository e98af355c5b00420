"""Federated sign-in: OAuth2 authorization-code flow with CSRF-checked state"""

import base64
import binascii
import hmac
from typing import Optional, Tuple
from urllib.parse import urljoin, urlsplit

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from insight_auth.config import settings
from insight_auth.database.models import ROLE_OWNER
from insight_auth.domain import SsoLogin, UserIdentity
from insight_auth.exceptions import ConflictError, IdentityProviderError, PersistenceError
from insight_auth.repositories import OrganizationRepository, UserRepository
from insight_auth.security.tokens import new_token
from insight_auth.services.oauth import OAuthError, OAuthProviderInterface, OAuthUserInfo
from insight_auth.services.session_service import SessionService

logger = structlog.get_logger()


def _encode_destination(destination: str) -> str:
    return base64.urlsafe_b64encode(destination.encode()).decode().rstrip("=")


def _decode_destination(encoded: str) -> Optional[str]:
    padded = encoded + "=" * (-len(encoded) % 4)
    try:
        return base64.urlsafe_b64decode(padded.encode()).decode()
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None


class GoogleSsoService:
    """
    Sign in with an identity provider.

    ``signin`` produces the provider URL and a state value of the form
    ``<random token>.<base64url(destination)>``. The caller stores the state
    in a cookie; ``oauth2callback`` requires the state echoed by the provider
    to match that cookie before the authorization code is exchanged.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        provider: OAuthProviderInterface,
        sessions: SessionService,
        frontend_url: str = settings.FRONTEND_URL,
    ):
        self.session_factory = session_factory
        self.provider = provider
        self.sessions = sessions
        self.frontend_url = frontend_url.rstrip("/")

    def resolve_destination(self, destination: Optional[str]) -> str:
        """Resolve a post-login destination against the frontend, never leaving its origin"""
        root = f"{self.frontend_url}/"
        if not destination:
            return root

        resolved = urljoin(root, destination)
        target, frontend = urlsplit(resolved), urlsplit(root)
        if (target.scheme, target.netloc) != (frontend.scheme, frontend.netloc):
            logger.warning("sso_destination_rejected", destination=destination)
            return root
        return resolved

    def signin(self, destination: Optional[str] = None) -> Tuple[str, str]:
        """
        Start a federated sign-in.

        Returns:
            Tuple of (authorization_url, state)
        """
        state = f"{new_token()}.{_encode_destination(destination or '')}"
        logger.info("sso_signin_initiated", provider=self.provider.provider_name)
        return self.provider.get_authorization_url(state), state

    async def oauth2callback(
        self, state: Optional[str], code: Optional[str], state_cookie: Optional[str]
    ) -> SsoLogin:
        """
        Finish a federated sign-in.

        Raises:
            ConflictError: The state is missing or does not match the cookie;
                the code is not exchanged
            IdentityProviderError: The code exchange or profile fetch failed
            PersistenceError: Account provisioning failed
        """
        if (
            not state
            or not state_cookie
            or not hmac.compare_digest(state.encode(), state_cookie.encode())
        ):
            logger.warning("sso_state_mismatch", provider=self.provider.provider_name)
            raise ConflictError("Invalid state token")

        if not code:
            raise IdentityProviderError("Missing authorization code")

        try:
            tokens = await self.provider.exchange_code_for_tokens(code)
            profile = await self.provider.get_user_info(tokens.access_token)
        except OAuthError as e:
            logger.error(
                "sso_provider_failed",
                provider=e.provider,
                error=str(e),
                details=e.details,
            )
            raise IdentityProviderError()

        if not profile.email_verified:
            logger.warning("sso_email_unverified", provider=self.provider.provider_name, email=profile.email)
            raise IdentityProviderError("Identity provider email is not verified")

        user, is_new_user = self._find_or_create_user(profile)
        session_id = self.sessions.create_session(user.id)

        _, _, encoded = state.partition(".")
        location = self.resolve_destination(_decode_destination(encoded))

        logger.info(
            "sso_login_complete",
            provider=self.provider.provider_name,
            provider_user_id=profile.provider_user_id,
            user_id=user.id,
            organization_id=user.organization_id,
            is_new_user=is_new_user,
        )
        return SsoLogin(location=location, session_id=session_id, user=user, is_new_user=is_new_user)

    def _find_or_create_user(self, profile: OAuthUserInfo) -> Tuple[UserIdentity, bool]:
        db = self.session_factory()
        try:
            user = UserRepository.get_by_email(db, profile.email)
            if user:
                return UserIdentity.from_model(user), False

            organization = OrganizationRepository.create(db)
            user = UserRepository.create(
                db,
                organization_id=organization.id,
                email=profile.email,
                role=ROLE_OWNER,
                full_name=profile.name,
            )
            identity = UserIdentity.from_model(user)
            db.commit()
            logger.info(
                "sso_user_created",
                provider_user_id=profile.provider_user_id,
                user_id=identity.id,
                organization_id=identity.organization_id,
            )
            return identity, True
        except IntegrityError:
            # Created concurrently by another callback for the same email
            db.rollback()
            user = UserRepository.get_by_email(db, profile.email)
            if user is None:
                raise PersistenceError()
            return UserIdentity.from_model(user), False
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("sso_user_provision_failed", email=profile.email, error=str(e))
            raise PersistenceError()
        finally:
            db.close()
