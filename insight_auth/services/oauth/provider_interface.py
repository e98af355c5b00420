"""OAuth provider interface"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class OAuthUserInfo:
    """Profile returned by an identity provider"""
    provider_user_id: str
    email: str
    name: Optional[str] = None
    email_verified: bool = False


@dataclass
class OAuthTokens:
    access_token: str
    expires_in: Optional[int] = None
    token_type: str = "Bearer"


class OAuthProviderInterface(ABC):
    """
    Authorization-code flow against one identity provider.

    Implementations only talk to the provider; state handling, account
    provisioning and sessions belong to the SSO service.
    """

    def __init__(self, provider_name: str, client_id: str, client_secret: str,
                 redirect_uri: str, scopes: list[str]):
        self.provider_name = provider_name
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.scopes = scopes

    @abstractmethod
    def get_authorization_url(self, state: str) -> str:
        """
        Build the URL the browser is redirected to.

        Args:
            state: Value the provider must echo back on the callback
        """

    @abstractmethod
    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        """
        Exchange an authorization code for tokens.

        Raises:
            TokenExchangeError: If the provider rejects the code
        """

    @abstractmethod
    async def get_user_info(self, access_token: str) -> OAuthUserInfo:
        """
        Fetch the signed-in user's profile.

        Raises:
            UserInfoError: If the profile cannot be fetched
        """


class OAuthError(Exception):
    """Base exception for identity provider failures"""

    def __init__(self, message: str, provider: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.provider = provider
        self.details = details or {}


class TokenExchangeError(OAuthError):
    pass


class UserInfoError(OAuthError):
    pass
