"""OAuth providers package"""

from .provider_factory import OAuthProviderFactory, register_default_providers
from .provider_interface import (
    OAuthError,
    OAuthProviderInterface,
    OAuthTokens,
    OAuthUserInfo,
    TokenExchangeError,
    UserInfoError,
)

__all__ = [
    "OAuthError",
    "OAuthProviderFactory",
    "OAuthProviderInterface",
    "OAuthTokens",
    "OAuthUserInfo",
    "TokenExchangeError",
    "UserInfoError",
    "register_default_providers",
]
