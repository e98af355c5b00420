"""Identity provider registry, selected through ``OAUTH_PROVIDER``"""

from typing import Dict, Type

import structlog

from insight_auth.config import settings

from .provider_interface import OAuthProviderInterface

logger = structlog.get_logger()


class OAuthProviderFactory:
    """
    Maps provider names to provider classes.

    Sign-in asks for the configured provider with ``from_settings``; other
    names only resolve once they have been registered.
    """

    _providers: Dict[str, Type[OAuthProviderInterface]] = {}

    @classmethod
    def register(cls, provider_name: str, provider_class: Type[OAuthProviderInterface]):
        """
        Raises:
            ValueError: If the name is taken or the class is not a provider
        """
        if not issubclass(provider_class, OAuthProviderInterface):
            raise ValueError(
                f"Provider class {provider_class.__name__} must implement OAuthProviderInterface"
            )
        if provider_name in cls._providers:
            raise ValueError(f"Provider '{provider_name}' is already registered")

        cls._providers[provider_name] = provider_class

    @classmethod
    def is_registered(cls, provider_name: str) -> bool:
        return provider_name in cls._providers

    @classmethod
    def create(cls, provider_name: str, **kwargs) -> OAuthProviderInterface:
        """
        Raises:
            ValueError: If no provider is registered under that name
        """
        provider_class = cls._providers.get(provider_name)
        if provider_class is None:
            available = ", ".join(sorted(cls._providers)) or "none"
            raise ValueError(f"Provider '{provider_name}' not found. Available providers: {available}")
        return provider_class(**kwargs)

    @classmethod
    def from_settings(cls) -> OAuthProviderInterface:
        """The provider named by ``OAUTH_PROVIDER``, built with the OAuth client settings"""
        return cls.create(
            settings.OAUTH_PROVIDER,
            client_id=settings.GOOGLE_CLIENT_ID,
            client_secret=settings.GOOGLE_CLIENT_SECRET,
            redirect_uri=settings.OAUTH_REDIRECT_URI,
        )


def register_default_providers():
    """Register Google sign-in; safe to call more than once"""
    from .google_provider import GoogleOAuthProvider

    if not OAuthProviderFactory.is_registered("google"):
        OAuthProviderFactory.register("google", GoogleOAuthProvider)
        logger.info("oauth_provider_registered", provider="google")
