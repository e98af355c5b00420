"""Google OAuth 2.0 provider"""

from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from .provider_interface import (
    OAuthProviderInterface,
    OAuthTokens,
    OAuthUserInfo,
    TokenExchangeError,
    UserInfoError,
)


def _error_details(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json() if response.text else {}
    except ValueError:
        body = {}
    return {
        "status_code": response.status_code,
        "error": body.get("error"),
        "error_description": body.get("error_description"),
    }


class GoogleOAuthProvider(OAuthProviderInterface):
    """
    Sign in with Google.

    Only the identity scopes are requested; no refresh token is needed
    since the provider tokens are discarded once the profile is read.

    References:
    - https://developers.google.com/identity/protocols/oauth2/web-server
    """

    AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USER_INFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"

    DEFAULT_SCOPES = [
        "openid",
        "https://www.googleapis.com/auth/userinfo.email",
        "https://www.googleapis.com/auth/userinfo.profile",
    ]

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str,
                 scopes: Optional[list[str]] = None, timeout: float = 10.0):
        super().__init__(
            provider_name="google",
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            scopes=scopes or self.DEFAULT_SCOPES,
        )
        self.timeout = timeout

    def get_authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(self.scopes),
            "state": state,
            "prompt": "select_account",
        }
        return f"{self.AUTHORIZATION_URL}?{urlencode(params)}"

    async def exchange_code_for_tokens(self, code: str) -> OAuthTokens:
        data = {
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.TOKEN_URL, data=data)
                response.raise_for_status()
                token_data = response.json()

            return OAuthTokens(
                access_token=token_data["access_token"],
                expires_in=token_data.get("expires_in"),
                token_type=token_data.get("token_type", "Bearer"),
            )

        except httpx.HTTPStatusError as e:
            raise TokenExchangeError(
                f"Failed to exchange code for tokens: {e.response.status_code}",
                provider=self.provider_name,
                details=_error_details(e.response),
            )
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise TokenExchangeError(
                f"Unexpected error during token exchange: {str(e)}",
                provider=self.provider_name,
                details={"error": str(e)},
            )

    async def get_user_info(self, access_token: str) -> OAuthUserInfo:
        headers = {"Authorization": f"Bearer {access_token}"}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.USER_INFO_URL, headers=headers)
                response.raise_for_status()
                user_data = response.json()

            return OAuthUserInfo(
                provider_user_id=user_data["id"],
                email=user_data["email"],
                name=user_data.get("name"),
                email_verified=user_data.get("verified_email", False),
            )

        except httpx.HTTPStatusError as e:
            raise UserInfoError(
                f"Failed to fetch user info: {e.response.status_code}",
                provider=self.provider_name,
                details=_error_details(e.response),
            )
        except (httpx.HTTPError, KeyError, ValueError) as e:
            raise UserInfoError(
                f"Unexpected error fetching user info: {str(e)}",
                provider=self.provider_name,
                details={"error": str(e)},
            )
