"""Typed failures raised by the identity and session services.

Each failure carries the HTTP status the route layer answers with, so the
services never import FastAPI.
"""


class InsightAuthError(Exception):
    """Base exception for all identity and session failures."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """
        Initialize InsightAuthError.

        Args:
            message: Error message, safe to show to the client
            status_code: HTTP status code override
        """
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    @property
    def is_server_error(self) -> bool:
        return self.status_code >= 500


class NotFoundError(InsightAuthError):
    """Raised when an email/token/organization combination does not resolve."""

    status_code = 404

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message)


class ExpiredError(InsightAuthError):
    """Raised when a single-use token is past its window."""

    status_code = 400

    def __init__(self, message: str = "Request expired") -> None:
        super().__init__(message)


class ConflictError(InsightAuthError):
    """Raised on OAuth state mismatch or a conflicting account."""

    status_code = 400

    def __init__(self, message: str = "Conflict") -> None:
        super().__init__(message)


class InvalidCredentialsError(InsightAuthError):
    """Raised when login fails, whatever the reason."""

    status_code = 400

    def __init__(self, message: str = "Invalid email or password") -> None:
        super().__init__(message)


class DispatchError(InsightAuthError):
    """Raised when an outgoing message could not be sent."""

    status_code = 500

    def __init__(self, message: str = "Failed to send email") -> None:
        super().__init__(message)


class PersistenceError(InsightAuthError):
    """Raised when a transaction could not be written or committed."""

    status_code = 500

    def __init__(self, message: str = "Something went wrong, please try again") -> None:
        super().__init__(message)


class IdentityProviderError(InsightAuthError):
    """Raised when the OAuth code exchange or profile fetch fails."""

    status_code = 500

    def __init__(self, message: str = "Failed to sign in with identity provider") -> None:
        super().__init__(message)


class InvalidPasswordError(InsightAuthError, ValueError):
    """Raised when a new password does not meet the length policy."""

    status_code = 400

    def __init__(self, message: str = "Invalid password") -> None:
        super().__init__(message)
