"""Password hashing"""

from passlib.context import CryptContext

from insight_auth.config import settings
from insight_auth.exceptions import InvalidPasswordError

MIN_PASSWORD_LENGTH = 8
# bcrypt only reads the first 72 bytes of the encoded password
MAX_PASSWORD_BYTES = 72

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_HASH_ROUNDS,
    bcrypt__truncate_error=True,
)


def _too_long(password: str) -> bool:
    return len(password.encode("utf-8")) > MAX_PASSWORD_BYTES


def hash_password(password: str) -> str:
    """Hash a password with a per-call salt; longer than 72 bytes is refused"""
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a candidate password; a missing or malformed hash never matches"""
    if not password_hash or _too_long(password):
        pwd_context.dummy_verify()
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        return False


def dummy_verify() -> None:
    """Spend the time of a real verification (unknown account)"""
    pwd_context.dummy_verify()


def validate_password(password: str) -> str:
    """
    Check a new password against the length policy.

    Raises:
        InvalidPasswordError: If the password is too short, or longer than
            bcrypt can hash without truncating (72 bytes as UTF-8)
    """
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidPasswordError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
    if _too_long(password):
        raise InvalidPasswordError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
    return password
