"""Opaque token generation"""

import hashlib
import secrets
import string

ORGANIZATION_ID_LENGTH = 6
ORGANIZATION_ID_ALPHABET = string.ascii_lowercase + string.digits


def new_token() -> str:
    """Generate a URL and cookie safe token with 256 bits of entropy"""
    return secrets.token_urlsafe(32)


def hash_token(token: str) -> str:
    """Hash a token for storage"""
    return hashlib.sha256(token.encode()).hexdigest()


def new_organization_id() -> str:
    """Generate a subdomain-like organization identifier"""
    return "".join(
        secrets.choice(ORGANIZATION_ID_ALPHABET) for _ in range(ORGANIZATION_ID_LENGTH)
    )
