"""Unit tests for password security"""

import pytest

from insight_auth.exceptions import InvalidPasswordError
from insight_auth.security.password import hash_password, validate_password, verify_password


@pytest.mark.unit
def test_hash_password():
    """Test password hashing"""
    password = "test_password_123"
    hashed = hash_password(password)

    assert hashed != password
    assert hashed.startswith("$2b$")  # bcrypt hash format


@pytest.mark.unit
def test_verify_password_correct():
    hashed = hash_password("test_password_123")

    assert verify_password("test_password_123", hashed) is True


@pytest.mark.unit
def test_verify_password_incorrect():
    hashed = hash_password("test_password_123")

    assert verify_password("wrong_password", hashed) is False


@pytest.mark.unit
def test_hash_password_different_hashes():
    """Same password produces different hashes (salt), both verify"""
    hashed1 = hash_password("test_password_123")
    hashed2 = hash_password("test_password_123")

    assert hashed1 != hashed2
    assert verify_password("test_password_123", hashed1) is True
    assert verify_password("test_password_123", hashed2) is True


@pytest.mark.unit
@pytest.mark.parametrize("password_hash", [None, "", "not-a-bcrypt-hash"])
def test_verify_password_without_usable_hash(password_hash):
    assert verify_password("test_password_123", password_hash) is False


@pytest.mark.unit
def test_validate_password_length():
    assert validate_password("12345678") == "12345678"

    with pytest.raises(ValueError, match="at least 8 characters"):
        validate_password("short")

    with pytest.raises(ValueError, match="at most 72 bytes"):
        validate_password("x" * 129)


@pytest.mark.unit
def test_validate_password_limit_is_in_bytes():
    assert validate_password("a" * 72) == "a" * 72

    with pytest.raises(InvalidPasswordError, match="at most 72 bytes"):
        validate_password("a" * 73)
    # 36 characters, 72 bytes
    assert validate_password("é" * 36) == "é" * 36
    # 37 characters, 74 bytes
    with pytest.raises(InvalidPasswordError, match="at most 72 bytes"):
        validate_password("é" * 37)


@pytest.mark.unit
def test_hash_password_refuses_to_truncate():
    with pytest.raises(ValueError):
        hash_password("a" * 72 + "suffix")


@pytest.mark.unit
def test_candidate_sharing_first_72_bytes_does_not_verify():
    hashed = hash_password("a" * 72)

    assert verify_password("a" * 72, hashed) is True
    assert verify_password("a" * 72 + "totally-wrong", hashed) is False
