"""Password hashing, token and validation tests."""

import pytest

from user_service.errors import InvalidInput
from user_service.schemas.account import LoginAccountRequest, RegisterAccountRequest
from user_service.services.security import generate_token
from user_service.services.validation import Validator


def test_hash_and_verify(hasher):
    """Test that a hash verifies only the original password."""
    password_hash = hasher.hash("correct horse")

    assert password_hash != "correct horse"
    assert len(password_hash) <= 100
    assert hasher.verify("correct horse", password_hash)
    assert not hasher.verify("battery staple", password_hash)


def test_hash_is_salted(hasher):
    """Test that hashing the same password twice gives different hashes."""
    assert hasher.hash("same password") != hasher.hash("same password")


def test_hash_uses_configured_rounds(hasher):
    """Test that the work factor is encoded in the hash."""
    assert hasher.hash("pw").startswith("$2b$04$")


def test_generate_token_is_unique():
    """Test that tokens are non-empty and not repeated."""
    tokens = {generate_token() for _ in range(100)}
    assert len(tokens) == 100
    assert all(len(token) >= 32 for token in tokens)


def test_validator_accepts_valid_registration():
    """Test that a valid payload is parsed and normalized."""
    request = Validator().validate(
        RegisterAccountRequest,
        {"name": "  Jane  ", "email": "jane@example.com", "phone": "  ", "password": "pw"},
    )
    assert request.name == "Jane"
    assert request.phone is None


@pytest.mark.parametrize(
    "payload",
    [
        {"email": "jane@example.com", "password": "pw"},
        {"name": "Jane", "email": "not-an-email", "password": "pw"},
        {"name": "Jane", "email": "jane@example.com", "password": ""},
        {"name": "Jane", "email": "jane@example.com", "password": "x" * 101},
        {"name": "Jane", "email": "jane@example.com", "phone": "1" * 51, "password": "pw"},
        {"name": "   ", "email": "jane@example.com", "password": "pw"},
    ],
)
def test_validator_rejects_invalid_registration(payload):
    """Test the declared field constraints."""
    with pytest.raises(InvalidInput):
        Validator().validate(RegisterAccountRequest, payload)


def test_validator_rejects_non_object():
    """Test that a payload which is not a mapping is rejected."""
    with pytest.raises(InvalidInput):
        Validator().validate(LoginAccountRequest, ["jane@example.com", "pw"])


def test_validator_message_omits_values():
    """Test that rejected values are not echoed back."""
    with pytest.raises(InvalidInput) as excinfo:
        Validator().validate(
            LoginAccountRequest, {"email": "jane@example.com", "password": "s3cret" * 20}
        )
    assert "password" in excinfo.value.message
    assert "s3cret" not in excinfo.value.message


def test_hash_refuses_password_beyond_bcrypt_limit(hasher):
    """Test that bcrypt never silently drops the tail of a long password."""
    with pytest.raises(ValueError):
        hasher.hash("a" * 73)


def test_validator_accepts_password_at_bcrypt_limit():
    """Test that exactly 72 bytes is still a usable password."""
    request = Validator().validate(
        LoginAccountRequest, {"email": "jane@example.com", "password": "a" * 72}
    )
    assert request.password == "a" * 72


@pytest.mark.parametrize(
    "password",
    ["a" * 73, "é" * 37, "pass\x00word", "\x00"],
    ids=["ascii-73", "multibyte-74", "embedded-nul", "only-nul"],
)
def test_validator_rejects_unhashable_password(password):
    """Test passwords bcrypt would truncate or refuse."""
    with pytest.raises(InvalidInput) as excinfo:
        Validator().validate(
            LoginAccountRequest, {"email": "jane@example.com", "password": password}
        )
    assert "password" in excinfo.value.message
