# tests/functional/core/test_security.py

import pytest
import uuid
from datetime import timedelta
from jose import jwt
from fastapi import HTTPException

from app.core.config import settings
from app.core.security import (
    build_token_claims,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    get_current_user_payload,
    get_password_hash,
    verify_password,
    TokenValidationError,
    SecurityError,
)
from app.models.enums import UserRole
from app.models.user import User

@pytest.fixture
def claims() -> dict:
    user = User(
        id=uuid.uuid4(),
        interviewer_id="INT12345",
        name="Amina Bello",
        email="amina@example.com",
        lga="Dala",
        role=UserRole.INTERVIEWER,
    )
    return build_token_claims(user)

# --- Password Hashing ---

def test_password_hash_round_trip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert hashed.startswith("$2")
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)

def test_password_hash_is_salted():
    assert get_password_hash("secret123") != get_password_hash("secret123")

def test_verify_password_rejects_missing_or_malformed_hash():
    assert verify_password("secret123", None) is False
    assert verify_password("secret123", "") is False
    assert verify_password("secret123", "not-a-bcrypt-hash") is False

def test_passwords_longer_than_72_bytes_compare_on_prefix():
    base = "a" * 72
    hashed = get_password_hash(base + "tail-one")
    assert verify_password(base + "tail-two", hashed)

# --- Token Claims ---

def test_build_token_claims(claims):
    assert claims["interviewerId"] == "INT12345"
    assert claims["role"] == "INTERVIEWER"
    assert claims["lga"] == "Dala"
    uuid.UUID(claims["userId"])

def test_access_token_round_trip(claims):
    payload = decode_access_token(create_access_token(claims))
    assert payload["userId"] == claims["userId"]
    assert payload["interviewerId"] == "INT12345"
    assert payload["type"] == "access"
    assert "exp" in payload

def test_refresh_token_round_trip(claims):
    payload = decode_refresh_token(create_refresh_token(claims))
    assert payload["userId"] == claims["userId"]
    assert payload["type"] == "refresh"

def test_tokens_are_not_interchangeable(claims):
    with pytest.raises(TokenValidationError):
        decode_refresh_token(create_access_token(claims))
    with pytest.raises(TokenValidationError):
        decode_access_token(create_refresh_token(claims))

def test_access_and_refresh_use_different_secrets(claims):
    token = create_access_token(claims)
    with pytest.raises(Exception):
        jwt.decode(token, settings.JWT_REFRESH_SECRET, algorithms=[settings.JWT_ALGORITHM])

def test_expired_token_rejected(claims):
    token = create_access_token(claims, expires_delta=timedelta(seconds=-10))
    with pytest.raises(TokenValidationError, match="Expired"):
        decode_access_token(token)

def test_tampered_token_rejected(claims):
    header, body, signature = create_access_token(claims).split(".")
    signature = ("B" if signature[0] == "A" else "A") + signature[1:]
    with pytest.raises(TokenValidationError):
        decode_access_token(f"{header}.{body}.{signature}")

def test_token_without_user_id_rejected():
    token = jwt.encode({"type": "access"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    with pytest.raises(TokenValidationError, match="userId"):
        decode_access_token(token)

def test_token_validation_error_is_security_error():
    assert issubclass(TokenValidationError, SecurityError)

# --- Dependency ---

@pytest.mark.asyncio
async def test_get_current_user_payload_requires_token():
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user_payload(token=None)
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Access token required"

@pytest.mark.asyncio
async def test_get_current_user_payload_rejects_bad_token():
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user_payload(token="not.a.jwt")
    assert exc_info.value.status_code == 401
    assert exc_info.value.detail == "Invalid or expired token"

@pytest.mark.asyncio
async def test_get_current_user_payload_returns_claims(claims):
    payload = await get_current_user_payload(token=create_access_token(claims))
    assert payload["interviewerId"] == "INT12345"
