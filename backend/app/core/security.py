# app/core/security.py
"""
Security module for password hashing and JWT handling.

Provides functionality for:
- bcrypt password hashing and verification.
- Issuing access and refresh tokens, each signed with its own secret.
- Token validation (signature, expiry, token type).
- FastAPI dependency that extracts and validates the bearer token.
- Custom exceptions for specific security errors.

Tokens are stateless. There is no server-side revocation list: a token stays
valid until it expires, and deactivating an account only takes effect when the
account is re-read on the next authenticated request.

Example Usage in Endpoints:
    ```python
    from fastapi import APIRouter, Depends
    from typing import Dict, Any
    from app.core.security import get_current_user_payload

    router = APIRouter()

    @router.get("/whoami")
    async def whoami(payload: Dict[str, Any] = Depends(get_current_user_payload)):
        return {"interviewerId": payload.get("interviewerId")}
    ```
"""

import logging
from typing import Dict, Any, Optional
from datetime import datetime, timedelta, timezone

import bcrypt
from jose import jwt, exceptions as jose_exceptions

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from .config import settings

logger = logging.getLogger(__name__)

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"

# --- Custom Exceptions ---
class SecurityError(Exception):
    """Base class for security-related exceptions."""
    pass

class TokenValidationError(SecurityError):
    """Raised when token validation fails (expiry, signature, claims, etc.)."""
    pass

# --- Password Hashing ---

def get_password_hash(password: str) -> str:
    """Hash a password with bcrypt using BCRYPT_ROUNDS."""
    # bcrypt only looks at the first 72 bytes
    password_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(password_bytes, bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS))
    return hashed.decode('utf-8')

def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a plain password against a stored bcrypt hash."""
    if not hashed_password:
        return False
    password_bytes = plain_password.encode('utf-8')[:72]
    try:
        return bcrypt.checkpw(password_bytes, hashed_password.encode('utf-8'))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash.")
        return False

# --- Token Issuing ---

def build_token_claims(user: Any) -> Dict[str, Any]:
    """Claims shared by both token types, taken from a User model."""
    return {
        "userId": str(user.id),
        "interviewerId": user.interviewer_id,
        "role": user.role,
        "lga": user.lga or "",
    }

def create_access_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = claims.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire, "type": ACCESS_TOKEN_TYPE})
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

def create_refresh_token(claims: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    to_encode = claims.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))
    to_encode.update({"exp": expire, "type": REFRESH_TOKEN_TYPE})
    return jwt.encode(to_encode, settings.JWT_REFRESH_SECRET, algorithm=settings.JWT_ALGORITHM)

# --- Token Validation ---

def _decode(token: str, secret: str, expected_type: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.JWT_ALGORITHM])
    except jose_exceptions.ExpiredSignatureError:
        raise TokenValidationError("Token validation failed: Expired signature.")
    except jose_exceptions.JWTClaimsError as e:
        raise TokenValidationError(f"Token validation failed: Invalid claims - {e}")
    except jose_exceptions.JWTError as e:
        raise TokenValidationError(f"Token validation failed: Invalid token - {e}")

    if payload.get("type") != expected_type:
        raise TokenValidationError(f"Token validation failed: expected a {expected_type} token.")
    if not payload.get("userId"):
        raise TokenValidationError("Token validation failed: missing userId claim.")
    return payload

def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Validates an access token and returns its payload.

    Raises:
        TokenValidationError: on bad signature, expiry, wrong token type or missing claims.
    """
    return _decode(token, settings.JWT_SECRET, ACCESS_TOKEN_TYPE)

def decode_refresh_token(token: str) -> Dict[str, Any]:
    """Same as decode_access_token, against the refresh secret."""
    return _decode(token, settings.JWT_REFRESH_SECRET, REFRESH_TOKEN_TYPE)

# --- FastAPI Dependency for Authentication ---

# auto_error=False so a missing token produces our own 401 message
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_PREFIX}/auth/login", auto_error=False)

async def get_current_user_payload(
    token: Optional[str] = Depends(oauth2_scheme)
) -> Dict[str, Any]:
    """
    FastAPI dependency returning the validated access token payload.

    Raises:
        HTTPException(401): If token is missing, invalid, expired, or of the wrong type.
    """
    if token is None:
        logger.warning("Authentication attempt failed: No token provided.")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Access token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return decode_access_token(token)
    except TokenValidationError as e:
        logger.warning(f"Authentication failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
