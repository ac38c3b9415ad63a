# app/services/auth_service.py
import logging
import secrets
import uuid
from typing import Optional

from fastapi import HTTPException, status

from app.core.config import settings
from app.core.security import (
    TokenValidationError,
    build_token_claims,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    verify_password,
)
from app.db import crud
from app.models.auth import (
    AdminLoginRequest,
    AdminRegisterRequest,
    AuthResult,
    ChangePasswordRequest,
    LoginRequest,
    RegisterRequest,
)
from app.models.enums import UserRole
from app.models.user import User, UserBase, UserInDB

logger = logging.getLogger(__name__)

INTERVIEWER_ID_PREFIX = "INT"
ADMIN_ID_PREFIX = "ADMIN"

class IdentifierGenerationError(RuntimeError):
    """Raised when no free interviewer ID was found within the retry budget."""
    pass

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

class AuthService:
    """Registration, login and token rotation on top of the users collection."""

    def __init__(self, max_id_attempts: Optional[int] = None):
        self.max_id_attempts = max_id_attempts or settings.INTERVIEWER_ID_MAX_ATTEMPTS

    async def generate_interviewer_id(self, prefix: str = INTERVIEWER_ID_PREFIX) -> str:
        """Random `<prefix>#####` identifier not yet used by any account."""
        for attempt in range(1, self.max_id_attempts + 1):
            candidate = f"{prefix}{secrets.randbelow(100000):05d}"
            if not await crud.interviewer_id_exists(candidate):
                return candidate
            logger.info(f"Interviewer ID {candidate} already taken (attempt {attempt}/{self.max_id_attempts}).")
        logger.error(f"Could not generate a free {prefix} identifier after {self.max_id_attempts} attempts.")
        raise IdentifierGenerationError(f"No free {prefix} identifier after {self.max_id_attempts} attempts")

    def issue_tokens(self, user: User) -> AuthResult:
        claims = build_token_claims(user)
        return AuthResult(
            user=User.model_validate(user.model_dump(by_alias=True)),
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token(claims),
        )

    async def _create_account(self, request: RegisterRequest, role: UserRole, prefix: str, phone: Optional[str] = None, lga: str = "") -> AuthResult:
        if await crud.email_exists(request.email):
            logger.warning(f"Registration rejected, email already in use: {request.email}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

        interviewer_id = await self.generate_interviewer_id(prefix)
        user_in = UserBase(
            interviewer_id=interviewer_id,
            name=request.name,
            email=request.email,
            phone=phone,
            lga=lga,
            role=role,
            is_active=True,
        )
        try:
            user = await crud.create_user(user_in, get_password_hash(request.password))
        except crud.DuplicateRecordError as e:
            # The unique indexes caught a concurrent registration
            detail = "Email already exists" if "email" in e.fields else "Interviewer ID already exists"
            logger.warning(f"Registration lost a race on {e.fields}: {detail}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail) from e

        logger.info(f"Registered {role.value} account {user.interviewer_id}")
        return self.issue_tokens(user)

    async def register(self, request: RegisterRequest) -> AuthResult:
        return await self._create_account(request, UserRole.INTERVIEWER, INTERVIEWER_ID_PREFIX)

    async def create_admin_account(self, request: AdminRegisterRequest) -> AuthResult:
        return await self._create_account(
            request, UserRole.ADMIN, ADMIN_ID_PREFIX, phone=request.phone, lga=request.lga
        )

    async def _complete_login(self, user: UserInDB) -> AuthResult:
        await crud.record_login(user.id)
        logger.info(f"User {user.interviewer_id} logged in")
        return self.issue_tokens(user)

    async def login(self, request: LoginRequest) -> AuthResult:
        user = await crud.get_user_by_interviewer_id(request.interviewer_id)
        if user is None:
            logger.warning(f"Login failed: unknown interviewer ID {request.interviewer_id}")
            raise _unauthorized("Invalid credentials")
        if not user.is_active:
            logger.warning(f"Login failed: account {request.interviewer_id} is deactivated")
            raise _unauthorized("Account is deactivated")
        if not verify_password(request.password, user.password_hash):
            logger.warning(f"Login failed: wrong password for {request.interviewer_id}")
            raise _unauthorized("Invalid credentials")
        return await self._complete_login(user)

    async def admin_login(self, request: AdminLoginRequest) -> AuthResult:
        user = await crud.get_user_by_email(request.email)
        if user is None:
            logger.warning(f"Admin login failed: unknown email {request.email}")
            raise _unauthorized("Invalid credentials")
        if not user.is_active:
            logger.warning(f"Admin login failed: account {user.interviewer_id} is deactivated")
            raise _unauthorized("Account is deactivated")
        if not verify_password(request.password, user.password_hash):
            logger.warning(f"Admin login failed: wrong password for {user.interviewer_id}")
            raise _unauthorized("Invalid credentials")
        if user.role != UserRole.ADMIN:
            logger.warning(f"Admin login refused for non-admin {user.interviewer_id} ({user.role})")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin access required")
        return await self._complete_login(user)

    async def refresh(self, refresh_token: str) -> AuthResult:
        """Verifies a refresh token and issues a fresh pair. The old token is not revoked."""
        try:
            payload = decode_refresh_token(refresh_token)
            user_id = uuid.UUID(payload["userId"])
        except (TokenValidationError, ValueError) as e:
            logger.warning(f"Refresh rejected: {e}")
            raise _unauthorized("Invalid refresh token") from e

        user = await crud.get_user_by_id(user_id)
        if user is None or not user.is_active:
            logger.warning(f"Refresh rejected: user {user_id} missing or inactive")
            raise _unauthorized("Invalid refresh token")
        return self.issue_tokens(user)

    async def change_password(self, user_id: uuid.UUID, request: ChangePasswordRequest) -> None:
        user = await crud.get_user_in_db_by_id(user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        if not verify_password(request.current_password, user.password_hash):
            logger.warning(f"Password change rejected for {user.interviewer_id}: current password mismatch")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Current password is incorrect")
        await crud.set_user_password(user_id, get_password_hash(request.new_password))
        logger.info(f"Password changed for {user.interviewer_id}")

def get_auth_service() -> AuthService:
    """FastAPI dependency returning the auth service."""
    return AuthService()
