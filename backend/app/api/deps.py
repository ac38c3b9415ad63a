import logging
import uuid
from typing import Any, Callable, Dict, NamedTuple, Optional

from fastapi import Depends, HTTPException, Query, status

from app.core.security import get_current_user_payload
from app.db import crud
from app.models.enums import UserRole
from app.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

class PageParams(NamedTuple):
    page: int
    limit: int

def get_page_params(
    page: int = Query(1, description="1-based page number; values below 1 are treated as 1"),
    limit: int = Query(DEFAULT_PAGE_SIZE, description=f"Page size, clamped to 1..{MAX_PAGE_SIZE}"),
) -> PageParams:
    """Out-of-range paging values are clamped rather than rejected."""
    return PageParams(page=max(page, 1), limit=min(max(limit, 1), MAX_PAGE_SIZE))

def get_age_range(
    age_range: Optional[str] = Query(None, alias="ageRange", description="Age filter as 'min-max'; either side may be open"),
) -> Optional[str]:
    """Rejects a malformed age range with 400 before any query runs."""
    try:
        crud.parse_age_range(age_range)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return age_range

async def get_current_user(
    payload: Dict[str, Any] = Depends(get_current_user_payload),
) -> User:
    """Re-reads the token's user so deactivation takes effect on the next request."""
    try:
        user_id = uuid.UUID(payload["userId"])
    except (KeyError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await crud.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account is deactivated",
        )
    return user

def require_roles(*roles: UserRole) -> Callable:
    """Dependency factory admitting only users whose role is one of `roles`."""
    allowed = {role.value for role in roles}

    async def _check_role(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed:
            logger.warning(
                f"User {current_user.interviewer_id} ({current_user.role}) denied; requires one of {sorted(allowed)}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return current_user

    return _check_role

require_admin = require_roles(UserRole.ADMIN)
require_supervisor = require_roles(UserRole.SUPERVISOR, UserRole.ADMIN)

def ensure_owner_or_admin(current_user: User, owner_interviewer_id: str) -> None:
    """Raises 403 unless the caller recorded the resource or is an ADMIN."""
    if current_user.role == UserRole.ADMIN.value:
        return
    if current_user.interviewer_id != owner_interviewer_id:
        logger.warning(
            f"User {current_user.interviewer_id} denied access to a record owned by {owner_interviewer_id}"
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )
