# app/api/v1/endpoints/users.py

import uuid
import logging
from typing import Optional
from fastapi import APIRouter, HTTPException, status, Query, Depends

from app.api.deps import PageParams, get_page_params, require_admin
from app.core.security import get_password_hash
from app.db import crud
from app.models.common import ApiResponse, PaginatedResponse, build_pagination
from app.models.enums import UserRole
from app.models.user import User, UserCreate, UserPasswordSet, UserUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"]
)

def _conflict_detail(fields) -> str:
    return "Email already exists" if "email" in fields else "Interviewer ID already exists"

async def _get_user_or_404(user_id: uuid.UUID) -> User:
    user = await crud.get_user_by_id(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user

@router.get(
    "/",
    response_model=PaginatedResponse[User],
    summary="List user accounts (Admin)",
    description="Search over name, interviewer ID and email, with optional role, LGA and active filters."
)
async def read_users(
    paging: PageParams = Depends(get_page_params),
    search: Optional[str] = Query(None),
    role: Optional[UserRole] = Query(None),
    lga: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None, alias="isActive"),
    current_user: User = Depends(require_admin),
):
    users, total = await crud.get_users(
        page=paging.page,
        limit=paging.limit,
        search=search,
        role=role.value if role else None,
        lga=lga,
        is_active=is_active,
    )
    return PaginatedResponse[User](
        message="Users retrieved successfully",
        data=users,
        pagination=build_pagination(total, paging.page, paging.limit),
    )

@router.get(
    "/{user_id}",
    response_model=ApiResponse[User],
    summary="Get a user account by ID (Admin)",
)
async def read_user(user_id: uuid.UUID, current_user: User = Depends(require_admin)):
    user = await _get_user_or_404(user_id)
    return ApiResponse[User](message="User retrieved successfully", data=user)

@router.post(
    "/",
    response_model=ApiResponse[User],
    status_code=status.HTTP_201_CREATED,
    summary="Create a user account with any role (Admin)",
)
async def create_new_user(user_in: UserCreate, current_user: User = Depends(require_admin)):
    if await crud.interviewer_id_exists(user_in.interviewer_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Interviewer ID already exists")
    if user_in.email and await crud.email_exists(user_in.email):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    try:
        user = await crud.create_user(user_in, get_password_hash(user_in.password))
    except crud.DuplicateRecordError as e:
        logger.warning(f"User creation by {current_user.interviewer_id} hit a unique index on {e.fields}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_conflict_detail(e.fields)) from e

    logger.info(f"Admin {current_user.interviewer_id} created user {user.interviewer_id} ({user.role})")
    return ApiResponse[User](message="User created successfully", data=user)

@router.put(
    "/{user_id}",
    response_model=ApiResponse[User],
    summary="Update a user account (Admin)",
    description="Partial update. A changed interviewer ID or email is re-checked for uniqueness; a password is re-hashed."
)
async def update_existing_user(
    user_id: uuid.UUID,
    user_in: UserUpdate,
    current_user: User = Depends(require_admin),
):
    existing = await _get_user_or_404(user_id)

    if user_in.interviewer_id and user_in.interviewer_id != existing.interviewer_id:
        if await crud.interviewer_id_exists(user_in.interviewer_id, exclude_id=user_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Interviewer ID already exists")
    if user_in.email and user_in.email != existing.email:
        if await crud.email_exists(user_in.email, exclude_id=user_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already exists")

    update_data = user_in.model_dump(exclude_unset=True)
    password = update_data.pop("password", None)
    if password:
        update_data["password_hash"] = get_password_hash(password)

    try:
        updated = await crud.update_user(user_id, update_data)
    except crud.DuplicateRecordError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=_conflict_detail(e.fields)) from e
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    logger.info(f"Admin {current_user.interviewer_id} updated user {updated.interviewer_id}")
    return ApiResponse[User](message="User updated successfully", data=updated)

@router.delete(
    "/{user_id}",
    response_model=ApiResponse[None],
    summary="Delete a user account (Admin)",
)
async def delete_existing_user(user_id: uuid.UUID, current_user: User = Depends(require_admin)):
    user = await _get_user_or_404(user_id)
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")

    await crud.delete_user(user_id)
    logger.info(f"Admin {current_user.interviewer_id} deleted user {user.interviewer_id}")
    return ApiResponse[None](message="User deleted successfully")

@router.patch(
    "/{user_id}/toggle-status",
    response_model=ApiResponse[User],
    summary="Flip a user's active flag (Admin)",
)
async def toggle_user_status(user_id: uuid.UUID, current_user: User = Depends(require_admin)):
    user = await _get_user_or_404(user_id)
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot change your own account status")

    updated = await crud.update_user(user_id, {"is_active": not user.is_active})
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    state = "activated" if updated.is_active else "deactivated"
    logger.info(f"Admin {current_user.interviewer_id} {state} user {updated.interviewer_id}")
    return ApiResponse[User](message=f"User {state} successfully", data=updated)

@router.patch(
    "/{user_id}/password",
    response_model=ApiResponse[None],
    summary="Set a user's password (Admin)",
)
async def set_user_password(
    user_id: uuid.UUID,
    password_in: UserPasswordSet,
    current_user: User = Depends(require_admin),
):
    user = await _get_user_or_404(user_id)
    await crud.set_user_password(user_id, get_password_hash(password_in.password))
    logger.info(f"Admin {current_user.interviewer_id} reset the password of {user.interviewer_id}")
    return ApiResponse[None](message="Password updated successfully")

@router.patch(
    "/{user_id}/deactivate",
    response_model=ApiResponse[User],
    summary="Deactivate a user account (Admin)",
)
async def deactivate_user(user_id: uuid.UUID, current_user: User = Depends(require_admin)):
    user = await _get_user_or_404(user_id)
    if user.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot change your own account status")

    updated = await crud.update_user(user_id, {"is_active": False})
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    logger.info(f"Admin {current_user.interviewer_id} deactivated user {updated.interviewer_id}")
    return ApiResponse[User](message="User deactivated successfully", data=updated)
