# app/api/v1/endpoints/auth.py

import logging
from fastapi import APIRouter, HTTPException, status, Depends

from app.api.deps import get_current_user
from app.models.auth import (
    AdminLoginRequest,
    AdminRegisterRequest,
    AuthResult,
    ChangePasswordRequest,
    LoginRequest,
    RefreshTokenRequest,
    RegisterRequest,
)
from app.models.common import ApiResponse
from app.models.user import User
from app.services.auth_service import AuthService, get_auth_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"]
)

@router.post(
    "/register",
    response_model=ApiResponse[AuthResult],
    status_code=status.HTTP_201_CREATED,
    summary="Register an interviewer account",
    description="Creates an INTERVIEWER account with a generated INT##### identifier and returns a token pair."
)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = await auth_service.register(request)
    return ApiResponse[AuthResult](message="Registration successful", data=result)

@router.post(
    "/login",
    response_model=ApiResponse[AuthResult],
    summary="Log in with interviewer ID and password",
)
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = await auth_service.login(request)
    return ApiResponse[AuthResult](message="Login successful", data=result)

@router.post(
    "/admin/login",
    response_model=ApiResponse[AuthResult],
    summary="Log in as an administrator with email and password",
)
async def admin_login(
    request: AdminLoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    result = await auth_service.admin_login(request)
    return ApiResponse[AuthResult](message="Admin login successful", data=result)

@router.post(
    "/admin/register",
    response_model=ApiResponse[AuthResult],
    status_code=status.HTTP_201_CREATED,
    summary="Create an administrator account",
    description=(
        "Creates an ADMIN account with an ADMIN##### identifier. The route is not "
        "authenticated; restrict it at the network layer in deployed environments."
    )
)
async def create_admin_account(
    request: AdminRegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    logger.warning(f"Admin account creation requested for {request.email}")
    result = await auth_service.create_admin_account(request)
    return ApiResponse[AuthResult](message="Admin account created successfully", data=result)

@router.post(
    "/refresh",
    response_model=ApiResponse[AuthResult],
    summary="Exchange a refresh token for a new token pair",
)
async def refresh_token(
    request: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
):
    if not request.refresh_token:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Refresh token is required")
    result = await auth_service.refresh(request.refresh_token)
    return ApiResponse[AuthResult](message="Token refreshed successfully", data=result)

@router.get(
    "/me",
    response_model=ApiResponse[User],
    summary="Get the authenticated user's profile",
)
async def read_current_user(current_user: User = Depends(get_current_user)):
    return ApiResponse[User](message="User profile retrieved successfully", data=current_user)

@router.post(
    "/change-password",
    response_model=ApiResponse[None],
    summary="Change the authenticated user's password",
)
async def change_password(
    request: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
):
    await auth_service.change_password(current_user.id, request)
    return ApiResponse[None](message="Password changed successfully")
