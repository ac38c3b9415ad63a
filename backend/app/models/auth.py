# app/models/auth.py
from pydantic import EmailStr, Field, field_validator
from typing import Optional

from .common import CamelModel, InterviewerId, NigerianPhone
from .user import User

class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

class AdminRegisterRequest(RegisterRequest):
    phone: Optional[NigerianPhone] = None
    lga: str = ""

class LoginRequest(CamelModel):
    interviewer_id: InterviewerId
    password: str = Field(..., min_length=6, max_length=100)

class AdminLoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: str) -> str:
        return value.lower()

class RefreshTokenRequest(CamelModel):
    refresh_token: Optional[str] = None

class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=6)
    new_password: str = Field(..., min_length=6, max_length=100)

class TokenPair(CamelModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"

class AuthResult(CamelModel):
    """Body returned by register, login and refresh."""
    user: User
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
