# app/models/user.py
from pydantic import EmailStr, Field, field_validator
from typing import Optional
from datetime import datetime, timezone
import uuid

from .common import CamelModel, InterviewerId, NigerianPhone, NonEmptyStr, PartialUpdate
from .enums import UserRole

# Shared base properties
class UserBase(CamelModel):
    interviewer_id: InterviewerId = Field(..., description="Human-facing field identifier, e.g. INT12345")
    name: str = Field(..., min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[NigerianPhone] = None
    lga: str = Field(default="", description="Local Government Area the account works in")
    role: UserRole = UserRole.INTERVIEWER
    is_active: bool = True

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value

# Properties required when an admin creates an account
class UserCreate(UserBase):
    lga: NonEmptyStr
    password: str = Field(..., min_length=6, max_length=100)

# Properties allowed on admin update; a password here is re-hashed
class UserUpdate(PartialUpdate):
    nullable_fields = frozenset({"email", "phone"})

    interviewer_id: Optional[InterviewerId] = None
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[NigerianPhone] = None
    lga: Optional[NonEmptyStr] = None
    role: Optional[UserRole] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(default=None, min_length=6, max_length=100)

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, value: Optional[str]) -> Optional[str]:
        return value.lower() if value else value

class UserPasswordSet(CamelModel):
    password: str = Field(..., min_length=6, max_length=100)

# Properties stored in DB
class UserInDBBase(UserBase):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="_id")
    last_login: Optional[datetime] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# Public representation, never carries the password hash
class User(UserInDBBase):
    pass

# Internal representation used for credential checks
class UserInDB(UserInDBBase):
    password_hash: str
