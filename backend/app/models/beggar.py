# app/models/beggar.py
from pydantic import Field
from typing import Optional
from datetime import datetime, timezone
import uuid

from .common import CamelModel, NigerianPhone, NonEmptyStr, PartialUpdate, UrlStr
from .enums import Gender

# Shared base properties
class BeggarBase(CamelModel):
    beggar_id: NonEmptyStr = Field(..., description="Survey-assigned identifier, unique across all beggars")
    name: str = Field(..., min_length=2, max_length=100)
    age: int = Field(..., ge=0, le=120)
    sex: Gender
    nationality: NonEmptyStr
    state_of_origin: NonEmptyStr
    lga: NonEmptyStr
    town_village: NonEmptyStr
    permanent_home_address: str = Field(..., min_length=5, max_length=500)
    fathers_contact_number: Optional[NigerianPhone] = None
    contact_number: Optional[NigerianPhone] = None
    is_begging: bool = False
    reason_for_begging: Optional[str] = None
    nin: Optional[str] = None
    picture_url: Optional[UrlStr] = None

# Properties required on creation
class BeggarCreate(BeggarBase):
    pass

# Model for updating
class BeggarUpdate(PartialUpdate):
    nullable_fields = frozenset({
        "fathers_contact_number", "contact_number", "reason_for_begging", "nin", "picture_url",
    })

    beggar_id: Optional[NonEmptyStr] = None
    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    age: Optional[int] = Field(default=None, ge=0, le=120)
    sex: Optional[Gender] = None
    nationality: Optional[NonEmptyStr] = None
    state_of_origin: Optional[NonEmptyStr] = None
    lga: Optional[NonEmptyStr] = None
    town_village: Optional[NonEmptyStr] = None
    permanent_home_address: Optional[str] = Field(default=None, min_length=5, max_length=500)
    fathers_contact_number: Optional[NigerianPhone] = None
    contact_number: Optional[NigerianPhone] = None
    is_begging: Optional[bool] = None
    reason_for_begging: Optional[str] = None
    nin: Optional[str] = None
    picture_url: Optional[UrlStr] = None

# Properties stored in DB
class BeggarInDBBase(BeggarBase):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="_id")
    interviewer_id: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# Final model representing a Beggar read from DB
class Beggar(BeggarInDBBase):
    pass

class BeggarSummary(CamelModel):
    """Projection used in recent-activity lists."""
    id: uuid.UUID = Field(..., alias="_id")
    name: str
    lga: Optional[str] = None
    is_begging: bool = False
    created_at: datetime
