# app/models/draft.py
from pydantic import Field
from typing import Any, Optional
from datetime import datetime, timezone
import uuid

from .common import CamelModel, NonEmptyStr
from .enums import DraftType

# `data` is whatever half-filled form state the client holds; it is stored as-is.

class DraftCreate(CamelModel):
    draft_id: NonEmptyStr
    type: DraftType
    data: Any = None

class DraftUpdate(CamelModel):
    data: Any = None

class DraftInDBBase(CamelModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="_id")
    draft_id: str
    type: DraftType
    data: Any = None
    interviewer_id: str
    last_saved: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class Draft(DraftInDBBase):
    pass
