# app/models/file.py
from pydantic import Field
from typing import Optional
from datetime import datetime, timezone
import uuid

from .common import CamelModel, NonEmptyStr
from .enums import RelatedToType

class RelatedTo(CamelModel):
    """Record an upload is attached to: a school, a beggar or a user."""
    type: RelatedToType
    id: NonEmptyStr

class FileRecordCreate(CamelModel):
    file_id: str
    original_name: str
    filename: str = Field(..., description="Generated blob name the bytes are stored under")
    mimetype: str
    size: int = Field(..., ge=0)
    path: str
    url: str
    uploaded_by: str
    related_to: Optional[RelatedTo] = None

class FileRecordInDBBase(FileRecordCreate):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="_id")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

class FileRecord(FileRecordInDBBase):
    pass
