# app/models/student.py
from pydantic import Field
from typing import Optional
from datetime import datetime
import uuid

from .common import CamelModel, NigerianPhone, NonEmptyStr, SurveyDate, UrlStr
from .enums import AcademicPerformance, Gender, HealthStatus, SchoolStatus

# Students only ever live inside a School document's `students` array.

class StudentBase(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    age: int = Field(..., ge=0, le=25)
    gender: Gender
    permanent_home_address: str = Field(..., min_length=5, max_length=500)
    nationality: NonEmptyStr
    state: NonEmptyStr
    lga: NonEmptyStr
    town_village: NonEmptyStr
    fathers_contact_number: NigerianPhone
    is_begging: bool = False
    nin: Optional[str] = None
    picture_url: Optional[UrlStr] = None

    # Guardian details
    parent_name: NonEmptyStr
    parent_phone: NigerianPhone
    parent_occupation: NonEmptyStr
    family_income: Optional[float] = Field(default=None, ge=0)

    # Schooling and welfare
    enrollment_date: SurveyDate
    attendance_rate: float = Field(..., ge=0, le=100, description="Percentage of sessions attended")
    academic_performance: Optional[AcademicPerformance] = None
    has_special_needs: bool = False
    special_needs_type: Optional[str] = None
    receives_scholarship: bool = False
    scholarship_type: Optional[str] = None
    health_status: Optional[HealthStatus] = None

class Student(StudentBase):
    # Identifier local to the owning school. Clients may echo it back on update
    # to keep it stable; new entries get a fresh one.
    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="_id")

class StudentRow(CamelModel):
    """One row of the cross-school student listing, with its school attached."""
    id: uuid.UUID = Field(..., alias="_id")
    name: str
    age: int
    gender: Gender
    nationality: Optional[str] = None
    state: Optional[str] = None
    lga: Optional[str] = None
    town_village: Optional[str] = None
    fathers_contact_number: Optional[str] = None
    is_begging: bool = False
    parent_name: Optional[str] = None
    parent_phone: Optional[str] = None
    enrollment_date: Optional[datetime] = None
    attendance_rate: Optional[float] = None
    academic_performance: Optional[AcademicPerformance] = None
    health_status: Optional[HealthStatus] = None

    school_id: uuid.UUID
    school_code: str
    school_name: str
    school_lga: str
    school_status: SchoolStatus
