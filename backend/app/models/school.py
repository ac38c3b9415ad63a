# app/models/school.py
from pydantic import EmailStr, Field
from typing import List, Optional
from datetime import datetime, timezone
import uuid

from .common import CamelModel, NigerianPhone, NonEmptyStr, PartialUpdate, UrlStr
from .enums import (
    Accessibility,
    AgreementType,
    EducationLevel,
    MaritalStatus,
    OwnershipType,
    SchoolStatus,
)
from .student import Student

# --- Embedded documents ---

class HeadTeacher(CamelModel):
    """Profile of the Alaramma running the school."""
    name: str = Field(..., min_length=2, max_length=100)
    phone: NigerianPhone
    nationality: NonEmptyStr
    marital_status: MaritalStatus
    number_of_wives: int = Field(default=0, ge=0, le=10)
    age: int = Field(..., ge=18, le=120)
    education_level: EducationLevel
    other_education: Optional[str] = None
    number_of_children: int = Field(default=0, ge=0, le=50)
    sources_of_income: List[str] = Field(..., min_length=1)
    other_income: Optional[str] = None
    monthly_income: float = Field(..., ge=0)
    picture_url: Optional[UrlStr] = None
    alaramma_code: Optional[str] = None
    years_tutoring: Optional[int] = Field(default=None, ge=0, le=100)

class StudyPeriods(CamelModel):
    morning: Optional[str] = None
    evening: Optional[str] = None
    night: Optional[str] = None

class SchoolStructure(CamelModel):
    # Each has_x / provides_x flag gates the optional detail fields after it.
    has_classes: bool = False
    number_of_classes: Optional[int] = Field(default=None, ge=0, le=100)
    students_per_class: Optional[int] = Field(default=None, ge=0, le=100)
    number_of_teachers: int = Field(..., ge=0, le=1000)
    number_of_pupils: int = Field(..., ge=0, le=10000)
    alaramma_teaches_multiple_groups: bool = False

    has_intervention: bool = False
    intervention_type: Optional[str] = None
    has_cash_transfer_beneficiaries: bool = False
    number_of_cash_transfer_beneficiaries: Optional[int] = Field(default=None, ge=0, le=1000)

    has_toilets: bool = False
    number_of_toilets: Optional[int] = Field(default=None, ge=0, le=100)
    toilet_picture_url: Optional[UrlStr] = None
    infrastructure_pictures: List[str] = Field(default_factory=list)

    feeds_pupils: bool = False
    food_sources: List[str] = Field(..., min_length=1)
    other_food_source: Optional[str] = None

    takes_care_of_medical_bills: bool = False
    medical_funds_source: Optional[str] = None
    medical_care_provider: Optional[str] = None
    medical_care_source: Optional[str] = None
    sanitary_care_provider: NonEmptyStr
    sanitary_care_source: Optional[str] = None
    lost_pupil_action: NonEmptyStr

    study_time: NonEmptyStr
    study_times: List[str] = Field(..., min_length=1)
    study_periods: Optional[StudyPeriods] = None

    provides_sleeping_place: bool = False
    sleeping_place_location: Optional[str] = None
    sleeping_place_picture_url: Optional[UrlStr] = None

    has_other_state_pupils: bool = False
    other_states_countries: Optional[str] = None
    has_cross_border_students: bool = False
    cross_border_states_countries: Optional[str] = None

    has_parent_agreements: bool = False
    agreement_type: Optional[AgreementType] = None
    parent_agreement_type: Optional[AgreementType] = None

    allows_begging: bool = False
    begging_reason: Optional[str] = None
    allows_begging_with_consent: bool = False
    begging_consent_reason: Optional[str] = None

    accessibility: Optional[Accessibility] = None
    has_management_committee: bool = False
    has_development_plan: bool = False
    has_security_guard: bool = False
    ownership_type: Optional[OwnershipType] = None
    ownership_other: Optional[str] = None

# --- School ---

# Shared base properties
class SchoolBase(CamelModel):
    school_code: NonEmptyStr
    name: str = Field(..., min_length=2, max_length=200)
    address: str = Field(..., min_length=5, max_length=500)
    phone: NigerianPhone
    email: Optional[EmailStr] = None
    lga: NonEmptyStr
    district: NonEmptyStr
    ward: NonEmptyStr
    village: Optional[str] = None
    community: Optional[str] = None
    years_in_school: Optional[int] = Field(default=None, ge=0, le=100)

# Properties required on creation. Owner and status are set server-side.
class SchoolCreate(SchoolBase):
    head_teacher: HeadTeacher
    school_structure: SchoolStructure
    students: List[Student] = Field(..., min_length=1)

# Model for updating; nested objects are replaced whole when present
class SchoolUpdate(PartialUpdate):
    nullable_fields = frozenset({
        "email", "village", "community", "years_in_school", "head_teacher", "school_structure",
    })

    school_code: Optional[NonEmptyStr] = None
    name: Optional[str] = Field(default=None, min_length=2, max_length=200)
    address: Optional[str] = Field(default=None, min_length=5, max_length=500)
    phone: Optional[NigerianPhone] = None
    email: Optional[EmailStr] = None
    lga: Optional[NonEmptyStr] = None
    district: Optional[NonEmptyStr] = None
    ward: Optional[NonEmptyStr] = None
    village: Optional[str] = None
    community: Optional[str] = None
    years_in_school: Optional[int] = Field(default=None, ge=0, le=100)
    status: Optional[SchoolStatus] = None
    head_teacher: Optional[HeadTeacher] = None
    school_structure: Optional[SchoolStructure] = None
    students: Optional[List[Student]] = Field(default=None, min_length=1)

# Properties stored in DB
class SchoolInDBBase(SchoolBase):
    id: uuid.UUID = Field(default_factory=uuid.uuid4, alias="_id")
    interviewer_id: str
    status: SchoolStatus = SchoolStatus.DRAFT
    head_teacher: Optional[HeadTeacher] = None
    school_structure: Optional[SchoolStructure] = None
    students: List[Student] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

# Final model representing a School read from DB
class School(SchoolInDBBase):
    pass

class SchoolSummary(CamelModel):
    """Projection used in recent-activity lists."""
    id: uuid.UUID = Field(..., alias="_id")
    name: str
    lga: Optional[str] = None
    status: SchoolStatus
    created_at: datetime
