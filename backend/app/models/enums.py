# app/models/enums.py

from enum import Enum

# --- User Related Enums ---

class UserRole(str, Enum):
    """Roles a field account can hold. SUPERVISOR and ADMIN also carry an interviewer ID."""
    INTERVIEWER = "INTERVIEWER"
    SUPERVISOR = "SUPERVISOR"
    ADMIN = "ADMIN"

# --- Survey Record Enums ---

class SchoolStatus(str, Enum):
    """Publication state of a school survey."""
    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    INCOMPLETE = "INCOMPLETE"

class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"

class MaritalStatus(str, Enum):
    SINGLE = "SINGLE"
    MARRIED = "MARRIED"
    DIVORCED = "DIVORCED"
    WIDOWED = "WIDOWED"

class EducationLevel(str, Enum):
    EARLY_CHILDHOOD = "EARLY_CHILDHOOD"
    PRIMARY = "PRIMARY"
    LOWER_SECONDARY = "LOWER_SECONDARY"
    UPPER_SECONDARY = "UPPER_SECONDARY"
    HIGHER = "HIGHER"
    QURANIC = "QURANIC"
    OTHER = "OTHER"

class AcademicPerformance(str, Enum):
    EXCELLENT = "EXCELLENT"
    GOOD = "GOOD"
    AVERAGE = "AVERAGE"
    POOR = "POOR"

class HealthStatus(str, Enum):
    GOOD = "GOOD"
    FAIR = "FAIR"
    POOR = "POOR"

class AgreementType(str, Enum):
    """How parents consented to the pupil's stay at the school."""
    WRITTEN = "WRITTEN"
    VERBAL = "VERBAL"

class Accessibility(str, Enum):
    ALL_SEASONS = "ALL_SEASONS"
    DRY_SEASON = "DRY_SEASON"
    RAINY_SEASON = "RAINY_SEASON"

class OwnershipType(str, Enum):
    COMMUNITY = "COMMUNITY"
    INDIVIDUAL = "INDIVIDUAL"
    OTHER = "OTHER"

# --- Draft / File Related Enums ---

class DraftType(str, Enum):
    """Which survey form a draft belongs to."""
    SCHOOL = "SCHOOL"
    BEGGAR = "BEGGAR"

class RelatedToType(str, Enum):
    """Kind of record an uploaded file is attached to."""
    SCHOOL = "SCHOOL"
    BEGGAR = "BEGGAR"
    USER = "USER"
