# app/models/common.py
import math
from datetime import date, datetime, timezone
from typing import Annotated, Any, ClassVar, FrozenSet, Generic, List, Optional, TypeVar

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    HttpUrl,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

# --- Shared field types ---

NIGERIAN_PHONE_PATTERN = r"^(\+234|0)[789][01]\d{8}$"
INTERVIEWER_ID_PATTERN = r"^[A-Z0-9]{4,10}$"

NigerianPhone = Annotated[str, StringConstraints(strip_whitespace=True, pattern=NIGERIAN_PHONE_PATTERN)]
InterviewerId = Annotated[str, StringConstraints(strip_whitespace=True, pattern=INTERVIEWER_ID_PATTERN)]
NonEmptyStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

_http_url_adapter = TypeAdapter(HttpUrl)

def _validate_url(value: str) -> str:
    # Stored as a plain string; BSON cannot encode pydantic Url objects
    try:
        _http_url_adapter.validate_python(value)
    except ValidationError:
        raise ValueError("must be a valid URL")
    return value

UrlStr = Annotated[str, AfterValidator(_validate_url)]

def _coerce_calendar_date(value: Any) -> Any:
    # BSON has no date type, so plain dates become midnight UTC datetimes
    if isinstance(value, str) and len(value) == 10:
        try:
            value = date.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    return value

SurveyDate = Annotated[datetime, BeforeValidator(_coerce_calendar_date)]

# --- Base model ---

class CamelModel(BaseModel):
    """Snake_case in Python and in MongoDB, camelCase on the wire."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        use_enum_values=True,
    )

class PartialUpdate(CamelModel):
    """
    Base for update payloads. Omitted fields are left untouched; an explicit
    null is only accepted for fields listed in `nullable_fields`, which clears
    the stored value.
    """
    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def reject_null_required_fields(self):
        nulls = sorted(
            name for name in self.model_fields_set
            if getattr(self, name) is None and name not in self.nullable_fields
        )
        if nulls:
            raise ValueError(f"{', '.join(to_camel(name) for name in nulls)} cannot be null")
        return self

# --- Response envelope ---

T = TypeVar("T")

class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    pages: int
    has_next: bool
    has_prev: bool

class ApiResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str
    data: Optional[T] = None
    errors: Optional[List[str]] = None

class PaginatedResponse(CamelModel, Generic[T]):
    success: bool = True
    message: str
    data: List[T]
    pagination: Pagination

def build_pagination(total: int, page: int, limit: int) -> Pagination:
    """Computes page count and navigation flags for a list response."""
    pages = math.ceil(total / limit) if limit > 0 else 0
    return Pagination(
        page=page,
        limit=limit,
        total=total,
        pages=pages,
        has_next=page < pages,
        has_prev=page > 1,
    )

def safe_percentage(numerator: float, denominator: float) -> float:
    """Percentage rounded to two places; 0 when there is nothing to divide by."""
    if not denominator:
        return 0.0
    return round((numerator / denominator) * 100, 2)
