# app/models/analytics.py
from pydantic import Field
from typing import Dict, List, Optional, Union

from .common import CamelModel, PaginatedResponse
from .school import SchoolSummary
from .beggar import Beggar, BeggarSummary

class GroupCount(CamelModel):
    value: Optional[Union[bool, str]] = Field(None, description="Grouping key (LGA, status, gender, ...)")
    count: int = Field(..., description="Number of records in the group")

# --- Schools ---

class SchoolOverview(CamelModel):
    total_schools: int
    published_schools: int
    draft_schools: int
    incomplete_schools: int
    completion_rate: float = Field(..., description="Published schools as a percentage of all schools")

class SchoolStudentStats(CamelModel):
    total: int
    by_gender: List[GroupCount]
    begging: int
    begging_percentage: float

class FacilityStats(CamelModel):
    with_toilets: int
    with_feeding: int
    with_sleeping: int

class SchoolDistribution(CamelModel):
    by_lga: List[GroupCount]
    by_status: List[GroupCount]

class SchoolStatistics(CamelModel):
    overview: SchoolOverview
    students: SchoolStudentStats
    facilities: FacilityStats
    distribution: SchoolDistribution

# --- Beggars ---

class BeggarOverview(CamelModel):
    total_beggars: int
    active_beggars: int
    inactive_beggars: int
    active_percentage: float
    average_age: int

class BeggarDemographics(CamelModel):
    by_age: Dict[str, int] = Field(..., description="Histogram keyed by age range label, e.g. '5-10' or '65+'")
    by_gender: List[GroupCount]
    by_nationality: List[GroupCount]

class BeggarLocation(CamelModel):
    by_lga: List[GroupCount]
    by_state: List[GroupCount]

class BeggarStatistics(CamelModel):
    overview: BeggarOverview
    demographics: BeggarDemographics
    location: BeggarLocation

class BeggarListStatistics(CamelModel):
    """Summary returned alongside a filtered beggar listing."""
    total_beggars: int
    active_beggars: int
    average_age: int
    by_gender: List[GroupCount]
    by_lga: List[GroupCount]

class BeggarPageWithStatistics(PaginatedResponse[Beggar]):
    statistics: BeggarListStatistics

# --- Dashboard ---

class DashboardOverview(CamelModel):
    total_schools: int
    total_beggars: int
    total_users: int
    total_students: int

class RecentActivity(CamelModel):
    schools: List[SchoolSummary]
    beggars: List[BeggarSummary]

class StatusBreakdowns(CamelModel):
    school_status: List[GroupCount]
    beggar_status: List[GroupCount]

class DashboardData(CamelModel):
    overview: DashboardOverview
    recent_activity: RecentActivity
    breakdowns: StatusBreakdowns
    top_lgas: List[GroupCount]

# --- Per interviewer ---

class InterviewerSchoolStats(CamelModel):
    total: int
    published: int
    draft: int
    completion_rate: float

class InterviewerStudentStats(CamelModel):
    total: int
    begging: int
    begging_percentage: float

class InterviewerBeggarStats(CamelModel):
    total: int
    active: int
    active_percentage: float

class InterviewerStatistics(CamelModel):
    interviewer_id: str
    schools: InterviewerSchoolStats
    students: InterviewerStudentStats
    beggars: InterviewerBeggarStats
    recent_activity: RecentActivity
