# app/db/statistics.py
"""
Read-only aggregations behind the analytics endpoints.

School and beggar statistics are computed with a single `$facet` pipeline each,
then shaped by pure `summarize_*` functions so the maths can be tested without a
database. Per-interviewer statistics are computed in-process over that
interviewer's own records, which are expected to be few.
"""
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from pymongo import DESCENDING

from app.models.analytics import (
    BeggarDemographics,
    BeggarListStatistics,
    BeggarLocation,
    BeggarOverview,
    BeggarStatistics,
    DashboardData,
    DashboardOverview,
    FacilityStats,
    GroupCount,
    InterviewerBeggarStats,
    InterviewerSchoolStats,
    InterviewerStatistics,
    InterviewerStudentStats,
    RecentActivity,
    SchoolDistribution,
    SchoolOverview,
    SchoolStatistics,
    SchoolStudentStats,
    StatusBreakdowns,
)
from app.models.beggar import BeggarSummary
from app.models.common import safe_percentage
from app.models.enums import SchoolStatus
from app.models.school import SchoolSummary
from .crud import (
    BEGGAR_COLLECTION,
    NEWEST_FIRST,
    SCHOOL_COLLECTION,
    _get_collection,
    _without_empty,
    count_users,
)

logger = logging.getLogger(__name__)

AGE_BUCKET_BOUNDARIES = [0, 5, 10, 15, 18, 25, 35, 50, 65, 100]
OVERFLOW_AGE_LABEL = "65+"

RECENT_DASHBOARD_LIMIT = 5
RECENT_INTERVIEWER_LIMIT = 3
TOP_LGA_LIMIT = 5

# --- Pure helpers ---

def age_bucket_labels() -> List[str]:
    """Labels in boundary order; the 65-100 bucket and the overflow share "65+"."""
    labels = [
        f"{low}-{high}"
        for low, high in zip(AGE_BUCKET_BOUNDARIES[:-2], AGE_BUCKET_BOUNDARIES[1:-1])
    ]
    labels.append(OVERFLOW_AGE_LABEL)
    return labels

def build_age_histogram(bucket_rows: Iterable[Dict[str, Any]]) -> Dict[str, int]:
    """
    Turns `$bucket` output (`_id` is the lower boundary, or the default label)
    into a complete histogram with every label present.
    """
    histogram = {label: 0 for label in age_bucket_labels()}
    lower_to_label = dict(zip(AGE_BUCKET_BOUNDARIES[:-2], age_bucket_labels()[:-1]))
    for row in bucket_rows:
        label = lower_to_label.get(row.get("_id"), OVERFLOW_AGE_LABEL)
        histogram[label] += int(row.get("count", 0))
    return histogram

def to_group_counts(rows: Iterable[Dict[str, Any]]) -> List[GroupCount]:
    return [GroupCount(value=row.get("_id"), count=int(row.get("count", 0))) for row in rows]

def _first(rows: Optional[List[Dict[str, Any]]]) -> Dict[str, Any]:
    return rows[0] if rows else {}

def round_half_up(value: Optional[float]) -> int:
    if value is None:
        return 0
    return int(math.floor(value + 0.5))

def _group(field: str, sort_by_count: bool = False) -> List[Dict[str, Any]]:
    stages: List[Dict[str, Any]] = [{"$group": {"_id": f"${field}", "count": {"$sum": 1}}}]
    if sort_by_count:
        stages.append({"$sort": {"count": -1, "_id": 1}})
    return stages

def _count_where(expression: Any) -> Dict[str, Any]:
    return {"$sum": {"$cond": [expression, 1, 0]}}

# --- Schools ---

def school_statistics_pipeline(query: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {"$match": query},
        {"$facet": {
            "by_status": _group("status"),
            "by_lga": _group("lga", sort_by_count=True),
            "facilities": [{"$group": {
                "_id": None,
                "with_toilets": _count_where({"$eq": ["$school_structure.has_toilets", True]}),
                "with_feeding": _count_where({"$eq": ["$school_structure.feeds_pupils", True]}),
                "with_sleeping": _count_where({"$eq": ["$school_structure.provides_sleeping_place", True]}),
            }}],
            "students_by_gender": [{"$unwind": "$students"}] + _group("students.gender"),
            "begging_students": [
                {"$unwind": "$students"},
                {"$match": {"students.is_begging": True}},
                {"$count": "count"},
            ],
        }},
    ]

def summarize_school_facets(facet: Dict[str, Any]) -> SchoolStatistics:
    status_counts = {row.get("_id"): int(row.get("count", 0)) for row in facet.get("by_status", [])}
    total_schools = sum(status_counts.values())
    published = status_counts.get(SchoolStatus.PUBLISHED.value, 0)

    by_gender = to_group_counts(facet.get("students_by_gender", []))
    total_students = sum(group.count for group in by_gender)
    begging = int(_first(facet.get("begging_students")).get("count", 0))
    facilities = _first(facet.get("facilities"))

    return SchoolStatistics(
        overview=SchoolOverview(
            total_schools=total_schools,
            published_schools=published,
            draft_schools=status_counts.get(SchoolStatus.DRAFT.value, 0),
            incomplete_schools=status_counts.get(SchoolStatus.INCOMPLETE.value, 0),
            completion_rate=safe_percentage(published, total_schools),
        ),
        students=SchoolStudentStats(
            total=total_students,
            by_gender=by_gender,
            begging=begging,
            begging_percentage=safe_percentage(begging, total_students),
        ),
        facilities=FacilityStats(
            with_toilets=int(facilities.get("with_toilets", 0)),
            with_feeding=int(facilities.get("with_feeding", 0)),
            with_sleeping=int(facilities.get("with_sleeping", 0)),
        ),
        distribution=SchoolDistribution(
            by_lga=to_group_counts(facet.get("by_lga", [])),
            by_status=to_group_counts(facet.get("by_status", [])),
        ),
    )

async def get_school_statistics(lga: Optional[str] = None, status: Optional[str] = None) -> SchoolStatistics:
    collection = _get_collection(SCHOOL_COLLECTION)
    query = _without_empty({"lga": lga, "status": status})
    logger.info(f"Computing school statistics filters={query}")
    result = await collection.aggregate(school_statistics_pipeline(query)).to_list(length=1)
    return summarize_school_facets(_first(result))

# --- Beggars ---

def beggar_statistics_pipeline(query: Dict[str, Any]) -> List[Dict[str, Any]]:
    return [
        {"$match": query},
        {"$facet": {
            "overview": [{"$group": {
                "_id": None,
                "total": {"$sum": 1},
                "active": _count_where({"$eq": ["$is_begging", True]}),
                "average_age": {"$avg": "$age"},
            }}],
            "by_age": [{"$bucket": {
                "groupBy": "$age",
                "boundaries": AGE_BUCKET_BOUNDARIES,
                "default": OVERFLOW_AGE_LABEL,
                "output": {"count": {"$sum": 1}},
            }}],
            "by_gender": _group("sex"),
            "by_lga": _group("lga", sort_by_count=True),
            "by_state": _group("state_of_origin", sort_by_count=True),
            "by_nationality": _group("nationality", sort_by_count=True),
        }},
    ]

def summarize_beggar_facets(facet: Dict[str, Any]) -> BeggarStatistics:
    overview = _first(facet.get("overview"))
    total = int(overview.get("total", 0))
    active = int(overview.get("active", 0))
    return BeggarStatistics(
        overview=BeggarOverview(
            total_beggars=total,
            active_beggars=active,
            inactive_beggars=total - active,
            active_percentage=safe_percentage(active, total),
            average_age=round_half_up(overview.get("average_age")),
        ),
        demographics=BeggarDemographics(
            by_age=build_age_histogram(facet.get("by_age", [])),
            by_gender=to_group_counts(facet.get("by_gender", [])),
            by_nationality=to_group_counts(facet.get("by_nationality", [])),
        ),
        location=BeggarLocation(
            by_lga=to_group_counts(facet.get("by_lga", [])),
            by_state=to_group_counts(facet.get("by_state", [])),
        ),
    )

async def get_beggar_statistics(lga: Optional[str] = None, state_of_origin: Optional[str] = None) -> BeggarStatistics:
    collection = _get_collection(BEGGAR_COLLECTION)
    query = _without_empty({"lga": lga, "state_of_origin": state_of_origin})
    logger.info(f"Computing beggar statistics filters={query}")
    result = await collection.aggregate(beggar_statistics_pipeline(query)).to_list(length=1)
    return summarize_beggar_facets(_first(result))

async def get_beggar_list_statistics(query: Dict[str, Any]) -> BeggarListStatistics:
    """Summary for the same filter a beggar listing was run with."""
    collection = _get_collection(BEGGAR_COLLECTION)
    pipeline = [
        {"$match": query},
        {"$facet": {
            "overview": [{"$group": {
                "_id": None,
                "total": {"$sum": 1},
                "active": _count_where({"$eq": ["$is_begging", True]}),
                "average_age": {"$avg": "$age"},
            }}],
            "by_gender": _group("sex"),
            "by_lga": _group("lga", sort_by_count=True),
        }},
    ]
    facet = _first(await collection.aggregate(pipeline).to_list(length=1))
    overview = _first(facet.get("overview"))
    return BeggarListStatistics(
        total_beggars=int(overview.get("total", 0)),
        active_beggars=int(overview.get("active", 0)),
        average_age=round_half_up(overview.get("average_age")),
        by_gender=to_group_counts(facet.get("by_gender", [])),
        by_lga=to_group_counts(facet.get("by_lga", [])),
    )

# --- Dashboard ---

SCHOOL_SUMMARY_PROJECTION = {"name": 1, "lga": 1, "status": 1, "created_at": 1}
BEGGAR_SUMMARY_PROJECTION = {"name": 1, "lga": 1, "is_begging": 1, "created_at": 1}

async def _recent(collection_name: str, projection: Dict[str, int], limit: int, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    cursor = _get_collection(collection_name).find(query or {}, projection).sort(NEWEST_FIRST).limit(limit)
    return await cursor.to_list(length=limit)

async def get_dashboard_data() -> DashboardData:
    schools = _get_collection(SCHOOL_COLLECTION)
    beggars = _get_collection(BEGGAR_COLLECTION)
    logger.info("Computing dashboard data")

    total_schools = await schools.count_documents({})
    total_beggars = await beggars.count_documents({})
    total_users = await count_users()
    student_rows = await schools.aggregate([
        {"$project": {"student_count": {"$size": {"$ifNull": ["$students", []]}}}},
        {"$group": {"_id": None, "total": {"$sum": "$student_count"}}},
    ]).to_list(length=1)

    recent_schools = await _recent(SCHOOL_COLLECTION, SCHOOL_SUMMARY_PROJECTION, RECENT_DASHBOARD_LIMIT)
    recent_beggars = await _recent(BEGGAR_COLLECTION, BEGGAR_SUMMARY_PROJECTION, RECENT_DASHBOARD_LIMIT)

    school_status = await schools.aggregate(_group("status")).to_list(length=None)
    beggar_status = await beggars.aggregate(_group("is_begging")).to_list(length=None)
    top_lgas = await schools.aggregate(
        _group("lga", sort_by_count=True) + [{"$limit": TOP_LGA_LIMIT}]
    ).to_list(length=TOP_LGA_LIMIT)

    return DashboardData(
        overview=DashboardOverview(
            total_schools=total_schools,
            total_beggars=total_beggars,
            total_users=total_users,
            total_students=int(_first(student_rows).get("total", 0)),
        ),
        recent_activity=RecentActivity(
            schools=[SchoolSummary(**doc) for doc in recent_schools],
            beggars=[BeggarSummary(**doc) for doc in recent_beggars],
        ),
        breakdowns=StatusBreakdowns(
            school_status=to_group_counts(school_status),
            beggar_status=to_group_counts(beggar_status),
        ),
        top_lgas=to_group_counts(top_lgas),
    )

# --- Per interviewer ---

def summarize_interviewer(
    interviewer_id: str,
    schools: List[Dict[str, Any]],
    beggars: List[Dict[str, Any]],
    recent_schools: List[Dict[str, Any]],
    recent_beggars: List[Dict[str, Any]],
) -> InterviewerStatistics:
    total_schools = len(schools)
    published = sum(1 for school in schools if school.get("status") == SchoolStatus.PUBLISHED.value)
    drafts = sum(1 for school in schools if school.get("status") == SchoolStatus.DRAFT.value)

    students = [student for school in schools for student in (school.get("students") or [])]
    begging_students = sum(1 for student in students if student.get("is_begging"))

    total_beggars = len(beggars)
    active_beggars = sum(1 for beggar in beggars if beggar.get("is_begging"))

    return InterviewerStatistics(
        interviewer_id=interviewer_id,
        schools=InterviewerSchoolStats(
            total=total_schools,
            published=published,
            draft=drafts,
            completion_rate=safe_percentage(published, total_schools),
        ),
        students=InterviewerStudentStats(
            total=len(students),
            begging=begging_students,
            begging_percentage=safe_percentage(begging_students, len(students)),
        ),
        beggars=InterviewerBeggarStats(
            total=total_beggars,
            active=active_beggars,
            active_percentage=safe_percentage(active_beggars, total_beggars),
        ),
        recent_activity=RecentActivity(
            schools=[SchoolSummary(**doc) for doc in recent_schools],
            beggars=[BeggarSummary(**doc) for doc in recent_beggars],
        ),
    )

async def get_interviewer_statistics(interviewer_id: str) -> InterviewerStatistics:
    owner = {"interviewer_id": interviewer_id}
    logger.info(f"Computing statistics for interviewer {interviewer_id}")
    schools = await _get_collection(SCHOOL_COLLECTION).find(
        owner, {"status": 1, "students.is_begging": 1}
    ).to_list(length=None)
    beggars = await _get_collection(BEGGAR_COLLECTION).find(
        owner, {"is_begging": 1}
    ).to_list(length=None)
    recent_schools = await _recent(SCHOOL_COLLECTION, SCHOOL_SUMMARY_PROJECTION, RECENT_INTERVIEWER_LIMIT, owner)
    recent_beggars = await _recent(BEGGAR_COLLECTION, BEGGAR_SUMMARY_PROJECTION, RECENT_INTERVIEWER_LIMIT, owner)
    return summarize_interviewer(interviewer_id, schools, beggars, recent_schools, recent_beggars)
