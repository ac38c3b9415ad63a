# tests/functional/db/test_statistics.py
import uuid
import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from pytest_mock import MockerFixture

from app.db import statistics
from app.models.common import build_pagination, safe_percentage

# --- Age histogram ---

def _bucket_rows(ages):
    """What `$bucket` over AGE_BUCKET_BOUNDARIES returns for these ages."""
    counts = {}
    bounds = statistics.AGE_BUCKET_BOUNDARIES
    for age in ages:
        key = statistics.OVERFLOW_AGE_LABEL
        for low, high in zip(bounds[:-1], bounds[1:]):
            if low <= age < high:
                key = low
                break
        counts[key] = counts.get(key, 0) + 1
    return [{"_id": key, "count": count} for key, count in counts.items()]

def test_age_bucket_labels():
    assert statistics.age_bucket_labels() == [
        "0-5", "5-10", "10-15", "15-18", "18-25", "25-35", "35-50", "50-65", "65+",
    ]

def test_age_histogram_places_each_age():
    histogram = statistics.build_age_histogram(_bucket_rows([3, 7, 20, 70]))
    assert histogram["0-5"] == 1
    assert histogram["5-10"] == 1
    assert histogram["18-25"] == 1
    assert histogram["65+"] == 1
    assert sum(histogram.values()) == 4

def test_age_histogram_merges_overflow_into_top_bucket():
    histogram = statistics.build_age_histogram(_bucket_rows([65, 99, 130]))
    assert histogram["65+"] == 3

def test_age_histogram_always_lists_every_bucket():
    histogram = statistics.build_age_histogram([])
    assert list(histogram) == statistics.age_bucket_labels()
    assert set(histogram.values()) == {0}

# --- Rounding / percentages ---

@pytest.mark.parametrize("value, expected", [(None, 0), (24.5, 25), (24.49, 24), (0.0, 0)])
def test_round_half_up(value, expected):
    assert statistics.round_half_up(value) == expected

def test_safe_percentage():
    assert safe_percentage(1, 3) == 33.33
    assert safe_percentage(5, 0) == 0.0
    assert safe_percentage(0, 0) == 0.0

@pytest.mark.parametrize("total, page, limit, pages, has_next, has_prev", [
    (0, 1, 10, 0, False, False),
    (25, 1, 10, 3, True, False),
    (25, 3, 10, 3, False, True),
    (10, 1, 10, 1, False, False),
])
def test_build_pagination(total, page, limit, pages, has_next, has_prev):
    pagination = build_pagination(total, page, limit)
    assert pagination.pages == pages
    assert pagination.has_next is has_next
    assert pagination.has_prev is has_prev

# --- Summaries ---

def test_summarize_school_facets_empty_collection():
    stats = statistics.summarize_school_facets({})
    assert stats.overview.total_schools == 0
    assert stats.overview.completion_rate == 0.0
    assert stats.students.begging_percentage == 0.0
    assert stats.facilities.with_toilets == 0

def test_summarize_school_facets():
    stats = statistics.summarize_school_facets({
        "by_status": [{"_id": "PUBLISHED", "count": 1}, {"_id": "DRAFT", "count": 2}, {"_id": "INCOMPLETE", "count": 1}],
        "students_by_gender": [{"_id": "MALE", "count": 6}, {"_id": "FEMALE", "count": 2}],
        "begging_students": [{"count": 2}],
    })
    assert stats.overview.total_schools == 4
    assert stats.overview.draft_schools == 2
    assert stats.overview.incomplete_schools == 1
    assert stats.overview.completion_rate == 25.0
    assert stats.students.total == 8
    assert stats.students.begging_percentage == 25.0

def test_summarize_beggar_facets():
    stats = statistics.summarize_beggar_facets({
        "overview": [{"_id": None, "total": 3, "active": 2, "average_age": 30.5}],
        "by_state": [{"_id": "Kano", "count": 2}, {"_id": "Jigawa", "count": 1}],
    })
    assert stats.overview.inactive_beggars == 1
    assert stats.overview.active_percentage == 66.67
    assert stats.overview.average_age == 31
    assert [group.value for group in stats.location.by_state] == ["Kano", "Jigawa"]

def test_summarize_interviewer_counts_embedded_students():
    now = datetime.now(timezone.utc)
    stats = statistics.summarize_interviewer(
        "INT10001",
        schools=[
            {"status": "PUBLISHED", "students": [{"is_begging": True}, {"is_begging": True}]},
            {"status": "DRAFT", "students": [{"is_begging": False}]},
            {"status": "DRAFT"},
        ],
        beggars=[{"is_begging": True}, {"is_begging": False}],
        recent_schools=[{"_id": uuid.uuid4(), "name": "Makarantar Malam Isa", "lga": "Dala", "status": "DRAFT", "created_at": now}],
        recent_beggars=[],
    )
    assert stats.schools.total == 3
    assert stats.schools.draft == 2
    assert stats.schools.completion_rate == 33.33
    assert stats.students.total == 3
    assert stats.students.begging == 2
    assert stats.beggars.active_percentage == 50.0
    assert stats.recent_activity.schools[0].name == "Makarantar Malam Isa"

# --- Aggregation wiring ---

@pytest.mark.asyncio
async def test_beggar_list_statistics_runs_on_given_filter(mocker: MockerFixture):
    collection = MagicMock()
    collection.aggregate.return_value.to_list = AsyncMock(return_value=[{
        "overview": [{"_id": None, "total": 2, "active": 1, "average_age": 40.5}],
        "by_gender": [{"_id": "MALE", "count": 2}],
        "by_lga": [],
    }])
    mocker.patch("app.db.statistics._get_collection", return_value=collection)

    stats = await statistics.get_beggar_list_statistics({"lga": "Fagge"})

    assert stats.total_beggars == 2
    assert stats.average_age == 41
    pipeline = collection.aggregate.call_args.args[0]
    assert pipeline[0] == {"$match": {"lga": "Fagge"}}

@pytest.mark.asyncio
async def test_school_statistics_filters_before_faceting(mocker: MockerFixture):
    collection = MagicMock()
    collection.aggregate.return_value.to_list = AsyncMock(return_value=[])
    mocker.patch("app.db.statistics._get_collection", return_value=collection)

    stats = await statistics.get_school_statistics(lga="Dala", status=None)

    assert stats.overview.total_schools == 0
    pipeline = collection.aggregate.call_args.args[0]
    assert pipeline[0] == {"$match": {"lga": "Dala"}}
    assert "$facet" in pipeline[1]
