# tests/conftest.py
import pytest
import pytest_asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, AsyncGenerator, Callable, Dict

import httpx
from httpx import ASGITransport
from fastapi import FastAPI
from asgi_lifespan import LifespanManager
from pytest_mock import MockerFixture
from unittest.mock import AsyncMock

from app.api.deps import get_current_user
from app.core.config import settings
from app.models.enums import UserRole
from app.models.user import User

logger = logging.getLogger(__name__)

# --- Fixtures ---

@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    # bcrypt minimum cost keeps hashing tests quick
    monkeypatch.setattr(settings, "BCRYPT_ROUNDS", 4)

@pytest_asyncio.fixture(scope="function")
async def app(mocker: MockerFixture) -> AsyncGenerator[FastAPI, None]:
    """FastAPI app with the database and blob storage lifecycle patched out."""
    logger.info("Mocking DB connect/disconnect, index creation and blob client for app fixture...")
    mocker.patch("app.main.connect_to_mongo", new_callable=AsyncMock, return_value=True)
    mocker.patch("app.main.close_mongo_connection", new_callable=AsyncMock, return_value=None)
    mocker.patch("app.main.init_db_indexes", new_callable=AsyncMock, return_value=True)
    mocker.patch("app.main.close_blob_service_client", new_callable=AsyncMock, return_value=None)

    # Import the app *after* patching dependencies
    from app.main import app as fastapi_app

    async with LifespanManager(fastapi_app, startup_timeout=15, shutdown_timeout=15):
        yield fastapi_app

    fastapi_app.dependency_overrides.clear()

@pytest_asyncio.fixture(scope="function")
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client

def build_user(role: UserRole = UserRole.INTERVIEWER, interviewer_id: str = "INT10001", **overrides) -> User:
    now = datetime.now(timezone.utc)
    data = {
        "id": uuid.uuid4(),
        "interviewer_id": interviewer_id,
        "name": f"Test {role.value.title()}",
        "email": f"{interviewer_id.lower()}@example.com",
        "phone": "08031234567",
        "lga": "Kano Municipal",
        "role": role,
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return User(**data)

@pytest.fixture
def interviewer_user() -> User:
    return build_user(UserRole.INTERVIEWER, "INT10001")

@pytest.fixture
def other_interviewer_user() -> User:
    return build_user(UserRole.INTERVIEWER, "INT20002")

@pytest.fixture
def supervisor_user() -> User:
    return build_user(UserRole.SUPERVISOR, "SUP30003")

@pytest.fixture
def admin_user() -> User:
    return build_user(UserRole.ADMIN, "ADMIN40004")

@pytest.fixture
def login_as(app: FastAPI) -> Callable[[User], User]:
    """Overrides get_current_user so requests run as the given user."""
    def _login_as(user: User) -> User:
        async def override_get_current_user() -> User:
            return user
        app.dependency_overrides[get_current_user] = override_get_current_user
        return user
    return _login_as

@pytest.fixture
def make_user() -> Callable[..., User]:
    return build_user

# --- Survey payloads (wire format) ---

@pytest.fixture
def student_payload() -> Dict[str, Any]:
    return {
        "name": "Abdullahi Sani",
        "age": 11,
        "gender": "MALE",
        "permanentHomeAddress": "No. 4 Kofar Wambai, Kano",
        "nationality": "Nigerian",
        "state": "Kano",
        "lga": "Dala",
        "townVillage": "Kofar Wambai",
        "fathersContactNumber": "08031234567",
        "isBegging": True,
        "parentName": "Sani Abdullahi",
        "parentPhone": "08051234567",
        "parentOccupation": "Farmer",
        "enrollmentDate": "2023-09-01",
        "attendanceRate": "85",
        "academicPerformance": "GOOD",
        "healthStatus": "FAIR",
    }

@pytest.fixture
def school_payload(student_payload) -> Dict[str, Any]:
    return {
        "schoolCode": "SCH100",
        "name": "Makarantar Malam Isa",
        "address": "Behind Central Mosque, Dala",
        "phone": "08061234567",
        "lga": "Dala",
        "district": "Dala",
        "ward": "Kantudu",
        "headTeacher": {
            "name": "Malam Isa Garba",
            "phone": "08071234567",
            "nationality": "Nigerian",
            "maritalStatus": "MARRIED",
            "numberOfWives": 2,
            "age": 54,
            "educationLevel": "QURANIC",
            "numberOfChildren": 7,
            "sourcesOfIncome": ["Farming"],
            "monthlyIncome": "30000",
        },
        "schoolStructure": {
            "numberOfTeachers": 3,
            "numberOfPupils": 120,
            "hasToilets": True,
            "numberOfToilets": 2,
            "feedsPupils": True,
            "foodSources": ["Community"],
            "sanitaryCareProvider": "Alaramma",
            "lostPupilAction": "Inform the ward head",
            "studyTime": "Morning and night",
            "studyTimes": ["MORNING", "NIGHT"],
            "providesSleepingPlace": True,
        },
        "students": [student_payload],
    }

@pytest.fixture
def beggar_payload() -> Dict[str, Any]:
    return {
        "beggarId": "BEG001",
        "name": "Hauwa Musa",
        "age": 34,
        "sex": "FEMALE",
        "nationality": "Nigerian",
        "stateOfOrigin": "Jigawa",
        "lga": "Fagge",
        "townVillage": "Sabon Gari",
        "permanentHomeAddress": "Sabon Gari Market Road",
        "isBegging": True,
        "reasonForBegging": "Disability",
    }
