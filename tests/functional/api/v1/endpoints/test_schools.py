# tests/functional/api/v1/endpoints/test_schools.py
import uuid
import pytest
from unittest.mock import AsyncMock

from fastapi import status
from pytest_mock import MockerFixture

from app.core.config import settings
from app.db.crud import DuplicateRecordError
from app.models.school import School, SchoolCreate
from app.models.student import StudentRow

API = settings.API_V1_PREFIX
CRUD = "app.api.v1.endpoints.schools.crud"

def make_school(payload, interviewer_id: str) -> School:
    school_in = SchoolCreate(**payload)
    return School(**school_in.model_dump(), id=uuid.uuid4(), interviewer_id=interviewer_id)

# --- Auth gate ---

@pytest.mark.asyncio
async def test_list_schools_requires_authentication(client, mocker: MockerFixture):
    mock_list = mocker.patch(f"{CRUD}.get_schools", new_callable=AsyncMock)

    response = await client.get(f"{API}/schools/")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    mock_list.assert_not_called()

# --- Create ---

@pytest.mark.asyncio
async def test_create_school_success(client, login_as, interviewer_user, school_payload, mocker: MockerFixture):
    login_as(interviewer_user)
    created = make_school(school_payload, interviewer_user.interviewer_id)
    mocker.patch(f"{CRUD}.school_code_exists", new_callable=AsyncMock, return_value=False)
    mock_create = mocker.patch(f"{CRUD}.create_school", new_callable=AsyncMock, return_value=created)

    response = await client.post(f"{API}/schools/", json=school_payload)

    assert response.status_code == status.HTTP_201_CREATED
    body = response.json()
    assert body["success"] is True
    assert body["data"]["schoolCode"] == "SCH100"
    assert body["data"]["status"] == "DRAFT"
    assert body["data"]["interviewerId"] == interviewer_user.interviewer_id
    assert "_id" in body["data"]["students"][0]

    school_in = mock_create.call_args.args[0]
    assert mock_create.call_args.kwargs["interviewer_id"] == interviewer_user.interviewer_id
    # Numeric strings from form posts are coerced
    assert school_in.students[0].attendance_rate == 85.0
    assert school_in.head_teacher.monthly_income == 30000.0

@pytest.mark.asyncio
async def test_create_school_ignores_client_owner(client, login_as, interviewer_user, school_payload, mocker: MockerFixture):
    login_as(interviewer_user)
    mocker.patch(f"{CRUD}.school_code_exists", new_callable=AsyncMock, return_value=False)
    mock_create = mocker.patch(
        f"{CRUD}.create_school", new_callable=AsyncMock,
        return_value=make_school(school_payload, interviewer_user.interviewer_id),
    )

    school_payload["interviewerId"] = "INT99999"
    school_payload["status"] = "PUBLISHED"
    response = await client.post(f"{API}/schools/", json=school_payload)

    assert response.status_code == status.HTTP_201_CREATED
    assert mock_create.call_args.kwargs["interviewer_id"] == interviewer_user.interviewer_id

@pytest.mark.asyncio
async def test_create_school_duplicate_code(client, login_as, interviewer_user, school_payload, mocker: MockerFixture):
    login_as(interviewer_user)
    mocker.patch(f"{CRUD}.school_code_exists", new_callable=AsyncMock, return_value=True)
    mock_create = mocker.patch(f"{CRUD}.create_school", new_callable=AsyncMock)

    response = await client.post(f"{API}/schools/", json=school_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"success": False, "message": "School code already exists"}
    mock_create.assert_not_called()

@pytest.mark.asyncio
async def test_create_school_duplicate_caught_by_index(client, login_as, interviewer_user, school_payload, mocker: MockerFixture):
    login_as(interviewer_user)
    mocker.patch(f"{CRUD}.school_code_exists", new_callable=AsyncMock, return_value=False)
    mocker.patch(
        f"{CRUD}.create_school", new_callable=AsyncMock,
        side_effect=DuplicateRecordError("schools", ["school_code"]),
    )

    response = await client.post(f"{API}/schools/", json=school_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "School code already exists"

@pytest.mark.asyncio
async def test_create_school_validation_collects_all_errors(client, login_as, interviewer_user, school_payload):
    login_as(interviewer_user)
    school_payload["phone"] = "12345"
    school_payload["students"][0]["gender"] = "UNKNOWN"
    school_payload["students"][0]["age"] = 40
    school_payload["headTeacher"]["sourcesOfIncome"] = []

    response = await client.post(f"{API}/schools/", json=school_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    body = response.json()
    assert body["message"] == "Validation failed"
    paths = {error.split(":")[0] for error in body["errors"]}
    assert {"phone", "students.0.gender", "students.0.age", "headTeacher.sourcesOfIncome"} <= paths

@pytest.mark.asyncio
async def test_create_school_requires_students(client, login_as, interviewer_user, school_payload):
    login_as(interviewer_user)
    school_payload["students"] = []

    response = await client.post(f"{API}/schools/", json=school_payload)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert any(error.startswith("students") for error in response.json()["errors"])

# --- Read ---

@pytest.mark.asyncio
async def test_list_schools_paginates_and_clamps_limit(client, login_as, interviewer_user, school_payload, mocker: MockerFixture):
    login_as(interviewer_user)
    school = make_school(school_payload, interviewer_user.interviewer_id)
    mock_list = mocker.patch(f"{CRUD}.get_schools", new_callable=AsyncMock, return_value=([school], 1))

    response = await client.get(f"{API}/schools/", params={"limit": 500, "page": 0, "search": "isa", "status": "DRAFT"})

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["pagination"] == {"page": 1, "limit": 100, "total": 1, "pages": 1, "hasNext": False, "hasPrev": False}
    mock_list.assert_awaited_once_with(
        page=1, limit=100, search="isa", lga=None, status="DRAFT", interviewer_id=None,
    )

@pytest.mark.asyncio
async def test_list_schools_rejects_unknown_status(client, login_as, interviewer_user):
    login_as(interviewer_user)

    response = await client.get(f"{API}/schools/", params={"status": "ARCHIVED"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST

@pytest.mark.asyncio
async def test_my_schools_scoped_to_caller(client, login_as, interviewer_user, mocker: MockerFixture):
    login_as(interviewer_user)
    mock_list = mocker.patch(f"{CRUD}.get_schools", new_callable=AsyncMock, return_value=([], 0))

    response = await client.get(f"{API}/schools/my-schools")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["pagination"]["pages"] == 0
    assert mock_list.call_args.kwargs["interviewer_id"] == interviewer_user.interviewer_id

@pytest.mark.asyncio
async def test_get_school_not_found(client, login_as, interviewer_user, mocker: MockerFixture):
    login_as(interviewer_user)
    mocker.patch(f"{CRUD}.get_school_by_id", new_callable=AsyncMock, return_value=None)

    response = await client.get(f"{API}/schools/{uuid.uuid4()}")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "School not found"

@pytest.mark.asyncio
async def test_list_students_passes_filters(client, login_as, interviewer_user, mocker: MockerFixture):
    login_as(interviewer_user)
    row = StudentRow(
        id=uuid.uuid4(), name="Abdullahi Sani", age=11, gender="MALE", is_begging=True,
        school_id=uuid.uuid4(), school_code="SCH100", school_name="Makarantar Malam Isa",
        school_lga="Dala", school_status="DRAFT",
    )
    mock_students = mocker.patch(f"{CRUD}.get_students", new_callable=AsyncMock, return_value=([row], 1))

    response = await client.get(f"{API}/schools/students", params={
        "lga": "Dala", "gender": "MALE", "isBegging": "true", "ageRange": "5-12",
    })

    assert response.status_code == status.HTTP_200_OK
    data = response.json()["data"][0]
    assert data["schoolCode"] == "SCH100"
    assert data["schoolName"] == "Makarantar Malam Isa"
    kwargs = mock_students.call_args.kwargs
    assert kwargs["gender"] == "MALE"
    assert kwargs["is_begging"] is True
    assert kwargs["age_range"] == "5-12"
    assert kwargs["lga"] == "Dala"

@pytest.mark.asyncio
async def test_list_students_bad_age_range(client, login_as, interviewer_user, mocker: MockerFixture):
    login_as(interviewer_user)
    mock_students = mocker.patch(f"{CRUD}.get_students", new_callable=AsyncMock)

    response = await client.get(f"{API}/schools/students", params={"ageRange": "twelve"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    mock_students.assert_not_called()

# --- Update / delete ownership ---

@pytest.mark.asyncio
async def test_update_school_by_non_owner_forbidden(
    client, login_as, interviewer_user, other_interviewer_user, school_payload, mocker: MockerFixture
):
    login_as(other_interviewer_user)
    mocker.patch(
        f"{CRUD}.get_school_by_id", new_callable=AsyncMock,
        return_value=make_school(school_payload, interviewer_user.interviewer_id),
    )
    mock_update = mocker.patch(f"{CRUD}.update_school", new_callable=AsyncMock)

    response = await client.put(f"{API}/schools/{uuid.uuid4()}", json={"status": "PUBLISHED"})

    assert response.status_code == status.HTTP_403_FORBIDDEN
    mock_update.assert_not_called()

@pytest.mark.asyncio
async def test_update_missing_school_is_not_found_before_forbidden(client, login_as, other_interviewer_user, mocker: MockerFixture):
    login_as(other_interviewer_user)
    mocker.patch(f"{CRUD}.get_school_by_id", new_callable=AsyncMock, return_value=None)

    response = await client.put(f"{API}/schools/{uuid.uuid4()}", json={"status": "PUBLISHED"})

    assert response.status_code == status.HTTP_404_NOT_FOUND

@pytest.mark.asyncio
async def test_admin_can_update_any_school(client, login_as, admin_user, interviewer_user, school_payload, mocker: MockerFixture):
    login_as(admin_user)
    school = make_school(school_payload, interviewer_user.interviewer_id)
    published = school.model_copy(update={"status": "PUBLISHED"})
    mocker.patch(f"{CRUD}.get_school_by_id", new_callable=AsyncMock, return_value=school)
    mock_update = mocker.patch(f"{CRUD}.update_school", new_callable=AsyncMock, return_value=published)

    response = await client.put(f"{API}/schools/{school.id}", json={"status": "PUBLISHED"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["status"] == "PUBLISHED"
    school_id, school_in = mock_update.call_args.args
    assert school_id == school.id
    assert school_in.model_dump(exclude_unset=True) == {"status": "PUBLISHED"}

@pytest.mark.asyncio
async def test_update_school_code_rechecked(client, login_as, interviewer_user, school_payload, mocker: MockerFixture):
    login_as(interviewer_user)
    school = make_school(school_payload, interviewer_user.interviewer_id)
    mocker.patch(f"{CRUD}.get_school_by_id", new_callable=AsyncMock, return_value=school)
    mock_exists = mocker.patch(f"{CRUD}.school_code_exists", new_callable=AsyncMock, return_value=True)
    mock_update = mocker.patch(f"{CRUD}.update_school", new_callable=AsyncMock)

    response = await client.put(f"{API}/schools/{school.id}", json={"schoolCode": "SCH200"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "School code already exists"
    mock_exists.assert_awaited_once_with("SCH200", exclude_id=school.id)
    mock_update.assert_not_called()

@pytest.mark.asyncio
async def test_update_same_school_code_skips_check(client, login_as, interviewer_user, school_payload, mocker: MockerFixture):
    login_as(interviewer_user)
    school = make_school(school_payload, interviewer_user.interviewer_id)
    mocker.patch(f"{CRUD}.get_school_by_id", new_callable=AsyncMock, return_value=school)
    mock_exists = mocker.patch(f"{CRUD}.school_code_exists", new_callable=AsyncMock)
    mocker.patch(f"{CRUD}.update_school", new_callable=AsyncMock, return_value=school)

    response = await client.put(f"{API}/schools/{school.id}", json={"schoolCode": "SCH100"})

    assert response.status_code == status.HTTP_200_OK
    mock_exists.assert_not_called()

@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"name": None}, {"schoolCode": None}, {"students": None}, {"status": None}])
async def test_update_school_rejects_null_required_field(client, login_as, interviewer_user, school_payload, body, mocker: MockerFixture):
    login_as(interviewer_user)
    school = make_school(school_payload, interviewer_user.interviewer_id)
    mocker.patch(f"{CRUD}.get_school_by_id", new_callable=AsyncMock, return_value=school)
    mock_exists = mocker.patch(f"{CRUD}.school_code_exists", new_callable=AsyncMock)
    mock_update = mocker.patch(f"{CRUD}.update_school", new_callable=AsyncMock)

    response = await client.put(f"{API}/schools/{school.id}", json=body)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    field = next(iter(body))
    assert any(f"{field} cannot be null" in error for error in response.json()["errors"])
    mock_exists.assert_not_called()
    mock_update.assert_not_called()

@pytest.mark.asyncio
async def test_update_school_clears_nullable_field(client, login_as, interviewer_user, school_payload, mocker: MockerFixture):
    login_as(interviewer_user)
    school = make_school(school_payload, interviewer_user.interviewer_id)
    mocker.patch(f"{CRUD}.get_school_by_id", new_callable=AsyncMock, return_value=school)
    mock_update = mocker.patch(f"{CRUD}.update_school", new_callable=AsyncMock, return_value=school)

    response = await client.put(f"{API}/schools/{school.id}", json={"village": None})

    assert response.status_code == status.HTTP_200_OK
    _, school_in = mock_update.call_args.args
    assert school_in.model_dump(exclude_unset=True) == {"village": None}

@pytest.mark.asyncio
async def test_owner_deletes_school(client, login_as, interviewer_user, school_payload, mocker: MockerFixture):
    login_as(interviewer_user)
    school = make_school(school_payload, interviewer_user.interviewer_id)
    mocker.patch(f"{CRUD}.get_school_by_id", new_callable=AsyncMock, return_value=school)
    mock_delete = mocker.patch(f"{CRUD}.delete_school", new_callable=AsyncMock, return_value=True)

    response = await client.delete(f"{API}/schools/{school.id}")

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"success": True, "message": "School deleted successfully", "data": None, "errors": None}
    mock_delete.assert_awaited_once_with(school.id)

@pytest.mark.asyncio
async def test_non_owner_cannot_delete_school(
    client, login_as, interviewer_user, supervisor_user, school_payload, mocker: MockerFixture
):
    login_as(supervisor_user)
    mocker.patch(
        f"{CRUD}.get_school_by_id", new_callable=AsyncMock,
        return_value=make_school(school_payload, interviewer_user.interviewer_id),
    )
    mock_delete = mocker.patch(f"{CRUD}.delete_school", new_callable=AsyncMock)

    response = await client.delete(f"{API}/schools/{uuid.uuid4()}")

    assert response.status_code == status.HTTP_403_FORBIDDEN
    mock_delete.assert_not_called()
