# tests/functional/api/v1/endpoints/test_users.py
import uuid
import pytest
from unittest.mock import AsyncMock

from fastapi import status
from pytest_mock import MockerFixture

from app.core.config import settings
from app.models.enums import UserRole

API = settings.API_V1_PREFIX
CRUD = "app.api.v1.endpoints.users.crud"

@pytest.mark.asyncio
async def test_list_users_requires_admin(client, login_as, supervisor_user, mocker: MockerFixture):
    login_as(supervisor_user)
    mock_list = mocker.patch(f"{CRUD}.get_users", new_callable=AsyncMock)

    response = await client.get(f"{API}/users/")

    assert response.status_code == status.HTTP_403_FORBIDDEN
    assert response.json() == {"success": False, "message": "Insufficient permissions"}
    mock_list.assert_not_called()

@pytest.mark.asyncio
async def test_list_users_with_filters(client, login_as, admin_user, interviewer_user, mocker: MockerFixture):
    login_as(admin_user)
    mock_list = mocker.patch(f"{CRUD}.get_users", new_callable=AsyncMock, return_value=([interviewer_user], 11))

    response = await client.get(f"{API}/users/", params={
        "page": 2, "limit": 5, "search": "musa", "role": "INTERVIEWER", "isActive": "true",
    })

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["pagination"] == {"page": 2, "limit": 5, "total": 11, "pages": 3, "hasNext": True, "hasPrev": True}
    assert body["data"][0]["interviewerId"] == interviewer_user.interviewer_id
    mock_list.assert_awaited_once_with(
        page=2, limit=5, search="musa", role="INTERVIEWER", lga=None, is_active=True,
    )

@pytest.mark.asyncio
async def test_create_user_conflicting_interviewer_id(client, login_as, admin_user, mocker: MockerFixture):
    login_as(admin_user)
    mocker.patch(f"{CRUD}.interviewer_id_exists", new_callable=AsyncMock, return_value=True)
    mock_create = mocker.patch(f"{CRUD}.create_user", new_callable=AsyncMock)

    response = await client.post(f"{API}/users/", json={
        "interviewerId": "SUP00001", "name": "Sani Usman", "lga": "Gwale",
        "role": "SUPERVISOR", "password": "secret123",
    })

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Interviewer ID already exists"
    mock_create.assert_not_called()

@pytest.mark.asyncio
async def test_create_user_hashes_password(client, login_as, admin_user, make_user, mocker: MockerFixture):
    login_as(admin_user)
    created = make_user(UserRole.SUPERVISOR, "SUP00001")
    mocker.patch(f"{CRUD}.interviewer_id_exists", new_callable=AsyncMock, return_value=False)
    mocker.patch(f"{CRUD}.email_exists", new_callable=AsyncMock, return_value=False)
    mock_create = mocker.patch(f"{CRUD}.create_user", new_callable=AsyncMock, return_value=created)

    response = await client.post(f"{API}/users/", json={
        "interviewerId": "SUP00001", "name": "Sani Usman", "email": "sani@example.com",
        "lga": "Gwale", "role": "SUPERVISOR", "password": "secret123",
    })

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["data"]["role"] == "SUPERVISOR"
    user_in, password_hash = mock_create.call_args.args
    assert user_in.interviewer_id == "SUP00001"
    assert password_hash.startswith("$2")

@pytest.mark.asyncio
async def test_update_user_rechecks_changed_email(client, login_as, admin_user, interviewer_user, mocker: MockerFixture):
    login_as(admin_user)
    mocker.patch(f"{CRUD}.get_user_by_id", new_callable=AsyncMock, return_value=interviewer_user)
    mock_email = mocker.patch(f"{CRUD}.email_exists", new_callable=AsyncMock, return_value=True)
    mock_update = mocker.patch(f"{CRUD}.update_user", new_callable=AsyncMock)

    response = await client.put(f"{API}/users/{interviewer_user.id}", json={"email": "taken@example.com"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Email already exists"
    mock_email.assert_awaited_once_with("taken@example.com", exclude_id=interviewer_user.id)
    mock_update.assert_not_called()

@pytest.mark.asyncio
async def test_update_user_rehashes_password(client, login_as, admin_user, interviewer_user, mocker: MockerFixture):
    login_as(admin_user)
    mocker.patch(f"{CRUD}.get_user_by_id", new_callable=AsyncMock, return_value=interviewer_user)
    mock_update = mocker.patch(f"{CRUD}.update_user", new_callable=AsyncMock, return_value=interviewer_user)

    response = await client.put(f"{API}/users/{interviewer_user.id}", json={"lga": "Tarauni", "password": "newsecret"})

    assert response.status_code == status.HTTP_200_OK
    user_id, update_data = mock_update.call_args.args
    assert update_data["lga"] == "Tarauni"
    assert "password" not in update_data
    assert update_data["password_hash"].startswith("$2")

@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{"name": None}, {"role": None}, {"isActive": None}, {"password": None}])
async def test_update_user_rejects_null_required_field(client, login_as, admin_user, interviewer_user, body, mocker: MockerFixture):
    login_as(admin_user)
    mocker.patch(f"{CRUD}.get_user_by_id", new_callable=AsyncMock, return_value=interviewer_user)
    mock_update = mocker.patch(f"{CRUD}.update_user", new_callable=AsyncMock)

    response = await client.put(f"{API}/users/{interviewer_user.id}", json=body)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    mock_update.assert_not_called()

@pytest.mark.asyncio
async def test_update_unknown_user(client, login_as, admin_user, mocker: MockerFixture):
    login_as(admin_user)
    mocker.patch(f"{CRUD}.get_user_by_id", new_callable=AsyncMock, return_value=None)

    response = await client.put(f"{API}/users/{uuid.uuid4()}", json={"lga": "Tarauni"})

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["message"] == "User not found"

@pytest.mark.asyncio
async def test_admin_cannot_delete_self(client, login_as, admin_user, mocker: MockerFixture):
    login_as(admin_user)
    mocker.patch(f"{CRUD}.get_user_by_id", new_callable=AsyncMock, return_value=admin_user)
    mock_delete = mocker.patch(f"{CRUD}.delete_user", new_callable=AsyncMock)

    response = await client.delete(f"{API}/users/{admin_user.id}")

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["message"] == "Cannot delete your own account"
    mock_delete.assert_not_called()

@pytest.mark.asyncio
async def test_delete_user(client, login_as, admin_user, interviewer_user, mocker: MockerFixture):
    login_as(admin_user)
    mocker.patch(f"{CRUD}.get_user_by_id", new_callable=AsyncMock, return_value=interviewer_user)
    mock_delete = mocker.patch(f"{CRUD}.delete_user", new_callable=AsyncMock, return_value=True)

    response = await client.delete(f"{API}/users/{interviewer_user.id}")

    assert response.status_code == status.HTTP_200_OK
    mock_delete.assert_awaited_once_with(interviewer_user.id)

@pytest.mark.asyncio
async def test_toggle_status_flips_active_flag(client, login_as, admin_user, interviewer_user, mocker: MockerFixture):
    login_as(admin_user)
    deactivated = interviewer_user.model_copy(update={"is_active": False})
    mocker.patch(f"{CRUD}.get_user_by_id", new_callable=AsyncMock, return_value=interviewer_user)
    mock_update = mocker.patch(f"{CRUD}.update_user", new_callable=AsyncMock, return_value=deactivated)

    response = await client.patch(f"{API}/users/{interviewer_user.id}/toggle-status")

    assert response.status_code == status.HTTP_200_OK
    assert response.json()["data"]["isActive"] is False
    mock_update.assert_awaited_once_with(interviewer_user.id, {"is_active": False})

@pytest.mark.asyncio
async def test_toggle_own_status_rejected(client, login_as, admin_user, mocker: MockerFixture):
    login_as(admin_user)
    mocker.patch(f"{CRUD}.get_user_by_id", new_callable=AsyncMock, return_value=admin_user)

    response = await client.patch(f"{API}/users/{admin_user.id}/toggle-status")

    assert response.status_code == status.HTTP_400_BAD_REQUEST

@pytest.mark.asyncio
async def test_set_user_password(client, login_as, admin_user, interviewer_user, mocker: MockerFixture):
    login_as(admin_user)
    mocker.patch(f"{CRUD}.get_user_by_id", new_callable=AsyncMock, return_value=interviewer_user)
    mock_set = mocker.patch(f"{CRUD}.set_user_password", new_callable=AsyncMock, return_value=True)

    response = await client.patch(f"{API}/users/{interviewer_user.id}/password", json={"password": "fresh-secret"})

    assert response.status_code == status.HTTP_200_OK
    mock_set.assert_awaited_once()
    assert mock_set.call_args.args[0] == interviewer_user.id
