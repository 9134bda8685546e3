from typing import cast
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest
from httpx import HTTPStatusError
from pydantic import ValidationError

from src.client import ClientStatusEnum, CreateClientRequest, UpdateClientRequest
from src.shared.database.errors import UNDEFINED_TABLE
from src.shared.exceptions import DataAccessError


def create_request(first_name="John", last_name="Doe", **kwargs) -> CreateClientRequest:
    kwargs.setdefault("email", f"{first_name.lower()}@example.com")
    return CreateClientRequest(first_name=first_name, last_name=last_name, **kwargs)


@pytest.mark.asyncio
async def test_create_client(koravi_client):
    """Test creating a client via API."""
    response = await koravi_client.create_client(create_request(labels=["VIP"], occupation="Teacher"))

    assert response.first_name == "John"
    assert response.last_name == "Doe"
    assert response.email == "john@example.com"
    assert response.labels == ["VIP"]
    assert response.status == ClientStatusEnum.ACTIVE
    assert response.client_id == 1
    assert response.created_at == response.updated_at
    assert response.full_name == "John Doe"


@pytest.mark.asyncio
async def test_create_client_with_phone_only(koravi_client):
    response = await koravi_client.create_client(
        CreateClientRequest(first_name="Michael", last_name="Chen", phone="555-0101")
    )

    assert response.email is None
    assert response.phone == "555-0101"


def test_create_request_requires_email_or_phone():
    with pytest.raises(ValidationError) as exc_info:
        CreateClientRequest(first_name="No", last_name="Contact", phone="   ")

    assert "Either email or phone number is required" in str(exc_info.value)


def test_create_request_rejects_blank_names():
    with pytest.raises(ValidationError):
        CreateClientRequest(first_name="   ", last_name="Doe", email="a@example.com")


@pytest.mark.asyncio
async def test_create_client_server_side_validation(koravi_client):
    """Payloads that bypass the SDK are still validated by the API."""
    response = await koravi_client.client.post(
        "/api/v1/clients/",
        json={"first_name": "No", "last_name": "Contact"},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_conflict_maps_to_409(koravi_client, fake_repository):
    fake_repository.insert = AsyncMock(
        side_effect=DataAccessError("Failed to create client: constraint violation", code="23505")
    )

    with pytest.raises(HTTPStatusError) as exc_info:
        await koravi_client.create_client(create_request())

    error = cast(HTTPStatusError, exc_info.value)
    assert error.response.status_code == 409
    assert "constraint violation" in error.response.json()["detail"]


@pytest.mark.asyncio
async def test_get_client(koravi_client):
    created = await koravi_client.create_client(create_request("Bob", "Johnson"))

    retrieved = await koravi_client.get_client(created.id)

    assert retrieved.id == created.id
    assert retrieved.first_name == "Bob"


@pytest.mark.asyncio
async def test_get_missing_client_returns_none(koravi_client):
    assert await koravi_client.get_client(uuid4()) is None


@pytest.mark.asyncio
async def test_update_client_changes_only_sent_fields(koravi_client):
    created = await koravi_client.create_client(create_request("Jane", "Doe", notes="Allergic to latex"))

    updated = await koravi_client.update_client(
        created.id,
        UpdateClientRequest(first_name="Janet", status=ClientStatusEnum.INACTIVE),
    )

    assert updated.first_name == "Janet"
    assert updated.status == ClientStatusEnum.INACTIVE
    assert updated.last_name == "Doe"
    assert updated.notes == "Allergic to latex"
    assert updated.created_at == created.created_at
    assert updated.updated_at >= created.updated_at


@pytest.mark.asyncio
async def test_update_missing_client_returns_404(koravi_client):
    with pytest.raises(HTTPStatusError) as exc_info:
        await koravi_client.update_client(uuid4(), UpdateClientRequest(first_name="Ghost"))

    assert cast(HTTPStatusError, exc_info.value).response.status_code == 404


@pytest.mark.asyncio
async def test_update_cannot_clear_first_name(koravi_client):
    created = await koravi_client.create_client(create_request())

    response = await koravi_client.client.patch(
        f"/api/v1/clients/{created.id}",
        json={"first_name": None},
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_client_is_idempotent(koravi_client):
    created = await koravi_client.create_client(create_request())

    await koravi_client.delete_client(created.id)
    await koravi_client.delete_client(created.id)

    assert await koravi_client.get_client(created.id) is None


@pytest.mark.asyncio
async def test_list_clients_with_filters(koravi_client):
    await koravi_client.create_client(create_request("Sarah", "Johnson", labels=["VIP", "Balayage"]))
    await koravi_client.create_client(create_request("Michael", "Chen", labels=["Color"]))
    await koravi_client.create_client(create_request("Emma", "Davis", status=ClientStatusEnum.ARCHIVED))

    everyone = await koravi_client.list_clients()
    archived = await koravi_client.list_clients(status=ClientStatusEnum.ARCHIVED)
    labelled = await koravi_client.list_clients(labels=["VIP", "Color"])
    searched = await koravi_client.list_clients(search="johnson")
    first_page = await koravi_client.list_clients(limit=2)
    second_page = await koravi_client.list_clients(limit=2, offset=2)

    assert [c.first_name for c in everyone] == ["Emma", "Michael", "Sarah"]
    assert [c.first_name for c in archived] == ["Emma"]
    assert {c.first_name for c in labelled} == {"Sarah", "Michael"}
    assert [c.first_name for c in searched] == ["Sarah"]
    assert [c.first_name for c in first_page] == ["Emma", "Michael"]
    assert [c.first_name for c in second_page] == ["Sarah"]


@pytest.mark.asyncio
async def test_search_clients(koravi_client):
    await koravi_client.create_client(create_request("Sarah", "Johnson"))
    await koravi_client.create_client(create_request("Michael", "Chen"))

    results = await koravi_client.search_clients("sa")

    assert [c.first_name for c in results] == ["Sarah"]


@pytest.mark.asyncio
async def test_blank_search_returns_empty_list(koravi_client, fake_repository):
    await koravi_client.create_client(create_request())

    assert await koravi_client.search_clients("") == []
    assert await koravi_client.search_clients("   ") == []
    assert fake_repository.calls["search"] == 0


@pytest.mark.asyncio
async def test_get_stats(koravi_client):
    await koravi_client.create_client(create_request("Ann", "Lee"))
    await koravi_client.create_client(create_request("Bob", "Ray", status=ClientStatusEnum.INACTIVE))

    stats = await koravi_client.get_stats()

    assert stats.total == 2
    assert stats.active == 1
    assert stats.inactive == 1
    assert stats.archived == 0


@pytest.mark.asyncio
async def test_backend_outage_maps_to_503(koravi_client, fake_repository):
    fake_repository.select_clients = AsyncMock(
        side_effect=DataAccessError("Failed to fetch clients: database unavailable", retryable=True)
    )

    with pytest.raises(HTTPStatusError) as exc_info:
        await koravi_client.list_clients()

    assert cast(HTTPStatusError, exc_info.value).response.status_code == 503
    assert fake_repository.select_clients.await_count == 3


@pytest.mark.asyncio
async def test_health_healthy(koravi_client):
    report = await koravi_client.health()

    assert report.status == "healthy"
    assert report.connected is True


@pytest.mark.asyncio
async def test_health_degraded_when_table_missing(koravi_client, fake_repository):
    fake_repository.ping = AsyncMock(side_effect=DataAccessError("no table", code=UNDEFINED_TABLE))

    response = await koravi_client.client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "degraded"


@pytest.mark.asyncio
async def test_health_unhealthy_returns_503(koravi_client, fake_repository):
    fake_repository.ping = AsyncMock(side_effect=DataAccessError("connection refused", retryable=True))

    report = await koravi_client.health()
    response = await koravi_client.client.get("/health")

    assert report.status == "unhealthy"
    assert report.connected is False
    assert response.status_code == 503


@pytest.mark.asyncio
async def test_root(koravi_client):
    response = await koravi_client.client.get("/")

    assert response.status_code == 200
    assert response.json() == {"message": "Welcome to Koravi CRM API"}
