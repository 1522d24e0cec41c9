"""
Tests for the resource registry endpoints.
"""

import pytest
from httpx import AsyncClient

from helpers import at
from resource_booking.core.exceptions import DuplicateResource
from resource_booking.schemas.resource import ResourceUpdate
from resource_booking.services import resource_service


def _resource_payload(**overrides) -> dict:
    payload = {
        "name": "Chemistry Lab 2",
        "type": "lab",
        "capacity": 24,
        "location": "Science Block",
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
async def test_create_resource_defaults(client: AsyncClient, admin_headers):
    response = await client.post("/api/v1/resources/", json=_resource_payload(), headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Chemistry Lab 2"
    assert data["type"] == "lab"
    assert data["is_available"] is True
    assert data["requires_approval"] is True
    assert data["auto_approve"] is False


@pytest.mark.asyncio
async def test_create_resource_requires_admin(client: AsyncClient, organizer_headers):
    response = await client.post("/api/v1/resources/", json=_resource_payload(), headers=organizer_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_create_resource_rejects_negative_capacity(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/resources/", json=_resource_payload(capacity=-1), headers=admin_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_resource_rejects_unknown_type(client: AsyncClient, admin_headers):
    response = await client.post(
        "/api/v1/resources/", json=_resource_payload(type="spaceship"), headers=admin_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_name_returns_409(client: AsyncClient, admin_headers, manual_room):
    response = await client.post(
        "/api/v1/resources/", json=_resource_payload(name=manual_room.name), headers=admin_headers
    )
    assert response.status_code == 409
    assert response.json()["code"] == "duplicate_resource"


@pytest.mark.asyncio
async def test_list_and_get_are_public(client: AsyncClient, manual_room, auto_room):
    listing = await client.get("/api/v1/resources/")
    assert listing.status_code == 200
    assert [r["name"] for r in listing.json()] == ["Seminar Room A", "Study Room B"]

    detail = await client.get(f"/api/v1/resources/{auto_room.id}")
    assert detail.status_code == 200
    assert detail.json()["auto_approve"] is True


@pytest.mark.asyncio
async def test_get_unknown_resource(client: AsyncClient):
    response = await client.get("/api/v1/resources/4040")
    assert response.status_code == 404
    assert response.json()["code"] == "resource_not_found"


@pytest.mark.asyncio
async def test_partial_update(client: AsyncClient, admin_headers, manual_room):
    response = await client.put(
        f"/api/v1/resources/{manual_room.id}",
        json={"is_available": False},
        headers=admin_headers,
    )
    assert response.status_code == 200
    data = response.json()
    assert data["is_available"] is False
    assert data["name"] == manual_room.name
    assert data["capacity"] == 40


@pytest.mark.asyncio
async def test_rename_onto_existing_name_returns_409(
    client: AsyncClient, admin_headers, manual_room, auto_room
):
    response = await client.put(
        f"/api/v1/resources/{auto_room.id}",
        json={"name": manual_room.name},
        headers=admin_headers,
    )
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_marking_unavailable_blocks_new_bookings(
    client: AsyncClient, admin_headers, organizer_headers, manual_room
):
    await client.put(
        f"/api/v1/resources/{manual_room.id}", json={"is_available": False}, headers=admin_headers
    )
    response = await client.post(
        "/api/v1/bookings/",
        json={
            "resource_id": manual_room.id,
            "start_time": at(9).isoformat(),
            "end_time": at(10).isoformat(),
        },
        headers=organizer_headers,
    )
    assert response.status_code == 409
    assert response.json()["code"] == "resource_unavailable"


@pytest.mark.asyncio
async def test_delete_keeps_existing_bookings(
    client: AsyncClient, admin_headers, organizer_headers, manual_room
):
    created = await client.post(
        "/api/v1/bookings/",
        json={
            "resource_id": manual_room.id,
            "start_time": at(9).isoformat(),
            "end_time": at(10).isoformat(),
        },
        headers=organizer_headers,
    )
    booking_id = created.json()["id"]

    response = await client.delete(f"/api/v1/resources/{manual_room.id}", headers=admin_headers)
    assert response.status_code == 200

    assert (await client.get(f"/api/v1/resources/{manual_room.id}")).status_code == 404

    mine = await client.get("/api/v1/bookings/my", headers=organizer_headers)
    data = mine.json()
    assert [b["id"] for b in data] == [booking_id]
    assert data[0]["resource_id"] == manual_room.id
    assert data[0]["resource"] is None


@pytest.mark.asyncio
async def test_delete_requires_admin(client: AsyncClient, organizer_headers, manual_room):
    response = await client.delete(f"/api/v1/resources/{manual_room.id}", headers=organizer_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_rename_losing_race_reports_duplicate(db_session, manual_room, auto_room, monkeypatch):
    """The unique index catches a rename that slipped past the name check."""
    taken_name, resource_id = manual_room.name, auto_room.id

    async def name_check_passes(db, name, exclude_id=None):
        return None

    monkeypatch.setattr(resource_service, "_ensure_unique_name", name_check_passes)

    with pytest.raises(DuplicateResource):
        await resource_service.update_resource(
            db_session, resource_id, ResourceUpdate(name=taken_name)
        )

    renamed = await resource_service.get_resource(db_session, resource_id)
    assert renamed.name == "Study Room B"
