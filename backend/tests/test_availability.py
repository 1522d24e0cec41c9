"""
Tests for availability queries: day filtering and the display slot grid.
"""

from datetime import date

import pytest
from httpx import AsyncClient

from helpers import at, as_utc
from resource_booking.core.exceptions import ResourceNotFound
from resource_booking.schemas.booking import BookingSlot
from resource_booking.services.availability_service import (
    build_slot_grid,
    day_bounds,
    list_resource_bookings,
)

DAY = date(2026, 1, 10)


def test_day_bounds_cover_the_whole_utc_day():
    start, end = day_bounds(DAY)
    assert start == at(0)
    assert end.hour == 23 and end.minute == 59 and end.microsecond == 999999


@pytest.mark.asyncio
async def test_lists_only_active_bookings_in_start_order(
    db_session, manual_room, organizer, add_booking
):
    await add_booking(manual_room, organizer, at(14), at(15))
    await add_booking(manual_room, organizer, at(9), at(10), status="pending")
    await add_booking(manual_room, organizer, at(11), at(12), status="rejected")
    await add_booking(manual_room, organizer, at(12), at(13), status="cancelled")

    slots = await list_resource_bookings(db_session, manual_room.id)
    assert [as_utc(s.start_time) for s in slots] == [at(9), at(14)]
    assert [s.status.value for s in slots] == ["pending", "approved"]


@pytest.mark.asyncio
async def test_day_filter_includes_spanning_and_edge_bookings(
    db_session, manual_room, organizer, add_booking
):
    # Ends on the day
    await add_booking(manual_room, organizer, at(22, day=9), at(1))
    # Spans the whole day
    await add_booking(manual_room, organizer, at(12, day=8), at(12, day=8).replace(day=12))
    # Starts on the day
    await add_booking(manual_room, organizer, at(23), at(2, day=11))
    # Other days only
    await add_booking(manual_room, organizer, at(9, day=9), at(10, day=9))
    await add_booking(manual_room, organizer, at(9, day=11), at(10, day=11))

    slots = await list_resource_bookings(db_session, manual_room.id, DAY)
    assert [as_utc(s.start_time) for s in slots] == [at(12, day=8), at(22, day=9), at(23)]


@pytest.mark.asyncio
async def test_unknown_resource_raises(db_session):
    with pytest.raises(ResourceNotFound):
        await list_resource_bookings(db_session, 12345)


@pytest.mark.asyncio
async def test_other_resources_are_ignored(db_session, manual_room, auto_room, organizer, add_booking):
    await add_booking(auto_room, organizer, at(9), at(10))
    assert await list_resource_bookings(db_session, manual_room.id, DAY) == []


def test_slot_grid_marks_hour_of_booking_start():
    """A 09:15-11:00 booking marks 09:00 and 09:30 but not 10:00."""
    booking = BookingSlot(start_time=at(9, 15), end_time=at(11), status="approved")
    grid = build_slot_grid([booking])

    assert len(grid) == 20
    assert grid[0].time == "9:00"
    assert grid[-1].time == "18:30"
    booked = [s.time for s in grid if s.booked]
    assert booked == ["9:00", "9:30"]


def test_slot_grid_empty_day():
    assert not any(s.booked for s in build_slot_grid([]))


@pytest.mark.asyncio
async def test_resource_bookings_endpoint(client: AsyncClient, manual_room, organizer, add_booking):
    await add_booking(manual_room, organizer, at(9), at(10))
    await add_booking(manual_room, organizer, at(9, day=11), at(10, day=11))

    everything = await client.get(f"/api/v1/bookings/resource/{manual_room.id}")
    assert everything.status_code == 200
    assert len(everything.json()) == 2

    one_day = await client.get(
        f"/api/v1/bookings/resource/{manual_room.id}", params={"date": "2026-01-10"}
    )
    data = one_day.json()
    assert len(data) == 1
    assert as_utc(data[0]["start_time"]) == at(9)
    assert data[0]["status"] == "approved"


@pytest.mark.asyncio
async def test_resource_bookings_endpoint_unknown_resource(client: AsyncClient):
    response = await client.get("/api/v1/bookings/resource/999")
    assert response.status_code == 404
    assert response.json()["code"] == "resource_not_found"


@pytest.mark.asyncio
async def test_slot_grid_endpoint(client: AsyncClient, manual_room, organizer, add_booking):
    await add_booking(manual_room, organizer, at(14), at(15))

    response = await client.get(
        f"/api/v1/bookings/resource/{manual_room.id}/slots", params={"date": "2026-01-10"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["resource_id"] == manual_room.id
    assert data["date"] == "2026-01-10"
    booked = [s["time"] for s in data["slots"] if s["booked"]]
    assert booked == ["14:00", "14:30"]


@pytest.mark.asyncio
async def test_slot_grid_endpoint_requires_date(client: AsyncClient, manual_room):
    response = await client.get(f"/api/v1/bookings/resource/{manual_room.id}/slots")
    assert response.status_code == 422
