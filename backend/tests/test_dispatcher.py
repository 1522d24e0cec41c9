"""
Tests for domain event dispatch and the best-effort side-effect writers.
"""

import pytest
from sqlalchemy import select

from resource_booking.db.session import AsyncSessionLocal
from resource_booking.models import ActivityLog, Notification
from resource_booking.services.activity_log_service import ActivityLogService
from resource_booking.services.dispatcher import (
    BookingCreated,
    BookingStatusChanged,
    EventDispatcher,
)
from resource_booking.services.event_handlers import build_dispatcher
from resource_booking.services.notification_service import NotificationService


def _created(**overrides) -> BookingCreated:
    values = dict(
        booking_id=1,
        resource_id=1,
        resource_name="Seminar Room A",
        requester_id=1,
        status="pending",
    )
    values.update(overrides)
    return BookingCreated(**values)


def _broken_session_factory():
    raise RuntimeError("database unreachable")


@pytest.mark.asyncio
async def test_handlers_receive_only_their_event_type():
    dispatcher = EventDispatcher()
    created, changed = [], []

    async def on_created(event):
        created.append(event)

    async def on_changed(event):
        changed.append(event)

    dispatcher.subscribe(BookingCreated, on_created)
    dispatcher.subscribe(BookingStatusChanged, on_changed)

    event = _created()
    await dispatcher.publish([event])

    assert created == [event]
    assert changed == []


@pytest.mark.asyncio
async def test_failing_handler_does_not_stop_the_others():
    dispatcher = EventDispatcher()
    delivered = []

    async def explode(event):
        raise RuntimeError("boom")

    async def record(event):
        delivered.append(event.booking_id)

    dispatcher.subscribe(BookingCreated, explode)
    dispatcher.subscribe(BookingCreated, record)

    await dispatcher.publish([_created(booking_id=1), _created(booking_id=2)])

    assert delivered == [1, 2]


@pytest.mark.asyncio
async def test_publish_without_handlers_is_a_no_op():
    await EventDispatcher().publish([_created()])


def test_events_are_immutable_and_identified():
    first, second = _created(), _created()
    assert first.event_id != second.event_id
    assert first.occurred_at.tzinfo is not None
    with pytest.raises(AttributeError):
        first.status = "approved"


@pytest.mark.asyncio
async def test_notify_reports_failure_instead_of_raising():
    service = NotificationService(_broken_session_factory)
    assert await service.notify(1, "Booking approved", "msg") is False


@pytest.mark.asyncio
async def test_activity_log_reports_failure_instead_of_raising():
    service = ActivityLogService(_broken_session_factory)
    assert await service.log(1, "BOOKING_CREATED", "Booking", 1) is False


@pytest.mark.asyncio
async def test_status_change_writes_notification_and_log(db_session, organizer, admin_user):
    dispatcher = build_dispatcher(AsyncSessionLocal)
    event = BookingStatusChanged(
        booking_id=5,
        resource_id=1,
        resource_name="Seminar Room A",
        requester_id=organizer.id,
        actor_id=admin_user.id,
        status="cancelled",
        admin_note="Building closed",
    )

    await dispatcher.publish([event])

    notification = (await db_session.execute(select(Notification))).scalar_one()
    assert notification.user_id == organizer.id
    assert notification.title == "Booking cancelled"
    assert notification.severity == "warning"
    assert notification.message.endswith("Note: Building closed")

    log = (await db_session.execute(select(ActivityLog))).scalar_one()
    assert log.action == "BOOKING_CANCELLED"
    assert log.actor_id == admin_user.id
    assert log.target_id == 5


@pytest.mark.asyncio
async def test_pending_creation_sends_no_notification(db_session, organizer):
    dispatcher = build_dispatcher(AsyncSessionLocal)

    await dispatcher.publish([_created(requester_id=organizer.id, status="pending")])

    notifications = (await db_session.execute(select(Notification))).scalars().all()
    assert notifications == []
    log = (await db_session.execute(select(ActivityLog))).scalar_one()
    assert log.action == "BOOKING_CREATED"
