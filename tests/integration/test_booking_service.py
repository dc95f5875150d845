from datetime import datetime
from uuid import uuid4

import pytest

from fieldbook.models import Job, JobStatus
from fieldbook.services.booking.booking_service import (
    BookingService,
    BusinessNotFoundError,
    SlotUnavailableError,
)

MONDAY = "2025-06-02"
NOW = datetime(2025, 5, 1, 12, 0)


def test_reserve_slot_creates_scheduled_job(db, business, make_client):
    client = make_client(business, email="pat@example.com")

    job = BookingService.reserve_slot(
        db,
        business.id,
        MONDAY,
        "10:00",
        90,
        customer_name="Pat",
        customer_email="pat@example.com",
        service_name="Deep clean",
        estimated_cost=180.0,
        now=NOW,
    )

    assert job.scheduled_at == datetime(2025, 6, 2, 10, 0)
    assert job.time_is_set is True
    assert job.status == JobStatus.SCHEDULED.value
    assert job.estimated_duration == 90
    assert job.client_id == client.id
    assert float(job.estimated_cost) == 180.0


def test_second_booking_for_same_slot_rejected_at_capacity_one(db, business):
    BookingService.reserve_slot(db, business.id, MONDAY, "10:00", 60, now=NOW)

    with pytest.raises(SlotUnavailableError):
        BookingService.reserve_slot(db, business.id, MONDAY, "10:00", 60, now=NOW)

    with pytest.raises(SlotUnavailableError):
        BookingService.reserve_slot(db, business.id, MONDAY, "10:30", 60, now=NOW)

    assert db.query(Job).count() == 1


def test_capacity_two_allows_second_concurrent_booking(db, make_business):
    business = make_business(team_size=1)

    BookingService.reserve_slot(db, business.id, MONDAY, "10:00", 60, now=NOW)
    BookingService.reserve_slot(db, business.id, MONDAY, "10:00", 60, now=NOW)

    with pytest.raises(SlotUnavailableError):
        BookingService.reserve_slot(db, business.id, MONDAY, "10:00", 60, now=NOW)


def test_untimed_job_does_not_block_booking(db, business, make_job):
    make_job(business, datetime(2025, 6, 2, 0, 0), time_is_set=False)

    job = BookingService.reserve_slot(db, business.id, MONDAY, "09:00", 60, now=NOW)
    assert job.id is not None


def test_off_grid_time_rejected(db, business):
    with pytest.raises(SlotUnavailableError):
        BookingService.reserve_slot(db, business.id, MONDAY, "10:15", 60, now=NOW)


def test_unknown_business_rejected(db):
    with pytest.raises(BusinessNotFoundError):
        BookingService.reserve_slot(db, uuid4(), MONDAY, "10:00", 60, now=NOW)
