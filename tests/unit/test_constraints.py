from datetime import date, datetime, time

import pytest

from fieldbook.services.availability.constraints import (
    AvailabilityLookupError,
    ConstraintAggregator,
    ExistingBooking,
    PriorityReservation,
)
from fieldbook.services.availability.hours import DayHours, Weekday
from fieldbook.services.availability.recurrence import (
    RecurrencePattern,
    RecurrenceRule,
    TimeBlockDefinition,
)
from fieldbook.services.availability.segments import CustomerSegment

MONDAY = date(2025, 6, 2)
SUNDAY = date(2025, 6, 8)


class StubReader:
    def __init__(self, hours=None, blocks=(), reservations=(), bookings=(), team=0,
                 job_values=None, failing=()):
        self.hours = hours
        self.blocks = list(blocks)
        self.reservations = list(reservations)
        self.bookings = list(bookings)
        self.team = team
        self.job_values = job_values
        self.failing = set(failing)
        self.calls = []

    def _read(self, name, value):
        self.calls.append(name)
        if name in self.failing:
            raise ConnectionError(f"{name} unavailable")
        return value

    def get_business_hours_config(self, business_id):
        return self._read("hours", self.hours)

    def list_time_blocks(self, business_id):
        return self._read("blocks", self.blocks)

    def list_priority_reservations(self, business_id):
        return self._read("reservations", self.reservations)

    def list_scheduled_bookings(self, business_id, window_start, window_end):
        return self._read("bookings", self.bookings)

    def count_team_members(self, business_id):
        return self._read("team", self.team)

    def find_completed_job_values(self, business_id, customer_email, customer_phone):
        return self._read("segment", self.job_values)


def reservation(**kwargs):
    values = dict(
        weekdays=frozenset({Weekday.MONDAY}),
        start_time=time(9, 0),
        end_time=time(11, 0),
        segment=CustomerSegment.VIP,
    )
    values.update(kwargs)
    return PriorityReservation(**values)


def test_collect_assembles_day_constraints():
    weekly = TimeBlockDefinition(
        id="standup",
        title="Standup",
        start=datetime(2025, 5, 26, 9, 0),
        end=datetime(2025, 5, 26, 9, 30),
        recurrence=RecurrenceRule(RecurrencePattern.WEEKLY),
    )
    other_day = TimeBlockDefinition(
        id="holiday",
        title="Holiday",
        start=datetime(2025, 6, 4, 0, 0),
        end=datetime(2025, 6, 5, 0, 0),
    )
    booking = ExistingBooking(start=datetime(2025, 6, 2, 10, 0), duration_minutes=60)
    reader = StubReader(
        blocks=[weekly, other_day],
        reservations=[reservation(), reservation(enabled=False)],
        bookings=[booking],
        team=2,
    )

    constraints = ConstraintAggregator(reader).collect("biz", MONDAY)

    assert constraints.hours == DayHours.between("09:00", "17:00")
    assert [b.occurrence_id for b in constraints.blocked] == ["standup_1"]
    assert len(constraints.reservations) == 1
    assert constraints.bookings == (booking,)
    assert constraints.capacity == 3
    assert constraints.segment is None


def test_closed_day_skips_remaining_reads():
    reader = StubReader(failing={"bookings", "blocks"})

    constraints = ConstraintAggregator(reader).collect("biz", SUNDAY)

    assert constraints.is_closed
    assert "bookings" not in reader.calls
    assert "blocks" not in reader.calls


def test_unreadable_hours_fall_back_to_defaults():
    reader = StubReader(failing={"hours"})

    constraints = ConstraintAggregator(reader).collect("biz", MONDAY)

    assert constraints.opens_at == datetime(2025, 6, 2, 9, 0)
    assert constraints.closes_at == datetime(2025, 6, 2, 17, 0)


def test_unreadable_blocks_and_reservations_degrade_to_empty():
    reader = StubReader(
        blocks=[TimeBlockDefinition("b", "B", datetime(2025, 6, 2, 9), datetime(2025, 6, 2, 10))],
        reservations=[reservation()],
        failing={"blocks", "reservations"},
    )

    constraints = ConstraintAggregator(reader).collect("biz", MONDAY)

    assert constraints.blocked == ()
    assert constraints.reservations == ()


def test_unreadable_bookings_fail_the_lookup():
    reader = StubReader(failing={"bookings"})

    with pytest.raises(AvailabilityLookupError):
        ConstraintAggregator(reader).collect("biz", MONDAY)


def test_capacity_is_at_least_one():
    assert ConstraintAggregator(StubReader(team=0)).resolve_capacity("biz") == 1
    assert ConstraintAggregator(StubReader(team=None)).resolve_capacity("biz") == 1
    assert ConstraintAggregator(StubReader(failing={"team"})).resolve_capacity("biz") == 1
    assert ConstraintAggregator(StubReader(team=4)).resolve_capacity("biz") == 5


def test_segment_not_looked_up_without_identity():
    reader = StubReader(job_values=[1000])

    assert ConstraintAggregator(reader).resolve_segment("biz", None, "") is None
    assert "segment" not in reader.calls


def test_segment_resolution_uses_threshold():
    aggregator = ConstraintAggregator(StubReader(job_values=[300, 300]), vip_threshold=500)
    assert aggregator.resolve_segment("biz", "pat@example.com", None) == CustomerSegment.VIP

    aggregator = ConstraintAggregator(StubReader(job_values=None))
    assert aggregator.resolve_segment("biz", "pat@example.com", None) == CustomerSegment.NEW


def test_segment_failure_means_no_segment():
    aggregator = ConstraintAggregator(StubReader(failing={"segment"}))
    assert aggregator.resolve_segment("biz", "pat@example.com", "555-0100") is None


def test_priority_reservation_release():
    vip_hold = reservation(weekdays=frozenset({Weekday.TUESDAY}), fallback_hours=24)
    slot = datetime(2025, 6, 3, 9, 0)

    assert vip_hold.is_held_against(slot, None, now=datetime(2025, 6, 2, 8, 0))
    assert vip_hold.is_held_against(slot, CustomerSegment.RETURNING, now=datetime(2025, 6, 2, 8, 0))
    assert not vip_hold.is_held_against(slot, CustomerSegment.VIP, now=datetime(2025, 6, 2, 8, 0))
    assert not vip_hold.is_held_against(slot, None, now=datetime(2025, 6, 2, 9, 0))
    assert not vip_hold.is_held_against(datetime(2025, 6, 3, 11, 0), None, now=datetime(2025, 6, 2, 8, 0))


def test_priority_reservation_rejects_inverted_window():
    with pytest.raises(ValueError):
        reservation(start_time=time(11, 0), end_time=time(9, 0))
