# ===== fieldbook/services/availability/slots.py =====
"""
Slot generation.

Walks the day's operating hours on a fixed grid and keeps every start time
whose interval of the requested duration
  - ends by closing time,
  - does not overlap any blocked occurrence,
  - overlaps fewer existing bookings than the worker capacity,
  - is not held by a priority reservation for another customer segment.
"""
from datetime import datetime, timedelta
from typing import List
import logging

from fieldbook.services.availability.constraints import DayConstraints
from fieldbook.services.availability.hours import format_time_of_day
from fieldbook.services.availability.intervals import Interval, overlaps

logger = logging.getLogger(__name__)

DEFAULT_SLOT_INTERVAL_MINUTES = 30


def count_overlapping_bookings(constraints: DayConstraints, candidate: Interval) -> int:
    return sum(1 for booking in constraints.bookings if overlaps(booking.interval, candidate))


def is_blocked(constraints: DayConstraints, candidate: Interval) -> bool:
    return any(overlaps(block.interval, candidate) for block in constraints.blocked)


def is_priority_held(constraints: DayConstraints, slot_start: datetime, now: datetime) -> bool:
    return any(
        reservation.is_held_against(slot_start, constraints.segment, now)
        for reservation in constraints.reservations
    )


def generate_available_slots(
        constraints: DayConstraints,
        duration_minutes: int,
        now: datetime,
        slot_interval_minutes: int = DEFAULT_SLOT_INTERVAL_MINUTES
) -> List[str]:
    """
    Bookable start times ("HH:MM") for the constrained day, ascending.

    A closed day yields an empty list. `now` is the current business-local
    wall-clock time, used to decide whether priority windows have been released.
    """
    if duration_minutes <= 0:
        raise ValueError(f"duration_minutes must be positive, got {duration_minutes}")
    if slot_interval_minutes <= 0:
        raise ValueError(f"slot_interval_minutes must be positive, got {slot_interval_minutes}")

    if constraints.is_closed:
        return []

    opens_at = constraints.opens_at
    closes_at = constraints.closes_at
    capacity = constraints.effective_capacity
    step = timedelta(minutes=slot_interval_minutes)

    available = []
    cursor = opens_at
    while cursor < closes_at:
        candidate = Interval.from_duration(cursor, duration_minutes)
        if candidate.end > closes_at:
            break

        label = format_time_of_day(cursor.time())

        if is_blocked(constraints, candidate):
            logger.debug(f"Slot {label} overlaps blocked time")
        elif count_overlapping_bookings(constraints, candidate) >= capacity:
            logger.debug(f"Slot {label} is at capacity ({capacity})")
        elif is_priority_held(constraints, cursor, now):
            logger.debug(f"Slot {label} is reserved for a priority segment")
        else:
            available.append(label)

        cursor += step

    logger.info(
        f"{len(available)} slots on {constraints.target_date.isoformat()} for "
        f"{duration_minutes} min (capacity {capacity}, {len(constraints.bookings)} bookings, "
        f"{len(constraints.blocked)} blocks)"
    )
    return available
