# ===== fieldbook/services/availability/constraints.py =====
"""
Constraint aggregation for one business and one day.

Collects operating hours, blocked time, priority reservations, existing
bookings, worker capacity and (optionally) the requesting customer's segment
into a DayConstraints value the slot generator can evaluate without further
reads. Reads go through a SchedulingReader so the storage layer stays outside
the engine.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, FrozenSet, List, Mapping, Optional, Protocol, Sequence, Tuple
import logging

from fieldbook.services.availability.hours import (
    DEFAULT_OPERATING_HOURS,
    DayHours,
    OperatingHours,
    Weekday,
)
from fieldbook.services.availability.intervals import Interval, overlaps
from fieldbook.services.availability.recurrence import (
    DEFAULT_MAX_OCCURRENCES,
    BlockOccurrence,
    TimeBlockDefinition,
    expand_blocks,
)
from fieldbook.services.availability.segments import CustomerSegment, classify_segment

logger = logging.getLogger(__name__)

DEFAULT_VIP_THRESHOLD = 500


class AvailabilityLookupError(Exception):
    """A constraint source could not be read and cannot safely be assumed empty"""


@dataclass(frozen=True)
class PriorityReservation:
    """A weekly window held for one customer segment until its release time"""

    weekdays: FrozenSet[Weekday]
    start_time: time
    end_time: time
    segment: CustomerSegment
    fallback_hours: float = 24
    enabled: bool = True
    name: Optional[str] = None
    id: Optional[str] = None

    def __post_init__(self):
        if self.start_time >= self.end_time:
            raise ValueError(
                f"Priority window start {self.start_time} must be before end {self.end_time}"
            )
        if self.fallback_hours < 0:
            raise ValueError("fallback_hours cannot be negative")

    def applies_to(self, slot_start: datetime) -> bool:
        """Whether this reservation covers a slot starting at `slot_start`"""
        if not self.enabled or Weekday.from_date(slot_start.date()) not in self.weekdays:
            return False
        return self.start_time <= slot_start.time() < self.end_time

    def release_at(self, slot_start: datetime) -> datetime:
        """Instant from which the slot opens to every customer"""
        return slot_start - timedelta(hours=self.fallback_hours)

    def is_held_against(
            self,
            slot_start: datetime,
            segment: Optional[CustomerSegment],
            now: datetime
    ) -> bool:
        if not self.applies_to(slot_start):
            return False
        if segment is not None and segment == self.segment:
            return False
        return now < self.release_at(slot_start)


@dataclass(frozen=True)
class ExistingBooking:
    start: datetime
    duration_minutes: int
    job_id: Optional[str] = None

    @property
    def interval(self) -> Interval:
        return Interval.from_duration(self.start, self.duration_minutes)


@dataclass(frozen=True)
class DayConstraints:
    target_date: date
    hours: DayHours
    blocked: Tuple[BlockOccurrence, ...] = ()
    reservations: Tuple[PriorityReservation, ...] = ()
    bookings: Tuple[ExistingBooking, ...] = ()
    capacity: int = 1
    segment: Optional[CustomerSegment] = None

    @property
    def is_closed(self) -> bool:
        return self.hours.closed

    @property
    def opens_at(self) -> Optional[datetime]:
        if self.is_closed:
            return None
        return datetime.combine(self.target_date, self.hours.open_time)

    @property
    def closes_at(self) -> Optional[datetime]:
        if self.is_closed:
            return None
        return datetime.combine(self.target_date, self.hours.close_time)

    @property
    def effective_capacity(self) -> int:
        return max(1, self.capacity)


class SchedulingReader(Protocol):
    """Read-only access to one tenant's scheduling data"""

    def get_business_hours_config(self, business_id: str) -> Optional[Mapping[str, Any]]:
        ...

    def list_time_blocks(self, business_id: str) -> Sequence[TimeBlockDefinition]:
        ...

    def list_priority_reservations(self, business_id: str) -> Sequence[PriorityReservation]:
        ...

    def list_scheduled_bookings(
            self,
            business_id: str,
            window_start: datetime,
            window_end: datetime
    ) -> Sequence[ExistingBooking]:
        ...

    def count_team_members(self, business_id: str) -> int:
        ...

    def find_completed_job_values(
            self,
            business_id: str,
            customer_email: Optional[str],
            customer_phone: Optional[str]
    ) -> Optional[List[Any]]:
        """Values of the matched client's completed jobs; None when no client matches."""
        ...


def day_window(target_date: date) -> Interval:
    start = datetime.combine(target_date, time.min)
    return Interval(start, start + timedelta(days=1))


class ConstraintAggregator:
    """Builds DayConstraints from a SchedulingReader, degrading unreadable sources"""

    def __init__(
            self,
            reader: SchedulingReader,
            default_hours: OperatingHours = DEFAULT_OPERATING_HOURS,
            vip_threshold: float = DEFAULT_VIP_THRESHOLD,
            max_occurrences: int = DEFAULT_MAX_OCCURRENCES
    ):
        self.reader = reader
        self.default_hours = default_hours
        self.vip_threshold = vip_threshold
        self.max_occurrences = max_occurrences

    def collect(
            self,
            business_id: str,
            target_date: date,
            customer_email: Optional[str] = None,
            customer_phone: Optional[str] = None
    ) -> DayConstraints:
        hours = self.resolve_operating_hours(business_id).for_date(target_date)
        segment = self.resolve_segment(business_id, customer_email, customer_phone)

        if hours.closed:
            logger.info(f"Business {business_id} is closed on {target_date.isoformat()}")
            return DayConstraints(target_date=target_date, hours=hours, segment=segment)

        window = day_window(target_date)

        return DayConstraints(
            target_date=target_date,
            hours=hours,
            blocked=tuple(self.resolve_blocked(business_id, window)),
            reservations=tuple(self.resolve_reservations(business_id)),
            bookings=tuple(self.resolve_bookings(business_id, window)),
            capacity=self.resolve_capacity(business_id),
            segment=segment,
        )

    def resolve_operating_hours(self, business_id: str) -> OperatingHours:
        try:
            raw = self.reader.get_business_hours_config(business_id)
        except Exception as e:
            logger.warning(f"Could not read business hours for {business_id}: {e}, using defaults")
            return self.default_hours

        return OperatingHours.from_config(raw, default=self.default_hours)

    def resolve_blocked(self, business_id: str, window: Interval) -> List[BlockOccurrence]:
        try:
            blocks = self.reader.list_time_blocks(business_id)
        except Exception as e:
            logger.warning(f"Could not read time blocks for {business_id}: {e}, assuming none")
            return []

        occurrences = expand_blocks(blocks, window.start, window.end, self.max_occurrences)
        return [o for o in occurrences if overlaps(o.interval, window)]

    def resolve_reservations(self, business_id: str) -> List[PriorityReservation]:
        try:
            reservations = self.reader.list_priority_reservations(business_id)
        except Exception as e:
            logger.warning(
                f"Could not read priority reservations for {business_id}: {e}, assuming none"
            )
            return []

        return [r for r in reservations if r.enabled]

    def resolve_bookings(self, business_id: str, window: Interval) -> List[ExistingBooking]:
        # An unreadable booking list cannot be treated as empty: that would overbook
        try:
            bookings = self.reader.list_scheduled_bookings(business_id, window.start, window.end)
        except Exception as e:
            logger.error(f"Could not read bookings for {business_id}: {e}")
            raise AvailabilityLookupError(
                f"Bookings for business {business_id} are unavailable"
            ) from e

        return [b for b in bookings if overlaps(b.interval, window)]

    def resolve_capacity(self, business_id: str) -> int:
        try:
            team_count = self.reader.count_team_members(business_id) or 0
        except Exception as e:
            logger.warning(f"Could not read team roster for {business_id}: {e}, capacity 1")
            return 1

        # +1 for the owner
        return max(1, team_count + 1)

    def resolve_segment(
            self,
            business_id: str,
            customer_email: Optional[str],
            customer_phone: Optional[str]
    ) -> Optional[CustomerSegment]:
        if not customer_email and not customer_phone:
            return None

        try:
            values = self.reader.find_completed_job_values(
                business_id, customer_email, customer_phone
            )
            return classify_segment(values, self.vip_threshold)
        except Exception as e:
            logger.warning(f"Unable to resolve customer segment for {business_id}: {e}")
            return None
