# ===== fieldbook/services/availability/hours.py =====
"""
Operating hours per weekday.

Stored configuration is a JSON object keyed by weekday name:
    {"monday": {"open": "09:00", "close": "17:00", "closed": false}, ...}
"""
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, Mapping, Optional
import logging

logger = logging.getLogger(__name__)


class Weekday(str, Enum):
    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def from_date(cls, value: date) -> "Weekday":
        # date.weekday(): 0=Monday, 6=Sunday, same order as the members
        return list(cls)[value.weekday()]


def parse_time_of_day(value: Any) -> time:
    """Parse "HH:MM" (or "HH:MM:SS") into a time. Raises ValueError when malformed."""
    if isinstance(value, time):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected HH:MM string, got {value!r}")

    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value.strip(), fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Invalid time of day: {value!r}")


def format_time_of_day(value: time) -> str:
    return value.strftime("%H:%M")


@dataclass(frozen=True)
class DayHours:
    """Open/close time of day, or a closed day"""

    open_time: Optional[time] = None
    close_time: Optional[time] = None
    closed: bool = False

    def __post_init__(self):
        if self.closed:
            return
        if self.open_time is None or self.close_time is None:
            raise ValueError("An open day needs both open and close times")
        if self.open_time >= self.close_time:
            raise ValueError(
                f"Open time {self.open_time} must be before close time {self.close_time}"
            )

    @classmethod
    def closed_day(cls) -> "DayHours":
        return cls(closed=True)

    @classmethod
    def between(cls, open_at: str, close_at: str) -> "DayHours":
        return cls(parse_time_of_day(open_at), parse_time_of_day(close_at))

    def to_config(self) -> Dict[str, Any]:
        if self.closed:
            return {"open": None, "close": None, "closed": True}
        return {
            "open": format_time_of_day(self.open_time),
            "close": format_time_of_day(self.close_time),
            "closed": False,
        }


# Hours used for an open day whose own times are missing or unusable
FALLBACK_DAY_HOURS = DayHours.between("09:00", "17:00")


class OperatingHours:
    """Hours for all seven weekdays. Every Weekday member always has an entry."""

    def __init__(self, days: Mapping[Weekday, DayHours]):
        missing = [day.value for day in Weekday if day not in days]
        if missing:
            raise ValueError(f"Operating hours missing days: {', '.join(missing)}")
        self._days = {day: days[day] for day in Weekday}

    def for_day(self, weekday: Weekday) -> DayHours:
        return self._days[weekday]

    def for_date(self, value: date) -> DayHours:
        return self._days[Weekday.from_date(value)]

    def to_config(self) -> Dict[str, Dict[str, Any]]:
        return {day.value: hours.to_config() for day, hours in self._days.items()}

    def __eq__(self, other):
        if not isinstance(other, OperatingHours):
            return NotImplemented
        return self._days == other._days

    def __repr__(self):
        return f"<OperatingHours({self.to_config()})>"

    @classmethod
    def from_config(
            cls,
            raw: Optional[Mapping[str, Any]],
            default: Optional["OperatingHours"] = None
    ) -> "OperatingHours":
        """
        Build hours from stored configuration.

        - no configuration at all (None, empty, not a mapping) -> `default`
        - a day that is absent, null or flagged closed -> closed
        - an open day with missing or malformed times -> FALLBACK_DAY_HOURS
        """
        default = default or DEFAULT_OPERATING_HOURS
        if not raw or not isinstance(raw, Mapping):
            return default

        days = {}
        for weekday in Weekday:
            entry = raw.get(weekday.value)
            if not entry or not isinstance(entry, Mapping) or entry.get("closed"):
                days[weekday] = DayHours.closed_day()
                continue

            try:
                days[weekday] = DayHours.between(entry.get("open"), entry.get("close"))
            except ValueError as e:
                logger.warning(
                    f"Malformed hours for {weekday.value} ({entry}): {e}, using "
                    f"{FALLBACK_DAY_HOURS.to_config()}"
                )
                days[weekday] = FALLBACK_DAY_HOURS

        return cls(days)


DEFAULT_OPERATING_HOURS = OperatingHours({
    Weekday.MONDAY: FALLBACK_DAY_HOURS,
    Weekday.TUESDAY: FALLBACK_DAY_HOURS,
    Weekday.WEDNESDAY: FALLBACK_DAY_HOURS,
    Weekday.THURSDAY: FALLBACK_DAY_HOURS,
    Weekday.FRIDAY: FALLBACK_DAY_HOURS,
    Weekday.SATURDAY: DayHours.closed_day(),
    Weekday.SUNDAY: DayHours.closed_day(),
})
