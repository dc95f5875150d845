# ===== fieldbook/services/availability/intervals.py =====
"""Half-open time intervals in business wall-clock time"""
from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class Interval:
    """A span [start, end). Naive datetimes, interpreted in business local time."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end < self.start:
            raise ValueError(f"Interval end {self.end} precedes start {self.start}")

    @classmethod
    def from_duration(cls, start: datetime, minutes: int) -> "Interval":
        return cls(start, start + timedelta(minutes=minutes))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def contains(self, instant: datetime) -> bool:
        return self.start <= instant < self.end

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self, other)


def overlaps(a: Interval, b: Interval) -> bool:
    """
    True when the two intervals share any instant.

    Intervals that only touch (a.end == b.start) do not overlap.
    """
    return a.start < b.end and b.start < a.end
