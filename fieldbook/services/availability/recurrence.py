# ===== fieldbook/services/availability/recurrence.py =====
"""
Recurring time block expansion.

Recurring blocks are stored once; their occurrences are computed on read for
the window being queried. Occurrence n of a block starts at
`first_start + n * step`, so time of day and duration are those of the first
occurrence and month/year stepping never drifts (Jan 31 -> Feb 28 -> Mar 31).
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Iterable, List, Optional
import logging

from dateutil.relativedelta import relativedelta

from fieldbook.services.availability.intervals import Interval, overlaps

logger = logging.getLogger(__name__)

DEFAULT_MAX_OCCURRENCES = 999


class RecurrencePattern(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BlockKind(str, Enum):
    PERSONAL = "personal"
    HOLIDAY = "holiday"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class RecurrenceRule:
    """
    How a block repeats. A block without a rule does not repeat, so a
    "recurring block with no pattern" cannot be expressed.
    """

    pattern: RecurrencePattern
    end_date: Optional[date] = None  # inclusive, through the end of that day
    count: Optional[int] = None  # max occurrences, including the first

    def offset(self, n: int) -> relativedelta:
        if self.pattern == RecurrencePattern.DAILY:
            return relativedelta(days=n)
        if self.pattern == RecurrencePattern.WEEKLY:
            return relativedelta(weeks=n)
        if self.pattern == RecurrencePattern.MONTHLY:
            return relativedelta(months=n)
        return relativedelta(years=n)

    def until(self) -> Optional[datetime]:
        if self.end_date is None:
            return None
        return datetime.combine(self.end_date, time.max)

    def max_occurrences(self, default: int = DEFAULT_MAX_OCCURRENCES) -> int:
        # 0 and None both mean "unbounded", capped by the default
        return self.count or default


@dataclass(frozen=True)
class TimeBlockDefinition:
    """An owner-defined span during which the business cannot be booked"""

    id: str
    title: str
    start: datetime
    end: datetime
    kind: BlockKind = BlockKind.UNAVAILABLE
    description: Optional[str] = None
    recurrence: Optional[RecurrenceRule] = None

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not None

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


@dataclass(frozen=True)
class BlockOccurrence:
    occurrence_id: str
    block_id: str
    title: str
    kind: BlockKind
    interval: Interval
    is_recurring_instance: bool = False

    @property
    def start(self) -> datetime:
        return self.interval.start

    @property
    def end(self) -> datetime:
        return self.interval.end


def _estimate_index(rule: RecurrenceRule, first_start: datetime, target: datetime) -> int:
    """Occurrence index at or just before `target`. Only a starting point for the cursor."""
    if target <= first_start:
        return 0

    if rule.pattern == RecurrencePattern.DAILY:
        n = (target - first_start).days
    elif rule.pattern == RecurrencePattern.WEEKLY:
        n = (target - first_start).days // 7
    elif rule.pattern == RecurrencePattern.MONTHLY:
        n = (target.year - first_start.year) * 12 + (target.month - first_start.month) - 1
    else:
        n = target.year - first_start.year - 1

    return max(0, n)


def expand_block(
        block: TimeBlockDefinition,
        window_start: datetime,
        window_end: datetime,
        max_occurrences: int = DEFAULT_MAX_OCCURRENCES
) -> List[BlockOccurrence]:
    """
    Occurrences of `block` overlapping [window_start, window_end), in order.

    Raises ValueError when the block itself violates end > start.
    """
    if block.end <= block.start:
        raise ValueError(f"Time block {block.id} ends at or before its start")

    window = Interval(window_start, window_end)

    if not block.is_recurring:
        interval = Interval(block.start, block.end)
        if not overlaps(interval, window):
            return []
        return [BlockOccurrence(
            occurrence_id=str(block.id),
            block_id=str(block.id),
            title=block.title,
            kind=block.kind,
            interval=interval,
        )]

    rule = block.recurrence
    duration = block.duration
    limit = rule.until()
    max_count = rule.max_occurrences(max_occurrences)

    def occurrence_start(index: int) -> datetime:
        return block.start + rule.offset(index)

    # Jump close to the window, then rewind while the previous occurrence
    # still reaches into the window (long blocks, month/year stepping)
    n = min(_estimate_index(rule, block.start, window_start - duration), max_count)
    while n > 0 and occurrence_start(n - 1) + duration > window_start:
        n -= 1
    while n < max_count and occurrence_start(n) + duration <= window_start:
        n += 1

    occurrences = []
    while n < max_count:
        try:
            start = occurrence_start(n)
        except (OverflowError, ValueError) as e:
            logger.warning(f"Stopping expansion of block {block.id} at occurrence {n}: {e}")
            break

        if start >= window_end:
            break
        if limit is not None and start > limit:
            break

        interval = Interval(start, start + duration)
        if overlaps(interval, window):
            occurrences.append(BlockOccurrence(
                occurrence_id=f"{block.id}_{n}",
                block_id=str(block.id),
                title=block.title,
                kind=block.kind,
                interval=interval,
                is_recurring_instance=True,
            ))
        n += 1

    return occurrences


def expand_blocks(
        blocks: Iterable[TimeBlockDefinition],
        window_start: datetime,
        window_end: datetime,
        max_occurrences: int = DEFAULT_MAX_OCCURRENCES
) -> List[BlockOccurrence]:
    """Expand every block; a malformed block is logged and skipped."""
    expanded = []
    for block in blocks:
        try:
            expanded.extend(expand_block(block, window_start, window_end, max_occurrences))
        except (ValueError, OverflowError) as e:
            logger.warning(f"Skipping malformed time block {block.id}: {e}")
    return expanded
