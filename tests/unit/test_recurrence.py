from datetime import date, datetime

import pytest

from fieldbook.services.availability.recurrence import (
    RecurrencePattern,
    RecurrenceRule,
    TimeBlockDefinition,
    expand_block,
    expand_blocks,
)


def weekly_block(**rule_kwargs):
    return TimeBlockDefinition(
        id="blk",
        title="Team meeting",
        start=datetime(2025, 6, 2, 9, 0),
        end=datetime(2025, 6, 2, 10, 0),
        recurrence=RecurrenceRule(RecurrencePattern.WEEKLY, **rule_kwargs),
    )


def test_weekly_block_over_three_weeks():
    occurrences = expand_block(weekly_block(), datetime(2025, 6, 2), datetime(2025, 6, 23))

    assert len(occurrences) == 3
    assert len({o.occurrence_id for o in occurrences}) == 3
    for occurrence in occurrences:
        assert occurrence.start.weekday() == 0
        assert occurrence.start.time() == datetime(2025, 6, 2, 9, 0).time()
        assert occurrence.end.time() == datetime(2025, 6, 2, 10, 0).time()
        assert occurrence.is_recurring_instance
        assert occurrence.block_id == "blk"


def test_occurrence_ids_are_stable_across_windows():
    whole = expand_block(weekly_block(), datetime(2025, 6, 2), datetime(2025, 6, 23))
    late = expand_block(weekly_block(), datetime(2025, 6, 16), datetime(2025, 6, 17))

    assert [o.occurrence_id for o in late] == ["blk_2"]
    assert late[0] == whole[2]


def test_expansion_is_deterministic():
    window = (datetime(2025, 6, 1), datetime(2025, 9, 1))
    assert expand_block(weekly_block(), *window) == expand_block(weekly_block(), *window)


def test_single_block_emitted_once_when_overlapping():
    block = TimeBlockDefinition(
        id="once",
        title="Dentist",
        start=datetime(2025, 6, 2, 13, 0),
        end=datetime(2025, 6, 2, 14, 0),
    )

    inside = expand_block(block, datetime(2025, 6, 2), datetime(2025, 6, 3))
    assert [o.occurrence_id for o in inside] == ["once"]
    assert not inside[0].is_recurring_instance

    assert expand_block(block, datetime(2025, 6, 3), datetime(2025, 6, 4)) == []


def test_block_touching_window_edge_is_skipped():
    block = TimeBlockDefinition(
        id="late",
        title="Late shift",
        start=datetime(2025, 6, 1, 22, 0),
        end=datetime(2025, 6, 2, 0, 0),
    )
    assert expand_block(block, datetime(2025, 6, 2), datetime(2025, 6, 3)) == []


def test_monthly_recurrence_clamps_to_month_end_without_drift():
    block = TimeBlockDefinition(
        id="close",
        title="Month-end close",
        start=datetime(2025, 1, 31, 10, 0),
        end=datetime(2025, 1, 31, 11, 0),
        recurrence=RecurrenceRule(RecurrencePattern.MONTHLY),
    )

    february = expand_block(block, datetime(2025, 2, 1), datetime(2025, 3, 1))
    march = expand_block(block, datetime(2025, 3, 1), datetime(2025, 4, 1))

    assert [o.start for o in february] == [datetime(2025, 2, 28, 10, 0)]
    assert [o.occurrence_id for o in february] == ["close_1"]
    assert [o.start for o in march] == [datetime(2025, 3, 31, 10, 0)]


def test_count_limits_occurrences():
    block = TimeBlockDefinition(
        id="d",
        title="Training",
        start=datetime(2025, 6, 2, 9, 0),
        end=datetime(2025, 6, 2, 10, 0),
        recurrence=RecurrenceRule(RecurrencePattern.DAILY, count=3),
    )

    occurrences = expand_block(block, datetime(2025, 6, 1), datetime(2025, 6, 30))
    assert [o.start.day for o in occurrences] == [2, 3, 4]


def test_end_date_is_inclusive():
    block = TimeBlockDefinition(
        id="d",
        title="Training",
        start=datetime(2025, 6, 2, 9, 0),
        end=datetime(2025, 6, 2, 10, 0),
        recurrence=RecurrenceRule(RecurrencePattern.DAILY, end_date=date(2025, 6, 4)),
    )

    occurrences = expand_block(block, datetime(2025, 6, 1), datetime(2025, 6, 30))
    assert [o.start.day for o in occurrences] == [2, 3, 4]


def test_zero_count_means_unbounded():
    rule = RecurrenceRule(RecurrencePattern.DAILY, count=0)
    assert rule.max_occurrences() == 999


def test_long_weekly_block_starting_before_window_is_found():
    block = TimeBlockDefinition(
        id="trip",
        title="Supply trip",
        start=datetime(2025, 6, 2, 0, 0),
        end=datetime(2025, 6, 5, 0, 0),
        recurrence=RecurrenceRule(RecurrencePattern.WEEKLY),
    )

    # Wednesday of the second week sits inside occurrence 1 (Mon-Thu)
    occurrences = expand_block(block, datetime(2025, 6, 11), datetime(2025, 6, 12))

    assert [o.occurrence_id for o in occurrences] == ["trip_1"]
    assert occurrences[0].start == datetime(2025, 6, 9, 0, 0)


def test_yearly_block_spanning_midnight_into_window():
    block = TimeBlockDefinition(
        id="nye",
        title="New year's eve",
        start=datetime(2024, 12, 31, 20, 0),
        end=datetime(2025, 1, 1, 2, 0),
        recurrence=RecurrenceRule(RecurrencePattern.YEARLY),
    )

    occurrences = expand_block(block, datetime(2026, 1, 1), datetime(2026, 1, 2))

    assert [o.occurrence_id for o in occurrences] == ["nye_1"]
    assert occurrences[0].start == datetime(2025, 12, 31, 20, 0)


def test_block_ending_before_start_is_rejected():
    block = TimeBlockDefinition(
        id="bad",
        title="Broken",
        start=datetime(2025, 6, 2, 10, 0),
        end=datetime(2025, 6, 2, 9, 0),
    )
    with pytest.raises(ValueError):
        expand_block(block, datetime(2025, 6, 2), datetime(2025, 6, 3))


def test_expand_blocks_skips_malformed_blocks():
    broken = TimeBlockDefinition(
        id="bad",
        title="Broken",
        start=datetime(2025, 6, 2, 10, 0),
        end=datetime(2025, 6, 2, 10, 0),
    )

    occurrences = expand_blocks([broken, weekly_block()], datetime(2025, 6, 2), datetime(2025, 6, 3))
    assert [o.occurrence_id for o in occurrences] == ["blk_0"]
