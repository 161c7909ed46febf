"""Tests for time-interval primitives (overlap, nesting, host splitting)."""

import pytest
from datetime import datetime, timezone
import uuid

from planmyday.engine.intervals import (
    TimeSlot,
    clip_free_time,
    is_nested_inside,
    overlaps,
    slots_overlap,
    split_by_sub_intervals,
    subtract_intervals,
)
from planmyday.models.task import Task


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 1, 15, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def block(sample_task_base):
    """Factory for a task scheduled between two (hour, minute) pairs on 2024-01-15."""
    def _make(start, end, **overrides):
        return Task(**{
            **sample_task_base,
            "id": str(uuid.uuid4()),
            "scheduled_start": _at(*start),
            "scheduled_end": _at(*end),
            **overrides,
        })
    return _make


class TestOverlaps:
    """Test overlaps() on half-open intervals."""

    def test_partial_overlap(self, block):
        a = block((9, 0), (10, 0))
        b = block((9, 30), (11, 0))
        assert overlaps(a, b)

    def test_overlap_is_symmetric(self, block):
        pairs = [
            (block((9, 0), (10, 0)), block((9, 30), (11, 0))),
            (block((9, 0), (10, 0)), block((10, 0), (11, 0))),
            (block((9, 0), (12, 0)), block((10, 0), (10, 30))),
            (block((8, 0), (9, 0)), block((13, 0), (14, 0))),
        ]
        for a, b in pairs:
            assert overlaps(a, b) == overlaps(b, a)

    def test_touching_intervals_do_not_overlap(self, block):
        """End is exclusive, so back-to-back tasks share no time."""
        a = block((9, 0), (10, 0))
        b = block((10, 0), (11, 0))
        assert not overlaps(a, b)

    def test_unscheduled_task_never_overlaps(self, block, sample_task_base):
        unscheduled = Task(**sample_task_base)
        assert not overlaps(unscheduled, block((0, 0), (23, 0)))
        assert not overlaps(block((0, 0), (23, 0)), unscheduled)

    def test_task_with_only_one_bound_never_overlaps(self, block, sample_task_base):
        """Half-scheduled rows (bypassing validation) are treated as unscheduled."""
        half = Task.model_construct(**{**sample_task_base, "scheduled_start": _at(9, 0), "scheduled_end": None})
        other = block((8, 0), (12, 0))
        assert not overlaps(half, other)
        assert not is_nested_inside(half, other)
        assert not is_nested_inside(other, half)

    def test_slots_overlap(self):
        assert slots_overlap(TimeSlot(start=_at(9), end=_at(10)), TimeSlot(start=_at(9, 59), end=_at(11)))
        assert not slots_overlap(TimeSlot(start=_at(9), end=_at(10)), TimeSlot(start=_at(10), end=_at(11)))


class TestIsNestedInside:
    """Test is_nested_inside()."""

    def test_inner_fully_inside(self, block):
        assert is_nested_inside(block((10, 0), (10, 30)), block((9, 0), (12, 0)))

    def test_sharing_an_edge_still_nests(self, block):
        assert is_nested_inside(block((9, 0), (10, 0)), block((9, 0), (12, 0)))
        assert is_nested_inside(block((11, 0), (12, 0)), block((9, 0), (12, 0)))

    def test_identical_intervals_are_not_nested(self, block):
        assert not is_nested_inside(block((9, 0), (10, 0)), block((9, 0), (10, 0)))

    def test_task_is_never_nested_in_itself(self, block):
        task = block((9, 0), (10, 0))
        assert not is_nested_inside(task, task)

    def test_partial_overlap_is_not_nesting(self, block):
        assert not is_nested_inside(block((9, 30), (12, 30)), block((9, 0), (12, 0)))

    def test_nesting_implies_overlap(self, block):
        outer = block((9, 0), (12, 0))
        for inner in [block((9, 0), (9, 15)), block((10, 0), (11, 0)), block((11, 45), (12, 0))]:
            assert is_nested_inside(inner, outer)
            assert overlaps(inner, outer)


class TestSplitBySubIntervals:
    """Test split_by_sub_intervals() segment computation."""

    def test_no_guests_yields_single_segment(self, block):
        host = block((9, 0), (12, 0))
        segments = split_by_sub_intervals(host, [])

        assert len(segments) == 1
        assert segments[0].segment_start == _at(9, 0)
        assert segments[0].segment_end == _at(12, 0)
        assert segments[0].is_first and segments[0].is_last
        assert segments[0].total_segments == 1

    def test_one_guest_splits_host_in_two(self, block):
        host = block((9, 0), (12, 0))
        guest = block((10, 0), (10, 30))
        segments = split_by_sub_intervals(host, [guest])

        assert [(s.segment_start, s.segment_end) for s in segments] == [
            (_at(9, 0), _at(10, 0)),
            (_at(10, 30), _at(12, 0)),
        ]
        assert all(s.total_segments == 2 for s in segments)
        assert [s.segment_index for s in segments] == [0, 1]
        assert [(s.is_first, s.is_last) for s in segments] == [(True, False), (False, True)]

    def test_guest_at_host_edges_leaves_no_zero_length_segments(self, block):
        host = block((9, 0), (12, 0))
        guests = [block((9, 0), (9, 30)), block((11, 30), (12, 0))]
        segments = split_by_sub_intervals(host, guests)

        assert [(s.segment_start, s.segment_end) for s in segments] == [(_at(9, 30), _at(11, 30))]
        assert segments[0].is_first and segments[0].is_last

    def test_guests_nested_in_each_other(self, block):
        host = block((9, 0), (12, 0))
        guests = [block((10, 0), (11, 0)), block((10, 15), (10, 30))]
        segments = split_by_sub_intervals(host, guests)

        assert [(s.segment_start, s.segment_end) for s in segments] == [
            (_at(9, 0), _at(10, 0)),
            (_at(11, 0), _at(12, 0)),
        ]

    def test_guests_covering_host_yield_nothing(self, block):
        host = block((9, 0), (10, 0))
        guests = [block((9, 0), (9, 30)), block((9, 30), (10, 0))]
        assert split_by_sub_intervals(host, guests) == []

    def test_unscheduled_host_yields_nothing(self, block, sample_task_base):
        assert split_by_sub_intervals(Task(**sample_task_base), [block((9, 0), (10, 0))]) == []

    def test_unscheduled_guest_is_ignored(self, block, sample_task_base):
        host = block((9, 0), (10, 0))
        segments = split_by_sub_intervals(host, [Task(**sample_task_base)])
        assert len(segments) == 1


class TestSubtractIntervals:
    """Test subtract_intervals() and clip_free_time()."""

    def test_free_pieces_around_occupied_blocks(self):
        window = TimeSlot(start=_at(9), end=_at(17))
        occupied = [
            TimeSlot(start=_at(13), end=_at(14)),
            TimeSlot(start=_at(10), end=_at(11)),
            TimeSlot(start=_at(10, 30), end=_at(11, 30)),
        ]
        free = subtract_intervals(window, occupied)

        assert [(s.start, s.end) for s in free] == [
            (_at(9), _at(10)),
            (_at(11, 30), _at(13)),
            (_at(14), _at(17)),
        ]

    def test_blocks_outside_or_across_window_edges(self):
        window = TimeSlot(start=_at(9), end=_at(17))
        occupied = [
            TimeSlot(start=_at(7), end=_at(9, 30)),
            TimeSlot(start=_at(16), end=_at(19)),
            TimeSlot(start=_at(20), end=_at(21)),
        ]
        free = subtract_intervals(window, occupied)
        assert [(s.start, s.end) for s in free] == [(_at(9, 30), _at(16))]

    def test_fully_occupied_window(self):
        window = TimeSlot(start=_at(9), end=_at(17))
        assert subtract_intervals(window, [TimeSlot(start=_at(8), end=_at(18))]) == []

    def test_clip_free_time(self):
        free = [TimeSlot(start=_at(9), end=_at(10)), TimeSlot(start=_at(11), end=_at(13))]
        clipped = clip_free_time(free, _at(11, 45))
        assert [(s.start, s.end) for s in clipped] == [(_at(11, 45), _at(13))]
        assert TimeSlot(start=_at(11), end=_at(13)).duration_minutes == 120
