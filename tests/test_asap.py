"""Tests for schedule-ASAP of single tasks and parent tasks."""

import pytest
from datetime import datetime, timedelta, timezone
import uuid

from planmyday.engine.asap import schedule_task_asap, subtasks_of
from planmyday.engine.results import SchedulingErrorKind, UnplaceableReason
from planmyday.models.schedule_hours import ScheduleHours
from planmyday.models.task import Task, TaskStatus

HOURS = ScheduleHours.every_day(9, 17)
NOW = datetime(2024, 1, 15, 8, 0, tzinfo=timezone.utc)  # Monday


def _utc(day: int, hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 1, day, hour, minute, tzinfo=timezone.utc)


@pytest.fixture
def make_task(sample_task_base):
    created = iter(range(100))

    def _make(title, **overrides):
        return Task(**{
            **sample_task_base,
            "id": str(uuid.uuid4()),
            "title": title,
            "created_at": _utc(1, 9) + timedelta(minutes=next(created)),
            **overrides,
        })
    return _make


def _run(task, all_tasks, hours=HOURS, now=NOW):
    return schedule_task_asap(task, all_tasks, hours, "UTC", now=now)


class TestSingleTask:
    """Tasks without subtasks are placed themselves."""

    def test_places_in_nearest_slot(self, make_task):
        task = make_task("Call", duration=30)

        result = _run(task, [task])

        assert result.ok
        assert [(m.task_id, m.new_start, m.new_end) for m in result.moved_tasks] == [
            (task.id, _utc(15, 9), _utc(15, 9, 30)),
        ]
        assert result.cleared_task_ids == []
        assert result.feedback == ['Scheduled "Call"']

    def test_no_duration(self, make_task):
        task = make_task("Someday", duration=None)

        result = _run(task, [task])

        assert result.error_kind == SchedulingErrorKind.NO_CANDIDATES
        assert result.error == "Task has no duration"
        assert result.moved_tasks == []

    def test_no_slot(self, make_task):
        task = make_task("Huge", duration=60 * 10)

        result = _run(task, [task])

        assert result.error_kind == SchedulingErrorKind.NO_AVAILABILITY
        assert result.error == "No available time slot"


class TestParentTask:
    """Tasks with subtasks schedule the subtasks instead."""

    def test_subtasks_placed_in_order_without_overlap(self, make_task):
        parent = make_task("Parent", duration=120)
        first = make_task("First", duration=30, parent_task_id=parent.id)
        second = make_task("Second", duration=45, parent_task_id=parent.id)
        meeting = make_task("Meeting", scheduled_start=_utc(15, 9, 30), scheduled_end=_utc(15, 10))

        result = _run(parent, [second, meeting, parent, first])

        assert result.ok
        assert [(m.task_id, m.new_start, m.new_end) for m in result.moved_tasks] == [
            (first.id, _utc(15, 9), _utc(15, 9, 30)),
            (second.id, _utc(15, 10), _utc(15, 10, 45)),
        ]
        assert parent.id not in [m.task_id for m in result.moved_tasks]
        assert result.subtask_count == 2
        assert result.feedback == [
            "Scheduled 2 of 2 subtasks.",
            'Scheduled "First"',
            'Scheduled "Second"',
        ]

    def test_scheduled_parent_is_cleared_and_does_not_block(self, make_task):
        parent = make_task("Parent", scheduled_start=_utc(15, 9), scheduled_end=_utc(15, 11))
        child = make_task("Child", duration=30, parent_task_id=parent.id)

        result = _run(parent, [parent, child])

        assert result.cleared_task_ids == [parent.id]
        assert result.moved_tasks[0].new_start == _utc(15, 9)

    def test_unscheduled_parent_is_not_cleared(self, make_task):
        parent = make_task("Parent")
        child = make_task("Child", duration=30, parent_task_id=parent.id)

        assert _run(parent, [parent, child]).cleared_task_ids == []

    def test_closed_and_durationless_subtasks_are_skipped(self, make_task):
        parent = make_task("Parent")
        done = make_task("Done", parent_task_id=parent.id, status=TaskStatus.COMPLETED)
        dropped = make_task("Dropped", parent_task_id=parent.id, status=TaskStatus.CANCELLED)
        vague = make_task("Vague", duration=None, parent_task_id=parent.id)
        real = make_task("Real", duration=15, parent_task_id=parent.id)

        result = _run(parent, [parent, done, dropped, vague, real])

        assert result.ok
        assert [m.task_id for m in result.moved_tasks] == [real.id]
        assert [(u.task_id, u.reason) for u in result.unplaced] == [(vague.id, UnplaceableReason.NO_DURATION)]
        assert result.feedback == [
            "Scheduled 1 of 4 subtasks.",
            'Skipped "Done" (already completed)',
            'Skipped "Dropped" (already cancelled)',
            'Skipped "Vague" (no duration set)',
            'Scheduled "Real"',
        ]

    def test_subtask_without_room_is_reported(self, make_task):
        parent = make_task("Parent")
        fits = make_task("Fits", duration=60, parent_task_id=parent.id)
        too_long = make_task("Too long", duration=60 * 20, parent_task_id=parent.id)

        result = _run(parent, [parent, fits, too_long])

        assert result.ok
        assert [m.task_id for m in result.moved_tasks] == [fits.id]
        assert result.unplaced[0].reason == UnplaceableReason.NO_FREE_SLOT
        assert result.feedback[-1] == 'Failed to schedule "Too long": No available time slot'

    def test_parent_without_duration_still_schedules_subtasks(self, make_task):
        parent = make_task("Parent", duration=None)
        child = make_task("Child", duration=30, parent_task_id=parent.id)

        result = _run(parent, [parent, child])

        assert result.ok
        assert [m.task_id for m in result.moved_tasks] == [child.id]


class TestSubtasksOf:
    def test_oldest_first_and_direct_children_only(self, make_task):
        parent = make_task("Parent")
        older = make_task("Older", parent_task_id=parent.id)
        newer = make_task("Newer", parent_task_id=parent.id)
        unrelated = make_task("Unrelated")

        assert subtasks_of(parent, [newer, unrelated, older, parent]) == [older, newer]
