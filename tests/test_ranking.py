from datetime import datetime, timezone
import uuid

from planmyday.engine.ranking import rank_for_placement
from planmyday.models.task import Task


def _task(sample_task_base, title, **overrides):
    return Task(**{**sample_task_base, "id": str(uuid.uuid4()), "title": title, **overrides})


def test_priority_comes_first(sample_task_base):
    urgent = _task(sample_task_base, "Urgent", priority=1)
    due_soon = _task(sample_task_base, "Due soon", priority=2, due_date=datetime(2024, 1, 2, tzinfo=timezone.utc))

    ranked = rank_for_placement([due_soon, urgent])
    assert [t.title for t in ranked] == ["Urgent", "Due soon"]


def test_due_date_orders_within_priority(sample_task_base):
    no_due = _task(sample_task_base, "No due", due_date=None)
    later = _task(sample_task_base, "Later", due_date=datetime(2024, 2, 1, tzinfo=timezone.utc))
    sooner = _task(sample_task_base, "Sooner", due_date=datetime(2024, 1, 20, tzinfo=timezone.utc))

    ranked = rank_for_placement([no_due, later, sooner])
    assert [t.title for t in ranked] == ["Sooner", "Later", "No due"]


def test_tie_breaker_is_deterministic(sample_task_base):
    a = _task(sample_task_base, "A", created_at=datetime(2024, 1, 2, tzinfo=timezone.utc))
    b = _task(sample_task_base, "B", created_at=datetime(2024, 1, 1, tzinfo=timezone.utc))
    unscheduled = _task(sample_task_base, "Unscheduled")
    scheduled = _task(
        sample_task_base,
        "Scheduled",
        scheduled_start=datetime(2024, 1, 5, 9, tzinfo=timezone.utc),
        scheduled_end=datetime(2024, 1, 5, 10, tzinfo=timezone.utc),
    )

    assert [t.title for t in rank_for_placement([a, b], tie_breaker=lambda t: t.created_at)] == ["B", "A"]
    # Default tie-break is scheduled_start, with unscheduled tasks last
    assert [t.title for t in rank_for_placement([unscheduled, scheduled])] == ["Scheduled", "Unscheduled"]
