"""Scheduling engine for planmyday."""

from planmyday.engine.intervals import (
    TimeSlot,
    TaskSegment,
    overlaps,
    is_nested_inside,
    split_by_sub_intervals,
    subtract_intervals,
)
from planmyday.engine.overlap import (
    NestingResult,
    DayLayout,
    detect_overlaps,
    detect_nested_tasks,
    calculate_host_segments,
    build_day_layout,
)
from planmyday.engine.availability import resolve_day_window, resolve_placement_hours
from planmyday.engine.groups import find_group, resolve_leaf_groups, leaf_group_ids
from planmyday.engine.results import MovedTask, UnplacedTask, SchedulingErrorKind, UnplaceableReason
from planmyday.engine.pull_forward import pull_forward_tasks_for_group, PullForwardResult
from planmyday.engine.slot_finder import find_nearest_available_slot, round_up_to_granularity
from planmyday.engine.auto_schedule import auto_schedule_group, AutoScheduleResult, SchedulingMode
from planmyday.engine.asap import schedule_task_asap, AsapResult

__all__ = [
    "TimeSlot",
    "TaskSegment",
    "overlaps",
    "is_nested_inside",
    "split_by_sub_intervals",
    "subtract_intervals",
    "NestingResult",
    "DayLayout",
    "detect_overlaps",
    "detect_nested_tasks",
    "calculate_host_segments",
    "build_day_layout",
    "resolve_day_window",
    "resolve_placement_hours",
    "find_group",
    "resolve_leaf_groups",
    "leaf_group_ids",
    "MovedTask",
    "UnplacedTask",
    "SchedulingErrorKind",
    "UnplaceableReason",
    "pull_forward_tasks_for_group",
    "PullForwardResult",
    "find_nearest_available_slot",
    "round_up_to_granularity",
    "auto_schedule_group",
    "AutoScheduleResult",
    "SchedulingMode",
    "schedule_task_asap",
    "AsapResult",
]
