"""Result types shared by the placement algorithms."""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class SchedulingErrorKind(str, Enum):
    """Structural failures that abort a whole operation."""
    NOT_FOUND = "not_found"
    NO_AVAILABILITY = "no_availability"
    NO_CANDIDATES = "no_candidates"


class UnplaceableReason(str, Enum):
    """Per-task failures that are reported but do not abort the batch."""
    NO_DURATION = "no_duration"
    NO_FREE_SLOT = "no_free_slot"


class MovedTask(BaseModel):
    """New schedule for one task. The caller persists it."""

    task_id: str
    new_start: datetime
    new_end: datetime


class UnplacedTask(BaseModel):
    """A candidate the algorithm could not place, and why."""

    task_id: str
    title: str
    reason: UnplaceableReason
    message: str = Field(..., description="Human-readable explanation")


class PlacementResult:
    """Outcome of a placement run: moves, skips and user-facing feedback."""

    def __init__(self):
        self.moved_tasks: List[MovedTask] = []
        self.unplaced: List[UnplacedTask] = []
        self.feedback: List[str] = []
        self.error: Optional[str] = None
        self.error_kind: Optional[SchedulingErrorKind] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def fail(self, kind: SchedulingErrorKind, error: str, *feedback: str) -> "PlacementResult":
        """Mark the whole run as failed. Any planned moves are discarded."""
        self.error_kind = kind
        self.error = error
        self.moved_tasks = []
        self.feedback.extend(feedback)
        return self
