"""FastAPI web application for planmyday.

Route handlers load the current user's tasks and groups, hand that snapshot
to the scheduling engine, and persist only the schedule changes it returns.
"""

import logging
import os
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional
from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from planmyday import __version__
from planmyday.auth.dependencies import get_current_user
from planmyday.database.database import get_db
from planmyday.database.repository import TaskRepository
from planmyday.database.task_group_repository import TaskGroupRepository
from planmyday.engine.asap import schedule_task_asap
from planmyday.engine.auto_schedule import auto_schedule_group
from planmyday.engine.availability import get_zone, resolve_placement_hours, start_of_local_day
from planmyday.engine.groups import find_group
from planmyday.engine.overlap import DayLayout, build_day_layout
from planmyday.engine.pull_forward import pull_forward_tasks_for_group
from planmyday.engine.results import MovedTask, PlacementResult
from planmyday.models import constants
from planmyday.models.constants import DEFAULT_AUTO_SCHEDULE_MAX_TASKS
from planmyday.models.task import Task
from planmyday.models.user import User

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", constants.DEFAULT_TIMEZONE)

app = FastAPI(
    title="planmyday API",
    description="Day planner scheduling: pull tasks forward, auto-schedule groups, lay out the calendar",
    version=__version__,
)


# Request models
class PullForwardRequest(BaseModel):
    """Request to pull a group's future tasks onto a date."""
    target_date: date = Field(..., alias="date", description="Calendar date to pull tasks into")
    group_id: str
    timezone: Optional[str] = Field(None, description="IANA timezone; overrides the stored user timezone")


class LayoutRequest(BaseModel):
    """Request for the calendar layout of one day."""
    target_date: date = Field(..., alias="date", description="Calendar date to lay out")
    timezone: Optional[str] = None


class ScheduleAsapRequest(BaseModel):
    timezone: Optional[str] = None


class AutoScheduleRequest(BaseModel):
    """Request to auto-schedule the top tasks of a group."""
    group_id: str
    mode: str = Field(..., description="today, tomorrow, next-week, next-month, asap or now")
    max_tasks: Optional[int] = Field(DEFAULT_AUTO_SCHEDULE_MAX_TASKS, description="Clamped to 1-20")
    timezone: Optional[str] = None


# Response models
class PullForwardResponse(BaseModel):
    updated_tasks: List[Task]
    feedback: List[str]
    moved_count: int


class LayoutResponse(BaseModel):
    """Tasks of a day plus their overlap and nesting metadata."""
    tasks: List[Task]
    layout: DayLayout


class ScheduleAsapResponse(BaseModel):
    task: Task
    scheduled_subtasks: List[Task] = []
    feedback: List[str]


class AutoScheduleResponse(BaseModel):
    updated_tasks: List[Task]
    feedback: List[str]
    scheduled_count: int
    total_candidates: int


def _resolve_timezone(requested: Optional[str], user: User) -> str:
    """Pick the request's timezone, then the user's, then the server default."""
    time_zone = requested or user.timezone or DEFAULT_TIMEZONE
    try:
        get_zone(time_zone)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return time_zone


def _scheduling_error(error: str, feedback: List[str]) -> JSONResponse:
    return JSONResponse(status_code=422, content={"error": error, "feedback": feedback})


def _persist_moves(db: Session, user_id: str, moves: List[MovedTask]) -> List[Task]:
    """Write the moves in one transaction and return the fresh task rows."""
    repository = TaskRepository(db)
    repository.apply_schedule_moves(user_id, moves)
    return repository.get_many(user_id, [move.task_id for move in moves])


def _failed(result: PlacementResult) -> JSONResponse:
    logger.info(f"Scheduling request rejected ({result.error_kind.value}): {result.error}")
    return _scheduling_error(result.error, result.feedback)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


@app.post("/tasks/pull-forward", response_model=PullForwardResponse)
def pull_forward(
    request: PullForwardRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Move the group's tasks scheduled after `date` into that day's free time."""
    time_zone = _resolve_timezone(request.timezone, current_user)

    result = pull_forward_tasks_for_group(
        request.target_date,
        request.group_id,
        TaskRepository(db).get_all(current_user.id),
        TaskGroupRepository(db).get_all(current_user.id),
        current_user.awake_hours,
        time_zone,
        now=datetime.now(timezone.utc),
    )
    if not result.ok:
        return _failed(result)

    updated = _persist_moves(db, current_user.id, result.moved_tasks)
    return PullForwardResponse(updated_tasks=updated, feedback=result.feedback, moved_count=len(updated))


@app.post("/tasks/layout", response_model=LayoutResponse)
def day_layout(
    request: LayoutRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Overlap flags and host/guest segments for the tasks of one local day."""
    time_zone = _resolve_timezone(request.timezone, current_user)
    day_start = start_of_local_day(request.target_date, time_zone)
    day_end = start_of_local_day(request.target_date + timedelta(days=1), time_zone)

    tasks = TaskRepository(db).get_scheduled_between(current_user.id, day_start, day_end)
    return LayoutResponse(tasks=tasks, layout=build_day_layout(tasks))


@app.post("/tasks/{task_id}/schedule-asap", response_model=ScheduleAsapResponse)
def schedule_asap(
    task_id: str,
    request: Optional[ScheduleAsapRequest] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Place one task in the nearest free slot from now on.

    A task with subtasks is not placed itself: its subtasks are scheduled one
    after another instead and the parent's own block, if any, is cleared.
    """
    time_zone = _resolve_timezone(request.timezone if request else None, current_user)
    repository = TaskRepository(db)

    task = repository.get(current_user.id, task_id)
    if task is None:
        raise HTTPException(status_code=404, detail="Task not found")

    group = find_group(TaskGroupRepository(db).get_all(current_user.id), task.group_id) if task.group_id else None
    hours = resolve_placement_hours(group, current_user.working_hours or current_user.awake_hours)
    result = schedule_task_asap(task, repository.get_all(current_user.id), hours, time_zone)
    if not result.ok:
        return _failed(result)

    repository.apply_schedule_moves(current_user.id, result.moved_tasks, result.cleared_task_ids)
    updated_task = repository.get(current_user.id, task_id)
    if updated_task is None:
        raise HTTPException(status_code=404, detail="Task not found")
    subtasks = repository.get_many(
        current_user.id, [move.task_id for move in result.moved_tasks if move.task_id != task_id]
    )

    logger.info(f"Schedule-ASAP for task {task.id}: {len(result.moved_tasks)} block(s) placed")
    return ScheduleAsapResponse(task=updated_task, scheduled_subtasks=subtasks, feedback=result.feedback)


@app.post("/tasks/auto-schedule-group", response_model=AutoScheduleResponse)
def auto_schedule(
    request: AutoScheduleRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Schedule the most urgent unscheduled tasks of a group."""
    time_zone = _resolve_timezone(request.timezone, current_user)

    try:
        result = auto_schedule_group(
            request.group_id,
            request.mode,
            TaskRepository(db).get_all(current_user.id),
            TaskGroupRepository(db).get_all(current_user.id),
            current_user.awake_hours,
            time_zone,
            max_tasks=request.max_tasks,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not result.ok:
        return _failed(result)

    updated = _persist_moves(db, current_user.id, result.moved_tasks)
    return AutoScheduleResponse(
        updated_tasks=updated,
        feedback=result.feedback,
        scheduled_count=len(updated),
        total_candidates=result.total_candidates,
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
