"""Repository layer for database operations."""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Set
from sqlalchemy.orm import Session
from sqlalchemy import desc

from planmyday.engine.results import MovedTask
from planmyday.models.task import Task
from planmyday.database.models import TaskDB, _naive_utc

logger = logging.getLogger(__name__)


class TaskRepository:
    """Repository for Task database operations."""

    def __init__(self, db: Session):
        self.db = db

    def _as_unique_ids(self, task_ids: List[str]) -> List[str]:
        """Deduplicate while preserving order."""
        seen: Set[str] = set()
        unique: List[str] = []
        for task_id in task_ids:
            if task_id not in seen:
                seen.add(task_id)
                unique.append(task_id)
        return unique

    def create(self, task: Task) -> Task:
        """Create a new task."""
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, task_id: str) -> Optional[Task]:
        """Get task by ID for a specific user."""
        task_db = self.db.query(TaskDB).filter(
            TaskDB.id == task_id,
            TaskDB.user_id == user_id,
        ).first()
        return task_db.to_pydantic() if task_db else None

    def get_all(self, user_id: str) -> List[Task]:
        """Get all tasks for a user sorted by creation date (newest first)."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
        ).order_by(desc(TaskDB.created_at)).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def get_many(self, user_id: str, task_ids: List[str]) -> List[Task]:
        """Get tasks by ID, in the order the IDs were given. Unknown IDs are skipped."""
        unique_ids = self._as_unique_ids(task_ids)
        if not unique_ids:
            return []
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
            TaskDB.id.in_(unique_ids),
        ).all()
        by_id = {t.id: t for t in tasks_db}
        return [by_id[task_id].to_pydantic() for task_id in unique_ids if task_id in by_id]

    def get_scheduled_between(self, user_id: str, start: datetime, end: datetime) -> List[Task]:
        """Get tasks whose scheduled block overlaps [start, end), earliest first."""
        tasks_db = self.db.query(TaskDB).filter(
            TaskDB.user_id == user_id,
            TaskDB.scheduled_start.isnot(None),
            TaskDB.scheduled_end.isnot(None),
            TaskDB.scheduled_start < _naive_utc(end),
            TaskDB.scheduled_end > _naive_utc(start),
        ).order_by(TaskDB.scheduled_start).all()
        return [task_db.to_pydantic() for task_db in tasks_db]

    def apply_schedule_moves(
        self, user_id: str, moves: List[MovedTask], clear_task_ids: Sequence[str] = ()
    ) -> int:
        """Persist new schedule blocks for a batch of tasks in one transaction.

        Each row is matched on both task ID and owner, so moves for tasks the
        user does not own (or that were deleted meanwhile) are skipped. The
        values written are absolute, which makes replaying a batch harmless.

        Args:
            user_id: Owner of the tasks
            moves: New start/end per task
            clear_task_ids: Tasks whose scheduled block is removed in the same transaction

        Returns:
            Number of rows updated
        """
        if not moves and not clear_task_ids:
            return 0

        now = datetime.now(timezone.utc).replace(tzinfo=None)
        updated = 0
        try:
            for move in moves:
                updated += self.db.query(TaskDB).filter(
                    TaskDB.id == move.task_id,
                    TaskDB.user_id == user_id,
                ).update(
                    {
                        TaskDB.scheduled_start: _naive_utc(move.new_start),
                        TaskDB.scheduled_end: _naive_utc(move.new_end),
                        TaskDB.updated_at: now,
                    },
                    synchronize_session=False,
                )
            for task_id in clear_task_ids:
                updated += self.db.query(TaskDB).filter(
                    TaskDB.id == task_id,
                    TaskDB.user_id == user_id,
                ).update(
                    {TaskDB.scheduled_start: None, TaskDB.scheduled_end: None, TaskDB.updated_at: now},
                    synchronize_session=False,
                )
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Failed to apply schedule changes for user {user_id}: {type(e).__name__}: {str(e)}"
            )
            raise

        expected = len(moves) + len(clear_task_ids)
        if updated != expected:
            logger.warning(f"Applied {updated} of {expected} schedule changes for user {user_id}")
        else:
            logger.debug(f"Applied {updated} schedule changes for user {user_id}")
        return updated
