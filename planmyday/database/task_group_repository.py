"""Repository for TaskGroup database operations."""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from planmyday.models.task_group import TaskGroup
from planmyday.database.models import TaskGroupDB

logger = logging.getLogger(__name__)


class TaskGroupRepository:
    """Repository for TaskGroup database operations."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, group: TaskGroup) -> TaskGroup:
        """Create a new task group."""
        try:
            group_db = TaskGroupDB.from_pydantic(group)
            self.db.add(group_db)
            self.db.commit()
            self.db.refresh(group_db)
            logger.debug(f"Created task group {group.id}: {group.name[:50]}")
            return group_db.to_pydantic()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create task group {group.id}: {type(e).__name__}: {str(e)}")
            raise

    def get(self, user_id: str, group_id: str) -> Optional[TaskGroup]:
        group_db = self.db.query(TaskGroupDB).filter(
            TaskGroupDB.id == group_id,
            TaskGroupDB.user_id == user_id,
        ).first()
        return group_db.to_pydantic() if group_db else None

    def get_all(self, user_id: str) -> List[TaskGroup]:
        """Get all groups for a user sorted by name."""
        groups_db = self.db.query(TaskGroupDB).filter(
            TaskGroupDB.user_id == user_id,
        ).order_by(TaskGroupDB.name).all()
        return [g.to_pydantic() for g in groups_db]
