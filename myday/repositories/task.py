from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import select

from myday.models import Task
from myday.schemas import TaskOut
from .base import BaseRepository


class TaskRepository(BaseRepository[Task, TaskOut]):
    """Repository for Task operations."""

    id_prefix = "task"
    schema = TaskOut

    def __init__(self, db: Session):
        super().__init__(db, Task)

    def get_many_by_user(self, task_ids: List[str], user_id: str) -> List[Task]:
        """Get the user's tasks among ``task_ids``; unknown ids are ignored."""
        if not task_ids:
            return []
        return list(self.db.execute(
            select(Task).where(Task.user_id == user_id, Task.id.in_(task_ids))
        ).scalars().all())
