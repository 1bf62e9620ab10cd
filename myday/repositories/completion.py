from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, delete

from myday.models import TaskCompletion, TaskSpillover
from myday.schemas import CompletionOut, SpilloverOut
from .base import BaseRepository


class CompletionRepository(BaseRepository[TaskCompletion, CompletionOut]):
    """Repository for per-day task completions."""

    id_prefix = "completion"
    schema = CompletionOut

    def __init__(self, db: Session):
        super().__init__(db, TaskCompletion)

    def list_by_user(
        self,
        user_id: str,
        task_id: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[TaskCompletion]:
        query = select(TaskCompletion).where(TaskCompletion.user_id == user_id)
        if task_id:
            query = query.where(TaskCompletion.task_id == task_id)
        if start:
            query = query.where(TaskCompletion.completion_date >= start)
        if end:
            query = query.where(TaskCompletion.completion_date <= end)
        query = query.order_by(TaskCompletion.completion_date.desc())
        return list(self.db.execute(query).scalars().all())

    def get_for_date(self, user_id: str, task_id: str, day: str) -> Optional[TaskCompletion]:
        return self.db.execute(
            select(TaskCompletion).where(
                TaskCompletion.user_id == user_id,
                TaskCompletion.task_id == task_id,
                TaskCompletion.completion_date == day,
            )
        ).scalar_one_or_none()

    def upsert(
        self,
        user_id: str,
        task_id: str,
        day: str,
        duration_minutes: Optional[int] = None,
        started_at: Optional[datetime] = None,
    ) -> TaskCompletion:
        """Insert or refresh the completion keyed by (user, task, date)."""
        now = datetime.utcnow()
        completion = self.get_for_date(user_id, task_id, day)
        if completion:
            completion.completed_at = now
            if duration_minutes is not None:
                completion.duration_minutes = duration_minutes
            if started_at is not None:
                completion.started_at = started_at
            self.db.flush()
            self.db.refresh(completion)
            return completion
        return self.create_for_user(user_id, {
            "task_id": task_id,
            "completion_date": day,
            "duration_minutes": duration_minutes,
            "started_at": started_at or now,
            "completed_at": now,
        })

    def delete_for_date(self, user_id: str, task_id: str, day: str) -> bool:
        completion = self.get_for_date(user_id, task_id, day)
        if not completion:
            return False
        self.db.delete(completion)
        self.db.flush()
        return True

    def delete_by_task(self, user_id: str, task_id: str) -> int:
        result = self.db.execute(
            delete(TaskCompletion).where(
                TaskCompletion.user_id == user_id,
                TaskCompletion.task_id == task_id,
            )
        )
        return result.rowcount or 0


class SpilloverRepository(BaseRepository[TaskSpillover, SpilloverOut]):
    """Repository for tasks moved from one day to another."""

    id_prefix = "spillover"
    schema = SpilloverOut

    def __init__(self, db: Session):
        super().__init__(db, TaskSpillover)

    def list_by_user(
        self,
        user_id: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> List[TaskSpillover]:
        query = select(TaskSpillover).where(TaskSpillover.user_id == user_id)
        if from_date:
            query = query.where(TaskSpillover.from_date == from_date)
        if to_date:
            query = query.where(TaskSpillover.to_date == to_date)
        return list(self.db.execute(query.order_by(TaskSpillover.moved_at.desc())).scalars().all())

    def upsert(self, user_id: str, task_id: str, from_date: str, to_date: str) -> TaskSpillover:
        spillover = self.db.execute(
            select(TaskSpillover).where(
                TaskSpillover.user_id == user_id,
                TaskSpillover.task_id == task_id,
                TaskSpillover.from_date == from_date,
            )
        ).scalar_one_or_none()
        if spillover:
            spillover.to_date = to_date
            spillover.moved_at = datetime.utcnow()
            self.db.flush()
            self.db.refresh(spillover)
            return spillover
        return self.create_for_user(user_id, {
            "task_id": task_id,
            "from_date": from_date,
            "to_date": to_date,
            "moved_at": datetime.utcnow(),
        })

    def delete_by_task(self, user_id: str, task_id: str) -> int:
        result = self.db.execute(
            delete(TaskSpillover).where(
                TaskSpillover.user_id == user_id,
                TaskSpillover.task_id == task_id,
            )
        )
        return result.rowcount or 0
