from datetime import datetime, timedelta
from typing import List, Optional, Set

from myday.schemas import CompletionOut, CompletionResult, SpilloverOut
from myday.exceptions import NotFoundError, ValidationError
from myday.scheduling import format_date, parse_date, should_task_show_on, today_string
from myday.storage.adapter import RepositorySet
from .base import BaseService


class CompletionService(BaseService):
    """Service for daily completions, dependent-task cascades and spillovers."""

    def _require_task(self, repos: RepositorySet, task_id: str, user_id: str):
        task = repos.tasks.get_by_user(task_id, user_id)
        if not task:
            raise NotFoundError("Task", task_id)
        return task

    def _cascade(
        self,
        repos: RepositorySet,
        user_id: str,
        source_id: str,
        day: str,
        visited: Set[str],
    ) -> List[str]:
        """Complete tasks that depend on ``source_id`` and are due on ``day``."""
        cascaded = []
        for task in repos.tasks.to_schema_batch(repos.tasks.list_by_user(user_id)):
            if task.id in visited or source_id not in (task.dependent_task_ids or []):
                continue
            if not should_task_show_on(task, day):
                continue
            visited.add(task.id)
            repos.completions.upsert(user_id, task.id, day)
            cascaded.append(task.id)
            cascaded.extend(self._cascade(repos, user_id, task.id, day, visited))
        return cascaded

    def complete_task(
        self,
        task_id: str,
        user_id: str,
        day: Optional[str] = None,
        duration_minutes: Optional[int] = None,
        started_at: Optional[datetime] = None,
    ) -> CompletionResult:
        """Mark a task done for ``day`` and cascade to its dependents."""
        try:
            day = day or today_string()
            self.logger.info(f"Completing task {task_id} on {day} for user {user_id}")

            repos = self.repos(user_id)
            self._require_task(repos, task_id, user_id)

            completion = repos.completions.upsert(user_id, task_id, day, duration_minutes, started_at)
            cascaded = self._cascade(repos, user_id, task_id, day, {task_id})
            self.commit()

            if cascaded:
                self.logger.info(f"Cascaded completion to {len(cascaded)} dependent tasks: {cascaded}")
            return CompletionResult(
                completion=repos.completions.to_schema(completion),
                cascaded_task_ids=cascaded,
            )

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to complete task {task_id}: {str(e)}")
            raise

    def uncomplete_task(self, task_id: str, user_id: str, day: Optional[str] = None) -> bool:
        try:
            day = day or today_string()
            self.logger.info(f"Removing completion of task {task_id} on {day} for user {user_id}")

            repos = self.repos(user_id)
            self._require_task(repos, task_id, user_id)
            removed = repos.completions.delete_for_date(user_id, task_id, day)
            self.commit()
            return removed

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to uncomplete task {task_id}: {str(e)}")
            raise

    def list_completions(
        self,
        user_id: str,
        task_id: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[CompletionOut]:
        self.logger.debug(f"Listing completions for user {user_id} ({start}..{end})")
        if start and end and end < start:
            raise ValidationError("end cannot be before start")

        repos = self.repos(user_id)
        return repos.completions.to_schema_batch(
            repos.completions.list_by_user(user_id, task_id=task_id, start=start, end=end)
        )

    def is_completed(self, task_id: str, user_id: str, day: str) -> bool:
        repos = self.repos(user_id)
        return repos.completions.get_for_date(user_id, task_id, day) is not None

    def move_to_next_day(
        self,
        task_id: str,
        user_id: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> SpilloverOut:
        """Record that an uncompleted task was moved to a later day."""
        try:
            from_date = from_date or today_string()
            to_date = to_date or format_date(parse_date(from_date) + timedelta(days=1))
            if to_date <= from_date:
                raise ValidationError("Spillover target date must be after the source date")
            self.logger.info(f"Moving task {task_id} from {from_date} to {to_date} for user {user_id}")

            repos = self.repos(user_id)
            self._require_task(repos, task_id, user_id)
            spillover = repos.spillovers.upsert(user_id, task_id, from_date, to_date)
            self.commit()

            return repos.spillovers.to_schema(spillover)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to move task {task_id}: {str(e)}")
            raise

    def list_spillovers(
        self,
        user_id: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> List[SpilloverOut]:
        repos = self.repos(user_id)
        return repos.spillovers.to_schema_batch(
            repos.spillovers.list_by_user(user_id, from_date=from_date, to_date=to_date)
        )
