from datetime import date
from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session

from myday.schemas import TaskCreate, TaskOut
from myday.exceptions import NotFoundError, ValidationError
from myday.scheduling import (
    filter_count_based,
    normalize_recurrence,
    period_bounds,
    tasks_for_date,
    today_string,
)
from myday.storage.adapter import StorageMode
from .base import BaseService

CLEARED_HOLD = {
    "on_hold": False,
    "hold_start_date": None,
    "hold_end_date": None,
    "hold_reason": None,
}


def apply_custom_order(tasks: List[TaskOut], order: List[str]) -> List[TaskOut]:
    """Tasks named in ``order`` first, in that order; the rest keep their position."""
    by_id = {t.id: t for t in tasks}
    ordered = [by_id[task_id] for task_id in order if task_id in by_id]
    placed = {t.id for t in ordered}
    return ordered + [t for t in tasks if t.id not in placed]


class TaskService(BaseService):
    """Service for task definitions, holds and ordering."""

    def __init__(self, db: Session, storage_mode: Optional[StorageMode] = None):
        super().__init__(db, storage_mode)

    def _validate(self, data: Dict[str, Any], task_id: Optional[str] = None) -> None:
        name = data.get("name")
        if not name or not name.strip():
            raise ValidationError("Task name cannot be empty")

        frequency = data.get("frequency")
        if frequency == "weekly" and not data.get("days_of_week"):
            raise ValidationError("Weekly tasks need at least one day in daysOfWeek")
        if frequency == "monthly" and not data.get("day_of_month"):
            raise ValidationError("Monthly tasks need a dayOfMonth")
        if frequency == "count-based" and not (data.get("frequency_count") and data.get("frequency_period")):
            raise ValidationError("Count-based tasks need frequencyCount and frequencyPeriod")
        if frequency == "interval" and not (data.get("interval_value") and data.get("interval_unit")):
            raise ValidationError("Interval tasks need intervalValue and intervalUnit")
        if frequency == "custom" and not data.get("custom_frequency"):
            raise ValidationError("Custom tasks need a customFrequency description")

        start, end = data.get("start_date"), data.get("end_date")
        if start and end and end < start:
            raise ValidationError("endDate cannot be before startDate")
        hold_start, hold_end = data.get("hold_start_date"), data.get("hold_end_date")
        if hold_start and hold_end and hold_end < hold_start:
            raise ValidationError("holdEndDate cannot be before holdStartDate")

        if task_id and task_id in (data.get("dependent_task_ids") or []):
            raise ValidationError("A task cannot depend on itself")

    def _prepare(self, data: Dict[str, Any]) -> Dict[str, Any]:
        data["name"] = (data.get("name") or "").strip()
        normalize_recurrence(data)
        if data.get("frequency") == "interval" and not data.get("interval_start_date"):
            data["interval_start_date"] = data.get("start_date") or today_string()
        return data

    def _check_dependencies(self, repos, data: Dict[str, Any], user_id: str) -> None:
        dependent_ids = data.get("dependent_task_ids") or []
        if not dependent_ids:
            return
        found = {t.id for t in repos.tasks.get_many_by_user(dependent_ids, user_id)}
        missing = [task_id for task_id in dependent_ids if task_id not in found]
        if missing:
            raise ValidationError(
                "Dependent tasks not found",
                {"missing_task_ids": missing},
            )

    def create_task(self, task_in: TaskCreate, user_id: str) -> TaskOut:
        """Create a new task for specific user."""
        try:
            self.logger.info(f"Creating task for user {user_id}: {task_in.name}")

            repos = self.repos(user_id)
            data = self._prepare(task_in.model_dump())
            self._validate(data)
            self._check_dependencies(repos, data, user_id)

            task = repos.tasks.create_for_user(user_id, data)
            self.commit()

            self.logger.info(f"Task created successfully: {task.id}")
            return repos.tasks.to_schema(task)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to create task: {str(e)}")
            raise

    def get_task(self, task_id: str, user_id: str) -> TaskOut:
        """Get a task by ID for specific user."""
        self.logger.debug(f"Fetching task {task_id} for user {user_id}")

        repos = self.repos(user_id)
        task = repos.tasks.get_by_user(task_id, user_id)
        if not task:
            raise NotFoundError("Task", task_id)

        return repos.tasks.to_schema(task)

    def list_tasks(self, user_id: str) -> List[TaskOut]:
        """All tasks in the saved custom order, unordered ones newest first."""
        self.logger.debug(f"Listing tasks for user {user_id}")

        repos = self.repos(user_id)
        tasks = repos.tasks.to_schema_batch(repos.tasks.list_by_user(user_id))
        return apply_custom_order(tasks, self.preferences(user_id).task_order())

    def update_task(self, task_id: str, user_id: str, update_data: Dict[str, Any]) -> TaskOut:
        """Update a task for specific user."""
        try:
            self.logger.info(f"Updating task {task_id} for user {user_id}")

            repos = self.repos(user_id)
            existing = repos.tasks.get_by_user(task_id, user_id)
            if not existing:
                raise NotFoundError("Task", task_id)

            merged = repos.tasks.to_schema(existing).model_dump()
            merged.update(update_data)
            if "frequency" in update_data:
                self._prepare(merged)
            else:
                normalize_recurrence(merged)
                merged["name"] = (merged.get("name") or "").strip()
            self._validate(merged, task_id)
            if "dependent_task_ids" in update_data:
                self._check_dependencies(repos, merged, user_id)

            changes = {
                k: v for k, v in merged.items()
                if k not in ("id", "created_at", "updated_at")
            }
            task = repos.tasks.update_by_user(task_id, user_id, changes)
            self.commit()

            self.logger.info(f"Task updated successfully: {task_id}")
            return repos.tasks.to_schema(task)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to update task {task_id}: {str(e)}")
            raise

    def delete_task(self, task_id: str, user_id: str) -> bool:
        """Delete a task along with its completions and spillovers."""
        try:
            self.logger.info(f"Deleting task {task_id} for user {user_id}")

            repos = self.repos(user_id)
            if not repos.tasks.get_by_user(task_id, user_id):
                raise NotFoundError("Task", task_id)

            repos.completions.delete_by_task(user_id, task_id)
            repos.spillovers.delete_by_task(user_id, task_id)
            for other in repos.tasks.list_by_user(user_id):
                dependent_ids = list(other.dependent_task_ids or [])
                if task_id in dependent_ids:
                    dependent_ids.remove(task_id)
                    repos.tasks.update_by_user(other.id, user_id, {"dependent_task_ids": dependent_ids})
            deleted = repos.tasks.delete_by_user(task_id, user_id)
            self.commit()

            prefs = self.preferences(user_id)
            order = prefs.task_order()
            if task_id in order:
                prefs.set_task_order([i for i in order if i != task_id])

            self.logger.info(f"Task deleted successfully: {task_id}")
            return deleted

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to delete task {task_id}: {str(e)}")
            raise

    def hold_task(
        self,
        task_id: str,
        user_id: str,
        end_date: Optional[str] = None,
        reason: Optional[str] = None,
        today: Optional[date] = None,
    ) -> TaskOut:
        """Put a task on hold starting today."""
        start = today_string(today)
        if end_date and end_date < start:
            raise ValidationError("Hold end date cannot be in the past")
        return self.update_task(task_id, user_id, {
            "on_hold": True,
            "hold_start_date": start,
            "hold_end_date": end_date,
            "hold_reason": reason,
        })

    def unhold_task(self, task_id: str, user_id: str) -> TaskOut:
        return self.update_task(task_id, user_id, dict(CLEARED_HOLD))

    def bulk_hold(
        self,
        user_id: str,
        end_date: Optional[str] = None,
        reason: Optional[str] = None,
        today: Optional[date] = None,
    ) -> List[str]:
        """Hold every task of the user; returns the ids updated."""
        try:
            start = today_string(today)
            if end_date and end_date < start:
                raise ValidationError("Hold end date cannot be in the past")
            self.logger.info(f"Holding all tasks for user {user_id} until {end_date or 'further notice'}")

            repos = self.repos(user_id)
            updated_ids = []
            for task in repos.tasks.list_by_user(user_id):
                repos.tasks.update_by_user(task.id, user_id, {
                    "on_hold": True,
                    "hold_start_date": start,
                    "hold_end_date": end_date,
                    "hold_reason": reason,
                })
                updated_ids.append(task.id)
            self.commit()

            self.logger.info(f"Successfully held {len(updated_ids)} tasks")
            return updated_ids

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to hold tasks: {str(e)}")
            raise

    def bulk_unhold(self, user_id: str) -> List[str]:
        try:
            self.logger.info(f"Releasing all held tasks for user {user_id}")

            repos = self.repos(user_id)
            updated_ids = []
            for task in repos.tasks.list_by_user(user_id):
                if not task.on_hold:
                    continue
                repos.tasks.update_by_user(task.id, user_id, CLEARED_HOLD)
                updated_ids.append(task.id)
            self.commit()

            self.logger.info(f"Successfully released {len(updated_ids)} tasks")
            return updated_ids

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to release held tasks: {str(e)}")
            raise

    def update_order(self, user_id: str, task_ids: List[str]) -> List[str]:
        """Store the custom task order; unknown ids are dropped."""
        self.logger.info(f"Saving task order for user {user_id} ({len(task_ids)} tasks)")

        repos = self.repos(user_id)
        known = {t.id for t in repos.tasks.list_by_user(user_id)}
        order = [task_id for task_id in dict.fromkeys(task_ids) if task_id in known]
        self.preferences(user_id).set_task_order(order)
        return order

    def tasks_for_date(self, user_id: str, day: Optional[str] = None) -> List[TaskOut]:
        """Tasks scheduled for ``day`` plus those spilled into it.

        Count-based tasks whose target for the period is already met are left
        out unless they were completed on ``day`` itself.
        """
        day = day or today_string()
        self.logger.debug(f"Listing tasks for {day} for user {user_id}")

        repos = self.repos(user_id)
        tasks = repos.tasks.to_schema_batch(repos.tasks.list_by_user(user_id))
        scheduled = tasks_for_date(tasks, day)

        scheduled_ids = {t.id for t in scheduled}
        spilled_ids = {
            s.task_id for s in repos.spillovers.to_schema_batch(
                repos.spillovers.list_by_user(user_id, to_date=day)
            )
        }
        spilled = [t for t in tasks if t.id in spilled_ids and t.id not in scheduled_ids]

        count_based = [t for t in scheduled if t.frequency == "count-based"]
        if count_based:
            # Widest window covering every counting period that holds ``day``
            bounds = [period_bounds(t, day) for t in count_based]
            completions = repos.completions.to_schema_batch(repos.completions.list_by_user(
                user_id,
                start=min(b[0] for b in bounds),
                end=max(b[1] for b in bounds),
            ))
            scheduled = filter_count_based(scheduled, completions, day)

        return apply_custom_order(scheduled + spilled, self.preferences(user_id).task_order())
