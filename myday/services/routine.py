from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session

from myday.repositories import RoutineRepository
from myday.schemas import AppliedRoutineOut, RoutineCreate, RoutineOut
from myday.exceptions import NotFoundError, ValidationError
from myday.storage.adapter import StorageMode
from .base import BaseService

DEFAULT_ROUTINES = [
    ("🌅 Morning Energizer", "Start your day with energy and focus", "morning"),
    ("🌙 Evening Wind Down", "Relax and prepare for restful sleep", "evening"),
    ("💪 Workout Session", "Complete workout and fitness routine", "anytime"),
    ("🧘 Mindfulness Break", "Meditation, breathing, and mental reset", "anytime"),
    ("📚 Study Session", "Focused learning and skill development", "afternoon"),
    ("🏠 Home Reset", "Quick cleaning and organization routine", "anytime"),
]


class RoutineService(BaseService):
    """Service for routines, named bundles of existing tasks."""

    def __init__(self, db: Session, storage_mode: Optional[StorageMode] = None):
        super().__init__(db, storage_mode)
        self.routine_repo = RoutineRepository(db)

    def _check_tasks(self, task_ids: List[str], user_id: str) -> List[str]:
        task_ids = list(dict.fromkeys(task_ids))
        if not task_ids:
            return task_ids
        repos = self.repos(user_id)
        found = {t.id for t in repos.tasks.get_many_by_user(task_ids, user_id)}
        missing = [task_id for task_id in task_ids if task_id not in found]
        if missing:
            raise ValidationError("Routine refers to unknown tasks", {"missing_task_ids": missing})
        return task_ids

    def create_routine(self, routine_in: RoutineCreate, user_id: str) -> RoutineOut:
        try:
            self.logger.info(f"Creating routine for user {user_id}: {routine_in.name}")

            if not routine_in.name or not routine_in.name.strip():
                raise ValidationError("Routine name cannot be empty")
            data = routine_in.model_dump()
            data["name"] = routine_in.name.strip()
            data["task_ids"] = self._check_tasks(routine_in.task_ids, user_id)
            data["is_pre_defined"] = False

            routine = self.routine_repo.create_for_user(user_id, data)
            self.commit()

            self.logger.info(f"Routine created successfully: {routine.id}")
            return self.routine_repo.to_schema(routine)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to create routine: {str(e)}")
            raise

    def get_routine(self, routine_id: str, user_id: str) -> RoutineOut:
        routine = self.routine_repo.get_by_user(routine_id, user_id)
        if not routine:
            raise NotFoundError("Routine", routine_id)
        return self.routine_repo.to_schema(routine)

    def list_routines(self, user_id: str) -> List[RoutineOut]:
        self.logger.debug(f"Listing routines for user {user_id}")
        return self.routine_repo.to_schema_batch(self.routine_repo.list_by_user(user_id))

    def update_routine(self, routine_id: str, user_id: str, update_data: Dict[str, Any]) -> RoutineOut:
        try:
            self.logger.info(f"Updating routine {routine_id} for user {user_id}")

            if not self.routine_repo.get_by_user(routine_id, user_id):
                raise NotFoundError("Routine", routine_id)
            if "name" in update_data:
                if not update_data["name"] or not update_data["name"].strip():
                    raise ValidationError("Routine name cannot be empty")
                update_data["name"] = update_data["name"].strip()
            if update_data.get("task_ids") is not None:
                update_data["task_ids"] = self._check_tasks(update_data["task_ids"], user_id)

            routine = self.routine_repo.update_by_user(routine_id, user_id, update_data)
            self.commit()

            self.logger.info(f"Routine updated successfully: {routine_id}")
            return self.routine_repo.to_schema(routine)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to update routine {routine_id}: {str(e)}")
            raise

    def delete_routine(self, routine_id: str, user_id: str) -> bool:
        try:
            self.logger.info(f"Deleting routine {routine_id} for user {user_id}")

            if not self.routine_repo.get_by_user(routine_id, user_id):
                raise NotFoundError("Routine", routine_id)
            deleted = self.routine_repo.delete_by_user(routine_id, user_id)
            self.commit()
            return deleted

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to delete routine {routine_id}: {str(e)}")
            raise

    def initialize_default_routines(self, user_id: str) -> List[RoutineOut]:
        """Seed the predefined routines once; returns the routines created."""
        try:
            if self.routine_repo.list_predefined(user_id):
                self.logger.debug(f"Default routines already present for user {user_id}")
                return []

            self.logger.info(f"Creating default routines for user {user_id}")
            created = [
                self.routine_repo.create_for_user(user_id, {
                    "name": name,
                    "description": description,
                    "time_of_day": time_of_day,
                    "task_ids": [],
                    "is_pre_defined": True,
                    "is_active": False,
                })
                for name, description, time_of_day in DEFAULT_ROUTINES
            ]
            self.commit()
            return self.routine_repo.to_schema_batch(created)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to create default routines: {str(e)}")
            raise

    def apply_routine(self, routine_id: str, user_id: str) -> AppliedRoutineOut:
        """The routine's tasks, in routine order, ready to be added to a day."""
        routine = self.get_routine(routine_id, user_id)
        repos = self.repos(user_id)
        by_id = {
            t.id: t for t in repos.tasks.to_schema_batch(
                repos.tasks.get_many_by_user(routine.task_ids, user_id)
            )
        }
        tasks = [by_id[task_id] for task_id in routine.task_ids if task_id in by_id]
        self.logger.info(f"Applying routine {routine_id} with {len(tasks)} tasks for user {user_id}")
        return AppliedRoutineOut(routine_id=routine.id, tasks=tasks)
