from typing import Dict, Optional
from sqlalchemy.orm import Session

from myday.repositories import RoutineRepository, TagRepository
from myday.schemas import AppDataOut, MigrationResult
from myday.storage import to_row
from myday.storage.adapter import StorageMode, local_store_for, repositories_for
from .base import BaseService


class MigrationService(BaseService):
    """Moves legacy local data into the database and exports everything a user owns."""

    def __init__(self, db: Session, storage_mode: Optional[StorageMode] = None):
        super().__init__(db, storage_mode)
        self.tag_repo = TagRepository(db)
        self.routine_repo = RoutineRepository(db)

    def migrate_local_to_database(self, user_id: str) -> MigrationResult:
        """Copy local collections into the database, keeping ids.

        Rows that already exist in the database are left alone, so running the
        migration twice is harmless. The local document is not modified.
        """
        try:
            store = local_store_for(user_id)
            if not store.has_data():
                return MigrationResult(success=True, message="No local data to migrate", counts={})

            self.logger.info(f"Migrating local data to the database for user {user_id}")
            local = repositories_for(self.db, user_id, StorageMode.local)
            database = repositories_for(self.db, user_id, StorageMode.database)
            counts: Dict[str, int] = {
                "tasks": 0, "completions": 0, "spillovers": 0, "events": 0, "journalEntries": 0,
            }

            task_ids = set()
            for task in local.tasks.list_by_user(user_id):
                existing = database.tasks.get(task.id)
                if existing is None:
                    database.tasks.create_for_user(user_id, to_row(task))
                    counts["tasks"] += 1
                elif existing.user_id != user_id:
                    self.logger.warning(f"Skipping task {task.id}: id belongs to another user")
                    continue
                task_ids.add(task.id)

            for completion in local.completions.list_by_user(user_id):
                if completion.task_id not in task_ids:
                    continue
                if database.completions.get_for_date(user_id, completion.task_id, completion.completion_date):
                    continue
                database.completions.create_for_user(user_id, to_row(completion))
                counts["completions"] += 1

            existing_spills = {
                (s.task_id, s.from_date) for s in database.spillovers.list_by_user(user_id)
            }
            for spillover in local.spillovers.list_by_user(user_id):
                if spillover.task_id not in task_ids or (spillover.task_id, spillover.from_date) in existing_spills:
                    continue
                database.spillovers.create_for_user(user_id, to_row(spillover))
                counts["spillovers"] += 1

            for event in local.events.list_by_user(user_id):
                if database.events.get(event.id) is None:
                    database.events.create_for_user(user_id, to_row(event))
                    counts["events"] += 1

            for entry in local.journal.list_by_user(user_id):
                if database.journal.get_by_date(user_id, entry.entry_date) is None:
                    database.journal.create_for_user(user_id, to_row(entry))
                    counts["journalEntries"] += 1

            self.commit()

            total = sum(counts.values())
            self.logger.info(f"Migrated {total} records for user {user_id}: {counts}")
            return MigrationResult(
                success=True,
                message=f"Migrated {total} records to the database",
                counts=counts,
            )

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to migrate local data: {str(e)}")
            raise

    def export_all_data(self, user_id: str) -> AppDataOut:
        """Everything the user owns in the active storage mode, as one document."""
        self.logger.info(f"Exporting data for user {user_id}")

        repos = self.repos(user_id)
        return AppDataOut(
            tasks=repos.tasks.to_schema_batch(repos.tasks.list_by_user(user_id)),
            completions=repos.completions.to_schema_batch(repos.completions.list_by_user(user_id)),
            spillovers=repos.spillovers.to_schema_batch(repos.spillovers.list_by_user(user_id)),
            events=repos.events.to_schema_batch(repos.events.list_by_user(user_id)),
            event_acknowledgments=self.preferences(user_id).event_acknowledgments(),
            tags=self.tag_repo.to_schema_batch(self.tag_repo.list_by_user(user_id)),
            journal_entries=repos.journal.to_schema_batch(repos.journal.list_by_user(user_id)),
            routines=self.routine_repo.to_schema_batch(self.routine_repo.list_by_user(user_id)),
        )
