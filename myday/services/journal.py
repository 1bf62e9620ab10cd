from typing import List, Optional

from myday.schemas import JournalEntryIn, JournalEntryOut
from myday.exceptions import NotFoundError
from .base import BaseService


class JournalService(BaseService):
    """Service for daily journal entries (one per date)."""

    def save_entry(self, entry_in: JournalEntryIn, user_id: str) -> JournalEntryOut:
        """Create or replace the entry for ``entry_in.entry_date``."""
        try:
            self.logger.info(f"Saving journal entry for {entry_in.entry_date} for user {user_id}")

            repos = self.repos(user_id)
            data = entry_in.model_dump()
            data["content"] = data.get("content") or ""
            entry = repos.journal.upsert(user_id, data)
            self.commit()

            self.logger.info(f"Journal entry saved: {entry.id}")
            return repos.journal.to_schema(entry)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to save journal entry: {str(e)}")
            raise

    def get_entry_by_date(self, user_id: str, entry_date: str) -> Optional[JournalEntryOut]:
        self.logger.debug(f"Fetching journal entry for {entry_date} for user {user_id}")

        repos = self.repos(user_id)
        entry = repos.journal.get_by_date(user_id, entry_date)
        return repos.journal.to_schema(entry) if entry else None

    def list_entries(self, user_id: str) -> List[JournalEntryOut]:
        repos = self.repos(user_id)
        return repos.journal.to_schema_batch(repos.journal.list_by_user(user_id))

    def delete_entry(self, entry_id: str, user_id: str) -> bool:
        try:
            self.logger.info(f"Deleting journal entry {entry_id} for user {user_id}")

            repos = self.repos(user_id)
            if not repos.journal.get_by_user(entry_id, user_id):
                raise NotFoundError("JournalEntry", entry_id)

            deleted = repos.journal.delete_by_user(entry_id, user_id)
            self.commit()
            return deleted

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to delete journal entry {entry_id}: {str(e)}")
            raise
