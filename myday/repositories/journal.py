from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import select

from myday.models import JournalEntry
from myday.schemas import JournalEntryOut
from .base import BaseRepository


class JournalRepository(BaseRepository[JournalEntry, JournalEntryOut]):
    """Repository for journal entries, one per user per date."""

    id_prefix = "journal"
    schema = JournalEntryOut

    def __init__(self, db: Session):
        super().__init__(db, JournalEntry)

    def list_by_user(self, user_id: str) -> List[JournalEntry]:
        return list(self.db.execute(
            select(JournalEntry)
            .where(JournalEntry.user_id == user_id)
            .order_by(JournalEntry.entry_date.desc())
        ).scalars().all())

    def get_by_date(self, user_id: str, entry_date: str) -> Optional[JournalEntry]:
        return self.db.execute(
            select(JournalEntry).where(
                JournalEntry.user_id == user_id,
                JournalEntry.entry_date == entry_date,
            )
        ).scalar_one_or_none()

    def upsert(self, user_id: str, data: Dict[str, Any]) -> JournalEntry:
        existing = self.get_by_date(user_id, data["entry_date"])
        if existing:
            return self.update_by_user(existing.id, user_id, data)
        return self.create_for_user(user_id, data)
