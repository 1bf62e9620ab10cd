from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import select, func

from myday.models import Tag
from myday.schemas import TagOut
from .base import BaseRepository


class TagRepository(BaseRepository[Tag, TagOut]):
    """Repository for user-defined tags."""

    id_prefix = "tag"
    schema = TagOut

    def __init__(self, db: Session):
        super().__init__(db, Tag)

    def get_by_name(self, user_id: str, name: str) -> Optional[Tag]:
        """Case-insensitive lookup, names are unique per user."""
        return self.db.execute(
            select(Tag).where(Tag.user_id == user_id, func.lower(Tag.name) == name.strip().lower())
        ).scalar_one_or_none()
