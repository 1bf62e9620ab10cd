from typing import List, Optional, Dict, Any
from sqlalchemy.orm import Session

from myday.repositories import TagRepository
from myday.schemas import TagCreate, TagOut, TagCountOut
from myday.exceptions import ConflictError, NotFoundError, ValidationError
from myday.storage.adapter import StorageMode
from .base import BaseService
from .stats import tag_counts


class TagService(BaseService):
    """Service for user tags and tag-based analytics."""

    def __init__(self, db: Session, storage_mode: Optional[StorageMode] = None):
        super().__init__(db, storage_mode)
        self.tag_repo = TagRepository(db)

    def _check_name(self, name: Optional[str], user_id: str, tag_id: Optional[str] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Tag name cannot be empty")
        existing = self.tag_repo.get_by_name(user_id, name)
        if existing and existing.id != tag_id:
            raise ConflictError(f"Tag '{name}' already exists", {"tag_id": existing.id})
        return name

    def create_tag(self, tag_in: TagCreate, user_id: str) -> TagOut:
        try:
            self.logger.info(f"Creating tag for user {user_id}: {tag_in.name}")

            data = tag_in.model_dump()
            data["name"] = self._check_name(tag_in.name, user_id)
            tag = self.tag_repo.create_for_user(user_id, data)
            self.commit()

            self.logger.info(f"Tag created successfully: {tag.id}")
            return self.tag_repo.to_schema(tag)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to create tag: {str(e)}")
            raise

    def get_tag(self, tag_id: str, user_id: str) -> TagOut:
        tag = self.tag_repo.get_by_user(tag_id, user_id)
        if not tag:
            raise NotFoundError("Tag", tag_id)
        return self.tag_repo.to_schema(tag)

    def list_tags(self, user_id: str) -> List[TagOut]:
        self.logger.debug(f"Listing tags for user {user_id}")
        tags = self.tag_repo.to_schema_batch(self.tag_repo.list_by_user(user_id))
        return sorted(tags, key=lambda t: t.name.lower())

    def update_tag(self, tag_id: str, user_id: str, update_data: Dict[str, Any]) -> TagOut:
        try:
            self.logger.info(f"Updating tag {tag_id} for user {user_id}")

            if not self.tag_repo.get_by_user(tag_id, user_id):
                raise NotFoundError("Tag", tag_id)
            if "name" in update_data:
                update_data["name"] = self._check_name(update_data["name"], user_id, tag_id)

            tag = self.tag_repo.update_by_user(tag_id, user_id, update_data)
            self.commit()

            self.logger.info(f"Tag updated successfully: {tag_id}")
            return self.tag_repo.to_schema(tag)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to update tag {tag_id}: {str(e)}")
            raise

    def delete_tag(self, tag_id: str, user_id: str) -> bool:
        """Delete a tag and strip it from every task that carries it."""
        try:
            self.logger.info(f"Deleting tag {tag_id} for user {user_id}")

            if not self.tag_repo.get_by_user(tag_id, user_id):
                raise NotFoundError("Tag", tag_id)

            repos = self.repos(user_id)
            stripped = 0
            for task in repos.tasks.list_by_user(user_id):
                tags = list(task.tags or [])
                if tag_id in tags:
                    repos.tasks.update_by_user(task.id, user_id, {"tags": [t for t in tags if t != tag_id]})
                    stripped += 1

            deleted = self.tag_repo.delete_by_user(tag_id, user_id)
            self.commit()

            self.logger.info(f"Tag deleted successfully: {tag_id} (removed from {stripped} tasks)")
            return deleted

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to delete tag {tag_id}: {str(e)}")
            raise

    def tag_analytics(
        self,
        user_id: str,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[TagCountOut]:
        """Completion counts per trackable tag in ``[start, end]``."""
        if start and end and end < start:
            raise ValidationError("end cannot be before start")
        self.logger.debug(f"Computing tag analytics for user {user_id} ({start}..{end})")

        repos = self.repos(user_id)
        tasks = repos.tasks.to_schema_batch(repos.tasks.list_by_user(user_id))
        completions = repos.completions.to_schema_batch(
            repos.completions.list_by_user(user_id, start=start, end=end)
        )
        tags = self.tag_repo.to_schema_batch(self.tag_repo.list_by_user(user_id))
        return [TagCountOut(**row) for row in tag_counts(tasks, completions, tags, start, end)]
