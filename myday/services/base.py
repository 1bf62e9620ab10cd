from abc import ABC
from typing import Optional
from sqlalchemy.orm import Session

from myday.core.logging import get_logger
from myday.storage.adapter import (
    RepositorySet,
    StorageMode,
    local_store_for,
    repositories_for,
)
from myday.storage.preferences import Preferences


class BaseService(ABC):
    """Base service class with common functionality."""

    def __init__(self, db: Session, storage_mode: Optional[StorageMode] = None):
        self.db = db
        self.storage_mode = storage_mode
        self.logger = get_logger(self.__class__.__name__)

    def repos(self, user_id: Optional[str]) -> RepositorySet:
        """Task/completion/event/journal repositories for the active storage mode."""
        return repositories_for(self.db, user_id, self.storage_mode)

    def preferences(self, user_id: Optional[str]) -> Preferences:
        return Preferences(local_store_for(user_id))

    def commit(self):
        """Commit database transaction."""
        try:
            self.db.commit()
            self.logger.debug("Database transaction committed")
        except Exception as e:
            self.logger.error(f"Database commit failed: {str(e)}")
            self.db.rollback()
            raise

    def rollback(self):
        """Rollback database transaction."""
        self.db.rollback()
        self.logger.debug("Database transaction rolled back")
