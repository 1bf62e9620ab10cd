import enum
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Union

from sqlalchemy.orm import Session

from myday.core import settings, get_logger
from myday.exceptions import AuthenticationRequiredError
from myday.repositories import (
    TaskRepository,
    CompletionRepository,
    SpilloverRepository,
    EventRepository,
    JournalRepository,
)
from .local import LocalStore
from .repositories import (
    LocalTaskRepository,
    LocalCompletionRepository,
    LocalSpilloverRepository,
    LocalEventRepository,
    LocalJournalRepository,
)

logger = get_logger(__name__)


class StorageMode(str, enum.Enum):
    database = "database"
    local = "local"


class EntityRepository(Protocol):
    """Methods shared by the SQL and local repositories."""

    def get_by_user(self, id: str, user_id: str) -> Any: ...
    def list_by_user(self, user_id: str) -> Any: ...
    def create_for_user(self, user_id: str, data: Dict[str, Any]) -> Any: ...
    def update_by_user(self, id: str, user_id: str, data: Dict[str, Any]) -> Any: ...
    def delete_by_user(self, id: str, user_id: str) -> bool: ...
    def to_schema(self, obj: Any) -> Any: ...


@dataclass
class RepositorySet:
    mode: StorageMode
    tasks: EntityRepository
    completions: EntityRepository
    spillovers: EntityRepository
    events: EntityRepository
    journal: EntityRepository


def get_storage_mode() -> StorageMode:
    return StorageMode(settings.storage_mode)


def require_auth(user: Union[None, str, Dict[str, Any]]) -> str:
    """Return the signed-in user's id or raise ``AuthenticationRequiredError``."""
    if isinstance(user, dict):
        user = user.get("user_id")
    if not user:
        raise AuthenticationRequiredError()
    return user


def local_store_for(user_id: str) -> LocalStore:
    """Per-user JSON store; also holds UI preferences in every mode."""
    return LocalStore(settings.local_storage_dir, require_auth(user_id))


def repositories_for(
    db: Session,
    user_id: Optional[str],
    mode: Optional[StorageMode] = None,
) -> RepositorySet:
    user_id = require_auth(user_id)
    mode = mode or get_storage_mode()
    if mode == StorageMode.local:
        store = local_store_for(user_id)
        return RepositorySet(
            mode=mode,
            tasks=LocalTaskRepository(store),
            completions=LocalCompletionRepository(store),
            spillovers=LocalSpilloverRepository(store),
            events=LocalEventRepository(store),
            journal=LocalJournalRepository(store),
        )
    return RepositorySet(
        mode=mode,
        tasks=TaskRepository(db),
        completions=CompletionRepository(db),
        spillovers=SpilloverRepository(db),
        events=EventRepository(db),
        journal=JournalRepository(db),
    )
