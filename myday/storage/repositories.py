"""Repositories backed by the per-user JSON document.

They expose the same methods as their SQLAlchemy counterparts in
``myday.repositories`` but return entities directly, so ``to_schema`` is the
identity.
"""
from datetime import datetime
from typing import Any, Callable, Dict, Generic, List, Optional, Type, TypeVar
import uuid

from pydantic import BaseModel

from myday.schemas import CompletionOut, EventOut, JournalEntryOut, SpilloverOut, TaskOut
from .local import LocalStore
from .mapping import from_document, to_document

EntityType = TypeVar("EntityType", bound=BaseModel)


class LocalRepository(Generic[EntityType]):
    collection: str = ""
    id_prefix: str = "obj"
    schema: Type[EntityType]

    def __init__(self, store: LocalStore):
        self.store = store

    def _gen_id(self) -> str:
        return f"{self.id_prefix}_{uuid.uuid4()}"

    def _load(self) -> List[EntityType]:
        return [from_document(self.schema, doc) for doc in self.store.collection(self.collection)]

    def _save(self, entities: List[EntityType]) -> None:
        self.store.replace_collection(self.collection, [to_document(e) for e in entities])

    def _filter(self, predicate: Callable[[EntityType], bool]) -> List[EntityType]:
        return [e for e in self._load() if predicate(e)]

    def _build(self, data: Dict[str, Any]) -> EntityType:
        data = dict(data)
        now = datetime.utcnow()
        data["id"] = data.get("id") or self._gen_id()
        for field in ("created_at", "updated_at"):
            if field in self.schema.model_fields and not data.get(field):
                data[field] = now
        return self.schema.model_validate(data)

    def get_by_user(self, id: str, user_id: str) -> Optional[EntityType]:
        return next((e for e in self._load() if e.id == id), None)

    def list_by_user(self, user_id: str) -> List[EntityType]:
        entities = self._load()
        if "created_at" in self.schema.model_fields:
            entities.sort(key=lambda e: e.created_at, reverse=True)
        return entities

    def create_for_user(self, user_id: str, data: Dict[str, Any]) -> EntityType:
        entity = self._build(data)
        entities = self._load()
        entities.append(entity)
        self._save(entities)
        return entity

    def update_by_user(self, id: str, user_id: str, data: Dict[str, Any]) -> Optional[EntityType]:
        entities = self._load()
        for index, entity in enumerate(entities):
            if entity.id != id:
                continue
            merged = entity.model_dump()
            merged.update({k: v for k, v in data.items() if k not in ("id", "created_at")})
            if "updated_at" in self.schema.model_fields:
                merged["updated_at"] = datetime.utcnow()
            entities[index] = self.schema.model_validate(merged)
            self._save(entities)
            return entities[index]
        return None

    def delete_by_user(self, id: str, user_id: str) -> bool:
        entities = self._load()
        remaining = [e for e in entities if e.id != id]
        if len(remaining) == len(entities):
            return False
        self._save(remaining)
        return True

    def to_schema(self, entity: EntityType) -> EntityType:
        return entity

    def to_schema_batch(self, entities: List[EntityType]) -> List[EntityType]:
        return list(entities)


class LocalTaskRepository(LocalRepository[TaskOut]):
    collection = "tasks"
    id_prefix = "task"
    schema = TaskOut

    def get_many_by_user(self, task_ids: List[str], user_id: str) -> List[TaskOut]:
        wanted = set(task_ids)
        return self._filter(lambda t: t.id in wanted)


class LocalCompletionRepository(LocalRepository[CompletionOut]):
    collection = "completions"
    id_prefix = "completion"
    schema = CompletionOut

    def list_by_user(
        self,
        user_id: str,
        task_id: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
    ) -> List[CompletionOut]:
        rows = self._filter(lambda c: (
            (not task_id or c.task_id == task_id)
            and (not start or c.completion_date >= start)
            and (not end or c.completion_date <= end)
        ))
        return sorted(rows, key=lambda c: c.completion_date, reverse=True)

    def get_for_date(self, user_id: str, task_id: str, day: str) -> Optional[CompletionOut]:
        return next(
            (c for c in self._load() if c.task_id == task_id and c.completion_date == day),
            None,
        )

    def upsert(
        self,
        user_id: str,
        task_id: str,
        day: str,
        duration_minutes: Optional[int] = None,
        started_at: Optional[datetime] = None,
    ) -> CompletionOut:
        now = datetime.utcnow()
        existing = self.get_for_date(user_id, task_id, day)
        if existing:
            changes: Dict[str, Any] = {"completed_at": now}
            if duration_minutes is not None:
                changes["duration_minutes"] = duration_minutes
            if started_at is not None:
                changes["started_at"] = started_at
            return self.update_by_user(existing.id, user_id, changes)
        return self.create_for_user(user_id, {
            "task_id": task_id,
            "completion_date": day,
            "duration_minutes": duration_minutes,
            "started_at": started_at or now,
            "completed_at": now,
        })

    def delete_for_date(self, user_id: str, task_id: str, day: str) -> bool:
        existing = self.get_for_date(user_id, task_id, day)
        if not existing:
            return False
        return self.delete_by_user(existing.id, user_id)

    def delete_by_task(self, user_id: str, task_id: str) -> int:
        entities = self._load()
        remaining = [c for c in entities if c.task_id != task_id]
        self._save(remaining)
        return len(entities) - len(remaining)


class LocalSpilloverRepository(LocalRepository[SpilloverOut]):
    collection = "spillovers"
    id_prefix = "spillover"
    schema = SpilloverOut

    def list_by_user(
        self,
        user_id: str,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
    ) -> List[SpilloverOut]:
        return self._filter(lambda s: (
            (not from_date or s.from_date == from_date)
            and (not to_date or s.to_date == to_date)
        ))

    def upsert(self, user_id: str, task_id: str, from_date: str, to_date: str) -> SpilloverOut:
        existing = next(
            (s for s in self._load() if s.task_id == task_id and s.from_date == from_date),
            None,
        )
        if existing:
            return self.update_by_user(existing.id, user_id, {"to_date": to_date, "moved_at": datetime.utcnow()})
        return self.create_for_user(user_id, {
            "task_id": task_id,
            "from_date": from_date,
            "to_date": to_date,
            "moved_at": datetime.utcnow(),
        })

    def delete_by_task(self, user_id: str, task_id: str) -> int:
        entities = self._load()
        remaining = [s for s in entities if s.task_id != task_id]
        self._save(remaining)
        return len(entities) - len(remaining)


class LocalEventRepository(LocalRepository[EventOut]):
    collection = "events"
    id_prefix = "event"
    schema = EventOut


class LocalJournalRepository(LocalRepository[JournalEntryOut]):
    collection = "journalEntries"
    id_prefix = "journal"
    schema = JournalEntryOut

    def list_by_user(self, user_id: str) -> List[JournalEntryOut]:
        return sorted(self._load(), key=lambda e: e.entry_date, reverse=True)

    def get_by_date(self, user_id: str, entry_date: str) -> Optional[JournalEntryOut]:
        return next((e for e in self._load() if e.entry_date == entry_date), None)

    def upsert(self, user_id: str, data: Dict[str, Any]) -> JournalEntryOut:
        existing = self.get_by_date(user_id, data["entry_date"])
        if existing:
            return self.update_by_user(existing.id, user_id, data)
        return self.create_for_user(user_id, data)
