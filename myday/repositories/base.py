from abc import ABC
from datetime import datetime
from typing import TypeVar, Generic, List, Optional, Dict, Any, Type
import uuid

from sqlalchemy.orm import Session
from sqlalchemy import select

from myday.storage.mapping import from_row

ModelType = TypeVar("ModelType")
SchemaType = TypeVar("SchemaType")

TIMESTAMP_FIELDS = ("created_at", "updated_at")


class BaseRepository(ABC, Generic[ModelType, SchemaType]):
    """Base repository with user-scoped CRUD operations."""

    id_prefix: str = "obj"
    schema: Optional[Type[SchemaType]] = None

    def __init__(self, db: Session, model: type[ModelType]):
        self.db = db
        self.model = model

    def _gen_id(self, prefix: Optional[str] = None) -> str:
        """Generate unique ID with prefix."""
        return f"{prefix or self.id_prefix}_{uuid.uuid4()}"

    def _columns(self, data: Dict[str, Any]) -> Dict[str, Any]:
        values = {k: v for k, v in data.items() if hasattr(self.model, k)}
        # Let column defaults fill missing timestamps
        for field in TIMESTAMP_FIELDS:
            if field in values and values[field] is None:
                del values[field]
        return values

    def get(self, id: str) -> Optional[ModelType]:
        """Get a single record by ID."""
        return self.db.execute(
            select(self.model).where(self.model.id == id)
        ).scalar_one_or_none()

    def get_by_user(self, id: str, user_id: str) -> Optional[ModelType]:
        """Get a record by ID for specific user."""
        return self.db.execute(
            select(self.model).where(self.model.id == id, self.model.user_id == user_id)
        ).scalar_one_or_none()

    def list_by_user(self, user_id: str) -> List[ModelType]:
        query = select(self.model).where(self.model.user_id == user_id)
        if hasattr(self.model, "created_at"):
            query = query.order_by(self.model.created_at.desc())
        return list(self.db.execute(query).scalars().all())

    def create_for_user(self, user_id: str, data: Dict[str, Any]) -> ModelType:
        """Create a record owned by ``user_id``. An ``id`` in ``data`` is kept."""
        data = dict(data)
        obj_id = data.pop("id", None) or self._gen_id()
        db_obj = self.model(id=obj_id, user_id=user_id, **self._columns(data))
        self.db.add(db_obj)
        self.db.flush()
        self.db.refresh(db_obj)
        return db_obj

    def update_by_user(self, id: str, user_id: str, data: Dict[str, Any]) -> Optional[ModelType]:
        db_obj = self.get_by_user(id, user_id)
        if not db_obj:
            return None
        for field, value in data.items():
            if field in ("id", "user_id", "created_at"):
                continue
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        if hasattr(db_obj, "updated_at"):
            db_obj.updated_at = datetime.utcnow()
        self.db.flush()
        self.db.refresh(db_obj)
        return db_obj

    def delete_by_user(self, id: str, user_id: str) -> bool:
        """Delete a record by ID for specific user."""
        db_obj = self.get_by_user(id, user_id)
        if not db_obj:
            return False
        self.db.delete(db_obj)
        self.db.flush()
        return True

    def to_schema(self, db_obj: ModelType) -> SchemaType:
        return from_row(self.schema, db_obj)

    def to_schema_batch(self, db_objs: List[ModelType]) -> List[SchemaType]:
        return [self.to_schema(obj) for obj in db_objs]
