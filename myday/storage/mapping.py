"""Translation between API entities, snake_case rows and camelCase documents.

Entities are the pydantic schemas in ``myday.schemas``. Database rows use the
entity attribute names (snake_case); local JSON documents use the wire names
(camelCase).
"""
from typing import Any, Dict, Type, TypeVar

from pydantic import BaseModel

EntityType = TypeVar("EntityType", bound=BaseModel)


def to_row(entity: BaseModel, exclude_unset: bool = False) -> Dict[str, Any]:
    return entity.model_dump(by_alias=False, exclude_unset=exclude_unset)


def from_row(schema_cls: Type[EntityType], row: Any) -> EntityType:
    """Build an entity from a dict row or an ORM object."""
    return schema_cls.model_validate(row)


def to_document(entity: BaseModel) -> Dict[str, Any]:
    return entity.model_dump(mode="json", by_alias=True)


def from_document(schema_cls: Type[EntityType], document: Dict[str, Any]) -> EntityType:
    return schema_cls.model_validate(document)
