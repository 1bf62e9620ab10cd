from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Dict, Any, Optional

from myday.db import get_db
from myday.services import TagService
from myday.schemas import TagCountOut, TagCreate, TagOut, TagUpdate, check_date_string
from myday.exceptions import ValidationError
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_tag_service(db: Session = Depends(get_db)) -> TagService:
    """Dependency to get TagService instance."""
    return TagService(db)


@router.post("", response_model=TagOut, status_code=201)
def create_tag(
    payload: TagCreate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    tag_service: TagService = Depends(get_tag_service)
):
    return tag_service.create_tag(payload, current_user["user_id"])


@router.get("", response_model=List[TagOut])
def list_tags(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    tag_service: TagService = Depends(get_tag_service)
):
    return tag_service.list_tags(current_user["user_id"])


@router.get("/analytics", response_model=List[TagCountOut])
def tag_analytics(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    tag_service: TagService = Depends(get_tag_service)
):
    """How often tasks carrying each trackable tag were completed."""
    try:
        start, end = check_date_string(start), check_date_string(end)
    except ValueError as e:
        raise ValidationError(str(e))
    return tag_service.tag_analytics(current_user["user_id"], start, end)


@router.get("/{tag_id}", response_model=TagOut)
def get_tag(
    tag_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    tag_service: TagService = Depends(get_tag_service)
):
    return tag_service.get_tag(tag_id, current_user["user_id"])


@router.patch("/{tag_id}", response_model=TagOut)
def update_tag(
    tag_id: str,
    update_data: TagUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    tag_service: TagService = Depends(get_tag_service)
):
    return tag_service.update_tag(tag_id, current_user["user_id"], update_data.model_dump(exclude_unset=True))


@router.delete("/{tag_id}", status_code=204)
def delete_tag(
    tag_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    tag_service: TagService = Depends(get_tag_service)
):
    """Delete a tag and remove it from every task."""
    tag_service.delete_tag(tag_id, current_user["user_id"])
    return None
