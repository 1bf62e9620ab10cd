from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Dict, Any

from myday.db import get_db
from myday.services import SharingService
from myday.schemas import ShareCreate, SharedTaskOut
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_sharing_service(db: Session = Depends(get_db)) -> SharingService:
    return SharingService(db)


@router.post("", response_model=SharedTaskOut, status_code=201)
def share_task(
    payload: ShareCreate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    sharing_service: SharingService = Depends(get_sharing_service)
):
    """Share a task with one member, or with the whole family when ``sharedWith`` is empty."""
    return sharing_service.share_task(payload, current_user["user_id"])


@router.get("", response_model=List[SharedTaskOut])
def shared_with_me(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    sharing_service: SharingService = Depends(get_sharing_service)
):
    return sharing_service.shared_with_me(current_user["user_id"])


@router.delete("/{shared_task_id}", status_code=204)
def unshare_task(
    shared_task_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    sharing_service: SharingService = Depends(get_sharing_service)
):
    sharing_service.unshare_task(shared_task_id, current_user["user_id"])
    return None
