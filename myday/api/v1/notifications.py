from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Dict, Any

from myday.db import get_db
from myday.services import NotificationService
from myday.schemas import NotificationOut, UnreadCountOut
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    """Dependency to get NotificationService instance."""
    return NotificationService(db)


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    notification_service: NotificationService = Depends(get_notification_service)
):
    return notification_service.list_notifications(current_user["user_id"], unread_only)


@router.get("/unread-count", response_model=UnreadCountOut)
def unread_count(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    notification_service: NotificationService = Depends(get_notification_service)
):
    return UnreadCountOut(count=notification_service.unread_count(current_user["user_id"]))


@router.post("/read-all")
def mark_all_read(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    notification_service: NotificationService = Depends(get_notification_service)
):
    updated = notification_service.mark_all_read(current_user["user_id"])
    return {"updated": updated}


@router.post("/{notification_id}/read", response_model=NotificationOut)
def mark_read(
    notification_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    notification_service: NotificationService = Depends(get_notification_service)
):
    return notification_service.mark_read(notification_id, current_user["user_id"])


@router.delete("/{notification_id}", status_code=204)
def delete_notification(
    notification_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    notification_service: NotificationService = Depends(get_notification_service)
):
    notification_service.delete_notification(notification_id, current_user["user_id"])
    return None
