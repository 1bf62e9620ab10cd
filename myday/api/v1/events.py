from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session
from typing import List, Dict, Any, Optional

from myday.db import get_db
from myday.services import EventService, ImportService
from myday.schemas import (
    AcknowledgeRequest,
    EventCreate,
    EventOut,
    EventUpdate,
    ImportResult,
    UpcomingEventOut,
)
from myday.exceptions import ValidationError
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Dependency to get EventService instance."""
    return EventService(db)


def get_import_service(db: Session = Depends(get_db)) -> ImportService:
    return ImportService(db)


@router.post("", response_model=EventOut, status_code=201)
def create_event(
    payload: EventCreate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    event_service: EventService = Depends(get_event_service)
):
    return event_service.create_event(payload, current_user["user_id"])


@router.get("", response_model=List[EventOut])
def list_events(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    event_service: EventService = Depends(get_event_service)
):
    return event_service.list_events(current_user["user_id"])


@router.get("/upcoming", response_model=List[UpcomingEventOut])
def upcoming_events(
    days_ahead: int = Query(7, alias="daysAhead", ge=0),
    respect_notify: bool = Query(True, alias="respectNotify"),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    event_service: EventService = Depends(get_event_service)
):
    """Occurrences within the next ``daysAhead`` days, soonest first."""
    return event_service.upcoming_events(
        current_user["user_id"],
        days_ahead=days_ahead,
        respect_notify=respect_notify,
    )


@router.post("/import/ical", response_model=ImportResult)
def import_ical(
    file: UploadFile = File(...),
    personal_only: bool = Query(False, alias="personalOnly"),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    import_service: ImportService = Depends(get_import_service)
):
    """Import events from an iCalendar (.ics) file."""
    if not file.filename:
        raise ValidationError("No file provided")

    try:
        content = file.file.read().decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError("Calendar file must be UTF-8 text")
    finally:
        file.file.close()

    return import_service.import_ical(content, current_user["user_id"], personal_only)


@router.get("/{event_id}", response_model=EventOut)
def get_event(
    event_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    event_service: EventService = Depends(get_event_service)
):
    return event_service.get_event(event_id, current_user["user_id"])


@router.put("/{event_id}", response_model=EventOut)
@router.patch("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    update_data: EventUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    event_service: EventService = Depends(get_event_service)
):
    update_dict = update_data.model_dump(exclude_unset=True)
    return event_service.update_event(event_id, current_user["user_id"], update_dict)


@router.delete("/{event_id}", status_code=204)
def delete_event(
    event_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    event_service: EventService = Depends(get_event_service)
):
    event_service.delete_event(event_id, current_user["user_id"])
    return None


@router.post("/{event_id}/acknowledge", response_model=UpcomingEventOut)
def acknowledge_event(
    event_id: str,
    body: Optional[AcknowledgeRequest] = None,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    event_service: EventService = Depends(get_event_service)
):
    """Mark an occurrence as seen so the dashboard shows it as done."""
    day = body.date if body else None
    return event_service.acknowledge_event(event_id, current_user["user_id"], day)
