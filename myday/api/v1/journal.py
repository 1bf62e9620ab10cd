from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Dict, Any, Optional

from myday.db import get_db
from myday.services import JournalService
from myday.schemas import JournalEntryIn, JournalEntryOut, check_date_string
from myday.exceptions import ValidationError
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_journal_service(db: Session = Depends(get_db)) -> JournalService:
    """Dependency to get JournalService instance."""
    return JournalService(db)


@router.put("", response_model=JournalEntryOut)
def save_entry(
    payload: JournalEntryIn,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    journal_service: JournalService = Depends(get_journal_service)
):
    """Create or replace the entry for ``entryDate``."""
    return journal_service.save_entry(payload, current_user["user_id"])


@router.get("", response_model=List[JournalEntryOut])
def list_entries(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    journal_service: JournalService = Depends(get_journal_service)
):
    return journal_service.list_entries(current_user["user_id"])


@router.get("/{entry_date}", response_model=Optional[JournalEntryOut])
def get_entry(
    entry_date: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    journal_service: JournalService = Depends(get_journal_service)
):
    """Entry for one day, or null when nothing was written."""
    try:
        check_date_string(entry_date)
    except ValueError as e:
        raise ValidationError(str(e))
    return journal_service.get_entry_by_date(current_user["user_id"], entry_date)


@router.delete("/{entry_id}", status_code=204)
def delete_entry(
    entry_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    journal_service: JournalService = Depends(get_journal_service)
):
    journal_service.delete_entry(entry_id, current_user["user_id"])
    return None
