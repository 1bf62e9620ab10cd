from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Dict, Any, Optional

from myday.db import get_db
from myday.services import CompletionService
from myday.schemas import CompletionOut, SpilloverOut, check_date_string
from myday.exceptions import ValidationError
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_completion_service(db: Session = Depends(get_db)) -> CompletionService:
    """Dependency to get CompletionService instance."""
    return CompletionService(db)


def _dates(*values: Optional[str]) -> List[Optional[str]]:
    try:
        return [check_date_string(v) for v in values]
    except ValueError as e:
        raise ValidationError(str(e))


@router.get("", response_model=List[CompletionOut])
def list_completions(
    task_id: Optional[str] = Query(None, alias="taskId"),
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    completion_service: CompletionService = Depends(get_completion_service)
):
    """Completion history, optionally for one task and a date range."""
    start, end = _dates(start, end)
    return completion_service.list_completions(current_user["user_id"], task_id, start, end)


@router.get("/spillovers", response_model=List[SpilloverOut])
def list_spillovers(
    from_date: Optional[str] = Query(None, alias="fromDate"),
    to_date: Optional[str] = Query(None, alias="toDate"),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    completion_service: CompletionService = Depends(get_completion_service)
):
    from_date, to_date = _dates(from_date, to_date)
    return completion_service.list_spillovers(current_user["user_id"], from_date, to_date)
