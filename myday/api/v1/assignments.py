from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Dict, Any

from myday.db import get_db
from myday.services import SharingService
from myday.schemas import AssignmentCreate, AssignmentOut, AssignmentStatusUpdate
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_sharing_service(db: Session = Depends(get_db)) -> SharingService:
    """Dependency to get SharingService instance."""
    return SharingService(db)


@router.post("", response_model=AssignmentOut, status_code=201)
def assign_task(
    payload: AssignmentCreate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    sharing_service: SharingService = Depends(get_sharing_service)
):
    """Assign one of your tasks to another family member."""
    return sharing_service.assign_task(payload, current_user["user_id"])


@router.get("/mine", response_model=List[AssignmentOut])
def my_assigned_tasks(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    sharing_service: SharingService = Depends(get_sharing_service)
):
    return sharing_service.my_assigned_tasks(current_user["user_id"])


@router.get("/assigned-by-me", response_model=List[AssignmentOut])
def tasks_i_assigned(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    sharing_service: SharingService = Depends(get_sharing_service)
):
    return sharing_service.tasks_i_assigned(current_user["user_id"])


@router.patch("/{assignment_id}/status", response_model=AssignmentOut)
def update_assignment_status(
    assignment_id: str,
    payload: AssignmentStatusUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    sharing_service: SharingService = Depends(get_sharing_service)
):
    return sharing_service.update_assignment_status(assignment_id, payload.status, current_user["user_id"])
