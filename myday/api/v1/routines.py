from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Dict, Any

from myday.db import get_db
from myday.services import RoutineService
from myday.schemas import AppliedRoutineOut, RoutineCreate, RoutineOut, RoutineUpdate
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_routine_service(db: Session = Depends(get_db)) -> RoutineService:
    """Dependency to get RoutineService instance."""
    return RoutineService(db)


@router.post("", response_model=RoutineOut, status_code=201)
def create_routine(
    payload: RoutineCreate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    routine_service: RoutineService = Depends(get_routine_service)
):
    return routine_service.create_routine(payload, current_user["user_id"])


@router.get("", response_model=List[RoutineOut])
def list_routines(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    routine_service: RoutineService = Depends(get_routine_service)
):
    return routine_service.list_routines(current_user["user_id"])


@router.post("/defaults", response_model=List[RoutineOut])
def initialize_default_routines(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    routine_service: RoutineService = Depends(get_routine_service)
):
    """Create the predefined routines once; later calls return an empty list."""
    return routine_service.initialize_default_routines(current_user["user_id"])


@router.get("/{routine_id}", response_model=RoutineOut)
def get_routine(
    routine_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    routine_service: RoutineService = Depends(get_routine_service)
):
    return routine_service.get_routine(routine_id, current_user["user_id"])


@router.patch("/{routine_id}", response_model=RoutineOut)
def update_routine(
    routine_id: str,
    update_data: RoutineUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    routine_service: RoutineService = Depends(get_routine_service)
):
    update_dict = update_data.model_dump(exclude_unset=True)
    return routine_service.update_routine(routine_id, current_user["user_id"], update_dict)


@router.delete("/{routine_id}", status_code=204)
def delete_routine(
    routine_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    routine_service: RoutineService = Depends(get_routine_service)
):
    routine_service.delete_routine(routine_id, current_user["user_id"])
    return None


@router.post("/{routine_id}/apply", response_model=AppliedRoutineOut)
def apply_routine(
    routine_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    routine_service: RoutineService = Depends(get_routine_service)
):
    return routine_service.apply_routine(routine_id, current_user["user_id"])
