from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Dict, Any

from myday.db import get_db
from myday.services import FamilyService
from myday.schemas import (
    FamilyCreate,
    FamilyDataOut,
    FamilyOut,
    FamilyUpdate,
    InvitationCreate,
    InvitationOut,
)
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_family_service(db: Session = Depends(get_db)) -> FamilyService:
    """Dependency to get FamilyService instance."""
    return FamilyService(db)


@router.post("", response_model=FamilyDataOut, status_code=201)
def create_family(
    payload: FamilyCreate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    """Create a family; the creator becomes its first admin."""
    return family_service.create_family(payload, current_user["user_id"])


@router.get("", response_model=List[FamilyDataOut])
def list_my_families(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    return family_service.list_my_families(current_user["user_id"])


@router.get("/{family_id}", response_model=FamilyDataOut)
def get_family(
    family_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    return family_service.get_family(family_id, current_user["user_id"])


@router.patch("/{family_id}", response_model=FamilyOut)
def update_family(
    family_id: str,
    update_data: FamilyUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    update_dict = update_data.model_dump(exclude_unset=True)
    return family_service.update_family(family_id, current_user["user_id"], update_dict)


@router.delete("/{family_id}", status_code=204)
def delete_family(
    family_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    family_service.delete_family(family_id, current_user["user_id"])
    return None


@router.post("/{family_id}/leave", status_code=204)
def leave_family(
    family_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    family_service.leave_family(family_id, current_user["user_id"])
    return None


@router.post("/{family_id}/invitations", response_model=InvitationOut, status_code=201)
def invite_member(
    family_id: str,
    payload: InvitationCreate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    """Invite someone by email (admins only)."""
    return family_service.invite_member(family_id, payload, current_user["user_id"])


@router.get("/{family_id}/invitations", response_model=List[InvitationOut])
def list_family_invitations(
    family_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    return family_service.list_family_invitations(family_id, current_user["user_id"])
