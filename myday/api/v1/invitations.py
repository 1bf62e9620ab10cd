from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Dict, Any

from myday.db import get_db
from myday.services import FamilyService
from myday.schemas import InvitationOut, InvitationResponse
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_family_service(db: Session = Depends(get_db)) -> FamilyService:
    return FamilyService(db)


@router.get("", response_model=List[InvitationOut])
def list_my_invitations(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    """Pending invitations addressed to the current user."""
    return family_service.list_my_invitations(current_user["user_id"])


@router.post("/{invitation_id}/respond", response_model=InvitationOut)
def respond_to_invitation(
    invitation_id: str,
    payload: InvitationResponse,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    return family_service.respond_to_invitation(invitation_id, payload.accept, current_user["user_id"])


@router.post("/{invitation_id}/cancel", response_model=InvitationOut)
def cancel_invitation(
    invitation_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    family_service: FamilyService = Depends(get_family_service)
):
    return family_service.cancel_invitation(invitation_id, current_user["user_id"])
