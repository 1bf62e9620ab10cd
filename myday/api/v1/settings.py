from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Dict, Any

from myday.db import get_db
from myday.services import SettingsService
from myday.schemas import (
    PreferencesOut,
    ProfileOut,
    ProfileUpdate,
    UserSettingsOut,
    UserSettingsUpdate,
)
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    """Dependency to get SettingsService instance."""
    return SettingsService(db)


@router.get("", response_model=UserSettingsOut)
def get_settings(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    settings_service: SettingsService = Depends(get_settings_service)
):
    return settings_service.get_settings(current_user["user_id"])


@router.put("", response_model=UserSettingsOut)
@router.patch("", response_model=UserSettingsOut)
def save_settings(
    payload: UserSettingsUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    settings_service: SettingsService = Depends(get_settings_service)
):
    """Save settings; fields left out keep their stored value."""
    return settings_service.save_settings(payload, current_user["user_id"])


@router.get("/profile", response_model=ProfileOut)
def get_profile(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    settings_service: SettingsService = Depends(get_settings_service)
):
    return settings_service.get_profile(current_user["user_id"])


@router.patch("/profile", response_model=ProfileOut)
def update_profile(
    update_data: ProfileUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    settings_service: SettingsService = Depends(get_settings_service)
):
    update_dict = update_data.model_dump(exclude_unset=True)
    return settings_service.update_profile(current_user["user_id"], update_dict)


@router.get("/preferences", response_model=PreferencesOut)
def get_preferences(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    settings_service: SettingsService = Depends(get_settings_service)
):
    return settings_service.get_preferences(current_user["user_id"])


@router.post("/preferences/onboarding-complete", response_model=PreferencesOut)
def mark_onboarding_complete(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    settings_service: SettingsService = Depends(get_settings_service)
):
    return settings_service.mark_onboarding_complete(current_user["user_id"])
