from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional

from myday.db import get_db
from myday.providers.weather import WeatherProvider, get_weather_provider
from myday.services import SettingsService
from myday.schemas import Location, WeatherOut
from myday.exceptions import ValidationError
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_settings_service(db: Session = Depends(get_db)) -> SettingsService:
    return SettingsService(db)


@router.get("", response_model=WeatherOut)
async def current_weather(
    zip_code: Optional[str] = Query(None, alias="zipCode"),
    city: Optional[str] = Query(None),
    country: Optional[str] = Query(None),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    settings_service: SettingsService = Depends(get_settings_service),
    provider: WeatherProvider = Depends(get_weather_provider)
):
    """Current weather for the given location, or the one saved in settings."""
    if zip_code or city:
        location = Location(zip_code=zip_code, city=city, country=country)
    else:
        location = settings_service.get_settings(current_user["user_id"]).location
        if location is None:
            raise ValidationError("No location given and none saved in settings")

    return await provider.current(location)
