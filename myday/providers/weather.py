from typing import Protocol, Optional, Dict, Any
import httpx

from myday.core import settings, get_logger
from myday.exceptions import AppException, ValidationError
from myday.schemas import Location, WeatherOut

logger = get_logger(__name__)

ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"


class WeatherProvider(Protocol):
    async def current(self, location: Location) -> WeatherOut: ...


def location_query(location: Location) -> Dict[str, str]:
    """Query parameters for a zip code or city lookup, country optional."""
    country = (location.country or "").strip()
    if location.zip_code and location.zip_code.strip():
        value = location.zip_code.strip()
        return {"zip": f"{value},{country}" if country else value}
    if location.city and location.city.strip():
        value = location.city.strip()
        return {"q": f"{value},{country}" if country else value}
    raise ValidationError("A zip code or city is required to look up weather")


def parse_forecast(payload: Dict[str, Any]) -> WeatherOut:
    """First forecast slot of an OpenWeatherMap forecast response."""
    try:
        slot = payload["list"][0]
        conditions = (slot.get("weather") or [{}])[0]
        icon = conditions.get("icon")
        return WeatherOut(
            temperature=slot["main"]["temp"],
            description=conditions.get("description", ""),
            icon=ICON_URL.format(icon=icon) if icon else None,
            location=(payload.get("city") or {}).get("name", ""),
        )
    except (KeyError, IndexError, TypeError) as e:
        raise AppException("Unexpected weather service response", status_code=502, details={"error": str(e)})


class OpenWeatherMapProvider:
    """Current conditions from the OpenWeatherMap forecast endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        units: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.weather_api_key
        self.base_url = base_url or settings.weather_api_url
        self.units = units or settings.weather_units
        self.transport = transport

    async def current(self, location: Location) -> WeatherOut:
        if not self.api_key:
            raise ValidationError("Weather API key is not configured")

        params = location_query(location)
        params.update({"appid": self.api_key, "units": self.units})

        async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
            try:
                response = await client.get(self.base_url, params=params)
                response.raise_for_status()
                payload = response.json()
            except httpx.HTTPStatusError as e:
                logger.error(f"Weather service returned {e.response.status_code}")
                raise AppException(
                    "Weather service request failed",
                    status_code=502,
                    details={"upstream_status": e.response.status_code},
                )
            except httpx.HTTPError as e:
                logger.error(f"Weather service request failed: {e}")
                raise AppException("Weather service is unavailable", status_code=502)

        weather = parse_forecast(payload)
        logger.debug(f"Weather fetched for {weather.location}")
        return weather


def get_weather_provider() -> WeatherProvider:
    return OpenWeatherMapProvider()
