"""
Current-weather adapter (OpenWeather).

Metric units, Indonesian condition descriptions.
"""
import math
from typing import Optional

from siska.core.config import Settings
from siska.core.logging import get_logger
from siska.models.domain import WeatherSnapshot
from siska.models.requests import Location
from siska.services.providers.base import (
    FailureKind,
    ProviderCallError,
    ProviderClient,
    ProviderResult,
)
from siska.services.providers.schemas import (
    OpenWeatherResponse,
    SchemaValidationError,
    validate_payload,
)

logger = get_logger(__name__)

PROVIDER_NAME = "weather"
OPENWEATHER_URL = "https://api.openweathermap.org/data/2.5/weather"
DEFAULT_CONDITION = "Cerah"


class WeatherAdapter:
    """Fetch the current weather for a coordinate."""

    def __init__(self, settings: Settings, client: Optional[ProviderClient] = None):
        self.settings = settings
        self.client = client or ProviderClient(PROVIDER_NAME, timeout_seconds=settings.provider_timeout_seconds)

    async def fetch(self, location: Optional[Location]) -> ProviderResult[WeatherSnapshot]:
        if location is None:
            return ProviderResult.failure(FailureKind.INPUT_MISSING, PROVIDER_NAME)

        params = {
            "lat": location.lat,
            "lon": location.lon,
            "appid": self.settings.openweather_key,
            "units": "metric",
            "lang": "id",
        }
        try:
            payload = await self.client.request("GET", OPENWEATHER_URL, params=params)
            decoded = validate_payload(PROVIDER_NAME, OpenWeatherResponse, payload)
        except (ProviderCallError, SchemaValidationError) as exc:
            logger.warning(
                "weather_unavailable",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, PROVIDER_NAME)

        condition = DEFAULT_CONDITION
        if decoded.weather and decoded.weather[0].description:
            condition = decoded.weather[0].description

        snapshot = WeatherSnapshot(
            city_label=decoded.name,
            # half-up rounding; round() would round 26.5 down to 26
            temp_celsius=math.floor(decoded.main.temp + 0.5),
            condition=condition,
            humidity_pct=decoded.main.humidity,
            wind_speed=decoded.wind.speed,
        )
        return ProviderResult.success(snapshot)
