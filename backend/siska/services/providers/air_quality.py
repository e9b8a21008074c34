"""
Air-quality adapter (WAQI / aqicn.org).

WAQI answers HTTP 200 even for failures and reports them through its own
`status` field, so anything other than status "ok" is treated as unavailable.
"""
from typing import Optional

from siska.core.config import Settings
from siska.core.logging import get_logger
from siska.models.domain import AirQuality, AirQualityLevel
from siska.models.requests import Location
from siska.services.providers.base import (
    FailureKind,
    ProviderCallError,
    ProviderClient,
    ProviderResult,
)
from siska.services.providers.schemas import (
    SchemaValidationError,
    WaqiData,
    WaqiResponse,
    validate_payload,
)

logger = get_logger(__name__)

PROVIDER_NAME = "air_quality"
WAQI_GEO_FEED_URL = "https://api.waqi.info/feed/geo:{lat};{lon}/"
DEFAULT_POLLUTANT = "PM2.5"


def classify_aqi(index: int) -> AirQualityLevel:
    """
    Map an AQI value to its Indonesian health category.

    >150 Tidak Sehat, >100 Tidak Sehat bagi Kelompok Sensitif, >50 Sedang, else Baik.
    """
    if index > 150:
        return AirQualityLevel.TIDAK_SEHAT
    if index > 100:
        return AirQualityLevel.TIDAK_SEHAT_SENSITIF
    if index > 50:
        return AirQualityLevel.SEDANG
    return AirQualityLevel.BAIK


class AirQualityAdapter:
    """Fetch the air quality index nearest to a coordinate."""

    def __init__(self, settings: Settings, client: Optional[ProviderClient] = None):
        self.settings = settings
        self.client = client or ProviderClient(PROVIDER_NAME, timeout_seconds=settings.provider_timeout_seconds)

    async def fetch(self, location: Optional[Location]) -> ProviderResult[AirQuality]:
        if location is None:
            return ProviderResult.failure(FailureKind.INPUT_MISSING, PROVIDER_NAME)

        url = WAQI_GEO_FEED_URL.format(lat=location.lat, lon=location.lon)
        try:
            payload = await self.client.request("GET", url, params={"token": self.settings.aqi_token})
            decoded = validate_payload(PROVIDER_NAME, WaqiResponse, payload)
            if decoded.status != "ok":
                logger.warning(
                    "air_quality_status_not_ok",
                    status=decoded.status,
                    detail=decoded.data if isinstance(decoded.data, str) else None,
                )
                return ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, PROVIDER_NAME)
            data = validate_payload(PROVIDER_NAME, WaqiData, decoded.data if isinstance(decoded.data, dict) else {})
        except (ProviderCallError, SchemaValidationError) as exc:
            logger.warning(
                "air_quality_unavailable",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, PROVIDER_NAME)

        return ProviderResult.success(
            AirQuality(
                index=data.aqi,
                level=classify_aqi(data.aqi),
                dominant_pollutant=data.dominantPollutant or data.dominentpol or DEFAULT_POLLUTANT,
            )
        )
