"""
Prayer-times adapter (Al-Adhan).

Calls the timings-by-coordinate endpoint with calculation method 20
(Kementerian Agama Republik Indonesia) and the Hanafi Asr school, and
normalizes the answer into a PrayerSchedule.
"""
from typing import Optional

from siska.core.config import Settings
from siska.core.logging import get_logger
from siska.models.domain import PrayerSchedule
from siska.models.requests import Location
from siska.services.providers.base import (
    FailureKind,
    ProviderCallError,
    ProviderClient,
    ProviderResult,
)
from siska.services.providers.schemas import (
    AladhanResponse,
    SchemaValidationError,
    validate_payload,
)

logger = get_logger(__name__)

PROVIDER_NAME = "prayer_times"
ALADHAN_TIMINGS_URL = "https://api.aladhan.com/v1/timings"
CALCULATION_METHOD = 20
ASR_SCHOOL = 1


def city_label_from_timezone(zone: str) -> str:
    """
    Derive a readable city label from an IANA zone name.

    "Asia/Jakarta" -> "Jakarta", "America/Argentina/Buenos_Aires" -> "Buenos Aires"
    """
    return zone.split("/")[-1].replace("_", " ")


class PrayerTimesAdapter:
    """Fetch today's prayer schedule for a coordinate."""

    def __init__(self, settings: Settings, client: Optional[ProviderClient] = None):
        self.settings = settings
        self.client = client or ProviderClient(PROVIDER_NAME, timeout_seconds=settings.provider_timeout_seconds)

    async def fetch(self, location: Optional[Location]) -> ProviderResult[PrayerSchedule]:
        if location is None:
            return ProviderResult.failure(FailureKind.INPUT_MISSING, PROVIDER_NAME)

        params = {
            "latitude": location.lat,
            "longitude": location.lon,
            "method": CALCULATION_METHOD,
            "school": ASR_SCHOOL,
        }
        try:
            payload = await self.client.request("GET", ALADHAN_TIMINGS_URL, params=params)
            decoded = validate_payload(PROVIDER_NAME, AladhanResponse, payload)
        except (ProviderCallError, SchemaValidationError) as exc:
            logger.warning(
                "prayer_times_unavailable",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, PROVIDER_NAME)

        timings = decoded.data.timings
        schedule = PrayerSchedule(
            city_label=city_label_from_timezone(decoded.data.meta.timezone),
            date_label=decoded.data.date.readable,
            times={
                "subuh": timings.Fajr,
                "dzuhur": timings.Dhuhr,
                "ashar": timings.Asr,
                "maghrib": timings.Maghrib,
                "isya": timings.Isha,
            },
        )
        return ProviderResult.success(schedule)
