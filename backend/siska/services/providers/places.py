"""
Nearby-places adapter (Foursquare Places v3).

Each place intent maps to one fixed Foursquare category id. Results are
requested sorted by distance, and sorted again locally so the order holds
even if the provider ignores the sort hint.
"""
from typing import Dict, List, Optional

from siska.core.config import Settings
from siska.core.logging import get_logger
from siska.models.domain import PlaceEntry
from siska.models.requests import Intent, Location
from siska.services.providers.base import (
    FailureKind,
    ProviderCallError,
    ProviderClient,
    ProviderResult,
)
from siska.services.providers.schemas import (
    FoursquareResponse,
    SchemaValidationError,
    validate_payload,
)

logger = get_logger(__name__)

PROVIDER_NAME = "places"
FOURSQUARE_SEARCH_URL = "https://api.foursquare.com/v3/places/search"
MAX_PLACES = 5

CATEGORY_CODES: Dict[Intent, str] = {
    Intent.KULINER: "13065",  # Restaurant
    Intent.WISATA: "19000",  # Travel and Transportation
    Intent.MASJID: "12048",  # Mosque
}


class PlacesAdapter:
    """Search places of one category around a coordinate."""

    def __init__(self, settings: Settings, client: Optional[ProviderClient] = None):
        self.settings = settings
        self.client = client or ProviderClient(PROVIDER_NAME, timeout_seconds=settings.provider_timeout_seconds)

    async def fetch(self, location: Optional[Location], intent: Intent) -> ProviderResult[List[PlaceEntry]]:
        """
        Return up to five places ordered by ascending distance.

        No call is made when the location or the API key is missing, or when
        the intent has no category mapping.
        """
        if location is None:
            return ProviderResult.failure(FailureKind.INPUT_MISSING, PROVIDER_NAME)
        if not self.settings.foursquare_key:
            logger.error("places_api_key_missing")
            return ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, PROVIDER_NAME)

        category = CATEGORY_CODES.get(intent)
        if category is None:
            return ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, PROVIDER_NAME)

        params = {
            "ll": f"{location.lat},{location.lon}",
            "categories": category,
            "limit": MAX_PLACES,
            "sort": "DISTANCE",
        }
        headers = {
            "accept": "application/json",
            "Authorization": self.settings.foursquare_key,
        }
        try:
            payload = await self.client.request("GET", FOURSQUARE_SEARCH_URL, params=params, headers=headers)
            decoded = validate_payload(PROVIDER_NAME, FoursquareResponse, payload)
        except (ProviderCallError, SchemaValidationError) as exc:
            logger.warning(
                "places_unavailable",
                intent=intent.value,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, PROVIDER_NAME)

        entries = [
            PlaceEntry(
                name=place.name,
                distance_meters=place.distance,
                address=place.location.formatted_address or "Alamat tidak tersedia",
                category=(place.categories[0].name if place.categories else None) or "Tempat",
            )
            for place in decoded.results
        ]
        entries.sort(key=lambda entry: entry.distance_meters)
        return ProviderResult.success(entries[:MAX_PLACES])
