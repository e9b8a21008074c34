"""
Aggregators combining provider results per intent.

- Weather + air quality: both adapters run concurrently and fail
  independently; the report keeps whatever succeeded.
- Places: single provider, passed through unchanged.
- Shipping: courier quotes flattened into one offer list sorted by cost.
"""
import asyncio
from dataclasses import dataclass, field
from typing import Any, List, Optional

from siska.core.logging import get_logger
from siska.models.domain import (
    AirQuality,
    PlaceEntry,
    ShippingOffer,
    ShippingQuery,
    ShippingQuote,
    WeatherSnapshot,
)
from siska.models.requests import Intent, Location
from siska.services.providers.air_quality import AirQualityAdapter
from siska.services.providers.base import FailureKind, ProviderError, ProviderResult
from siska.services.providers.places import PlacesAdapter
from siska.services.providers.weather import WeatherAdapter

logger = get_logger(__name__)


@dataclass
class WeatherReport:
    """Weather and air quality for one location; either half may be missing."""
    weather: Optional[WeatherSnapshot] = None
    aqi: Optional[AirQuality] = None
    weather_error: Optional[ProviderError] = None
    aqi_error: Optional[ProviderError] = None


@dataclass
class ShippingReport:
    """Sorted shipping offers for a route, or the reason there are none."""
    query: ShippingQuery
    origin_label: str = ""
    destination_label: str = ""
    offers: List[ShippingOffer] = field(default_factory=list)
    error: Optional[ProviderError] = None


def _settle(outcome: Any, provider: str) -> ProviderResult:
    """Turn an exception that escaped an adapter into an unavailable result."""
    if isinstance(outcome, ProviderResult):
        return outcome
    if isinstance(outcome, Exception):
        logger.error(
            "provider_adapter_crashed",
            provider=provider,
            error=str(outcome),
            error_type=type(outcome).__name__,
            exc_info=outcome,
        )
        return ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, provider)
    # CancelledError and friends are not ours to swallow
    raise outcome


def combine_weather(
    weather_result: ProviderResult[WeatherSnapshot],
    aqi_result: ProviderResult[AirQuality],
) -> WeatherReport:
    return WeatherReport(
        weather=weather_result.data if weather_result.ok else None,
        aqi=aqi_result.data if aqi_result.ok else None,
        weather_error=weather_result.error,
        aqi_error=aqi_result.error,
    )


async def aggregate_weather(
    weather_adapter: WeatherAdapter,
    aqi_adapter: AirQualityAdapter,
    location: Optional[Location],
) -> WeatherReport:
    """
    Fetch weather and air quality concurrently.

    Neither call waits on nor fails the other; each adapter applies its own
    timeout.
    """
    weather_outcome, aqi_outcome = await asyncio.gather(
        weather_adapter.fetch(location),
        aqi_adapter.fetch(location),
        return_exceptions=True,
    )
    report = combine_weather(
        _settle(weather_outcome, "weather"),
        _settle(aqi_outcome, "air_quality"),
    )
    logger.info(
        "weather_report_aggregated",
        weather_available=report.weather is not None,
        aqi_available=report.aqi is not None,
    )
    return report


async def aggregate_places(
    adapter: PlacesAdapter,
    location: Optional[Location],
    intent: Intent,
) -> ProviderResult[List[PlaceEntry]]:
    return await adapter.fetch(location, intent)


def aggregate_shipping(query: ShippingQuery, result: ProviderResult[ShippingQuote]) -> ShippingReport:
    """
    Flatten all courier offers and sort them by ascending cost.

    A successful call without any offer is reported as an empty result,
    distinct from the provider being unavailable.
    """
    if not result.ok:
        return ShippingReport(query=query, error=result.error)

    quote = result.data
    offers = [offer for courier in quote.couriers for offer in courier.offers]
    offers.sort(key=lambda offer: offer.cost_value)

    report = ShippingReport(
        query=query,
        origin_label=quote.origin_label,
        destination_label=quote.destination_label,
        offers=offers,
    )
    if not offers:
        report.error = ProviderError(
            kind=FailureKind.EMPTY_RESULT,
            provider="shipping_cost",
            message=(
                f"Maaf, tidak ditemukan layanan kurir untuk rute "
                f"{quote.origin_label} ke {quote.destination_label}."
            ),
        )
    return report
