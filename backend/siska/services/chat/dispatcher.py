"""
Intent dispatcher.

Routes a classified chat request through its extractor/resolver, provider
adapters, aggregator and renderer, and always produces a DispatchOutcome:

- 200 with rendered text for every known intent (including recoverable
  failures such as missing location or an unknown city)
- 400 with a fixed text for an unrecognized intent
- 500 with a generic text when anything unexpected escapes the pipeline

Exceptions never leave dispatch().
"""
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from siska.core.config import Settings, get_settings
from siska.core.logging import bind_request_context, get_logger
from siska.core.metrics import record_chat_request
from siska.core.tracing import get_tracer, record_exception, set_span_attribute
from siska.models.requests import ChatRequest, Intent
from siska.services.chat.aggregation import (
    ShippingReport,
    aggregate_places,
    aggregate_shipping,
    aggregate_weather,
)
from siska.services.chat.rendering import (
    INTERNAL_ERROR_TEXT,
    UNKNOWN_INTENT_TEXT,
    render_places,
    render_prayer,
    render_shipping,
    render_weather,
)
from siska.services.providers.air_quality import AirQualityAdapter
from siska.services.providers.base import FailureKind, ProviderError
from siska.services.providers.places import PlacesAdapter
from siska.services.providers.prayer import PrayerTimesAdapter
from siska.services.providers.shipping_cost import ShippingCostAdapter
from siska.services.providers.weather import WeatherAdapter
from siska.services.shipping.cities import resolve_city, unresolved_city_message
from siska.services.shipping.extractor import parse_shipping_query

logger = get_logger(__name__)


@dataclass(frozen=True)
class DispatchOutcome:
    """Terminal state of one chat request."""
    status_code: int
    response_text: str
    intent: str


class IntentDispatcher:
    """
    Root of the chat pipeline.

    Adapters are injectable so tests can substitute stubs; by default they are
    built from the given settings.
    """

    def __init__(
        self,
        settings: Settings,
        prayer_adapter: Optional[PrayerTimesAdapter] = None,
        weather_adapter: Optional[WeatherAdapter] = None,
        air_quality_adapter: Optional[AirQualityAdapter] = None,
        places_adapter: Optional[PlacesAdapter] = None,
        shipping_adapter: Optional[ShippingCostAdapter] = None,
    ):
        self.settings = settings
        self.prayer_adapter = prayer_adapter or PrayerTimesAdapter(settings)
        self.weather_adapter = weather_adapter or WeatherAdapter(settings)
        self.air_quality_adapter = air_quality_adapter or AirQualityAdapter(settings)
        self.places_adapter = places_adapter or PlacesAdapter(settings)
        self.shipping_adapter = shipping_adapter or ShippingCostAdapter(settings)

        self._handlers: Dict[Intent, Callable[[Intent, ChatRequest], Awaitable[str]]] = {
            Intent.PRAYER: self._handle_prayer,
            Intent.WEATHER: self._handle_weather,
            Intent.KULINER: self._handle_places,
            Intent.WISATA: self._handle_places,
            Intent.MASJID: self._handle_places,
            Intent.ONGKIR: self._handle_shipping,
        }
        missing = set(Intent) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler for intents: {sorted(i.value for i in missing)}")

    def circuit_snapshots(self) -> list:
        """Circuit breaker state of every provider, for the health endpoint."""
        adapters = (
            self.prayer_adapter,
            self.weather_adapter,
            self.air_quality_adapter,
            self.places_adapter,
            self.shipping_adapter,
        )
        return [adapter.client.circuit_breaker.snapshot() for adapter in adapters]

    async def dispatch(self, request: ChatRequest) -> DispatchOutcome:
        raw_intent = request.intent or ""
        bind_request_context(intent=raw_intent)

        with get_tracer().start_as_current_span("chat.dispatch"):
            set_span_attribute("chat.intent", raw_intent)
            intent = Intent.parse(raw_intent)

            if intent is None:
                logger.warning("chat_intent_unrecognized", intent=raw_intent)
                outcome = DispatchOutcome(400, UNKNOWN_INTENT_TEXT, raw_intent)
            else:
                try:
                    text = await self._handlers[intent](intent, request)
                    outcome = DispatchOutcome(200, text, intent.value)
                except Exception as exc:
                    record_exception(exc)
                    logger.error(
                        "chat_dispatch_failed",
                        error=str(exc),
                        error_type=type(exc).__name__,
                        exc_info=True,
                    )
                    outcome = DispatchOutcome(500, INTERNAL_ERROR_TEXT, intent.value)

            set_span_attribute("chat.status_code", outcome.status_code)

        record_chat_request(outcome.intent if intent else "unknown", outcome.status_code)
        logger.info("chat_dispatch_completed", status_code=outcome.status_code)
        return outcome

    async def _handle_prayer(self, intent: Intent, request: ChatRequest) -> str:
        result = await self.prayer_adapter.fetch(request.location)
        return render_prayer(result, request.message or "")

    async def _handle_weather(self, intent: Intent, request: ChatRequest) -> str:
        report = await aggregate_weather(self.weather_adapter, self.air_quality_adapter, request.location)
        return render_weather(report)

    async def _handle_places(self, intent: Intent, request: ChatRequest) -> str:
        result = await aggregate_places(self.places_adapter, request.location, intent)
        return render_places(result, intent)

    async def _handle_shipping(self, intent: Intent, request: ChatRequest) -> str:
        query = parse_shipping_query(request.message or "")
        origin = resolve_city(query.origin)
        destination = resolve_city(query.destination)

        if origin is None or destination is None:
            unknown = query.origin if origin is None else query.destination
            logger.info("shipping_city_unresolved", city=unknown)
            report = ShippingReport(
                query=query,
                error=ProviderError(
                    kind=FailureKind.CITY_UNRESOLVED,
                    provider="city_resolver",
                    message=unresolved_city_message(unknown),
                ),
            )
            return render_shipping(report)

        result = await self.shipping_adapter.fetch(origin, destination, query.weight_grams)
        report = aggregate_shipping(query, result)
        logger.info(
            "shipping_report_aggregated",
            origin=origin.city_id,
            destination=destination.city_id,
            weight_grams=query.weight_grams,
            offers=len(report.offers),
            error_kind=report.error.kind.value if report.error else None,
        )
        return render_shipping(report)


_dispatcher: Optional[IntentDispatcher] = None


def get_dispatcher() -> IntentDispatcher:
    """Global singleton accessor for the dispatcher."""
    global _dispatcher
    if _dispatcher is None:
        _dispatcher = IntentDispatcher(get_settings())
    return _dispatcher
