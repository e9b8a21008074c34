"""
Unit tests for the per-intent aggregators.

Tests verify:
- Weather and air quality run concurrently and fail independently
- An adapter crash is settled into an unavailable result
- Shipping offers are flattened and sorted by ascending cost
- A successful call without offers becomes an empty result
"""
import asyncio

import pytest

from siska.models.domain import (
    AirQuality,
    AirQualityLevel,
    CourierQuote,
    ShippingOffer,
    ShippingQuery,
    ShippingQuote,
    WeatherSnapshot,
)
from siska.models.requests import Intent, Location
from siska.services.chat.aggregation import (
    aggregate_places,
    aggregate_shipping,
    aggregate_weather,
    combine_weather,
)
from siska.services.providers.base import FailureKind, ProviderResult

LOCATION = Location(lat=-6.2, lon=106.8)

SNAPSHOT = WeatherSnapshot(
    city_label="Jakarta",
    temp_celsius=31,
    condition="berawan",
    humidity_pct=70,
    wind_speed=2.5,
)
AQI = AirQuality(index=80, level=AirQualityLevel.SEDANG)


class StubAdapter:
    """Adapter returning a canned outcome after an optional delay."""

    def __init__(self, outcome, delay=0.0):
        self.outcome = outcome
        self.delay = delay
        self.calls = []

    async def fetch(self, *args):
        self.calls.append(args)
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


def offer(code, service, cost):
    return ShippingOffer(courier_code=code, service_name=service, cost_value=cost, etd_label="2-3")


class TestWeatherAggregation:

    @pytest.mark.asyncio
    async def test_both_succeed(self):
        report = await aggregate_weather(
            StubAdapter(ProviderResult.success(SNAPSHOT)),
            StubAdapter(ProviderResult.success(AQI)),
            LOCATION,
        )

        assert report.weather == SNAPSHOT
        assert report.aqi == AQI
        assert report.weather_error is None
        assert report.aqi_error is None

    @pytest.mark.asyncio
    async def test_weather_failure_keeps_aqi(self):
        report = await aggregate_weather(
            StubAdapter(ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, "weather")),
            StubAdapter(ProviderResult.success(AQI)),
            LOCATION,
        )

        assert report.weather is None
        assert report.weather_error.kind == FailureKind.PROVIDER_UNAVAILABLE
        assert report.aqi == AQI

    @pytest.mark.asyncio
    async def test_adapter_crash_is_settled(self):
        report = await aggregate_weather(
            StubAdapter(ProviderResult.success(SNAPSHOT)),
            StubAdapter(RuntimeError("boom")),
            LOCATION,
        )

        assert report.weather == SNAPSHOT
        assert report.aqi is None
        assert report.aqi_error.kind == FailureKind.PROVIDER_UNAVAILABLE
        assert report.aqi_error.provider == "air_quality"

    @pytest.mark.asyncio
    async def test_calls_run_concurrently(self):
        """Two 0.2s calls finish well under their 0.4s sequential sum."""
        loop = asyncio.get_running_loop()
        start = loop.time()

        await aggregate_weather(
            StubAdapter(ProviderResult.success(SNAPSHOT), delay=0.2),
            StubAdapter(ProviderResult.success(AQI), delay=0.2),
            LOCATION,
        )

        assert loop.time() - start < 0.35

    def test_combine_keeps_both_errors(self):
        report = combine_weather(
            ProviderResult.failure(FailureKind.INPUT_MISSING, "weather"),
            ProviderResult.failure(FailureKind.INPUT_MISSING, "air_quality"),
        )

        assert report.weather is None and report.aqi is None
        assert report.weather_error.kind == FailureKind.INPUT_MISSING
        assert report.aqi_error.kind == FailureKind.INPUT_MISSING


@pytest.mark.asyncio
async def test_aggregate_places_passes_through():
    result = ProviderResult.success([])
    adapter = StubAdapter(result)

    assert await aggregate_places(adapter, LOCATION, Intent.MASJID) is result
    assert adapter.calls == [(LOCATION, Intent.MASJID)]


class TestShippingAggregation:

    def test_offers_sorted_by_cost(self):
        quote = ShippingQuote(
            origin_label="Jakarta",
            destination_label="Surabaya",
            weight_grams=1000,
            couriers=[
                CourierQuote(code="jne", offers=[offer("jne", "REG", 20000)]),
                CourierQuote(code="tiki", offers=[offer("tiki", "ECO", 9000)]),
                CourierQuote(code="sicepat", offers=[offer("sicepat", "BEST", 15000)]),
            ],
        )

        report = aggregate_shipping(ShippingQuery(), ProviderResult.success(quote))

        assert report.error is None
        assert [o.cost_value for o in report.offers] == [9000, 15000, 20000]
        assert report.origin_label == "Jakarta"
        assert report.destination_label == "Surabaya"

    def test_no_offers_is_empty_result(self):
        quote = ShippingQuote(origin_label="Bandung", destination_label="Medan", weight_grams=1000)

        report = aggregate_shipping(ShippingQuery(), ProviderResult.success(quote))

        assert report.offers == []
        assert report.error.kind == FailureKind.EMPTY_RESULT
        assert report.error.message == "Maaf, tidak ditemukan layanan kurir untuk rute Bandung ke Medan."

    def test_provider_failure_is_carried(self):
        failed = ProviderResult.failure(FailureKind.PROVIDER_UNAVAILABLE, "shipping_cost", "API RajaOngkir error: x")

        report = aggregate_shipping(ShippingQuery(), failed)

        assert report.error.message == "API RajaOngkir error: x"
        assert report.offers == []
