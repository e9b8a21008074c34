"""
Shared fixtures.

Provider HTTP is served by httpx.MockTransport; no test performs a real
network call.
"""
from typing import Callable, List

import httpx
import pytest

from siska.core.config import Settings
from siska.services.providers.base import ProviderClient


@pytest.fixture
def settings() -> Settings:
    """Settings with every credential present."""
    return Settings(
        foursquare_key="fsq-test",
        openweather_key="ow-test",
        aqi_token="aqi-test",
        rajaongkir_key="ro-test",
        frontend_url="https://siska.example",
        provider_timeout_seconds=2.0,
    )


@pytest.fixture
def bare_settings() -> Settings:
    """Settings without any credential."""
    return Settings()


@pytest.fixture
def mock_client() -> Callable[..., ProviderClient]:
    """
    Build a ProviderClient whose HTTP traffic goes to `handler`.

    The returned client exposes `.requests`, the list of requests it sent.
    """

    def _factory(name: str, handler: Callable[[httpx.Request], httpx.Response]) -> ProviderClient:
        sent: List[httpx.Request] = []

        def _recording_handler(request: httpx.Request) -> httpx.Response:
            sent.append(request)
            return handler(request)

        client = ProviderClient(name, timeout_seconds=2.0, transport=httpx.MockTransport(_recording_handler))
        client.requests = sent
        return client

    return _factory
