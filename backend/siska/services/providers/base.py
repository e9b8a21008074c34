"""
Shared plumbing for upstream provider adapters.

Adapters never raise through to their callers for expected failures. Every
fetch returns a ProviderResult holding either normalized data or a typed
ProviderError, so the aggregators can combine partial outcomes and the
renderers can pick the right apology.

Each outbound call is:
- bounded by the configured timeout (httpx.AsyncClient timeout)
- protected by a per-provider circuit breaker
- traced (span provider.<name>) and measured (provider_* metrics)

Calls are never retried.
"""
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

import httpx

from siska.core.circuit_breaker import CircuitBreaker, CircuitBreakerOpenError
from siska.core.logging import get_logger
from siska.core.metrics import record_provider_call
from siska.core.tracing import StatusCode, get_tracer, set_span_attribute, set_span_status

logger = get_logger(__name__)

T = TypeVar("T")


class FailureKind(str, Enum):
    """Recoverable failure categories surfaced to the renderers."""
    INPUT_MISSING = "input_missing"
    CITY_UNRESOLVED = "city_unresolved"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    EMPTY_RESULT = "empty_result"


@dataclass(frozen=True)
class ProviderError:
    """
    Typed failure of one adapter.

    `message` is a user-facing text when the adapter has something specific to
    say (e.g. the provider's own error description); renderers fall back to
    their fixed apology when it is empty.
    """
    kind: FailureKind
    provider: str
    message: str = ""


@dataclass(frozen=True)
class ProviderResult(Generic[T]):
    """Either `data` or `error` is set, never both."""
    data: Optional[T] = None
    error: Optional[ProviderError] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.data is not None

    @classmethod
    def success(cls, data: T) -> "ProviderResult[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, kind: FailureKind, provider: str, message: str = "") -> "ProviderResult[T]":
        return cls(error=ProviderError(kind=kind, provider=provider, message=message))


class ProviderCallError(Exception):
    """
    An outbound call did not produce a usable 2xx response.

    Timeouts, transport errors and 5xx answers are raised inside the circuit
    breaker and count as failures. Other non-2xx answers are raised after it
    and never change the circuit state.
    """

    def __init__(self, provider: str, outcome: str, message: str, response: Optional[httpx.Response] = None):
        super().__init__(message)
        self.provider = provider
        self.outcome = outcome
        self.response = response

    def response_json(self) -> Dict[str, Any]:
        """Best-effort JSON body of the failed response (empty dict if none)."""
        if self.response is None:
            return {}
        try:
            body = self.response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}


class ProviderClient:
    """
    Async HTTP client for one upstream provider.

    Args:
        name: Provider name used in logs, metrics and spans
        timeout_seconds: Timeout applied to each call
        transport: Optional httpx transport (tests use httpx.MockTransport)
        circuit_breaker: Optional breaker; a default one is created per client
    """

    def __init__(
        self,
        name: str,
        timeout_seconds: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        self.name = name
        self.timeout_seconds = timeout_seconds
        self.transport = transport
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name=name)

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Low-level request helper (isolated for the circuit breaker)."""
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport) as client:
            try:
                response = await client.request(method, url, **kwargs)
            except httpx.TimeoutException as exc:
                raise ProviderCallError(self.name, "timeout", f"timeout: {exc}") from exc
            except httpx.HTTPError as exc:
                raise ProviderCallError(self.name, "transport_error", str(exc) or type(exc).__name__) from exc

        # Only 5xx counts against the breaker; a 4xx is the provider rejecting
        # this one request and is raised by request() after the breaker.
        if response.is_server_error:
            raise self._http_error(response)
        return response

    def _http_error(self, response: httpx.Response) -> ProviderCallError:
        return ProviderCallError(
            self.name,
            "http_error",
            f"HTTP {response.status_code} {response.reason_phrase}",
            response=response,
        )

    async def request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        """
        Perform one protected call and return the decoded JSON body.

        Raises:
            ProviderCallError: for circuit-open, timeout, transport, non-2xx and
                non-JSON responses. Anything else is a bug and propagates.
        """
        start = time.time()
        outcome = "success"
        with get_tracer().start_as_current_span(f"provider.{self.name}"):
            set_span_attribute("provider.name", self.name)
            try:
                response = await self.circuit_breaker.call_async(self._send, method, url, **kwargs)
                if not response.is_success:
                    raise self._http_error(response)
                try:
                    body = response.json()
                except ValueError as exc:
                    outcome = "invalid_payload"
                    raise ProviderCallError(self.name, outcome, "response is not JSON", response=response) from exc
                return body
            except CircuitBreakerOpenError as exc:
                outcome = "circuit_open"
                logger.warning("provider_circuit_open", provider=self.name)
                raise ProviderCallError(self.name, outcome, str(exc)) from exc
            except ProviderCallError as exc:
                outcome = exc.outcome
                set_span_status(StatusCode.ERROR, str(exc))
                logger.warning(
                    "provider_request_failed",
                    provider=self.name,
                    outcome=exc.outcome,
                    error=str(exc),
                    status_code=exc.response.status_code if exc.response is not None else None,
                )
                raise
            finally:
                set_span_attribute("provider.outcome", outcome)
                duration = 0.0 if outcome == "circuit_open" else time.time() - start
                record_provider_call(self.name, outcome, duration)
