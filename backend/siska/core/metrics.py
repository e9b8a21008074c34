"""
Prometheus metrics collection module.

Metrics Categories:
- RED Metrics: Rate, Errors, Duration of the HTTP surface
- Chat Metrics: dispatched intents and their terminal status
- Provider Metrics: upstream call outcomes, latency and circuit state
- Resource Metrics: CPU, memory

All metrics follow Prometheus naming conventions:
- Counters: _total suffix
- Histograms: _seconds suffix for duration
- Gauges: No special suffix
"""
import psutil
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    generate_latest,
    REGISTRY,
    CONTENT_TYPE_LATEST,
)

from siska.core.logging import get_logger

logger = get_logger(__name__)

registry = REGISTRY

# ============================================================================
# RED METRICS - Rate, Errors, Duration
# ============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status"],
    registry=registry,
)

http_errors_total = Counter(
    "http_errors_total",
    "Total number of HTTP errors",
    ["method", "endpoint", "status_code"],
    registry=registry,
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency in seconds",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0],
    registry=registry,
)

# ============================================================================
# CHAT METRICS
# ============================================================================

chat_requests_total = Counter(
    "chat_requests_total",
    "Total number of dispatched chat requests",
    ["intent", "status"],
    registry=registry,
)

# ============================================================================
# PROVIDER METRICS
# ============================================================================

provider_requests_total = Counter(
    "provider_requests_total",
    "Total number of upstream provider calls by outcome",
    ["provider", "outcome"],  # outcome: success, http_error, timeout, transport_error, circuit_open, invalid_payload
    registry=registry,
)

provider_request_duration_seconds = Histogram(
    "provider_request_duration_seconds",
    "Upstream provider call latency in seconds",
    ["provider"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 16.0],
    registry=registry,
)

provider_circuit_open = Gauge(
    "provider_circuit_open",
    "Whether the provider circuit breaker is open (1 = open, 0 = closed)",
    ["provider"],
    registry=registry,
)

# ============================================================================
# RESOURCE METRICS
# ============================================================================

system_cpu_usage_percent = Gauge(
    "system_cpu_usage_percent",
    "System CPU usage percentage",
    registry=registry,
)

system_memory_usage_bytes = Gauge(
    "system_memory_usage_bytes",
    "System memory usage in bytes",
    registry=registry,
)


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def normalize_endpoint(path: str) -> str:
    """
    Normalize endpoint path for metrics.

    Strips query strings and trailing slashes so `/chat` and `/chat/` share a label.

    Examples:
        /chat?x=1 -> /chat
        /health/ -> /health
        / -> /
    """
    if "?" in path:
        path = path.split("?")[0]
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")
    return path


def record_http_request(
    method: str,
    endpoint: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """
    Record HTTP request metrics (RED metrics).

    Args:
        method: HTTP method (GET, POST, etc.)
        endpoint: Request path
        status_code: HTTP status code
        duration_seconds: Request duration in seconds
    """
    normalized_endpoint = normalize_endpoint(endpoint)

    http_requests_total.labels(
        method=method,
        endpoint=normalized_endpoint,
        status=str(status_code),
    ).inc()

    if status_code >= 400:
        http_errors_total.labels(
            method=method,
            endpoint=normalized_endpoint,
            status_code=str(status_code),
        ).inc()

    http_request_duration_seconds.labels(
        method=method,
        endpoint=normalized_endpoint,
    ).observe(duration_seconds)


def record_chat_request(intent: str, status_code: int) -> None:
    """Record a dispatched chat request and its terminal status."""
    chat_requests_total.labels(intent=intent, status=str(status_code)).inc()


def record_provider_call(provider: str, outcome: str, duration_seconds: float) -> None:
    """
    Record one upstream provider call.

    Args:
        provider: Provider name (prayer_times, weather, air_quality, places, shipping_cost)
        outcome: success | http_error | timeout | transport_error | circuit_open | invalid_payload
        duration_seconds: Call duration (0 for calls rejected by the circuit breaker)
    """
    provider_requests_total.labels(provider=provider, outcome=outcome).inc()
    if outcome != "circuit_open":
        provider_request_duration_seconds.labels(provider=provider).observe(duration_seconds)


def set_circuit_open(provider: str, is_open: bool) -> None:
    provider_circuit_open.labels(provider=provider).set(1 if is_open else 0)


def update_resource_metrics() -> None:
    """
    Update system resource metrics (CPU, memory).

    Called on-demand when metrics are scraped.
    """
    try:
        system_cpu_usage_percent.set(psutil.cpu_percent(interval=None))
        system_memory_usage_bytes.set(psutil.virtual_memory().used)
    except Exception as e:
        logger.warning(
            "metrics_resource_update_failed",
            error=str(e),
            error_type=type(e).__name__,
        )


def get_metrics() -> bytes:
    """
    Get Prometheus metrics in text format.
    """
    update_resource_metrics()
    return generate_latest(registry)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
