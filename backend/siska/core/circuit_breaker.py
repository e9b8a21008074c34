"""
Circuit breaker for upstream data providers.

Each provider adapter owns one breaker. When a provider keeps failing, the
breaker opens and further calls are rejected immediately, so requests degrade
to a "provider unavailable" answer instead of waiting on a dead upstream.

Defaults:
- Failure threshold: 50% error rate over 60 seconds (at least 6 calls)
- Open duration: 30 seconds
- Half-open: a single probe call decides whether to close or re-open

A rejected call is never retried by the breaker.
"""
import time
from collections import deque
from enum import Enum
from threading import Lock
from typing import Any, Awaitable, Callable, Deque, Optional, Tuple

from siska.core.logging import get_logger
from siska.core.metrics import set_circuit_open

logger = get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, bypass provider
    HALF_OPEN = "half_open"  # One probe allowed


class CircuitBreakerOpenError(Exception):
    """Raised when the breaker rejects a call without executing it."""

    def __init__(self, name: str, state: CircuitState):
        super().__init__(f"Circuit breaker {name} is {state.value.upper()}")
        self.name = name
        self.state = state


class CircuitBreaker:
    """
    Sliding-window circuit breaker for async provider calls.

    Args:
        name: Provider name (used in logs and metrics)
        failure_threshold: Error rate in [0, 1] that opens the circuit
        time_window_seconds: Window over which the error rate is computed
        open_duration_seconds: How long the circuit stays open before probing
        min_requests_for_threshold: Minimum calls in the window before opening
        clock: Time source, injectable for tests
    """

    def __init__(
        self,
        name: str,
        failure_threshold: float = 0.5,
        time_window_seconds: int = 60,
        open_duration_seconds: int = 30,
        min_requests_for_threshold: int = 6,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.time_window_seconds = time_window_seconds
        self.open_duration_seconds = open_duration_seconds
        self.min_requests_for_threshold = min_requests_for_threshold
        self._clock = clock

        self._state = CircuitState.CLOSED
        self._lock = Lock()
        self._history: Deque[Tuple[float, bool]] = deque()  # (timestamp, success)
        self._opened_at: Optional[float] = None
        self._probe_in_flight = False

    @property
    def state(self) -> CircuitState:
        with self._lock:
            self._refresh(self._clock())
            return self._state

    def _refresh(self, now: float) -> None:
        """Drop expired history and move OPEN -> HALF_OPEN after the cool-down."""
        cutoff = now - self.time_window_seconds
        while self._history and self._history[0][0] < cutoff:
            self._history.popleft()

        if self._state == CircuitState.OPEN and self._opened_at is not None:
            if now - self._opened_at >= self.open_duration_seconds:
                self._state = CircuitState.HALF_OPEN
                self._probe_in_flight = False
                logger.info("circuit_breaker_half_open", circuit_breaker=self.name)

    def _open(self, now: float, **log_fields: Any) -> None:
        self._state = CircuitState.OPEN
        self._opened_at = now
        self._history.clear()
        set_circuit_open(self.name, True)
        logger.warning("circuit_breaker_opened", circuit_breaker=self.name, **log_fields)

    def _acquire(self) -> None:
        with self._lock:
            self._refresh(self._clock())
            if self._state == CircuitState.OPEN:
                raise CircuitBreakerOpenError(self.name, self._state)
            if self._state == CircuitState.HALF_OPEN:
                if self._probe_in_flight:
                    raise CircuitBreakerOpenError(self.name, self._state)
                self._probe_in_flight = True

    def _record(self, success: bool) -> None:
        now = self._clock()
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                self._probe_in_flight = False
                if success:
                    self._state = CircuitState.CLOSED
                    self._opened_at = None
                    set_circuit_open(self.name, False)
                    logger.info("circuit_breaker_closed", circuit_breaker=self.name)
                else:
                    self._open(now, reason="probe_failed")
                return

            self._history.append((now, success))
            total = len(self._history)
            if total < self.min_requests_for_threshold:
                return
            failures = sum(1 for _, ok in self._history if not ok)
            error_rate = failures / total
            if error_rate >= self.failure_threshold:
                self._open(now, error_rate=error_rate, failures=failures, total=total)

    async def call_async(self, func: Callable[..., Awaitable[Any]], *args, **kwargs) -> Any:
        """
        Execute an async function with circuit breaker protection.

        Raises:
            CircuitBreakerOpenError: if the circuit rejects the call
        """
        self._acquire()
        try:
            result = await func(*args, **kwargs)
        except Exception:
            self._record(False)
            raise
        self._record(True)
        return result

    def snapshot(self) -> dict:
        """Current state for the health endpoint."""
        with self._lock:
            self._refresh(self._clock())
            failures = sum(1 for _, ok in self._history if not ok)
            return {
                "name": self.name,
                "state": self._state.value,
                "recent_requests": len(self._history),
                "recent_failures": failures,
                "opened_at": self._opened_at,
            }
