"""Circuit Breaker Resilience Pattern."""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from codectx.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class CircuitState(Enum):
    """Circuit breaker states."""
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass
class CircuitBreakerConfig:
    """Configuration for circuit breaker."""
    failure_threshold: int = 5
    success_threshold: int = 1
    timeout_duration: float = 60.0
    # Cancellation of the caller never counts as a failure
    excluded_exceptions: tuple = (asyncio.CancelledError,)


class CircuitBreakerOpen(Exception):
    """Raised when circuit is open."""
    def __init__(self, name: str, retry_after: float):
        self.name = name
        self.retry_after = retry_after
        super().__init__(
            f"Circuit '{name}' is open. Retry after {retry_after:.1f}s"
        )


class CircuitBreaker:
    """
    Guards a remote dependency (the embedding provider).

    After failure_threshold consecutive failures the circuit opens and every
    call short-circuits with CircuitBreakerOpen, letting the caller fall back
    without waiting on the remote side. Once timeout_duration has passed one
    trial call is let through (half-open); success_threshold successes close
    the circuit again, a failure reopens it.

    Examples:
        >>> breaker = CircuitBreaker("embedding_provider")
        >>> async with breaker:
        ...     vectors = await provider.embed_batch_async(texts)
    """
    def __init__(self, name: str, config: Optional[CircuitBreakerConfig] = None):
        self.name = name
        self.config = config or CircuitBreakerConfig()
        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at: Optional[float] = None

    @property
    def state(self) -> CircuitState:
        if self._state == CircuitState.OPEN and self.retry_after() == 0:
            self._transition_to(CircuitState.HALF_OPEN)
        return self._state

    @property
    def allows_calls(self) -> bool:
        """False while open; callers can skip straight to their fallback."""
        return self.state != CircuitState.OPEN

    def retry_after(self) -> float:
        """Seconds until an open circuit lets a trial call through (0 when not open)."""
        if self._state != CircuitState.OPEN or self._opened_at is None:
            return 0.0
        return max(0.0, self.config.timeout_duration - (time.monotonic() - self._opened_at))

    def _transition_to(self, new_state: CircuitState) -> None:
        old_state = self._state
        self._state = new_state
        self._success_count = 0
        if new_state == CircuitState.OPEN:
            self._opened_at = time.monotonic()
        elif new_state == CircuitState.CLOSED:
            self._failure_count = 0
            self._opened_at = None
        logger.info(
            "circuit_state_change",
            circuit=self.name,
            from_state=old_state.value,
            to_state=new_state.value,
            failures=self._failure_count,
        )

    def _record_success(self) -> None:
        if self._state == CircuitState.HALF_OPEN:
            self._success_count += 1
            if self._success_count >= self.config.success_threshold:
                self._transition_to(CircuitState.CLOSED)
        else:
            self._failure_count = 0

    def _record_failure(self, error: BaseException) -> None:
        if isinstance(error, self.config.excluded_exceptions):
            return
        self._failure_count += 1
        logger.debug(
            "circuit_failure_recorded",
            circuit=self.name,
            failures=self._failure_count,
            error_type=type(error).__name__,
        )
        if self._state == CircuitState.HALF_OPEN or self._failure_count >= self.config.failure_threshold:
            self._transition_to(CircuitState.OPEN)

    async def __aenter__(self):
        if not self.allows_calls:
            raise CircuitBreakerOpen(self.name, self.retry_after())
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self._record_success()
        elif exc_val is not None:
            self._record_failure(exc_val)
        # Exceptions always propagate
        return False
