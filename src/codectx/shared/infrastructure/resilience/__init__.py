"""
Resilience Patterns for codectx.

Provides the fault-tolerance patterns the engine relies on:
- Timeout (per retrieval sub-step, per provider call)
- Circuit Breaker (remote embedding provider)
"""

from .circuit_breaker import (
    CircuitBreaker,
    CircuitBreakerConfig,
    CircuitBreakerOpen,
    CircuitState,
)
from .timeout import with_timeout_async

__all__ = [
    "with_timeout_async",
    "CircuitState",
    "CircuitBreakerConfig",
    "CircuitBreakerOpen",
    "CircuitBreaker",
]
