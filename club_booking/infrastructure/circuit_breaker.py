"""
Circuit Breaker configuration for external service calls.

The payment gateway is the only remote dependency invoked on the request path;
its breaker prevents a failing gateway from piling up held resources behind
slow timeouts.

Circuit Breaker Pattern:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many failures, requests fail immediately
- HALF_OPEN: Testing if service recovered, limited requests allowed
"""

import logging

from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

logger = logging.getLogger(__name__)


payment_gateway_breaker = CircuitBreaker(
    fail_max=5,  # Open circuit after 5 consecutive failures
    reset_timeout=60,  # Wait 60 seconds before attempting recovery
    name="payment_gateway_circuit_breaker",
)


def log_circuit_state_change(breaker_name: str, old_state: str, new_state: str):
    """Log circuit breaker state changes for monitoring and alerting."""
    logger.warning(
        "Circuit breaker state changed",
        extra={
            "breaker_name": breaker_name,
            "old_state": old_state,
            "new_state": new_state,
        }
    )


class StateChangeLogger(CircuitBreakerListener):
    """Listener for circuit breaker state changes."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        log_circuit_state_change(
            self.name,
            old_state.name if old_state else "none",
            new_state.name,
        )


payment_gateway_breaker.add_listener(StateChangeLogger("payment_gateway"))


__all__ = [
    "payment_gateway_breaker",
    "CircuitBreakerError",
]
