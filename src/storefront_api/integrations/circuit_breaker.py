"""Circuit breaker for outbound calls to external services.

Stops calling a failing dependency after repeated errors.
States: closed (normal), open (fail fast), half_open (single retry).
"""

import time
from typing import Callable, Optional

from storefront_api.core.logger import setup_logger

logger = setup_logger(__name__)

STATE_CLOSED = "closed"
STATE_OPEN = "open"
STATE_HALF_OPEN = "half_open"


class CircuitBreaker:
    """Counts consecutive failures and opens after a threshold.

    After ``timeout`` seconds in the open state one call is let through
    (half-open); its outcome closes or re-opens the circuit.
    """

    def __init__(
        self,
        name: str,
        threshold: int = 5,
        timeout: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize circuit breaker.

        Args:
            name: Dependency name used in log messages
            threshold: Number of consecutive failures before opening circuit
            timeout: Seconds to wait before retrying in half-open state
            clock: Time source, replaceable in tests
        """
        self.name = name
        self.threshold = threshold
        self.timeout = timeout
        self.failure_count = 0
        self.state = STATE_CLOSED
        self.opened_at: Optional[float] = None
        self._clock = clock

        logger.info(
            f"Circuit breaker '{name}' initialized: threshold={threshold}, timeout={timeout}s"
        )

    def record_success(self) -> None:
        """Record successful call.

        Resets failure count and closes circuit if it was open.
        """
        if self.state != STATE_CLOSED:
            logger.info(
                f"Circuit breaker '{self.name}': recovered, closing circuit "
                f"(was {self.state}, failures={self.failure_count})"
            )

        self.failure_count = 0
        self.state = STATE_CLOSED
        self.opened_at = None

    def record_failure(self) -> None:
        """Record failed call.

        Increments failure count and opens circuit if threshold reached.
        A failure in half-open state re-opens immediately.
        """
        self.failure_count += 1

        logger.warning(
            f"Circuit breaker '{self.name}': failure recorded "
            f"({self.failure_count}/{self.threshold})"
        )

        if self.state == STATE_HALF_OPEN or (
            self.state == STATE_CLOSED and self.failure_count >= self.threshold
        ):
            self.state = STATE_OPEN
            self.opened_at = self._clock()
            logger.error(
                f"Circuit breaker '{self.name}': OPEN after "
                f"{self.failure_count} consecutive failures"
            )

    def allow_request(self) -> bool:
        """Check if a call should be attempted.

        Returns:
            True if the call may go out, False to fail fast
        """
        if self.state == STATE_CLOSED:
            return True

        if self.state == STATE_OPEN:
            if self._clock() - self.opened_at >= self.timeout:
                self.state = STATE_HALF_OPEN
                logger.info(
                    f"Circuit breaker '{self.name}': entering HALF_OPEN state "
                    f"(timeout={self.timeout}s elapsed)"
                )
                return True
            return False

        # half_open - the trial call is already in flight
        return False

    def get_state(self) -> dict:
        """Get current circuit breaker state."""
        return {
            "name": self.name,
            "state": self.state,
            "failure_count": self.failure_count,
            "threshold": self.threshold,
            "opened_at": self.opened_at,
            "timeout": self.timeout,
        }
