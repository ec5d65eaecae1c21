"""
Per-provider circuit breaker.

States: CLOSED (normal) -> OPEN (failing, calls rejected) -> HALF_OPEN
(testing recovery) -> CLOSED on a successful probe, or back to OPEN.

Failures are counted over a rolling monitoring window: failures older than
``monitoring_period`` are dropped before the threshold is checked, so a
trickle of sporadic errors never opens the circuit.

Usage:
    breaker = CircuitBreaker("OpenAI")
    response = await breaker.execute(lambda: provider.call_model(...))
"""

import logging
import time
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitState(str, Enum):
    """Circuit breaker state."""

    CLOSED = "CLOSED"
    OPEN = "OPEN"
    HALF_OPEN = "HALF_OPEN"


@dataclass(frozen=True)
class CircuitBreakerSettings:
    """Tuning for a circuit breaker. Durations are in seconds."""

    failure_threshold: int = 3
    recovery_timeout: float = 30.0
    monitoring_period: float = 60.0

    @classmethod
    def from_milliseconds(
        cls,
        failure_threshold: int,
        recovery_timeout_ms: int,
        monitoring_period_ms: int,
    ) -> "CircuitBreakerSettings":
        return cls(
            failure_threshold=failure_threshold,
            recovery_timeout=recovery_timeout_ms / 1000,
            monitoring_period=monitoring_period_ms / 1000,
        )


class CircuitOpenError(Exception):
    """Raised by execute() when the circuit rejects a call."""

    def __init__(self, name: str):
        super().__init__("Circuit breaker is OPEN - service temporarily unavailable")
        self.name = name


class CircuitBreaker:
    """
    Failure-tracking wrapper around a single provider's calls.

    Mutations happen between awaits on the event loop, so no lock is taken.
    """

    def __init__(
        self,
        name: str,
        settings: Optional[CircuitBreakerSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.name = name
        self.settings = settings or CircuitBreakerSettings()
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures: deque[float] = deque()
        self._last_failure_time: Optional[float] = None

    async def execute(self, fn: Callable[[], Awaitable[T]]) -> T:
        """
        Run ``fn`` through the breaker.

        Raises:
            CircuitOpenError: If the circuit is open and the recovery timeout
                has not elapsed. ``fn`` is not called.
            Exception: Whatever ``fn`` raised; the failure is recorded first.
        """
        self.before_call()

        try:
            result = await fn()
        except Exception:
            self.record_failure()
            raise

        self.record_success()
        return result

    def before_call(self) -> None:
        """
        Admit or reject a call about to be made.

        Moves an OPEN circuit to HALF_OPEN once the recovery timeout has
        elapsed. Used directly by callers that cannot wrap their work in a
        single awaitable, such as streams.

        Raises:
            CircuitOpenError: If the circuit is open
        """
        if self._state == CircuitState.OPEN:
            if self._recovery_elapsed():
                self._transition(CircuitState.HALF_OPEN)
            else:
                raise CircuitOpenError(self.name)

    def get_state(self) -> CircuitState:
        return self._state

    def get_failure_count(self) -> int:
        self._prune()
        return len(self._failures)

    @property
    def last_failure_time(self) -> Optional[float]:
        return self._last_failure_time

    def reset(self) -> None:
        """Forget all failures and close the circuit."""
        self._failures.clear()
        self._last_failure_time = None
        self._transition(CircuitState.CLOSED)

    def snapshot(self) -> dict:
        """State summary for health output."""
        return {
            "state": self._state.value,
            "failure_count": self.get_failure_count(),
            "failure_threshold": self.settings.failure_threshold,
        }

    def _recovery_elapsed(self) -> bool:
        if self._last_failure_time is None:
            return True
        return self._clock() - self._last_failure_time >= self.settings.recovery_timeout

    def _prune(self) -> None:
        cutoff = self._clock() - self.settings.monitoring_period
        while self._failures and self._failures[0] < cutoff:
            self._failures.popleft()

    def record_success(self) -> None:
        self._failures.clear()
        if self._state != CircuitState.CLOSED:
            self._transition(CircuitState.CLOSED)

    def record_failure(self) -> None:
        now = self._clock()
        self._last_failure_time = now
        self._failures.append(now)
        self._prune()

        if self._state == CircuitState.HALF_OPEN:
            self._transition(CircuitState.OPEN)
        elif len(self._failures) >= self.settings.failure_threshold:
            self._transition(CircuitState.OPEN)

    def _transition(self, state: CircuitState) -> None:
        if state == self._state:
            return
        logger.warning(
            "Circuit breaker %s: %s -> %s (failures=%d)",
            self.name,
            self._state.value,
            state.value,
            len(self._failures),
        )
        self._state = state
