"""
Circuit breaker guarding calls to a single indexer.
"""

import asyncio
import logging
import time
from enum import Enum

from nzb_gateway.exceptions import NzbGatewayError

log = logging.getLogger(__name__)


class CircuitState(Enum):
    """States of the circuit breaker."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Blocking requests
    HALF_OPEN = "half_open"  # Testing if the indexer recovered


class CircuitBreakerError(NzbGatewayError):
    """Raised when a call is attempted while the circuit is open."""


class CircuitBreaker:
    """
    Stops hammering an indexer that keeps failing.

    After `failure_threshold` consecutive failures the circuit opens and calls
    are rejected for `recovery_timeout` seconds. The next call is let through
    as a probe; `success_threshold` successful probes close the circuit again.
    """

    def __init__(
        self,
        name: str,
        failure_threshold: int = 5,
        recovery_timeout: int = 60,
        success_threshold: int = 1,
    ):
        self.name = name
        self.failure_threshold = failure_threshold
        self.recovery_timeout = recovery_timeout
        self.success_threshold = success_threshold

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._success_count = 0
        self._opened_at: float | None = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> CircuitState:
        return self._state

    def _half_open_if_recovered(self) -> None:
        if self._state != CircuitState.OPEN or self._opened_at is None:
            return
        if time.monotonic() - self._opened_at >= self.recovery_timeout:
            log.info(f"Circuit for indexer '{self.name}' is half-open, probing.")
            self._state = CircuitState.HALF_OPEN
            self._success_count = 0

    async def _on_success(self) -> None:
        async with self._lock:
            self._failure_count = 0
            if self._state == CircuitState.HALF_OPEN:
                self._success_count += 1
                if self._success_count >= self.success_threshold:
                    log.info(
                        f"[green]✓ Indexer '{self.name}' recovered, circuit closed."
                        "[/green]"
                    )
                    self._state = CircuitState.CLOSED
                    self._success_count = 0

    async def _on_failure(self) -> None:
        async with self._lock:
            self._failure_count += 1
            if self._state == CircuitState.HALF_OPEN or (
                self._state == CircuitState.CLOSED
                and self._failure_count >= self.failure_threshold
            ):
                log.warning(
                    f"[yellow]Circuit for indexer '{self.name}' opened after "
                    f"{self._failure_count} failure(s); blocking calls for "
                    f"{self.recovery_timeout}s.[/yellow]"
                )
                self._state = CircuitState.OPEN
                self._opened_at = time.monotonic()
                self._failure_count = 0
                self._success_count = 0

    async def __aenter__(self):
        async with self._lock:
            self._half_open_if_recovered()
            if self._state == CircuitState.OPEN:
                raise CircuitBreakerError(
                    f"Indexer '{self.name}' is temporarily disabled after repeated "
                    f"failures. Retrying after {self.recovery_timeout} seconds."
                )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            await self._on_failure()
        else:
            await self._on_success()
        return False
