"""
Fault injection for the backend simulator.

Every data endpoint sleeps for a random latency and then fails with a
per-endpoint probability, so the dashboard's retry, rollback and reorder
reconciliation paths are exercised against realistic misbehaviour.
"""

import asyncio
import logging
import random
from collections import Counter
from typing import Optional

from core.config import Settings
from core.middleware.error_handling import SimulatedFault

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "default"

FAILURE_MESSAGES = {
    "jobs.reorder": "Reorder operation failed - please retry",
}


class FaultInjector:
    """
    Randomized latency and failure source.

    Args:
        min_latency_ms: Lower bound of the uniform latency
        max_latency_ms: Upper bound of the uniform latency
        error_rates: Failure probability per endpoint key; ``"default"``
            applies to endpoints without their own entry
        seed: Seed for reproducible runs
    """

    def __init__(
        self,
        min_latency_ms: int = 0,
        max_latency_ms: int = 0,
        error_rates: Optional[dict[str, float]] = None,
        seed: Optional[int] = None,
    ):
        self.min_latency_ms = min_latency_ms
        self.max_latency_ms = max(max_latency_ms, min_latency_ms)
        self.error_rates = {DEFAULT_ENDPOINT: 0.0, **(error_rates or {})}
        self._random = random.Random(seed)
        self._forced: Counter[str] = Counter()

    @classmethod
    def from_settings(cls, settings: Settings) -> "FaultInjector":
        return cls(
            min_latency_ms=settings.simulator_min_latency_ms,
            max_latency_ms=settings.simulator_max_latency_ms,
            error_rates={
                DEFAULT_ENDPOINT: settings.simulator_error_rate,
                "jobs.create": settings.simulator_job_create_error_rate,
                "jobs.reorder": settings.simulator_reorder_error_rate,
            },
            seed=settings.simulator_random_seed,
        )

    def fail_next(self, endpoint: str, times: int = 1) -> None:
        """Force the next ``times`` calls to ``endpoint`` to fail."""
        self._forced[endpoint] += times

    def error_rate(self, endpoint: str) -> float:
        return self.error_rates.get(endpoint, self.error_rates[DEFAULT_ENDPOINT])

    def latency_seconds(self) -> float:
        if self.max_latency_ms <= 0:
            return 0.0
        return self._random.uniform(self.min_latency_ms, self.max_latency_ms) / 1000

    def should_fail(self, endpoint: str) -> bool:
        if self._forced[endpoint] > 0:
            self._forced[endpoint] -= 1
            return True
        rate = self.error_rate(endpoint)
        return rate > 0 and self._random.random() < rate

    async def simulate(self, endpoint: str) -> None:
        """
        Delay, then maybe fail.

        Raises:
            SimulatedFault: When this call was chosen to fail
        """
        latency = self.latency_seconds()
        if latency:
            await asyncio.sleep(latency)

        if self.should_fail(endpoint):
            message = FAILURE_MESSAGES.get(endpoint, "Internal server error")
            raise SimulatedFault(message, endpoint=endpoint)
