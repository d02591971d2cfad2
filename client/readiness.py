"""
Readiness gate for the backend's cold-start window.

The backend may answer with empty or malformed payloads until its storage is
seeded. Readers wait on the gate before their first fetch; the first
well-formed response (or a timeout) opens it for good.
"""

import asyncio
import logging

logger = logging.getLogger(__name__)


class ReadinessGate:
    """Process-local "is the backend serving real data yet" flag."""

    def __init__(self, ready: bool = False):
        self._event = asyncio.Event()
        if ready:
            self._event.set()

    @property
    def is_ready(self) -> bool:
        return self._event.is_set()

    def set_ready(self, ready: bool = True) -> None:
        """Open or close the gate. Only transitions are logged."""
        if ready == self.is_ready:
            return
        if ready:
            self._event.set()
            logger.info("Backend marked ready")
        else:
            self._event.clear()
            logger.info("Backend marked not ready")

    async def wait_until_ready(self, timeout: float = 5.0) -> bool:
        """
        Suspend until the gate opens or ``timeout`` seconds elapse.

        On timeout the gate is forced open so callers proceed and rely on the
        retry orchestrator instead. Always returns True.
        """
        if self.is_ready:
            return True

        try:
            await asyncio.wait_for(self._event.wait(), timeout=max(timeout, 0))
        except asyncio.TimeoutError:
            logger.warning(
                f"Backend not ready after {timeout:.2f}s, proceeding anyway"
            )
            self.set_ready(True)
        return True
