"""
Bounded retry for reads against the hiring backend.

Calls return either a typed ``FetchResult`` (``Ready`` / ``NotReady``) or a
raw payload. Raw payloads are classified by shape: a non-empty list, or an
envelope carrying a list ``data`` field, counts as served; anything else
(``[]``, ``None``, an error dict) means the backend is still warming up.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from core.config import settings
from core.errors import BackendError
from client.readiness import ReadinessGate

logger = logging.getLogger(__name__)

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]


@dataclass(frozen=True)
class Ready(Generic[T]):
    """Backend served a well-formed payload."""

    value: T


@dataclass(frozen=True)
class NotReady(Generic[T]):
    """Backend answered, but not with usable data yet."""

    reason: str = "not ready"
    fallback: Optional[T] = None


FetchResult = Union[Ready[T], NotReady[T]]


def classify(result: Any) -> FetchResult:
    """
    Turn a raw call result into a ``FetchResult``.

    Typed results pass through untouched.
    """
    if isinstance(result, (Ready, NotReady)):
        return result

    if isinstance(result, list):
        if result:
            return Ready(result)
        return NotReady("empty list", fallback=result)

    if isinstance(result, dict):
        data = result.get("data")
    else:
        data = getattr(result, "data", None)
    if isinstance(data, list):
        return Ready(result)

    return NotReady("unrecognized payload", fallback=result)


class RetryOrchestrator:
    """
    Fixed-delay retry loop shared by every read path.

    Args:
        gate: Readiness gate promoted on the first successful attempt
        max_attempts: Default attempt budget per ``run``
        delay: Seconds to wait between attempts
        sleep: Awaitable sleep, swappable in tests
    """

    def __init__(
        self,
        gate: ReadinessGate,
        max_attempts: Optional[int] = None,
        delay: Optional[float] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.gate = gate
        self.max_attempts = (
            settings.retry_max_attempts if max_attempts is None else max_attempts
        )
        self.delay = settings.retry_delay_seconds if delay is None else delay
        self._sleep = sleep

    async def run(
        self,
        call: Callable[[], Awaitable[Any]],
        max_attempts: Optional[int] = None,
    ) -> Any:
        """
        Invoke ``call`` until it yields usable data or the budget runs out.
        A budget below one still makes a single attempt.

        Returns:
            The ready value, or on exhaustion the last fallback (typed calls)
            or the last raw result (untyped calls)

        Raises:
            BackendError: Non-retryable failures immediately; otherwise the
                last error once every attempt has raised
        """
        if max_attempts is None:
            max_attempts = self.max_attempts
        attempts = max(1, max_attempts)
        last_error: Optional[BaseException] = None
        last_result: Optional[NotReady] = None

        for attempt in range(1, attempts + 1):
            try:
                outcome = classify(await call())
            except BackendError as exc:
                if not exc.retryable:
                    raise
                last_error, last_result = exc, None
                logger.warning(f"Attempt {attempt}/{attempts} failed: {exc.message}")
            except Exception as exc:
                last_error, last_result = exc, None
                logger.warning(f"Attempt {attempt}/{attempts} failed: {exc}")
            else:
                if isinstance(outcome, Ready):
                    self.gate.set_ready(True)
                    return outcome.value
                last_error, last_result = None, outcome
                logger.info(f"Attempt {attempt}/{attempts} not ready: {outcome.reason}")

            if attempt < attempts:
                await self._sleep(self.delay)

        if last_error is not None:
            logger.error(f"Giving up after {attempts} attempts")
            raise last_error

        logger.warning(f"Backend still not ready after {attempts} attempts")
        return last_result.fallback if last_result is not None else None


async def retry_api_call(
    call: Callable[[], Awaitable[Any]],
    max_attempts: Optional[int] = None,
    gate: Optional[ReadinessGate] = None,
    delay: Optional[float] = None,
) -> Any:
    """Function form of ``RetryOrchestrator.run`` for one-off reads."""
    orchestrator = RetryOrchestrator(gate or ReadinessGate(), max_attempts, delay)
    return await orchestrator.run(call)
