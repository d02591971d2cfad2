"""
Dashboard session: the sync core as seen by the presentation layer.

Wires one readiness gate, retry orchestrator, overlay store, HTTP client and
the two mutation protocols together. Reads wait for readiness, retry, and are
patched by the overlay; writes go through the controller or the reorder
protocol.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

import httpx

from core.config import Settings, get_settings
from core.errors import TransientNetworkError
from core.models import Candidate, Job, Note, Page, TimelineEntry
from client.controller import OptimisticMutationController
from client.http import BackendClient
from client.ordering import OrderReconciliationProtocol, ReorderOutcome
from client.overlay import OverlayStore
from client.readiness import ReadinessGate
from client.retry import Ready, RetryOrchestrator, Sleep
from client.store import EntityStore
from database.models.overlay import OverlayKind

logger = logging.getLogger(__name__)


class DashboardSession:
    """
    One dashboard's view of the hiring backend.

    Args:
        settings: Configuration; defaults to the process settings
        backend: Prebuilt HTTP client (tests inject one bound to the simulator)
        overlay: Prebuilt overlay store
        transport: httpx transport used when ``backend`` is not given
        sleep: Delay function used between retry attempts
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        backend: Optional[BackendClient] = None,
        overlay: Optional[OverlayStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        sleep: Sleep = asyncio.sleep,
    ):
        self.settings = settings or get_settings()
        self.gate = ReadinessGate()
        self.backend = backend or BackendClient(
            base_url=self.settings.api_base_url,
            timeout=self.settings.request_timeout_seconds,
            transport=transport,
        )
        self.overlay = overlay or OverlayStore(self.settings.overlay_database_path)
        self.retry = RetryOrchestrator(
            self.gate,
            max_attempts=self.settings.retry_max_attempts,
            delay=self.settings.retry_delay_seconds,
            sleep=sleep,
        )

        self.jobs: EntityStore[Job] = EntityStore()
        self.candidates: EntityStore[Candidate] = EntityStore()
        self.controller = OptimisticMutationController(
            self.backend, self.overlay, candidates=self.candidates, jobs=self.jobs
        )
        self.ordering = OrderReconciliationProtocol(
            self.backend,
            self.jobs,
            self.load_jobs,
            current_sort=lambda: self._job_filters.get("sort"),
        )
        self._job_filters: dict[str, Any] = {}

    async def __aenter__(self) -> "DashboardSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.backend.close()
        self.overlay.close()

    # ==================== Readiness / retry ===================== #

    async def initialize(self, timeout: Optional[float] = None, poll_interval: float = 0.1) -> bool:
        """
        Probe the backend until it reports ready, then open the gate.

        The gate is opened after ``timeout`` seconds even if the backend never
        answered; reads then fall back on retries.
        """
        if timeout is None:
            timeout = self.settings.readiness_timeout_seconds
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while not await self.backend.check_ready():
            if loop.time() >= deadline:
                logger.warning("Backend never reported ready, proceeding anyway")
                break
            await asyncio.sleep(poll_interval)
        self.gate.set_ready(True)
        return True

    async def wait_for_api_ready(self, timeout: Optional[float] = None) -> bool:
        if timeout is None:
            timeout = self.settings.readiness_timeout_seconds
        return await self.gate.wait_until_ready(timeout)

    async def retry_api_call(
        self,
        call: Callable[[], Awaitable[Any]],
        max_attempts: Optional[int] = None,
    ) -> Any:
        return await self.retry.run(call, max_attempts)

    async def _read(self, call: Callable[[], Awaitable[Any]], what: str) -> Any:
        """Readiness wait plus retry; None when the backend never served."""
        await self.wait_for_api_ready()
        try:
            return await self.retry.run(call)
        except TransientNetworkError as exc:
            logger.error(f"Loading {what} failed after retries: {exc.message}")
            return None

    # ==================== Reads ===================== #

    async def load_jobs(self, **filters: Any) -> list[Job]:
        """
        Refresh the job arena.

        Filters are remembered so the post-reorder refetch reloads the same
        view. On exhaustion the current arena contents are returned.
        """
        if filters:
            self._job_filters = filters
        page = await self._read(lambda: self.backend.list_jobs(**self._job_filters), "jobs")
        if isinstance(page, Page):
            self.jobs.replace_all(page.data)
        return self.jobs.values()

    async def load_candidates(self, **filters: Any) -> list[Candidate]:
        """Refresh the candidate arena, patched with persisted stage moves."""
        page = await self._read(lambda: self.backend.list_candidates(**filters), "candidates")
        if isinstance(page, Page):
            self.candidates.replace_all(self.overlay.apply(page.data))
        return self.candidates.values()

    async def load_notes(self, candidate_id: str) -> list[Note]:
        async def fetch():
            return Ready(await self.backend.list_notes(candidate_id))

        return await self._read(fetch, f"notes of {candidate_id}") or []

    async def load_timeline(self, candidate_id: str) -> list[TimelineEntry]:
        async def fetch():
            return Ready(await self.backend.get_timeline(candidate_id))

        return await self._read(fetch, f"timeline of {candidate_id}") or []

    def get_persisted_stage_changes(self) -> dict[str, str]:
        return self.overlay.stage_overrides()

    def get_persisted_notes(self, candidate_id: Optional[str] = None) -> list[dict[str, Any]]:
        return self.overlay.read_notes(candidate_id)

    def render_candidate(self, candidate_id: str) -> Optional[Candidate]:
        """Candidate as the board shows it: overlay stage over the arena copy."""
        candidate = self.candidates.get(candidate_id)
        if candidate is None:
            return None
        return self.overlay.apply([candidate])[0]

    # ==================== Writes ===================== #

    async def update_candidate_stage(self, candidate_id: str, stage: str) -> Optional[Candidate]:
        """
        Move a candidate and return it as rendered afterwards.

        The rendered stage is ``stage`` whether or not the backend accepted
        the move. None only when the candidate was never loaded and the
        backend did not answer; the move still shows up on the next load.
        """
        transition = await self.controller.transition_stage(candidate_id, stage)
        if not transition.committed:
            logger.info(f"Showing persisted stage {stage!r} for {candidate_id}")
        return self.render_candidate(candidate_id)

    async def reorder_jobs(self, job_id: str, from_order: int, to_order: int) -> ReorderOutcome:
        return await self.ordering.reorder(job_id, from_order, to_order)

    async def add_note(self, candidate_id: str, content: str, author: Optional[str] = None) -> Note:
        return await self.controller.add_note(candidate_id, content, author)

    async def create_job(self, data: dict[str, Any]) -> Job:
        return await self.controller.create_job(data)

    async def update_job(self, job_id: str, changes: dict[str, Any]) -> Job:
        return await self.controller.update_job(job_id, changes)

    async def toggle_job_status(self, job_id: str) -> list[Job]:
        """Archive or unarchive a job, then reload the board."""
        await self.controller.toggle_job_status(job_id)
        return await self.load_jobs()

    async def create_candidate(self, data: dict[str, Any]) -> Candidate:
        return await self.controller.create_candidate(data)

    async def update_candidate(self, candidate_id: str, changes: dict[str, Any]) -> Candidate:
        return await self.controller.update_candidate(candidate_id, changes)

    async def delete_candidate(self, candidate_id: str) -> None:
        await self.controller.delete_candidate(candidate_id)
        self.overlay.reset(OverlayKind.STAGE_OVERRIDE, candidate_id)
