"""
Optimistic Mutation Controller

Applies user edits to the in-memory arenas before the backend confirms them.
Stage moves are hedged: the overlay keeps the user's intent, the backend gets
exactly one attempt, and a failure silently restores the previous in-memory
state. Every other write is direct and surfaces its failure to the caller.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from core.errors import BackendError, InvalidRequestError
from core.models import VALID_STAGES, Candidate, Job, JobStatus, Note
from client.http import BackendClient
from client.overlay import OverlayStore
from client.store import EntityStore
from database.models.overlay import OverlayKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageTransition:
    """Outcome of one optimistic stage move."""

    candidate_id: str
    # None when the candidate was not loaded at the time of the move
    previous_stage: Optional[str]
    new_stage: str
    committed: bool
    error: Optional[BackendError] = None


class OptimisticMutationController:
    """
    Owns the candidate and job arenas and every write path into them.

    Args:
        backend: HTTP client for the hiring backend
        overlay: Durable local overlay
        candidates: Candidate arena (created empty if omitted)
        jobs: Job arena (created empty if omitted)
    """

    def __init__(
        self,
        backend: BackendClient,
        overlay: OverlayStore,
        candidates: Optional[EntityStore[Candidate]] = None,
        jobs: Optional[EntityStore[Job]] = None,
    ):
        self.backend = backend
        self.overlay = overlay
        self.candidates = candidates if candidates is not None else EntityStore()
        self.jobs = jobs if jobs is not None else EntityStore()

    # ==================== Candidates ===================== #

    async def transition_stage(self, candidate_id: str, new_stage: str) -> StageTransition:
        """
        Move a candidate to ``new_stage`` optimistically.

        A candidate missing from the arena (cold start, filtered view) is
        still journaled and submitted; only the in-memory step is skipped.

        Raises:
            InvalidRequestError: ``new_stage`` is not a pipeline stage
        """
        if new_stage not in VALID_STAGES:
            raise InvalidRequestError(f"Invalid stage: {new_stage!r}")

        snapshot = self.candidates.snapshot()
        current = snapshot.get(candidate_id)
        previous_stage = current.stage if current is not None else None

        if current is not None:
            self.candidates.put(current.model_copy(update={"stage": new_stage}))
        self.overlay.record(
            candidate_id,
            OverlayKind.STAGE_OVERRIDE,
            {
                "entityId": candidate_id,
                "stage": new_stage,
                "previousStage": previous_stage,
                "updatedAt": datetime.now(timezone.utc).isoformat(),
            },
        )

        try:
            updated = await self.backend.update_candidate(candidate_id, {"stage": new_stage})
        except BackendError as exc:
            self.candidates.restore(snapshot, candidate_id)
            logger.warning(
                f"Stage move {candidate_id} {previous_stage} -> {new_stage} failed, "
                f"reverted in memory: {exc.message}"
            )
            return StageTransition(candidate_id, previous_stage, new_stage, False, exc)

        self.candidates.put(updated)
        logger.info(f"Stage move {candidate_id} {previous_stage} -> {new_stage} committed")
        return StageTransition(candidate_id, previous_stage, new_stage, True)

    async def add_note(
        self,
        candidate_id: str,
        content: str,
        author: Optional[str] = None,
    ) -> Note:
        """Journal the note locally, then post it once. Failures propagate."""
        content = (content or "").strip()
        if not content:
            raise InvalidRequestError("Note content is required")

        self.overlay.record(
            candidate_id,
            OverlayKind.NOTE,
            {
                "candidateId": candidate_id,
                "content": content,
                "author": author or "Unknown",
                "createdAt": datetime.now(timezone.utc).isoformat(),
            },
        )
        return await self.backend.add_note(candidate_id, content, author)

    async def create_candidate(self, data: dict[str, Any]) -> Candidate:
        candidate = await self.backend.create_candidate(data)
        self.candidates.put(candidate)
        logger.info(f"Created candidate {candidate.id}")
        return candidate

    async def update_candidate(self, candidate_id: str, changes: dict[str, Any]) -> Candidate:
        """
        Edit name, e-mail or job assignment. Failures propagate.

        The stored copy keeps any persisted stage move, as a reload would.
        """
        candidate = await self.backend.update_candidate(candidate_id, changes)
        candidate = self.overlay.apply([candidate])[0]
        self.candidates.put(candidate)
        return candidate

    async def delete_candidate(self, candidate_id: str) -> None:
        await self.backend.delete_candidate(candidate_id)
        self.candidates.remove(candidate_id)
        logger.info(f"Deleted candidate {candidate_id}")

    # ==================== Jobs ===================== #

    async def create_job(self, data: dict[str, Any]) -> Job:
        job = await self.backend.create_job(data)
        self.jobs.put(job)
        logger.info(f"Created job {job.id} at order {job.order}")
        return job

    async def update_job(self, job_id: str, changes: dict[str, Any]) -> Job:
        job = await self.backend.update_job(job_id, changes)
        self.jobs.put(job)
        return job

    async def toggle_job_status(self, job_id: str) -> Job:
        """Flip a job between active and archived."""
        current = self.jobs.get(job_id)
        if current is None:
            current = await self.backend.get_job(job_id)
        new_status = (
            JobStatus.ARCHIVED.value
            if current.status == JobStatus.ACTIVE.value
            else JobStatus.ACTIVE.value
        )
        return await self.update_job(job_id, {"status": new_status})
