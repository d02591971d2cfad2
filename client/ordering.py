"""
Order Reconciliation Protocol

Drag-and-drop reordering of the job board. The local arena is rearranged
immediately, the move is submitted once, and the board is then refetched no
matter how the submit ended. The backend's total order always wins; the local
rearrangement only has to look right until the refetch lands.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from core.errors import BackendError
from core.models import Job
from core.ordering import shift_orders
from client.http import BackendClient
from client.store import EntityStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReorderOutcome:
    """Result of one reorder round trip."""

    job_id: str
    from_order: int
    to_order: int
    committed: bool
    error: Optional[BackendError] = None


class OrderReconciliationProtocol:
    """
    Args:
        backend: HTTP client for the hiring backend
        jobs: Job arena shown on the board
        refetch: Coroutine reloading ``jobs`` from the backend
        current_sort: Returns the sort the board was loaded with; ``None``
            means the default ``order`` sort
    """

    def __init__(
        self,
        backend: BackendClient,
        jobs: EntityStore[Job],
        refetch: Callable[[], Awaitable[Any]],
        current_sort: Optional[Callable[[], Optional[str]]] = None,
    ):
        self.backend = backend
        self.jobs = jobs
        self.refetch = refetch
        self.current_sort = current_sort

    def _sorted_by_order(self) -> bool:
        if self.current_sort is None:
            return True
        return (self.current_sort() or "order") == "order"

    def apply_locally(self, job_id: str, from_order: int, to_order: int) -> bool:
        """
        Rearrange the arena as if the move had succeeded.

        Arena positions only follow ``order`` when the board is sorted by it;
        under any other sort just the ``order`` fields are rewritten.

        Returns False (and changes nothing) when the job is not on the board.
        """
        if job_id not in self.jobs:
            return False

        if self._sorted_by_order():
            from_index = self.jobs.index_of(lambda job: job.order == from_order)
            to_index = self.jobs.index_of(lambda job: job.order == to_order)
            if from_index >= 0 and to_index >= 0:
                self.jobs.move(from_index, to_index)

        orders = {job.id: job.order for job in self.jobs}
        for moved_id, order in shift_orders(orders, job_id, from_order, to_order).items():
            job = self.jobs.get(moved_id)
            if job.order != order:
                self.jobs.put(job.model_copy(update={"order": order}))
        return True

    async def reorder(self, job_id: str, from_order: int, to_order: int) -> ReorderOutcome:
        """
        Move ``job_id`` from ``from_order`` to ``to_order``.

        Backend failures are reported in the outcome, never raised.
        """
        self.apply_locally(job_id, from_order, to_order)

        try:
            await self.backend.reorder_job(job_id, from_order, to_order)
            outcome = ReorderOutcome(job_id, from_order, to_order, committed=True)
            logger.info(f"Reordered {job_id}: {from_order} -> {to_order}")
        except BackendError as exc:
            outcome = ReorderOutcome(job_id, from_order, to_order, False, exc)
            logger.warning(
                f"Reorder {job_id} {from_order} -> {to_order} failed, "
                f"refetching board: {exc.message}"
            )
        finally:
            await self._refetch()
        return outcome

    async def _refetch(self) -> None:
        try:
            await self.refetch()
        except BackendError as exc:
            logger.error(f"Board refetch after reorder failed: {exc.message}")
