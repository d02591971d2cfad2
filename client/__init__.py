"""
Dashboard sync core.

Readiness gating, bounded read retries, optimistic stage moves, job
reordering and the local overlay, behind one ``DashboardSession``.
"""

from client.readiness import ReadinessGate
from client.retry import NotReady, Ready, RetryOrchestrator, retry_api_call
from client.overlay import OverlayStore
from client.store import EntityStore
from client.http import BackendClient
from client.controller import OptimisticMutationController, StageTransition
from client.ordering import OrderReconciliationProtocol, ReorderOutcome
from client.session import DashboardSession

__all__ = [
    "ReadinessGate",
    "Ready",
    "NotReady",
    "RetryOrchestrator",
    "retry_api_call",
    "OverlayStore",
    "EntityStore",
    "BackendClient",
    "OptimisticMutationController",
    "StageTransition",
    "OrderReconciliationProtocol",
    "ReorderOutcome",
    "DashboardSession",
]
