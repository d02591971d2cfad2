"""Shared fixtures and utilities for tests."""

import os

import httpx
import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from client.overlay import OverlayStore
from client.session import DashboardSession
from core.config import Settings
from core.models import Candidate, Job


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables before running tests."""
    os.environ.setdefault("APP_ENV", "test")
    os.environ.setdefault("SIMULATOR_DATABASE_URL", "sqlite+aiosqlite://")
    os.environ.setdefault("OVERLAY_DATABASE_PATH", ":memory:")


@pytest.fixture
def test_settings():
    """Deterministic settings: no latency, no random failures, in-memory storage."""
    return Settings(
        app_env="test",
        api_base_url="http://testserver/api",
        readiness_timeout_seconds=0.5,
        retry_max_attempts=3,
        retry_delay_seconds=0,
        overlay_database_path=":memory:",
        simulator_database_url="sqlite+aiosqlite://",
        simulator_min_latency_ms=0,
        simulator_max_latency_ms=0,
        simulator_error_rate=0.0,
        simulator_reorder_error_rate=0.0,
        simulator_job_create_error_rate=0.0,
        simulator_random_seed=42,
        simulator_seed_jobs=5,
        simulator_seed_candidates=12,
    )


@pytest.fixture
def simulator_app(test_settings):
    """Simulator app; storage is created and seeded when its lifespan starts."""
    return create_app(test_settings)


@pytest.fixture
def client(simulator_app):
    """Synchronous test client with the lifespan running."""
    with TestClient(simulator_app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
async def running_simulator(simulator_app):
    """Simulator with its lifespan entered, for in-process httpx clients."""
    async with simulator_app.router.lifespan_context(simulator_app):
        yield simulator_app


@pytest.fixture
def overlay():
    """Throwaway overlay store."""
    store = OverlayStore(":memory:")
    yield store
    store.close()


@pytest.fixture
async def dashboard(running_simulator, test_settings, overlay):
    """DashboardSession wired to the in-process simulator."""
    transport = httpx.ASGITransport(app=running_simulator)
    async with DashboardSession(
        settings=test_settings, transport=transport, overlay=overlay
    ) as session:
        yield session


def make_jobs(count: int) -> list[Job]:
    """Jobs ``job-1..job-N`` at orders 1..N."""
    return [
        Job(id=f"job-{i}", title=f"Job {i}", slug=f"job-{i}", order=i)
        for i in range(1, count + 1)
    ]


def make_candidate(candidate_id: str = "c1", stage: str = "applied") -> Candidate:
    return Candidate(
        id=candidate_id,
        name="Jane Doe",
        email="jane.doe@example.com",
        stage=stage,
        job_id="job-1",
    )
