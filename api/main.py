"""
Backend simulator: FastAPI application initialization and configuration.

Serves the hiring API the dashboard talks to, with randomized latency,
injected failures and a cold-start window before storage is seeded.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.faults import FaultInjector
from api.routes import candidates, health, jobs
from api.services.seed import seed_database
from core.config import Settings, settings as default_settings
from core.middleware import (
    ErrorHandlingMiddleware,
    StructuredLoggingMiddleware,
    setup_error_handlers,
    setup_logging,
)
from database.engine import close_db, create_db_engine, create_session_factory, init_db

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


async def seed_storage(app: FastAPI, delay: float = 0.0) -> None:
    """Seed the database, then start serving data endpoints."""
    if delay:
        logger.info(f"Simulating cold start: storage ready in {delay:.1f}s")
        await asyncio.sleep(delay)

    app_settings: Settings = app.state.settings
    await seed_database(
        app.state.session_factory,
        job_count=app_settings.simulator_seed_jobs,
        candidate_count=app_settings.simulator_seed_candidates,
        seed=app_settings.simulator_random_seed,
    )
    app.state.ready = True
    logger.info("Simulator storage ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    app_settings: Settings = app.state.settings

    # Startup
    logger.info(f"Starting {app_settings.app_name} simulator in {app_settings.app_env} environment")
    engine = create_db_engine(app_settings.simulator_database_url)
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    await init_db(engine)

    seeding = None
    if app_settings.simulator_startup_delay_seconds > 0:
        seeding = asyncio.create_task(
            seed_storage(app, app_settings.simulator_startup_delay_seconds)
        )
    else:
        await seed_storage(app)

    yield

    # Shutdown
    logger.info(f"Shutting down {app_settings.app_name} simulator")
    if seeding is not None and not seeding.done():
        seeding.cancel()
    await close_db(engine)


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Build a simulator app.

    Args:
        app_settings: Configuration; tests pass their own to control latency,
            failure rates and the database URL
    """
    app_settings = app_settings or default_settings

    app = FastAPI(
        title=f"{app_settings.app_name} backend simulator",
        description="Hiring pipeline API with injected latency and failures",
        version="0.1.0",
        docs_url="/docs" if app_settings.debug else None,
        redoc_url="/redoc" if app_settings.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.ready = False
    app.state.faults = FaultInjector.from_settings(app_settings)

    # Setup error handlers (before middleware)
    setup_error_handlers(app)

    # Add middleware (order matters - they execute in reverse order)
    # 1. Error handling middleware (catches everything the handlers do not)
    app.add_middleware(ErrorHandlingMiddleware, debug=app_settings.debug)

    # 2. Structured logging middleware (logs all requests/responses)
    app.add_middleware(
        StructuredLoggingMiddleware,
        log_request_body=app_settings.log_request_body,
        max_body_size=app_settings.log_max_body_size,
    )

    # 3. CORS for the browser dashboard
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router, prefix=API_PREFIX, tags=["Health"])
    app.include_router(jobs.router, prefix=API_PREFIX)
    app.include_router(candidates.router, prefix=API_PREFIX)

    return app


# Setup structured logging (do this first, before anything else)
setup_logging(
    log_level=default_settings.log_level,
    json_logs=default_settings.json_logs,
)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.debug,
        log_level=default_settings.log_level.lower(),
    )
