"""Health check endpoints."""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.schemas.common import HealthResponse
from core.middleware.error_handling import error_body

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness: the process is up, storage may still be seeding."""
    return HealthResponse(status="healthy", version="0.1.0")


@router.get("/ready")
async def readiness_check(request: Request):
    """Readiness: 503 ``NOT_READY`` until storage is seeded."""
    if not request.app.state.ready:
        return JSONResponse(
            status_code=503,
            content=error_body(
                "NOT_READY", "Storage is still initializing", request.url.path, request.method
            ),
        )
    return {"status": "ready"}
