"""FastAPI dependencies for the backend simulator."""

from typing import AsyncGenerator, Callable

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from core.middleware.error_handling import StorageNotReady


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Yield a database session once storage is seeded.

    Raises:
        StorageNotReady: During the cold-start window
    """
    if not request.app.state.ready:
        raise StorageNotReady()

    async with request.app.state.session_factory() as session:
        yield session


def simulate(endpoint: str) -> Callable:
    """Dependency applying injected latency and failures for ``endpoint``."""

    async def dependency(request: Request) -> None:
        await request.app.state.faults.simulate(endpoint)

    return dependency
