"""Health check endpoint."""

from datetime import UTC, datetime

from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool

from kiosk import __version__
from kiosk.api.dependencies import QueueManagerDep
from kiosk.models.health import HealthResponse

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(manager: QueueManagerDep) -> HealthResponse:
    """Health check endpoint.

    The service stays ``healthy`` while the store is down because adds keep
    working through fallback storage; it reports ``degraded`` instead.
    """
    store_available = await run_in_threadpool(manager.provisioner.ping)
    return HealthResponse(
        status="healthy" if store_available else "degraded",
        timestamp=datetime.now(UTC),
        version=__version__,
        store_available=store_available,
    )
