"""Main FastAPI application."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from kiosk import __version__
from kiosk.api import health, identity, payments, queue
from kiosk.clients.razorpay import RazorpayClient
from kiosk.config import KioskConfig
from kiosk.errors import KioskError
from kiosk.services.identity import IdentityService
from kiosk.services.payments import PaymentService
from kiosk.services.queue import QueueManager
from kiosk.store.connection import ConnectionProvisioner
from kiosk.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


async def kiosk_error_handler(request: Request, exc: KioskError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.as_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    fields = ", ".join(".".join(str(part) for part in error["loc"] if part != "body") for error in errors)
    message = f"Missing or invalid fields: {fields}" if fields else "Empty payload"
    logger.warning(f"{request.method} {request.url.path} rejected: {message}")
    return JSONResponse(status_code=400, content={"status": "BAD_REQUEST", "message": message})


def create_app(config: KioskConfig | None = None) -> FastAPI:
    """Build the kiosk application and wire its services onto ``app.state``."""
    config = config or KioskConfig.from_env()

    provisioner = ConnectionProvisioner(config.database)
    razorpay_client = RazorpayClient(config.razorpay) if config.razorpay.has_credentials else None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"Kiosk backend {__version__} starting (store: {provisioner.safe_url()})")
        yield
        if razorpay_client is not None:
            await razorpay_client.close()
        provisioner.dispose()

    app = FastAPI(
        title="Hospital Queue Kiosk",
        description=(
            "Token issuance and queue management for a hospital self-service kiosk, "
            "with mock identity lookup and a Razorpay payment facade."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "Queue", "description": "Issue tokens, list, delete, and undo queued patients."},
            {"name": "Identity", "description": "Mock Aadhaar and biometric lookups."},
            {"name": "Payments", "description": "Razorpay orders, payment links, and signature checks."},
            {"name": "Health", "description": "Service health monitoring and status checks."},
        ],
    )

    app.state.config = config
    app.state.queue_manager = QueueManager(provisioner, token_prefix=config.token_prefix)
    app.state.identity_service = IdentityService()
    app.state.payment_service = PaymentService(config.razorpay, razorpay_client)

    # Kiosk front-end is served from a different origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(KioskError, kiosk_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    app.include_router(queue.router)
    app.include_router(identity.router)
    app.include_router(payments.router)
    app.include_router(health.router)

    return app


setup_logging()
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("kiosk.main:app", host="0.0.0.0", port=8080, reload=True, log_level="info")
