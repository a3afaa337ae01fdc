"""
FastAPI Application Entry Point

This module creates and configures the FastAPI application for the
VID Registration API.

The application provides:
- REST endpoints for the two-step registration flow (under /api)
- A background task that sweeps expired registrations
- Health check endpoint

Every error response has the shape {"error": "<message>"}.

Usage:
    # From project root:
    uvicorn api.app:app --host 0.0.0.0 --port 3001 --reload

    # Or run directly (port from $PORT, default 3001):
    python -m api.app
"""

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from api.routes.registration import router as registration_router
from api.schemas import HealthResponse
from core.config import get_api_config, get_registration_config, get_server_config
from core.errors import RegistrationError
from core.registration_service import RegistrationService, get_registration_service


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

APP_NAME = "VID Registration API"
APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Runs on startup:
    - Create the registration service (in-memory store + verifier)
    - Start the periodic sweep of expired registrations

    Runs on shutdown:
    - Cancel the sweeper task
    """
    logger.info("=" * 60)
    logger.info(f"Starting {APP_NAME}")
    logger.info("=" * 60)

    service = get_registration_service()
    registration_config = get_registration_config()
    interval_sec = float(registration_config.get("sweep_interval_sec", 300))

    app.state.sweeper_task = asyncio.create_task(service.run_sweeper(interval_sec))

    logger.info(
        f"Registrations expire after {registration_config.get('ttl_sec', 3600)}s, "
        f"swept every {interval_sec}s"
    )
    logger.info("API startup complete!")

    yield

    logger.info("Shutting down API...")
    sweeper_task = app.state.sweeper_task
    sweeper_task.cancel()
    try:
        await sweeper_task
    except asyncio.CancelledError:
        pass
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title=APP_NAME,
    description="""
Demo API for a two-step identity registration.

## Flow
1. `POST /api/id-reg` with `{"image": "<base64 JPEG>"}` returns a `vidNumber`
2. `POST /api/photo-reg` with `{"image": ..., "vidNumber": ...}` verifies the face photo
3. `GET /api/registration/{vidNumber}` returns the registration status

Registrations live in memory only and expire after one hour.
Face verification is simulated and rejects a share of submissions at random.
    """,
    version=APP_VERSION,
    lifespan=lifespan,
)

api_config = get_api_config()

# ============================================================
# Request Size Limit
# ============================================================

MAX_BODY_BYTES = int(float(api_config.get("max_body_mb", 10)) * 1024 * 1024)


class BodySizeLimitMiddleware:
    """
    Reject request bodies larger than max_bytes with 413.

    A declared Content-Length over the limit is rejected before anything is
    read. Otherwise the body is counted as it arrives (chunked uploads carry
    no length) and handed to the app only once it is known to fit.
    """

    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope.get("path", "")
        headers = Headers(scope=scope)
        content_length = headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            logger.warning(f"Rejected {path}: declared body of {content_length} bytes")
            await self._reject(scope, receive, send)
            return

        chunks = []
        received = 0
        more_body = True
        while more_body:
            message = await receive()
            if message["type"] == "http.disconnect":
                return
            chunk = message.get("body", b"")
            received += len(chunk)
            if received > self.max_bytes:
                logger.warning(f"Rejected {path}: body exceeded {self.max_bytes} bytes")
                await self._reject(scope, receive, send)
                return
            chunks.append(chunk)
            more_body = message.get("more_body", False)

        body = b"".join(chunks)
        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if replayed:
                return await receive()
            replayed = True
            return {"type": "http.request", "body": body, "more_body": False}

        await self.app(scope, replay, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(status_code=413, content={"error": "Request body too large"})
        await response(scope, receive, send)


# Added before CORS so that CORS headers are also set on 413 responses
app.add_middleware(BodySizeLimitMiddleware, max_bytes=MAX_BODY_BYTES)

# Configure CORS for the capture client
app.add_middleware(
    CORSMiddleware,
    allow_origins=api_config.get("cors_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(registration_router)


# ============================================================
# Error Handlers
# ============================================================

@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    """Turn a registration error into its HTTP status and message."""
    if exc.status_code >= 500:
        logger.error(f"{request.url.path}: {exc.message}")
    else:
        logger.info(f"{request.url.path}: {exc.status_code} {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors with a readable message."""
    logger.info(f"{request.url.path}: invalid request body: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Keep the {"error": ...} shape for framework-level HTTP errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    """Last resort: log the failure and answer 500."""
    logger.exception(f"Unexpected error on {request.url.path}: {exc}")

    path = request.url.path
    if path.endswith("/id-reg"):
        message = "Server error processing ID image. Please try again."
    elif path.endswith("/photo-reg"):
        message = "Server error processing face photo. Please try again."
    else:
        message = "Server error. Please try again."

    return JSONResponse(status_code=500, content={"error": message})


# ============================================================
# Health Check Endpoint
# ============================================================

@app.get("/health", response_model=HealthResponse, tags=["system"])
async def health_check(service: RegistrationService = Depends(get_registration_service)):
    """
    Check the health of the API.

    Returns:
    - Number of stored registrations (pending and verified)
    - Whether the expiry sweeper is running
    """
    stats = service.store.stats()

    sweeper_task = getattr(app.state, "sweeper_task", None)
    sweeper_running = sweeper_task is not None and not sweeper_task.done()

    return HealthResponse(
        status="healthy",
        active_registrations=stats["total"],
        verified_registrations=stats["verified"],
        sweeper_running=sweeper_running,
    )


@app.get("/", tags=["system"])
async def root():
    """Root endpoint with API information."""
    return {
        "name": APP_NAME,
        "version": APP_VERSION,
        "docs": "/docs",
        "health": "/health",
    }


if __name__ == "__main__":
    import uvicorn

    server = get_server_config()

    logger.info(f"Server running on port {server['port']}")
    uvicorn.run(
        "api.app:app",
        host=server["host"],
        port=server["port"],
        reload=False,
        log_level="info",
    )
