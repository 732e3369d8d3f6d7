"""
SatTrack proxy - application factory

Builds the FastAPI application with its collaborators: one N2YO client, one
response cache, one request throttle and one health monitor per app.
"""
import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from sattrack.api.api import api_router
from sattrack.api.utils import error_response
from sattrack.core.config import Settings, get_settings
from sattrack.core.logging import bind_request_id, log_request
from sattrack.services.cache import ResponseCache
from sattrack.services.health import HealthMonitor
from sattrack.services.n2yo import N2YOClient
from sattrack.services.satellites import SatelliteService
from sattrack.services.throttle import RequestThrottle

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events"""
    settings: Settings = app.state.settings
    monitor: HealthMonitor = app.state.health_monitor
    logger.info("Starting %s v%s in %s mode", settings.PROJECT_NAME, settings.VERSION, settings.ENVIRONMENT)

    healthy = await monitor.check()
    logger.info("Initial N2YO API health check", extra={"healthy": healthy})
    periodic = asyncio.create_task(monitor.run_periodic(settings.HEALTH_CHECK_INTERVAL))

    yield

    logger.info("Shutting down %s...", settings.PROJECT_NAME)
    periodic.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await periodic
    await app.state.n2yo_client.aclose()


def create_app(
    settings: Optional[Settings] = None,
    *,
    client: Optional[N2YOClient] = None,
    cache: Optional[ResponseCache] = None,
    throttle: Optional[RequestThrottle] = None,
    monitor: Optional[HealthMonitor] = None,
) -> FastAPI:
    """Build the application.

    Raises ``ConfigurationError`` when no N2YO API key is configured.
    """
    settings = settings or get_settings()
    client = client or N2YOClient(
        settings.N2YO_API_KEY,
        base_url=settings.N2YO_BASE_URL,
        timeout=settings.N2YO_TIMEOUT,
    )
    cache = cache or ResponseCache()
    throttle = throttle or RequestThrottle(
        min_interval=settings.THROTTLE_MIN_INTERVAL,
        retry_delay=settings.THROTTLE_RETRY_DELAY,
    )

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description="Cached, throttled proxy for the N2YO satellite tracking API.",
        version=settings.VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    app.state.settings = settings
    app.state.n2yo_client = client
    app.state.cache = cache
    app.state.throttle = throttle
    app.state.satellite_service = SatelliteService(client, cache, throttle, settings)
    app.state.health_monitor = monitor or HealthMonitor(
        client,
        search_radius=settings.SEARCH_RADIUS,
        max_errors=settings.HEALTH_MAX_ERRORS,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type", "X-Request-ID"],
    )

    @app.middleware("http")
    async def request_logging_middleware(request: Request, call_next):
        request_id = bind_request_id(request)
        log_request(request)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        log_request(request, response=response)
        return response

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Return a JSON 500 for anything the routes did not classify."""
        logger.error("Unhandled exception: %s", exc, exc_info=True)
        log_request(request, error=exc)
        # Don't expose internal errors in production
        details = str(exc) if settings.is_development else None
        return error_response(500, "Internal server error", details)

    app.include_router(api_router, prefix=settings.API_PREFIX)
    return app
