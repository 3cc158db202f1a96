"""SportNest — FastAPI application entry point.

Run with::

    uvicorn --factory sportnest.main:create_app
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from sportnest.api.v1.auth import router as auth_router
from sportnest.api.v1.bookings import router as bookings_router
from sportnest.api.v1.favorites import router as favorites_router
from sportnest.api.v1.notifications import router as notifications_router
from sportnest.api.v1.payments import router as payments_router
from sportnest.api.v1.profile import router as profile_router
from sportnest.api.v1.reports import router as reports_router
from sportnest.api.v1.turfs import router as turfs_router
from sportnest.api.v1.webhooks import router as webhooks_router
from sportnest.billing.gateway import PaymentGateway, StripePaymentGateway
from sportnest.config import Settings
from sportnest.database import build_engine, build_session_factory
from sportnest.errors import SportNestError
from sportnest.services.reservation_service import ReservationGuard

# Configure root logger so all sportnest.* loggers output to stderr (captured by Docker).
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan handler for startup and shutdown events."""
    # Startup
    yield
    # Shutdown: dispose engine connections
    await app.state.engine.dispose()


async def sportnest_error_handler(request: Request, exc: SportNestError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error", "details": None},
    )


def create_app(
    settings: Settings | None = None,
    payment_gateway: PaymentGateway | None = None,
) -> FastAPI:
    """Build the application and everything it shares between requests."""
    settings = settings or Settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Turf discovery and slot booking for sports venues.",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    engine = build_engine(settings)
    payment_gateway = payment_gateway or StripePaymentGateway(settings)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.payment_gateway = payment_gateway
    app.state.reservation_guard = ReservationGuard(settings, payment_gateway)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(SportNestError, sportnest_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Routers
    app.include_router(auth_router)
    app.include_router(profile_router)
    app.include_router(turfs_router)
    app.include_router(bookings_router)
    app.include_router(payments_router)
    app.include_router(notifications_router)
    app.include_router(favorites_router)
    app.include_router(reports_router)
    app.include_router(webhooks_router)

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "healthy", "service": settings.app_name}

    @app.get("/", tags=["root"])
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {
            "service": settings.app_name,
            "version": settings.app_version,
            "docs": "/docs",
        }

    return app
