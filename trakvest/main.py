"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers (portfolio context, realtime, health)
- Error handlers (centralized domain-to-HTTP mapping)
- Security middleware (headers, CORS, rate limiting)
- Logging configuration
- Real-time pipeline (price stream manager, broadcast loop)

No business logic belongs here.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from trakvest.core.config import settings
from trakvest.infrastructure.database import create_schema
from trakvest.infrastructure.portfolio.instrument_repository import (
    InstrumentRepositoryAdapter,
)
from trakvest.interfaces.health import router as health_router
from trakvest.interfaces.portfolio.dependencies import get_engine, get_quote_service
from trakvest.interfaces.portfolio.router import router as portfolio_router
from trakvest.interfaces.realtime import router as realtime_router
from trakvest.realtime.scheduler import PriceBroadcastLoop
from trakvest.realtime.stream import PriceStreamManager
from trakvest.shared.errors.handlers import register_error_handlers
from trakvest.shared.logging import configure_logging
from trakvest.shared.security.headers import SecurityHeadersMiddleware
from trakvest.shared.security.rate_limiting import limiter, rate_limit_exceeded_handler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: create the schema, start/stop the real-time pipeline."""
    engine = app.dependency_overrides.get(get_engine, get_engine)()
    create_schema(engine)

    stream_manager = PriceStreamManager(send_timeout=settings.stream_send_timeout_seconds)
    stream_manager.start()

    broadcast_loop = None
    if settings.price_refresh_enabled:
        quote_service = app.dependency_overrides.get(get_quote_service, get_quote_service)()
        broadcast_loop = PriceBroadcastLoop(
            instrument_repo=InstrumentRepositoryAdapter(engine),
            quote_service=quote_service,
            stream_manager=stream_manager,
            interval_seconds=settings.price_refresh_interval_seconds,
            batch_size=settings.price_refresh_batch_size,
            batch_delay_seconds=settings.price_refresh_batch_delay_seconds,
        )
        broadcast_loop.start()
    else:
        logger.info("Price refresh disabled by configuration.")

    app.state.stream_manager = stream_manager
    app.state.broadcast_loop = broadcast_loop

    yield

    # Shutdown
    if broadcast_loop is not None:
        broadcast_loop.stop()
    await stream_manager.stop()
    app.state.stream_manager = None
    app.state.broadcast_loop = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Registers routers, error handlers, and security middleware.
    This is the composition root of the application.

    Returns:
        A fully configured FastAPI application instance.
    """
    configure_logging(level=settings.log_level)

    app = FastAPI(
        title=settings.project_name,
        version=settings.version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # --- Rate Limiting ---
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # --- Security Middleware ---
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Error Handlers ---
    register_error_handlers(app)

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    app.include_router(portfolio_router, prefix="/api/v1")
    app.include_router(realtime_router, prefix="/api/v1")

    return app


app = create_app()
