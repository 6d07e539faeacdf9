"""FastAPI application exposing analysis, alert checks and scan control."""

import uuid
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config.logging import get_logger
from ..events import ScanAuditHandler, get_event_bus
from .auth import verify_auth_token
from .exceptions import setup_exception_handlers
from .health import router as health_router
from .models.responses import MessageResponse
from .routers import alerts_router, analysis_router, scan_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Wire the audit handler onto the event bus for the app's lifetime."""
    logger.info("Starting Catalyst Watch API")

    event_bus = get_event_bus()
    audit_handler = ScanAuditHandler()
    audit_handler.register(event_bus)
    logger.info("Event system initialized", event_bus_name=event_bus.name)

    yield

    audit_handler.unregister(event_bus)
    for event_type, count in event_bus.get_statistics()["handlers_by_event_type"].items():
        logger.debug("Event handlers at shutdown", event_type=event_type, handlers=count)
    logger.info("Catalyst Watch API shutdown completed")


async def add_request_id_middleware(request: Request, call_next):
    """Add unique request ID to each request for tracking."""
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id

    logger.info(
        "Request started",
        request_id=request_id,
        method=request.method,
        path=request.url.path,
        query_params=str(request.query_params),
    )

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id

    logger.info(
        "Request completed",
        request_id=request_id,
        status_code=response.status_code,
        method=request.method,
        path=request.url.path,
    )
    return response


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Catalyst Watch API",
        description="""
        Consolidation and breakout analysis plus catalyst price-revisit alerts.

        ## Features

        * **Consolidations**: Range-bound windows in daily price history
        * **Breakouts**: Volume- and momentum-confirmed breakout classification
        * **Revisit alerts**: Detect when a price returns to where a past catalyst began
        * **Scan control**: Trigger and inspect the periodic watchlist scan
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.middleware("http")(add_request_id_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    auth = [Depends(verify_auth_token)]
    app.include_router(health_router, prefix="/api/v1", tags=["Health & Status"])
    app.include_router(
        analysis_router, prefix="/api/v1/analysis", tags=["Analysis"], dependencies=auth
    )
    app.include_router(
        alerts_router, prefix="/api/v1/alerts", tags=["Revisit Alerts"], dependencies=auth
    )
    app.include_router(
        scan_router, prefix="/api/v1/scan", tags=["Scan"], dependencies=auth
    )

    @app.get("/", response_model=MessageResponse, summary="API Root Endpoint")
    async def root(request: Request, token: str = Depends(verify_auth_token)):
        return MessageResponse.create(
            message="Catalyst Watch API", request_id=request.state.request_id
        )

    logger.info("FastAPI application created")
    return app


# Create the app instance
app = create_app()
