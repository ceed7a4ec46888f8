"""
Flow Readings - Backend API
===========================
FastAPI application that stores flow-meter readings in Supabase and serves
them back to the dashboards.

ARCHITECTURE:
    The flow meters (ESP32 + flow sensor) POST their readings here. This
    service validates them and forwards them to a hosted Postgres (Supabase,
    through its PostgREST HTTP API). It keeps no state of its own.

    [Flow Meter] --HTTP--> [This Backend] --HTTPS--> [Supabase / PostgREST]
                                 ^
                                 |
                           [Dashboards]

WHAT IT STORES:
    leituras          - raw readings (latest per device, or a bounded history)
    leituras_diarias  - one running total per device and day

HOW TO RUN:
    # Install
    pip install -e .

    # Configure (or put these in a .env file)
    export SUPABASE_URL=https://<project>.supabase.co
    export SUPABASE_KEY=<service key>

    # Run the server
    uvicorn app.main:app --reload --port 8000

API DOCUMENTATION:
    After starting the server, visit:
    - Swagger UI: http://localhost:8000/docs
    - ReDoc: http://localhost:8000/redoc
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, get_settings
from app.exceptions import FlowApiError
from app.routers import diario_router, fluxo_router
from app.services import CompactionScheduler, RetentionPolicy, SupabaseStore

logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFESPAN
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    STARTUP:
        1. Create the Supabase client (unless one was injected)
        2. Start the compaction sweep if COMPACTION_INTERVAL_MINUTES > 0
        3. Print startup information

    SHUTDOWN:
        1. Stop the sweep
        2. Close the HTTP client we created
    """
    settings: Settings = app.state.settings

    # ========== STARTUP ==========
    owns_store = False
    if app.state.store is None:
        if not settings.supabase_url or not settings.supabase_key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY must be set")
        app.state.store = SupabaseStore(
            url=settings.supabase_url,
            key=settings.supabase_key,
            request_timeout=settings.request_timeout,
        )
        owns_store = True

    scheduler = None
    if settings.compaction_interval_minutes > 0:
        policy = RetentionPolicy(
            app.state.store,
            keep=settings.retention_limit,
            mode=settings.compaction_mode,
        )
        scheduler = CompactionScheduler(
            app.state.store, policy, settings.compaction_interval_minutes
        )
        scheduler.start()

    print("=" * 60)
    print("FLOW READINGS API - Starting Backend")
    print("=" * 60)
    print(f"   Timestamps:      {settings.timestamp_source.value}")
    print(f"   Reading mode:    {settings.reading_mode.value}")
    print(f"   Compaction:      {settings.compaction_mode.value} (keep {settings.retention_limit})")
    print(f"   Sweep interval:  {settings.compaction_interval_minutes or 'disabled'} min")
    print(f"   Admin required:  {settings.require_admin_id}")
    print("=" * 60)

    yield  # Application runs here

    # ========== SHUTDOWN ==========
    if scheduler is not None:
        scheduler.shutdown()
    if owns_store:
        await app.state.store.close()
        app.state.store = None
    logger.info("Shutdown complete")


# =============================================================================
# ERROR HANDLERS
# =============================================================================
# Every error leaves as {"error": "<message>"}

async def flow_api_error_handler(request: Request, exc: FlowApiError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.debug(f"Rejected request body on {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Dados inválidos"})


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


# =============================================================================
# CREATE FASTAPI APPLICATION
# =============================================================================

def create_app(settings: Optional[Settings] = None, store=None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration (read from the environment when omitted)
        store: Datastore client to use instead of creating a SupabaseStore
               at startup. The caller stays responsible for closing it.
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format='[%(asctime)s] %(levelname)s %(name)s: %(message)s',
        datefmt='%H:%M:%S',
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    app = FastAPI(
        title="Flow Readings API",
        description="Stores flow-meter readings and daily totals in Supabase.",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FlowApiError, flow_api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    app.include_router(fluxo_router)
    app.include_router(diario_router)

    @app.get("/", response_class=PlainTextResponse, summary="Liveness")
    async def root():
        """Is the service up?"""
        return "ok!"

    @app.get("/health", summary="Health Check")
    async def health():
        """Health check with the active storage modes."""
        return {
            "status": "healthy",
            "timestamp_source": settings.timestamp_source.value,
            "reading_mode": settings.reading_mode.value,
            "compaction_mode": settings.compaction_mode.value,
            "retention_limit": settings.retention_limit,
        }

    return app


app = create_app()
