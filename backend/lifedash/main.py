"""
Lifedash - Personal Project Dashboard

FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .database import init_db, close_db
from .config import settings
from .events import get_event_publisher
from .planning import (
    AuthPending,
    AuthRequired,
    MembershipConflict,
    NotFound,
    PlanningError,
    ValidationFailed,
)
from .store import StoreError
from .api import (
    projects_router,
    shared_router,
    content_router,
    calendar_router,
    resources_router,
    profile_router,
    events_router,
    blobs_router,
)
from .tracer import setup_follow_through_logging

# Configure logging based on mode
if settings.debug:
    log_level = logging.DEBUG
elif settings.follow_through:
    log_level = logging.WARNING  # Suppress normal logs, let tracer handle output
else:
    log_level = logging.INFO

logging.basicConfig(
    level=log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

# Quiet down noisy loggers when not in debug mode
if not settings.debug:
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

# Setup follow-through tracing
setup_follow_through_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info("Starting Lifedash...")
    logger.info(f"Using document backend: {settings.document_backend}")

    if settings.document_backend == "sql":
        await init_db()
        logger.info("Database initialized")

    yield

    # Shutdown
    logger.info("Shutting down Lifedash...")
    await get_event_publisher().close_all()
    if settings.document_backend == "sql":
        await close_db()


# Create FastAPI app
app = FastAPI(
    title="Lifedash",
    description="""
    Personal project dashboard with shared projects.

    ## Features
    - **Projects**: Private projects with goals, tasks, issues and routines
    - **Shared Projects**: Join by link, leave, hand off ownership
    - **Progress**: Recomputed from tasks on every save
    - **Calendar**: Project and task deadlines by date
    - **Resources**: Weekly capacity against allocated hours
    """,
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Error mapping
ERROR_STATUS = [
    (ValidationFailed, 400),
    (AuthRequired, 401),
    (MembershipConflict, 403),
    (NotFound, 404),
    (AuthPending, 503),
]


@app.exception_handler(PlanningError)
async def planning_error_handler(request: Request, exc: PlanningError):
    status_code = next((code for cls, code in ERROR_STATUS if isinstance(exc, cls)), 400)
    if status_code >= 500:
        logger.warning(f"{request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Save or load failed. Please try again."})


# Include routers
# Blob URLs come first so the generic /{scope}/{id}/... routes never shadow them
if settings.blob_base_url.startswith("/"):
    app.include_router(blobs_router, prefix=settings.blob_base_url)
app.include_router(projects_router)
app.include_router(shared_router)
app.include_router(content_router)
app.include_router(calendar_router)
app.include_router(resources_router)
app.include_router(profile_router)
app.include_router(events_router)


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Lifedash",
        "version": "1.0.0",
        "description": "Personal project dashboard",
        "backend": settings.document_backend,
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}
