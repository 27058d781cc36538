"""
Municipal Incident Hub - FastAPI Application Entry Point

Citizens report municipal service incidents (water, electricity, roads,
waste) and see the ones around them; municipal staff triage them.

DESIGN PRINCIPLES:
- The external store is the source of truth; the feed cache is disposable
- Location is resolved coarsely (bounding boxes), never guessed when unknown
- Transient backend failures degrade to a stale feed, never a crashed view
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from incident_hub.config.firebase import get_incident_store
from incident_hub.core.settings import settings
from incident_hub.routes import admin, health, incidents, jurisdictions, voice
from incident_hub.services.incident_feed import IncidentFeedCache
from incident_hub.services.jurisdiction_catalog import get_catalog

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Citizen-reported municipal service incidents for South African municipalities",
    debug=settings.DEBUG,
)
app.state.feed_cache = None


# Global exception handler to catch ALL exceptions
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(
        f"🔥 Unhandled exception on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": f"Internal server error: {str(exc)}"},
    )


# Pydantic validation error handler
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Catch Pydantic validation errors and log them."""
    logger.warning(f"Validation error on {request.method} {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": jsonable_errors(exc)},
    )


def jsonable_errors(exc: RequestValidationError):
    # ctx may hold exception instances that are not JSON serializable
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Initialize services on application startup.
    Loads the jurisdiction catalog, connects the store and starts the feed.
    """
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    catalog = get_catalog()
    logger.info(f"Jurisdiction catalog ready: {len(catalog.boxes)} boxes, default '{catalog.default.name}'")

    try:
        store = get_incident_store()
    except Exception as e:
        logger.warning(f"Incident store initialization failed: {e}")
        logger.warning("The app will start but the incident feed is unavailable.")
        return

    cache = IncidentFeedCache(store)
    snapshot = await cache.start()
    app.state.feed_cache = cache
    logger.info(f"Incident feed started: status={snapshot.status.value}, incidents={len(snapshot.incidents)}")


@app.on_event("shutdown")
async def shutdown_event():
    """
    Cleanup on application shutdown.
    """
    cache = app.state.feed_cache
    if cache is not None:
        cache.stop()
        app.state.feed_cache = None
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(jurisdictions.router)
app.include_router(incidents.router)
app.include_router(admin.router)
app.include_router(voice.router)


# Root endpoint
@app.get("/")
async def root():
    """
    Root endpoint - API information.
    """
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
        "docs": "/docs",
        "health": "/health",
        "incidents": "/incidents?lat={lat}&lng={lng}&category={category}",
    }
