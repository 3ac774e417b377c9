"""FastAPI application entry point."""

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load environment variables before importing runtime config/services.
load_dotenv()

import logging

from .config import settings
from .logging_config import setup_logging

setup_logging(settings.log_level, settings.logs_dir)

from .routers import meeting_config, meetings

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Roundtable Meeting API",
    description="Web API for running multi-agent meetings from declarative workflows",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)

# Register routers
app.include_router(meetings.router)
app.include_router(meeting_config.router)

logger.info("Meetings Dir: %s", settings.meetings_dir)
logger.info("Meeting Config: %s", settings.meeting_config_path)
logger.info("=" * 80)


@app.on_event("startup")
async def startup_event():
    """Initialize configuration and storage directories on startup."""
    logger.info("=== Application startup initialization ===")

    from .services.meeting_services import get_meeting_config_service, get_meeting_storage

    get_meeting_config_service()
    get_meeting_storage()

    configured = [provider.value for provider, key in settings.api_keys.items() if key]
    if configured:
        logger.info("Model providers with API keys: %s", ", ".join(configured))
    else:
        logger.warning("No model provider API keys configured; speaking steps will fail")


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "message": "Roundtable Meeting API",
        "docs": "/docs",
        "health": "/api/health",
    }
