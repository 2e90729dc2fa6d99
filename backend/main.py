"""
AQL Job Desk - Main FastAPI Application
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Orphaned draft cleanup at startup; optional demo seed
v1.0.0 (2026-09-28): Initial FastAPI application (locations, drafts, jobs)
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from config import settings, init_directories
from api import locations, drafts, jobs
from api.deps import draft_store

# Create necessary directories before the log file handler opens
init_directories()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(f'{settings.LOGS_DIR}/api.log'),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    # Initialize database
    from models import init_db
    await init_db()

    if settings.SEED_ON_STARTUP:
        from database import get_db
        from seed import seed_if_empty
        async with get_db() as db:
            await seed_if_empty(db)

    # Drafts whose delete failed after finalize
    purged = await draft_store.purge_orphans()
    logger.info(f"Startup complete ({purged} orphaned drafts removed)")

    yield

    logger.info("Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="AQL inspection job lifecycle: drafts, job numbering, submission and staffing",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure properly in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(locations.router, prefix="/api", tags=["Locations"])
app.include_router(drafts.router, prefix="/api", tags=["Drafts"])
app.include_router(jobs.router, prefix="/api", tags=["Jobs"])


@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "app": settings.APP_NAME
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
        workers=settings.API_WORKERS
    )
