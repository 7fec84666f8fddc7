"""Courtside game scheduling web application."""
import logging
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from courtside.core.config import settings
from courtside.core.database import create_db_and_tables
from courtside.core.scheduler import shutdown_scheduler, start_scheduler
from courtside.errors import CourtsideError
from courtside.routes import auth, deps, games, profiles, sweep

# Configure logging
log_dir = Path.home() / ".logs" / "courtside"
log_dir.mkdir(parents=True, exist_ok=True)
log_file = log_dir / "latest.log"

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    filename=str(log_file),
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    logger.info("Starting Courtside application")
    create_db_and_tables()
    start_scheduler()
    yield
    # Shutdown
    shutdown_scheduler()
    logger.info("Courtside application shut down")


app = FastAPI(
    title=settings.app_name,
    description="Schedule games, vote on start times and see who is really playing",
    version="0.1.0",
    lifespan=lifespan,
)

# Configure CORS for external access
origins = (
    ["*"]
    if settings.allowed_origins == "*"
    else [o.strip() for o in settings.allowed_origins.split(",")]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth.router)
app.include_router(games.router)
app.include_router(profiles.router)
app.include_router(sweep.router)


@app.exception_handler(CourtsideError)
async def courtside_error_handler(request: Request, exc: CourtsideError):
    """Report application errors as ``{"kind": ..., "message": ...}``."""
    return JSONResponse(status_code=deps.status_for(exc), content=exc.to_dict())


@app.get("/")
async def root():
    """Service banner."""
    return {"app": settings.app_name, "games": "/games"}


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "app": settings.app_name}


def run():
    """Serve the app with uvicorn on the configured host and port."""
    uvicorn.run("courtside.main:app", host=settings.host, port=settings.port, reload=settings.debug)


if __name__ == "__main__":
    run()
