"""
Fitness Tracker API - Main Application
FastAPI backend for workout programs, meal plans, session logging and
AI-generated plans.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .database import engine, Base
from .routers import auth, programs, meal_plans, sessions, progress, ai
# Models must be imported before create_all so every table is registered
from . import models  # noqa: F401

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_info() -> dict:
    """Version plus short commit and build date when the deploy provides them."""
    info = {"version": settings.app_version}
    if settings.git_commit:
        info["git_commit"] = settings.git_commit[:8]
    if settings.build_date:
        info["build_date"] = settings.build_date
    return info


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s %s", settings.app_name, build_info())
    Base.metadata.create_all(bind=engine)
    yield
    logger.info("Shutting down, disposing connection pool")
    engine.dispose()


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Workout programs, meal plans and progress tracking with AI-generated plans",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

for module in (auth, programs, meal_plans, sessions, progress, ai):
    app.include_router(module.router)


@app.get("/")
def root():
    """API status and build information."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "status": "healthy",
        "docs": "/docs",
        **build_info(),
    }


@app.get("/health")
def health_check():
    """Liveness probe."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("fittrack.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
