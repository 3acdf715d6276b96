"""FastAPI application entry point."""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from lunchplan.config import settings
from lunchplan.database import Base, engine

# Import routers
from lunchplan.routers import users, groups, week_status

# Import all models so Base.metadata knows about them
from lunchplan.models.user import User                 # noqa: F401
from lunchplan.models.group import Group, GroupMember  # noqa: F401
from lunchplan.models.day_status import DayStatus      # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="Lunch Planner",
    description="Team lunch coordination — who eats in, buys out, stays home or is away each weekday",
    version="0.1.0",
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(groups.router, prefix="/api/groups", tags=["Groups"])
app.include_router(week_status.router, prefix="/api/week-status", tags=["WeekStatus"])


@app.on_event("startup")
def on_startup():
    """Create database tables on startup (for SQLite dev mode)."""
    if settings.DATABASE_URL.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok"}
