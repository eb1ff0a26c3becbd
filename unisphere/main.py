"""
UniSphere Career Services - Admin Analytics API

FastAPI backend with:
- MongoDB as the document store (users, jobs, applications, events, ...)
- Student engagement tiers and company rollups for the admin dashboard
- Optional live updates via MongoDB change streams
- JWT sessions with typed roles

Run: uvicorn unisphere.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from unisphere import __version__
from unisphere.api.routes import api_router
from unisphere.core.config import get_settings
from unisphere.core.logging import configure_logging
from unisphere.db.mongodb import init_mongo_indexes, test_mongo_connection
from unisphere.services.activity_service import ActivityPolicy
from unisphere.services.dashboard_feed import (
    DashboardFeed, get_dashboard_feed, set_dashboard_feed
)

settings = get_settings()
configure_logging(settings)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="UniSphere Career Services",
    description="""
    Admin analytics for the student career-services platform.

    ## Features
    - **Student activity**: Highly active / active / low activity / inactive tiers
    - **Needs attention**: Least engaged students, ranked for outreach
    - **Company rollups**: Applications per company and per job
    - **Sessions**: JWT bearer tokens carrying a student or admin role

    ## Database
    - MongoDB: users, jobs, applications, eventRegistrations (read-only here)
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware (allow all for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(api_router, prefix="/api")


# Startup event
@app.on_event("startup")
def startup_event():
    """Initialize MongoDB indexes and, if enabled, the live dashboard feed."""
    try:
        init_mongo_indexes()
    except PyMongoError as e:
        logger.warning("MongoDB index initialization failed: %s", e)

    if settings.live_updates:
        feed = DashboardFeed(policy=ActivityPolicy.from_settings(settings))
        try:
            feed.load()
            feed.start()
        except PyMongoError as e:
            logger.warning("Live dashboard feed disabled: %s", e)
            return
        set_dashboard_feed(feed)


@app.on_event("shutdown")
def shutdown_event():
    feed = get_dashboard_feed()
    if feed is not None:
        feed.stop()
        set_dashboard_feed(None)


@app.get("/", tags=["Health"])
async def root():
    return {"status": "healthy", "app": "UniSphere Career Services", "version": __version__}


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check."""
    feed = get_dashboard_feed()
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected",
        "live_updates": "watching" if feed is not None and feed.is_watching else "off"
    }
