"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from unisphere.api.routes.session_routes import router as session_router
from unisphere.api.routes.admin_routes import router as admin_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(session_router)
api_router.include_router(admin_router)
