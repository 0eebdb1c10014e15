"""API route modules."""

from fastapi import APIRouter

from taskhub.entrypoints.api.routes.auth import router as auth_router
from taskhub.entrypoints.api.routes.teams import router as teams_router
from taskhub.entrypoints.api.routes.users import router as users_router

# Create main API router
api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(teams_router)

__all__ = ["api_router"]
