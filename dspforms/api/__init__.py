"""API router definitions."""

from fastapi import APIRouter

from .forms import router as forms_router
from .logs import router as logs_router
from .routes import admin_router, health_router
from .submissions import router as submissions_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(forms_router)
api_router.include_router(submissions_router)
api_router.include_router(admin_router)
api_router.include_router(logs_router)

__all__ = ["api_router"]
