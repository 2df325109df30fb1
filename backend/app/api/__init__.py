from fastapi import APIRouter

from app.core import settings as app_settings
from .routes import assignments, range_analysis

api_router = APIRouter(prefix=app_settings.api_v1_prefix)
api_router.include_router(
    range_analysis.router, prefix="/range-analysis", tags=["range-analysis"]
)
api_router.include_router(assignments.router, prefix="/assignments", tags=["assignments"])

__all__ = ["api_router"]
