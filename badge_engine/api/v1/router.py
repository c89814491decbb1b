"""
API Router v1

Combines all route modules.
"""

from fastapi import APIRouter

from badge_engine.api.v1.routes import badges, cron

api_router = APIRouter()

api_router.include_router(badges.router, tags=["Badges"])
api_router.include_router(cron.router, tags=["Cron"])
