"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    exercise_history,
    health,
    plans,
    prefs,
    sessions,
    streak,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(plans.router, prefix="/plans", tags=["plans"])
api_router.include_router(sessions.router, prefix="/sessions", tags=["sessions"])
api_router.include_router(exercise_history.router, prefix="/exercises", tags=["exercise-history"])
api_router.include_router(streak.router, prefix="/streak", tags=["streak"])
api_router.include_router(prefs.router, prefix="/prefs", tags=["prefs"])
