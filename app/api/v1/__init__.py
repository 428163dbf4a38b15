"""API v1 router aggregation."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    health,
    leaderboard,
    streak,
    user_settings,
    workout_logs,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(workout_logs.router, prefix="/workout-logs", tags=["workout-logs"])
api_router.include_router(user_settings.router, prefix="/user-settings", tags=["user-settings"])
api_router.include_router(streak.router, prefix="/streaks", tags=["streaks"])
api_router.include_router(leaderboard.router, prefix="/leaderboard", tags=["leaderboard"])
