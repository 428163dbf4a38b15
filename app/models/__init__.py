"""ORM models - import all so Base.metadata is complete for migrations."""

from app.models.user import User, UserSettings
from app.models.workout_log import WorkoutLog

__all__ = [
    "User",
    "UserSettings",
    "WorkoutLog",
]
