"""Streak and leaderboard response schemas."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field


class StreakRead(BaseModel):
    """Weekly streaks for one user. Streaks count completed weeks with 2+ workouts."""

    model_config = ConfigDict(from_attributes=True)

    user_id: str
    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    last_workout_date: date | None = None


class LeaderboardEntryRead(BaseModel):
    user_id: str
    username: str | None = None
    email: str
    inspiration_quote: str | None = None
    workout_count: int = Field(..., ge=1, description="Workouts logged this calendar month")
    current_streak: int = Field(0, ge=0)
    longest_streak: int = Field(0, ge=0)
    rank: int = Field(..., ge=1)


class LeaderboardRead(BaseModel):
    month: str = Field(..., description="YYYY-MM the counts cover")
    entries: list[LeaderboardEntryRead] = []
