"""Weekly workout streak endpoints."""

from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_today
from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.schemas.streak import StreakRead
from app.services.workout_history import load_streaks

router = APIRouter()


@router.get("", response_model=list[StreakRead])
async def list_streaks(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    today: date = Depends(get_today),
):
    """Streaks for every user with at least one workout log."""
    streaks = await load_streaks(db, settings, today)
    return [
        StreakRead(
            user_id=user_id,
            current_streak=result.current_streak,
            longest_streak=result.longest_streak,
            last_workout_date=last_day,
        )
        for user_id, (result, last_day) in sorted(streaks.items(), key=lambda item: item[0])
    ]


@router.get("/{user_id}", response_model=StreakRead)
async def get_user_streak(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    today: date = Depends(get_today),
):
    """
    Current streak (consecutive completed weeks with 2+ workouts, the week in
    progress excluded), longest ever streak and the date of the last workout.
    A user with no logs gets zeros.
    """
    streaks = await load_streaks(db, settings, today, user_ids=[user_id])
    if user_id not in streaks:
        return StreakRead(user_id=user_id)
    result, last_day = streaks[user_id]
    return StreakRead(
        user_id=user_id,
        current_streak=result.current_streak,
        longest_streak=result.longest_streak,
        last_workout_date=last_day,
    )
