"""Monthly leaderboard endpoint."""

import logging
from datetime import date

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_today
from app.core.config import Settings, get_settings
from app.db.session import get_db
from app.schemas.streak import LeaderboardEntryRead, LeaderboardRead
from app.services.workout_history import load_leaderboard

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=LeaderboardRead)
async def get_leaderboard(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
    today: date = Depends(get_today),
):
    """
    Users ranked by workouts logged this calendar month (at least 1 to appear).
    Ties share a rank and the next rank skips ahead (1, 1, 3).
    Each entry also carries the user's weekly streaks.
    """
    entries = await load_leaderboard(db, settings, today)
    logger.debug("Leaderboard for %s: %d entries", today.strftime("%Y-%m"), len(entries))
    return LeaderboardRead(
        month=today.strftime("%Y-%m"),
        entries=[
            LeaderboardEntryRead(
                user_id=e.user_id,
                username=e.details.get("username"),
                email=e.details.get("email", ""),
                inspiration_quote=e.details.get("inspiration_quote"),
                workout_count=e.workout_count,
                current_streak=e.current_streak,
                longest_streak=e.longest_streak,
                rank=e.rank,
            )
            for e in entries
        ],
    )
