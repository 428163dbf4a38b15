"""Workout history queries feeding the streak engine.

Fetches per-user workout dates, this month's workout counts and the user
details shown on the leaderboard, then hands them to app.services.streaks.
"""

from __future__ import annotations

import json
import logging
from collections import Counter, defaultdict
from collections.abc import Collection
from datetime import date, datetime, timezone, tzinfo
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import Settings
from app.models.user import User, UserSettings
from app.models.workout_log import WorkoutLog
from app.services.streaks import (
    LeaderboardEntry,
    StreakResult,
    calculate_streaks,
    latest_workout_date,
    leaderboard_from_counts,
)

logger = logging.getLogger(__name__)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def month_bounds(today: date, tz: tzinfo) -> tuple[datetime, datetime]:
    """[start, end) of today's calendar month in ``tz``, as UTC datetimes."""
    start = datetime(today.year, today.month, 1, tzinfo=tz)
    if today.month == 12:
        end = datetime(today.year + 1, 1, 1, tzinfo=tz)
    else:
        end = datetime(today.year, today.month + 1, 1, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def count_exercises(exercises: Any) -> int | None:
    """Number of exercises in a log payload; None if the payload is unreadable."""
    if isinstance(exercises, str):  # rows written as JSON text
        try:
            exercises = json.loads(exercises)
        except ValueError:
            return None
    if isinstance(exercises, list):
        return len(exercises)
    return None


async def fetch_workout_dates(
    db: AsyncSession,
    user_ids: Collection[str] | None = None,
) -> dict[str, list[datetime]]:
    """All workout log dates grouped by user (optionally only for ``user_ids``)."""
    stmt = select(WorkoutLog.user_id, WorkoutLog.date)
    if user_ids is not None:
        if not user_ids:
            return {}
        stmt = stmt.where(WorkoutLog.user_id.in_(list(user_ids)))
    result = await db.execute(stmt)
    dates: dict[str, list[datetime]] = defaultdict(list)
    for row in result.all():
        if row.date is None:
            continue
        dates[row.user_id].append(_as_utc(row.date))
    return dict(dates)


async def fetch_monthly_workout_counts(
    db: AsyncSession,
    today: date,
    tz: tzinfo,
    min_exercises: int = 1,
) -> dict[str, int]:
    """
    Workouts per user in today's calendar month.
    A log counts only if it lists at least ``min_exercises`` exercises.
    """
    start, end = month_bounds(today, tz)
    result = await db.execute(
        select(WorkoutLog.user_id, WorkoutLog.exercises).where(
            WorkoutLog.date >= start,
            WorkoutLog.date < end,
        )
        .order_by(WorkoutLog.date)
    )
    counts: Counter[str] = Counter()
    for row in result.all():
        n = count_exercises(row.exercises)
        if n is None:
            logger.warning("Skipping workout log for %s: unreadable exercises payload", row.user_id)
            continue
        if n >= min_exercises:
            counts[row.user_id] += 1
    return dict(counts)


async def fetch_user_details(db: AsyncSession, user_ids: Collection[str]) -> dict[str, dict[str, Any]]:
    """username / email / inspiration_quote per user id. Unknown ids are absent."""
    if not user_ids:
        return {}
    result = await db.execute(
        select(User.id, User.username, User.email, UserSettings.inspiration_quote)
        .outerjoin(UserSettings, UserSettings.user_id == User.id)
        .where(User.id.in_(list(user_ids)))
    )
    return {
        row.id: {
            "username": row.username,
            "email": row.email,
            "inspiration_quote": row.inspiration_quote,
        }
        for row in result.all()
    }


def _streak_options(settings: Settings) -> dict[str, Any]:
    return {
        "tz": settings.tzinfo,
        "min_workouts": settings.streak_min_workouts_per_week,
        "exact_iso_weeks": settings.streak_exact_iso_weeks,
    }


async def load_streaks(
    db: AsyncSession,
    settings: Settings,
    today: date,
    user_ids: Collection[str] | None = None,
) -> dict[str, tuple[StreakResult, date | None]]:
    """(streaks, last workout day) per user that has at least one workout log."""
    options = _streak_options(settings)
    dates_by_user = await fetch_workout_dates(db, user_ids)
    return {
        user_id: (
            calculate_streaks(dates, today=today, **options),
            latest_workout_date(dates, settings.tzinfo),
        )
        for user_id, dates in dates_by_user.items()
    }


async def load_leaderboard(db: AsyncSession, settings: Settings, today: date) -> list[LeaderboardEntry]:
    """This month's ranked leaderboard. Users without a users row are left out."""
    monthly_counts = await fetch_monthly_workout_counts(
        db, today, settings.tzinfo, min_exercises=settings.leaderboard_min_exercises
    )
    if not monthly_counts:
        return []

    user_ids = list(monthly_counts)
    details = await fetch_user_details(db, user_ids)
    dates_by_user = await fetch_workout_dates(db, user_ids)
    return leaderboard_from_counts(
        monthly_counts,
        dates_by_user,
        details_by_user=details,
        today=today,
        **_streak_options(settings),
    )
