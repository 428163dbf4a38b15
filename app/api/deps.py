"""Shared request dependencies."""

from datetime import date, datetime

from fastapi import Depends

from app.core.config import Settings, get_settings


def get_today(settings: Settings = Depends(get_settings)) -> date:
    """Today's date in the configured timezone (the 'now' for streaks and the leaderboard)."""
    return datetime.now(settings.tzinfo).date()
