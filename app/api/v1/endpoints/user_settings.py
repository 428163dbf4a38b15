"""Per-user settings (leaderboard inspiration quote)."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.session import get_db
from app.models.user import User, UserSettings
from app.schemas.user import UserSettingsRead, UserSettingsUpdate

router = APIRouter()


@router.get("/{user_id}", response_model=UserSettingsRead)
async def get_user_settings(user_id: str, db: AsyncSession = Depends(get_db)):
    """Settings for a user; defaults when none were saved yet."""
    settings = await db.get(UserSettings, user_id)
    if settings is None:
        return UserSettingsRead(user_id=user_id)
    return settings


@router.put("/{user_id}", response_model=UserSettingsRead)
async def upsert_user_settings(
    user_id: str,
    payload: UserSettingsUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Create or update a user's settings. Session is committed by get_db after this returns."""
    if await db.get(User, user_id) is None:
        raise HTTPException(status_code=404, detail="User not found")

    settings = await db.get(UserSettings, user_id)
    quote = payload.inspiration_quote.strip() if payload.inspiration_quote else None
    if settings:
        settings.inspiration_quote = quote or None
        settings.updated_at = datetime.now(timezone.utc)
    else:
        settings = UserSettings(user_id=user_id, inspiration_quote=quote or None)
        db.add(settings)
    await db.flush()
    await db.refresh(settings)
    return settings
