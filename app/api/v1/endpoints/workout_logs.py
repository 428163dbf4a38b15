"""Workout log endpoints: record, list and delete completed workouts."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import DEFAULT_LOG_PAGE_SIZE, MAX_LOG_PAGE_SIZE
from app.db.session import get_db
from app.models.user import User
from app.models.workout_log import WorkoutLog
from app.schemas.workout_log import WorkoutLogCreate, WorkoutLogRead

router = APIRouter()


@router.get("", response_model=list[WorkoutLogRead])
async def list_workout_logs(
    user_id: str,
    program_id: str | None = None,
    day_id: str | None = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_LOG_PAGE_SIZE, ge=1, le=MAX_LOG_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
):
    """A user's workout logs, newest first, optionally for one program (and day)."""
    stmt = select(WorkoutLog).where(WorkoutLog.user_id == user_id)
    if program_id:
        stmt = stmt.where(WorkoutLog.program_id == program_id)
    if day_id:
        stmt = stmt.where(WorkoutLog.day_id == day_id)
    stmt = stmt.order_by(WorkoutLog.date.desc()).offset(skip).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


@router.post("", response_model=WorkoutLogRead, status_code=201)
async def create_workout_log(
    payload: WorkoutLogCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record a completed workout. Dates are stored in UTC (naive input is taken as UTC)."""
    user = await db.get(User, payload.user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    logged_at = payload.date or datetime.now(timezone.utc)
    if logged_at.tzinfo is None:
        logged_at = logged_at.replace(tzinfo=timezone.utc)
    try:
        logged_at = logged_at.astimezone(timezone.utc)
    except OverflowError:
        raise HTTPException(status_code=422, detail="Workout date out of range")
    log = WorkoutLog(
        user_id=payload.user_id,
        program_id=payload.program_id,
        day_id=payload.day_id,
        date=logged_at,
        exercises=payload.exercises,
        notes=payload.notes,
    )
    db.add(log)
    await db.flush()
    await db.refresh(log)
    return log


@router.delete("/{log_id}", status_code=204)
async def delete_workout_log(
    log_id: str,
    user_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Delete one of the user's workout logs."""
    result = await db.execute(
        select(WorkoutLog).where(WorkoutLog.id == log_id, WorkoutLog.user_id == user_id)
    )
    log = result.scalar_one_or_none()
    if not log:
        raise HTTPException(status_code=404, detail="Workout log not found")
    await db.delete(log)
    return None
