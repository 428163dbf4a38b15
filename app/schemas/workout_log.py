"""WorkoutLog schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class WorkoutLogBase(BaseModel):
    program_id: str | None = None
    day_id: str | None = None
    exercises: list[dict[str, Any]] = Field(default_factory=list, description="Exercises performed")
    notes: str | None = None


class WorkoutLogCreate(WorkoutLogBase):
    user_id: str = Field(..., min_length=1)
    date: datetime | None = Field(None, description="When the workout was completed; defaults to now")


class WorkoutLogRead(WorkoutLogBase):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: str
    date: datetime
    created_at: datetime | None = None
