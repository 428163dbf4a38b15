"""User settings schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class UserSettingsUpdate(BaseModel):
    inspiration_quote: str | None = Field(None, max_length=500)


class UserSettingsRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    inspiration_quote: str | None = None
    updated_at: datetime | None = None
