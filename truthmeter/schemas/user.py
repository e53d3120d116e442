"""Pydantic schemas for user listings."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class UserView(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    nickname: str = Field(..., description="Display nickname as entered at registration.")
    gender: str
    is_admin: bool = Field(False, alias="isAdmin")


class UserStats(UserView):
    """User row for the admin listing, with the number of secrets they posted."""

    secret_count: int = Field(0, ge=0, alias="secretCount")
