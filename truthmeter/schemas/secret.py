"""Pydantic schemas for secrets, votes and feed responses.

Wire names keep the camelCase tally fields clients already consume
(``truthVotes``/``lieVotes``); Python code uses the snake_case attributes.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class SecretView(BaseModel):
    """A secret joined with its author's public display attributes."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int = Field(..., description="Secret identifier.")
    category: str = Field(..., description="Catalog category of the secret.")
    content: str = Field(..., description="Secret text (2-2000 characters).")
    truth_votes: int = Field(0, ge=0, alias="truthVotes", description="Number of 'truth' votes.")
    lie_votes: int = Field(0, ge=0, alias="lieVotes", description="Number of 'lie' votes.")
    created_at: datetime | None = Field(None, description="When the secret was posted.")
    nickname: str = Field(..., description="Author display nickname.")
    gender: str = Field(..., description="Author gender: male, female or other.")


class VoteTally(BaseModel):
    """Current truth-meter counts of one secret."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    truth_votes: int = Field(..., ge=0, alias="truthVotes")
    lie_votes: int = Field(..., ge=0, alias="lieVotes")

    @property
    def total(self) -> int:
        return self.truth_votes + self.lie_votes


class CreateSecretRequest(BaseModel):
    category: str = Field(..., description="One of the categories from GET /v1/categories.")
    content: str = Field(..., description="Secret text; trimmed length must be 2-2000 characters.")


class CreateSecretResponse(BaseModel):
    id: int
    message: str = "Secret shared."


class VoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vote_type: str = Field(..., alias="voteType", description="'truth' or 'lie'.")


class MessageResponse(BaseModel):
    message: str
