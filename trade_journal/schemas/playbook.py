"""Pydantic schemas for Playbook API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from trade_journal.utils.constants import NO_STRATEGY_LABEL


class PlaybookCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    account_id: str | None = None
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("name")
    @classmethod
    def _validate_name(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        if text == NO_STRATEGY_LABEL:
            raise ValueError(f"'{NO_STRATEGY_LABEL}' is reserved")
        return text


class PlaybookRead(BaseModel):
    id: str
    account_id: str | None
    name: str
    description: str | None
    created_at: datetime

    model_config = {"from_attributes": True}
