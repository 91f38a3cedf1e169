"""Pydantic schemas for Account API."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator


class AccountCreate(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    currency: str = Field(default="USD", min_length=3, max_length=3)
    initial_balance: float = Field(default=0.0, ge=0)

    @field_validator("name")
    @classmethod
    def _trim_name(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("currency")
    @classmethod
    def _upper_currency(cls, value: str) -> str:
        return value.strip().upper()


class AccountRead(BaseModel):
    id: str
    name: str
    currency: str
    initial_balance: float
    created_at: datetime

    model_config = {"from_attributes": True}
