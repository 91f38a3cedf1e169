"""Pydantic schemas for Trade API."""

from datetime import date, datetime, time
import re

from pydantic import BaseModel, Field, field_validator, model_validator

from trade_journal.utils.constants import VALID_OUTCOMES, VALID_TRADE_TYPES

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def _check_choice(value: str, allowed: list[str]) -> str:
    if value not in allowed:
        raise ValueError(f"must be one of: {', '.join(allowed)}")
    return value


def _check_time(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if not _TIME_RE.fullmatch(text):
        raise ValueError("must be HH:MM or HH:MM:SS")
    return text


def _trim_label(value: str | None) -> str | None:
    if value is None:
        return None
    text = value.strip()
    return text or None


class TradeCreate(BaseModel):
    account_id: str = Field(min_length=1)
    symbol: str = Field(min_length=1, max_length=32)
    type: str = "Long"
    strategy: str | None = Field(default=None, max_length=120)
    setup: str | None = Field(default=None, max_length=120)
    entry_price: float = Field(gt=0)
    exit_price: float | None = Field(default=None, gt=0)
    stop_loss: float | None = Field(default=None, ge=0)
    take_profit: float | None = Field(default=None, ge=0)
    lot: float = Field(gt=0)
    pnl: float | None = None
    commission: float | None = None
    swap: float | None = None
    outcome: str = "pending"
    r_multiple: float | None = None
    entry_date: date
    entry_time: str | None = None
    exit_date: date | None = None
    exit_time: str | None = None

    @field_validator("symbol")
    @classmethod
    def _trim_symbol(cls, value: str) -> str:
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("strategy", "setup")
    @classmethod
    def _trim_labels(cls, value: str | None) -> str | None:
        return _trim_label(value)

    @field_validator("type")
    @classmethod
    def _validate_type(cls, value: str) -> str:
        return _check_choice(value, VALID_TRADE_TYPES)

    @field_validator("outcome")
    @classmethod
    def _validate_outcome(cls, value: str) -> str:
        return _check_choice(value, VALID_OUTCOMES)

    @field_validator("entry_time", "exit_time")
    @classmethod
    def _validate_time(cls, value: str | None) -> str | None:
        return _check_time(value)

    @model_validator(mode="after")
    def _validate_exit(self):
        if self.exit_date is not None and self.exit_date < self.entry_date:
            raise ValueError("exit_date must not be before entry_date")
        if (
            self.exit_date == self.entry_date
            and self.entry_time is not None
            and self.exit_time is not None
            and time.fromisoformat(self.exit_time) < time.fromisoformat(self.entry_time)
        ):
            raise ValueError("exit_time must not be before entry_time on the same day")
        if self.exit_time is not None and self.exit_date is None:
            raise ValueError("exit_time requires exit_date")
        return self


class TradeUpdate(BaseModel):
    symbol: str | None = Field(default=None, min_length=1, max_length=32)
    type: str | None = None
    strategy: str | None = Field(default=None, max_length=120)
    setup: str | None = Field(default=None, max_length=120)
    entry_price: float | None = Field(default=None, gt=0)
    exit_price: float | None = Field(default=None, gt=0)
    stop_loss: float | None = Field(default=None, ge=0)
    take_profit: float | None = Field(default=None, ge=0)
    lot: float | None = Field(default=None, gt=0)
    pnl: float | None = None
    commission: float | None = None
    swap: float | None = None
    outcome: str | None = None
    r_multiple: float | None = None
    entry_date: date | None = None
    entry_time: str | None = None
    exit_date: date | None = None
    exit_time: str | None = None

    @field_validator("symbol")
    @classmethod
    def _trim_optional_symbol(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip().upper()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("strategy", "setup")
    @classmethod
    def _trim_optional_labels(cls, value: str | None) -> str | None:
        return _trim_label(value)

    @field_validator("type")
    @classmethod
    def _validate_optional_type(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_choice(value, VALID_TRADE_TYPES)

    @field_validator("outcome")
    @classmethod
    def _validate_optional_outcome(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _check_choice(value, VALID_OUTCOMES)

    @field_validator("entry_time", "exit_time")
    @classmethod
    def _validate_optional_time(cls, value: str | None) -> str | None:
        return _check_time(value)


class TradeRead(BaseModel):
    id: str
    account_id: str
    user_id: str
    symbol: str
    type: str
    strategy: str | None
    setup: str | None
    entry_price: float
    exit_price: float | None
    stop_loss: float | None
    take_profit: float | None
    lot: float
    pnl: float | None
    commission: float | None
    swap: float | None
    outcome: str
    r_multiple: float | None
    entry_date: date
    entry_time: str | None
    exit_date: date | None
    exit_time: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
