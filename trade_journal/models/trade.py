"""Trade model: one journaled trade, owned by a user and an account."""

from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import Index
from sqlmodel import SQLModel, Field


class Trade(SQLModel, table=True):
    __tablename__ = "trade"
    __table_args__ = (
        Index("ix_trade_account_user_entry", "account_id", "user_id", "entry_date"),
    )

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    account_id: str = Field(foreign_key="account.id", index=True)
    user_id: str = Field(foreign_key="user.id", index=True)

    symbol: str
    type: str  # "Long" or "Short"
    strategy: str | None = None  # playbook name
    setup: str | None = None

    entry_price: float
    exit_price: float | None = None  # open trades have no exit
    stop_loss: float | None = None
    take_profit: float | None = None
    lot: float
    pnl: float | None = None
    commission: float | None = None
    swap: float | None = None

    outcome: str = "pending"  # "win", "loss", "breakeven", "pending"
    r_multiple: float | None = None

    entry_date: date
    entry_time: str | None = None  # "HH:MM" or "HH:MM:SS"
    exit_date: date | None = None
    exit_time: str | None = None

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
