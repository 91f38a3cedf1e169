"""Account model: a trading account whose trades are journaled."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlmodel import SQLModel, Field


class Account(SQLModel, table=True):
    __tablename__ = "account"

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    name: str
    currency: str = "USD"
    initial_balance: float = 0.0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
