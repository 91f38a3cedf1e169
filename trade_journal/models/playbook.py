"""Playbook model: a named strategy that trades are grouped under."""

from datetime import datetime, timezone
from uuid import uuid4

from sqlmodel import SQLModel, Field


class Playbook(SQLModel, table=True):
    __tablename__ = "playbook"

    id: str = Field(default_factory=lambda: uuid4().hex, primary_key=True)
    user_id: str = Field(foreign_key="user.id", index=True)
    account_id: str | None = Field(default=None, foreign_key="account.id", index=True)  # None = all accounts
    name: str = Field(index=True)
    description: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
