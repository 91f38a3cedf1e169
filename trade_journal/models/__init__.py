"""Database models."""

from trade_journal.models.user import User
from trade_journal.models.account import Account
from trade_journal.models.playbook import Playbook
from trade_journal.models.trade import Trade

__all__ = [
    "User",
    "Account",
    "Playbook",
    "Trade",
]
