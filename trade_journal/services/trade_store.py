"""Trade Store: reads the rows the analytics engine works on.

Every trade query is scoped to one (account_id, user_id) pair so a user can
never read another user's trades, even with a valid account id. Storage
faults are wrapped in TradeStoreError and never retried here.
"""

import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select, or_

from trade_journal.models.account import Account
from trade_journal.models.playbook import Playbook
from trade_journal.models.trade import Trade

logger = logging.getLogger(__name__)


class TradeStoreError(Exception):
    """The store could not supply trade data."""


@dataclass
class TradeFilters:
    symbol: str | None = None
    date_from: date | None = None
    date_to: date | None = None


def fetch_trades(
    session: Session,
    account_id: str,
    user_id: str,
    filters: TradeFilters | None = None,
) -> list[Trade]:
    """All trades of one account owned by one user, most recent first."""
    stmt = select(Trade).where(Trade.account_id == account_id, Trade.user_id == user_id)
    if filters is not None:
        if filters.symbol:
            stmt = stmt.where(Trade.symbol == filters.symbol)
        if filters.date_from is not None:
            stmt = stmt.where(Trade.entry_date >= filters.date_from)
        if filters.date_to is not None:
            stmt = stmt.where(Trade.entry_date <= filters.date_to)
    stmt = stmt.order_by(Trade.entry_date.desc(), Trade.entry_time.desc(), Trade.id.desc())

    try:
        trades = list(session.exec(stmt).all())
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch trades for account {account_id}: {e}")
        raise TradeStoreError("Failed to fetch trades") from e

    logger.debug(f"Fetched {len(trades)} trades for account {account_id}")
    return trades


def fetch_initial_balance(session: Session, account_id: str, user_id: str) -> float:
    """Starting balance of the account, 0 when the account is unknown."""
    try:
        account = session.exec(
            select(Account).where(Account.id == account_id, Account.user_id == user_id)
        ).first()
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch account {account_id}: {e}")
        raise TradeStoreError("Failed to fetch account") from e
    return account.initial_balance if account else 0.0


def fetch_playbooks(session: Session, user_id: str, account_id: str | None = None) -> list[Playbook]:
    """The user's playbooks; with an account, those scoped to it or to all accounts."""
    stmt = select(Playbook).where(Playbook.user_id == user_id)
    if account_id is not None:
        stmt = stmt.where(or_(Playbook.account_id == account_id, Playbook.account_id == None))  # noqa: E711
    stmt = stmt.order_by(Playbook.name)

    try:
        return list(session.exec(stmt).all())
    except SQLAlchemyError as e:
        logger.error(f"Failed to fetch playbooks for user {user_id}: {e}")
        raise TradeStoreError("Failed to fetch playbooks") from e
