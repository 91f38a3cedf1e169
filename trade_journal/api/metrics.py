"""Metrics API: dashboard, advanced and per-playbook analytics for one account.

An unknown account or an account without trades yields zero-valued metrics,
not a 404: the store only ever returns the current user's rows.
"""

import logging
from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from trade_journal.config import settings
from trade_journal.database import get_session
from trade_journal.models.user import User
from trade_journal.api.deps import get_current_user
from trade_journal.services import metrics
from trade_journal.services.trade_store import (
    TradeFilters,
    TradeStoreError,
    fetch_initial_balance,
    fetch_playbooks,
    fetch_trades,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/metrics", tags=["metrics"])


def trade_filters(
    symbol: str | None = None,
    date_from: date | None = None,
    date_to: date | None = None,
) -> TradeFilters:
    return TradeFilters(
        symbol=symbol.upper() if symbol else None,
        date_from=date_from,
        date_to=date_to,
    )


def _load_trades(session: Session, account_id: str, user: User, filters: TradeFilters):
    try:
        return fetch_trades(session, account_id, user.id, filters)
    except TradeStoreError as e:
        logger.warning(f"Metrics unavailable for account {account_id}: {e}")
        raise HTTPException(status_code=503, detail="Unable to load metrics")


def _load_initial_balance(session: Session, account_id: str, user: User) -> float:
    try:
        return fetch_initial_balance(session, account_id, user.id)
    except TradeStoreError as e:
        logger.warning(f"Metrics unavailable for account {account_id}: {e}")
        raise HTTPException(status_code=503, detail="Unable to load metrics")


@router.get("/{account_id}/dashboard", response_model=metrics.DashboardMetrics)
def dashboard_metrics(
    account_id: str,
    filters: TradeFilters = Depends(trade_filters),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Counts, win rate and total P&L."""
    trades = _load_trades(session, account_id, user, filters)
    return metrics.compute_dashboard_metrics(trades)


@router.get("/{account_id}/advanced", response_model=metrics.AdvancedMetrics)
def advanced_metrics(
    account_id: str,
    filters: TradeFilters = Depends(trade_filters),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Sharpe-like ratio, drawdown estimate, streaks and profit factor."""
    trades = _load_trades(session, account_id, user, filters)
    initial_balance = _load_initial_balance(session, account_id, user)
    return metrics.compute_advanced_metrics(trades, initial_balance)


@router.get("/{account_id}/playbooks", response_model=list[metrics.PlaybookStats])
def playbook_metrics(
    account_id: str,
    filters: TradeFilters = Depends(trade_filters),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Per-strategy breakdown; the "No Strategy" bucket comes last."""
    trades = _load_trades(session, account_id, user, filters)
    try:
        playbooks = fetch_playbooks(session, user.id, account_id)
    except TradeStoreError as e:
        logger.warning(f"Playbook metrics unavailable for account {account_id}: {e}")
        raise HTTPException(status_code=503, detail="Unable to load metrics")
    return metrics.compute_playbook_stats(trades, playbooks)


@router.get("/{account_id}/weekdays", response_model=dict[str, metrics.WeekdayStats])
def weekday_metrics(
    account_id: str,
    filters: TradeFilters = Depends(trade_filters),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    trades = _load_trades(session, account_id, user, filters)
    return metrics.compute_weekday_stats(trades)


@router.get("/{account_id}/hold-time", response_model=metrics.HoldTimeStats)
def hold_time_metrics(
    account_id: str,
    filters: TradeFilters = Depends(trade_filters),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    trades = _load_trades(session, account_id, user, filters)
    return metrics.compute_hold_time(trades)


@router.get("/{account_id}/summary")
def summary_metrics(
    account_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Recent activity plus P&L against the starting balance, over all trades."""
    trades = _load_trades(session, account_id, user, TradeFilters())
    initial_balance = _load_initial_balance(session, account_id, user)
    return {
        "activity": metrics.compute_activity_summary(trades, days=settings.recent_activity_days),
        "balance": metrics.compute_balance_summary(trades, initial_balance),
    }
