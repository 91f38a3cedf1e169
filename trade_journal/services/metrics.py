"""Stateless trade performance analytics.

All functions are pure computation over an in-memory collection of trades:
no I/O, no database access, no caching. A trade is any object exposing the
attributes of ``trade_journal.models.Trade`` (SQLModel rows in the service,
plain namespaces in tests).

Values are carried at full precision internally and rounded to 2 decimals
only when a result is built, so derived ratios do not compound rounding error.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone
from itertools import groupby
from operator import attrgetter
from typing import Any

import numpy as np

from trade_journal.utils.constants import (
    NO_STRATEGY_LABEL,
    OUTCOME_BREAKEVEN,
    OUTCOME_LOSS,
    OUTCOME_WIN,
    PROFIT_FACTOR_SENTINEL,
    STREAK_NONE,
    WEEKDAY_KEYS,
)

# Standard deviations below this are float noise from identical P&L values
_STD_EPSILON = 1e-9


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass
class DashboardMetrics:
    """Counts, win rate and total P&L for one account."""
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    win_rate: float = 0.0  # percent of decisive (win + loss) trades
    total_pnl: float = 0.0


@dataclass
class StreakStats:
    current: int = 0
    current_type: str = STREAK_NONE  # outcome of the most recent run
    max_win: int = 0
    max_loss: int = 0


@dataclass
class AdvancedMetrics:
    """Risk and consistency metrics for one account.

    ``sharpe_ratio`` is a per-trade signal-to-noise ratio (mean P&L over its
    population standard deviation). It is not annualized and subtracts no
    risk-free rate.

    ``max_drawdown`` is approximated by the single largest losing trade, not
    by walking an equity curve, so it understates drawdowns made of several
    consecutive losses.
    """
    avg_pnl: float = 0.0
    pnl_std_dev: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0
    calmar_ratio: float = 0.0
    current_streak: int = 0
    current_streak_type: str = STREAK_NONE
    max_win_streak: int = 0
    max_loss_streak: int = 0
    profit_factor: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0


@dataclass
class PlaybookStats:
    """Performance of the trades grouped under one strategy label."""
    name: str
    id: str | None = None  # None for strategies without a saved playbook
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    net_pnl: float = 0.0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    avg_win: float = 0.0
    avg_loss: float = 0.0
    expectancy: float = 0.0
    avg_rr: float = 0.0


@dataclass
class WeekdayStats:
    trades: int = 0
    wins: int = 0
    pnl: float = 0.0


@dataclass
class HoldTimeStats:
    """Average minutes between entry and exit."""
    avg_winner_minutes: float = 0.0
    avg_loser_minutes: float = 0.0
    avg_all_minutes: float = 0.0
    winner_count: int = 0
    loser_count: int = 0


@dataclass
class ActivitySummary:
    total_trades: int = 0
    wins: int = 0
    win_rate: float = 0.0
    recent_trades_count: int = 0
    recent_days: int = 7
    last_trade_date: date | None = None


@dataclass
class BalanceSummary:
    initial_balance: float = 0.0
    pnl: float = 0.0
    pnl_percent: float = 0.0
    current_balance: float = 0.0
    is_profit: bool = True


@dataclass
class _OutcomeTotals:
    """Unrounded per-outcome aggregates shared by several metrics."""
    total_trades: int = 0
    wins: int = 0
    losses: int = 0
    breakeven: int = 0
    total_pnl: float = 0.0
    sum_wins: float = 0.0
    sum_losses: float = 0.0  # absolute value
    win_pnls: list[float] = field(default_factory=list)
    loss_pnls: list[float] = field(default_factory=list)

    @property
    def win_rate(self) -> float:
        decisive = self.wins + self.losses
        return self.wins / decisive * 100 if decisive > 0 else 0.0

    @property
    def profit_factor(self) -> float:
        if self.sum_losses > 0:
            return self.sum_wins / self.sum_losses
        if self.sum_wins > 0:
            return PROFIT_FACTOR_SENTINEL
        return 0.0

    @property
    def avg_win(self) -> float:
        return self.sum_wins / self.wins if self.wins > 0 else 0.0

    @property
    def avg_loss(self) -> float:
        return self.sum_losses / self.losses if self.losses > 0 else 0.0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _round(value: float) -> float:
    return round(float(value), 2)


def _as_date(value: date | datetime | str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _parse_time(value: str | None) -> time:
    """Parse "HH:MM[:SS]"; a missing time is the start of the day."""
    if not value or not value.strip():
        return time.min
    parts = [int(float(p)) for p in value.strip().split(":")[:3]]
    return time(*parts)


def _totals(trades: Iterable[Any]) -> _OutcomeTotals:
    totals = _OutcomeTotals()
    for trade in trades:
        totals.total_trades += 1
        pnl = trade.pnl or 0.0
        totals.total_pnl += pnl
        if trade.outcome == OUTCOME_WIN:
            totals.wins += 1
            totals.sum_wins += pnl
            if trade.pnl is not None:
                totals.win_pnls.append(trade.pnl)
        elif trade.outcome == OUTCOME_LOSS:
            totals.losses += 1
            totals.sum_losses += pnl
            if trade.pnl is not None:
                totals.loss_pnls.append(trade.pnl)
        elif trade.outcome == OUTCOME_BREAKEVEN:
            totals.breakeven += 1
    totals.sum_losses = abs(totals.sum_losses)
    return totals


def streak_order(trades: Iterable[Any]) -> list[Any]:
    """Most recent trade first: entry date, then entry time, then id, all descending."""
    return sorted(
        trades,
        key=lambda t: (_as_date(t.entry_date), _parse_time(t.entry_time), str(t.id or "")),
        reverse=True,
    )


# ---------------------------------------------------------------------------
# Core metrics
# ---------------------------------------------------------------------------

def compute_dashboard_metrics(trades: Sequence[Any]) -> DashboardMetrics:
    """Trade counts per outcome, decisive win rate and total P&L."""
    totals = _totals(trades)
    return DashboardMetrics(
        total_trades=totals.total_trades,
        wins=totals.wins,
        losses=totals.losses,
        breakeven=totals.breakeven,
        win_rate=_round(totals.win_rate),
        total_pnl=_round(totals.total_pnl),
    )


def compute_streaks(trades: Iterable[Any]) -> StreakStats:
    """Runs of equal outcomes over the trades ordered most recent first.

    The first run is the current streak, whatever its outcome. Only runs of
    wins and losses count toward the maximums.
    """
    stats = StreakStats()
    runs = groupby(streak_order(trades), key=attrgetter("outcome"))
    for index, (outcome, run) in enumerate(runs):
        length = sum(1 for _ in run)
        if index == 0:
            stats.current = length
            stats.current_type = outcome or STREAK_NONE
        if outcome == OUTCOME_WIN:
            stats.max_win = max(stats.max_win, length)
        elif outcome == OUTCOME_LOSS:
            stats.max_loss = max(stats.max_loss, length)
    return stats


def compute_advanced_metrics(
    trades: Sequence[Any],
    initial_balance: float | None = 0.0,
) -> AdvancedMetrics:
    """P&L distribution, profit factor, drawdown estimate and streaks."""
    totals = _totals(trades)

    pnls = np.array([t.pnl for t in trades if t.pnl is not None], dtype=float)
    avg_pnl = float(np.mean(pnls)) if pnls.size else 0.0
    pnl_std = float(np.std(pnls)) if pnls.size else 0.0  # population (ddof=0)
    sharpe = avg_pnl / pnl_std if pnl_std > _STD_EPSILON else 0.0

    largest_win = max((p for p in totals.win_pnls if p > 0), default=0.0)
    largest_loss = abs(min((p for p in totals.loss_pnls if p < 0), default=0.0))

    max_drawdown = largest_loss
    balance = initial_balance or 0.0
    max_drawdown_pct = max_drawdown / balance * 100 if balance > 0 else 0.0
    calmar = totals.total_pnl / max_drawdown if max_drawdown > 0 else 0.0

    streaks = compute_streaks(trades)

    return AdvancedMetrics(
        avg_pnl=_round(avg_pnl),
        pnl_std_dev=_round(pnl_std),
        sharpe_ratio=_round(sharpe),
        max_drawdown=_round(max_drawdown),
        max_drawdown_percent=_round(max_drawdown_pct),
        calmar_ratio=_round(calmar),
        current_streak=streaks.current,
        current_streak_type=streaks.current_type,
        max_win_streak=streaks.max_win,
        max_loss_streak=streaks.max_loss,
        profit_factor=_round(totals.profit_factor),
        avg_win=_round(totals.avg_win),
        avg_loss=_round(totals.avg_loss),
        largest_win=_round(largest_win),
        largest_loss=_round(largest_loss),
    )


def _strategy_label(trade: Any) -> str:
    strategy = trade.strategy
    if strategy is None or not strategy.strip():
        return NO_STRATEGY_LABEL
    return strategy


def _playbook_stats(name: str, playbook_id: str | None, trades: list[Any]) -> PlaybookStats:
    totals = _totals(trades)
    win_rate = totals.win_rate
    expectancy = 0.0
    if totals.total_trades > 0:
        expectancy = (win_rate / 100) * totals.avg_win - (1 - win_rate / 100) * totals.avg_loss
    r_multiples = [t.r_multiple for t in trades if t.r_multiple is not None]
    avg_rr = float(np.mean(r_multiples)) if r_multiples else 0.0

    return PlaybookStats(
        name=name,
        id=playbook_id,
        total_trades=totals.total_trades,
        wins=totals.wins,
        losses=totals.losses,
        breakeven=totals.breakeven,
        net_pnl=_round(totals.total_pnl),
        win_rate=_round(win_rate),
        profit_factor=_round(totals.profit_factor),
        avg_win=_round(totals.avg_win),
        avg_loss=_round(totals.avg_loss),
        expectancy=_round(expectancy),
        avg_rr=_round(avg_rr),
    )


def compute_playbook_stats(
    trades: Sequence[Any],
    playbooks: Iterable[Any] = (),
) -> list[PlaybookStats]:
    """Per-strategy breakdown of the trades.

    ``playbooks`` holds the known playbooks, either as names or as objects
    with ``name`` and ``id``. Every known playbook gets a bucket even without
    trades. Strategy labels missing from the list get their own bucket, and
    trades with no strategy fall into the "No Strategy" bucket, which always
    sorts last. The rest are ordered by net P&L, highest first.
    """
    buckets: dict[str, list[Any]] = {}
    playbook_ids: dict[str, str | None] = {}
    for playbook in playbooks:
        if isinstance(playbook, str):
            name, playbook_id = playbook, None
        else:
            name, playbook_id = playbook.name, playbook.id
        buckets.setdefault(name, [])
        playbook_ids.setdefault(name, playbook_id)

    for trade in trades:
        buckets.setdefault(_strategy_label(trade), []).append(trade)

    stats = [
        _playbook_stats(name, playbook_ids.get(name), bucket)
        for name, bucket in buckets.items()
    ]
    named = sorted(
        (s for s in stats if s.name != NO_STRATEGY_LABEL),
        key=lambda s: (-s.net_pnl, s.name),
    )
    unassigned = [s for s in stats if s.name == NO_STRATEGY_LABEL]
    return named + unassigned


# ---------------------------------------------------------------------------
# Secondary breakdowns
# ---------------------------------------------------------------------------

def compute_weekday_stats(trades: Iterable[Any]) -> dict[str, WeekdayStats]:
    """Trades, wins and P&L per entry weekday, keyed "0" (Sunday) to "6"."""
    raw = {key: WeekdayStats() for key in WEEKDAY_KEYS}
    for trade in trades:
        key = str((_as_date(trade.entry_date).weekday() + 1) % 7)
        day = raw[key]
        day.trades += 1
        if trade.outcome == OUTCOME_WIN:
            day.wins += 1
        day.pnl += trade.pnl or 0.0
    for day in raw.values():
        day.pnl = _round(day.pnl)
    return raw


def _hold_minutes(trade: Any) -> float:
    entry = datetime.combine(_as_date(trade.entry_date), _parse_time(trade.entry_time))
    exit_ = datetime.combine(_as_date(trade.exit_date), _parse_time(trade.exit_time))
    return (exit_ - entry).total_seconds() / 60


def compute_hold_time(trades: Iterable[Any]) -> HoldTimeStats:
    """Average holding time of closed trades that record an exit date and time."""
    closed = [t for t in trades if t.exit_date and t.exit_time]
    winners = [_hold_minutes(t) for t in closed if t.outcome == OUTCOME_WIN]
    losers = [_hold_minutes(t) for t in closed if t.outcome == OUTCOME_LOSS]
    everything = [_hold_minutes(t) for t in closed]

    return HoldTimeStats(
        avg_winner_minutes=_round(np.mean(winners)) if winners else 0.0,
        avg_loser_minutes=_round(np.mean(losers)) if losers else 0.0,
        avg_all_minutes=_round(np.mean(everything)) if everything else 0.0,
        winner_count=len(winners),
        loser_count=len(losers),
    )


def compute_activity_summary(
    trades: Sequence[Any],
    now: datetime | None = None,
    days: int = 7,
) -> ActivitySummary:
    """Overall totals plus how many trades were entered in the last ``days`` days.

    This is the only wall-clock dependent computation; pass ``now`` to pin it.
    """
    now = now or datetime.now(timezone.utc)
    cutoff = (now - timedelta(days=days)).date()
    totals = _totals(trades)
    entry_dates = [_as_date(t.entry_date) for t in trades]

    return ActivitySummary(
        total_trades=totals.total_trades,
        wins=totals.wins,
        win_rate=_round(totals.win_rate),
        recent_trades_count=sum(1 for d in entry_dates if d >= cutoff),
        recent_days=days,
        last_trade_date=max(entry_dates, default=None),
    )


def compute_balance_summary(
    trades: Iterable[Any],
    initial_balance: float | None = 0.0,
) -> BalanceSummary:
    """Realized P&L against the account's starting balance."""
    balance = initial_balance or 0.0
    pnl = sum((t.pnl or 0.0) for t in trades)
    pnl_pct = pnl / balance * 100 if balance > 0 else 0.0
    return BalanceSummary(
        initial_balance=_round(balance),
        pnl=_round(pnl),
        pnl_percent=_round(pnl_pct),
        current_balance=_round(balance + pnl),
        is_profit=pnl >= 0,
    )
