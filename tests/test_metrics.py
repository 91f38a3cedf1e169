"""Tests for the trade analytics engine: dashboard, advanced, playbook and secondary metrics."""

import json
import math
import random
from dataclasses import asdict, fields
from datetime import date, datetime, timezone
from types import SimpleNamespace

from trade_journal.services.metrics import (
    AdvancedMetrics,
    DashboardMetrics,
    compute_activity_summary,
    compute_advanced_metrics,
    compute_balance_summary,
    compute_dashboard_metrics,
    compute_hold_time,
    compute_playbook_stats,
    compute_streaks,
    compute_weekday_stats,
    streak_order,
)
from trade_journal.utils.constants import NO_STRATEGY_LABEL, PROFIT_FACTOR_SENTINEL

from tests.conftest import make_trade


def _sequence(outcomes: list[str], pnl: float | None = None) -> list[SimpleNamespace]:
    """Trades on consecutive days, given most recent first."""
    n = len(outcomes)
    return [
        make_trade(id=f"t{i}", outcome=outcome, pnl=pnl, entry_date=date(2024, 1, n - i))
        for i, outcome in enumerate(outcomes)
    ]


# ---------------------------------------------------------------------------
# 1. Dashboard metrics
# ---------------------------------------------------------------------------

class TestDashboardMetrics:
    def test_empty_input_is_all_zero(self):
        result = compute_dashboard_metrics([])
        assert result == DashboardMetrics(
            total_trades=0, wins=0, losses=0, breakeven=0, win_rate=0.0, total_pnl=0.0
        )

    def test_win_rate_excludes_breakeven_and_pending(self):
        trades = _sequence(["win", "win", "loss", "breakeven", "pending"])
        result = compute_dashboard_metrics(trades)
        assert result.total_trades == 5
        assert result.wins == 2
        assert result.losses == 1
        assert result.breakeven == 1
        assert result.win_rate == 66.67

    def test_missing_pnl_counts_as_zero(self):
        trades = [
            make_trade(outcome="win", pnl=100.0),
            make_trade(outcome="pending", pnl=None),
            make_trade(outcome="loss", pnl=-40.5),
        ]
        assert compute_dashboard_metrics(trades).total_pnl == 59.5

    def test_outcome_labels_are_case_sensitive(self):
        trades = [make_trade(outcome="Win", pnl=10.0), make_trade(outcome="win", pnl=10.0)]
        result = compute_dashboard_metrics(trades)
        assert result.wins == 1
        assert result.total_trades == 2

    def test_outcome_is_not_inferred_from_pnl(self):
        # fees turned a scratch trade slightly negative; it is still breakeven
        trades = [make_trade(outcome="breakeven", pnl=-2.5)]
        result = compute_dashboard_metrics(trades)
        assert result.breakeven == 1
        assert result.losses == 0
        assert result.win_rate == 0.0

    def test_only_pending_trades(self):
        trades = _sequence(["pending", "pending"], pnl=None)
        result = compute_dashboard_metrics(trades)
        assert result.total_trades == 2
        assert result.win_rate == 0.0
        assert result.total_pnl == 0.0


# ---------------------------------------------------------------------------
# 2. Advanced metrics
# ---------------------------------------------------------------------------

def _mixed_trades() -> list[SimpleNamespace]:
    return [
        make_trade(id="a", outcome="win", pnl=1500.0, entry_date=date(2024, 1, 1)),
        make_trade(id="b", outcome="win", pnl=500.0, entry_date=date(2024, 1, 2)),
        make_trade(id="c", outcome="loss", pnl=-600.0, entry_date=date(2024, 1, 3)),
        make_trade(id="d", outcome="loss", pnl=-400.0, entry_date=date(2024, 1, 4)),
    ]


class TestAdvancedMetrics:
    def test_empty_input_is_all_zero(self):
        result = compute_advanced_metrics([], 10000.0)
        assert result == AdvancedMetrics()
        assert result.current_streak_type == "none"

    def test_profit_factor_normal_case(self):
        result = compute_advanced_metrics(_mixed_trades(), 10000.0)
        assert result.profit_factor == 2.0

    def test_profit_factor_sentinel_without_losses(self):
        trades = [make_trade(outcome="win", pnl=200.0), make_trade(outcome="win", pnl=300.0)]
        result = compute_advanced_metrics(trades)
        assert result.profit_factor == PROFIT_FACTOR_SENTINEL == 999.0
        assert math.isfinite(result.profit_factor)

    def test_profit_factor_zero_without_wins_or_losses(self):
        trades = [make_trade(outcome="breakeven", pnl=0.0)]
        assert compute_advanced_metrics(trades).profit_factor == 0.0

    def test_win_loss_aggregates(self):
        result = compute_advanced_metrics(_mixed_trades(), 10000.0)
        assert result.avg_win == 1000.0
        assert result.avg_loss == 500.0
        assert result.largest_win == 1500.0
        assert result.largest_loss == 600.0

    def test_largest_win_and_loss_ignore_wrong_signed_pnl(self):
        # outcome is authoritative, so a fee-eaten "win" can carry a negative pnl
        trades = [
            make_trade(id="a", outcome="win", pnl=-5.0),
            make_trade(id="b", outcome="loss", pnl=3.0),
        ]
        result = compute_advanced_metrics(trades, 10000.0)
        assert result.largest_win == 0.0
        assert result.largest_loss == 0.0
        assert result.max_drawdown == 0.0

    def test_drawdown_is_largest_single_loss(self):
        result = compute_advanced_metrics(_mixed_trades(), 10000.0)
        # the two losses are consecutive, but the estimate is the worst single trade
        assert result.max_drawdown == 600.0
        assert result.max_drawdown_percent == 6.0
        # total pnl 1000 / drawdown 600
        assert result.calmar_ratio == 1.67

    def test_drawdown_percent_guard_on_zero_balance(self):
        result = compute_advanced_metrics(_mixed_trades(), 0.0)
        assert result.max_drawdown == 600.0
        assert result.max_drawdown_percent == 0.0

    def test_drawdown_percent_guard_on_missing_balance(self):
        assert compute_advanced_metrics(_mixed_trades(), None).max_drawdown_percent == 0.0

    def test_calmar_zero_without_losses(self):
        trades = [make_trade(outcome="win", pnl=100.0)]
        result = compute_advanced_metrics(trades, 1000.0)
        assert result.max_drawdown == 0.0
        assert result.calmar_ratio == 0.0

    def test_mean_and_population_std_dev(self):
        result = compute_advanced_metrics(_mixed_trades(), 10000.0)
        # mean 250; squared deviations sum to 2,770,000 over N=4 -> sqrt(692500)
        assert result.avg_pnl == 250.0
        assert result.pnl_std_dev == 832.17
        assert result.sharpe_ratio == 0.3

    def test_std_dev_divides_by_n(self):
        trades = [make_trade(outcome="win", pnl=10.0), make_trade(outcome="win", pnl=20.0)]
        # sample std would be 7.07
        assert compute_advanced_metrics(trades).pnl_std_dev == 5.0

    def test_null_pnl_excluded_from_distribution(self):
        trades = [
            make_trade(id="a", outcome="win", pnl=100.0),
            make_trade(id="b", outcome="pending", pnl=None),
            make_trade(id="c", outcome="win", pnl=200.0),
        ]
        assert compute_advanced_metrics(trades).avg_pnl == 150.0

    def test_identical_pnl_has_zero_sharpe(self):
        trades = [make_trade(id=str(i), outcome="win", pnl=100.1) for i in range(3)]
        result = compute_advanced_metrics(trades)
        assert result.pnl_std_dev == 0.0
        assert result.sharpe_ratio == 0.0

    def test_every_float_has_at_most_two_decimals(self):
        trades = [
            make_trade(id="a", outcome="win", pnl=33.333, entry_date=date(2024, 1, 1)),
            make_trade(id="b", outcome="loss", pnl=-12.3456, entry_date=date(2024, 1, 2)),
            make_trade(id="c", outcome="win", pnl=66.6667, entry_date=date(2024, 1, 3)),
        ]
        result = compute_advanced_metrics(trades, 777.77)
        for f in fields(result):
            value = getattr(result, f.name)
            if isinstance(value, float):
                assert round(value, 2) == value, f.name
                text = json.dumps(value)
                if "." in text:
                    assert len(text.split(".")[1]) <= 2, f.name

    def test_idempotent(self):
        trades = _mixed_trades()
        first = compute_advanced_metrics(trades, 5000.0)
        second = compute_advanced_metrics(trades, 5000.0)
        assert first == second
        assert asdict(first) == asdict(second)


# ---------------------------------------------------------------------------
# 3. Streaks
# ---------------------------------------------------------------------------

class TestStreaks:
    def test_runs_most_recent_first(self):
        trades = _sequence(["loss", "loss", "win", "win", "win", "loss"])
        random.Random(7).shuffle(trades)
        result = compute_advanced_metrics(trades)
        assert result.current_streak == 2
        assert result.current_streak_type == "loss"
        assert result.max_win_streak == 3
        assert result.max_loss_streak == 2

    def test_no_win_run_means_zero(self):
        streaks = compute_streaks(_sequence(["loss", "breakeven", "loss"]))
        assert streaks.max_win == 0
        assert streaks.max_loss == 1

    def test_current_streak_can_be_breakeven(self):
        streaks = compute_streaks(_sequence(["breakeven", "win", "win"]))
        assert streaks.current == 1
        assert streaks.current_type == "breakeven"
        assert streaks.max_win == 2

    def test_entry_time_orders_same_day_trades(self):
        trades = [
            make_trade(id="a", outcome="loss", entry_date=date(2024, 1, 5), entry_time="09:30"),
            make_trade(id="b", outcome="win", entry_date=date(2024, 1, 5), entry_time="14:00"),
        ]
        assert [t.id for t in streak_order(trades)] == ["b", "a"]
        assert compute_streaks(trades).current_type == "win"

    def test_missing_entry_time_sorts_as_start_of_day(self):
        trades = [
            make_trade(id="a", outcome="win", entry_date=date(2024, 1, 5), entry_time=None),
            make_trade(id="b", outcome="loss", entry_date=date(2024, 1, 5), entry_time="00:05"),
        ]
        assert [t.id for t in streak_order(trades)] == ["b", "a"]

    def test_identical_timestamps_break_ties_by_id(self):
        trades = [
            make_trade(id="a", outcome="win", entry_date=date(2024, 1, 5), entry_time="10:00"),
            make_trade(id="b", outcome="loss", entry_date=date(2024, 1, 5), entry_time="10:00"),
        ]
        forward = compute_streaks(trades)
        backward = compute_streaks(list(reversed(trades)))
        assert forward == backward
        assert forward.current_type == "loss"

    def test_string_dates_are_accepted(self):
        trades = [
            make_trade(id="a", outcome="win", entry_date="2024-01-02"),
            make_trade(id="b", outcome="loss", entry_date="2024-01-01T00:00:00"),
        ]
        assert compute_streaks(trades).current_type == "win"


# ---------------------------------------------------------------------------
# 4. Playbook statistics
# ---------------------------------------------------------------------------

class TestPlaybookStats:
    def test_zero_trade_playbook_is_kept(self):
        trades = [make_trade(outcome="win", pnl=100.0, strategy="Breakout")]
        stats = compute_playbook_stats(trades, ["Breakout", "Reversal"])
        reversal = next(s for s in stats if s.name == "Reversal")
        assert reversal.total_trades == 0
        assert reversal.net_pnl == 0.0
        assert reversal.win_rate == 0.0
        assert reversal.profit_factor == 0.0
        assert reversal.expectancy == 0.0
        assert reversal.avg_rr == 0.0

    def test_no_strategy_bucket_sorts_last(self):
        trades = [
            make_trade(id="a", outcome="win", pnl=5000.0, strategy=None),
            make_trade(id="b", outcome="win", pnl=100.0, strategy="Breakout"),
            make_trade(id="c", outcome="loss", pnl=-50.0, strategy="Reversal"),
        ]
        stats = compute_playbook_stats(trades, ["Breakout", "Reversal"])
        assert [s.name for s in stats] == ["Breakout", "Reversal", NO_STRATEGY_LABEL]
        assert stats[-1].net_pnl == 5000.0

    def test_named_buckets_descend_by_net_pnl(self):
        trades = [
            make_trade(id="a", outcome="loss", pnl=-20.0, strategy="A"),
            make_trade(id="b", outcome="win", pnl=300.0, strategy="B"),
            make_trade(id="c", outcome="win", pnl=40.0, strategy="C"),
        ]
        stats = compute_playbook_stats(trades, ["A", "B", "C", "D"])
        pnls = [s.net_pnl for s in stats]
        assert [s.name for s in stats] == ["B", "C", "D", "A"]
        assert pnls == sorted(pnls, reverse=True)

    def test_unknown_strategy_gets_its_own_bucket(self):
        playbook = SimpleNamespace(name="Breakout", id="pb-1")
        trades = [
            make_trade(id="a", outcome="win", pnl=10.0, strategy="Breakout"),
            make_trade(id="b", outcome="win", pnl=20.0, strategy="Scalp"),
        ]
        stats = {s.name: s for s in compute_playbook_stats(trades, [playbook])}
        assert stats["Breakout"].id == "pb-1"
        assert stats["Scalp"].id is None
        assert stats["Scalp"].total_trades == 1
        assert NO_STRATEGY_LABEL not in stats

    def test_blank_strategy_is_unassigned(self):
        trades = [make_trade(outcome="win", pnl=10.0, strategy="   ")]
        stats = compute_playbook_stats(trades)
        assert [s.name for s in stats] == [NO_STRATEGY_LABEL]

    def test_expectancy_and_ratios(self):
        trades = [
            make_trade(id="a", outcome="win", pnl=200.0, strategy="S", r_multiple=2.0),
            make_trade(id="b", outcome="win", pnl=100.0, strategy="S", r_multiple=None),
            make_trade(id="c", outcome="loss", pnl=-100.0, strategy="S", r_multiple=-1.0),
            make_trade(id="d", outcome="breakeven", pnl=0.0, strategy="S", r_multiple=1.5),
        ]
        (s,) = compute_playbook_stats(trades, ["S"])
        assert s.total_trades == 4
        assert s.breakeven == 1
        assert s.net_pnl == 200.0
        assert s.win_rate == 66.67
        assert s.profit_factor == 3.0
        assert s.avg_win == 150.0
        assert s.avg_loss == 100.0
        # (2/3) * 150 - (1/3) * 100
        assert s.expectancy == 66.67
        # mean of 2.0, -1.0, 1.5
        assert s.avg_rr == 0.83

    def test_empty_input_returns_known_playbooks_only(self):
        stats = compute_playbook_stats([], ["Breakout"])
        assert len(stats) == 1
        assert stats[0].name == "Breakout"
        assert stats[0].total_trades == 0


# ---------------------------------------------------------------------------
# 5. Secondary breakdowns
# ---------------------------------------------------------------------------

class TestWeekdayStats:
    def test_seven_keys_when_empty(self):
        stats = compute_weekday_stats([])
        assert sorted(stats) == ["0", "1", "2", "3", "4", "5", "6"]
        assert all(day.trades == 0 for day in stats.values())

    def test_sunday_is_zero(self):
        trades = [
            make_trade(id="a", outcome="win", pnl=50.0, entry_date=date(2024, 1, 7)),  # Sunday
            make_trade(id="b", outcome="loss", pnl=-20.0, entry_date=date(2024, 1, 1)),  # Monday
            make_trade(id="c", outcome="win", pnl=30.0, entry_date=date(2024, 1, 8)),  # Monday
        ]
        stats = compute_weekday_stats(trades)
        assert stats["0"].trades == 1
        assert stats["0"].wins == 1
        assert stats["1"].trades == 2
        assert stats["1"].wins == 1
        assert stats["1"].pnl == 10.0


class TestHoldTime:
    def test_averages_by_outcome(self):
        trades = [
            make_trade(id="a", outcome="win", entry_date=date(2024, 1, 1), entry_time="09:30",
                       exit_date=date(2024, 1, 1), exit_time="11:00"),
            make_trade(id="b", outcome="loss", entry_date=date(2024, 1, 2), entry_time="10:00",
                       exit_date=date(2024, 1, 2), exit_time="10:30"),
            make_trade(id="c", outcome="win", entry_date=date(2024, 1, 3), entry_time="10:00",
                       exit_date=date(2024, 1, 3), exit_time=None),
        ]
        result = compute_hold_time(trades)
        assert result.avg_winner_minutes == 90.0
        assert result.avg_loser_minutes == 30.0
        assert result.avg_all_minutes == 60.0
        assert result.winner_count == 1
        assert result.loser_count == 1

    def test_missing_entry_time_is_midnight(self):
        trades = [
            make_trade(outcome="breakeven", entry_date=date(2024, 1, 3), entry_time=None,
                       exit_date=date(2024, 1, 3), exit_time="01:00"),
        ]
        result = compute_hold_time(trades)
        assert result.avg_all_minutes == 60.0
        assert result.winner_count == 0

    def test_empty(self):
        result = compute_hold_time([])
        assert result.avg_all_minutes == 0.0


class TestActivitySummary:
    def test_recent_count_uses_injected_now(self):
        now = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
        trades = [
            make_trade(id="a", outcome="win", entry_date=date(2024, 1, 9)),
            make_trade(id="b", outcome="loss", entry_date=date(2024, 1, 3)),
            make_trade(id="c", outcome="win", entry_date=date(2024, 1, 2)),
        ]
        result = compute_activity_summary(trades, now=now, days=7)
        assert result.recent_trades_count == 2
        assert result.last_trade_date == date(2024, 1, 9)
        assert result.total_trades == 3
        assert result.wins == 2
        assert result.win_rate == 66.67

    def test_empty(self):
        result = compute_activity_summary([], now=datetime(2024, 1, 1, tzinfo=timezone.utc))
        assert result.recent_trades_count == 0
        assert result.last_trade_date is None


class TestBalanceSummary:
    def test_pnl_against_initial_balance(self):
        trades = [make_trade(pnl=100.0), make_trade(pnl=-50.0), make_trade(pnl=None)]
        result = compute_balance_summary(trades, 1000.0)
        assert result.pnl == 50.0
        assert result.pnl_percent == 5.0
        assert result.current_balance == 1050.0
        assert result.is_profit is True

    def test_zero_balance_guard(self):
        result = compute_balance_summary([make_trade(pnl=-10.0)], 0.0)
        assert result.pnl_percent == 0.0
        assert result.is_profit is False
