"""Shared constants for trades and analytics."""

OUTCOME_WIN = "win"
OUTCOME_LOSS = "loss"
OUTCOME_BREAKEVEN = "breakeven"
OUTCOME_PENDING = "pending"

VALID_OUTCOMES = [OUTCOME_WIN, OUTCOME_LOSS, OUTCOME_BREAKEVEN, OUTCOME_PENDING]
VALID_TRADE_TYPES = ["Long", "Short"]

# Finite stand-in for an infinite profit factor (wins with no losses)
PROFIT_FACTOR_SENTINEL = 999.0

# Bucket for trades without a strategy label; always sorted last
NO_STRATEGY_LABEL = "No Strategy"

STREAK_NONE = "none"

# Weekday keys follow PostgreSQL's EXTRACT(DOW): 0 = Sunday ... 6 = Saturday
WEEKDAY_KEYS = [str(i) for i in range(7)]
