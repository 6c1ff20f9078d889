"""Single-symbol live trader.

One call to ``run_once`` is one trading cycle:
- skip if the market is closed
- resolve the lookback window from the trading calendar
- fetch bars, read position and cash
- decide on the last bar
- cancel stale orders, then execute the action
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .broker import AlpacaBroker, clock_timestamp
from .config import IndicatorConfig, StrategyConfig
from .decision import SizingStrategy, all_cash
from .engine import evaluate
from .errors import EmptyBarSequence, InvalidConfiguration
from .types import AccountState, Action, Buy, Evaluation, Sell

logger = logging.getLogger("ma_cross.trader")

CALENDAR_PAD_DAYS = 10


def lookback_window(
    calendar: Sequence[Dict[str, Any]],
    as_of: date,
    lookback_days: int,
) -> Tuple[str, str]:
    """Return (start, end) dates of the ``lookback_days`` sessions before ``as_of``.

    The session on ``as_of`` itself is excluded: its bar is still forming.
    """
    if lookback_days <= 0:
        raise InvalidConfiguration(f"lookback_days must be positive, got {lookback_days!r}")

    as_of_s = as_of.isoformat()
    idx = -1
    for i, day in enumerate(calendar):
        if day["date"] <= as_of_s:
            idx = i

    days: List[Dict[str, Any]] = list(calendar[max(0, idx - lookback_days): max(0, idx)])
    if not days:
        raise EmptyBarSequence(f"no trading sessions before {as_of_s} in calendar")
    return days[0]["date"], days[-1]["date"]


def execute(broker: AlpacaBroker, action: Action) -> Optional[Dict[str, Any]]:
    """Map an action onto broker calls. Hold is a no-op."""
    if isinstance(action, Sell):
        return broker.close_position(action.symbol)
    if isinstance(action, Buy):
        return broker.submit_market_order(action.symbol, action.notional, side="buy", time_in_force="day")
    return None


def run_once(
    broker: AlpacaBroker,
    strat_cfg: StrategyConfig = StrategyConfig(),
    ind_cfg: IndicatorConfig = IndicatorConfig(),
    sizing: SizingStrategy = all_cash,
) -> Optional[Evaluation]:
    """Run one trading cycle. Returns None when the market is closed."""
    clock = broker.get_clock()
    if not clock.get("is_open"):
        logger.info("market is not open - exiting")
        return None

    symbol = strat_cfg.symbol
    as_of = clock_timestamp(clock).date()

    # calendar days approximation (weekends/holidays) for the session lookback;
    # the fixed pad covers long weekends when lookback_days is small
    cal_start = as_of - timedelta(days=int(strat_cfg.lookback_days * 2) + CALENDAR_PAD_DAYS)
    calendar = broker.get_calendar(start=cal_start.isoformat(), end=as_of.isoformat())
    start, end = lookback_window(calendar, as_of, strat_cfg.lookback_days)

    bars = broker.get_bars(symbol, start=start, end=end, timeframe=strat_cfg.timeframe)
    account = AccountState(
        has_open_position=broker.has_open_position(symbol),
        available_cash=broker.available_cash(),
    )

    # Evaluate before touching orders: a run without bars takes no action at all.
    result = evaluate(
        bars,
        account,
        symbol,
        fast_window=ind_cfg.sma_fast,
        slow_window=ind_cfg.sma_slow,
        sizing=sizing,
        min_cash=strat_cfg.min_cash,
    )

    broker.cancel_all_orders()
    if isinstance(result.action, Sell):
        logger.info("selling %s", symbol)
    elif isinstance(result.action, Buy):
        logger.info("buying %s for %.2f", symbol, result.action.notional)
    execute(broker, result.action)
    return result
