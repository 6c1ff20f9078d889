"""Run evaluation: feeds ordered bars through a fast/slow tracker pair.

One ``SmaCrossEngine`` per symbol and run. Trackers are never shared.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

import pandas as pd

from .decision import MIN_ORDER_CASH, SizingStrategy, all_cash, crossover_state, decide
from .errors import EmptyBarSequence, OutOfOrderBar
from .indicators import SmaTracker
from .types import AccountState, Action, Bar, Buy, CrossoverState, Evaluation

logger = logging.getLogger("ma_cross.engine")


class SmaCrossEngine:
    """Holds the fast and slow trackers for a single symbol."""

    def __init__(
        self,
        symbol: str,
        fast_window: int = 7,
        slow_window: int = 14,
        sizing: SizingStrategy = all_cash,
        min_cash: float = MIN_ORDER_CASH,
    ):
        self.symbol = symbol
        self.fast = SmaTracker(fast_window)
        self.slow = SmaTracker(slow_window)
        self.sizing = sizing
        self.min_cash = min_cash
        self.last_bar: Optional[Bar] = None

    def ingest(self, bar: Bar) -> None:
        """Update both trackers with ``bar``; timestamps must strictly increase."""
        if self.last_bar is not None and bar.timestamp <= self.last_bar.timestamp:
            raise OutOfOrderBar(
                f"{self.symbol}: bar at {bar.timestamp} does not follow {self.last_bar.timestamp}"
            )
        self.fast.update(bar.close)
        self.slow.update(bar.close)
        self.last_bar = bar

    @property
    def state(self) -> CrossoverState:
        return crossover_state(self.fast.value, self.slow.value)

    def decide(self, account: AccountState) -> Action:
        return decide(
            self.fast.value,
            self.slow.value,
            account.has_open_position,
            account.available_cash,
            self.symbol,
            sizing=self.sizing,
            min_cash=self.min_cash,
        )


def _require_bars(bars: Sequence[Bar], symbol: str) -> None:
    if len(bars) == 0:
        raise EmptyBarSequence(f"no bars supplied for {symbol}")


def evaluate(
    bars: Sequence[Bar],
    account: AccountState,
    symbol: str,
    fast_window: int = 7,
    slow_window: int = 14,
    sizing: SizingStrategy = all_cash,
    min_cash: float = MIN_ORDER_CASH,
) -> Evaluation:
    """Ingest every bar, then decide once from the last bar only."""
    bars = list(bars)
    _require_bars(bars, symbol)

    engine = SmaCrossEngine(symbol, fast_window, slow_window, sizing=sizing, min_cash=min_cash)
    for bar in bars:
        engine.ingest(bar)

    last = engine.last_bar
    action = engine.decide(account)
    logger.info(
        "%s %s close=%.4f fast=%s slow=%s state=%s -> %s",
        symbol,
        last.timestamp,
        last.close,
        engine.fast.value,
        engine.slow.value,
        engine.state.value,
        action.side,
    )
    return Evaluation(
        symbol=symbol,
        timestamp=last.timestamp,
        close=last.close,
        fast=engine.fast.value,
        slow=engine.slow.value,
        state=engine.state,
        action=action,
    )


def replay(
    bars: Iterable[Bar],
    account: AccountState,
    symbol: str,
    fast_window: int = 7,
    slow_window: int = 14,
    sizing: SizingStrategy = all_cash,
    min_cash: float = MIN_ORDER_CASH,
) -> pd.DataFrame:
    """Per-bar decisions for a fixed account snapshot.

    Returns a frame indexed by timestamp with columns
    close, sma_fast, sma_slow, state, action, notional.
    """
    bars = list(bars)
    _require_bars(bars, symbol)

    engine = SmaCrossEngine(symbol, fast_window, slow_window, sizing=sizing, min_cash=min_cash)
    rows = []
    for bar in bars:
        engine.ingest(bar)
        action = engine.decide(account)
        rows.append(
            {
                "Date": bar.timestamp,
                "close": bar.close,
                "sma_fast": engine.fast.value,
                "sma_slow": engine.slow.value,
                "state": engine.state.value,
                "action": action.side,
                "notional": action.notional if isinstance(action, Buy) else None,
            }
        )

    df = pd.DataFrame(rows).set_index("Date")
    # None -> NaN for unready averages and non-buy rows
    df[["sma_fast", "sma_slow", "notional"]] = df[["sma_fast", "sma_slow", "notional"]].astype(float)
    return df
