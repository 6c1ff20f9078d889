"""Crossover decision rule.

``decide`` is a pure function of its inputs. Position state lives with the
caller; nothing is remembered between calls.
"""

from __future__ import annotations

import math
from typing import Callable, Optional

from .errors import InvalidInput
from .types import Action, Buy, CrossoverState, Hold, Sell

# Orders at or below this cash balance are not worth sending.
MIN_ORDER_CASH = 1.00

SizingStrategy = Callable[[float], float]


def all_cash(available_cash: float) -> float:
    """Commit the whole available cash balance to the order."""
    return available_cash


def _is_ready(x: Optional[float]) -> bool:
    return x is not None and math.isfinite(x)


def crossover_state(fast: Optional[float], slow: Optional[float]) -> CrossoverState:
    if not (_is_ready(fast) and _is_ready(slow)):
        return CrossoverState.UNDEFINED
    if fast > slow:
        return CrossoverState.FAST_ABOVE_SLOW
    if fast < slow:
        return CrossoverState.FAST_BELOW_SLOW
    return CrossoverState.TIED


def decide(
    fast: Optional[float],
    slow: Optional[float],
    has_open_position: bool,
    available_cash: float,
    symbol: str,
    *,
    sizing: SizingStrategy = all_cash,
    min_cash: float = MIN_ORDER_CASH,
) -> Action:
    """Map (fast, slow, position, cash) to Sell / Buy / Hold.

    Rules, first match wins:
    1. either average unready -> Hold
    2. open position and fast < slow -> Sell
    3. cash > min_cash and fast > slow -> Buy(notional=sizing(cash))
    4. otherwise (including fast == slow) -> Hold
    """
    if not (math.isfinite(available_cash) and available_cash >= 0):
        raise InvalidInput(f"available cash must be >= 0, got {available_cash!r}")

    if not (_is_ready(fast) and _is_ready(slow)):
        return Hold()

    if has_open_position and fast < slow:
        return Sell(symbol)

    if available_cash > min_cash and fast > slow:
        notional = float(sizing(available_cash))
        if notional <= 0:
            return Hold()
        return Buy(symbol, notional=notional)

    return Hold()
