"""Shared types for the SMA crossover engine.

The guiding principle is to keep the runtime objects small and explicit.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import ClassVar, Optional, Union

from .errors import InvalidInput


@dataclass(frozen=True)
class Bar:
    """OHLCV bar.

    Only ``close`` feeds the moving averages; it must be a positive finite price.
    """

    timestamp: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def __post_init__(self) -> None:
        if not (math.isfinite(self.close) and self.close > 0):
            raise InvalidInput(f"bar close must be a positive price, got {self.close!r} at {self.timestamp}")


class CrossoverState(str, Enum):
    """Relationship between fast and slow SMA at the latest bar."""

    FAST_ABOVE_SLOW = "fast_above_slow"
    FAST_BELOW_SLOW = "fast_below_slow"
    TIED = "tied"  # no-signal: never trades
    UNDEFINED = "undefined"  # either tracker unready


@dataclass(frozen=True)
class AccountState:
    """Caller-supplied account snapshot. Read-only to the core."""

    has_open_position: bool
    available_cash: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.available_cash) and self.available_cash >= 0):
            raise InvalidInput(f"available cash must be >= 0, got {self.available_cash!r}")


@dataclass(frozen=True)
class Sell:
    """Close the open position in ``symbol``."""

    symbol: str
    side: ClassVar[str] = "SELL"


@dataclass(frozen=True)
class Buy:
    """Market buy of ``notional`` cash worth of ``symbol``."""

    symbol: str
    notional: float
    side: ClassVar[str] = "BUY"


@dataclass(frozen=True)
class Hold:
    side: ClassVar[str] = "HOLD"


Action = Union[Sell, Buy, Hold]


@dataclass(frozen=True)
class Evaluation:
    """Outcome of one run: the last bar's averages and the resulting action."""

    symbol: str
    timestamp: datetime
    close: float
    fast: Optional[float]
    slow: Optional[float]
    state: CrossoverState
    action: Action
