"""Indicator computation utilities.

Moving averages are computed on the CLOSE series, one update per bar, in
chronological order.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Deque, Optional

from .errors import InvalidConfiguration, InvalidInput


def check_window(window: int, name: str = "window") -> int:
    """Return ``window`` if it is a positive integer, else raise."""
    # bool is an int subclass; True is not a window length.
    if isinstance(window, bool) or not isinstance(window, int) or window <= 0:
        raise InvalidConfiguration(f"{name} must be a positive integer, got {window!r}")
    return window


class SmaTracker:
    """Simple moving average over the last ``window`` close prices.

    The average is recomputed from the buffered prices on every read, so no
    running sum is carried across the life of the tracker.
    """

    def __init__(self, window: int):
        self.window = check_window(window)
        self._prices: Deque[float] = deque(maxlen=self.window)
        self.count = 0

    def update(self, price: float) -> None:
        if not (math.isfinite(price) and price > 0):
            raise InvalidInput(f"price must be a positive finite number, got {price!r}")
        # deque(maxlen=...) evicts the oldest price on overflow
        self._prices.append(float(price))
        self.count += 1

    @property
    def ready(self) -> bool:
        return self.count >= self.window

    @property
    def value(self) -> Optional[float]:
        """Arithmetic mean of the buffered prices, or None while unready."""
        if not self.ready:
            return None
        return sum(self._prices) / len(self._prices)

    def current_value(self) -> Optional[float]:
        return self.value

    def __repr__(self) -> str:
        return f"SmaTracker(window={self.window}, count={self.count}, value={self.value!r})"
