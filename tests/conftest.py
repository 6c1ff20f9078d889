from datetime import datetime, timedelta

import pytest

from ma_cross.types import Bar


@pytest.fixture(autouse=True)
def _no_alpaca_env(monkeypatch):
    # never let a developer's credentials leak into unit tests
    for k in ("ALPACA_KEY", "ALPACA_SECRET", "ALPACA_URL", "ALPACA_DATA_URL"):
        monkeypatch.delenv(k, raising=False)


def bars_from_closes(closes, start=datetime(2024, 1, 1)):
    """One bar per calendar day with O=H=L=C."""
    return [
        Bar(timestamp=start + timedelta(days=i), open=c, high=c, low=c, close=c, volume=100.0)
        for i, c in enumerate(closes)
    ]


@pytest.fixture
def make_bars():
    return bars_from_closes
