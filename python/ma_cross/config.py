"""Configuration objects.

Style rules:
- keep signatures stable
- prefer explicit field names
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .indicators import check_window

PAPER_API_URL = "https://paper-api.alpaca.markets"
DATA_API_URL = "https://data.alpaca.markets"


@dataclass(frozen=True)
class IndicatorConfig:
    """Moving-average window configuration."""

    sma_fast: int = 7
    sma_slow: int = 14

    def __post_init__(self) -> None:
        check_window(self.sma_fast, "sma_fast")
        check_window(self.sma_slow, "sma_slow")


@dataclass(frozen=True)
class StrategyConfig:
    """What to trade and how much history to look at."""

    symbol: str = "MSFT"
    # trading days of history requested before today
    lookback_days: int = 365
    timeframe: str = "1Day"
    min_cash: float = 1.0


@dataclass(frozen=True)
class BrokerConfig:
    """Alpaca credentials and endpoints."""

    key_id: str
    secret_key: str
    base_url: str = PAPER_API_URL
    data_url: str = DATA_API_URL

    @property
    def paper(self) -> bool:
        return "paper-api.alpaca.markets" in self.base_url

    @classmethod
    def from_env(cls) -> "BrokerConfig":
        """Build from ALPACA_* environment variables (a local .env file is honoured)."""
        load_dotenv()
        base_url = os.getenv("ALPACA_URL", PAPER_API_URL).rstrip("/")
        # AlpacaBroker appends /v2 itself
        if base_url.endswith("/v2"):
            base_url = base_url[: -len("/v2")]
        return cls(
            key_id=os.getenv("ALPACA_KEY", ""),
            secret_key=os.getenv("ALPACA_SECRET", ""),
            base_url=base_url,
            data_url=os.getenv("ALPACA_DATA_URL", DATA_API_URL).rstrip("/"),
        )
