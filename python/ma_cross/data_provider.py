"""Offline bar providers (yfinance / CSV) and conversion to ``Bar`` sequences.

The live path gets its bars from the broker; these providers feed replays.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

import pandas as pd

from .types import Bar

logger = logging.getLogger("ma_cross.data_provider")

OHLCV_COLUMNS = ["Open", "High", "Low", "Close", "Volume"]

_COLUMN_ALIASES = {
    "open": "Open",
    "high": "High",
    "low": "Low",
    "close": "Close",
    "adj close": "AdjClose",
    "adjclose": "AdjClose",
    "volume": "Volume",
}


@dataclass(frozen=True)
class OhlcvFrame:
    """Standard OHLCV dataframe wrapper."""

    df: pd.DataFrame  # columns: Open, High, Low, Close, Volume; index: datetime
    symbol: str


def _standardize_ohlcv_columns(df: pd.DataFrame) -> pd.DataFrame:
    # yfinance may return (field, ticker) MultiIndex columns for a single ticker.
    if isinstance(df.columns, pd.MultiIndex):
        tickers = list(dict.fromkeys(df.columns.get_level_values(-1)))
        if len(tickers) == 1:
            df = df.copy()
            df.columns = df.columns.get_level_values(0)
        else:
            df = df.xs(tickers[0], axis=1, level=-1, drop_level=True)

    rename_map = {}
    for col in df.columns:
        alias = _COLUMN_ALIASES.get(str(col).strip().lower())
        if alias:
            rename_map[col] = alias
    df = df.rename(columns=rename_map).copy()

    # Prefer Close; fall back to AdjClose only when Close is absent.
    if "Close" not in df.columns and "AdjClose" in df.columns:
        df = df.rename(columns={"AdjClose": "Close"})
    if "AdjClose" in df.columns:
        df = df.drop(columns=["AdjClose"])

    if "Volume" not in df.columns:
        df["Volume"] = 0.0

    missing = [c for c in OHLCV_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Missing required OHLCV columns: {missing}")

    # Ordering is left as delivered; the engine rejects duplicates and out-of-order rows.
    return df[OHLCV_COLUMNS].astype(float)


class YfinanceProvider:
    """Fetch daily bars from yfinance."""

    def fetch(
        self,
        symbol: str,
        start: str,
        end: str,
        interval: str = "1d",
        auto_adjust: bool = False,
    ) -> OhlcvFrame:
        import yfinance as yf  # local import: only replays from yfinance need it

        df = yf.download(
            tickers=symbol,
            start=start,
            end=end,
            interval=interval,
            auto_adjust=auto_adjust,
            progress=False,
        )
        if df is None or len(df) == 0:
            raise RuntimeError(f"yfinance returned empty data for symbol={symbol}")

        logger.info("yfinance: %d bars for %s (%s..%s)", len(df), symbol, start, end)
        return OhlcvFrame(df=_standardize_ohlcv_columns(df), symbol=symbol)


class CsvProvider:
    """Load OHLCV data from a CSV file (Date,Open,High,Low,Close[,Volume])."""

    def fetch(self, csv_path: str | Path, symbol: str, datetime_col: str = "Date") -> OhlcvFrame:
        path = Path(csv_path)
        if not path.exists():
            raise FileNotFoundError(str(path))

        df = pd.read_csv(path)
        if datetime_col not in df.columns:
            for cand in ["Datetime", "datetime", "date", "timestamp", "Time", "time"]:
                if cand in df.columns:
                    datetime_col = cand
                    break

        if datetime_col not in df.columns:
            raise ValueError(f"CSV must contain a datetime column. Tried '{datetime_col}' and common aliases.")

        df[datetime_col] = pd.to_datetime(df[datetime_col])
        df = df.set_index(datetime_col)

        return OhlcvFrame(df=_standardize_ohlcv_columns(df), symbol=symbol)


def frame_to_bars(frame: OhlcvFrame) -> List[Bar]:
    """Convert a standard frame to bars, preserving row order."""
    bars = []
    for ts, row in frame.df.iterrows():
        bars.append(
            Bar(
                timestamp=pd.Timestamp(ts).to_pydatetime(),
                open=float(row["Open"]),
                high=float(row["High"]),
                low=float(row["Low"]),
                close=float(row["Close"]),
                volume=float(row["Volume"]),
            )
        )
    return bars
