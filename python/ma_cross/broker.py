"""Alpaca REST client.

Thin wrapper over the trading (``/v2``) and market-data (``/v2/stocks``)
endpoints the live run needs. Every failure surfaces as ``AlpacaAPIError``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from decimal import ROUND_DOWN, Decimal
from typing import Any, Dict, List, Optional

import pandas as pd
import requests

from .config import BrokerConfig
from .types import Bar

logger = logging.getLogger("ma_cross.broker")

BARS_PAGE_LIMIT = 10000


class AlpacaAPIError(RuntimeError):
    """Raised when an Alpaca request cannot be completed."""


def _mask_key(key: Optional[str]) -> str:
    """Mask an API key for log output."""
    if not key:
        return "None"
    if len(key) <= 8:
        return key
    return f"{key[:4]}****{key[-4:]}"


def _cents(amount: float) -> str:
    # never round up past the cash actually available
    return str(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_DOWN))


class AlpacaBroker:
    """Account, order and bar access for a single Alpaca account."""

    def __init__(self, config: BrokerConfig, timeout: float = 10.0):
        self.config = config
        self.timeout = timeout

        if not config.key_id or not config.secret_key:
            logger.warning("Alpaca API keys not set - requests will fail")
        else:
            logger.debug(
                "Alpaca client key=%s paper=%s", _mask_key(config.key_id), config.paper
            )

    def _headers(self) -> Dict[str, str]:
        if not self.config.key_id or not self.config.secret_key:
            raise AlpacaAPIError("Missing Alpaca API credentials")
        return {
            "APCA-API-KEY-ID": self.config.key_id,
            "APCA-API-SECRET-KEY": self.config.secret_key,
            "Content-Type": "application/json",
        }

    def _request(self, method: str, url: str, **kwargs) -> Any:
        headers = self._headers()
        try:
            resp = requests.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
            resp.raise_for_status()
            if not resp.content:
                return None
            return resp.json()
        except (requests.RequestException, ValueError) as e:
            logger.error("Alpaca %s %s failed: %s", method, url, e)
            raise AlpacaAPIError(str(e)) from e

    def _trading(self, method: str, endpoint: str, **kwargs) -> Any:
        return self._request(method, f"{self.config.base_url}/v2/{endpoint.lstrip('/')}", **kwargs)

    # ---------- market ----------

    def get_clock(self) -> Dict[str, Any]:
        return self._trading("GET", "clock")

    def get_calendar(self, start: Optional[str] = None, end: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {}
        if start:
            params["start"] = start
        if end:
            params["end"] = end
        return self._trading("GET", "calendar", params=params) or []

    def get_bars(self, symbol: str, start: str, end: str, timeframe: str = "1Day") -> List[Bar]:
        """Fetch bars in the order Alpaca delivers them, following pagination."""
        url = f"{self.config.data_url}/v2/stocks/{symbol}/bars"
        params: Dict[str, Any] = {
            "start": start,
            "end": end,
            "timeframe": timeframe,
            "limit": BARS_PAGE_LIMIT,
        }
        bars: List[Bar] = []
        while True:
            data = self._request("GET", url, params=params) or {}
            for raw in data.get("bars") or []:
                bars.append(
                    Bar(
                        timestamp=pd.Timestamp(raw["t"]).to_pydatetime(),
                        open=float(raw["o"]),
                        high=float(raw["h"]),
                        low=float(raw["l"]),
                        close=float(raw["c"]),
                        volume=float(raw.get("v", 0.0)),
                    )
                )
            token = data.get("next_page_token")
            if not token:
                break
            params = dict(params, page_token=token)

        logger.info("fetched %d %s bars for %s (%s..%s)", len(bars), timeframe, symbol, start, end)
        return bars

    # ---------- account ----------

    def get_positions(self) -> List[Dict[str, Any]]:
        data = self._trading("GET", "positions")
        if data is None:
            return []
        return data if isinstance(data, list) else [data]

    def has_open_position(self, symbol: str) -> bool:
        return any(p.get("symbol") == symbol for p in self.get_positions())

    def get_account(self) -> Dict[str, Any]:
        return self._trading("GET", "account")

    def available_cash(self) -> float:
        return float(self.get_account()["cash"])

    # ---------- orders ----------

    def cancel_all_orders(self) -> None:
        self._trading("DELETE", "orders")

    def close_position(self, symbol: str) -> Dict[str, Any]:
        logger.info("closing position in %s", symbol)
        return self._trading("DELETE", f"positions/{symbol}")

    def submit_market_order(
        self,
        symbol: str,
        notional: float,
        side: str = "buy",
        time_in_force: str = "day",
    ) -> Dict[str, Any]:
        order = {
            "symbol": symbol,
            "notional": _cents(notional),
            "side": side,
            "type": "market",
            "time_in_force": time_in_force,
        }
        logger.info("submitting %s market order: %s notional=%s", side, symbol, order["notional"])
        return self._trading("POST", "orders", json=order)


def clock_timestamp(clock: Dict[str, Any]) -> datetime:
    """Exchange-local timestamp of an Alpaca clock payload."""
    return pd.Timestamp(clock["timestamp"]).to_pydatetime()
