"""Command line entry point.

Examples:
    ma-cross live --symbol MSFT
    ma-cross replay --symbol MSFT --csv msft.csv --cash 10000 --output_dir outputs
    ma-cross replay --symbol MSFT --start 2023-01-01 --end 2024-01-01
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .broker import AlpacaAPIError, AlpacaBroker
from .config import BrokerConfig, IndicatorConfig, StrategyConfig
from .data_provider import CsvProvider, YfinanceProvider, frame_to_bars
from .engine import replay
from .errors import EmptyBarSequence, SignalError
from .trader import run_once
from .types import AccountState

logger = logging.getLogger("ma_cross.cli")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NO_DATA = 2


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="ma-cross", description="SMA crossover signal engine")
    p.add_argument("--log-level", type=str, default="INFO")
    p.add_argument("--symbol", type=str, default=StrategyConfig.symbol)
    p.add_argument("--fast", type=int, default=IndicatorConfig.sma_fast, help="Fast SMA window.")
    p.add_argument("--slow", type=int, default=IndicatorConfig.sma_slow, help="Slow SMA window.")
    sub = p.add_subparsers(dest="command", required=True)

    live = sub.add_parser("live", help="Run one trading cycle against Alpaca (ALPACA_* env vars).")
    live.add_argument("--lookback_days", type=int, default=StrategyConfig.lookback_days)
    live.add_argument("--timeframe", type=str, default=StrategyConfig.timeframe)

    rp = sub.add_parser("replay", help="Per-bar decisions over historical bars.")
    rp.add_argument("--csv", type=str, default=None, help="OHLCV CSV path (Date,Open,High,Low,Close,Volume).")
    rp.add_argument("--start", type=str, default=None, help="yfinance start date (when --csv is not given).")
    rp.add_argument("--end", type=str, default=None, help="yfinance end date (when --csv is not given).")
    rp.add_argument("--cash", type=float, default=0.0, help="Available cash for the account snapshot.")
    rp.add_argument("--has-position", action="store_true", help="Treat the symbol as already held.")
    rp.add_argument("--output_dir", type=str, default="outputs")
    return p


def _live(args: argparse.Namespace, ind_cfg: IndicatorConfig) -> int:
    strat_cfg = StrategyConfig(symbol=args.symbol, lookback_days=args.lookback_days, timeframe=args.timeframe)
    broker = AlpacaBroker(BrokerConfig.from_env())
    result = run_once(broker, strat_cfg, ind_cfg)
    if result is not None:
        print(f"{result.symbol} {result.timestamp} {result.state.value} -> {result.action.side}")
    return EXIT_OK


def _replay(args: argparse.Namespace, ind_cfg: IndicatorConfig) -> int:
    if args.csv:
        frame = CsvProvider().fetch(csv_path=args.csv, symbol=args.symbol)
    else:
        if not (args.start and args.end):
            raise SystemExit("replay needs --csv or both --start and --end")
        frame = YfinanceProvider().fetch(symbol=args.symbol, start=args.start, end=args.end)

    account = AccountState(has_open_position=args.has_position, available_cash=args.cash)
    df = replay(
        frame_to_bars(frame),
        account,
        args.symbol,
        fast_window=ind_cfg.sma_fast,
        slow_window=ind_cfg.sma_slow,
    )

    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    out_path = out_dir / f"signals_{args.symbol.replace('.', '_')}.csv"
    df.to_csv(out_path, encoding="utf-8")
    print(out_path)
    print(f"{args.symbol} final action: {df['action'].iloc[-1]}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        ind_cfg = IndicatorConfig(sma_fast=args.fast, sma_slow=args.slow)
        if args.command == "live":
            return _live(args, ind_cfg)
        return _replay(args, ind_cfg)
    except EmptyBarSequence as e:
        logger.warning("no bars - no action this run: %s", e)
        return EXIT_NO_DATA
    except (SignalError, AlpacaAPIError) as e:
        logger.error("%s: %s", type(e).__name__, e)
        return EXIT_ERROR
    except (OSError, ValueError, RuntimeError) as e:
        # bar sources: missing file, unusable columns, empty download
        logger.error("cannot load bars: %s: %s", type(e).__name__, e)
        return EXIT_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
