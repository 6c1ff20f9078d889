from datetime import datetime

import pandas as pd
import pytest

from ma_cross.data_provider import (
    OHLCV_COLUMNS,
    CsvProvider,
    OhlcvFrame,
    YfinanceProvider,
    _standardize_ohlcv_columns,
    frame_to_bars,
)
from ma_cross.errors import InvalidInput


def _write_csv(path, header, rows):
    path.write_text("\n".join([header] + rows) + "\n", encoding="utf-8")
    return path


def test_csv_provider_standardizes_columns(tmp_path):
    p = _write_csv(
        tmp_path / "msft.csv",
        "date,open,high,low,close,adj close,volume",
        ["2024-01-02,10,11,9,10.5,10.4,1000", "2024-01-03,10.5,12,10,11.5,11.4,2000"],
    )
    frame = CsvProvider().fetch(p, "MSFT")
    assert frame.symbol == "MSFT"
    assert list(frame.df.columns) == OHLCV_COLUMNS
    # raw Close wins over Adj Close
    assert frame.df["Close"].tolist() == [10.5, 11.5]


def test_csv_without_volume_gets_zero_volume(tmp_path):
    p = _write_csv(tmp_path / "x.csv", "Date,Open,High,Low,Close", ["2024-01-02,1,1,1,1"])
    frame = CsvProvider().fetch(p, "X")
    assert frame.df["Volume"].tolist() == [0.0]


def test_csv_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        CsvProvider().fetch(tmp_path / "nope.csv", "X")


def test_csv_without_datetime_column(tmp_path):
    p = _write_csv(tmp_path / "x.csv", "Open,High,Low,Close", ["1,1,1,1"])
    with pytest.raises(ValueError, match="datetime column"):
        CsvProvider().fetch(p, "X")


def test_missing_ohlc_columns():
    df = pd.DataFrame({"Close": [1.0]}, index=pd.to_datetime(["2024-01-02"]))
    with pytest.raises(ValueError, match="Missing required OHLCV columns"):
        _standardize_ohlcv_columns(df)


def test_adj_close_used_when_close_missing():
    df = pd.DataFrame(
        {"Open": [1.0], "High": [1.0], "Low": [1.0], "Adj Close": [0.9], "Volume": [5.0]},
        index=pd.to_datetime(["2024-01-02"]),
    )
    out = _standardize_ohlcv_columns(df)
    assert out["Close"].tolist() == [0.9]


def test_multiindex_single_ticker_columns():
    cols = pd.MultiIndex.from_tuples([(f, "MSFT") for f in ["Open", "High", "Low", "Close", "Volume"]])
    df = pd.DataFrame([[1.0, 2.0, 0.5, 1.5, 10.0]], columns=cols, index=pd.to_datetime(["2024-01-02"]))
    out = _standardize_ohlcv_columns(df)
    assert list(out.columns) == OHLCV_COLUMNS
    assert out["Close"].iloc[0] == 1.5


def test_frame_to_bars_preserves_order():
    df = pd.DataFrame(
        {"Open": [2.0, 1.0], "High": [2.0, 1.0], "Low": [2.0, 1.0], "Close": [2.0, 1.0], "Volume": [0.0, 0.0]},
        index=pd.to_datetime(["2024-01-03", "2024-01-02"]),
    )
    bars = frame_to_bars(OhlcvFrame(df=df, symbol="X"))
    assert [b.timestamp for b in bars] == [datetime(2024, 1, 3), datetime(2024, 1, 2)]
    assert bars[0].close == 2.0


def test_frame_to_bars_rejects_bad_close():
    df = pd.DataFrame(
        {"Open": [1.0], "High": [1.0], "Low": [1.0], "Close": [0.0], "Volume": [0.0]},
        index=pd.to_datetime(["2024-01-02"]),
    )
    with pytest.raises(InvalidInput):
        frame_to_bars(OhlcvFrame(df=df, symbol="X"))


def test_yfinance_provider_uses_download(monkeypatch):
    yf = pytest.importorskip("yfinance")
    raw = pd.DataFrame(
        {"Open": [1.0], "High": [1.0], "Low": [1.0], "Close": [1.0], "Adj Close": [1.0], "Volume": [1.0]},
        index=pd.to_datetime(["2024-01-02"]),
    )
    calls = {}

    def fake_download(**kwargs):
        calls.update(kwargs)
        return raw

    monkeypatch.setattr(yf, "download", fake_download)
    frame = YfinanceProvider().fetch("MSFT", "2024-01-01", "2024-01-05")
    assert calls["tickers"] == "MSFT"
    assert list(frame.df.columns) == OHLCV_COLUMNS


def test_yfinance_empty_raises(monkeypatch):
    yf = pytest.importorskip("yfinance")
    monkeypatch.setattr(yf, "download", lambda **kwargs: pd.DataFrame())
    with pytest.raises(RuntimeError, match="empty data"):
        YfinanceProvider().fetch("MSFT", "2024-01-01", "2024-01-05")
