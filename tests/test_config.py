import pytest

from ma_cross.config import DATA_API_URL, PAPER_API_URL, BrokerConfig, IndicatorConfig, StrategyConfig
from ma_cross.errors import InvalidConfiguration


def test_defaults():
    assert IndicatorConfig() == IndicatorConfig(sma_fast=7, sma_slow=14)
    cfg = StrategyConfig()
    assert (cfg.symbol, cfg.lookback_days, cfg.timeframe, cfg.min_cash) == ("MSFT", 365, "1Day", 1.0)


@pytest.mark.parametrize("fast, slow", [(0, 14), (7, -1), (7, 2.0)])
def test_indicator_config_validates_windows(fast, slow):
    with pytest.raises(InvalidConfiguration):
        IndicatorConfig(sma_fast=fast, sma_slow=slow)


def test_equal_windows_allowed():
    assert IndicatorConfig(sma_fast=5, sma_slow=5).sma_slow == 5


def test_broker_config_from_env(monkeypatch):
    monkeypatch.setenv("ALPACA_KEY", "KEY")
    monkeypatch.setenv("ALPACA_SECRET", "SEC")
    monkeypatch.setenv("ALPACA_URL", "https://paper-api.alpaca.markets/v2/")
    cfg = BrokerConfig.from_env()
    assert cfg.key_id == "KEY"
    assert cfg.secret_key == "SEC"
    assert cfg.base_url == PAPER_API_URL
    assert cfg.data_url == DATA_API_URL
    assert cfg.paper is True


def test_live_endpoint_is_not_paper(monkeypatch):
    monkeypatch.setenv("ALPACA_URL", "https://api.alpaca.markets")
    cfg = BrokerConfig.from_env()
    assert cfg.paper is False
    assert cfg.key_id == ""
