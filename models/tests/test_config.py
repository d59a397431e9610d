"""Tests for configuration loading and model validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from models.bot import BotStrategy
from models.config import (
    BotSpec,
    RandomThresholds,
    RoundingPolicy,
    SimulationConfig,
    SizingConfig,
    ThinkInterval,
)
from models.instrument import Commodity, Instrument, PriceQuote
from models.ledger import LedgerSnapshot, TraderIdentity

DEFAULT_YAML = Path(__file__).resolve().parents[2] / "config" / "default.yaml"


class TestDefaults:
    def test_default_config(self):
        cfg = SimulationConfig()
        assert cfg.session_duration == 300
        assert cfg.price_interval == 2.0
        assert cfg.bot_interval == 4.0
        assert cfg.initial_credits == 10_000.0
        assert cfg.history_capacity == 100
        assert cfg.events.probability == 0.03
        assert len(cfg.instruments) == 4
        assert {b.strategy for b in cfg.bots} == set(BotStrategy)

    def test_default_thresholds(self):
        table = SimulationConfig().strategies
        assert table.momentum.threshold == 0.01
        assert table.mean_revert.threshold == 0.05
        assert table.aggressive.buy_below == 0.05
        assert table.aggressive.sell_above == 0.10
        assert table.conservative.buy_below == 0.10
        assert table.conservative.sell_above == 0.05


class TestYaml:
    def test_load_shipped_default(self):
        cfg = SimulationConfig.from_yaml(DEFAULT_YAML)
        assert cfg.seed == 42
        assert cfg.bots[0].sizing.mode == "fixed"
        assert cfg.bots[1].strategy is BotStrategy.MOMENTUM

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            SimulationConfig.from_yaml(tmp_path / "nope.yaml")

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n", encoding="utf-8")
        with pytest.raises(ValueError):
            SimulationConfig.from_yaml(path)

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert SimulationConfig.from_yaml(path) == SimulationConfig()

    def test_partial_override(self, tmp_path):
        path = tmp_path / "short.yaml"
        path.write_text(
            "session_duration: 60\nrounding:\n  credit_decimals: null\n", encoding="utf-8"
        )
        cfg = SimulationConfig.from_yaml(path)
        assert cfg.session_duration == 60
        assert cfg.rounding.credit_decimals is None
        assert cfg.rounding.price_decimals == 2


class TestValidation:
    def test_instrument_base_outside_bounds(self):
        with pytest.raises(ValidationError):
            Instrument(
                ticker=Commodity.DOGE,
                name="Bad",
                base_price=5.0,
                volatility=0.1,
                min_price=10.0,
                max_price=20.0,
            )

    def test_duplicate_bot_names(self):
        with pytest.raises(ValidationError):
            SimulationConfig(
                bots=[
                    BotSpec(name="Twin", strategy=BotStrategy.RANDOM),
                    BotSpec(name="Twin", strategy=BotStrategy.HODL),
                ]
            )

    def test_unknown_strategy(self):
        with pytest.raises(ValidationError):
            BotSpec(name="X", strategy="martingale")

    def test_event_for_missing_instrument(self):
        gold_only = [i for i in SimulationConfig().instruments if i.ticker is Commodity.GOLD]
        with pytest.raises(ValidationError):
            SimulationConfig(instruments=gold_only)

    def test_random_probabilities_capped(self):
        with pytest.raises(ValidationError):
            RandomThresholds(buy_probability=0.7, sell_probability=0.5)

    def test_bands(self):
        with pytest.raises(ValidationError):
            SizingConfig(lot_min=5, lot_max=2)
        with pytest.raises(ValidationError):
            ThinkInterval(min_seconds=5, max_seconds=1)

    def test_non_positive_intervals(self):
        with pytest.raises(ValidationError):
            SimulationConfig(price_interval=0)


class TestSmallModels:
    def test_rounding_policy(self):
        policy = RoundingPolicy()
        assert policy.round_price(105.00000000000001) == 105.0
        assert policy.round_credits(1.005) in (1.0, 1.01)
        assert policy.floor_quantity(2.999) == 2.99
        assert RoundingPolicy(price_decimals=None).round_price(1.23456) == 1.23456

    def test_guest_identity(self):
        a = TraderIdentity.guest()
        b = TraderIdentity.guest()
        assert a.trader_id != b.trader_id
        assert a.is_bot is False

    def test_snapshot_rejects_negative_credits(self):
        with pytest.raises(ValidationError):
            LedgerSnapshot(credits=-1)

    def test_quote_change_pct(self):
        quote = PriceQuote(ticker=Commodity.GME, price=110.0, previous_price=100.0, initial_price=100.0)
        assert quote.change_pct == pytest.approx(10.0)
