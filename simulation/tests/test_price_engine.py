"""Tests for the random source and the stochastic price engine."""

import math

import pytest

from models.config import RoundingPolicy
from models.instrument import DEFAULT_INSTRUMENTS, Commodity, Instrument
from simulation.price_engine import PriceEngine
from simulation.random_source import RandomNumberSource


class FixedNormalSource(RandomNumberSource):
    """Random source whose normal draws follow a fixed script."""

    def __init__(self, draws: list[float]) -> None:
        super().__init__(seed=0)
        self._draws = list(draws)

    def standard_normal(self) -> float:
        return self._draws.pop(0) if len(self._draws) > 1 else self._draws[0]


def _instrument(**overrides) -> Instrument:
    params = dict(
        ticker=Commodity.DOGE,
        name="Test crystal",
        base_price=100.0,
        volatility=0.025,
        drift=0.0,
        min_price=10.0,
        max_price=1000.0,
    )
    params.update(overrides)
    return Instrument(**params)


# =============================================================================
# RANDOM SOURCE
# =============================================================================


class TestRandomNumberSource:
    def test_same_seed_same_stream(self):
        a = RandomNumberSource(seed=7)
        b = RandomNumberSource(seed=7)
        assert [a.standard_normal() for _ in range(5)] == [b.standard_normal() for _ in range(5)]

    def test_uniform_open_redraws_zero(self, monkeypatch):
        rng = RandomNumberSource(seed=1)
        draws = iter([0.0, 0.0, 0.25])
        monkeypatch.setattr(rng._rng, "random", lambda: next(draws))
        assert rng.uniform_open() == 0.25

    def test_standard_normal_is_finite_and_centered(self):
        rng = RandomNumberSource(seed=123)
        samples = [rng.standard_normal() for _ in range(5000)]
        assert all(math.isfinite(z) for z in samples)
        mean = sum(samples) / len(samples)
        var = sum((z - mean) ** 2 for z in samples) / len(samples)
        assert abs(mean) < 0.1
        assert 0.85 < var < 1.15

    def test_randint_inclusive(self):
        rng = RandomNumberSource(seed=3)
        values = {rng.randint(1, 3) for _ in range(200)}
        assert values == {1, 2, 3}


# =============================================================================
# PRICE ENGINE
# =============================================================================


class TestPriceEngine:
    def test_initial_state(self):
        engine = PriceEngine(DEFAULT_INSTRUMENTS, RandomNumberSource(seed=0))
        for instrument in DEFAULT_INSTRUMENTS:
            assert engine.price(instrument.ticker) == instrument.base_price
            assert engine.previous_price(instrument.ticker) == instrument.base_price
            assert engine.initial_price(instrument.ticker) == instrument.base_price
            assert len(engine.history(instrument.ticker)) == 1

    def test_deterministic_step(self):
        engine = PriceEngine([_instrument()], FixedNormalSource([2.0]))
        snapshot = engine.tick(now=2.0)
        assert snapshot == {Commodity.DOGE: 105.0}
        assert engine.price(Commodity.DOGE) == 105.0
        assert engine.previous_price(Commodity.DOGE) == 100.0
        assert engine.initial_price(Commodity.DOGE) == 100.0

    def test_deterministic_step_without_rounding(self):
        engine = PriceEngine(
            [_instrument()],
            FixedNormalSource([2.0]),
            rounding=RoundingPolicy(price_decimals=None, credit_decimals=None),
        )
        engine.tick(now=2.0)
        assert engine.price(Commodity.DOGE) == pytest.approx(105.0)

    def test_drift_applies(self):
        engine = PriceEngine([_instrument(drift=0.01, volatility=0.0)], FixedNormalSource([0.0]))
        engine.tick(now=1.0)
        assert engine.price(Commodity.DOGE) == 101.0

    def test_clamps_to_max(self):
        engine = PriceEngine([_instrument(max_price=101.0)], FixedNormalSource([10.0]))
        engine.tick(now=1.0)
        assert engine.price(Commodity.DOGE) == 101.0

    def test_clamps_to_min(self):
        engine = PriceEngine([_instrument(min_price=90.0)], FixedNormalSource([-30.0]))
        engine.tick(now=1.0)
        assert engine.price(Commodity.DOGE) == 90.0

    def test_prices_stay_in_bounds_over_long_run(self):
        engine = PriceEngine(DEFAULT_INSTRUMENTS, RandomNumberSource(seed=99))
        bounds = {i.ticker: (i.min_price, i.max_price) for i in DEFAULT_INSTRUMENTS}
        for step in range(2000):
            for ticker, price in engine.tick(now=float(step)).items():
                low, high = bounds[ticker]
                assert low <= price <= high
                assert math.isfinite(price) and price > 0

    def test_snapshot_is_rounded(self):
        engine = PriceEngine(DEFAULT_INSTRUMENTS, RandomNumberSource(seed=5))
        for _ in range(20):
            for price in engine.tick(now=0.0).values():
                assert round(price, 2) == price

    def test_history_is_bounded(self):
        engine = PriceEngine([_instrument()], RandomNumberSource(seed=1), history_capacity=100)
        for step in range(250):
            engine.tick(now=float(step))
        history = engine.history(Commodity.DOGE)
        assert len(history) == 100
        assert history[0].timestamp == 150.0
        assert history[-1].timestamp == 249.0
        assert history[-1].price == engine.price(Commodity.DOGE)

    def test_quote_change_pct(self):
        engine = PriceEngine([_instrument()], FixedNormalSource([2.0]))
        engine.tick(now=1.0)
        quote = engine.quote(Commodity.DOGE)
        assert quote.price == 105.0
        assert quote.previous_price == 100.0
        assert quote.change_pct == pytest.approx(5.0)

    def test_unknown_instrument(self):
        engine = PriceEngine([_instrument()], RandomNumberSource(seed=0))
        with pytest.raises(KeyError):
            engine.price(Commodity.GOLD)


class TestShock:
    def test_shock_bypasses_clamp_until_next_tick(self):
        engine = PriceEngine([_instrument(max_price=110.0)], FixedNormalSource([0.0]))
        before, after = engine.apply_shock(Commodity.DOGE, 1.5, now=1.0)
        assert (before, after) == (100.0, 150.0)
        assert engine.price(Commodity.DOGE) == 150.0
        assert engine.previous_price(Commodity.DOGE) == 100.0

        engine.tick(now=2.0)
        assert engine.price(Commodity.DOGE) == 110.0
        assert engine.previous_price(Commodity.DOGE) == 150.0

    def test_shock_recorded_in_history(self):
        engine = PriceEngine([_instrument()], RandomNumberSource(seed=0))
        engine.apply_shock(Commodity.DOGE, 0.5, now=3.0)
        assert engine.history(Commodity.DOGE)[-1].price == 50.0

    def test_non_positive_factor_rejected(self):
        engine = PriceEngine([_instrument()], RandomNumberSource(seed=0))
        with pytest.raises(ValueError):
            engine.apply_shock(Commodity.DOGE, 0.0, now=0.0)
