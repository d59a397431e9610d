"""Tests for random market events."""

import pytest

from models.events import DEFAULT_EVENT_CATALOG, MarketEvent
from models.instrument import DEFAULT_INSTRUMENTS, Commodity
from simulation.event_injector import EventInjector
from simulation.price_engine import PriceEngine
from simulation.random_source import RandomNumberSource

BOOM = MarketEvent(ticker=Commodity.GOLD, factor=2.0, title="Boom", message="Up we go.")


@pytest.fixture
def engine() -> PriceEngine:
    return PriceEngine(DEFAULT_INSTRUMENTS, RandomNumberSource(seed=0))


class TestEventInjector:
    def test_never_fires_at_zero_probability(self, engine: PriceEngine):
        injector = EventInjector(DEFAULT_EVENT_CATALOG, 0.0, RandomNumberSource(seed=1))
        for step in range(500):
            assert injector.maybe_apply(engine, now=float(step)) is None
        assert injector.last_event is None

    def test_always_fires_at_full_probability(self, engine: PriceEngine):
        injector = EventInjector([BOOM], 1.0, RandomNumberSource(seed=1))
        applied = injector.maybe_apply(engine, now=4.0)
        assert applied is not None
        assert applied.event == BOOM
        assert applied.price_before == 1000.0
        assert applied.price_after == 2000.0
        assert applied.timestamp == 4.0
        assert injector.last_event == applied

    def test_shock_can_leave_band_and_next_tick_restores(self, engine: PriceEngine):
        injector = EventInjector([BOOM], 1.0, RandomNumberSource(seed=1))
        injector.maybe_apply(engine, now=1.0)
        gold = engine.instrument(Commodity.GOLD)
        assert engine.price(Commodity.GOLD) > gold.max_price

        engine.tick(now=2.0)
        assert gold.min_price <= engine.price(Commodity.GOLD) <= gold.max_price

    def test_rate_roughly_matches_probability(self, engine: PriceEngine):
        injector = EventInjector(DEFAULT_EVENT_CATALOG, 0.03, RandomNumberSource(seed=11))
        hits = sum(
            injector.maybe_apply(engine, now=float(step)) is not None for step in range(10_000)
        )
        assert 200 < hits < 400

    def test_picks_from_whole_catalog(self, engine: PriceEngine):
        injector = EventInjector(DEFAULT_EVENT_CATALOG, 1.0, RandomNumberSource(seed=5))
        seen = {injector.maybe_apply(engine, now=0.0).event.title for _ in range(400)}
        assert seen == {e.title for e in DEFAULT_EVENT_CATALOG}

    def test_empty_catalog_is_noop(self, engine: PriceEngine):
        injector = EventInjector([], 1.0, RandomNumberSource(seed=5))
        assert injector.maybe_apply(engine, now=0.0) is None

    def test_invalid_probability(self):
        with pytest.raises(ValueError):
            EventInjector(DEFAULT_EVENT_CATALOG, 1.5, RandomNumberSource(seed=5))

    def test_event_factor_must_be_positive(self):
        with pytest.raises(ValueError):
            MarketEvent(ticker=Commodity.DOGE, factor=0, title="Nope")
