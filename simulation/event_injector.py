"""Random market events: occasional multiplicative shocks to one instrument."""

from __future__ import annotations

import logging

from models.events import AppliedEvent, MarketEvent
from simulation.price_engine import PriceEngine
from simulation.random_source import RandomNumberSource

logger = logging.getLogger(__name__)


class EventInjector:
    """Rolls once per eligible tick; on a hit, applies one catalog event
    chosen uniformly at random."""

    def __init__(
        self,
        catalog: list[MarketEvent],
        probability: float,
        rng: RandomNumberSource,
    ) -> None:
        if not 0 <= probability <= 1:
            raise ValueError(f"Event probability must be in [0, 1], got {probability}.")
        self._catalog = list(catalog)
        self._probability = probability
        self._rng = rng
        self._last: AppliedEvent | None = None

    @property
    def last_event(self) -> AppliedEvent | None:
        """Most recent event applied this session, if any."""
        return self._last

    def maybe_apply(self, engine: PriceEngine, now: float) -> AppliedEvent | None:
        """Roll for an event and apply it to *engine*. Returns the event or ``None``."""
        if not self._catalog or self._rng.random() >= self._probability:
            return None
        event = self._rng.choice(self._catalog)
        return self.apply(event, engine, now)

    def apply(self, event: MarketEvent, engine: PriceEngine, now: float) -> AppliedEvent:
        before, after = engine.apply_shock(event.ticker, event.factor, now)
        applied = AppliedEvent(
            event=event,
            price_before=before,
            price_after=after,
            timestamp=now,
        )
        self._last = applied
        logger.info(
            "Market event '%s': %s %.2f -> %.2f (x%.2f)",
            event.title,
            event.ticker.value,
            before,
            after,
            event.factor,
        )
        return applied
