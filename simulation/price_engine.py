"""Stochastic price engine.

Each tick moves every instrument by one random-walk step::

    delta = drift + volatility * z,   z ~ N(0, 1)
    new   = clamp(current * (1 + delta), min_price, max_price)

The engine is the sole owner of price state. Outside of ``tick`` the only
mutation is ``apply_shock``, used by the event injector.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field

from models.config import RoundingPolicy
from models.instrument import Commodity, Instrument, PricePoint, PriceQuote
from simulation.random_source import RandomNumberSource

logger = logging.getLogger(__name__)


@dataclass
class PriceState:
    """Mutable price state of one instrument."""

    instrument: Instrument
    current: float
    previous: float
    initial: float
    history: deque[PricePoint] = field(default_factory=deque)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class PriceEngine:
    """Owns per-instrument price state and advances it one tick at a time."""

    def __init__(
        self,
        instruments: list[Instrument],
        rng: RandomNumberSource,
        history_capacity: int = 100,
        rounding: RoundingPolicy | None = None,
        start_time: float = 0.0,
    ) -> None:
        self._rng = rng
        self._rounding = rounding or RoundingPolicy()
        self._states: dict[Commodity, PriceState] = {}
        for instrument in instruments:
            state = PriceState(
                instrument=instrument,
                current=instrument.base_price,
                previous=instrument.base_price,
                initial=instrument.base_price,
                history=deque(maxlen=history_capacity),
            )
            state.history.append(PricePoint(timestamp=start_time, price=instrument.base_price))
            self._states[instrument.ticker] = state

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def tick(self, now: float) -> dict[Commodity, float]:
        """Advance every instrument by one step and return the new prices."""
        for state in self._states.values():
            z = self._rng.standard_normal()
            self._step(state, z, now)
        snapshot = self.prices()
        logger.debug("Tick at t=%.1f: %s", now, {t.value: p for t, p in snapshot.items()})
        return snapshot

    def apply_shock(self, ticker: Commodity, factor: float, now: float) -> tuple[float, float]:
        """Multiply *ticker*'s price by *factor*, bypassing the clamp.

        The next ordinary tick pulls the price back into its band.
        ``previous`` is left alone so the shock shows up in the next
        tick-over-tick comparison. Returns ``(before, after)``.
        """
        if factor <= 0:
            raise ValueError(f"Shock factor must be positive, got {factor}.")
        state = self._state(ticker)
        before = state.current
        after = self._rounding.round_price(before * factor)
        if after <= 0:
            # Rounding a tiny price to zero would break the positive-price invariant.
            after = before * factor
        state.current = after
        state.history.append(PricePoint(timestamp=now, price=after))
        return before, after

    def _step(self, state: PriceState, z: float, now: float) -> float:
        instrument = state.instrument
        delta = instrument.drift + instrument.volatility * z
        raw = state.current * (1 + delta)
        new_price = clamp(
            self._rounding.round_price(raw),
            instrument.min_price,
            instrument.max_price,
        )
        state.previous = state.current
        state.current = new_price
        state.history.append(PricePoint(timestamp=now, price=new_price))
        return new_price

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def tickers(self) -> list[Commodity]:
        return list(self._states)

    def instrument(self, ticker: Commodity) -> Instrument:
        return self._state(ticker).instrument

    def price(self, ticker: Commodity) -> float:
        return self._state(ticker).current

    def previous_price(self, ticker: Commodity) -> float:
        return self._state(ticker).previous

    def initial_price(self, ticker: Commodity) -> float:
        return self._state(ticker).initial

    def history(self, ticker: Commodity) -> list[PricePoint]:
        return list(self._state(ticker).history)

    def prices(self) -> dict[Commodity, float]:
        """Current price of every instrument."""
        return {ticker: state.current for ticker, state in self._states.items()}

    def quote(self, ticker: Commodity) -> PriceQuote:
        state = self._state(ticker)
        return PriceQuote(
            ticker=ticker,
            price=state.current,
            previous_price=state.previous,
            initial_price=state.initial,
            history=list(state.history),
        )

    def quotes(self) -> list[PriceQuote]:
        return [self.quote(ticker) for ticker in self._states]

    def _state(self, ticker: Commodity) -> PriceState:
        try:
            return self._states[Commodity(ticker)]
        except (KeyError, ValueError):
            raise KeyError(f"Unknown instrument: {ticker}") from None
