"""Built-in bot strategies.

Each policy looks at exactly one instrument per decision cycle. Thresholds
come from the session's ``StrategyTable``.
"""

from __future__ import annotations

from abc import abstractmethod

from bots.base import StrategyPolicy
from bots.registry import register
from models.bot import BotStrategy, Signal
from models.config import DipRallyThresholds
from models.instrument import Commodity
from simulation.ledger import Ledger
from simulation.price_engine import PriceEngine


@register(BotStrategy.RANDOM)
class RandomPolicy(StrategyPolicy):
    """Price-blind: one roll decides buy, sell or hold."""

    def signal(self, ticker: Commodity, engine: PriceEngine, ledger: Ledger) -> Signal:
        params = self.table.random
        roll = self.rng.random()
        if roll < params.buy_probability:
            return Signal.BUY
        if roll < params.buy_probability + params.sell_probability:
            return Signal.SELL
        return Signal.HOLD


@register(BotStrategy.HODL)
class HodlPolicy(StrategyPolicy):
    """Buys often, sells rarely. Two independent rolls; buying wins a tie."""

    def signal(self, ticker: Commodity, engine: PriceEngine, ledger: Ledger) -> Signal:
        params = self.table.hodl
        wants_buy = self.rng.random() < params.buy_probability
        wants_sell = self.rng.random() < params.sell_probability
        if wants_buy:
            return Signal.BUY
        if wants_sell:
            return Signal.SELL
        return Signal.HOLD


@register(BotStrategy.MOMENTUM)
class MomentumPolicy(StrategyPolicy):
    """Follow the last tick: buy a rise, sell a fall beyond the threshold."""

    def signal(self, ticker: Commodity, engine: PriceEngine, ledger: Ledger) -> Signal:
        threshold = self.table.momentum.threshold
        current = engine.price(ticker)
        previous = engine.previous_price(ticker)
        if current > previous * (1 + threshold):
            return Signal.BUY
        if current < previous * (1 - threshold):
            return Signal.SELL
        return Signal.HOLD


@register(BotStrategy.MEAN_REVERT)
class MeanReversionPolicy(StrategyPolicy):
    """Bet on a return to the session's opening price."""

    def signal(self, ticker: Commodity, engine: PriceEngine, ledger: Ledger) -> Signal:
        threshold = self.table.mean_revert.threshold
        current = engine.price(ticker)
        initial = engine.initial_price(ticker)
        if current < initial * (1 - threshold):
            return Signal.BUY
        if current > initial * (1 + threshold):
            return Signal.SELL
        return Signal.HOLD


class DipRallyPolicy(StrategyPolicy):
    """Buy dips and sell rallies relative to the opening price, gated on a
    minimum credit balance (buys) and a minimum holding (sells)."""

    @abstractmethod
    def thresholds(self) -> DipRallyThresholds:
        """Thresholds for this flavour of dip/rally trading."""

    def signal(self, ticker: Commodity, engine: PriceEngine, ledger: Ledger) -> Signal:
        params = self.thresholds()
        current = engine.price(ticker)
        initial = engine.initial_price(ticker)
        held = ledger.holding(ticker)

        if current < initial * (1 - params.buy_below) and ledger.credits >= params.min_credits:
            return Signal.BUY
        if (
            current > initial * (1 + params.sell_above)
            and held > 0
            and held >= params.min_holding
        ):
            return Signal.SELL
        return Signal.HOLD


@register(BotStrategy.AGGRESSIVE)
class AggressivePolicy(DipRallyPolicy):
    def thresholds(self) -> DipRallyThresholds:
        return self.table.aggressive


@register(BotStrategy.CONSERVATIVE)
class ConservativePolicy(DipRallyPolicy):
    def thresholds(self) -> DipRallyThresholds:
        return self.table.conservative
