"""Autonomous trading bots.

A ``BotAgent`` wraps a ledger with a decision policy and a lot sizer. All
bots are polled on the session's shared bot schedule, but each one only
acts once its own randomized think interval has elapsed, so their activity
stays staggered.
"""

from __future__ import annotations

import logging

from bots.base import StrategyPolicy
from bots.sizing import LotSizer
from models.bot import BotDecision, BotStrategy, Signal
from models.config import ThinkInterval
from models.trade import ExecutedTrade, TradeAction
from simulation.ledger import Ledger
from simulation.price_engine import PriceEngine
from simulation.random_source import RandomNumberSource

logger = logging.getLogger(__name__)

_SIGNAL_TO_ACTION = {Signal.BUY: TradeAction.BUY, Signal.SELL: TradeAction.SELL}


class BotAgent:
    """A ledger-holder driven by one fixed strategy."""

    def __init__(
        self,
        ledger: Ledger,
        policy: StrategyPolicy,
        sizer: LotSizer,
        rng: RandomNumberSource,
        think_interval: ThinkInterval | None = None,
        start_time: float = 0.0,
    ) -> None:
        self.ledger = ledger
        self.policy = policy
        self.sizer = sizer
        self._rng = rng
        self._think = think_interval or ThinkInterval()
        self.last_action_at = start_time
        self.interval = self._draw_interval()

    @property
    def strategy(self) -> BotStrategy:
        return self.policy.strategy

    @property
    def trader_id(self) -> str:
        return self.ledger.trader_id

    @property
    def name(self) -> str:
        return self.ledger.name

    def is_due(self, now: float) -> bool:
        return now - self.last_action_at >= self.interval

    def decide(self, engine: PriceEngine, now: float) -> BotDecision | None:
        """Evaluate one randomly chosen instrument. ``None`` means hold."""
        ticker = self._rng.choice(engine.tickers)
        signal = self.policy.signal(ticker, engine, self.ledger)
        if signal is Signal.HOLD:
            return None

        action = _SIGNAL_TO_ACTION[signal]
        price = engine.price(ticker)
        quantity = self.sizer.size(action, ticker, price, self.ledger)
        if quantity <= 0:
            return None
        return BotDecision(
            bot_id=self.trader_id,
            ticker=ticker,
            action=action,
            quantity=quantity,
            price=price,
        )

    def act(self, decision: BotDecision, now: float | None = None) -> ExecutedTrade:
        """Apply a decision produced by ``decide``.

        Sizing already guarantees the trade fits, so any ``TradeError``
        raised here is a bug and propagates.
        """
        executed = self.ledger.trade(
            decision.action,
            decision.ticker,
            decision.quantity,
            decision.price,
            timestamp=now,
        )
        logger.info(
            "%s (%s) %s %g %s @ %.2f",
            self.name,
            self.strategy.value,
            decision.action.value,
            decision.quantity,
            decision.ticker.value,
            decision.price,
        )
        return executed

    def poll(self, engine: PriceEngine, now: float) -> ExecutedTrade | None:
        """Run one decision cycle if this bot's think interval has elapsed."""
        if not self.is_due(now):
            return None
        self.last_action_at = now
        self.interval = self._draw_interval()

        decision = self.decide(engine, now)
        if decision is None:
            return None
        return self.act(decision, now)

    def _draw_interval(self) -> float:
        return self._rng.uniform(self._think.min_seconds, self._think.max_seconds)
