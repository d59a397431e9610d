"""Trade sizing for bots.

The size a bot picks is already capped by what it can afford (buys) or
holds (sells), so a sized trade can never be rejected by the ledger. A size
of zero means the bot should hold.
"""

from __future__ import annotations

import math

from models.config import RoundingPolicy, SizingConfig
from models.instrument import Commodity
from models.trade import TradeAction
from simulation.ledger import Ledger
from simulation.random_source import RandomNumberSource

# Fractional buys are sized in steps of 0.01 units.
_QUANTITY_DECIMALS = 2
_QUANTITY_STEP = 0.01


class LotSizer:
    """Picks a quantity for a bot trade.

    ``fixed`` mode:      ``min(unit, affordable | held)``
    ``random_lot`` mode: ``min(randint(lot_min, lot_max), floor(affordable) | held)``
    """

    def __init__(
        self,
        config: SizingConfig,
        rng: RandomNumberSource,
        rounding: RoundingPolicy | None = None,
    ) -> None:
        self.config = config
        self._rng = rng
        self._rounding = rounding or RoundingPolicy()

    def size(
        self,
        action: TradeAction,
        ticker: Commodity,
        price: float,
        ledger: Ledger,
    ) -> float:
        """Quantity to trade, or ``0.0`` when nothing can be traded."""
        if action is TradeAction.BUY:
            cap = self.max_affordable(price, ledger)
            if self.config.mode == "random_lot":
                cap = float(math.floor(cap))
        else:
            cap = ledger.holding(ticker)

        if cap <= 0:
            return 0.0

        if self.config.mode == "fixed":
            wanted = self.config.unit
        else:
            wanted = float(self._rng.randint(self.config.lot_min, self.config.lot_max))
        return min(wanted, cap)

    def max_affordable(self, price: float, ledger: Ledger) -> float:
        """Largest quantity (in 0.01 steps) whose rounded cost fits the credits."""
        quantity = self._rounding.floor_quantity(ledger.credits / price, _QUANTITY_DECIMALS)
        while quantity > 0 and self._rounding.round_credits(quantity * price) > ledger.credits:
            quantity = round(quantity - _QUANTITY_STEP, _QUANTITY_DECIMALS)
        return max(quantity, 0.0)
