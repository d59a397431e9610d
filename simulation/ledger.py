"""Trader ledgers: credits, cargo and trade execution.

A ledger is the only place a trader's holdings change. Trades are
all-or-nothing: a rejected trade raises a ``TradeError`` subclass and leaves
the ledger exactly as it was.
"""

from __future__ import annotations

import logging
import math
import uuid
from numbers import Real

from models.config import RoundingPolicy
from models.instrument import Commodity
from models.ledger import LedgerSnapshot, TraderIdentity, TraderView
from models.trade import ExecutedTrade, TradeAction

logger = logging.getLogger(__name__)

# Absorbs float residue when comparing a sell request against holdings.
_QUANTITY_TOLERANCE = 1e-9


class TradeError(Exception):
    """Base class for recoverable trade rejections."""

    reason = "trade_error"


class InsufficientFunds(TradeError):
    reason = "insufficient_funds"


class InsufficientInventory(TradeError):
    reason = "insufficient_inventory"


class InvalidQuantity(TradeError):
    reason = "invalid_quantity"


class LedgerClosed(TradeError):
    reason = "session_ended"


class Ledger:
    """Credits plus cargo for one trader, human or bot.

    Invariants: ``credits >= 0`` and every cargo quantity is ``> 0``.
    Net worth is never stored; call ``net_worth`` with current prices.
    """

    def __init__(
        self,
        identity: TraderIdentity,
        credits: float,
        cargo: dict[Commodity, float] | None = None,
        rounding: RoundingPolicy | None = None,
        cargo_epsilon: float = 0.01,
    ) -> None:
        if credits < 0:
            raise ValueError(f"Starting credits must be non-negative, got {credits}.")
        self._identity = identity
        self._rounding = rounding or RoundingPolicy()
        self._cargo_epsilon = cargo_epsilon
        self._credits: float = self._rounding.round_credits(credits)
        self._cargo: dict[Commodity, float] = {
            Commodity(t): q for t, q in (cargo or {}).items() if q > cargo_epsilon
        }
        self._trade_history: list[ExecutedTrade] = []
        self._closed = False

    @classmethod
    def from_snapshot(
        cls,
        identity: TraderIdentity,
        snapshot: LedgerSnapshot,
        rounding: RoundingPolicy | None = None,
        cargo_epsilon: float = 0.01,
    ) -> Ledger:
        return cls(
            identity,
            credits=snapshot.credits,
            cargo=dict(snapshot.cargo),
            rounding=rounding,
            cargo_epsilon=cargo_epsilon,
        )

    # ------------------------------------------------------------------
    # Identity and holdings
    # ------------------------------------------------------------------

    @property
    def identity(self) -> TraderIdentity:
        return self._identity

    @property
    def trader_id(self) -> str:
        return self._identity.trader_id

    @property
    def name(self) -> str:
        return self._identity.name

    @property
    def is_bot(self) -> bool:
        return self._identity.is_bot

    @property
    def credits(self) -> float:
        return self._credits

    @property
    def cargo(self) -> dict[Commodity, float]:
        """Copy of the cargo hold (ticker -> quantity)."""
        return dict(self._cargo)

    def holding(self, ticker: Commodity) -> float:
        return self._cargo.get(Commodity(ticker), 0.0)

    @property
    def trade_history(self) -> list[ExecutedTrade]:
        return list(self._trade_history)

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Refuse every later trade. Used when the owning session ends."""
        self._closed = True

    # ------------------------------------------------------------------
    # Trading
    # ------------------------------------------------------------------

    def trade(
        self,
        action: TradeAction,
        ticker: Commodity,
        quantity: float,
        price: float,
        timestamp: float | None = None,
    ) -> ExecutedTrade:
        """Execute a buy or sell of *quantity* units of *ticker* at *price*.

        Raises ``InvalidQuantity`` for a non-numeric or non-positive quantity,
        ``InsufficientFunds`` when a buy costs more than the available credits
        and ``InsufficientInventory`` when a sell exceeds the cargo held.
        A closed ledger raises ``LedgerClosed`` for every trade.
        """
        if self._closed:
            raise LedgerClosed(
                f"Ledger for '{self.trader_id}' is closed; the session has ended."
            )
        action = TradeAction(action)
        ticker = Commodity(ticker)
        quantity = self._validate_quantity(quantity)
        if not (isinstance(price, Real) and math.isfinite(price) and price > 0):
            raise ValueError(f"Trade price must be a positive number, got {price!r}.")

        total = self._rounding.round_credits(quantity * price)

        if action is TradeAction.BUY:
            if self._credits < total:
                raise InsufficientFunds(
                    f"Insufficient funds to buy {quantity:g} {ticker.value} at "
                    f"{price:.2f} (cost {total:.2f}, available {self._credits:.2f})."
                )
            self._credits = self._rounding.round_credits(self._credits - total)
            self._cargo[ticker] = self._cargo.get(ticker, 0.0) + quantity
        else:
            held = self._cargo.get(ticker, 0.0)
            if quantity > held + _QUANTITY_TOLERANCE:
                raise InsufficientInventory(
                    f"Cannot sell {quantity:g} {ticker.value}: only {held:g} held."
                )
            remaining = held - quantity
            self._credits = self._rounding.round_credits(self._credits + total)
            if remaining <= self._cargo_epsilon:
                del self._cargo[ticker]
            else:
                self._cargo[ticker] = remaining

        executed = ExecutedTrade(
            trade_id=uuid.uuid4().hex[:12],
            trader_id=self.trader_id,
            ticker=ticker,
            action=action,
            quantity=quantity,
            price=price,
            total=total,
            timestamp=timestamp,
        )
        self._trade_history.append(executed)
        return executed

    def buy(self, ticker: Commodity, quantity: float, price: float) -> ExecutedTrade:
        return self.trade(TradeAction.BUY, ticker, quantity, price)

    def sell(self, ticker: Commodity, quantity: float, price: float) -> ExecutedTrade:
        return self.trade(TradeAction.SELL, ticker, quantity, price)

    @staticmethod
    def _validate_quantity(quantity: object) -> float:
        if isinstance(quantity, bool) or not isinstance(quantity, Real):
            raise InvalidQuantity(f"Quantity must be a number, got {quantity!r}.")
        value = float(quantity)
        if not math.isfinite(value) or value <= 0:
            raise InvalidQuantity(f"Quantity must be positive, got {quantity!r}.")
        return value

    # ------------------------------------------------------------------
    # Valuation
    # ------------------------------------------------------------------

    def cargo_value(self, prices: dict[Commodity, float]) -> float:
        return sum(qty * prices[ticker] for ticker, qty in self._cargo.items())

    def net_worth(self, prices: dict[Commodity, float]) -> float:
        """Credits plus the current-price value of all cargo."""
        return self._credits + self.cargo_value(prices)

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(credits=self._credits, cargo=dict(self._cargo))

    def view(self, prices: dict[Commodity, float], strategy: str | None = None) -> TraderView:
        cargo_value = self.cargo_value(prices)
        return TraderView(
            trader_id=self.trader_id,
            name=self.name,
            is_bot=self.is_bot,
            strategy=strategy,
            credits=self._credits,
            cargo=dict(self._cargo),
            cargo_value=cargo_value,
            net_worth=self._credits + cargo_value,
        )
