"""Instrument definitions and price data models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class Commodity(str, Enum):
    """Tradable commodities. The set is fixed for a session."""

    DOGE = "DOGE"
    GME = "GME"
    TECH = "TECH"
    GOLD = "GOLD"


class Instrument(BaseModel):
    """Static definition of one commodity: identity, base price, random-walk
    parameters and the soft price band enforced by every ordinary tick."""

    model_config = ConfigDict(frozen=True)

    ticker: Commodity
    name: str
    description: str = ""
    base_price: float = Field(gt=0)
    volatility: float = Field(ge=0, description="Sigma per tick, as a fraction.")
    drift: float = Field(default=0.0, description="Mu per tick, as a fraction.")
    min_price: float = Field(gt=0)
    max_price: float = Field(gt=0)

    @model_validator(mode="after")
    def _check_bounds(self) -> Instrument:
        if not self.min_price <= self.base_price <= self.max_price:
            raise ValueError(
                f"{self.ticker.value}: base price {self.base_price} outside "
                f"[{self.min_price}, {self.max_price}]."
            )
        return self


class PricePoint(BaseModel):
    """One sample in an instrument's bounded price history."""

    timestamp: float
    price: float


class PriceQuote(BaseModel):
    """Read-only view of one instrument's price state after a tick."""

    ticker: Commodity
    price: float
    previous_price: float
    initial_price: float
    history: list[PricePoint] = []

    @property
    def change_pct(self) -> float:
        """Percent change from the previous tick."""
        if self.previous_price == 0:
            return 0.0
        return (self.price - self.previous_price) / self.previous_price * 100


DEFAULT_INSTRUMENTS: list[Instrument] = [
    Instrument(
        ticker=Commodity.DOGE,
        name="Kristal Dilithium",
        description="Pure energy crystals from asteroid mines",
        base_price=100.0,
        volatility=0.025,
        drift=0.0001,
        min_price=10.0,
        max_price=1000.0,
    ),
    Instrument(
        ticker=Commodity.GME,
        name="Komponen Quantum",
        description="Rare warp drive spare parts",
        base_price=500.0,
        volatility=0.02,
        drift=0.0,
        min_price=100.0,
        max_price=2000.0,
    ),
    Instrument(
        ticker=Commodity.TECH,
        name="Inti Fusi",
        description="Portable fusion reactors for starships",
        base_price=800.0,
        volatility=0.018,
        drift=0.0002,
        min_price=200.0,
        max_price=3000.0,
    ),
    Instrument(
        ticker=Commodity.GOLD,
        name="Debu Bintang",
        description="High-value cosmic particles for research",
        base_price=1000.0,
        volatility=0.01,
        drift=0.0,
        min_price=500.0,
        max_price=1500.0,
    ),
]
