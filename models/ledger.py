"""Trader identity and ledger state models."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field, field_validator

from models.instrument import Commodity


class TraderIdentity(BaseModel):
    """Who owns a ledger. ``trader_id`` is also the persistence key."""

    trader_id: str
    name: str
    is_bot: bool = False

    @classmethod
    def guest(cls) -> TraderIdentity:
        """Identity used when no authenticated player is available."""
        suffix = uuid.uuid4().hex[:6]
        return cls(trader_id=f"guest-{suffix}", name=f"Guest {suffix.upper()}")


class LedgerSnapshot(BaseModel):
    """Credits and cargo (ticker -> quantity). This is the persisted record."""

    credits: float = Field(ge=0)
    cargo: dict[Commodity, float] = {}

    @field_validator("cargo")
    @classmethod
    def _positive_quantities(cls, cargo: dict[Commodity, float]) -> dict[Commodity, float]:
        bad = [ticker.value for ticker, qty in cargo.items() if not qty > 0]
        if bad:
            raise ValueError(f"Cargo quantities must be positive: {', '.join(bad)}.")
        return cargo


class TraderView(BaseModel):
    """One trader as exposed to observers, with net worth freshly derived."""

    trader_id: str
    name: str
    is_bot: bool
    strategy: str | None = None
    credits: float
    cargo: dict[Commodity, float]
    cargo_value: float
    net_worth: float
