"""Simulation configuration models, loaded from YAML.

Every tunable of a session lives here: cadences, starting credits, the
instrument table, the event catalog, the bot roster and the strategy
thresholds. Defaults reproduce the stock game.
"""

from __future__ import annotations

import math
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, model_validator

from models.bot import BotStrategy
from models.events import DEFAULT_EVENT_CATALOG, MarketEvent
from models.instrument import DEFAULT_INSTRUMENTS, Instrument


class RoundingPolicy(BaseModel):
    """Fixed-precision rounding for prices and credits. ``None`` disables it."""

    price_decimals: int | None = Field(default=2, ge=0)
    credit_decimals: int | None = Field(default=2, ge=0)

    def round_price(self, value: float) -> float:
        if self.price_decimals is None:
            return value
        return round(value, self.price_decimals)

    def round_credits(self, value: float) -> float:
        if self.credit_decimals is None:
            return value
        return round(value, self.credit_decimals)

    def floor_quantity(self, value: float, decimals: int = 2) -> float:
        """Round a quantity down so its cost never exceeds the budget it came from."""
        factor = 10**decimals
        return math.floor(value * factor) / factor


# ---------------------------------------------------------------------------
# Strategy thresholds
# ---------------------------------------------------------------------------


class RandomThresholds(BaseModel):
    """Price-blind policy: buy with one probability, sell with another."""

    buy_probability: float = Field(default=0.2, ge=0, le=1)
    sell_probability: float = Field(default=0.2, ge=0, le=1)

    @model_validator(mode="after")
    def _check_total(self) -> RandomThresholds:
        if self.buy_probability + self.sell_probability > 1:
            raise ValueError("buy_probability + sell_probability must not exceed 1.")
        return self


class HodlThresholds(BaseModel):
    """Mostly buy and hold; the sell roll is independent and rarely wins."""

    buy_probability: float = Field(default=0.3, ge=0, le=1)
    sell_probability: float = Field(default=0.05, ge=0, le=1)


class MomentumThresholds(BaseModel):
    # Fractional move versus the previous tick that triggers a trade
    threshold: float = Field(default=0.01, ge=0)


class MeanReversionThresholds(BaseModel):
    # Fractional deviation from the session's initial price
    threshold: float = Field(default=0.05, ge=0)


class DipRallyThresholds(BaseModel):
    """Buy dips only, sell rallies only, both measured against the initial
    price, and only when the credit or holding gate is satisfied."""

    buy_below: float = Field(ge=0, lt=1)
    sell_above: float = Field(ge=0)
    min_credits: float = Field(default=0.0, ge=0)
    min_holding: float = Field(default=0.0, ge=0)


class StrategyTable(BaseModel):
    """One authoritative table of thresholds for every bot strategy."""

    random: RandomThresholds = Field(default_factory=RandomThresholds)
    hodl: HodlThresholds = Field(default_factory=HodlThresholds)
    momentum: MomentumThresholds = Field(default_factory=MomentumThresholds)
    mean_revert: MeanReversionThresholds = Field(default_factory=MeanReversionThresholds)
    aggressive: DipRallyThresholds = Field(
        default_factory=lambda: DipRallyThresholds(
            buy_below=0.05, sell_above=0.10, min_credits=500.0, min_holding=1.0
        )
    )
    conservative: DipRallyThresholds = Field(
        default_factory=lambda: DipRallyThresholds(
            buy_below=0.10, sell_above=0.05, min_credits=2000.0, min_holding=2.0
        )
    )


# ---------------------------------------------------------------------------
# Bots
# ---------------------------------------------------------------------------


class SizingConfig(BaseModel):
    """How a bot picks its trade quantity.

    ``fixed`` trades ``unit`` (or less when it cannot afford or does not hold
    that much). ``random_lot`` draws an integer in ``[lot_min, lot_max]`` and
    caps it by what the bot can afford or holds.
    """

    mode: Literal["fixed", "random_lot"] = "random_lot"
    unit: float = Field(default=1.0, gt=0)
    lot_min: int = Field(default=1, ge=1)
    lot_max: int = Field(default=5, ge=1)

    @model_validator(mode="after")
    def _check_band(self) -> SizingConfig:
        if self.lot_min > self.lot_max:
            raise ValueError(f"lot_min ({self.lot_min}) exceeds lot_max ({self.lot_max}).")
        return self


class ThinkInterval(BaseModel):
    """Band for each bot's private, re-drawn interval between actions (seconds)."""

    min_seconds: float = Field(default=2.0, ge=0)
    max_seconds: float = Field(default=6.0, ge=0)

    @model_validator(mode="after")
    def _check_band(self) -> ThinkInterval:
        if self.min_seconds > self.max_seconds:
            raise ValueError("think_interval.min_seconds exceeds max_seconds.")
        return self


class BotSpec(BaseModel):
    """One bot in the roster."""

    name: str
    strategy: BotStrategy
    credits: float | None = Field(
        default=None,
        gt=0,
        description="Starting credits; defaults to the session's initial_credits.",
    )
    sizing: SizingConfig | None = None


DEFAULT_BOTS: list[BotSpec] = [
    BotSpec(name="Bot Alpha", strategy=BotStrategy.RANDOM),
    BotSpec(name="Bot Beta", strategy=BotStrategy.MOMENTUM),
    BotSpec(name="Bot Gamma", strategy=BotStrategy.MEAN_REVERT),
    BotSpec(name="Bot Delta", strategy=BotStrategy.HODL),
    BotSpec(name="Bot Epsilon", strategy=BotStrategy.AGGRESSIVE),
    BotSpec(name="Bot Zeta", strategy=BotStrategy.CONSERVATIVE),
]


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class EventConfig(BaseModel):
    """Random market-event injection."""

    probability: float = Field(default=0.03, ge=0, le=1)
    catalog: list[MarketEvent] = Field(default_factory=lambda: list(DEFAULT_EVENT_CATALOG))


# ---------------------------------------------------------------------------
# Top level
# ---------------------------------------------------------------------------


class SimulationConfig(BaseModel):
    """Top-level configuration for a trading session."""

    session_duration: int = Field(default=300, ge=1, description="Session length in seconds.")
    price_interval: float = Field(default=2.0, gt=0, description="Seconds between price ticks.")
    bot_interval: float = Field(default=4.0, gt=0, description="Seconds between bot polls.")
    countdown_interval: float = Field(
        default=1.0, gt=0, description="Seconds per countdown unit."
    )
    initial_credits: float = Field(default=10_000.0, gt=0)
    history_capacity: int = Field(default=100, ge=1)
    cargo_epsilon: float = Field(
        default=0.01,
        ge=0,
        description="Cargo at or below this after a sale is removed from the ledger.",
    )
    leaderboard_size: int = Field(default=5, ge=1)
    rounding: RoundingPolicy = Field(default_factory=RoundingPolicy)
    seed: int | None = None
    player_name: str | None = Field(
        default=None,
        description="Display name of the human trader; a guest identity is used when unset.",
    )
    instruments: list[Instrument] = Field(default_factory=lambda: list(DEFAULT_INSTRUMENTS))
    events: EventConfig = Field(default_factory=EventConfig)
    bots: list[BotSpec] = Field(default_factory=lambda: list(DEFAULT_BOTS))
    strategies: StrategyTable = Field(default_factory=StrategyTable)
    sizing: SizingConfig = Field(default_factory=SizingConfig)
    think_interval: ThinkInterval = Field(default_factory=ThinkInterval)

    @model_validator(mode="after")
    def _check_references(self) -> SimulationConfig:
        tickers = [i.ticker for i in self.instruments]
        if not tickers:
            raise ValueError("At least one instrument is required.")
        if len(set(tickers)) != len(tickers):
            raise ValueError("Duplicate instrument tickers in configuration.")

        unknown = sorted({e.ticker.value for e in self.events.catalog} - {t.value for t in tickers})
        if unknown:
            raise ValueError(f"Event catalog references unknown instrument(s): {', '.join(unknown)}.")

        names = [b.name for b in self.bots]
        if len(set(names)) != len(names):
            raise ValueError("Bot names must be unique.")
        return self

    @classmethod
    def from_yaml(cls, path: str | Path) -> SimulationConfig:
        """Load and validate a ``SimulationConfig`` from a YAML file.

        Raises ``FileNotFoundError`` if the file does not exist and
        ``ValueError`` if the content is not a valid YAML mapping.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with path.open(encoding="utf-8") as fh:
            raw = yaml.safe_load(fh)

        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ValueError(
                f"Expected a YAML mapping in {path}, got {type(raw).__name__}."
            )

        return cls(**raw)
