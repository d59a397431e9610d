"""Market event catalog models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from models.instrument import Commodity


class MarketEvent(BaseModel):
    """Exogenous shock: multiply one instrument's price by ``factor``."""

    ticker: Commodity
    factor: float = Field(gt=0)
    title: str
    message: str = ""


class AppliedEvent(BaseModel):
    """A catalog event after it has hit the market."""

    event: MarketEvent
    price_before: float
    price_after: float
    timestamp: float


DEFAULT_EVENT_CATALOG: list[MarketEvent] = [
    MarketEvent(
        ticker=Commodity.DOGE,
        factor=1.25,
        title="Asteroid vein discovered",
        message="Miners hit a rich dilithium seam. Demand spikes across the sector.",
    ),
    MarketEvent(
        ticker=Commodity.DOGE,
        factor=0.75,
        title="Mining colony strike",
        message="Dilithium shipments stall as the belt workers walk out.",
    ),
    MarketEvent(
        ticker=Commodity.GME,
        factor=1.3,
        title="Warp drive recall",
        message="A fleet-wide recall sends buyers scrambling for quantum components.",
    ),
    MarketEvent(
        ticker=Commodity.GME,
        factor=0.8,
        title="Component glut",
        message="A derelict freighter full of spare parts floods the market.",
    ),
    MarketEvent(
        ticker=Commodity.TECH,
        factor=1.2,
        title="Fusion breakthrough",
        message="New containment fields double reactor lifetimes.",
    ),
    MarketEvent(
        ticker=Commodity.TECH,
        factor=0.85,
        title="Reactor meltdown",
        message="A station accident rattles confidence in portable fusion cores.",
    ),
    MarketEvent(
        ticker=Commodity.GOLD,
        factor=1.15,
        title="Research grant wave",
        message="Science guilds bid up stardust for new experiments.",
    ),
    MarketEvent(
        ticker=Commodity.GOLD,
        factor=0.9,
        title="Nebula harvest",
        message="A passing nebula leaves collectors with a stardust surplus.",
    ),
]
