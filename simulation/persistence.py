"""Ledger persistence: durable (credits, cargo) records keyed by trader id.

Persistence sits on top of the ordinary trade logic. ``PersistentLedger`` is
a ``Ledger`` that writes its snapshot to a ``LedgerStore`` after every
successful trade. Loading never raises: an absent or unreadable record
yields ``None`` and the caller falls back to a fresh ledger.
"""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from models.config import RoundingPolicy
from models.instrument import Commodity
from models.ledger import LedgerSnapshot, TraderIdentity
from models.trade import ExecutedTrade, TradeAction
from simulation.ledger import Ledger

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class LedgerStore(ABC):
    """Load/save of a single ledger record keyed by trader id."""

    @abstractmethod
    def load(self, trader_id: str) -> LedgerSnapshot | None:
        """Return the stored snapshot, or ``None`` when absent or corrupt."""

    @abstractmethod
    def save(self, trader_id: str, snapshot: LedgerSnapshot) -> None:
        """Persist *snapshot* for *trader_id*, replacing any earlier record."""

    @abstractmethod
    def delete(self, trader_id: str) -> None:
        """Forget the record for *trader_id* if there is one."""


class InMemoryLedgerStore(LedgerStore):
    """Store backed by a dict of serialized records. Useful in tests."""

    def __init__(self) -> None:
        self._records: dict[str, str] = {}

    def load(self, trader_id: str) -> LedgerSnapshot | None:
        raw = self._records.get(trader_id)
        if raw is None:
            return None
        return _parse(raw, source=f"memory:{trader_id}")

    def save(self, trader_id: str, snapshot: LedgerSnapshot) -> None:
        self._records[trader_id] = snapshot.model_dump_json()

    def delete(self, trader_id: str) -> None:
        self._records.pop(trader_id, None)

    def put_raw(self, trader_id: str, raw: str) -> None:
        """Store an unvalidated record, bypassing serialization."""
        self._records[trader_id] = raw


class JsonLedgerStore(LedgerStore):
    """One JSON file per trader under *directory*."""

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, trader_id: str) -> Path:
        return self._directory / f"{_UNSAFE_CHARS.sub('_', trader_id)}.json"

    def load(self, trader_id: str) -> LedgerSnapshot | None:
        path = self.path_for(trader_id)
        if not path.exists():
            return None
        try:
            raw = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read ledger record %s: %s", path, exc)
            return None
        return _parse(raw, source=str(path))

    def save(self, trader_id: str, snapshot: LedgerSnapshot) -> None:
        self._directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(trader_id)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        tmp.replace(path)

    def delete(self, trader_id: str) -> None:
        self.path_for(trader_id).unlink(missing_ok=True)


def _parse(raw: str, source: str) -> LedgerSnapshot | None:
    try:
        return LedgerSnapshot.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning(
            "Discarding corrupt ledger record %s (%d error(s)).", source, exc.error_count()
        )
        return None


class PersistentLedger(Ledger):
    """Ledger that saves its snapshot after every successful trade."""

    def __init__(
        self,
        identity: TraderIdentity,
        store: LedgerStore,
        credits: float,
        cargo: dict[Commodity, float] | None = None,
        rounding: RoundingPolicy | None = None,
        cargo_epsilon: float = 0.01,
    ) -> None:
        super().__init__(
            identity,
            credits=credits,
            cargo=cargo,
            rounding=rounding,
            cargo_epsilon=cargo_epsilon,
        )
        self._store = store

    def trade(
        self,
        action: TradeAction,
        ticker: Commodity,
        quantity: float,
        price: float,
        timestamp: float | None = None,
    ) -> ExecutedTrade:
        executed = super().trade(action, ticker, quantity, price, timestamp)
        self.save()
        return executed

    def save(self) -> None:
        self._store.save(self.trader_id, self.snapshot())


def open_ledger(
    identity: TraderIdentity,
    store: LedgerStore,
    default_credits: float,
    rounding: RoundingPolicy | None = None,
    cargo_epsilon: float = 0.01,
    tickers: Iterable[Commodity] | None = None,
) -> PersistentLedger:
    """Restore *identity*'s ledger from *store*, or start a fresh one.

    When *tickers* is given, a saved record holding cargo outside that set
    cannot be valued by the current market and is discarded.
    """
    snapshot = store.load(identity.trader_id)
    if snapshot is not None and tickers is not None:
        traded = set(tickers)
        unknown = sorted(t.value for t in snapshot.cargo if t not in traded)
        if unknown:
            logger.warning(
                "Saved ledger for '%s' holds untraded cargo (%s); starting fresh.",
                identity.trader_id,
                ", ".join(unknown),
            )
            snapshot = None
    if snapshot is None:
        logger.info("No saved ledger for '%s'; starting fresh.", identity.trader_id)
        snapshot = LedgerSnapshot(credits=default_credits)
    else:
        logger.info(
            "Restored ledger for '%s': %.2f credits, %d cargo line(s).",
            identity.trader_id,
            snapshot.credits,
            len(snapshot.cargo),
        )
    ledger = PersistentLedger(
        identity,
        store,
        credits=snapshot.credits,
        cargo=dict(snapshot.cargo),
        rounding=rounding,
        cargo_epsilon=cargo_epsilon,
    )
    ledger.save()
    return ledger
