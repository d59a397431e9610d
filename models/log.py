"""Run-level log models.

- ``SessionLog``: full audit trail of one session: trades, events and the
  final standings, with the configuration embedded for reproducibility.
"""

from __future__ import annotations

from pydantic import BaseModel

from models.config import SimulationConfig
from models.events import AppliedEvent
from models.ranking import RankingEntry
from models.session import SessionSnapshot
from models.trade import ExecutedTrade


class SessionLog(BaseModel):
    """Audit trail for one session.

    ``run_name`` is derived from the configuration file path by the CLI.
    """

    run_name: str
    config: SimulationConfig
    trades: list[ExecutedTrade] = []
    events: list[AppliedEvent] = []
    final_ranking: list[RankingEntry] = []
    final_snapshot: SessionSnapshot | None = None
    errors: list[str] = []
