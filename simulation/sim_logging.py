"""Session output logging: persists the SessionLog and a run summary.

The output directory structure is::

    {output_dir}/{run_name}/
    ├── config.yaml
    ├── session_log.json
    ├── trades.json
    └── summary.json
"""

from __future__ import annotations

import json
import logging
import shutil
from pathlib import Path
from typing import Any

import yaml

from models.config import SimulationConfig
from models.log import SessionLog
from simulation.session import TradingSession

logger = logging.getLogger(__name__)


def run_name_from_config_path(config_path: str | Path | None) -> str:
    """Derive a run name from the configuration file path (stem without extension)."""
    if config_path is None:
        return "default"
    return Path(config_path).stem


class SimulationLogger:
    """Manages on-disk output for a session run.

    Call ``init_run`` once at the start, ``record_session`` after the session
    ends, and ``finalize`` at the very end.
    """

    def __init__(
        self,
        output_dir: str | Path,
        config: SimulationConfig,
        run_name: str,
    ) -> None:
        self._config = config
        self._run_dir = _unique_run_dir(Path(output_dir), run_name)
        self._session_log = SessionLog(run_name=self._run_dir.name, config=config)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def init_run(self, config_yaml_path: str | Path | None = None) -> None:
        """Create the output directory and copy (or dump) the config."""
        self._run_dir.mkdir(parents=True, exist_ok=True)
        dest = self._run_dir / "config.yaml"
        if config_yaml_path is not None:
            shutil.copy2(config_yaml_path, dest)
            logger.info("Copied config to %s", dest)
        else:
            dest.write_text(
                yaml.safe_dump(self._config.model_dump(mode="json"), sort_keys=False),
                encoding="utf-8",
            )
            logger.info("Wrote effective config to %s", dest)

    def record_session(self, session: TradingSession) -> None:
        """Capture trades, events and final standings from a finished session."""
        self._session_log.trades = session.trades
        self._session_log.events = session.events
        self._session_log.final_ranking = session.final_ranking() or session.rankings()
        self._session_log.final_snapshot = session.snapshot()

        if session.trades:
            _write_json(
                self._run_dir / "trades.json",
                [t.model_dump(mode="json") for t in session.trades],
            )
        logger.info(
            "Recorded session: %d trade(s), %d event(s).",
            len(session.trades),
            len(session.events),
        )

    def record_error(self, message: str) -> None:
        """Append an error message to the run-level log."""
        self._session_log.errors.append(message)
        logger.error("Simulation error: %s", message)

    def finalize(self, summary: dict[str, Any] | None = None) -> None:
        """Write the session log and optional summary."""
        _write_json(
            self._run_dir / "session_log.json",
            self._session_log.model_dump(mode="json"),
        )
        if summary is not None:
            _write_json(self._run_dir / "summary.json", summary)
        logger.info("Session log finalized at %s", self._run_dir)

    @property
    def session_log(self) -> SessionLog:
        return self._session_log

    @property
    def run_dir(self) -> Path:
        return self._run_dir


def build_summary(session: TradingSession, run_name: str) -> dict[str, Any]:
    """Lightweight summary: final standings and per-trader returns."""
    prices = session.engine.prices()
    standings = []
    for entry in session.rankings():
        ledger = session.ledger(entry.trader_id)
        start = session.starting_net_worth(entry.trader_id)
        standings.append(
            {
                "rank": entry.rank,
                "name": entry.name,
                "is_player": entry.is_player,
                "credits": ledger.credits,
                "cargo": {t.value: q for t, q in ledger.cargo.items()},
                "net_worth": entry.net_worth,
                "return_pct": ((entry.net_worth - start) / start) * 100 if start > 0 else None,
                "trades": len(ledger.trade_history),
            }
        )
    return {
        "run_name": run_name,
        "state": session.state.value,
        "elapsed": session.clock.elapsed,
        "final_prices": {t.value: p for t, p in prices.items()},
        "events": len(session.events),
        "total_trades": len(session.trades),
        "standings": standings,
    }


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _unique_run_dir(output_dir: Path, run_name: str) -> Path:
    """Return a run directory that does not already exist.

    If ``output_dir/run_name`` is free, use it directly (first run keeps
    a clean name).  Otherwise append an incrementing suffix:
    ``run_name_001``, ``run_name_002``, etc.
    """
    candidate = output_dir / run_name
    if not candidate.exists():
        return candidate

    idx = 1
    while True:
        candidate = output_dir / f"{run_name}_{idx:03d}"
        if not candidate.exists():
            return candidate
        idx += 1


def _write_json(path: Path, data: Any) -> None:
    """Write *data* as pretty-printed JSON to *path*."""
    path.write_text(json.dumps(data, indent=2, default=str), encoding="utf-8")
