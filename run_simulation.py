#!/usr/bin/env python3
"""CLI entrypoint for the commodity market simulation.

Usage::

    python run_simulation.py
    python run_simulation.py --config config/default.yaml --output-dir results/
    python run_simulation.py --config config/default.yaml --realtime --player-name Ana

Runs one headless session (the player holds; bots trade), writes the session
log and summary, and prints the final leaderboard. Without ``--realtime`` the
clock is fast-forwarded, so a 5-minute session completes instantly.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from models.config import SimulationConfig
from simulation.persistence import JsonLedgerStore
from simulation.session import Simulation
from simulation.sim_logging import SimulationLogger, build_summary, run_name_from_config_path


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run a multi-agent commodity trading session.",
    )
    parser.add_argument(
        "--config",
        default=None,
        type=str,
        help="Path to the YAML configuration file (default: built-in defaults).",
    )
    parser.add_argument(
        "--output-dir",
        default="results",
        type=str,
        help="Directory where session results will be written (default: results/).",
    )
    parser.add_argument(
        "--seed",
        default=None,
        type=int,
        help="Random seed; overrides the config value.",
    )
    parser.add_argument(
        "--player-name",
        default=None,
        type=str,
        help="Player display name; a guest identity is generated when omitted.",
    )
    parser.add_argument(
        "--ledger-dir",
        default=None,
        type=str,
        help="Persist the player's ledger in this directory across runs.",
    )
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Pace the session against the wall clock instead of fast-forwarding.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO).",
    )
    return parser.parse_args()


def _setup_logging(level: str) -> None:
    """Configure root logger with a clean format."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
    )


async def _main() -> None:
    args = _parse_args()
    _setup_logging(args.log_level)

    logger = logging.getLogger(__name__)
    if args.config:
        logger.info("Loading config from '%s'...", args.config)
        config = SimulationConfig.from_yaml(args.config)
    else:
        config = SimulationConfig()

    overrides = {}
    if args.seed is not None:
        overrides["seed"] = args.seed
    if args.player_name is not None:
        overrides["player_name"] = args.player_name
    if overrides:
        config = config.model_copy(update=overrides)

    store = JsonLedgerStore(args.ledger_dir) if args.ledger_dir else None
    simulation = Simulation(config, store=store)
    session = simulation.session

    run_name = run_name_from_config_path(args.config)
    sim_logger = SimulationLogger(args.output_dir, config, run_name)
    sim_logger.init_run(args.config)

    await session.run(realtime=args.realtime)

    sim_logger.record_session(session)
    sim_logger.finalize(build_summary(session, sim_logger.run_dir.name))

    for entry in session.final_ranking() or []:
        marker = " (you)" if entry.is_player else ""
        logger.info("#%d %-12s %12.2f Cr%s", entry.rank, entry.name, entry.net_worth, marker)
    logger.info("Output: %s", sim_logger.run_dir)


def main() -> None:
    asyncio.run(_main())


if __name__ == "__main__":
    main()
