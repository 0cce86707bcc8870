"""
Command-line entry point.

RUN:
    python -m wildsim --iterations 100
    API_URL=http://ingest.local/api python -m wildsim --roster examples/rosters/nairobi_park.json
    python -m wildsim --fast --iterations 1200 --seed 7   # ~1 simulated hour, no waiting

Flags override environment variables, which override built-in defaults.
"""

import argparse
import asyncio
import random
import sys
from pathlib import Path
from typing import List, Optional

from .clock import SimulatedClock
from .config import ConfigurationError, SimulatorConfig
from .delivery import DeliveryClient
from .logging_utils import LOG_TAG_ERROR, log_error, log_info
from .orchestrator import Orchestrator
from .roster import load_roster

EXIT_OK = 0
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wildsim",
        description="Stream synthetic wildlife-tracking telemetry to an ingestion API.",
    )
    parser.add_argument("--roster", type=Path, default=None, help="Agent roster JSON file")
    parser.add_argument("--iterations", type=int, default=None, help="Stop after N ticks")
    parser.add_argument("--interval", type=float, default=None, help="Seconds between ticks")
    parser.add_argument("--api-url", default=None, help="Ingestion API base URL")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible runs")
    parser.add_argument(
        "--startup-delay", type=float, default=None, help="Seconds to wait before the first tick"
    )
    parser.add_argument(
        "--fast",
        action="store_true",
        help="Run ticks back to back on a simulated clock instead of waiting",
    )
    return parser


def load_config(args: argparse.Namespace) -> SimulatorConfig:
    """Merge environment configuration with command-line overrides.

    ``--fast`` skips the startup delay unless ``--startup-delay`` is given.
    """
    startup_delay = args.startup_delay
    if args.fast and startup_delay is None:
        startup_delay = 0.0

    return SimulatorConfig.from_env().with_overrides(
        roster_path=args.roster,
        max_iterations=args.iterations,
        tick_interval_seconds=args.interval,
        api_url=args.api_url,
        seed=args.seed,
        startup_delay_seconds=startup_delay,
    )


def build_orchestrator(config: SimulatorConfig, *, fast: bool = False) -> Orchestrator:
    """Wire a ready-to-run Orchestrator from a validated configuration.

    Raises:
        ConfigurationError: If the roster cannot be loaded
    """
    agents = load_roster(config.roster_path)
    delivery = DeliveryClient(
        config.ingest_url,
        timeout=config.request_timeout_seconds,
        max_attempts=config.max_delivery_attempts,
        retry_delay_seconds=config.retry_delay_seconds,
    )

    clock = None
    if fast or config.time_scale != 1.0:
        clock = SimulatedClock(step_seconds=config.simulated_tick_seconds)

    return Orchestrator(
        agents,
        delivery,
        tick_interval_seconds=config.tick_interval_seconds,
        simulated_tick_seconds=config.simulated_tick_seconds,
        rng=random.Random(config.seed),
        clock=clock,
        pace=not fast,
        startup_delay_seconds=config.startup_delay_seconds,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
        orchestrator = build_orchestrator(config, fast=args.fast)
    except ConfigurationError as exc:
        log_error(f"{LOG_TAG_ERROR} Configuration error: {exc}")
        return EXIT_CONFIG_ERROR

    log_info(config.display())

    try:
        asyncio.run(orchestrator.run(config.max_iterations))
    except KeyboardInterrupt:
        summary = orchestrator.summary
        print("\n\nSimulation stopped by user")
        print(
            f"Completed {summary.iterations} iteration(s): "
            f"{summary.sent} sent, {summary.failed} failed"
        )
        return EXIT_INTERRUPTED

    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
