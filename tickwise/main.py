#!/usr/bin/env python3
# TICKWISE_FEAT: main-entry-001
"""
TICKWISE - Main Entry Point
===========================

Backtest and paper trading entry point.

Usage:
    python -m tickwise.main --config config/backtest.yaml
    python -m tickwise.main --config config/backtest.yaml --list-dateranges
    python -m tickwise.main --config config/backtest.yaml --mode paper

Author: TICKWISE Development Team
Version: 1.0.0
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from shared.tickwise_core.constants import SERVICE_BROKER, SERVICE_STORAGE
from shared.tickwise_core.exceptions import TickwiseError
from shared.tickwise_core.models import to_iso
from tickwise.core.config_manager import ConfigManager, SystemConfig
from tickwise.core.orchestrator import Orchestrator
from tickwise.plugins import default_registry
from tickwise.services import Storage, SQLStorage, create_broker


def setup_logging(level: str = "INFO") -> None:
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="TICKWISE - Backtesting & Paper Trading Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        default="config/backtest.yaml",
        help="Path to configuration file (default: config/backtest.yaml)",
    )

    parser.add_argument(
        "-m", "--mode",
        type=str,
        choices=["backtest", "paper", "live"],
        default=None,
        help="Run mode (overrides config)",
    )

    parser.add_argument(
        "-l", "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (overrides config)",
    )

    parser.add_argument(
        "-p", "--pair",
        type=str,
        default=None,
        help="Pair to run or inspect (default: first watched pair)",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate config and exit without running",
    )

    parser.add_argument(
        "--list-dateranges",
        action="store_true",
        help="Print the date ranges with stored candles and exit",
    )

    return parser.parse_args(argv)


def list_date_ranges(storage: Storage, pair: Optional[str] = None) -> int:
    """Print every contiguous candle date range. Always closes the storage."""
    try:
        ranges = storage.get_candle_dateranges(pair)
        if not ranges:
            print("No date ranges found.")
            return 0
        print("Available date ranges:")
        for daterange in ranges:
            print(f"-> {to_iso(daterange.start)} - {to_iso(daterange.end)}")
        return 0
    finally:
        storage.close()


def _install_signal_handlers(cancel_event: asyncio.Event, logger: logging.Logger) -> None:
    loop = asyncio.get_running_loop()

    def _request_stop() -> None:
        logger.info("Shutdown requested, finishing current tick...")
        cancel_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _request_stop)
        except (NotImplementedError, RuntimeError):
            logger.debug(f"Signal handler for {sig.name} not supported here")


async def run_pipeline(config: SystemConfig, pair: str, storage: Storage) -> int:
    """Run the configured plugins over the stored candles of one pair."""
    logger = logging.getLogger("TICKWISE_MAIN")

    broker = create_broker(
        config.broker.name,
        markets={symbol: limits.to_limits() for symbol, limits in config.broker.markets.items()},
    )
    orchestrator = Orchestrator(
        mode=config.mode,
        # Plugins without their own pair run on the selected one
        plugin_settings=[{"pair": pair, **entry.settings()} for entry in config.plugins],
        registry=default_registry(),
        services={SERVICE_BROKER: broker, SERVICE_STORAGE: storage},
    )
    await orchestrator.build()

    candles = storage.get_candles(pair, config.watch.date_range())
    if not candles:
        logger.warning(f"No candles stored for {pair}")

    cancel_event = asyncio.Event()
    _install_signal_handlers(cancel_event, logger)

    logger.info(f"Running {len(candles)} candles of {pair} in {config.mode} mode")
    outcome = await orchestrator.run(candles, cancel_event=cancel_event)

    logger.info(f"Run {outcome.status.value} after {outcome.ticks_processed} ticks")
    print(json.dumps(outcome.to_dict(), indent=2, default=str))
    return 0


async def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    config_path = Path(args.config)
    config_manager = ConfigManager()
    loaded = config_manager.load(config_path)

    level = args.log_level or (
        config_manager.get("monitoring.log_level") or "INFO"
    )
    setup_logging(str(level))
    logger = logging.getLogger("TICKWISE_MAIN")

    logger.info("=" * 60)
    logger.info("TICKWISE - Backtesting & Paper Trading Engine")
    logger.info("=" * 60)

    if not loaded:
        logger.error(f"Configuration file not found or unreadable: {config_path}")
        return 1

    if args.mode:
        config_manager.set("watch.mode", args.mode)
        logger.info(f"Mode overridden to: {args.mode}")

    errors = config_manager.validate()
    if errors:
        for error in errors:
            logger.error(f"Validation error: {error}")
        return 1

    config = config_manager.config
    pair = args.pair or config.watch.symbols[0]

    if args.dry_run:
        logger.info("Configuration valid!")
        logger.info(f"Mode: {config.mode}")
        logger.info(f"Pairs: {config.watch.symbols}")
        logger.info(f"Plugins: {[entry.name for entry in config.plugins]}")
        return 0

    storage = SQLStorage(config.storage.url, default_pair=pair, echo=config.storage.echo)

    if args.list_dateranges:
        return list_date_ranges(storage, pair)

    try:
        return await run_pipeline(config, pair, storage)
    except TickwiseError as e:
        logger.error(f"Run failed: {e}")
        return 1
    finally:
        storage.close()


def run() -> None:
    """Synchronous entry point."""
    try:
        exit_code = asyncio.run(main())
        sys.exit(exit_code)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
