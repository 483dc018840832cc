"""
Round-trip arbitrage bot CLI.

Loads configuration from the environment (and ``.env``), optionally a YAML
file, then runs the arbitrage loop until the profit target is reached or the
process receives SIGINT/SIGTERM.

Usage:
    roundtrip-arbitrage
    roundtrip-arbitrage --mock
    roundtrip-arbitrage --config configs/bot.yaml --once
"""

import argparse
import asyncio
import logging
import signal
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from .config_loader import load_config
from .config_schema import BotConfig
from .container import AppDependencies, create_container
from .exceptions import ArbitrageBotError
from .service import ArbitrageService
from .utils import configure_logging

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="roundtrip-arbitrage",
        description="Round-trip arbitrage bot between two swap venues",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run with simulated venues
  roundtrip-arbitrage --mock

  # Use a YAML config on top of the environment
  roundtrip-arbitrage --config configs/bot.yaml

  # Single cycle (for testing/CI)
  roundtrip-arbitrage --mock --once
        """,
    )

    parser.add_argument(
        "--config",
        default=None,
        help="Path to config YAML file, merged over environment settings",
    )

    parser.add_argument(
        "--mock",
        action="store_true",
        help="Use simulated venues, payment and wallet",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=None,
        help="Override the configured log level",
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single arbitrage cycle and exit",
    )

    return parser.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> dict:
    """Translate CLI flags into configuration overrides."""
    overrides: dict = {}
    if args.mock:
        overrides["environment"] = {"use_mocks": True}
    if args.log_level:
        overrides["logging"] = {"level": args.log_level}
    return overrides


async def close_dependencies(dependencies: AppDependencies) -> None:
    """Release venue connections that hold one (ccxt sessions)."""
    for venue in (dependencies.primary_venue, dependencies.secondary_venue):
        close = getattr(venue, "close", None)
        if close is None:
            continue
        try:
            await close()
        except Exception as e:
            logger.warning(f"Failed to close {getattr(venue, 'name', venue)}: {e}")


def install_signal_handlers(service: ArbitrageService) -> None:
    loop = asyncio.get_running_loop()

    def shutdown(sig: signal.Signals) -> None:
        service.reporter.log_graceful_shutdown(sig.name, service.get_stats())
        service.stop()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown, sig)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows event loops
            logger.debug(f"Cannot install handler for {sig.name}")


async def run(config: BotConfig, once: bool = False) -> int:
    """
    Run the bot with a validated configuration.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    container = create_container(config)
    dependencies = container.get_dependencies()
    service = ArbitrageService.from_config(config, dependencies)

    service.reporter.display_environment_info(config.environment.use_mocks)
    service.reporter.display_container_info(container.factory.name)

    try:
        await service.initialize()

        if once:
            await service.run_cycle()
        else:
            install_signal_handlers(service)
            service.start()
            await service.wait_until_stopped()

        service.display_final_stats()
    finally:
        await close_dependencies(dependencies)

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)
    load_dotenv(find_dotenv(usecwd=True))

    try:
        config = load_config(args.config, overrides=build_overrides(args))
    except ArbitrageBotError as e:
        print(f"❌ Config error: {e}", file=sys.stderr)
        for error in e.details.get("errors", []):
            print(f"- {error}", file=sys.stderr)
        return 1

    configure_logging(config.logging.level, config.logging.file)

    try:
        return asyncio.run(run(config, once=args.once))
    except ArbitrageBotError as e:
        logger.error(f"❌ Failed to start arbitrage bot: {e}")
        return 1
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
