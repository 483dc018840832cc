"""
Arbitrage session lifecycle.

ArbitrageService owns the session counters and the periodic timer. It is
Idle until start(), Running while its timer task exists, and Idle again after
stop() or once the profit target is reached.
"""

import asyncio
import logging
from typing import Optional

from .container import AppDependencies
from .evaluator import ArbitrageCycleEvaluator
from .executor import TradeExecutor
from .interfaces import SystemTimeProvider, TimeProvider
from .models import CycleOutcome, SessionStats, TradeParameters
from .reporting import ArbitrageReporter
from .session import SessionState
from .tokens import TokenRegistry

logger = logging.getLogger(__name__)


class ArbitrageService:
    """
    Periodic round-trip arbitrage loop.

    Cycles never overlap: the timer task awaits each cycle before sleeping,
    and run_cycle() refuses re-entry. stop() cancels the timer but a cycle
    already in flight runs to completion.

    Args:
        dependencies: Venues, content buyer and optional wallet
        registry: Main and secondary token descriptors
        params: Trade size, threshold, target and interval
        reporter: Output sink, built from the registry if omitted
        time_provider: Clock for uptime
        venue_timeout_seconds: Optional bound on each venue call
        network: Network name shown in the startup banner
        wallet_address: Wallet shown in the startup banner
    """

    def __init__(
        self,
        dependencies: AppDependencies,
        registry: TokenRegistry,
        params: TradeParameters,
        reporter: Optional[ArbitrageReporter] = None,
        time_provider: Optional[TimeProvider] = None,
        venue_timeout_seconds: Optional[float] = None,
        network: str = "",
        wallet_address: str = "",
    ):
        self.dependencies = dependencies
        self.registry = registry
        self.params = params
        self.time_provider = time_provider or SystemTimeProvider()
        self.reporter = reporter or ArbitrageReporter(
            symbol=registry.main.symbol,
            decimals=registry.main.decimals,
            time_provider=self.time_provider,
        )
        self.network = network
        self.wallet_address = wallet_address

        self.session = SessionState(start_time=self.time_provider.current_timestamp())

        self.executor = TradeExecutor(
            dependencies.primary_venue,
            dependencies.secondary_venue,
            registry,
            self.reporter,
            venue_timeout_seconds=venue_timeout_seconds,
        )
        self.evaluator = ArbitrageCycleEvaluator(
            dependencies.primary_venue,
            dependencies.secondary_venue,
            registry,
            params,
            self.executor,
            self.reporter,
            venue_timeout_seconds=venue_timeout_seconds,
        )

        self._timer: Optional[asyncio.Task] = None
        self._current_cycle: Optional[asyncio.Future] = None
        self._cycle_in_progress = False
        self._payment_made = False
        self._stopped = asyncio.Event()

    @classmethod
    def from_config(
        cls,
        config,
        dependencies: AppDependencies,
        time_provider: Optional[TimeProvider] = None,
    ) -> "ArbitrageService":
        """Build a service from a validated BotConfig."""
        registry = TokenRegistry.from_config(config)
        return cls(
            dependencies,
            registry,
            TradeParameters.from_config(config, registry),
            time_provider=time_provider,
            venue_timeout_seconds=config.trading.venue_timeout_seconds,
            network=config.network.name,
            wallet_address=config.address or "",
        )

    @property
    def is_running(self) -> bool:
        return self._timer is not None

    @property
    def venue_timeout_seconds(self) -> Optional[float]:
        return self.evaluator.venue_timeout_seconds

    @venue_timeout_seconds.setter
    def venue_timeout_seconds(self, value: Optional[float]) -> None:
        self.evaluator.venue_timeout_seconds = value
        self.executor.venue_timeout_seconds = value

    async def initialize(self) -> None:
        """Print the startup banner, the wallet balance and the trading header."""
        main = self.registry.main
        self.reporter.display_startup_info(
            self.network,
            self.wallet_address,
            main.address,
            self.params.amount_in,
            self.params.target_profit,
        )

        wallet = self.dependencies.wallet
        if wallet is not None:
            try:
                balance = await wallet.get_balance(main.address)
                self.reporter.log_balance(balance)
            except Exception as e:
                self.reporter.log_warning(f"Could not read wallet balance: {e}")

        self.reporter.display_trading_header()

    def start(self) -> None:
        """
        Enter the Running state.

        The first cycle runs immediately; later cycles run ``interval_seconds``
        after the previous one settles. Must be called from a running loop.
        Calling start() while already running does nothing.
        """
        if self._timer is not None:
            logger.debug("start() called while running, ignoring")
            return

        loop = asyncio.get_running_loop()
        self.reporter.log_bot_start()
        self._stopped.clear()
        if self._current_cycle is None or self._current_cycle.done():
            self._current_cycle = loop.create_task(self.run_cycle())
        self._timer = loop.create_task(self._run_timer())

    def stop(self) -> None:
        """Leave the Running state. A no-op when already idle."""
        if self._timer is None:
            return

        self._timer.cancel()
        self._timer = None
        self._stopped.set()
        self.reporter.log_bot_stop()

    async def wait_until_stopped(self) -> None:
        """Wait for the service to go idle, then for any in-flight cycle."""
        if self._timer is not None:
            await self._stopped.wait()
        if self._current_cycle is not None and not self._current_cycle.done():
            await self._current_cycle

    async def _run_timer(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            # shield: cancelling the timer must not cancel the cycle itself
            await asyncio.shield(self._current_cycle)
            await asyncio.sleep(self.params.interval_seconds)
            self._current_cycle = loop.create_task(self.run_cycle())

    async def run_cycle(self) -> Optional[CycleOutcome]:
        """
        Run one arbitrage cycle.

        Unexpected errors are reported and swallowed here so the timer keeps
        ticking. Reaching the profit target pays for the content and stops
        the service before this coroutine returns.

        Returns:
            The CycleOutcome, or None if the cycle aborted or was skipped
        """
        if self._cycle_in_progress:
            logger.warning("Arbitrage cycle already in progress, skipping")
            return None

        self._cycle_in_progress = True
        try:
            outcome = await self.evaluator.evaluate(self.session)
            if outcome is None:
                return None

            if self.session.target_reached(self.params.target_profit):
                await self._handle_target_reached()
            return outcome
        except Exception as e:
            self.reporter.log_error("Error in arbitrage cycle", e)
            return None
        finally:
            self._cycle_in_progress = False

    async def _handle_target_reached(self) -> None:
        self.reporter.log_target_reached()
        if not self._payment_made:
            self._payment_made = True
            await self._execute_payment()
        self.stop()

    async def _execute_payment(self) -> None:
        self.reporter.log_payment_start()
        try:
            content = await self.dependencies.buyer.buy_content(self.params.payment_url)
        except Exception as e:
            self.reporter.log_error("Failed to execute x402 payment", e)
            return

        if content:
            self.reporter.log_payment_success(content)
        else:
            self.reporter.log_payment_warning("Payment completed but no content received")

    def get_stats(self) -> SessionStats:
        return SessionStats(
            transaction_count=self.session.transaction_count,
            session_profit=self.session.session_profit,
            uptime_ms=self.session.uptime_ms(self.time_provider.current_timestamp()),
            is_running=self.is_running,
        )

    def display_final_stats(self) -> None:
        self.reporter.display_final_stats(self.get_stats())
