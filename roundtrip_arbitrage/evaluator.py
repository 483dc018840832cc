"""
Round-trip opportunity evaluation.

One cycle quotes main -> secondary on the primary venue, then secondary -> main
on the secondary venue, computes the net profit in main-token base units and
decides against the configured threshold.
"""

import logging
from typing import Optional

from .executor import TradeExecutor, call_venue
from .interfaces import SwapProvider
from .models import CycleOutcome, TradeParameters, TradeResult
from .reporting import ArbitrageReporter
from .session import SessionState
from .tokens import TokenRegistry

logger = logging.getLogger(__name__)


class ArbitrageCycleEvaluator:
    """
    Evaluates one round trip and hands profitable ones to the executor.

    The primary venue is always queried first. When it has no quote the
    secondary venue is never called, and nothing past the error line is
    reported for that cycle.
    """

    def __init__(
        self,
        primary_venue: SwapProvider,
        secondary_venue: SwapProvider,
        registry: TokenRegistry,
        params: TradeParameters,
        executor: TradeExecutor,
        reporter: ArbitrageReporter,
        venue_timeout_seconds: Optional[float] = None,
    ):
        self.primary_venue = primary_venue
        self.secondary_venue = secondary_venue
        self.registry = registry
        self.params = params
        self.executor = executor
        self.reporter = reporter
        self.venue_timeout_seconds = venue_timeout_seconds

    async def estimate(self) -> Optional[TradeResult]:
        """
        Quote the full round trip for the configured trade size.

        Returns:
            The estimated TradeResult, or None if either venue had no quote
        """
        main = self.registry.main
        secondary = self.registry.secondary
        amount_in = self.params.amount_in

        self.reporter.log_price_estimation(
            f"{secondary.symbol} from {self.primary_venue.name}"
        )
        secondary_amount = await call_venue(
            self.primary_venue.estimate_price(amount_in, main.address, secondary.address),
            self.venue_timeout_seconds,
        )
        if not secondary_amount:
            self.reporter.log_error(
                f"Failed to get {secondary.symbol} price from {self.primary_venue.name}"
            )
            return None

        self.reporter.log_price_estimation(
            f"{main.symbol} from {self.secondary_venue.name}"
        )
        amount_out = await call_venue(
            self.secondary_venue.estimate_price(
                secondary_amount, secondary.address, main.address
            ),
            self.venue_timeout_seconds,
        )
        if not amount_out:
            self.reporter.log_error(
                f"Failed to get {main.symbol} price from {self.secondary_venue.name}"
            )
            return None

        logger.debug(
            f"Round trip quote: {amount_in} -> {secondary_amount} -> {amount_out}"
        )
        return TradeResult.from_amounts(amount_in, amount_out, main.decimals)

    def should_execute(self, result: TradeResult) -> bool:
        """A trade executes when its net profit meets the threshold (ties included)."""
        return result.net_profit >= self.params.profit_threshold

    async def evaluate(self, session: SessionState) -> Optional[CycleOutcome]:
        """
        Run one full evaluation: quote, decide, execute, report.

        Args:
            session: Counters updated by the executor on a successful trade

        Returns:
            CycleOutcome, or None if the cycle aborted on a missing quote
        """
        estimate = await self.estimate()
        if estimate is None:
            return None

        should_execute = self.should_execute(estimate)
        realized = None
        if should_execute:
            realized = await self.executor.execute(self.params.amount_in, session)

        # The row always shows the estimated output, not the realized one
        self.reporter.log_trade_opportunity(
            estimate,
            should_execute,
            session.transaction_count,
            session.session_profit,
            self.primary_venue.name,
            self.secondary_venue.name,
        )

        return CycleOutcome(
            estimate=estimate,
            should_execute=should_execute,
            executed=realized is not None,
            realized=realized,
        )
