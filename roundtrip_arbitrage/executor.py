"""
Sequential execution of a profitable round trip.
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from .interfaces import SwapProvider
from .models import TradeResult
from .reporting import ArbitrageReporter
from .session import SessionState
from .tokens import TokenRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_venue(call: Awaitable[T], timeout: Optional[float]) -> T:
    """Await a venue call, bounded by ``timeout`` seconds when one is set."""
    if timeout is None:
        return await call
    return await asyncio.wait_for(call, timeout)


class TradeExecutor:
    """
    Executes both legs of a round trip and books the realized profit.

    Session counters are touched only after both swaps return an amount.
    If the first leg fills and the second does not, the secondary tokens
    already bought stay where they are; no unwind is attempted.
    """

    def __init__(
        self,
        primary_venue: SwapProvider,
        secondary_venue: SwapProvider,
        registry: TokenRegistry,
        reporter: ArbitrageReporter,
        venue_timeout_seconds: Optional[float] = None,
    ):
        self.primary_venue = primary_venue
        self.secondary_venue = secondary_venue
        self.registry = registry
        self.reporter = reporter
        self.venue_timeout_seconds = venue_timeout_seconds

    async def execute(
        self, amount_in: int, session: SessionState
    ) -> Optional[TradeResult]:
        """
        Execute main -> secondary on the primary venue, then back on the secondary.

        Args:
            amount_in: Main-token amount in base units, same as the estimate used
            session: Session counters to update on success

        Returns:
            The realized TradeResult, or None if either swap failed
        """
        main = self.registry.main
        secondary = self.registry.secondary

        self.reporter.log_trade_execution()

        secondary_amount = await call_venue(
            self.primary_venue.execute_swap(amount_in, main.address, secondary.address),
            self.venue_timeout_seconds,
        )
        if not secondary_amount:
            self.reporter.log_error("First swap failed")
            return None

        amount_out = await call_venue(
            self.secondary_venue.execute_swap(
                secondary_amount, secondary.address, main.address
            ),
            self.venue_timeout_seconds,
        )
        if not amount_out:
            logger.warning(
                f"Second leg failed with {secondary_amount} {secondary.symbol} "
                f"base units left unreconciled"
            )
            self.reporter.log_error("Second swap failed")
            return None

        realized = TradeResult.from_amounts(amount_in, amount_out, main.decimals)
        profit = realized.net_profit_decimal(main.decimals)
        session.record_trade(profit)

        self.reporter.log_trade_success(profit)
        return realized
