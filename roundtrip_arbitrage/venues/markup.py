"""
Markup-simulating venue wrapper.

Wraps another venue and, with a fixed probability, inflates its quote by a
multiplier to simulate a stale quote that looks like an arbitrage
opportunity. Executed swaps forward an amount inflated by the same multiplier.
"""

import logging
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal
from typing import Optional

from ..exceptions import ValidationError
from ..interfaces import RandomProvider, SwapProvider, SystemRandomProvider

logger = logging.getLogger(__name__)

DEFAULT_MARKUP_PROBABILITY = 0.30
DEFAULT_MARKUP_MULTIPLIER = Decimal("1.1")


class MarkupSwapProvider:
    """
    SwapProvider that marks up another venue's quotes.

    Args:
        inner: Venue that actually quotes and executes
        random_provider: Source of the markup coin flip
        probability: Chance that a quote is marked up
        multiplier: Markup factor applied to quotes and executed amounts
        name: Venue name used in reports
    """

    def __init__(
        self,
        inner: SwapProvider,
        random_provider: Optional[RandomProvider] = None,
        probability: float = DEFAULT_MARKUP_PROBABILITY,
        multiplier=DEFAULT_MARKUP_MULTIPLIER,
        name: str = "Custom DEX",
    ):
        if not 0.0 <= probability <= 1.0:
            raise ValidationError(
                f"Markup probability must be between 0 and 1, got {probability}"
            )
        multiplier = Decimal(str(multiplier))
        if multiplier <= 0:
            raise ValidationError(f"Markup multiplier must be positive, got {multiplier}")

        self.inner = inner
        self.random_provider = random_provider or SystemRandomProvider()
        self.probability = probability
        self.multiplier = multiplier
        self.name = name

    async def estimate_price(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        estimate = await self.inner.estimate_price(amount_in, token_in, token_out)
        if estimate is None:
            return None

        if self.random_provider.random() < self.probability:
            marked_up = int(
                (Decimal(estimate) * self.multiplier).to_integral_value(ROUND_FLOOR)
            )
            logger.debug(f"Marked up quote {estimate} -> {marked_up}")
            return marked_up

        return estimate

    async def execute_swap(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        inflated = int(
            (Decimal(amount_in) * self.multiplier).to_integral_value(ROUND_CEILING)
        )
        return await self.inner.execute_swap(inflated, token_in, token_out)

    async def close(self) -> None:
        close = getattr(self.inner, "close", None)
        if close is not None:
            await close()
