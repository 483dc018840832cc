"""
Simulated venues for mock mode and tests.

Both venues quote ``amount_in`` times a factor drawn uniformly from
[1.01, 1.05], so every simulated round trip shows a small profit.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from ..interfaces import RandomProvider, SystemRandomProvider

logger = logging.getLogger(__name__)

MIN_FACTOR = 1.01
MAX_FACTOR = 1.05


class _SimulatedVenue:
    name = "Simulated"

    def __init__(self, random_provider: Optional[RandomProvider] = None):
        self.random_provider = random_provider or SystemRandomProvider()

    def _quote(self, amount_in: int) -> int:
        factor = Decimal(str(self.random_provider.uniform(MIN_FACTOR, MAX_FACTOR)))
        return int((Decimal(amount_in) * factor).to_integral_value(ROUND_HALF_UP))


class MockPrimaryVenue(_SimulatedVenue):
    """Stand-in for the custodial venue. Every swap is re-quoted."""

    name = "MockCDP"

    async def estimate_price(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        return self._quote(amount_in)

    async def execute_swap(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        amount_out = self._quote(amount_in)
        logger.debug(f"{self.name} filled {amount_in} -> {amount_out}")
        return amount_out


class MockSecondaryVenue(_SimulatedVenue):
    """Stand-in for the AMM. A swap fills at the last quoted amount."""

    name = "MockUniswap"

    def __init__(self, random_provider: Optional[RandomProvider] = None):
        super().__init__(random_provider)
        self.last_estimate: Optional[int] = None

    async def estimate_price(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        self.last_estimate = self._quote(amount_in)
        return self.last_estimate

    async def execute_swap(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        if self.last_estimate is None:
            return await self.estimate_price(amount_in, token_in, token_out)
        logger.debug(f"{self.name} filled {amount_in} -> {self.last_estimate}")
        return self.last_estimate
