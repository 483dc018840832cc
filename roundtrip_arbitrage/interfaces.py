"""
Capability interfaces injected into the arbitrage service.

Venues, the content buyer and the wallet are external collaborators reached
only through these protocols. Time and randomness are injected the same way so
that sessions and simulated venues are deterministic under test.
"""

import random
import time
from typing import Optional, Protocol, runtime_checkable


@runtime_checkable
class SwapProvider(Protocol):
    """
    A venue that can quote and execute a token swap.

    Both methods return ``None`` for expected business failures (no liquidity,
    rejected quote, reverted swap). Unexpected faults may raise and are caught
    by the caller's cycle boundary.
    """

    name: str

    async def estimate_price(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        """Estimate the output amount, in token_out base units."""
        ...

    async def execute_swap(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        """Perform the swap and return the received amount in base units."""
        ...


@runtime_checkable
class ContentPayment(Protocol):
    """Pays for and fetches premium content."""

    async def buy_content(self, url: str) -> Optional[str]:
        """Return the purchased content, or None if nothing was received."""
        ...


@runtime_checkable
class Wallet(Protocol):
    """Read-only balance lookup."""

    async def get_balance(self, token_address: str) -> int:
        """Return the balance of a token in base units."""
        ...


@runtime_checkable
class TimeProvider(Protocol):
    """Protocol for time-related operations."""

    def current_timestamp(self) -> float:
        """Get current Unix timestamp."""
        ...

    def current_time_ms(self) -> int:
        """Get current time in milliseconds."""
        ...


@runtime_checkable
class RandomProvider(Protocol):
    """Protocol for random number generation."""

    def random(self) -> float:
        """Generate random float between 0.0 and 1.0."""
        ...

    def uniform(self, a: float, b: float) -> float:
        """Generate random float between a and b."""
        ...

    def seed(self, seed_value: int) -> None:
        """Set random seed for reproducibility."""
        ...


class SystemTimeProvider:
    """Production time provider using system time."""

    def current_timestamp(self) -> float:
        return time.time()

    def current_time_ms(self) -> int:
        return int(time.time() * 1000)


class SystemRandomProvider:
    """Production random provider with its own generator."""

    def __init__(self, seed: Optional[int] = None):
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return self._rng.uniform(a, b)

    def seed(self, seed_value: int) -> None:
        self._rng.seed(seed_value)


class DeterministicTimeProvider:
    """Deterministic time provider for testing."""

    def __init__(self, start_time: float = 1640995200.0):  # 2022-01-01
        self._current_time = start_time

    def current_timestamp(self) -> float:
        return self._current_time

    def current_time_ms(self) -> int:
        return int(self._current_time * 1000)

    def advance_time(self, seconds: float) -> None:
        """Manually advance time by specified seconds."""
        self._current_time += seconds

    def set_time(self, timestamp: float) -> None:
        self._current_time = timestamp


class DeterministicRandomProvider:
    """
    Deterministic random provider for testing.

    With ``values`` the provider replays that sequence for random() (cycling),
    otherwise it draws from a seeded generator.
    """

    def __init__(self, seed: int = 42, values: Optional[list] = None):
        self._rng = random.Random(seed)
        self._values = list(values) if values else []
        self._index = 0

    def random(self) -> float:
        if self._values:
            value = self._values[self._index % len(self._values)]
            self._index += 1
            return value
        return self._rng.random()

    def uniform(self, a: float, b: float) -> float:
        return a + (b - a) * self.random()

    def seed(self, seed_value: int) -> None:
        self._rng = random.Random(seed_value)
        self._index = 0
