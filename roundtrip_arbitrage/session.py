"""
Mutable per-session counters.

A SessionState is owned by exactly one ArbitrageService. Counters only ever
grow, and they grow together through record_trade().
"""

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass
class SessionState:
    """Session-lifetime counters, preserved across stop()/start()."""

    start_time: float
    transaction_count: int = 0
    session_profit: Decimal = field(default_factory=lambda: Decimal(0))

    def record_trade(self, profit: Decimal) -> None:
        """Add one successful round trip and its realized profit."""
        self.session_profit += profit
        self.transaction_count += 1

    def target_reached(self, target: Decimal) -> bool:
        return self.session_profit >= target

    def uptime_ms(self, now: float) -> int:
        return int((now - self.start_time) * 1000)
