"""
Value objects shared by the evaluator, executor and service.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .exceptions import ValidationError
from .units import format_units, parse_units, to_decimal


@dataclass(frozen=True)
class TradeParameters:
    """
    Per-session trading parameters.

    Attributes:
        amount_in: Main-token amount traded per cycle, in base units
        target_profit: Cumulative session profit goal, in human main-token units
        profit_threshold: Minimum net profit per cycle, in base units
        interval_seconds: Delay between the end of one cycle and the next
        payment_url: Content URL paid for once the target is reached
    """

    amount_in: int
    target_profit: Decimal
    profit_threshold: int
    interval_seconds: float
    payment_url: str = ""

    def __post_init__(self):
        if self.amount_in <= 0:
            raise ValidationError(f"amount_in must be positive, got {self.amount_in}")
        if self.profit_threshold < 0:
            raise ValidationError(
                f"profit_threshold must be non-negative, got {self.profit_threshold}"
            )
        if self.interval_seconds <= 0:
            raise ValidationError(
                f"interval_seconds must be positive, got {self.interval_seconds}"
            )
        if self.target_profit <= 0:
            raise ValidationError(
                f"target_profit must be positive, got {self.target_profit}"
            )

    @classmethod
    def from_config(cls, config, registry) -> "TradeParameters":
        """Scale the human-unit trading config to the main token's base units."""
        decimals = registry.main.decimals
        trading = config.trading
        return cls(
            amount_in=parse_units(trading.amount_in, decimals),
            target_profit=to_decimal(trading.target_balance_out),
            profit_threshold=parse_units(trading.profit_threshold, decimals),
            interval_seconds=trading.frequency_ms / 1000.0,
            payment_url=config.x402.payment_url,
        )


@dataclass(frozen=True)
class TradeResult:
    """Outcome of one round trip, estimated or realized."""

    amount_in: int
    amount_out: int
    net_profit: int
    profit_percentage: float
    gas_used: int = 0
    tx_hash: Optional[str] = None

    @classmethod
    def from_amounts(
        cls, amount_in: int, amount_out: int, decimals: int, gas_used: int = 0
    ) -> "TradeResult":
        net_profit = amount_out - amount_in
        # float only for display, decisions use net_profit
        percentage = float(
            format_units(net_profit, decimals) / format_units(amount_in, decimals) * 100
        )
        return cls(
            amount_in=amount_in,
            amount_out=amount_out,
            net_profit=net_profit,
            profit_percentage=percentage,
            gas_used=gas_used,
        )

    def net_profit_decimal(self, decimals: int) -> Decimal:
        return format_units(self.net_profit, decimals)


@dataclass(frozen=True)
class CycleOutcome:
    """What a single evaluated cycle decided and did."""

    estimate: TradeResult
    should_execute: bool
    executed: bool = False
    realized: Optional[TradeResult] = None


@dataclass(frozen=True)
class SessionStats:
    """Snapshot of session counters returned by ArbitrageService.get_stats()."""

    transaction_count: int
    session_profit: Decimal
    uptime_ms: int
    is_running: bool
