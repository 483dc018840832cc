"""
User-facing output for the arbitrage bot.

Every line the bot prints goes through ArbitrageReporter so the evaluator,
executor and service stay free of formatting concerns. Output is emitted on
the ``roundtrip_arbitrage.reporting`` logger.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .interfaces import SystemTimeProvider, TimeProvider
from .models import SessionStats, TradeResult
from .units import format_units, to_display
from .utils import format_duration

logger = logging.getLogger(__name__)

RULE = "━" * 73
WIDE_RULE = "━" * 103


class ArbitrageReporter:
    """
    Formats and emits bot output.

    Args:
        symbol: Main token symbol used as the unit in reports
        decimals: Main token decimal precision
        time_provider: Clock used for opportunity row timestamps
    """

    def __init__(
        self,
        symbol: str = "USDC",
        decimals: int = 6,
        time_provider: Optional[TimeProvider] = None,
        log: Optional[logging.Logger] = None,
    ):
        self.symbol = symbol
        self.decimals = decimals
        self.time_provider = time_provider or SystemTimeProvider()
        self.logger = log or logger

    def _amount(self, amount: int, places: int) -> str:
        return to_display(amount, self.decimals, places)

    def display_startup_info(
        self,
        network: str,
        wallet_address: str,
        token_address: str,
        amount_in: int,
        target_profit: Decimal,
    ) -> None:
        """Print the session banner: network, wallet, trade size and target."""
        start = format_units(amount_in, self.decimals)
        target_pct = target_profit / start * 100 if start else Decimal(0)
        self.logger.info(RULE)
        self.logger.info(f" Network: {network} | Wallet: {wallet_address}")
        self.logger.info(
            f" Main token ({self.symbol}): {token_address} | "
            f"Start: {start:.2f} {self.symbol}"
        )
        self.logger.info(f" Target profit: +{target_profit:.2f} ({target_pct:.0f} %)")
        self.logger.info(RULE)

    def display_trading_header(self) -> None:
        self.logger.info(WIDE_RULE)
        self.logger.info(
            " Date                | #  | Protocols            | In → Out    "
            "| PnL              | Balance | Action"
        )
        self.logger.info(WIDE_RULE)

    def format_opportunity(
        self,
        result: TradeResult,
        will_execute: bool,
        tx_count: int,
        session_profit: Decimal,
        primary_name: str,
        secondary_name: str,
    ) -> str:
        """Build one opportunity row for the trading log."""
        timestamp = datetime.fromtimestamp(
            self.time_provider.current_timestamp()
        ).strftime("%m/%d, %I:%M:%S %p")
        protocols = f"{primary_name} → {secondary_name}"
        amounts = (
            f"{self._amount(result.amount_in, 2)} → {self._amount(result.amount_out, 2)}"
        )
        sign = "+" if result.net_profit >= 0 else ""
        pnl = f"{'+' if result.profit_percentage >= 0 else ''}{result.profit_percentage:.3f}%"
        profit = f"{sign}{self._amount(result.net_profit, 6)}"
        balance = f"{session_profit:.6f}"
        action = "🚀 SWAP EXECUTED" if will_execute else "⏸️  NO SWAP"

        return (
            f" {timestamp} | {tx_count:>2} | {protocols:<20} | {amounts:<11} | "
            f"{pnl:<7} {profit:>8} | {balance:>7} | {action}"
        )

    def log_trade_opportunity(
        self,
        result: TradeResult,
        will_execute: bool,
        tx_count: int,
        session_profit: Decimal,
        primary_name: str,
        secondary_name: str,
    ) -> None:
        self.logger.info(
            self.format_opportunity(
                result,
                will_execute,
                tx_count,
                session_profit,
                primary_name,
                secondary_name,
            )
        )

    def log_bot_start(self) -> None:
        self.logger.info("🚀 Starting arbitrage bot...")

    def log_bot_stop(self) -> None:
        self.logger.info("🛑 Arbitrage bot stopped")

    def log_target_reached(self) -> None:
        self.logger.info("🎯 Target profit reached! Stopping bot...")

    def log_trade_execution(self) -> None:
        self.logger.info("🔄 Executing profitable trade...")

    def log_trade_success(self, profit: Decimal) -> None:
        self.logger.info(
            f"✅ Trade executed successfully! Profit: {profit:.6f} {self.symbol}"
        )

    def log_price_estimation(self, step: str) -> None:
        self.logger.info(f"Getting {step}...")

    def log_error(
        self, message: str, error: Optional[BaseException] = None
    ) -> None:
        """Report an error line; an exception adds its traceback."""
        if error is not None:
            self.logger.error(f"❌ {message}: {error}", exc_info=error)
        else:
            self.logger.error(f"❌ {message}")

    def log_warning(self, message: str) -> None:
        self.logger.warning(f"⚠️  {message}")

    def log_balance(self, balance: int) -> None:
        self.logger.info(
            f"💼 Wallet balance: {self._amount(balance, 6)} {self.symbol}"
        )

    def display_final_stats(self, stats: SessionStats) -> None:
        self.logger.info(RULE)
        self.logger.info("                            FINAL SESSION STATS")
        self.logger.info(RULE)
        self.logger.info(f"📊 Total Transactions: {stats.transaction_count}")
        self.logger.info(f"💰 Session Profit: {stats.session_profit:.6f} {self.symbol}")
        self.logger.info(f"⏱️  Runtime: {format_duration(stats.uptime_ms / 1000)}")
        self.logger.info(f"📈 Status: {'Running' if stats.is_running else 'Stopped'}")
        self.logger.info(RULE)

    def display_environment_info(self, use_mocks: bool) -> None:
        mode = "Mock" if use_mocks else "Production"
        self.logger.info("🚀 Starting DeFi Arbitrage Bot...")
        self.logger.info(f"📊 Environment: {mode} mode")

    def display_container_info(self, container_type: str) -> None:
        self.logger.info(f"🔧 Container configured with {container_type} implementations")

    def log_graceful_shutdown(
        self, signal_name: str, stats: Optional[SessionStats] = None
    ) -> None:
        self.logger.info(f"🛑 Received {signal_name}, shutting down gracefully...")
        if stats is not None:
            self.logger.info(
                f"📊 Final stats: {stats.transaction_count} transactions, "
                f"{stats.session_profit:.6f} {self.symbol} profit"
            )

    def log_payment_start(self) -> None:
        self.logger.info("💳 Executing x402 payment for premium content...")

    def log_payment_success(self, content: Optional[str] = None) -> None:
        self.logger.info("✅ x402 payment completed successfully")
        if content:
            self.logger.info(f"📄 Content received: {content}")

    def log_payment_warning(self, message: str) -> None:
        self.logger.warning(f"⚠️  x402 payment: {message}")
