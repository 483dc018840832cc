"""
Round-Trip Arbitrage Bot.

Periodically quotes a main -> secondary -> main round trip across two swap
venues, executes it when the net profit clears a threshold, and pays once for
premium content over x402 when the session profit target is reached.
"""

PROJECT_NAME = "Roundtrip-Arbitrage"
VERSION = "1.0.0"

from roundtrip_arbitrage.container import (
    AppDependencies,
    Container,
    MockDependencyFactory,
    ProductionDependencyFactory,
    create_container,
)
from roundtrip_arbitrage.evaluator import ArbitrageCycleEvaluator
from roundtrip_arbitrage.executor import TradeExecutor
from roundtrip_arbitrage.models import (
    CycleOutcome,
    SessionStats,
    TradeParameters,
    TradeResult,
)
from roundtrip_arbitrage.reporting import ArbitrageReporter
from roundtrip_arbitrage.service import ArbitrageService
from roundtrip_arbitrage.session import SessionState
from roundtrip_arbitrage.tokens import TokenDescriptor, TokenRegistry

__all__ = [
    "PROJECT_NAME",
    "VERSION",
    "AppDependencies",
    "Container",
    "MockDependencyFactory",
    "ProductionDependencyFactory",
    "create_container",
    "ArbitrageCycleEvaluator",
    "TradeExecutor",
    "CycleOutcome",
    "SessionStats",
    "TradeParameters",
    "TradeResult",
    "ArbitrageReporter",
    "ArbitrageService",
    "SessionState",
    "TokenDescriptor",
    "TokenRegistry",
]
