"""
Exception hierarchy for the round-trip arbitrage bot.

Business-level failures (no quote, swap could not complete) are signalled by
``None`` returns from venues. Exceptions are reserved for configuration problems
and for faults that the cycle boundary has to catch and report.
"""

from typing import Any, Dict, Optional


class ArbitrageBotError(Exception):
    """Base exception for all arbitrage bot errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class ConfigurationError(ArbitrageBotError):
    """Raised when configuration cannot be loaded or wired."""

    pass


class ValidationError(ArbitrageBotError):
    """Raised when validation of data or configuration fails."""

    pass


class TokenNotFoundError(ArbitrageBotError):
    """Raised when a token lookup by symbol or address has no match."""

    def __init__(
        self,
        message: str,
        symbol: Optional[str] = None,
        address: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.symbol = symbol
        self.address = address


class VenueError(ArbitrageBotError):
    """Raised when a swap venue fails unexpectedly."""

    def __init__(
        self,
        message: str,
        venue: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.venue = venue



class PaymentError(ArbitrageBotError):
    """Raised when the paid content fetch fails."""

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, details)
        self.url = url
