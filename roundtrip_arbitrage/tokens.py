"""
Token descriptors and the two-token registry used by the arbitrage loop.
"""

import re
from dataclasses import dataclass
from typing import Dict

from .exceptions import TokenNotFoundError, ValidationError
from .units import MAX_DECIMALS

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_valid_address(address: str) -> bool:
    """Check if a string is a 0x-prefixed 20-byte hex address."""
    return isinstance(address, str) and bool(ADDRESS_PATTERN.match(address))


@dataclass(frozen=True)
class TokenDescriptor:
    """A fungible token the bot trades."""

    symbol: str
    address: str
    decimals: int

    def __post_init__(self):
        if not self.symbol:
            raise ValidationError("Token symbol is required")
        if not is_valid_address(self.address):
            raise ValidationError(
                f"Invalid address for token {self.symbol}: {self.address}"
            )
        if not 0 <= self.decimals <= MAX_DECIMALS:
            raise ValidationError(
                f"Token decimals must be between 0 and {MAX_DECIMALS}, "
                f"got {self.decimals} for {self.symbol}"
            )


class TokenRegistry:
    """
    Lookup table for the main and secondary token.

    Lookups by symbol are case-insensitive, as are lookups by address.
    Unknown symbols or addresses raise TokenNotFoundError.
    """

    def __init__(self, main: TokenDescriptor, secondary: TokenDescriptor):
        if main.symbol.upper() == secondary.symbol.upper():
            raise ValidationError(
                f"Main and secondary token must differ (both are {main.symbol})"
            )
        if main.address.lower() == secondary.address.lower():
            raise ValidationError(
                f"Main and secondary token share the address {main.address}"
            )
        self.main = main
        self.secondary = secondary
        self._by_symbol: Dict[str, TokenDescriptor] = {
            main.symbol.upper(): main,
            secondary.symbol.upper(): secondary,
        }
        self._by_address: Dict[str, TokenDescriptor] = {
            main.address.lower(): main,
            secondary.address.lower(): secondary,
        }

    @classmethod
    def from_config(cls, config) -> "TokenRegistry":
        """Build the registry from a validated BotConfig."""
        tokens = config.tokens
        return cls(
            main=TokenDescriptor(
                symbol=tokens.main_symbol,
                address=tokens.main_address,
                decimals=tokens.main_decimals,
            ),
            secondary=TokenDescriptor(
                symbol=tokens.secondary_symbol,
                address=tokens.secondary_address,
                decimals=tokens.secondary_decimals,
            ),
        )

    def get(self, symbol: str) -> TokenDescriptor:
        token = self._by_symbol.get(symbol.upper()) if symbol else None
        if token is None:
            raise TokenNotFoundError(f"Token not found: {symbol}", symbol=symbol)
        return token

    def by_address(self, address: str) -> TokenDescriptor:
        token = self._by_address.get(address.lower()) if address else None
        if token is None:
            raise TokenNotFoundError(
                f"No token registered at address {address}", address=address
            )
        return token

    def get_decimals(self, symbol: str) -> int:
        return self.get(symbol).decimals

    def __iter__(self):
        return iter((self.main, self.secondary))
