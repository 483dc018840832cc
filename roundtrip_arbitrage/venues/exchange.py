"""
Custodial exchange venue backed by ccxt.

Quotes come from the top of book (ask when buying, bid when selling) net of
the market's taker fee. Swaps are market orders, polled until they settle;
the filled amount is converted back to base units of the received token.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

import ccxt.async_support as ccxt

from ..exceptions import ConfigurationError, VenueError
from ..tokens import TokenDescriptor, TokenRegistry
from ..units import format_units, to_decimal, truncate_units

logger = logging.getLogger(__name__)

DEFAULT_TAKER_FEE = Decimal("0.006")
DEFAULT_ORDER_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 0.5
MAX_POLL_INTERVAL = 5.0

FAILED_STATUSES = ("canceled", "cancelled", "rejected", "expired")

# Wrapped tokens trade under their native symbol on custodial venues
DEFAULT_SYMBOL_ALIASES = {"WETH": "ETH", "WBTC": "BTC"}


def create_exchange(
    exchange_id: str,
    api_key: Optional[str] = None,
    api_secret: Optional[str] = None,
) -> "ccxt.Exchange":
    """
    Instantiate a ccxt async exchange by id.

    Raises:
        ConfigurationError: If ccxt has no exchange with that id
    """
    if not hasattr(ccxt, exchange_id):
        raise ConfigurationError(
            f"The exchange '{exchange_id}' is not supported by the ccxt library",
            details={"exchange_id": exchange_id},
        )

    exchange_class = getattr(ccxt, exchange_id)
    params: Dict[str, Any] = {
        "enableRateLimit": True,
        # market buys are sized by the quote amount spent
        "options": {"createMarketBuyOrderRequiresPrice": False},
    }
    if api_key and api_secret:
        params["apiKey"] = api_key
        params["secret"] = api_secret
    return exchange_class(params)


class ExchangeSwapProvider:
    """
    SwapProvider over a ccxt exchange.

    Args:
        exchange: ccxt async exchange instance
        registry: Tokens the venue may be asked to swap
        name: Venue name used in reports, defaults to the exchange id
        symbol_aliases: Token symbol -> exchange currency code overrides
        default_fee: Taker fee used when the market does not report one
        order_timeout_seconds: How long to poll an order that has not settled
        poll_interval: First delay between order checks, doubled up to 5s
    """

    def __init__(
        self,
        exchange,
        registry: TokenRegistry,
        name: Optional[str] = None,
        symbol_aliases: Optional[Dict[str, str]] = None,
        default_fee: Decimal = DEFAULT_TAKER_FEE,
        order_timeout_seconds: float = DEFAULT_ORDER_TIMEOUT,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.exchange = exchange
        self.registry = registry
        self.name = name or getattr(exchange, "id", "exchange")
        self.symbol_aliases = (
            DEFAULT_SYMBOL_ALIASES if symbol_aliases is None else symbol_aliases
        )
        self.default_fee = default_fee
        self.order_timeout_seconds = order_timeout_seconds
        self.poll_interval = poll_interval
        self._markets: Optional[Dict[str, Any]] = None

    async def _load_markets(self) -> Dict[str, Any]:
        if self._markets is None:
            self._markets = await self.exchange.load_markets()
        return self._markets

    def _code(self, token: TokenDescriptor) -> str:
        symbol = token.symbol.upper()
        return self.symbol_aliases.get(symbol, symbol)

    async def _resolve_market(
        self, token_in: str, token_out: str
    ) -> Optional[Tuple[str, str, TokenDescriptor, TokenDescriptor]]:
        """Return (market symbol, side, token_in, token_out) or None."""
        sold = self.registry.by_address(token_in)
        bought = self.registry.by_address(token_out)
        markets = await self._load_markets()

        buy_market = f"{self._code(bought)}/{self._code(sold)}"
        sell_market = f"{self._code(sold)}/{self._code(bought)}"
        if buy_market in markets:
            return buy_market, "buy", sold, bought
        if sell_market in markets:
            return sell_market, "sell", sold, bought

        logger.error(f"{self.name}: no market for {sold.symbol} -> {bought.symbol}")
        return None

    def _taker_fee(self, market: str) -> Decimal:
        fee = (self._markets or {}).get(market, {}).get("taker")
        return to_decimal(fee) if fee is not None else self.default_fee

    async def estimate_price(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        """Quote ``amount_in`` of token_in against the top of book."""
        try:
            resolved = await self._resolve_market(token_in, token_out)
            if resolved is None:
                return None
            market, side, sold, bought = resolved

            ticker = await self.exchange.fetch_ticker(market)
        except ccxt.NetworkError as e:
            raise VenueError(
                f"{self.name} quote failed: {e}", venue=self.name
            ) from e

        price = ticker.get("ask") if side == "buy" else ticker.get("bid")
        if not price:
            logger.error(f"{self.name}: no {side} price on {market}")
            return None

        price = to_decimal(price)
        spent = format_units(amount_in, sold.decimals)
        received = spent / price if side == "buy" else spent * price
        received *= 1 - self._taker_fee(market)

        return truncate_units(received, bought.decimals)

    async def execute_swap(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        """Place a market order and return the received amount in base units."""
        resolved = await self._resolve_market(token_in, token_out)
        if resolved is None:
            return None
        market, side, sold, bought = resolved

        # buys are sized in quote currency, sells in base currency
        amount = float(format_units(amount_in, sold.decimals))
        try:
            order = await self.exchange.create_order(market, "market", side, amount)
        except ccxt.InsufficientFunds as e:
            logger.error(f"{self.name}: insufficient funds for {market} {side}: {e}")
            return None
        except ccxt.InvalidOrder as e:
            logger.error(f"{self.name}: order rejected for {market} {side}: {e}")
            return None
        except ccxt.NetworkError as e:
            raise VenueError(
                f"{self.name} order failed: {e}", venue=self.name
            ) from e

        if not self._is_settled(order, side):
            order = await self.monitor_order(order, market, side)

        if order.get("status") in FAILED_STATUSES:
            logger.error(f"{self.name}: order {order.get('id')} {order.get('status')}")
            return None

        received = self._received(order, side)
        if not received:
            logger.error(f"{self.name}: order {order.get('id')} reported no fill")
            return None

        received = to_decimal(received)
        fee = order.get("fee") or {}
        if fee.get("cost") and fee.get("currency") == self._code(bought):
            received -= to_decimal(fee["cost"])

        if order.get("status") != "closed":
            logger.warning(
                f"{self.name}: order {order.get('id')} still {order.get('status')}, "
                f"counting the partial fill"
            )
        logger.info(
            f"{self.name}: {side} {market} filled, order {order.get('id')}"
        )
        return truncate_units(received, bought.decimals)

    @staticmethod
    def _received(order: Dict[str, Any], side: str) -> Any:
        return order.get("filled") if side == "buy" else order.get("cost")

    def _is_settled(self, order: Dict[str, Any], side: str) -> bool:
        status = order.get("status")
        if status in FAILED_STATUSES:
            return True
        return status == "closed" and self._received(order, side) is not None

    async def monitor_order(
        self, order: Dict[str, Any], market: str, side: str
    ) -> Dict[str, Any]:
        """
        Poll an order until it settles or ``order_timeout_seconds`` elapse.

        Market orders on some venues (Coinbase among them) are acknowledged
        with only an id; the fill shows up on a later ``fetch_order``.

        Returns:
            The last order state seen
        """
        order_id = order.get("id")
        if not order_id:
            return order

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.order_timeout_seconds
        delay = self.poll_interval
        checks = 0

        while not self._is_settled(order, side):
            if loop.time() >= deadline:
                logger.warning(
                    f"{self.name}: order {order_id} not settled after "
                    f"{self.order_timeout_seconds}s ({checks} checks)"
                )
                break

            await asyncio.sleep(delay)
            delay = min(delay * 2, MAX_POLL_INTERVAL)
            try:
                order = await self.exchange.fetch_order(order_id, market)
                checks += 1
            except ccxt.NetworkError as e:
                logger.warning(f"{self.name}: error checking order {order_id}: {e}")

        return order

    async def close(self) -> None:
        await self.exchange.close()
