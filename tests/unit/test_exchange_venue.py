"""Tests for the ccxt-backed exchange venue."""

from unittest.mock import AsyncMock, Mock

import ccxt.async_support as ccxt
import pytest

from roundtrip_arbitrage.exceptions import ConfigurationError, VenueError
from roundtrip_arbitrage.tokens import TokenDescriptor, TokenRegistry
from roundtrip_arbitrage.venues.exchange import ExchangeSwapProvider, create_exchange

USDC_ADDRESS = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
WETH_ADDRESS = "0x4200000000000000000000000000000000000006"


@pytest.fixture
def registry():
    return TokenRegistry(
        TokenDescriptor("USDC", USDC_ADDRESS, 6),
        TokenDescriptor("WETH", WETH_ADDRESS, 18),
    )


@pytest.fixture
def mock_exchange():
    """Mock ccxt exchange with an ETH/USDC market"""
    exchange = Mock()
    exchange.id = "coinbase"
    exchange.load_markets = AsyncMock(return_value={"ETH/USDC": {"taker": 0.006}})
    exchange.fetch_ticker = AsyncMock(return_value={"ask": 2500, "bid": 2490})
    exchange.create_order = AsyncMock()
    exchange.fetch_order = AsyncMock()
    exchange.close = AsyncMock()
    return exchange


@pytest.fixture
def venue(mock_exchange, registry):
    return ExchangeSwapProvider(mock_exchange, registry, name="CDP", poll_interval=0)


class TestEstimatePrice:
    @pytest.mark.asyncio
    async def test_buy_uses_ask_and_fee(self, venue, mock_exchange):
        # 10 USDC / 2500 = 0.004 ETH, less 0.6% taker fee
        amount = await venue.estimate_price(10_000_000, USDC_ADDRESS, WETH_ADDRESS)

        assert amount == 3_976_000_000_000_000
        mock_exchange.fetch_ticker.assert_awaited_once_with("ETH/USDC")

    @pytest.mark.asyncio
    async def test_sell_uses_bid_and_fee(self, venue):
        # 0.004 ETH * 2490 = 9.96 USDC, less 0.6% taker fee
        amount = await venue.estimate_price(4 * 10**15, WETH_ADDRESS, USDC_ADDRESS)

        assert amount == 9_900_240

    @pytest.mark.asyncio
    async def test_default_fee_when_market_has_none(self, mock_exchange, registry):
        mock_exchange.load_markets = AsyncMock(return_value={"ETH/USDC": {}})
        venue = ExchangeSwapProvider(mock_exchange, registry, default_fee=0)

        amount = await venue.estimate_price(10_000_000, USDC_ADDRESS, WETH_ADDRESS)

        assert amount == 4 * 10**15
        assert venue.name == "coinbase"

    @pytest.mark.asyncio
    async def test_markets_loaded_once(self, venue, mock_exchange):
        await venue.estimate_price(10_000_000, USDC_ADDRESS, WETH_ADDRESS)
        await venue.estimate_price(10_000_000, USDC_ADDRESS, WETH_ADDRESS)

        mock_exchange.load_markets.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_no_market(self, venue, mock_exchange):
        mock_exchange.load_markets = AsyncMock(return_value={"BTC/USD": {}})

        assert await venue.estimate_price(10_000_000, USDC_ADDRESS, WETH_ADDRESS) is None
        mock_exchange.fetch_ticker.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_price(self, venue, mock_exchange):
        mock_exchange.fetch_ticker = AsyncMock(return_value={"ask": None, "bid": 2490})

        assert await venue.estimate_price(10_000_000, USDC_ADDRESS, WETH_ADDRESS) is None

    @pytest.mark.asyncio
    async def test_network_error_becomes_venue_error(self, venue, mock_exchange):
        mock_exchange.fetch_ticker = AsyncMock(side_effect=ccxt.NetworkError("down"))

        with pytest.raises(VenueError) as exc_info:
            await venue.estimate_price(10_000_000, USDC_ADDRESS, WETH_ADDRESS)
        assert exc_info.value.venue == "CDP"

    @pytest.mark.asyncio
    async def test_symbol_aliases_override(self, mock_exchange, registry):
        mock_exchange.load_markets = AsyncMock(return_value={"WETH/USDC": {}})
        venue = ExchangeSwapProvider(mock_exchange, registry, symbol_aliases={})

        await venue.estimate_price(10_000_000, USDC_ADDRESS, WETH_ADDRESS)

        mock_exchange.fetch_ticker.assert_awaited_once_with("WETH/USDC")


class TestExecuteSwap:
    @pytest.mark.asyncio
    async def test_market_buy(self, venue, mock_exchange):
        mock_exchange.create_order = AsyncMock(
            return_value={
                "id": "1",
                "status": "closed",
                "filled": 0.004,
                "cost": 10,
                "fee": {"cost": 0.00001, "currency": "ETH"},
            }
        )

        amount = await venue.execute_swap(10_000_000, USDC_ADDRESS, WETH_ADDRESS)

        mock_exchange.create_order.assert_awaited_once_with(
            "ETH/USDC", "market", "buy", 10.0
        )
        assert amount == 3_990_000_000_000_000

    @pytest.mark.asyncio
    async def test_market_sell(self, venue, mock_exchange):
        mock_exchange.create_order = AsyncMock(
            return_value={
                "id": "2",
                "status": "closed",
                "filled": 0.004,
                "cost": 9.96,
                "fee": {"cost": 0.05, "currency": "USDC"},
            }
        )

        amount = await venue.execute_swap(4 * 10**15, WETH_ADDRESS, USDC_ADDRESS)

        mock_exchange.create_order.assert_awaited_once_with(
            "ETH/USDC", "market", "sell", 0.004
        )
        assert amount == 9_910_000

    @pytest.mark.asyncio
    async def test_fee_in_other_currency_not_deducted(self, venue, mock_exchange):
        mock_exchange.create_order = AsyncMock(
            return_value={
                "id": "3",
                "status": "closed",
                "filled": 0.004,
                "fee": {"cost": 0.06, "currency": "USDC"},
            }
        )

        amount = await venue.execute_swap(10_000_000, USDC_ADDRESS, WETH_ADDRESS)

        assert amount == 4 * 10**15

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error", [ccxt.InsufficientFunds("no funds"), ccxt.InvalidOrder("too small")]
    )
    async def test_rejected_orders_return_none(self, venue, mock_exchange, error):
        mock_exchange.create_order = AsyncMock(side_effect=error)

        assert await venue.execute_swap(10_000_000, USDC_ADDRESS, WETH_ADDRESS) is None

    @pytest.mark.asyncio
    async def test_network_error_becomes_venue_error(self, venue, mock_exchange):
        mock_exchange.create_order = AsyncMock(side_effect=ccxt.RequestTimeout("slow"))

        with pytest.raises(VenueError):
            await venue.execute_swap(10_000_000, USDC_ADDRESS, WETH_ADDRESS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["canceled", "rejected", "expired"])
    async def test_dead_order_returns_none(self, venue, mock_exchange, status):
        mock_exchange.create_order = AsyncMock(
            return_value={"id": "4", "status": status, "filled": 0.004}
        )

        assert await venue.execute_swap(10_000_000, USDC_ADDRESS, WETH_ADDRESS) is None

    @pytest.mark.asyncio
    async def test_unfilled_order_returns_none(self, venue, mock_exchange):
        mock_exchange.create_order = AsyncMock(
            return_value={"id": "5", "status": "open", "filled": 0}
        )
        mock_exchange.fetch_order = AsyncMock(
            return_value={"id": "5", "status": "closed", "filled": 0}
        )

        assert await venue.execute_swap(10_000_000, USDC_ADDRESS, WETH_ADDRESS) is None

    @pytest.mark.asyncio
    async def test_acknowledged_order_polled_until_filled(self, venue, mock_exchange):
        mock_exchange.create_order = AsyncMock(
            return_value={"id": "6", "status": None, "filled": None, "cost": None}
        )
        mock_exchange.fetch_order = AsyncMock(
            side_effect=[
                {"id": "6", "status": "open", "filled": None, "cost": None},
                {"id": "6", "status": "closed", "filled": 0.004, "cost": 10},
            ]
        )

        amount = await venue.execute_swap(10_000_000, USDC_ADDRESS, WETH_ADDRESS)

        assert amount == 4 * 10**15
        assert mock_exchange.fetch_order.await_count == 2
        mock_exchange.fetch_order.assert_awaited_with("6", "ETH/USDC")

    @pytest.mark.asyncio
    async def test_poll_survives_network_error(self, venue, mock_exchange):
        mock_exchange.create_order = AsyncMock(
            return_value={"id": "7", "status": "open", "filled": None}
        )
        mock_exchange.fetch_order = AsyncMock(
            side_effect=[
                ccxt.NetworkError("blip"),
                {"id": "7", "status": "closed", "filled": 0.004, "cost": 9.96},
            ]
        )

        amount = await venue.execute_swap(4 * 10**15, WETH_ADDRESS, USDC_ADDRESS)

        assert amount == 9_960_000

    @pytest.mark.asyncio
    async def test_order_canceled_while_polling(self, venue, mock_exchange):
        mock_exchange.create_order = AsyncMock(
            return_value={"id": "8", "status": "open", "filled": None}
        )
        mock_exchange.fetch_order = AsyncMock(
            return_value={"id": "8", "status": "canceled", "filled": 0}
        )

        assert await venue.execute_swap(10_000_000, USDC_ADDRESS, WETH_ADDRESS) is None
        mock_exchange.fetch_order.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_partial_fill_counted_after_timeout(self, mock_exchange, registry):
        venue = ExchangeSwapProvider(
            mock_exchange, registry, order_timeout_seconds=0.02, poll_interval=0.005
        )
        mock_exchange.create_order = AsyncMock(
            return_value={"id": "9", "status": "open", "filled": None}
        )
        mock_exchange.fetch_order = AsyncMock(
            return_value={"id": "9", "status": "open", "filled": 0.002}
        )

        amount = await venue.execute_swap(10_000_000, USDC_ADDRESS, WETH_ADDRESS)

        assert amount == 2 * 10**15
        assert mock_exchange.fetch_order.await_count >= 1

    @pytest.mark.asyncio
    async def test_order_without_id_is_not_polled(self, venue, mock_exchange):
        mock_exchange.create_order = AsyncMock(return_value={"status": None})

        assert await venue.execute_swap(10_000_000, USDC_ADDRESS, WETH_ADDRESS) is None
        mock_exchange.fetch_order.assert_not_awaited()


@pytest.mark.asyncio
async def test_close(venue, mock_exchange):
    await venue.close()
    mock_exchange.close.assert_awaited_once()


def test_create_exchange_unknown_id():
    with pytest.raises(ConfigurationError, match="not supported"):
        create_exchange("definitely_not_an_exchange")


@pytest.mark.asyncio
async def test_create_exchange_with_credentials():
    exchange = create_exchange("coinbase", "key", "secret")
    try:
        assert exchange.apiKey == "key"
        assert exchange.secret == "secret"
        assert exchange.enableRateLimit is True
    finally:
        await exchange.close()
