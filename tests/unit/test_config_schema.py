"""Tests for configuration schema validation."""

from decimal import Decimal

import pydantic
import pytest

from roundtrip_arbitrage.config_schema import (
    BotConfig,
    ExchangeConfig,
    LoggingConfig,
    PaymentConfig,
    TokensConfig,
    TradingConfig,
    validate_bot_config,
)

VALID_KEY = "0x" + "44" * 32
VALID_ADDRESS = "0x209693bc6afc0c5328ba36faf03c514ef312287c"


def production(**overrides):
    values = {
        "private_key": VALID_KEY,
        "address": VALID_ADDRESS,
        "public_node": "https://mainnet.base.org",
    }
    values.update(overrides)
    return values


def test_mock_defaults():
    config = BotConfig(environment={"use_mocks": True})

    assert config.private_key is None
    assert config.network.name == "base"
    assert config.trading.amount_in == Decimal("1")
    assert config.trading.profit_threshold == Decimal("0.1")
    assert config.trading.frequency_ms == 10000
    assert config.trading.target_balance_out == Decimal("1")
    assert config.trading.secondary_venue == "uniswap"
    assert config.x402.payment_url == "http://localhost:4021/weather"
    assert config.logging.level == "INFO"


def test_production_requires_credentials():
    with pytest.raises(pydantic.ValidationError, match="private_key, address, public_node"):
        BotConfig()


def test_production_config_valid():
    config = validate_bot_config(production())
    assert config.private_key == VALID_KEY
    assert config.environment.use_mocks is False


def test_empty_strings_are_missing():
    with pytest.raises(pydantic.ValidationError, match="private_key required"):
        BotConfig(**production(private_key=""))


@pytest.mark.parametrize(
    "field,value",
    [
        ("private_key", "0x1234"),
        ("private_key", "44" * 32),
        ("address", "0xnothex"),
        ("public_node", "ws://localhost:8546"),
    ],
)
def test_invalid_credentials(field, value):
    with pytest.raises(pydantic.ValidationError):
        BotConfig(**production(**{field: value}))


def test_extra_fields_forbidden():
    with pytest.raises(pydantic.ValidationError):
        BotConfig(environment={"use_mocks": True}, unknown_field="x")


class TestTokensConfig:
    def test_same_symbol_rejected(self):
        with pytest.raises(pydantic.ValidationError, match="must differ"):
            TokensConfig(main_symbol="USDC", secondary_symbol="usdc")

    def test_same_address_rejected(self):
        with pytest.raises(pydantic.ValidationError, match="must differ"):
            TokensConfig(secondary_address="0x833589fcd6edb6e08f4c7c32d4f71b54bda02913")

    def test_decimals_range(self):
        with pytest.raises(pydantic.ValidationError):
            TokensConfig(main_decimals=19)


class TestTradingConfig:
    def test_string_amounts_coerced(self):
        trading = TradingConfig(amount_in="10.5", frequency_ms="2000")
        assert trading.amount_in == Decimal("10.5")
        assert trading.frequency_ms == 2000

    @pytest.mark.parametrize(
        "field,value",
        [
            ("amount_in", 0),
            ("profit_threshold", -1),
            ("frequency_ms", 0),
            ("slippage_bps", 10001),
            ("target_balance_out", 0),
            ("venue_timeout_seconds", 0),
            ("secondary_venue", "sushiswap"),
            ("markup_probability", 1.5),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(pydantic.ValidationError):
            TradingConfig(**{field: value})


@pytest.mark.parametrize("field", ["order_timeout_seconds", "order_poll_interval"])
def test_order_polling_must_be_positive(field):
    with pytest.raises(pydantic.ValidationError):
        ExchangeConfig(**{field: 0})


def test_payment_url_must_be_http():
    with pytest.raises(pydantic.ValidationError, match="X402 payment URL"):
        PaymentConfig(payment_url="ftp://example.com")


def test_log_level_normalized():
    assert LoggingConfig(level="debug").level == "DEBUG"
    with pytest.raises(pydantic.ValidationError):
        LoggingConfig(level="verbose")


def test_network_choices():
    assert BotConfig(environment={"use_mocks": True}, network={"name": "ethereum"})
    with pytest.raises(pydantic.ValidationError):
        BotConfig(environment={"use_mocks": True}, network={"name": "solana"})
