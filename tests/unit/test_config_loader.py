"""Tests for the config_loader module."""

from decimal import Decimal

import pytest
import yaml

from roundtrip_arbitrage.config_loader import (
    config_from_env,
    load_config,
    load_yaml_config,
)
from roundtrip_arbitrage.exceptions import ConfigurationError, ValidationError

VALID_KEY = "0x" + "55" * 32
VALID_ADDRESS = "0x209693bc6afc0c5328ba36faf03c514ef312287c"


def write_yaml(tmp_path, data, name="bot.yaml"):
    path = tmp_path / name
    path.write_text(yaml.dump(data))
    return path


def test_load_yaml_config_valid(tmp_path):
    """Test loading a valid YAML configuration."""
    config_data = {"trading": {"amount_in": 5}, "network": {"name": "base"}}

    assert load_yaml_config(write_yaml(tmp_path, config_data)) == config_data


def test_load_yaml_config_file_not_found():
    """Test loading config from non-existent file."""
    with pytest.raises(ConfigurationError, match="Configuration file not found"):
        load_yaml_config("/non/existent/file.yaml")


def test_load_yaml_config_empty_file(tmp_path):
    """Test loading config from empty file."""
    path = tmp_path / "empty.yaml"
    path.write_text("")

    with pytest.raises(ConfigurationError, match="Empty configuration file"):
        load_yaml_config(path)


def test_load_yaml_config_invalid_yaml(tmp_path):
    """Test loading config with invalid YAML."""
    path = tmp_path / "broken.yaml"
    path.write_text("invalid: yaml: content: [")

    with pytest.raises(ConfigurationError, match="Invalid YAML"):
        load_yaml_config(path)


def test_load_yaml_config_non_mapping_root(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")

    with pytest.raises(ConfigurationError, match="must be a mapping"):
        load_yaml_config(path)


class TestConfigFromEnv:
    def test_maps_variables_to_sections(self):
        config = config_from_env(
            {
                "PRIVATE_KEY": VALID_KEY,
                "AMOUNT_IN": "10",
                "FREQUENCY_MS": "5000",
                "MAIN_TOKEN_SYMBOL": "USDC",
                "X402_PAYMENT_URL": "https://example.com/premium",
                "EXCHANGE_API_KEY": "key",
                "LOG_LEVEL": "debug",
            }
        )

        assert config == {
            "private_key": VALID_KEY,
            "trading": {"amount_in": "10", "frequency_ms": "5000"},
            "tokens": {"main_symbol": "USDC"},
            "x402": {"payment_url": "https://example.com/premium"},
            "exchange": {"api_key": "key"},
            "logging": {"level": "debug"},
        }

    def test_skips_empty_and_unknown(self):
        environ = {"ADDRESS": "", "ACCOUNT_NAME": "x", "UNRELATED": "x"}
        assert config_from_env(environ) == {}

    @pytest.mark.parametrize(
        "value,expected",
        [("true", True), ("1", True), ("YES", True), ("false", False), ("0", False)],
    )
    def test_use_mocks(self, value, expected):
        config = config_from_env({"USE_MOCKS": value})
        assert config["environment"]["use_mocks"] is expected


class TestLoadConfig:
    def test_from_environment(self):
        config = load_config(
            environ={
                "PRIVATE_KEY": VALID_KEY,
                "ADDRESS": VALID_ADDRESS,
                "PUBLIC_NODE": "https://mainnet.base.org",
                "PROFIT_THRESHOLD": "0.5",
                "TARGET_BALANCE_OUT": "3",
            }
        )

        assert config.private_key == VALID_KEY
        assert config.trading.profit_threshold == Decimal("0.5")
        assert config.trading.target_balance_out == Decimal("3")

    def test_precedence(self, tmp_path):
        path = write_yaml(
            tmp_path,
            {"trading": {"amount_in": 7, "frequency_ms": 2000}},
        )

        config = load_config(
            path,
            environ={"USE_MOCKS": "true", "AMOUNT_IN": "5", "SLIPPAGE_BPS": "50"},
            overrides={"trading": {"frequency_ms": 1000}},
        )

        # env < yaml < overrides, merged per key
        assert config.trading.amount_in == Decimal("7")
        assert config.trading.slippage_bps == 50
        assert config.trading.frequency_ms == 1000

    def test_validation_errors_are_collected(self):
        with pytest.raises(ValidationError) as exc_info:
            load_config(environ={"USE_MOCKS": "true", "AMOUNT_IN": "-1"})

        errors = exc_info.value.details["errors"]
        assert any(error.startswith("trading.amount_in:") for error in errors)

    def test_missing_credentials(self):
        with pytest.raises(ValidationError, match="private_key"):
            load_config(environ={})

    def test_missing_yaml(self):
        with pytest.raises(ConfigurationError):
            load_config("/non/existent/bot.yaml", environ={"USE_MOCKS": "true"})
