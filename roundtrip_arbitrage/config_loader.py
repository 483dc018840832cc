"""
Configuration loading for the arbitrage bot.

Settings come from environment variables (optionally loaded from a ``.env``
file by the CLI), optionally overridden by a YAML file, then validated by
the BotConfig schema.
"""

import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import pydantic
import yaml

from .config_schema import BotConfig, validate_bot_config
from .exceptions import ConfigurationError, ValidationError
from .utils import deep_merge

TRUE_VALUES = {"1", "true", "yes", "on"}

# (section, key, env var); values are left as strings for the schema to coerce
ENV_FIELDS = [
    (None, "private_key", "PRIVATE_KEY"),
    (None, "address", "ADDRESS"),
    (None, "public_node", "PUBLIC_NODE"),
    ("exchange", "id", "EXCHANGE_ID"),
    ("exchange", "name", "EXCHANGE_NAME"),
    ("exchange", "api_key", "EXCHANGE_API_KEY"),
    ("exchange", "api_secret", "EXCHANGE_API_SECRET"),
    ("tokens", "main_address", "MAIN_TOKEN_ADDRESS"),
    ("tokens", "main_symbol", "MAIN_TOKEN_SYMBOL"),
    ("tokens", "main_decimals", "MAIN_TOKEN_DECIMALS"),
    ("tokens", "secondary_address", "SECONDARY_TOKEN_ADDRESS"),
    ("tokens", "secondary_symbol", "SECONDARY_TOKEN_SYMBOL"),
    ("tokens", "secondary_decimals", "SECONDARY_TOKEN_DECIMALS"),
    ("contracts", "uniswap_quoter", "UNISWAP_QUOTER_ADDRESS"),
    ("contracts", "uniswap_router", "UNISWAP_ROUTER_ADDRESS"),
    ("trading", "amount_in", "AMOUNT_IN"),
    ("trading", "profit_threshold", "PROFIT_THRESHOLD"),
    ("trading", "frequency_ms", "FREQUENCY_MS"),
    ("trading", "slippage_bps", "SLIPPAGE_BPS"),
    ("trading", "swap_fee", "SWAP_FEE"),
    ("trading", "target_balance_out", "TARGET_BALANCE_OUT"),
    ("trading", "venue_timeout_seconds", "VENUE_TIMEOUT_SECONDS"),
    ("trading", "secondary_venue", "SECONDARY_VENUE"),
    ("network", "name", "NETWORK"),
    ("x402", "payment_url", "X402_PAYMENT_URL"),
    ("logging", "level", "LOG_LEVEL"),
    ("logging", "file", "LOG_FILE"),
]


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load and parse YAML configuration file."""
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            config_dict = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to load config {config_path}: {e}")

    if config_dict is None:
        raise ConfigurationError(f"Empty configuration file: {config_path}")
    if not isinstance(config_dict, dict):
        raise ConfigurationError(
            f"Configuration root must be a mapping in {config_path}"
        )

    return config_dict


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Collect configuration values from environment variables.

    Unset or empty variables are skipped so schema defaults apply.

    Args:
        environ: Mapping to read instead of os.environ

    Returns:
        Nested configuration dictionary
    """
    environ = os.environ if environ is None else environ
    config: Dict[str, Any] = {}

    for section, key, env_name in ENV_FIELDS:
        value = environ.get(env_name)
        if value is None or value == "":
            continue
        target = config if section is None else config.setdefault(section, {})
        target[key] = value

    use_mocks = environ.get("USE_MOCKS")
    if use_mocks:
        config.setdefault("environment", {})["use_mocks"] = (
            use_mocks.strip().lower() in TRUE_VALUES
        )

    return config


def _format_errors(error: pydantic.ValidationError) -> list:
    return [
        f"{'.'.join(str(part) for part in err['loc']) or 'config'}: {err['msg']}"
        for err in error.errors()
    ]


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    environ: Optional[Mapping[str, str]] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> BotConfig:
    """
    Build and validate the bot configuration.

    Precedence, lowest first: schema defaults, environment, YAML file,
    explicit overrides.

    Args:
        config_path: Optional YAML file
        environ: Mapping to read instead of os.environ
        overrides: Values applied last, e.g. from CLI flags

    Returns:
        Validated BotConfig

    Raises:
        ConfigurationError: If the YAML file cannot be read
        ValidationError: If the merged configuration is invalid; the
            field-level messages are in ``details["errors"]``
    """
    config_dict = config_from_env(environ)

    if config_path is not None:
        config_dict = deep_merge(config_dict, load_yaml_config(config_path))

    if overrides:
        config_dict = deep_merge(config_dict, overrides)

    try:
        return validate_bot_config(config_dict)
    except pydantic.ValidationError as e:
        errors = _format_errors(e)
        raise ValidationError(
            f"Configuration validation failed: {'; '.join(errors)}",
            details={"errors": errors},
        )
