"""
Configuration schema validation using Pydantic
"""

import re
from decimal import Decimal
from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")
PRIVATE_KEY_RE = re.compile(r"^0x[a-fA-F0-9]{64}$")
URL_RE = re.compile(r"^https?://\S+$")

DEFAULT_MAIN_TOKEN_ADDRESS = "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913"
DEFAULT_SECONDARY_TOKEN_ADDRESS = "0x4200000000000000000000000000000000000006"
DEFAULT_QUOTER_ADDRESS = "0xb27308f9F90D607463bb33eA1BeBb41C27CE5AB6"
DEFAULT_ROUTER_ADDRESS = "0xE592427A0AEce92De3Edee1F18E0157C05861564"


def _check_address(value: str, label: str) -> str:
    if not ADDRESS_RE.match(value or ""):
        raise ValueError(f"Invalid {label} format: must be 0x followed by 40 hex characters")
    return value


class TokensConfig(BaseModel):
    """Main and secondary token configuration"""

    main_symbol: str = Field(default="USDC", min_length=1)
    main_address: str = DEFAULT_MAIN_TOKEN_ADDRESS
    main_decimals: int = Field(default=6, ge=0, le=18)
    secondary_symbol: str = Field(default="WETH", min_length=1)
    secondary_address: str = DEFAULT_SECONDARY_TOKEN_ADDRESS
    secondary_decimals: int = Field(default=18, ge=0, le=18)

    @field_validator("main_address", "secondary_address")
    @classmethod
    def validate_address(cls, v):
        return _check_address(v, "token address")

    @model_validator(mode="after")
    def validate_distinct_tokens(self):
        if self.main_symbol.upper() == self.secondary_symbol.upper():
            raise ValueError("main_symbol and secondary_symbol must differ")
        if self.main_address.lower() == self.secondary_address.lower():
            raise ValueError("main_address and secondary_address must differ")
        return self


class ExchangeConfig(BaseModel):
    """Custodial exchange (ccxt) configuration"""

    id: str = Field(default="coinbase", min_length=1, description="ccxt exchange id")
    name: Optional[str] = Field(default="CDP", description="Venue name in reports")
    api_key: Optional[str] = None
    api_secret: Optional[str] = None
    symbol_aliases: Optional[Dict[str, str]] = None
    order_timeout_seconds: float = Field(
        default=30.0, gt=0, description="How long to poll an unsettled market order"
    )
    order_poll_interval: float = Field(default=0.5, gt=0, description="Seconds")


class ContractsConfig(BaseModel):
    """On-chain contract addresses"""

    uniswap_quoter: str = DEFAULT_QUOTER_ADDRESS
    uniswap_router: str = DEFAULT_ROUTER_ADDRESS

    @field_validator("uniswap_quoter", "uniswap_router")
    @classmethod
    def validate_address(cls, v):
        return _check_address(v, "contract address")


class TradingConfig(BaseModel):
    """Trading parameters, amounts in human main-token units"""

    amount_in: Decimal = Field(default=Decimal("1"), gt=0)
    profit_threshold: Decimal = Field(default=Decimal("0.1"), ge=0)
    frequency_ms: int = Field(default=10000, gt=0)
    slippage_bps: int = Field(default=100, ge=0, le=10000)
    swap_fee: int = Field(default=500, ge=0, description="Uniswap V3 pool fee tier")
    target_balance_out: Decimal = Field(default=Decimal("1"), gt=0)
    venue_timeout_seconds: Optional[float] = Field(default=None, gt=0)

    secondary_venue: Literal["uniswap", "markup"] = "uniswap"
    markup_probability: float = Field(default=0.30, ge=0, le=1)
    markup_multiplier: Decimal = Field(default=Decimal("1.1"), gt=0)


class NetworkConfig(BaseModel):
    """Chain selection"""

    name: Literal["base", "ethereum"] = "base"


class PaymentConfig(BaseModel):
    """x402 content payment configuration"""

    payment_url: str = "http://localhost:4021/weather"
    timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("payment_url")
    @classmethod
    def validate_payment_url(cls, v):
        if not URL_RE.match(v or ""):
            raise ValueError("X402 payment URL must be a valid http(s) URL")
        return v


class EnvironmentConfig(BaseModel):
    """Runtime environment"""

    use_mocks: bool = False
    random_seed: Optional[int] = Field(default=None, ge=0)


class LoggingConfig(BaseModel):
    """Logging configuration"""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file: Optional[str] = "logs/arbitrage.log"

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class BotConfig(BaseModel):
    """Complete bot configuration schema"""

    private_key: Optional[str] = None
    address: Optional[str] = None
    public_node: Optional[str] = Field(default=None, description="JSON-RPC endpoint")

    tokens: TokensConfig = Field(default_factory=TokensConfig)
    exchange: ExchangeConfig = Field(default_factory=ExchangeConfig)
    contracts: ContractsConfig = Field(default_factory=ContractsConfig)
    trading: TradingConfig = Field(default_factory=TradingConfig)
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    x402: PaymentConfig = Field(default_factory=PaymentConfig)
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("private_key", "address", "public_node", mode="before")
    @classmethod
    def empty_as_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("private_key")
    @classmethod
    def validate_private_key(cls, v):
        if v is not None and not PRIVATE_KEY_RE.match(v):
            raise ValueError(
                "Private key must be in 0x format with 64 hex characters"
            )
        return v

    @field_validator("address")
    @classmethod
    def validate_address(cls, v):
        if v is not None:
            _check_address(v, "wallet address")
        return v

    @field_validator("public_node")
    @classmethod
    def validate_public_node(cls, v):
        if v is not None and not URL_RE.match(v):
            raise ValueError("Public node must be a valid http(s) URL")
        return v

    @model_validator(mode="after")
    def validate_production_credentials(self):
        if self.environment.use_mocks:
            return self
        missing = [
            name
            for name, value in (
                ("private_key", self.private_key),
                ("address", self.address),
                ("public_node", self.public_node),
            )
            if value is None
        ]
        if missing:
            raise ValueError(
                f"{', '.join(missing)} required unless environment.use_mocks is set"
            )
        return self

    model_config = {
        "extra": "forbid",
        "validate_assignment": True,
    }


def validate_bot_config(config_dict: Dict) -> BotConfig:
    """
    Validate a bot configuration dictionary

    Args:
        config_dict: Dictionary representation of bot config

    Returns:
        Validated BotConfig object

    Raises:
        pydantic.ValidationError: If configuration is invalid
    """
    return BotConfig(**config_dict)
