"""
Dependency wiring.

A DependencyFactory builds the venues, content buyer and wallet for one
environment. The Container creates them lazily and lets tests swap any of
them out.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Any, Optional

from .exceptions import ConfigurationError
from .interfaces import (
    ContentPayment,
    RandomProvider,
    SwapProvider,
    SystemRandomProvider,
    Wallet,
)
from .payments import MockPayment, X402PaymentClient
from .tokens import TokenRegistry
from .units import parse_units
from .venues.exchange import ExchangeSwapProvider, create_exchange
from .venues.markup import MarkupSwapProvider
from .venues.mock import MockPrimaryVenue, MockSecondaryVenue
from .venues.uniswap import UniswapV3SwapProvider
from .wallets import MockWallet, Web3Wallet

logger = logging.getLogger(__name__)


@dataclass
class AppDependencies:
    """External collaborators of one ArbitrageService."""

    primary_venue: SwapProvider
    secondary_venue: SwapProvider
    buyer: ContentPayment
    wallet: Optional[Wallet] = None


class DependencyFactory(ABC):
    """Builds each collaborator for one environment."""

    name = "custom"

    def __init__(self, config):
        self.config = config
        self.registry = TokenRegistry.from_config(config)

    @abstractmethod
    def create_primary_venue(self) -> SwapProvider:
        pass

    @abstractmethod
    def create_secondary_venue(self) -> SwapProvider:
        pass

    @abstractmethod
    def create_buyer(self) -> ContentPayment:
        pass

    @abstractmethod
    def create_wallet(self) -> Optional[Wallet]:
        pass


class MockDependencyFactory(DependencyFactory):
    """Simulated venues, canned payment and an in-memory wallet."""

    name = "mock"

    def __init__(self, config, random_provider: Optional[RandomProvider] = None):
        super().__init__(config)
        self.random_provider = random_provider or SystemRandomProvider(
            config.environment.random_seed
        )

    def create_primary_venue(self) -> SwapProvider:
        return MockPrimaryVenue(self.random_provider)

    def create_secondary_venue(self) -> SwapProvider:
        return MockSecondaryVenue(self.random_provider)

    def create_buyer(self) -> ContentPayment:
        return MockPayment()

    def create_wallet(self) -> Optional[Wallet]:
        amount_in = parse_units(
            self.config.trading.amount_in, self.registry.main.decimals
        )
        return MockWallet(self.registry.main, self.registry.secondary, amount_in)


class ProductionDependencyFactory(DependencyFactory):
    """ccxt exchange, Uniswap V3 (or markup over the exchange), x402 and web3."""

    name = "production"

    def _exchange_venue(self) -> ExchangeSwapProvider:
        exchange_config = self.config.exchange
        exchange = create_exchange(
            exchange_config.id, exchange_config.api_key, exchange_config.api_secret
        )
        return ExchangeSwapProvider(
            exchange,
            self.registry,
            name=exchange_config.name,
            symbol_aliases=exchange_config.symbol_aliases,
            order_timeout_seconds=exchange_config.order_timeout_seconds,
            poll_interval=exchange_config.order_poll_interval,
        )

    def create_primary_venue(self) -> SwapProvider:
        return self._exchange_venue()

    def create_secondary_venue(self) -> SwapProvider:
        trading = self.config.trading
        if trading.secondary_venue == "markup":
            return MarkupSwapProvider(
                self._exchange_venue(),
                SystemRandomProvider(self.config.environment.random_seed),
                probability=trading.markup_probability,
                multiplier=trading.markup_multiplier,
            )

        return UniswapV3SwapProvider.from_rpc(
            self.config.public_node,
            self.config.private_key,
            quoter_address=self.config.contracts.uniswap_quoter,
            router_address=self.config.contracts.uniswap_router,
            fee=trading.swap_fee,
            slippage_bps=trading.slippage_bps,
        )

    def create_buyer(self) -> ContentPayment:
        return X402PaymentClient(
            self.config.private_key, timeout_seconds=self.config.x402.timeout_seconds
        )

    def create_wallet(self) -> Optional[Wallet]:
        return Web3Wallet.from_rpc(self.config.public_node, self.config.address)


class Container:
    """Lazily built, overridable set of AppDependencies."""

    def __init__(self, factory: DependencyFactory):
        self.factory = factory
        self._dependencies: Optional[AppDependencies] = None

    def get_dependencies(self) -> AppDependencies:
        if self._dependencies is None:
            self._dependencies = AppDependencies(
                primary_venue=self.factory.create_primary_venue(),
                secondary_venue=self.factory.create_secondary_venue(),
                buyer=self.factory.create_buyer(),
                wallet=self.factory.create_wallet(),
            )
        return self._dependencies

    def reset(self) -> None:
        self._dependencies = None

    def override(self, key: str, implementation: Any) -> None:
        """
        Replace one dependency, building the rest first if needed.

        Raises:
            ConfigurationError: If ``key`` is not an AppDependencies field
        """
        valid = {f.name for f in fields(AppDependencies)}
        if key not in valid:
            raise ConfigurationError(
                f"Unknown dependency '{key}'", details={"valid_keys": sorted(valid)}
            )
        setattr(self.get_dependencies(), key, implementation)


def create_container(config) -> Container:
    """Pick the mock or production factory from the configuration."""
    if config.environment.use_mocks:
        factory: DependencyFactory = MockDependencyFactory(config)
    else:
        factory = ProductionDependencyFactory(config)

    logger.debug(f"Using {factory.__class__.__name__}")
    return Container(factory)
