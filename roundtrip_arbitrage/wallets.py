"""
Wallet balance lookups.
"""

import asyncio
import logging
from typing import Dict

from web3 import Web3

from .tokens import TokenDescriptor
from .venues.abi import ERC20_ABI

logger = logging.getLogger(__name__)


class MockWallet:
    """
    In-memory wallet seeded with ten trades' worth of the main token.

    Args:
        main_token: Token the bot trades from
        secondary_token: Token the bot trades through, starts empty
        amount_in: Per-cycle trade size in main-token base units
    """

    def __init__(
        self,
        main_token: TokenDescriptor,
        secondary_token: TokenDescriptor,
        amount_in: int,
    ):
        self._balances: Dict[str, int] = {
            main_token.address.lower(): amount_in * 10,
            secondary_token.address.lower(): 0,
        }

    async def get_balance(self, token_address: str) -> int:
        return self._balances.get(token_address.lower(), 0)


class Web3Wallet:
    """ERC20 balances of one owner address, read through web3."""

    def __init__(self, w3: Web3, owner_address: str):
        self.w3 = w3
        self.owner_address = Web3.to_checksum_address(owner_address)

    @classmethod
    def from_rpc(cls, rpc_url: str, owner_address: str) -> "Web3Wallet":
        return cls(Web3(Web3.HTTPProvider(rpc_url)), owner_address)

    def _balance_of(self, token_address: str) -> int:
        token = self.w3.eth.contract(
            address=Web3.to_checksum_address(token_address), abi=ERC20_ABI
        )
        return int(token.functions.balanceOf(self.owner_address).call())

    async def get_balance(self, token_address: str) -> int:
        return await asyncio.to_thread(self._balance_of, token_address)
