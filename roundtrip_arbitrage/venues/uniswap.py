"""
On-chain AMM venue: Uniswap V3 single-pool swaps via web3.

web3 calls are blocking, so every public coroutine hands its work to a
worker thread with asyncio.to_thread.
"""

import asyncio
import logging
from typing import Optional

from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError

from ..interfaces import SystemTimeProvider, TimeProvider
from .abi import ERC20_ABI, QUOTER_ABI, SWAP_ROUTER_ABI

logger = logging.getLogger(__name__)

DEFAULT_QUOTER_ADDRESS = "0xb27308f9F90D607463bb33eA1BeBb41C27CE5AB6"
DEFAULT_ROUTER_ADDRESS = "0xE592427A0AEce92De3Edee1F18E0157C05861564"
DEADLINE_SECONDS = 60 * 20
RECEIPT_TIMEOUT_SECONDS = 180


def min_amount_out(quote: int, slippage_bps: int) -> int:
    """Lowest acceptable output for a quote under ``slippage_bps`` tolerance."""
    return quote * (10_000 - slippage_bps) // 10_000


class UniswapV3SwapProvider:
    """
    SwapProvider over a Uniswap V3 pool.

    Args:
        w3: Connected Web3 instance
        private_key: Key of the account that signs approvals and swaps
        quoter_address: Quoter contract used for estimates
        router_address: SwapRouter contract used for swaps
        fee: Pool fee tier in hundredths of a bip (500 = 0.05%)
        slippage_bps: Tolerance between quote and minimum accepted output
        name: Venue name used in reports
    """

    def __init__(
        self,
        w3: Web3,
        private_key: str,
        quoter_address: str = DEFAULT_QUOTER_ADDRESS,
        router_address: str = DEFAULT_ROUTER_ADDRESS,
        fee: int = 500,
        slippage_bps: int = 100,
        name: str = "Uniswap v3",
        time_provider: Optional[TimeProvider] = None,
    ):
        self.w3 = w3
        self.account = Account.from_key(private_key)
        self.fee = fee
        self.slippage_bps = slippage_bps
        self.name = name
        self.time_provider = time_provider or SystemTimeProvider()

        self.router_address = Web3.to_checksum_address(router_address)
        self.quoter = w3.eth.contract(
            address=Web3.to_checksum_address(quoter_address), abi=QUOTER_ABI
        )
        self.router = w3.eth.contract(address=self.router_address, abi=SWAP_ROUTER_ABI)

    @classmethod
    def from_rpc(cls, rpc_url: str, private_key: str, **kwargs) -> "UniswapV3SwapProvider":
        """Connect to an HTTP RPC endpoint and build the provider."""
        return cls(Web3(Web3.HTTPProvider(rpc_url)), private_key, **kwargs)

    def _erc20(self, address: str):
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=ERC20_ABI)

    def _quote(self, amount_in: int, token_in: str, token_out: str) -> Optional[int]:
        try:
            amount_out = self.quoter.functions.quoteExactInputSingle(
                Web3.to_checksum_address(token_in),
                Web3.to_checksum_address(token_out),
                self.fee,
                int(amount_in),
                0,
            ).call()
        except ContractLogicError as e:
            logger.error(f"{self.name}: quote reverted: {e}")
            return None
        return int(amount_out)

    def _send(self, tx_function) -> bool:
        """Sign, send and wait for a contract transaction. True if it succeeded."""
        tx = tx_function.build_transaction(
            {
                "from": self.account.address,
                "nonce": self.w3.eth.get_transaction_count(self.account.address, "pending"),
                "chainId": self.w3.eth.chain_id,
            }
        )
        signed = self.account.sign_transaction(tx)
        tx_hash = self.w3.eth.send_raw_transaction(signed.raw_transaction)
        receipt = self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=RECEIPT_TIMEOUT_SECONDS
        )
        if receipt["status"] != 1:
            logger.error(f"{self.name}: transaction {tx_hash.hex()} reverted")
            return False
        logger.debug(f"{self.name}: transaction {tx_hash.hex()} confirmed")
        return True

    def _ensure_allowance(self, token_in: str, amount_in: int) -> bool:
        token = self._erc20(token_in)
        allowance = token.functions.allowance(
            self.account.address, self.router_address
        ).call()
        if int(allowance) >= amount_in:
            return True

        logger.info(f"{self.name}: approving router for {amount_in} of {token_in}")
        return self._send(token.functions.approve(self.router_address, int(amount_in)))

    def _swap(self, amount_in: int, token_in: str, token_out: str) -> Optional[int]:
        quote = self._quote(amount_in, token_in, token_out)
        if not quote:
            return None

        if not self._ensure_allowance(token_in, amount_in):
            return None

        deadline = int(self.time_provider.current_timestamp()) + DEADLINE_SECONDS
        params = (
            Web3.to_checksum_address(token_in),
            Web3.to_checksum_address(token_out),
            self.fee,
            self.account.address,
            deadline,
            int(amount_in),
            min_amount_out(quote, self.slippage_bps),
            0,
        )
        try:
            succeeded = self._send(self.router.functions.exactInputSingle(params))
        except ContractLogicError as e:
            logger.error(f"{self.name}: swap reverted: {e}")
            return None

        return quote if succeeded else None

    async def estimate_price(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        return await asyncio.to_thread(self._quote, amount_in, token_in, token_out)

    async def execute_swap(
        self, amount_in: int, token_in: str, token_out: str
    ) -> Optional[int]:
        return await asyncio.to_thread(self._swap, amount_in, token_in, token_out)
