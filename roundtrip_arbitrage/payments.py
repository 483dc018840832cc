"""
Content payment implementations.

X402PaymentClient speaks the HTTP 402 "exact" scheme: the server answers an
unpaid request with its payment requirements, the client signs an EIP-3009
``TransferWithAuthorization`` for the requested asset and retries with the
signed payload in the ``X-PAYMENT`` header.
"""

import asyncio
import base64
import json
import logging
import secrets
from typing import Any, Callable, Dict, List, Optional

import aiohttp
from eth_account import Account
from eth_account.messages import encode_typed_data

from .exceptions import PaymentError
from .interfaces import SystemTimeProvider, TimeProvider

logger = logging.getLogger(__name__)

X402_VERSION = 1
PAYMENT_HEADER = "X-PAYMENT"
SUPPORTED_NETWORKS = {"base": 8453, "base-sepolia": 84532, "ethereum": 1}

# Authorizations become valid slightly in the past to absorb clock skew
VALID_AFTER_SKEW_SECONDS = 600
DEFAULT_VALIDITY_SECONDS = 60

TRANSFER_WITH_AUTHORIZATION_TYPES = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
    "TransferWithAuthorization": [
        {"name": "from", "type": "address"},
        {"name": "to", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "validAfter", "type": "uint256"},
        {"name": "validBefore", "type": "uint256"},
        {"name": "nonce", "type": "bytes32"},
    ],
}


class MockPayment:
    """Pretends to pay and returns a canned confirmation."""

    async def buy_content(self, url: str) -> Optional[str]:
        logger.info(f"Processing payment for content at {url}")
        return f"Payment successful for content at {url}"


def select_requirement(accepts: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Pick the first ``exact`` payment requirement on a supported network."""
    for requirement in accepts:
        if (
            requirement.get("scheme") == "exact"
            and requirement.get("network") in SUPPORTED_NETWORKS
        ):
            return requirement
    return None


class X402PaymentClient:
    """
    ContentPayment over x402.

    Args:
        private_key: Hex key of the paying account
        session_factory: Callable returning an aiohttp-compatible client session
        timeout_seconds: Total timeout for each HTTP request
        time_provider: Clock for the authorization validity window
    """

    def __init__(
        self,
        private_key: str,
        session_factory: Callable[[], Any] = aiohttp.ClientSession,
        timeout_seconds: float = 30.0,
        time_provider: Optional[TimeProvider] = None,
    ):
        self.account = Account.from_key(private_key)
        self.session_factory = session_factory
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.time_provider = time_provider or SystemTimeProvider()

    def build_payment_header(self, requirement: Dict[str, Any]) -> str:
        """Sign the requirement and encode it as an X-PAYMENT header value."""
        now = int(self.time_provider.current_timestamp())
        validity = int(requirement.get("maxTimeoutSeconds") or DEFAULT_VALIDITY_SECONDS)
        authorization = {
            "from": self.account.address,
            "to": requirement["payTo"],
            "value": str(requirement["maxAmountRequired"]),
            "validAfter": str(now - VALID_AFTER_SKEW_SECONDS),
            "validBefore": str(now + validity),
            "nonce": "0x" + secrets.token_bytes(32).hex(),
        }

        extra = requirement.get("extra") or {}
        typed_data = {
            "types": TRANSFER_WITH_AUTHORIZATION_TYPES,
            "primaryType": "TransferWithAuthorization",
            "domain": {
                "name": extra.get("name", "USD Coin"),
                "version": extra.get("version", "2"),
                "chainId": SUPPORTED_NETWORKS[requirement["network"]],
                "verifyingContract": requirement["asset"],
            },
            "message": {
                "from": authorization["from"],
                "to": authorization["to"],
                "value": int(authorization["value"]),
                "validAfter": int(authorization["validAfter"]),
                "validBefore": int(authorization["validBefore"]),
                "nonce": bytes.fromhex(authorization["nonce"][2:]),
            },
        }
        signed = self.account.sign_message(encode_typed_data(full_message=typed_data))
        signature = signed.signature.hex()
        if not signature.startswith("0x"):
            signature = "0x" + signature

        payload = {
            "x402Version": X402_VERSION,
            "scheme": requirement["scheme"],
            "network": requirement["network"],
            "payload": {"signature": signature, "authorization": authorization},
        }
        return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")

    async def buy_content(self, url: str) -> Optional[str]:
        """
        Fetch ``url``, paying for it if the server asks.

        Returns:
            The response body, or None when no acceptable payment option exists
            or the paid request is refused

        Raises:
            PaymentError: On transport failures or a malformed 402 response
        """
        try:
            async with self.session_factory() as session:
                async with session.get(url, timeout=self.timeout) as response:
                    if response.status != 402:
                        if 200 <= response.status < 300:
                            return await response.text()
                        logger.warning(f"Unexpected status {response.status} from {url}")
                        return None
                    body = await response.json(content_type=None)

                requirement = select_requirement((body or {}).get("accepts") or [])
                if requirement is None:
                    logger.warning(f"No supported payment option offered by {url}")
                    return None

                logger.info(
                    f"Paying {requirement['maxAmountRequired']} of {requirement['asset']} "
                    f"on {requirement['network']} to {requirement['payTo']}"
                )
                headers = {PAYMENT_HEADER: self.build_payment_header(requirement)}
                async with session.get(url, headers=headers, timeout=self.timeout) as paid:
                    if 200 <= paid.status < 300:
                        return await paid.text()
                    logger.warning(f"Paid request to {url} refused with {paid.status}")
                    return None
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise PaymentError(f"Payment request to {url} failed: {e}", url=url) from e
        except (KeyError, ValueError) as e:
            raise PaymentError(
                f"Malformed payment requirements from {url}: {e}", url=url
            ) from e
