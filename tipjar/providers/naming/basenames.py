"""Basename (``*.base.eth``) provider.

Reads the Basenames registry on Base: ``resolver(node)`` returns the
resolver contract for a name, and ``addr(node)`` on that resolver returns
the address it points to.
"""

import asyncio
import logging
import time
from typing import Optional

import aiohttp
from ens.exceptions import InvalidName
from ens.utils import normal_name_to_hash, normalize_name
from eth_utils import to_checksum_address
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import Web3Exception

from ...core.config import get_config
from ...core.exceptions import InvalidInputError, NetworkFailureError, NotFoundError
from ...core.types import BASENAME_SUFFIX, Address
from ..base import BaseProvider

logger = logging.getLogger(__name__)

# Basenames registry on Base mainnet
BASENAME_REGISTRY_ADDRESS = "0xb94704422c2a1e396835a571837aa5ae53285a95"

REGISTRY_ABI = [
    {
        "inputs": [{"internalType": "bytes32", "name": "node", "type": "bytes32"}],
        "name": "resolver",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    }
]

RESOLVER_ABI = [
    {
        "inputs": [{"internalType": "bytes32", "name": "node", "type": "bytes32"}],
        "name": "addr",
        "outputs": [{"internalType": "address payable", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    }
]


def _is_zero_address(address: Optional[str]) -> bool:
    return not address or int(address, 16) == 0


def normalize_basename(name: str) -> str:
    """
    Normalize a Basename for lookup.

    Raises:
        InvalidInputError: Wrong suffix, empty label, or a label that fails
            ENS normalisation
    """
    cleaned = name.strip().lower()
    if not cleaned.endswith(BASENAME_SUFFIX):
        raise InvalidInputError("name", name, "invalid name")

    label = cleaned[: -len(BASENAME_SUFFIX)]
    if not label or label.startswith(".") or label.endswith("."):
        raise InvalidInputError("name", name, "invalid name")

    try:
        return normalize_name(cleaned)
    except InvalidName as e:
        raise InvalidInputError("name", name, "invalid name") from e


class BasenameProvider(BaseProvider):
    """Resolves ``*.base.eth`` names against the on-chain registry."""

    SOURCE = "basenames"

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        web3: AsyncWeb3 | None = None,
        registry_address: str = BASENAME_REGISTRY_ADDRESS,
        timeout: float = 10.0,
    ):
        """
        Initialize Basename provider.

        Args:
            rpc_url: Base RPC endpoint (loaded from config if not provided)
            web3: Pre-built AsyncWeb3 instance, takes precedence over rpc_url
            registry_address: Registry contract address
            timeout: Seconds allowed for the whole lookup
        """
        super().__init__(timeout=timeout)
        if web3 is None:
            web3 = AsyncWeb3(AsyncHTTPProvider(rpc_url or get_config().rpc_url))
        self.w3 = web3
        self.registry_address = to_checksum_address(registry_address)

    def is_available(self) -> bool:
        """Public RPC reads need no credentials."""
        return True

    async def _lookup_resolver(self, node: bytes) -> Optional[str]:
        registry = self.w3.eth.contract(address=self.registry_address, abi=REGISTRY_ABI)
        resolver = await registry.functions.resolver(node).call()
        return None if _is_zero_address(resolver) else resolver

    async def _lookup_addr(self, resolver_address: str, node: bytes) -> Optional[str]:
        resolver = self.w3.eth.contract(
            address=to_checksum_address(resolver_address), abi=RESOLVER_ABI
        )
        address = await resolver.functions.addr(node).call()
        return None if _is_zero_address(address) else address

    async def _lookup(self, normalized: str) -> Optional[str]:
        node = bytes(normal_name_to_hash(normalized))
        resolver = await self._lookup_resolver(node)
        if resolver is None:
            return None
        return await self._lookup_addr(resolver, node)

    async def resolve_name(self, name: str) -> Address:
        """
        Resolve a Basename to a checksummed address.

        Raises:
            InvalidInputError: Malformed name
            NotFoundError: Name not registered or not pointing anywhere
            NetworkFailureError: RPC failure or timeout
        """
        normalized = normalize_basename(name)
        started = time.monotonic()
        try:
            address = await asyncio.wait_for(self._lookup(normalized), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            self._log_call("resolve", started, success=False)
            raise NetworkFailureError(
                source=self.SOURCE,
                message=f"Lookup timed out after {self.timeout}s",
                endpoint=normalized,
            ) from e
        except Web3Exception as e:
            self._log_call("resolve", started, success=False)
            raise NetworkFailureError(
                source=self.SOURCE,
                message=str(e),
                endpoint=normalized,
            ) from e
        except (aiohttp.ClientError, OSError, ValueError) as e:
            # Transport errors and undecodable call results
            self._log_call("resolve", started, success=False)
            raise NetworkFailureError(
                source=self.SOURCE,
                message=str(e) or type(e).__name__,
                endpoint=normalized,
            ) from e

        self._log_call("resolve", started)
        if address is None:
            raise NotFoundError(normalized, self.SOURCE)

        logger.info(f"[{self.SOURCE}] {normalized} -> {address}")
        return to_checksum_address(address)
