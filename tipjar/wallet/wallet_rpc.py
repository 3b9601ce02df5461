"""EIP-5792 wallet backend.

Talks to a wallet that exposes ``wallet_sendCalls`` over JSON-RPC (smart
wallets, wallet bridges). This is the backend that honours the
``paymasterService`` capability, so gas can be sponsored.
"""

import asyncio
import logging
import time
from typing import Any, Optional

import aiohttp
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import Web3Exception
from web3.types import RPCEndpoint

from ..core.exceptions import NetworkFailureError, SubmissionFailedError
from ..core.models import SponsorshipCapability, SubmissionReceipt, TransferCall, WalletContext
from ..core.types import Address, ChainId, Wei
from .base import WalletBackend, classify_rpc_error

logger = logging.getLogger(__name__)

CALLS_VERSION = "2.0.0"

# wallet_getCallsStatus codes
STATUS_PENDING = 100
STATUS_CONFIRMED = 200
STATUS_FAILED_MIN = 400


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    return int(str(value), 16) if str(value).startswith("0x") else int(value)


def _status_code(status: Any) -> int:
    """Normalize numeric (v2) and string (v1) call statuses."""
    if isinstance(status, str):
        return {"PENDING": STATUS_PENDING, "CONFIRMED": STATUS_CONFIRMED}.get(
            status.upper(), STATUS_FAILED_MIN
        )
    return int(status or STATUS_PENDING)


class WalletRpcWallet(WalletBackend):
    """Wallet reached through an EIP-1193/EIP-5792 JSON-RPC endpoint."""

    SUPPORTS_SPONSORSHIP = True

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        web3: AsyncWeb3 | None = None,
        poll_interval: float = 2.0,
        confirmation_timeout: float = 120.0,
    ):
        """
        Initialize wallet RPC backend.

        Args:
            rpc_url: Wallet JSON-RPC endpoint
            web3: Pre-built AsyncWeb3 instance, takes precedence over rpc_url
            poll_interval: Seconds between wallet_getCallsStatus polls
            confirmation_timeout: Seconds before giving up on confirmation
        """
        if web3 is None:
            if not rpc_url:
                raise ValueError("rpc_url or web3 is required")
            web3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
        self.w3 = web3
        self.poll_interval = poll_interval
        self.confirmation_timeout = confirmation_timeout
        self._sponsored: set[str] = set()

    async def _request(self, method: str, params: list[Any]) -> Any:
        try:
            response = await self.w3.provider.make_request(RPCEndpoint(method), params)
        except Web3Exception as e:
            response = getattr(e, "rpc_response", None)
            if not isinstance(response, dict):
                raise NetworkFailureError("wallet", str(e), endpoint=method) from e
        except (aiohttp.ClientError, OSError, asyncio.TimeoutError) as e:
            raise NetworkFailureError("wallet", str(e) or type(e).__name__, endpoint=method) from e

        error = response.get("error")
        if error:
            if isinstance(error, dict):
                raise classify_rpc_error(error.get("code"), error.get("message"))
            raise classify_rpc_error(None, str(error))
        return response.get("result")

    async def _accounts(self) -> list[str]:
        accounts = await self._request("eth_accounts", [])
        return list(accounts or [])

    async def get_context(self) -> WalletContext:
        accounts = await self._accounts()
        chain_id = _as_int(await self._request("eth_chainId", []))
        address = accounts[0] if accounts else None
        balance = await self.get_balance(address) if address else None
        return WalletContext(address=address, chain_id=chain_id, balance_wei=balance)

    async def switch_chain(self, chain_id: ChainId) -> None:
        logger.info(f"Requesting wallet switch to chain {chain_id}")
        await self._request("wallet_switchEthereumChain", [{"chainId": hex(chain_id)}])

    async def get_balance(self, address: Address) -> Wei:
        return _as_int(await self._request("eth_getBalance", [address, "latest"])) or 0

    async def send_call(
        self,
        call: TransferCall,
        chain_id: ChainId,
        capability: Optional[SponsorshipCapability] = None,
    ) -> str:
        accounts = await self._accounts()
        if not accounts:
            raise SubmissionFailedError("No account connected in wallet")

        request = {
            "version": CALLS_VERSION,
            "chainId": hex(chain_id),
            "from": accounts[0],
            "atomicRequired": True,
            "calls": [call.to_wallet_call()],
            "capabilities": capability.to_wallet_capabilities() if capability else {},
        }
        result = await self._request("wallet_sendCalls", [request])

        # v1 wallets return the bundle id directly
        call_id = result.get("id") if isinstance(result, dict) else result
        if not call_id:
            raise SubmissionFailedError("Wallet did not return a call id")
        if capability is not None:
            self._sponsored.add(str(call_id))
        logger.info(f"Wallet accepted call bundle {call_id}")
        return str(call_id)

    async def wait_for_confirmation(self, handle: str) -> SubmissionReceipt:
        deadline = time.monotonic() + self.confirmation_timeout
        while True:
            status = await self._request("wallet_getCallsStatus", [handle]) or {}
            code = _status_code(status.get("status"))

            if code >= STATUS_FAILED_MIN:
                raise SubmissionFailedError(f"Call bundle failed with status {code}", tx_hash=handle)

            if code == STATUS_CONFIRMED:
                receipts = status.get("receipts") or []
                if not receipts:
                    raise SubmissionFailedError("Confirmed without a receipt", tx_hash=handle)
                receipt = receipts[-1]
                if _as_int(receipt.get("status")) != 1:
                    raise SubmissionFailedError(
                        "Transaction reverted", tx_hash=receipt.get("transactionHash") or handle
                    )
                return SubmissionReceipt(
                    tx_hash=receipt.get("transactionHash") or handle,
                    block_number=_as_int(receipt.get("blockNumber")),
                    status=1,
                    sponsored=handle in self._sponsored,
                )

            if time.monotonic() >= deadline:
                raise SubmissionFailedError(
                    f"Not confirmed after {self.confirmation_timeout:.0f}s", tx_hash=handle
                )
            await asyncio.sleep(self.poll_interval)
