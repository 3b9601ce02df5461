"""Local-key wallet backend.

Signs with an eth-account LocalAccount and broadcasts through a Base RPC
node. Plain EOAs cannot use a paymaster, so the sender always pays gas.
"""

import logging
from typing import Any, Optional

import aiohttp
from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.exceptions import TimeExhausted, Web3Exception

from ..core.config import get_config
from ..core.exceptions import ChainMismatchError, NetworkFailureError, SubmissionFailedError, TipJarError
from ..core.models import SponsorshipCapability, SubmissionReceipt, TransferCall, WalletContext
from ..core.types import Address, ChainId, Wei
from .base import WalletBackend, classify_rpc_error

logger = logging.getLogger(__name__)


def _node_error(e: Exception) -> TipJarError:
    """Extract code/message from a web3 or node error."""
    code = None
    message = str(e)
    payload: Any = getattr(e, "rpc_response", None) or (e.args[0] if e.args else None)
    if isinstance(payload, dict):
        error = payload.get("error", payload)
        if isinstance(error, dict):
            code = error.get("code")
            message = error.get("message") or message
    return classify_rpc_error(code, message)


class LocalAccountWallet(WalletBackend):
    """Wallet backed by a private key and an HTTP RPC node."""

    SUPPORTS_SPONSORSHIP = False

    def __init__(
        self,
        private_key: str,
        rpc_url: Optional[str] = None,
        web3: AsyncWeb3 | None = None,
        confirmation_timeout: float = 120.0,
    ):
        """
        Initialize local account wallet.

        Args:
            private_key: Hex private key of the sender
            rpc_url: Node endpoint (loaded from config if not provided)
            web3: Pre-built AsyncWeb3 instance, takes precedence over rpc_url
            confirmation_timeout: Seconds to wait for a receipt
        """
        self.account: LocalAccount = Account.from_key(private_key)
        if web3 is None:
            web3 = AsyncWeb3(AsyncHTTPProvider(rpc_url or get_config().rpc_url))
        self.w3 = web3
        self.confirmation_timeout = confirmation_timeout

    async def get_context(self) -> WalletContext:
        try:
            chain_id = await self.w3.eth.chain_id
            balance = await self.w3.eth.get_balance(self.account.address)
        except (Web3Exception, aiohttp.ClientError, OSError) as e:
            raise NetworkFailureError("rpc", str(e) or type(e).__name__) from e
        return WalletContext(address=self.account.address, chain_id=chain_id, balance_wei=balance)

    async def switch_chain(self, chain_id: ChainId) -> None:
        # An RPC node serves exactly one chain
        current = await self.w3.eth.chain_id
        if current != chain_id:
            raise ChainMismatchError(current, chain_id)

    async def get_balance(self, address: Address) -> Wei:
        return await self.w3.eth.get_balance(Web3.to_checksum_address(address))

    async def _fee_fields(self) -> dict[str, int]:
        latest = await self.w3.eth.get_block("latest")
        priority = await self.w3.eth.max_priority_fee
        base_fee = latest.get("baseFeePerGas") or 0
        return {
            "maxPriorityFeePerGas": priority,
            "maxFeePerGas": base_fee * 2 + priority,
        }

    async def send_call(
        self,
        call: TransferCall,
        chain_id: ChainId,
        capability: Optional[SponsorshipCapability] = None,
    ) -> str:
        if capability is not None:
            logger.warning("Local accounts cannot use a paymaster; sender pays gas")

        sender = self.account.address
        try:
            nonce = await self.w3.eth.get_transaction_count(sender, "pending")
            tx: dict[str, Any] = {
                "to": call.to,
                "value": call.value_wei,
                "data": call.data,
                "chainId": chain_id,
                "nonce": nonce,
            }
            tx["gas"] = await self.w3.eth.estimate_gas({**tx, "from": sender})
            tx.update(await self._fee_fields())

            signed = self.account.sign_transaction(tx)
            tx_hash = await self.w3.eth.send_raw_transaction(signed.raw_transaction)
        except (aiohttp.ClientError, OSError) as e:
            raise NetworkFailureError("rpc", str(e) or type(e).__name__) from e
        except (Web3Exception, ValueError) as e:
            raise _node_error(e) from e

        tx_hex = Web3.to_hex(tx_hash)
        logger.info(f"Broadcast {tx_hex} from {sender}")
        return tx_hex

    async def wait_for_confirmation(self, handle: str) -> SubmissionReceipt:
        try:
            receipt = await self.w3.eth.wait_for_transaction_receipt(
                handle, timeout=self.confirmation_timeout
            )
        except TimeExhausted as e:
            raise SubmissionFailedError(
                f"Not confirmed after {self.confirmation_timeout:.0f}s", tx_hash=handle
            ) from e
        except (Web3Exception, aiohttp.ClientError, OSError) as e:
            raise SubmissionFailedError(str(e) or "Confirmation failed", tx_hash=handle) from e

        if receipt.get("status") != 1:
            raise SubmissionFailedError("Transaction reverted", tx_hash=handle)

        return SubmissionReceipt(
            tx_hash=handle,
            block_number=receipt.get("blockNumber"),
            status=1,
            sponsored=False,
        )
