"""Base class for wallet backends.

The orchestrator only consumes wallet state; it never connects wallets
itself. A backend reports the connected account and chain, can be asked
to switch chains, and submits one transfer call at a time.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from ..core.exceptions import (
    InsufficientFundsError,
    SubmissionFailedError,
    TipJarError,
    UserRejectedError,
)
from ..core.models import SponsorshipCapability, SubmissionReceipt, TransferCall, WalletContext
from ..core.types import Address, ChainId, Wei

logger = logging.getLogger(__name__)

# EIP-1193 provider error codes
USER_REJECTED_CODE = 4001
UNAUTHORIZED_CODE = 4100

_REJECTION_MARKERS = ("user rejected", "user denied", "rejected by user", "user cancelled")
_INSUFFICIENT_FUNDS_MARKERS = ("insufficient funds", "insufficient balance")


def classify_rpc_error(code: Optional[int], message: Optional[str]) -> TipJarError:
    """Map a wallet/node JSON-RPC error to the matching exception."""
    text = (message or "").strip()
    lowered = text.lower()

    if code == USER_REJECTED_CODE or any(m in lowered for m in _REJECTION_MARKERS):
        return UserRejectedError(text or None)
    if any(m in lowered for m in _INSUFFICIENT_FUNDS_MARKERS):
        return InsufficientFundsError()
    if code == UNAUTHORIZED_CODE:
        return UserRejectedError(text or "Wallet has not authorised this account")
    return SubmissionFailedError(text or f"Wallet error {code}")


class WalletBackend(ABC):
    """Abstract wallet used by the submission orchestrator."""

    # Whether gas sponsorship capabilities are honoured
    SUPPORTS_SPONSORSHIP: bool = False

    @abstractmethod
    async def get_context(self) -> WalletContext:
        """Return the connected address, chain id and balance."""

    @abstractmethod
    async def switch_chain(self, chain_id: ChainId) -> None:
        """Ask the wallet to move to another chain."""

    @abstractmethod
    async def get_balance(self, address: Address) -> Wei:
        """Native balance of an address in wei."""

    @abstractmethod
    async def send_call(
        self,
        call: TransferCall,
        chain_id: ChainId,
        capability: Optional[SponsorshipCapability] = None,
    ) -> str:
        """
        Sign and broadcast a transfer.

        Returns:
            Handle for ``wait_for_confirmation`` (tx hash or call bundle id)

        Raises:
            UserRejectedError, InsufficientFundsError, SubmissionFailedError,
            NetworkFailureError
        """

    @abstractmethod
    async def wait_for_confirmation(self, handle: str) -> SubmissionReceipt:
        """
        Block until the network confirms the submission.

        Raises:
            SubmissionFailedError: Reverted, dropped or timed out
        """
