"""Submission orchestrator for tip transfers.

Drives one submission attempt at a time through the lifecycle

    idle -> building -> pending -> success
    building | pending -> error
    success | error -> idle   (explicit reset only)

and turns every wallet, node or network failure into the ``error`` state
with a readable message. Nothing is retried here.
"""

import logging
from typing import AsyncIterator, Callable, Optional

from .core.exceptions import (
    ChainMismatchError,
    InsufficientFundsError,
    InvalidTransitionError,
    SubmissionFailedError,
    TipJarError,
)
from .core.models import (
    LifecycleEvent,
    SponsorshipCapability,
    SubmissionReceipt,
    TransferCall,
)
from .core.types import BASE_CHAIN_ID, LIFECYCLE_TRANSITIONS, ChainId, LifecycleState
from .transaction.calls import chain_check
from .wallet.base import WalletBackend

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Transaction failed. Check your wallet."


def describe_failure(exc: BaseException) -> str:
    """Human-readable message for a failed submission."""
    if isinstance(exc, TipJarError):
        return exc.message or GENERIC_FAILURE_MESSAGE
    text = str(exc).strip()
    return text or GENERIC_FAILURE_MESSAGE


class SubmissionOrchestrator:
    """Owns the lifecycle state of tip submissions for one sender."""

    def __init__(
        self,
        wallet: WalletBackend,
        required_chain_id: ChainId = BASE_CHAIN_ID,
        on_success: Optional[Callable[[SubmissionReceipt], None]] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            wallet: Connected wallet backend
            required_chain_id: Chain every transfer must be signed on
            on_success: One-shot side effect fired when an attempt succeeds
        """
        self.wallet = wallet
        self.required_chain_id = required_chain_id
        self.on_success = on_success

        self.state = LifecycleState.IDLE
        self.error_message: Optional[str] = None
        self.last_receipt: Optional[SubmissionReceipt] = None
        self.attempt = 0
        self._celebrated_attempt = 0

    @property
    def is_busy(self) -> bool:
        return self.state in (LifecycleState.BUILDING, LifecycleState.PENDING)

    def can_submit(self, call: Optional[TransferCall]) -> bool:
        """Whether the trigger should be enabled for this call."""
        return call is not None and self.state in (LifecycleState.IDLE, LifecycleState.ERROR)

    def _transition(
        self,
        target: LifecycleState,
        message: Optional[str] = None,
        tx_hash: Optional[str] = None,
    ) -> LifecycleEvent:
        if target not in LIFECYCLE_TRANSITIONS[self.state]:
            raise InvalidTransitionError(self.state, target)

        logger.info(f"Submission #{self.attempt}: {self.state.value} -> {target.value}")
        self.state = target
        if target == LifecycleState.ERROR:
            self.error_message = message
        return LifecycleEvent(
            state=target,
            attempt=self.attempt,
            message=message,
            tx_hash=tx_hash,
        )

    def _fail(self, exc: BaseException, tx_hash: Optional[str] = None) -> LifecycleEvent:
        message = describe_failure(exc)
        if isinstance(exc, TipJarError):
            logger.warning(f"Submission #{self.attempt} failed: {message}")
        else:
            logger.error(f"Submission #{self.attempt} failed unexpectedly: {exc!r}")
        return self._transition(LifecycleState.ERROR, message=message, tx_hash=tx_hash)

    def _celebrate(self, receipt: SubmissionReceipt) -> None:
        if self.on_success is None or self._celebrated_attempt == self.attempt:
            return
        self._celebrated_attempt = self.attempt
        try:
            self.on_success(receipt)
        except Exception:
            logger.exception("Success side effect raised")

    def reset(self) -> None:
        """Explicit user reset from a terminal state back to idle."""
        if self.state == LifecycleState.IDLE:
            return
        self._transition(LifecycleState.IDLE)
        self.error_message = None

    async def ensure_network(self) -> bool:
        """
        Make sure the wallet is on the required chain, asking it to switch if not.

        Returns:
            True when the wallet ends up on the required chain
        """
        context = await self.wallet.get_context()
        if chain_check(context.chain_id, self.required_chain_id):
            return True

        logger.info(
            f"Wallet on chain {context.chain_id}, switching to {self.required_chain_id}"
        )
        try:
            await self.wallet.switch_chain(self.required_chain_id)
        except TipJarError as e:
            logger.warning(f"Chain switch failed: {e.message}")
            return False

        context = await self.wallet.get_context()
        return chain_check(context.chain_id, self.required_chain_id)

    async def submit(
        self,
        call: Optional[TransferCall],
        capability: Optional[SponsorshipCapability] = None,
    ) -> AsyncIterator[LifecycleEvent]:
        """
        Submit a transfer and yield each lifecycle transition.

        A missing call, or a trigger while an attempt is running or waiting
        for reset after success, yields nothing and touches no wallet.
        Triggering from ``error`` counts as the explicit retry.

        Args:
            call: Transfer built by ``build_call``
            capability: Optional gas sponsorship

        Yields:
            LifecycleEvent for every transition of this attempt
        """
        if call is None:
            logger.debug("Submit ignored: no sendable call")
            return
        if self.state == LifecycleState.ERROR:
            self.reset()
        if self.state != LifecycleState.IDLE:
            logger.info(f"Submit ignored while {self.state.value}")
            return

        # No await between the idle check and this transition
        self.attempt += 1
        self.last_receipt = None
        handle: Optional[str] = None
        try:
            yield self._transition(LifecycleState.BUILDING)

            try:
                context = await self.wallet.get_context()
                if not context.is_connected:
                    raise SubmissionFailedError("No account connected in wallet")
                if not chain_check(context.chain_id, self.required_chain_id):
                    raise ChainMismatchError(context.chain_id, self.required_chain_id)
                if context.balance_wei is not None and context.balance_wei < call.value_wei:
                    raise InsufficientFundsError(context.balance_wei, call.value_wei)

                if capability is not None and not self.wallet.SUPPORTS_SPONSORSHIP:
                    logger.info("Wallet cannot use gas sponsorship; sender pays gas")
                    capability = None

                handle = await self.wallet.send_call(call, self.required_chain_id, capability)
            except Exception as e:
                yield self._fail(e)
                return

            yield self._transition(LifecycleState.PENDING, tx_hash=handle)

            try:
                receipt = await self.wallet.wait_for_confirmation(handle)
            except Exception as e:
                yield self._fail(e, tx_hash=handle)
                return

            self.last_receipt = receipt
            event = self._transition(LifecycleState.SUCCESS, tx_hash=receipt.tx_hash)
            self._celebrate(receipt)
            yield event
        finally:
            # Task cancelled, or the consumer closed the generator mid-attempt
            if self.is_busy:
                self._fail(TipJarError("Submission cancelled"), tx_hash=handle)

    async def run(
        self,
        call: Optional[TransferCall],
        capability: Optional[SponsorshipCapability] = None,
        on_event: Optional[Callable[[LifecycleEvent], None]] = None,
    ) -> LifecycleState:
        """Drive ``submit`` to completion and return the resulting state."""
        async for event in self.submit(call, capability):
            if on_event is not None:
                on_event(event)
        return self.state
