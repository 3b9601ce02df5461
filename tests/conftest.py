"""Pytest configuration and fixtures for tip jar tests."""

import asyncio
from typing import Any, Callable, Optional

import httpx
import pytest

from tipjar.core.exceptions import NotFoundError, UnverifiedError
from tipjar.core.models import (
    IdentityProfile,
    SponsorshipCapability,
    SubmissionReceipt,
    TransferCall,
    WalletContext,
)
from tipjar.core.types import BASE_CHAIN_ID
from tipjar.wallet.base import WalletBackend

VITALIK = "0xd8dA6BF26964aF9D7eEd9e03E53415D37aA96045"
BURN = "0x000000000000000000000000000000000000dEaD"
SENDER = "0x1111111111111111111111111111111111111111"
TX_HASH = "0x" + "ab" * 32


class FakeNameService:
    """Basename lookup backed by a dict. Records every call."""

    def __init__(self, records: Optional[dict[str, str]] = None, error: Exception | None = None):
        self.records = {k.lower(): v for k, v in (records or {}).items()}
        self.error = error
        self.calls: list[str] = []

    async def resolve_name(self, name: str) -> str:
        self.calls.append(name)
        if self.error is not None:
            raise self.error
        if name not in self.records:
            raise NotFoundError(name, "basenames")
        return self.records[name]


class FakeIdentityDirectory:
    """Farcaster lookup backed by a dict of profiles. Records every call."""

    def __init__(
        self,
        profiles: Optional[dict[str, IdentityProfile]] = None,
        error: Exception | None = None,
        delay: float = 0.0,
    ):
        self.profiles = profiles or {}
        self.error = error
        self.delay = delay
        self.calls: list[str] = []

    async def resolve_address(self, handle: str) -> tuple[str, IdentityProfile]:
        self.calls.append(handle)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if handle not in self.profiles:
            raise NotFoundError(handle, "neynar", message="user not found")
        profile = self.profiles[handle]
        if not profile.primary_address:
            raise UnverifiedError(handle, "neynar")
        return profile.primary_address, profile


class FakeWallet(WalletBackend):
    """In-memory wallet. ``gate`` holds send_call open until set."""

    SUPPORTS_SPONSORSHIP = True

    def __init__(
        self,
        chain_id: int = BASE_CHAIN_ID,
        balance_wei: Optional[int] = 10**18,
        send_error: Exception | None = None,
        confirm_error: Exception | None = None,
        gate: asyncio.Event | None = None,
        switchable: bool = True,
        address: Optional[str] = SENDER,
    ):
        self.chain_id = chain_id
        self.address = address
        self.balance_wei = balance_wei
        self.send_error = send_error
        self.confirm_error = confirm_error
        self.gate = gate
        self.switchable = switchable
        self.sent: list[tuple[TransferCall, int, Optional[SponsorshipCapability]]] = []
        self.switch_requests: list[int] = []

    async def get_context(self) -> WalletContext:
        return WalletContext(address=self.address, chain_id=self.chain_id, balance_wei=self.balance_wei)

    async def switch_chain(self, chain_id: int) -> None:
        self.switch_requests.append(chain_id)
        if self.switchable:
            self.chain_id = chain_id

    async def get_balance(self, address: str) -> int:
        return self.balance_wei or 0

    async def send_call(self, call, chain_id, capability=None) -> str:
        self.sent.append((call, chain_id, capability))
        if self.gate is not None:
            await self.gate.wait()
        if self.send_error is not None:
            raise self.send_error
        return TX_HASH

    async def wait_for_confirmation(self, handle: str) -> SubmissionReceipt:
        if self.confirm_error is not None:
            raise self.confirm_error
        return SubmissionReceipt(tx_hash=handle, block_number=123, status=1)


@pytest.fixture
def vitalik() -> str:
    return VITALIK


@pytest.fixture
def burn_address() -> str:
    return BURN


@pytest.fixture
def name_service_factory() -> Callable[..., FakeNameService]:
    return FakeNameService


@pytest.fixture
def identity_factory() -> Callable[..., FakeIdentityDirectory]:
    return FakeIdentityDirectory


@pytest.fixture
def wallet_factory() -> Callable[..., FakeWallet]:
    return FakeWallet


@pytest.fixture
def sample_call() -> TransferCall:
    """0.002 ETH to vitalik.eth."""
    return TransferCall(to=VITALIK, value_wei=2 * 10**15)


@pytest.fixture
def sample_profile() -> IdentityProfile:
    return IdentityProfile(
        username="someuser",
        display_name="Some User",
        pfp_url="https://example.com/pfp.png",
        verified_addresses=[VITALIK.lower(), BURN],
    )


@pytest.fixture
def neynar_user_payload() -> dict[str, Any]:
    """Trimmed Neynar user-by-username response."""
    return {
        "user": {
            "fid": 3,
            "username": "dwr.eth",
            "display_name": "Dan Romero",
            "pfp_url": "https://i.imgur.com/dwr.png",
            "verified_addresses": {
                "eth_addresses": [VITALIK.lower()],
                "sol_addresses": [],
            },
        }
    }


@pytest.fixture
def mock_http_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Build an httpx.AsyncClient whose requests go to a handler function."""

    def make(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return make
