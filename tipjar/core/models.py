"""Pydantic data models for the tip jar.

All data structures are immutable (frozen) after creation. A new
resolution or lifecycle event replaces the previous one, it is never
merged into it.
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field, HttpUrl, field_validator, model_validator

from .types import Address, ChainId, ErrorKind, LifecycleState, MAX_UINT256, ResolutionKind, Wei


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ResolutionResult(BaseModel):
    """Outcome of resolving one user-typed recipient string.

    Exactly one of three shapes:
    - ``address`` set: resolved
    - ``error`` set: failed
    - neither set: no input yet
    """

    address: Address | None = None
    kind: ResolutionKind = ResolutionKind.UNRESOLVED
    display_name: str | None = None
    avatar_url: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    query: str = ""

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_outcome(self) -> "ResolutionResult":
        if self.address is not None and self.error is not None:
            raise ValueError("address and error are mutually exclusive")
        if (self.error is None) != (self.error_kind is None):
            raise ValueError("error and error_kind must be set together")
        return self

    @property
    def is_resolved(self) -> bool:
        return self.address is not None

    @property
    def is_empty(self) -> bool:
        """True for the "no input yet" result."""
        return self.address is None and self.error is None

    @classmethod
    def empty(cls, query: str = "") -> "ResolutionResult":
        return cls(query=query)

    @classmethod
    def failure(
        cls,
        kind: ResolutionKind,
        error: str,
        error_kind: ErrorKind,
        query: str = "",
    ) -> "ResolutionResult":
        return cls(kind=kind, error=error, error_kind=error_kind, query=query)


class IdentityProfile(BaseModel):
    """Farcaster user profile as returned by the identity directory."""

    username: str
    display_name: str | None = None
    pfp_url: str | None = None
    verified_addresses: list[str] = Field(default_factory=list)

    model_config = {"frozen": True}

    @property
    def primary_address(self) -> str | None:
        """First verified address, which is the one tips are sent to."""
        return self.verified_addresses[0] if self.verified_addresses else None

    @property
    def label(self) -> str:
        return self.display_name or self.username

    @classmethod
    def from_api(cls, user: dict[str, Any]) -> "IdentityProfile":
        """Parse the ``user`` object of a directory response."""
        verified = user.get("verified_addresses") or {}
        eth_addresses = verified.get("eth_addresses") or []
        return cls(
            username=user.get("username") or "",
            display_name=user.get("display_name") or None,
            pfp_url=user.get("pfp_url") or None,
            verified_addresses=[a for a in eth_addresses if isinstance(a, str) and a],
        )


class TransferCall(BaseModel):
    """A native-asset transfer ready to hand to a wallet."""

    to: Address
    value_wei: Wei
    data: str = "0x"

    model_config = {"frozen": True}

    @field_validator("value_wei")
    @classmethod
    def _check_value(cls, v: int) -> int:
        if v <= 0 or v > MAX_UINT256:
            raise ValueError("value_wei must be between 1 and 2**256 - 1")
        return v

    @field_validator("data")
    @classmethod
    def _check_data(cls, v: str) -> str:
        if v != "0x":
            raise ValueError("only plain value transfers are supported")
        return v

    def to_wallet_call(self) -> dict[str, str]:
        """Hex-encoded form used by wallet JSON-RPC methods."""
        return {"to": self.to, "value": hex(self.value_wei), "data": self.data}


class SponsorshipCapability(BaseModel):
    """Paymaster endpoint that pays gas on behalf of the sender."""

    service_url: HttpUrl

    model_config = {"frozen": True}

    def to_wallet_capabilities(self) -> dict[str, Any]:
        return {"paymasterService": {"url": str(self.service_url)}}


class WalletContext(BaseModel):
    """Snapshot of the connected wallet."""

    address: Address | None = None
    chain_id: ChainId | None = None
    balance_wei: Wei | None = None

    model_config = {"frozen": True}

    @property
    def is_connected(self) -> bool:
        return self.address is not None


class SubmissionReceipt(BaseModel):
    """Confirmation details of a successful submission."""

    tx_hash: str
    block_number: int | None = None
    status: int = 1
    sponsored: bool = False

    model_config = {"frozen": True}


class LifecycleEvent(BaseModel):
    """One state transition of a submission attempt."""

    state: LifecycleState
    attempt: int
    message: str | None = None
    tx_hash: str | None = None
    timestamp: datetime = Field(default_factory=_utcnow)

    model_config = {"frozen": True}
