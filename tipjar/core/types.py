"""Type definitions and enums for the tip jar."""

from enum import Enum


class ResolutionKind(str, Enum):
    """Which strategy produced a resolution result."""

    LITERAL_ADDRESS = "literal-address"
    NAME_SERVICE = "name-service"
    SOCIAL_IDENTITY = "social-identity"
    UNRESOLVED = "unresolved"

    @property
    def display_name(self) -> str:
        """Human-readable display name."""
        names = {
            ResolutionKind.LITERAL_ADDRESS: "Address",
            ResolutionKind.NAME_SERVICE: "Basename",
            ResolutionKind.SOCIAL_IDENTITY: "Farcaster",
            ResolutionKind.UNRESOLVED: "Unknown",
        }
        return names.get(self, self.value)


class LifecycleState(str, Enum):
    """Phase of a single transaction submission attempt."""

    IDLE = "idle"
    BUILDING = "building"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        """Terminal states stay put until an explicit reset."""
        return self in (LifecycleState.SUCCESS, LifecycleState.ERROR)


class ErrorKind(str, Enum):
    """Error taxonomy shared by resolution and submission."""

    INVALID_INPUT = "invalid_input"      # Malformed address/amount, no network call made
    NOT_FOUND = "not_found"              # Name or identity does not resolve
    UNVERIFIED = "unverified"            # Identity exists without a verified address
    NETWORK_FAILURE = "network_failure"  # Timeout, non-2xx, malformed response
    CHAIN_MISMATCH = "chain_mismatch"    # Wallet connected to the wrong network
    USER_REJECTED = "user_rejected"      # Signing prompt declined
    SUBMISSION_FAILED = "submission_failed"
    CONFIGURATION = "configuration"


# Allowed lifecycle transitions; anything else is a programming error
LIFECYCLE_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.IDLE: frozenset({LifecycleState.BUILDING}),
    LifecycleState.BUILDING: frozenset({LifecycleState.PENDING, LifecycleState.ERROR}),
    LifecycleState.PENDING: frozenset({LifecycleState.SUCCESS, LifecycleState.ERROR}),
    LifecycleState.SUCCESS: frozenset({LifecycleState.IDLE}),
    LifecycleState.ERROR: frozenset({LifecycleState.IDLE}),
}


# Type aliases for common patterns
Address = str   # 0x-prefixed, EIP-55 checksummed
Wei = int       # Smallest native unit, 1 ETH = 10**18 wei
ChainId = int

BASE_CHAIN_ID: ChainId = 8453
BASENAME_SUFFIX = ".base.eth"
ETHER_DECIMALS = 18
MAX_UINT256 = 2**256 - 1
