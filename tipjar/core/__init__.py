"""Core module - data models, types, and exceptions."""

from .models import (
    IdentityProfile,
    LifecycleEvent,
    ResolutionResult,
    SponsorshipCapability,
    SubmissionReceipt,
    TransferCall,
    WalletContext,
)
from .types import (
    BASE_CHAIN_ID,
    BASENAME_SUFFIX,
    ErrorKind,
    LifecycleState,
    ResolutionKind,
)
from .exceptions import (
    ChainMismatchError,
    ConfigurationError,
    InsufficientFundsError,
    InvalidAddressError,
    InvalidAmountError,
    InvalidInputError,
    NetworkFailureError,
    NotFoundError,
    SubmissionFailedError,
    TipJarError,
    UnverifiedError,
    UserRejectedError,
)

__all__ = [
    # Models
    "IdentityProfile",
    "LifecycleEvent",
    "ResolutionResult",
    "SponsorshipCapability",
    "SubmissionReceipt",
    "TransferCall",
    "WalletContext",
    # Types
    "BASE_CHAIN_ID",
    "BASENAME_SUFFIX",
    "ErrorKind",
    "LifecycleState",
    "ResolutionKind",
    # Exceptions
    "ChainMismatchError",
    "ConfigurationError",
    "InsufficientFundsError",
    "InvalidAddressError",
    "InvalidAmountError",
    "InvalidInputError",
    "NetworkFailureError",
    "NotFoundError",
    "SubmissionFailedError",
    "TipJarError",
    "UnverifiedError",
    "UserRejectedError",
]
