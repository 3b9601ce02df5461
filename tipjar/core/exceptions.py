"""Custom exceptions for the tip jar."""

from .types import ErrorKind, LifecycleState


class TipJarError(Exception):
    """Base exception for all tip jar errors."""

    kind: ErrorKind = ErrorKind.SUBMISSION_FAILED

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidInputError(TipJarError):
    """Raised when user input is malformed. Always caught before any network call."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(self, field: str, value: str, reason: str):
        message = f"Invalid {field}: {reason}"
        super().__init__(message, {"field": field, "value": value, "reason": reason})
        self.field = field
        self.value = value
        self.reason = reason


class InvalidAddressError(InvalidInputError):
    """Raised when a string is not a valid account address."""

    def __init__(self, value: str, reason: str = "not a valid address"):
        super().__init__("address", value, reason)


class InvalidAmountError(InvalidInputError):
    """Raised when an amount cannot be turned into a positive wei value."""

    def __init__(self, value: str, reason: str):
        super().__init__("amount", value, reason)


class NotFoundError(TipJarError):
    """Raised when a name or identity handle does not resolve."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, identifier: str, source: str, message: str = "not found"):
        super().__init__(message, {"identifier": identifier, "source": source})
        self.identifier = identifier
        self.source = source


class UnverifiedError(TipJarError):
    """Raised when an identity exists but has no verified address."""

    kind = ErrorKind.UNVERIFIED

    def __init__(self, identifier: str, source: str):
        super().__init__("no verified address", {"identifier": identifier, "source": source})
        self.identifier = identifier
        self.source = source


class NetworkFailureError(TipJarError):
    """Raised when a remote call fails or returns unusable data."""

    kind = ErrorKind.NETWORK_FAILURE

    def __init__(
        self,
        source: str,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
    ):
        full_message = f"[{source}] {message}"
        super().__init__(
            full_message,
            {
                "source": source,
                "endpoint": endpoint,
                "status_code": status_code,
            },
        )
        self.source = source
        self.endpoint = endpoint
        self.status_code = status_code


class ChainMismatchError(TipJarError):
    """Raised when the wallet is connected to a different chain than required."""

    kind = ErrorKind.CHAIN_MISMATCH

    def __init__(self, connected_chain_id: int | None, required_chain_id: int):
        message = (
            f"Wallet is on chain {connected_chain_id}, switch to chain {required_chain_id}"
        )
        super().__init__(
            message,
            {"connected": connected_chain_id, "required": required_chain_id},
        )
        self.connected_chain_id = connected_chain_id
        self.required_chain_id = required_chain_id


class UserRejectedError(TipJarError):
    """Raised when the user declines the signing prompt."""

    kind = ErrorKind.USER_REJECTED

    def __init__(self, reason: str | None = None):
        super().__init__(reason or "Request rejected in wallet")


class SubmissionFailedError(TipJarError):
    """Raised when broadcasting or confirming a transaction fails."""

    kind = ErrorKind.SUBMISSION_FAILED

    def __init__(self, message: str, tx_hash: str | None = None):
        super().__init__(message, {"tx_hash": tx_hash})
        self.tx_hash = tx_hash


class InsufficientFundsError(SubmissionFailedError):
    """Raised when the sender cannot cover the transfer value."""

    def __init__(self, balance_wei: int | None = None, required_wei: int | None = None):
        message = "Insufficient funds for this transfer"
        super().__init__(message)
        self.details.update({"balance_wei": balance_wei, "required_wei": required_wei})
        self.balance_wei = balance_wei
        self.required_wei = required_wei


class ConfigurationError(TipJarError):
    """Raised when configuration is invalid or missing."""

    kind = ErrorKind.CONFIGURATION

    def __init__(self, config_key: str, message: str):
        full_message = f"Configuration error [{config_key}]: {message}"
        super().__init__(full_message, {"config_key": config_key})
        self.config_key = config_key


class InvalidTransitionError(TipJarError):
    """Raised when the submission state machine is driven out of order."""

    def __init__(self, current: LifecycleState, target: LifecycleState):
        message = f"Illegal lifecycle transition {current.value} -> {target.value}"
        super().__init__(message, {"current": current.value, "target": target.value})
        self.current = current
        self.target = target
