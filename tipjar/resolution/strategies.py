"""Recipient resolution strategies.

A strategy pairs a cheap synchronous predicate with an asynchronous
resolve function. The resolver walks an ordered list and hands the input
to the first strategy whose predicate matches, so a new identifier form
is added by inserting a strategy, not by editing control flow.

Every resolve function returns a ResolutionResult; provider exceptions
are translated here into the short user-facing messages.
"""

import logging
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol

from eth_utils import is_address, to_checksum_address

from ..core.exceptions import (
    ConfigurationError,
    InvalidInputError,
    NetworkFailureError,
    NotFoundError,
    TipJarError,
    UnverifiedError,
)
from ..core.models import IdentityProfile, ResolutionResult
from ..core.types import BASENAME_SUFFIX, Address, ErrorKind, ResolutionKind

logger = logging.getLogger(__name__)

_FULL_LENGTH_HEX = re.compile(r"0x[0-9a-fA-F]{40}")


class NameService(Protocol):
    """Anything that can turn a ``*.base.eth`` name into an address."""

    async def resolve_name(self, name: str) -> Address: ...


class IdentityDirectory(Protocol):
    """Anything that can turn a social handle into a verified address."""

    async def resolve_address(self, handle: str) -> tuple[str, IdentityProfile]: ...


ResolveFn = Callable[[str], Awaitable[ResolutionResult]]


@dataclass(frozen=True)
class ResolutionStrategy:
    """One way of turning typed input into an address."""

    name: str
    kind: ResolutionKind
    matches: Callable[[str], bool]
    resolve: ResolveFn


# Predicates. All receive the already-trimmed input.


def is_literal_address(text: str) -> bool:
    """0x-prefixed, 40 hex digits, checksum consistent if mixed-case."""
    return text.startswith("0x") and is_address(text)


def is_malformed_address(text: str) -> bool:
    """Address-length hex with a checksum that does not match.

    Shorter hex strings such as ``0xdead`` are valid Farcaster usernames and
    fall through to the identity lookup.
    """
    return bool(_FULL_LENGTH_HEX.fullmatch(text)) and not is_literal_address(text)


def is_basename(text: str) -> bool:
    return text.lower().endswith(BASENAME_SUFFIX)


def matches_anything(text: str) -> bool:
    return True


# Strategy builders


def literal_address_strategy() -> ResolutionStrategy:
    """Resolve a typed address locally, without any network call."""

    async def resolve(text: str) -> ResolutionResult:
        return ResolutionResult(
            address=to_checksum_address(text),
            kind=ResolutionKind.LITERAL_ADDRESS,
            query=text,
        )

    return ResolutionStrategy(
        name="literal-address",
        kind=ResolutionKind.LITERAL_ADDRESS,
        matches=is_literal_address,
        resolve=resolve,
    )


def malformed_address_strategy() -> ResolutionStrategy:
    """Reject mistyped checksums instead of sending them to a remote directory."""

    async def resolve(text: str) -> ResolutionResult:
        return ResolutionResult.failure(
            ResolutionKind.LITERAL_ADDRESS,
            "invalid address",
            ErrorKind.INVALID_INPUT,
            query=text,
        )

    return ResolutionStrategy(
        name="malformed-address",
        kind=ResolutionKind.LITERAL_ADDRESS,
        matches=is_malformed_address,
        resolve=resolve,
    )


def basename_strategy(provider: NameService) -> ResolutionStrategy:
    """Resolve ``*.base.eth`` names through the on-chain registry."""
    kind = ResolutionKind.NAME_SERVICE

    async def resolve(text: str) -> ResolutionResult:
        try:
            address = await provider.resolve_name(text.lower())
        except InvalidInputError:
            return ResolutionResult.failure(kind, "invalid name", ErrorKind.INVALID_INPUT, query=text)
        except NotFoundError:
            return ResolutionResult.failure(kind, "not found", ErrorKind.NOT_FOUND, query=text)
        except NetworkFailureError as e:
            logger.warning(f"Basename lookup failed for {text}: {e.message}")
            return ResolutionResult.failure(
                kind, "name lookup failed", ErrorKind.NETWORK_FAILURE, query=text
            )

        if not is_address(address):
            logger.warning(f"Basename {text} resolved to a malformed address: {address}")
            return ResolutionResult.failure(
                kind, "name lookup failed", ErrorKind.NETWORK_FAILURE, query=text
            )

        return ResolutionResult(address=to_checksum_address(address), kind=kind, query=text)

    return ResolutionStrategy(
        name="basename",
        kind=kind,
        matches=is_basename,
        resolve=resolve,
    )


def farcaster_strategy(provider: IdentityDirectory) -> ResolutionStrategy:
    """Resolve anything else as a Farcaster handle. Tried last."""
    kind = ResolutionKind.SOCIAL_IDENTITY

    async def resolve(text: str) -> ResolutionResult:
        handle = text[1:] if text.startswith("@") else text
        handle = handle.strip().lower()
        if not handle:
            return ResolutionResult.failure(
                kind, "invalid username", ErrorKind.INVALID_INPUT, query=text
            )

        try:
            address, profile = await provider.resolve_address(handle)
        except ConfigurationError:
            return ResolutionResult.failure(
                kind, "identity lookup not configured", ErrorKind.CONFIGURATION, query=text
            )
        except NotFoundError:
            return ResolutionResult.failure(kind, "user not found", ErrorKind.NOT_FOUND, query=text)
        except UnverifiedError:
            return ResolutionResult.failure(
                kind, "no verified address", ErrorKind.UNVERIFIED, query=text
            )
        except TipJarError as e:
            logger.warning(f"Farcaster lookup failed for @{handle}: {e.message}")
            return ResolutionResult.failure(
                kind, "resolution failed", ErrorKind.NETWORK_FAILURE, query=text
            )

        if not is_address(address):
            logger.warning(f"@{handle} has a malformed verified address: {address}")
            return ResolutionResult.failure(
                kind, "resolution failed", ErrorKind.NETWORK_FAILURE, query=text
            )

        return ResolutionResult(
            address=to_checksum_address(address),
            kind=kind,
            display_name=profile.label or handle,
            avatar_url=profile.pfp_url,
            query=text,
        )

    return ResolutionStrategy(
        name="farcaster",
        kind=kind,
        matches=matches_anything,
        resolve=resolve,
    )
