"""Recipient resolution - turns user input into a verified address.

This module handles the ambiguity of recipient identification:
- User might type a raw address, a Basename, or a Farcaster handle
- Only a valid literal address is trusted without a network call
- Remote lookups can fail in many ways, all of which become a result
  with an error message instead of an exception
"""

import logging
from typing import Optional, Sequence

from ..core.config import TipJarConfig, get_config
from ..core.models import ResolutionResult
from ..core.types import ErrorKind, ResolutionKind
from ..providers.identity import NeynarIdentityProvider
from ..providers.naming import BasenameProvider
from .strategies import (
    IdentityDirectory,
    NameService,
    ResolutionStrategy,
    basename_strategy,
    farcaster_strategy,
    literal_address_strategy,
    malformed_address_strategy,
)

logger = logging.getLogger(__name__)


def default_strategies(
    name_service: NameService,
    identity: IdentityDirectory,
) -> list[ResolutionStrategy]:
    """Standard ordering: cheapest and least ambiguous first."""
    return [
        literal_address_strategy(),
        malformed_address_strategy(),
        basename_strategy(name_service),
        farcaster_strategy(identity),
    ]


class RecipientResolver:
    """Resolves recipient identifiers through an ordered list of strategies."""

    def __init__(
        self,
        name_service: Optional[NameService] = None,
        identity: Optional[IdentityDirectory] = None,
        strategies: Optional[Sequence[ResolutionStrategy]] = None,
        config: Optional[TipJarConfig] = None,
    ):
        """
        Initialize the resolver.

        Args:
            name_service: Basename lookup (built from config if not provided)
            identity: Farcaster lookup (built from config if not provided)
            strategies: Full strategy list, replaces the default ordering
            config: Configuration used for any provider built here
        """
        if strategies is None:
            config = config or get_config()
            if name_service is None:
                name_service = BasenameProvider(rpc_url=config.rpc_url)
            if identity is None:
                identity = NeynarIdentityProvider(api_key=config.neynar_api_key or "")
            strategies = default_strategies(name_service, identity)

        self.strategies: list[ResolutionStrategy] = list(strategies)

    def classify(self, text: str) -> Optional[ResolutionStrategy]:
        """Return the strategy that would handle this input, if any."""
        cleaned = text.strip()
        if not cleaned:
            return None
        for strategy in self.strategies:
            if strategy.matches(cleaned):
                return strategy
        return None

    async def resolve(self, text: str) -> ResolutionResult:
        """
        Resolve a recipient identifier.

        Never raises: every failure is reported through
        ``ResolutionResult.error``.

        Args:
            text: Raw user input

        Returns:
            ResolutionResult for this input
        """
        cleaned = text.strip()
        if not cleaned:
            return ResolutionResult.empty(query=text)

        strategy = self.classify(cleaned)
        if strategy is None:
            logger.warning(f"No strategy matched recipient input: {cleaned!r}")
            return ResolutionResult.failure(
                ResolutionKind.UNRESOLVED,
                "unrecognised recipient",
                ErrorKind.INVALID_INPUT,
                query=text,
            )

        logger.info(f"Resolving recipient {cleaned!r} via {strategy.name}")
        try:
            result = await strategy.resolve(cleaned)
        except Exception as e:
            logger.exception(f"Strategy {strategy.name} crashed on {cleaned!r}: {e}")
            return ResolutionResult.failure(
                strategy.kind,
                "resolution failed",
                ErrorKind.NETWORK_FAILURE,
                query=text,
            )

        if result.error:
            logger.info(f"Could not resolve {cleaned!r}: {result.error}")
        # Results always carry the caller's raw input for supersession checks
        return result.model_copy(update={"query": text})
