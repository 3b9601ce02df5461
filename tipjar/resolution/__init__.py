"""Recipient resolution module - resolves user input to addresses."""

from .recipient_resolver import RecipientResolver, default_strategies
from .session import ResolutionSession
from .strategies import ResolutionStrategy

__all__ = ["RecipientResolver", "ResolutionSession", "ResolutionStrategy", "default_strategies"]
