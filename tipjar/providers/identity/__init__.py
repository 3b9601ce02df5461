"""Identity directory providers."""

from .neynar import NeynarIdentityProvider, normalize_username

__all__ = ["NeynarIdentityProvider", "normalize_username"]
