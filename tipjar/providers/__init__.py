"""Network providers for recipient resolution.

This module contains providers for:
- Farcaster username lookup (Neynar)
- Basename lookup (Base registry)
"""

from .base import BaseProvider, HTTPProvider
from .identity import NeynarIdentityProvider
from .naming import BasenameProvider

__all__ = ["BaseProvider", "HTTPProvider", "NeynarIdentityProvider", "BasenameProvider"]
