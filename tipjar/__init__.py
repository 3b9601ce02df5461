"""Base Tip Jar.

Resolves a recipient typed as an address, a Basename or a Farcaster
handle, and sends a small ETH tip on Base with optional gas sponsorship.
"""

__version__ = "0.1.0"
