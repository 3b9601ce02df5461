"""Configuration management for API keys, endpoints and wallet settings.

Loads configuration from environment variables or .env file. Every value
is optional: a missing key disables the matching capability instead of
failing the whole flow.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .types import BASE_CHAIN_ID

DEFAULT_RPC_URL = "https://mainnet.base.org"
DEFAULT_DEBOUNCE_SECONDS = 0.7


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw, 0)
    except ValueError:
        return default


@dataclass
class TipJarConfig:
    """Runtime configuration for resolution and submission."""

    # Neynar (Farcaster username lookup) - identity resolution disabled without it
    neynar_api_key: Optional[str] = None

    # Paymaster endpoint - sender pays gas without it
    paymaster_url: Optional[str] = None

    # Base RPC node used for Basename reads and local-key submissions
    rpc_url: str = DEFAULT_RPC_URL

    # EIP-5792 wallet endpoint (preferred wallet backend)
    wallet_rpc_url: Optional[str] = None

    # Local signing key (fallback wallet backend)
    private_key: Optional[str] = None

    chain_id: int = BASE_CHAIN_ID
    debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS

    @classmethod
    def from_env(cls) -> "TipJarConfig":
        """Load configuration from environment variables."""
        return cls(
            neynar_api_key=os.getenv("NEYNAR_API_KEY") or None,
            paymaster_url=(os.getenv("PAYMASTER_URL") or "").strip() or None,
            rpc_url=os.getenv("BASE_RPC_URL") or DEFAULT_RPC_URL,
            wallet_rpc_url=os.getenv("WALLET_RPC_URL") or None,
            private_key=os.getenv("TIPJAR_PRIVATE_KEY") or None,
            chain_id=_env_int("TIPJAR_CHAIN_ID", BASE_CHAIN_ID),
            debounce_seconds=_env_float("TIPJAR_DEBOUNCE_SECONDS", DEFAULT_DEBOUNCE_SECONDS),
        )

    @classmethod
    def load(cls, env_file: Optional[Path] = None) -> "TipJarConfig":
        """
        Load configuration from .env file and environment variables.

        Args:
            env_file: Optional path to .env file. If not provided,
                      looks for .env in the project root.

        Returns:
            TipJarConfig instance with loaded values
        """
        if env_file:
            load_dotenv(env_file)
        else:
            project_root = Path(__file__).parent.parent.parent
            env_path = project_root / ".env"
            if env_path.exists():
                load_dotenv(env_path)

        return cls.from_env()

    def has_identity_directory(self) -> bool:
        """Check if the Neynar API key is configured."""
        return bool(self.neynar_api_key)

    def has_sponsorship(self) -> bool:
        """Check if a paymaster URL is configured (validity is checked later)."""
        return bool(self.paymaster_url)

    def has_wallet(self) -> bool:
        """Check if any wallet backend can be built."""
        return bool(self.wallet_rpc_url or self.private_key)


# Global config instance (lazy loaded)
_config: Optional[TipJarConfig] = None


def get_config() -> TipJarConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = TipJarConfig.load()
    return _config


def reload_config(env_file: Optional[Path] = None) -> TipJarConfig:
    """Reload configuration from environment."""
    global _config
    _config = TipJarConfig.load(env_file)
    return _config
