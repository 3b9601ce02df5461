"""Neynar Farcaster directory provider.

Maps a Farcaster username to the user's verified Ethereum addresses.

API documentation: https://docs.neynar.com/reference/lookup-user-by-username
"""

import logging
import time
from typing import Any, Optional

import httpx

from ...core.config import get_config
from ...core.exceptions import (
    ConfigurationError,
    NetworkFailureError,
    NotFoundError,
    UnverifiedError,
)
from ...core.models import IdentityProfile
from ..base import HTTPProvider

logger = logging.getLogger(__name__)


def normalize_username(handle: str) -> str:
    """Strip whitespace and a leading ``@``, then lower-case."""
    cleaned = handle.strip()
    if cleaned.startswith("@"):
        cleaned = cleaned[1:]
    return cleaned.strip().lower()


class NeynarIdentityProvider(HTTPProvider):
    """Farcaster username lookup through the Neynar API."""

    SOURCE = "neynar"
    BASE_URL = "https://api.neynar.com/v2/farcaster"

    def __init__(
        self,
        api_key: Optional[str] = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
        base_url: str | None = None,
    ):
        """
        Initialize Neynar provider.

        Args:
            api_key: Neynar API key (loaded from config if not provided)
            client: Optional shared httpx client
            timeout: Request timeout in seconds
            base_url: Override for the API root
        """
        super().__init__(client=client, timeout=timeout)
        self.api_key = api_key if api_key is not None else get_config().neynar_api_key
        self.base_url = base_url or self.BASE_URL

    def is_available(self) -> bool:
        """Check if an API key is configured."""
        return bool(self.api_key)

    async def _make_request(
        self,
        endpoint: str,
        params: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        if not self.api_key:
            raise ConfigurationError("NEYNAR_API_KEY", "identity lookup not configured")

        url = f"{self.base_url}{endpoint}"
        started = time.monotonic()
        try:
            async with self._session() as client:
                response = await client.get(
                    url,
                    params=params,
                    headers={"api_key": self.api_key, "accept": "application/json"},
                )
        except httpx.RequestError as e:
            self._log_call(endpoint, started, success=False)
            raise NetworkFailureError(
                source=self.SOURCE,
                message=str(e) or type(e).__name__,
                endpoint=endpoint,
            ) from e

        self._log_call(endpoint, started, success=response.is_success)
        return response

    async def get_user_by_username(self, handle: str) -> IdentityProfile:
        """
        Look up a Farcaster user.

        Args:
            handle: Username, with or without a leading ``@``

        Returns:
            Parsed IdentityProfile

        Raises:
            NotFoundError: Directory answered 404
            NetworkFailureError: Any other non-2xx, transport error or bad payload
            ConfigurationError: No API key
        """
        username = normalize_username(handle)
        endpoint = "/user/by_username"
        response = await self._make_request(endpoint, params={"username": username})

        if response.status_code == 404:
            raise NotFoundError(username, self.SOURCE, message="user not found")

        if not response.is_success:
            raise NetworkFailureError(
                source=self.SOURCE,
                message=f"HTTP {response.status_code}",
                endpoint=endpoint,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise NetworkFailureError(
                source=self.SOURCE,
                message="Malformed JSON response",
                endpoint=endpoint,
                status_code=response.status_code,
            ) from e

        user = payload.get("user") if isinstance(payload, dict) else None
        if not isinstance(user, dict):
            raise NetworkFailureError(
                source=self.SOURCE,
                message="Response has no user object",
                endpoint=endpoint,
                status_code=response.status_code,
            )

        profile = IdentityProfile.from_api(user)
        if not profile.username:
            profile = profile.model_copy(update={"username": username})
        return profile

    async def resolve_address(self, handle: str) -> tuple[str, IdentityProfile]:
        """
        Resolve a handle to its first verified address.

        Returns:
            (raw verified address, profile)

        Raises:
            UnverifiedError: User exists but has no verified address
        """
        profile = await self.get_user_by_username(handle)
        address = profile.primary_address
        if not address:
            raise UnverifiedError(profile.username, self.SOURCE)
        logger.info(f"[{self.SOURCE}] @{profile.username} -> {address}")
        return address, profile
