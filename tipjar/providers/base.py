"""Base classes for network providers."""

import logging
import time
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

logger = logging.getLogger(__name__)


class BaseProvider(ABC):
    """Abstract base class for all remote lookups."""

    # Subclasses must define their source name
    SOURCE: str = "unknown"

    def __init__(self, timeout: float = 10.0):
        """
        Initialize provider.

        Args:
            timeout: Per-request timeout in seconds
        """
        self.timeout = timeout

    def _log_call(self, action: str, started: float, success: bool = True) -> None:
        duration_ms = int((time.monotonic() - started) * 1000)
        logger.debug(
            f"[{self.SOURCE}] {action} {'ok' if success else 'failed'} in {duration_ms}ms"
        )

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is configured and usable."""
        pass


class HTTPProvider(BaseProvider):
    """Base class for providers talking plain HTTP through httpx."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float = 10.0,
    ):
        """
        Initialize HTTP provider.

        Args:
            client: Shared client to use. When omitted a short-lived client
                is opened per request.
            timeout: Per-request timeout in seconds
        """
        super().__init__(timeout=timeout)
        self._client = client

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client
