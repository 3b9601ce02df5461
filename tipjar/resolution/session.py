"""Debounced, supersession-safe resolution for interactive callers.

The presentation layer feeds every keystroke to ``update()``. Resolution
only starts once the input has been quiet for the debounce period, and
only the most recently issued request may update ``current``. Requests
already in flight are never cancelled; their results are dropped when a
newer request exists.
"""

import asyncio
import logging
from typing import Callable, Optional

from ..core.config import DEFAULT_DEBOUNCE_SECONDS
from ..core.models import ResolutionResult
from .recipient_resolver import RecipientResolver

logger = logging.getLogger(__name__)


class ResolutionSession:
    """Owns the debounce timer and the latest ResolutionResult for one input."""

    def __init__(
        self,
        resolver: RecipientResolver,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        on_result: Optional[Callable[[ResolutionResult], None]] = None,
    ):
        self.resolver = resolver
        self.debounce_seconds = debounce_seconds
        self.on_result = on_result

        self.current = ResolutionResult.empty()
        self._sequence = 0
        self._applied_sequence = 0
        self._timer: Optional[asyncio.TimerHandle] = None
        self._inflight: set[asyncio.Task] = set()
        self._settled = asyncio.Event()
        self._settled.set()
        self._closed = False

    @property
    def is_resolving(self) -> bool:
        """True while the latest request has not produced its result."""
        return self._applied_sequence != self._sequence

    @property
    def sequence(self) -> int:
        return self._sequence

    def update(self, text: str) -> int:
        """
        Register new input.

        Args:
            text: Raw user input

        Returns:
            Sequence number assigned to this input
        """
        if self._closed:
            raise RuntimeError("ResolutionSession is closed")

        self._cancel_timer()
        self._sequence += 1
        sequence = self._sequence

        if not text.strip():
            # Empty input clears immediately, no network call
            self._apply(sequence, ResolutionResult.empty(query=text))
            return sequence

        self._settled.clear()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_seconds, self._fire, sequence, text)
        return sequence

    def _fire(self, sequence: int, text: str) -> None:
        self._timer = None
        task = asyncio.ensure_future(self._run(sequence, text))
        self._inflight.add(task)
        task.add_done_callback(self._inflight.discard)

    async def _run(self, sequence: int, text: str) -> None:
        result = await self.resolver.resolve(text)
        if sequence != self._sequence:
            logger.debug(f"Dropping stale resolution #{sequence} for {text!r}")
            return
        self._apply(sequence, result)

    def _apply(self, sequence: int, result: ResolutionResult) -> None:
        self.current = result
        self._applied_sequence = sequence
        self._settled.set()
        if self.on_result is not None:
            self.on_result(result)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def wait_settled(self) -> ResolutionResult:
        """Wait until the latest input has been resolved and return its result."""
        while self.is_resolving:
            await self._settled.wait()
        return self.current

    async def resolve_now(self, text: str) -> ResolutionResult:
        """Skip the debounce period, used for non-interactive callers."""
        sequence = self.update(text)
        if self._timer is not None:
            self._cancel_timer()
            self._fire(sequence, text)
        return await self.wait_settled()

    def close(self) -> None:
        """Tear down: clear the pending timer. In-flight lookups finish unobserved."""
        self._cancel_timer()
        self._closed = True
        # Nothing newer will arrive, so anything still in flight is stale
        self._sequence += 1
        self._applied_sequence = self._sequence
        self._settled.set()
