"""Attempt rate limiting."""

from abc import ABC, abstractmethod


class RateLimiter(ABC):
    """Fixed-window attempt counter keyed by an identifier.

    The first counted attempt opens a window of ``window_seconds``; once it
    elapses the counter is evicted regardless of outcome.
    """

    def __init__(self, limit: int, window_seconds: int) -> None:
        """Initialize rate limiter.

        Args:
            limit: Attempts allowed per window
            window_seconds: Window length
        """
        self.limit = limit
        self.window_seconds = window_seconds

    @abstractmethod
    async def check(self, identifier: str) -> int:
        """Attempts counted in the current window (0 if none)."""
        pass

    @abstractmethod
    async def increment(self, identifier: str) -> int:
        """Count one attempt, opening a window if needed.

        Returns:
            Attempts counted in the window after this one
        """
        pass

    @abstractmethod
    async def reset(self, identifier: str) -> None:
        """Forget all attempts for an identifier."""
        pass

    async def is_limited(self, identifier: str) -> bool:
        return await self.check(identifier) >= self.limit
