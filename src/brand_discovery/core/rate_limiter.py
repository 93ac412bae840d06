"""Per-provider request limiting shared by all sessions of a process."""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional

from brand_discovery.core.errors import ProviderQuotaError

WINDOW_SECONDS = 60.0


@dataclass
class _ProviderWindow:
    window_start: float = 0.0
    count: int = 0
    last_request: float = 0.0
    total: int = 0


class ProviderRateLimiter:
    """Minute-window request counter and minimum spacing per provider.

    One instance is injected into every gateway of the process so the limit
    applies per external provider, not per session.
    """

    def __init__(
        self,
        requests_per_minute: int = 100,
        min_interval: float = 0.1,
        limits: Optional[dict[str, int]] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.requests_per_minute = requests_per_minute
        self.min_interval = min_interval
        self.limits = limits or {}
        self._clock = clock
        self._windows: dict[str, _ProviderWindow] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    def limit_for(self, provider: str) -> int:
        return self.limits.get(provider, self.requests_per_minute)

    async def acquire(self, provider: str) -> None:
        """Reserve one request slot, waiting out the minimum spacing.

        Raises:
            ProviderQuotaError: the minute window is exhausted.
        """
        lock = self._locks.setdefault(provider, asyncio.Lock())
        async with lock:
            window = self._windows.setdefault(provider, _ProviderWindow())
            now = self._clock()

            if now - window.window_start >= WINDOW_SECONDS:
                window.window_start = now
                window.count = 0

            if window.count >= self.limit_for(provider):
                raise ProviderQuotaError(provider, "rate limit exceeded")

            wait = self.min_interval - (now - window.last_request)
            if window.last_request and wait > 0:
                await asyncio.sleep(wait)

            window.last_request = self._clock()
            window.count += 1
            window.total += 1

    def can_request(self, provider: str) -> bool:
        window = self._windows.get(provider)
        if window is None or self._clock() - window.window_start >= WINDOW_SECONDS:
            return True
        return window.count < self.limit_for(provider)

    def usage(self) -> dict[str, dict[str, float]]:
        """Requests in the current window, total requests and last request time."""
        return {
            provider: {
                "window_requests": window.count,
                "total_requests": window.total,
                "last_request": window.last_request,
            }
            for provider, window in self._windows.items()
        }
