"""In-process tagged result cache."""

import time
from collections import OrderedDict
from typing import Any, Callable, Optional

from brand_discovery.core import ResultCache

DEFAULT_MAX_ENTRIES = 1000


class MemoryCache(ResultCache):
    """Bounded LRU cache with optional TTL and tag-based invalidation.

    Once `max_entries` is reached, the least recently used entry is evicted.
    Expired entries are dropped when read.
    """

    def __init__(
        self,
        ttl: Optional[float] = 3600.0,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[str, tuple[Any, Optional[float]]] = OrderedDict()
        self._tags: dict[str, set[str]] = {}

    async def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            self._drop(key)
            return None
        self._entries.move_to_end(key)
        return value

    async def set(self, key: str, value: Any, tags: Optional[list[str]] = None) -> None:
        expires_at = self._clock() + self.ttl if self.ttl is not None else None
        self._entries[key] = (value, expires_at)
        self._entries.move_to_end(key)
        for tag in tags or []:
            self._tags.setdefault(tag, set()).add(key)
        while len(self._entries) > self.max_entries:
            oldest = next(iter(self._entries))
            self._drop(oldest)

    async def invalidate_by_tag(self, tag: str) -> int:
        keys = self._tags.pop(tag, set())
        removed = 0
        for key in keys:
            if key in self._entries:
                self._drop(key)
                removed += 1
        return removed

    def __len__(self) -> int:
        return len(self._entries)

    def _drop(self, key: str) -> None:
        self._entries.pop(key, None)
        for tag in [tag for tag, keys in self._tags.items() if key in keys]:
            keys = self._tags[tag]
            keys.discard(key)
            if not keys:
                del self._tags[tag]
