"""In-process content cache with per-entry expiry."""

import time
from collections.abc import Callable

from bottle_sync.content_store.models import (
    BottlePayload,
    CacheEntry,
    CacheStats,
    CommentPayload,
)
from bottle_sync.core.logging import get_logger
from bottle_sync.metrics import CONTENT_CACHE_LOOKUPS

logger = get_logger().bind(module="content_cache")

DEFAULT_TTL_MS = 5 * 60 * 1000


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class ContentCache:
    """Maps content hashes to validated payloads for a fixed time-to-live.

    Entries are immutable snapshots keyed by content hash, so there is no
    invalidation beyond time-based expiry and no size bound. Expired entries
    are evicted lazily on lookup.
    """

    def __init__(
        self,
        ttl_ms: int = DEFAULT_TTL_MS,
        clock: Callable[[], int] | None = None,
    ) -> None:
        """Initialize the cache.

        Args:
            ttl_ms: Time-to-live for each entry in milliseconds
            clock: Returns the current time in milliseconds
        """
        if ttl_ms <= 0:
            raise ValueError("Cache TTL must be positive")
        self.ttl_ms = ttl_ms
        self._clock = clock or _now_ms
        self._entries: dict[str, CacheEntry] = {}

    def get(self, content_hash: str) -> BottlePayload | CommentPayload | None:
        """Return the cached payload, or None if absent or expired."""
        entry = self._entries.get(content_hash)
        if entry is None:
            CONTENT_CACHE_LOOKUPS.labels(result="miss").inc()
            return None

        if self._clock() >= entry.expires_at_ms:
            del self._entries[content_hash]
            CONTENT_CACHE_LOOKUPS.labels(result="expired").inc()
            logger.debug("Evicted expired cache entry", content_hash=content_hash)
            return None

        CONTENT_CACHE_LOOKUPS.labels(result="hit").inc()
        return entry.payload

    def put(self, content_hash: str, payload: BottlePayload | CommentPayload) -> None:
        """Store a payload, replacing any prior entry for the same hash."""
        now = self._clock()
        self._entries[content_hash] = CacheEntry(
            payload=payload,
            stored_at_ms=now,
            expires_at_ms=now + self.ttl_ms,
        )

    def clear(self) -> None:
        """Drop all entries."""
        self._entries.clear()

    def stats(self) -> CacheStats:
        """Entry count and approximate serialized size of all cached payloads."""
        size = sum(
            len(entry.payload.to_json_bytes()) for entry in self._entries.values()
        )
        return CacheStats(count=len(self._entries), approximate_byte_size=size)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, content_hash: object) -> bool:
        return content_hash in self._entries
