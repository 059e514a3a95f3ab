"""Cache-fronted access to bottles and comments in the content store."""

from collections.abc import Callable
from datetime import datetime, timezone

from bottle_sync.content_store.cache import ContentCache
from bottle_sync.content_store.models import (
    BottlePayload,
    CacheStats,
    CommentPayload,
    UploadResult,
)
from bottle_sync.content_store.parser import (
    ParseFailure,
    ParseFailureKind,
    parse_payload,
)
from bottle_sync.content_store.store import ContentStore
from bottle_sync.core.errors import ParseFailedError, UploadFailedError
from bottle_sync.core.logging import get_logger

logger = get_logger().bind(module="content_service")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentService:
    """Reads payloads through the cache and writes new immutable snapshots."""

    def __init__(
        self,
        store: ContentStore,
        cache: ContentCache | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the content service.

        Args:
            store: Content-addressed backend
            cache: Cache fronting reads, a fresh default cache if omitted
            clock: Returns the current aware datetime, used for timestamps
        """
        self.store = store
        self.cache = cache if cache is not None else ContentCache()
        self._clock = clock or _utcnow

    async def get_item(self, content_hash: str) -> BottlePayload | CommentPayload:
        """Return the payload stored under a hash.

        Served from the cache when possible. On a miss the raw blob is
        fetched and validated; only valid payloads are cached.

        Raises:
            InvalidHashError: If the hash is malformed
            FetchFailedError: If the store cannot deliver the blob
            ParseFailedError: If the blob is not a valid payload
        """
        cached = self.cache.get(content_hash)
        if cached is not None:
            return cached

        raw = await self.store.fetch(content_hash)
        result = parse_payload(raw)
        if isinstance(result, ParseFailure):
            logger.warning(
                "Fetched content failed validation",
                content_hash=content_hash,
                kind=result.kind.value,
                field=result.field,
            )
            raise ParseFailedError(
                result.detail,
                content_hash=content_hash,
                operation="get_item",
                kind=result.kind,
                field=result.field,
            )

        self.cache.put(content_hash, result.payload)
        return result.payload

    async def upload_bottle(self, text: str, author_id: str) -> UploadResult:
        """Store a new bottle with zero engagement counts."""
        now = self._clock()
        bottle = BottlePayload(
            text=text,
            author_id=author_id,
            created_at_unix=int(now.timestamp()),
            created_at_iso=now.isoformat(),
            like_count=0,
            comment_count=0,
        )
        return await self.store.upload(bottle)

    async def upload_comment(
        self, text: str, parent_entity_id: int, author_id: str
    ) -> UploadResult:
        """Store a comment attached to a bottle."""
        now = self._clock()
        comment = CommentPayload(
            text=text,
            author_id=author_id,
            created_at_unix=int(now.timestamp()),
            created_at_iso=now.isoformat(),
            parent_entity_id=parent_entity_id,
        )
        return await self.store.upload(comment)

    async def update_bottle_counts(
        self,
        original_hash: str,
        like_count: int | None,
        comment_count: int,
    ) -> UploadResult:
        """Store a new snapshot of a bottle with its counts replaced.

        Args:
            original_hash: Hash of the snapshot to derive from
            like_count: New like count, or None to keep the original's
            comment_count: New comment count

        Returns:
            Upload result carrying the new snapshot's hash

        Raises:
            ParseFailedError: If the original hash does not hold a bottle
            UploadFailedError: If the new snapshot cannot be stored; the
                error names original_hash and this operation
        """
        original = await self.get_item(original_hash)
        if not isinstance(original, BottlePayload):
            raise ParseFailedError(
                "Hash does not point to a bottle",
                content_hash=original_hash,
                operation="update_bottle_counts",
                kind=ParseFailureKind.INVALID_KIND,
                field="kind",
            )

        update: dict[str, int] = {"comment_count": comment_count}
        if like_count is not None:
            update["like_count"] = like_count

        try:
            return await self.store.upload(original.model_copy(update=update))
        except UploadFailedError as e:
            raise UploadFailedError(
                e.message,
                operation="update_bottle_counts",
                content_hash=original_hash,
            ) from e

    def cache_stats(self) -> CacheStats:
        return self.cache.stats()

    def clear_cache(self) -> None:
        self.cache.clear()
