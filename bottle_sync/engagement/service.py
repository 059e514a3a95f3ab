"""Bottle lifecycle coordination across the ledger, tracker and content store."""

import asyncio
from dataclasses import dataclass

from bottle_sync.content_store.cache import ContentCache
from bottle_sync.content_store.models import BottlePayload, UploadResult
from bottle_sync.content_store.parser import ParseFailureKind
from bottle_sync.content_store.service import ContentService
from bottle_sync.content_store.store import ContentStore, IpfsHttpContentStore
from bottle_sync.core.config import Settings
from bottle_sync.core.errors import ParseFailedError
from bottle_sync.core.logging import get_logger
from bottle_sync.engagement.promotion import (
    PromotionEvaluator,
    PromotionOutcome,
    PromotionThresholds,
)
from bottle_sync.engagement.sync import CountSynchronizer
from bottle_sync.engagement.tracker import CounterTracker, EntityCounts
from bottle_sync.ledger.client import EngagementAction, Ledger

logger = get_logger().bind(module="bottle_service")


@dataclass(frozen=True)
class CommitResult:
    """Outcome of publishing an entity's counts."""

    snapshot: UploadResult
    promotion: PromotionOutcome


class BottleService:
    """Entry point for user actions on bottles.

    Each action records the event on the ledger and then updates the local
    counters. Publishing counts is a separate step: call commit() when the
    new counts should be written to the content store and checked for
    promotion. Actions on the same entity are serialized with a per-entity
    lock; different entities proceed independently.
    """

    def __init__(
        self,
        content: ContentService,
        tracker: CounterTracker,
        ledger: Ledger,
        synchronizer: CountSynchronizer,
        evaluator: PromotionEvaluator,
    ) -> None:
        self.content = content
        self.tracker = tracker
        self.ledger = ledger
        self.synchronizer = synchronizer
        self.evaluator = evaluator
        self._locks: dict[int, asyncio.Lock] = {}

    def _lock_for(self, entity_id: int) -> asyncio.Lock:
        return self._locks.setdefault(entity_id, asyncio.Lock())

    async def create_bottle(self, text: str, author_id: str) -> int:
        """Upload a new bottle, register it on the ledger and start tracking it."""
        upload = await self.content.upload_bottle(text, author_id)
        entity_id = await self.ledger.create_entity(upload.content_hash)
        async with self._lock_for(entity_id):
            self.tracker.load(entity_id, upload.content_hash, 0, 0)
        logger.info(
            "Created bottle", entity_id=entity_id, content_hash=upload.content_hash
        )
        return entity_id

    async def load_bottle(
        self, entity_id: int, content_hash: str, like_count: int | None = None
    ) -> EntityCounts:
        """Seed the tracker from the snapshot stored under content_hash.

        Args:
            entity_id: Ledger id of the bottle
            content_hash: Snapshot the ledger currently points at
            like_count: Like count to seed instead of the snapshot's, for
                deployments where the ledger owns likes

        Raises:
            ParseFailedError: If the hash does not hold a bottle
        """
        async with self._lock_for(entity_id):
            payload = await self.content.get_item(content_hash)
            if not isinstance(payload, BottlePayload):
                raise ParseFailedError(
                    "Hash does not point to a bottle",
                    content_hash=content_hash,
                    operation="load_bottle",
                    kind=ParseFailureKind.INVALID_KIND,
                    field="kind",
                )
            counts = EntityCounts(
                payload.like_count if like_count is None else like_count,
                payload.comment_count,
            )
            self.tracker.load(entity_id, content_hash, *counts)
        logger.debug("Loaded bottle", entity_id=entity_id, content_hash=content_hash)
        return counts

    async def like(self, entity_id: int, actor_id: str) -> int:
        """Record a like and return the new local like count."""
        async with self._lock_for(entity_id):
            self.tracker.require(entity_id)
            await self.ledger.record_engagement(
                entity_id, actor_id, EngagementAction.LIKE
            )
            return self.tracker.increment_likes(entity_id)

    async def unlike(self, entity_id: int, actor_id: str) -> int:
        """Record an unlike and return the new local like count."""
        async with self._lock_for(entity_id):
            self.tracker.require(entity_id)
            await self.ledger.record_engagement(
                entity_id, actor_id, EngagementAction.UNLIKE
            )
            return self.tracker.decrement_likes(entity_id)

    async def add_comment(self, entity_id: int, text: str, author_id: str) -> int:
        """Upload a comment, attach it on the ledger and return its id."""
        async with self._lock_for(entity_id):
            self.tracker.require(entity_id)
            upload = await self.content.upload_comment(text, entity_id, author_id)
            comment_id = await self.ledger.add_comment(entity_id, upload.content_hash)
            self.tracker.increment_comments(entity_id)
            return comment_id

    async def commit(self, entity_id: int) -> CommitResult:
        """Sync the entity's counts, then evaluate it for promotion."""
        async with self._lock_for(entity_id):
            snapshot = await self.synchronizer.sync_counts(entity_id)
            promotion = await self.evaluator.evaluate(entity_id)
        return CommitResult(snapshot=snapshot, promotion=promotion)

    def counts(self, entity_id: int) -> EntityCounts | None:
        return self.tracker.read_counts(entity_id)


def build_bottle_service(
    settings: Settings,
    ledger: Ledger,
    store: ContentStore | None = None,
) -> BottleService:
    """Wire a BottleService from settings.

    Args:
        settings: Application settings
        ledger: Ledger client to record engagement on
        store: Content store backend, IPFS over HTTP when omitted

    Returns:
        A BottleService with its own cache and tracker
    """
    if store is None:
        store = IpfsHttpContentStore(
            gateway_url=settings.CONTENT_GATEWAY_URL,
            api_url=settings.CONTENT_API_URL,
            api_token=settings.CONTENT_API_TOKEN,
            timeout=settings.CONTENT_TIMEOUT,
        )

    content = ContentService(store, ContentCache(ttl_ms=settings.CONTENT_CACHE_TTL_MS))
    tracker = CounterTracker()
    synchronizer = CountSynchronizer(
        content, tracker, ledger, like_count_source=settings.LIKE_COUNT_SOURCE
    )
    evaluator = PromotionEvaluator(
        tracker,
        ledger,
        PromotionThresholds(
            likes=settings.PROMOTION_LIKES_THRESHOLD,
            comments=settings.PROMOTION_COMMENTS_THRESHOLD,
        ),
    )
    return BottleService(content, tracker, ledger, synchronizer, evaluator)
