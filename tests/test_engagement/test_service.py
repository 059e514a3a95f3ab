"""Tests for BottleService."""

import asyncio

import pytest

from bottle_sync.content_store.cache import ContentCache
from bottle_sync.content_store.store import IpfsHttpContentStore
from bottle_sync.core.config import LikeCountSource, Settings
from bottle_sync.core.errors import (
    LedgerCallFailedError,
    NotLoadedError,
    ParseFailedError,
)
from bottle_sync.engagement.promotion import PromotionOutcome
from bottle_sync.engagement.service import BottleService, build_bottle_service
from bottle_sync.engagement.tracker import EntityCounts


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        PROMOTION_LIKES_THRESHOLD=2,
        PROMOTION_COMMENTS_THRESHOLD=1,
    )


@pytest.fixture
def service(settings, ledger, memory_store):
    return build_bottle_service(settings, ledger, store=memory_store)


class TestBottleService:
    """End-to-end behavior against the in-memory store and ledger."""

    @pytest.mark.asyncio
    async def test_should_create_and_track_bottle(self, service, ledger):
        entity_id = await service.create_bottle("Hello", "user-1")

        assert entity_id == 1
        assert service.counts(entity_id) == EntityCounts(0, 0)
        state = service.tracker.require(entity_id)
        assert ledger.entities[entity_id].content_hash == state.current_content_hash

    @pytest.mark.asyncio
    async def test_like_and_unlike_update_local_counts_only(self, service, ledger):
        entity_id = await service.create_bottle("Hello", "user-1")
        original_hash = service.tracker.require(entity_id).current_content_hash

        assert await service.like(entity_id, "alice") == 1
        assert await service.like(entity_id, "bob") == 2
        assert await service.unlike(entity_id, "alice") == 1

        assert ledger.entities[entity_id].likers == {"bob"}
        # No implicit sync
        assert service.tracker.require(entity_id).current_content_hash == original_hash
        assert ledger.entities[entity_id].content_hash == original_hash

    @pytest.mark.asyncio
    async def test_rejected_like_leaves_counts_unchanged(self, service):
        entity_id = await service.create_bottle("Hello", "user-1")
        await service.like(entity_id, "alice")

        with pytest.raises(LedgerCallFailedError, match="already liked"):
            await service.like(entity_id, "alice")

        assert service.counts(entity_id).like_count == 1

    @pytest.mark.asyncio
    async def test_actions_require_loaded_entity(self, service, ledger):
        await ledger.create_entity("H0")

        with pytest.raises(NotLoadedError):
            await service.like(1, "alice")

        assert ledger.entities[1].likers == set()

    @pytest.mark.asyncio
    async def test_should_add_comment(self, service, ledger, memory_store):
        entity_id = await service.create_bottle("Hello", "user-1")

        comment_id = await service.add_comment(entity_id, "Nice", "user-2")

        assert comment_id == 1
        assert service.counts(entity_id) == EntityCounts(0, 1)
        comment = await service.content.get_item(ledger.comments[1].content_hash)
        assert comment.kind == "comment"
        assert comment.parent_entity_id == entity_id

    @pytest.mark.asyncio
    async def test_commit_should_sync_and_promote(self, service, ledger):
        entity_id = await service.create_bottle("Hello", "user-1")
        await service.like(entity_id, "alice")
        await service.like(entity_id, "bob")
        await service.add_comment(entity_id, "Nice", "carol")

        result = await service.commit(entity_id)

        assert result.promotion is PromotionOutcome.REQUESTED
        assert ledger.entities[entity_id].is_promoted
        assert ledger.entities[entity_id].content_hash == result.snapshot.content_hash
        snapshot = await service.content.get_item(result.snapshot.content_hash)
        assert (snapshot.like_count, snapshot.comment_count) == (2, 1)

        again = await service.commit(entity_id)
        assert again.promotion is PromotionOutcome.ALREADY_PROMOTED

    @pytest.mark.asyncio
    async def test_should_load_bottle_from_snapshot(self, service, memory_store, bottle):
        upload = await memory_store.upload(bottle)

        counts = await service.load_bottle(5, upload.content_hash)

        assert counts == EntityCounts(99, 4)
        assert service.tracker.require(5).current_content_hash == upload.content_hash

    @pytest.mark.asyncio
    async def test_load_bottle_can_take_like_count_from_ledger(
        self, service, memory_store, bottle
    ):
        upload = await memory_store.upload(bottle)

        counts = await service.load_bottle(5, upload.content_hash, like_count=7)

        assert counts == EntityCounts(7, 4)
        assert service.counts(5) == EntityCounts(7, 4)

    @pytest.mark.asyncio
    async def test_load_bottle_rejects_comment_hash(
        self, service, memory_store, comment
    ):
        upload = await memory_store.upload(comment)

        with pytest.raises(ParseFailedError):
            await service.load_bottle(5, upload.content_hash)

        assert service.counts(5) is None

    @pytest.mark.asyncio
    async def test_concurrent_actions_on_different_entities(self, service):
        first = await service.create_bottle("One", "user-1")
        second = await service.create_bottle("Two", "user-2")
        await service.like(second, "zed")

        await asyncio.gather(
            *(service.like(first, f"user-{i}") for i in range(5)),
            service.unlike(second, "zed"),
        )

        assert service.counts(first) == EntityCounts(5, 0)
        assert service.counts(second) == EntityCounts(0, 0)


class TestBuildBottleService:
    def test_should_wire_from_settings(self, ledger):
        settings = Settings(
            _env_file=None,
            CONTENT_CACHE_TTL_MS=1000,
            PROMOTION_LIKES_THRESHOLD=10,
            PROMOTION_COMMENTS_THRESHOLD=0,
            LIKE_COUNT_SOURCE=LikeCountSource.LEDGER,
        )

        service = build_bottle_service(settings, ledger)

        assert isinstance(service, BottleService)
        assert isinstance(service.content.store, IpfsHttpContentStore)
        assert isinstance(service.content.cache, ContentCache)
        assert service.content.cache.ttl_ms == 1000
        assert service.evaluator.thresholds.likes == 10
        assert service.evaluator.thresholds.comments == 0
        assert service.synchronizer.like_count_source is LikeCountSource.LEDGER
        assert service.synchronizer.tracker is service.tracker
        assert service.evaluator.tracker is service.tracker
