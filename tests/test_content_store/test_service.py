"""Tests for ContentService."""

import json
from unittest.mock import AsyncMock

import pytest

from bottle_sync.content_store.models import BottlePayload, CommentPayload
from bottle_sync.content_store.parser import (
    ParseFailureKind,
    ParseSuccess,
    parse_payload,
)
from bottle_sync.core.errors import (
    ContentStoreErrorCode,
    FetchFailedError,
    InvalidHashError,
    ParseFailedError,
    UploadFailedError,
)

from tests.conftest import FIXED_NOW


class TestContentServiceReads:
    """Cache-fronted reads."""

    @pytest.mark.asyncio
    async def test_should_fetch_and_cache_on_miss(
        self, content_service, memory_store, bottle
    ):
        upload = await memory_store.upload(bottle)

        payload = await content_service.get_item(upload.content_hash)

        assert payload == bottle
        assert content_service.cache.get(upload.content_hash) == bottle

    @pytest.mark.asyncio
    async def test_should_serve_hits_without_fetching(
        self, content_service, memory_store, bottle
    ):
        upload = await memory_store.upload(bottle)
        await content_service.get_item(upload.content_hash)

        memory_store.fetch = AsyncMock(side_effect=AssertionError("fetched"))
        payload = await content_service.get_item(upload.content_hash)

        assert payload == bottle

    @pytest.mark.asyncio
    async def test_should_refetch_after_expiry(
        self, content_service, memory_store, clock, bottle
    ):
        upload = await memory_store.upload(bottle)
        await content_service.get_item(upload.content_hash)
        clock.advance(300_000)

        fetch = AsyncMock(return_value=bottle.to_json_bytes())
        memory_store.fetch = fetch
        await content_service.get_item(upload.content_hash)

        fetch.assert_awaited_once_with(upload.content_hash)

    @pytest.mark.asyncio
    async def test_should_raise_parse_failed_and_not_cache(
        self, content_service, memory_store
    ):
        content_hash = memory_store.put_raw(json.dumps({"kind": "post"}).encode())

        with pytest.raises(ParseFailedError) as exc_info:
            await content_service.get_item(content_hash)

        assert exc_info.value.code is ContentStoreErrorCode.PARSE_FAILED
        assert exc_info.value.content_hash == content_hash
        assert exc_info.value.kind is ParseFailureKind.INVALID_KIND
        assert content_hash not in content_service.cache

    @pytest.mark.asyncio
    async def test_should_propagate_fetch_failure_and_not_cache(
        self, content_service
    ):
        content_hash = "a" * 64

        with pytest.raises(FetchFailedError) as exc_info:
            await content_service.get_item(content_hash)

        assert exc_info.value.content_hash == content_hash
        assert content_hash not in content_service.cache

    @pytest.mark.asyncio
    async def test_should_propagate_invalid_hash(self, content_service):
        with pytest.raises(InvalidHashError):
            await content_service.get_item("invalid-cid-12345")


class TestContentServiceWrites:
    """Uploading bottles, comments and count snapshots."""

    @pytest.mark.asyncio
    async def test_should_upload_bottle_with_zero_counts(
        self, content_service, memory_store
    ):
        result = await content_service.upload_bottle("Hello", "user-1")

        parsed = parse_payload(await memory_store.fetch(result.content_hash))
        assert isinstance(parsed, ParseSuccess)
        bottle = parsed.payload
        assert isinstance(bottle, BottlePayload)
        assert bottle.text == "Hello"
        assert bottle.like_count == 0
        assert bottle.comment_count == 0
        assert bottle.created_at_unix == int(FIXED_NOW.timestamp())
        assert bottle.created_at_iso == FIXED_NOW.isoformat()
        assert result.size == len(bottle.to_json_bytes())
        assert result.url.endswith(result.content_hash)

    @pytest.mark.asyncio
    async def test_should_upload_comment(self, content_service, memory_store):
        result = await content_service.upload_comment("Nice", 42, "user-2")

        parsed = parse_payload(await memory_store.fetch(result.content_hash))
        assert isinstance(parsed, ParseSuccess)
        assert isinstance(parsed.payload, CommentPayload)
        assert parsed.payload.parent_entity_id == 42

    @pytest.mark.asyncio
    async def test_should_write_new_snapshot_with_counts(
        self, content_service, memory_store, bottle
    ):
        original = await memory_store.upload(bottle)

        result = await content_service.update_bottle_counts(
            original.content_hash, 100, 5
        )

        assert result.content_hash != original.content_hash
        updated = await content_service.get_item(result.content_hash)
        assert updated.like_count == 100
        assert updated.comment_count == 5
        assert updated.text == bottle.text
        assert updated.created_at_unix == bottle.created_at_unix
        # The original snapshot is untouched
        assert await content_service.get_item(original.content_hash) == bottle

    @pytest.mark.asyncio
    async def test_should_keep_like_count_when_excluded(
        self, content_service, memory_store, bottle
    ):
        original = await memory_store.upload(bottle)

        result = await content_service.update_bottle_counts(
            original.content_hash, None, 9
        )

        updated = await content_service.get_item(result.content_hash)
        assert updated.like_count == bottle.like_count
        assert updated.comment_count == 9

    @pytest.mark.asyncio
    async def test_should_refuse_to_update_comment(
        self, content_service, memory_store, comment
    ):
        original = await memory_store.upload(comment)

        with pytest.raises(ParseFailedError, match="does not point to a bottle") as exc_info:
            await content_service.update_bottle_counts(original.content_hash, 1, 1)

        assert exc_info.value.kind is ParseFailureKind.INVALID_KIND

    @pytest.mark.asyncio
    async def test_should_name_source_hash_when_snapshot_upload_fails(
        self, content_service, memory_store, bottle
    ):
        original = await memory_store.upload(bottle)
        cause = UploadFailedError("Failed to upload bottle to IPFS: HTTP 500")
        memory_store.upload = AsyncMock(side_effect=cause)

        with pytest.raises(UploadFailedError) as exc_info:
            await content_service.update_bottle_counts(original.content_hash, 1, 1)

        assert exc_info.value.content_hash == original.content_hash
        assert exc_info.value.operation == "update_bottle_counts"
        assert exc_info.value.message == cause.message
        assert exc_info.value.__cause__ is cause

    @pytest.mark.asyncio
    async def test_should_report_and_clear_cache(
        self, content_service, memory_store, bottle
    ):
        upload = await memory_store.upload(bottle)
        await content_service.get_item(upload.content_hash)

        assert content_service.cache_stats().count == 1
        content_service.clear_cache()
        assert content_service.cache_stats().count == 0
