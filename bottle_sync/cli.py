#!/usr/bin/env python3
"""CLI commands for bottle-sync."""

import asyncio
import json

import click
from pydantic import ValidationError

from bottle_sync.content_store.cache import ContentCache
from bottle_sync.content_store.service import ContentService
from bottle_sync.content_store.store import InMemoryContentStore, IpfsHttpContentStore
from bottle_sync.core.config import Settings
from bottle_sync.core.errors import (
    BottleSyncError,
    ContentStoreError,
    LedgerCallFailedError,
    NotLoadedError,
)
from bottle_sync.core.logging import configure_logging
from bottle_sync.engagement.service import build_bottle_service
from bottle_sync.ledger.memory import InMemoryLedger


def _error_code(error: BottleSyncError) -> str:
    if isinstance(error, ContentStoreError):
        return error.code.value
    if isinstance(error, LedgerCallFailedError):
        return "LEDGER_CALL_FAILED"
    if isinstance(error, NotLoadedError):
        return "NOT_LOADED"
    return "ERROR"


def _fail(error: BottleSyncError) -> None:
    print(f"Error [{_error_code(error)}]: {error}")
    raise SystemExit(1)


@click.group()
@click.pass_context
def cli(ctx):
    """Bottle engagement sync commands."""
    try:
        settings = Settings()
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        )
        print(f"Error [CONFIG_INVALID]: {problems}")
        raise SystemExit(1) from e
    configure_logging(level=settings.LOG_LEVEL, json_logs=settings.JSON_LOGS)
    ctx.obj = settings


@cli.command()
@click.argument("content_hash")
@click.pass_obj
def fetch(settings, content_hash):
    """Fetch and print the payload stored under a content hash."""
    store = IpfsHttpContentStore(
        gateway_url=settings.CONTENT_GATEWAY_URL,
        api_url=settings.CONTENT_API_URL,
        api_token=settings.CONTENT_API_TOKEN,
        timeout=settings.CONTENT_TIMEOUT,
    )
    service = ContentService(store, ContentCache(ttl_ms=settings.CONTENT_CACHE_TTL_MS))

    try:
        payload = asyncio.run(service.get_item(content_hash))
    except BottleSyncError as e:
        _fail(e)
        return

    print(f"Content Hash: {content_hash}")
    print(f"  URL: {store.url_for(content_hash)}")
    print(json.dumps(payload.model_dump(by_alias=True), indent=2))


@cli.command()
@click.option(
    "--likes", default=3, type=click.IntRange(min=0), help="Number of likes"
)
@click.option(
    "--comments", default=1, type=click.IntRange(min=0), help="Number of comments"
)
@click.option(
    "--likes-threshold",
    type=click.IntRange(min=1),
    help="Override promotion like threshold",
)
@click.option(
    "--comments-threshold",
    type=click.IntRange(min=0),
    help="Override promotion comment threshold",
)
@click.pass_obj
def demo(settings, likes, comments, likes_threshold, comments_threshold):
    """Run an in-memory bottle session end to end."""
    overrides = {}
    if likes_threshold is not None:
        overrides["PROMOTION_LIKES_THRESHOLD"] = likes_threshold
    if comments_threshold is not None:
        overrides["PROMOTION_COMMENTS_THRESHOLD"] = comments_threshold
    if overrides:
        settings = settings.model_copy(update=overrides)

    async def run():
        service = build_bottle_service(
            settings, InMemoryLedger(), store=InMemoryContentStore()
        )
        entity_id = await service.create_bottle(
            "Hello from the Forever Message platform!", "user-example-123"
        )
        for i in range(likes):
            await service.like(entity_id, f"user-{i}")
        for i in range(comments):
            await service.add_comment(entity_id, f"Comment {i}", f"user-{i}")
        result = await service.commit(entity_id)
        # Read back through the cache
        await service.content.get_item(result.snapshot.content_hash)
        return entity_id, service, result

    try:
        entity_id, service, result = asyncio.run(run())
    except BottleSyncError as e:
        _fail(e)
        return

    counts = service.counts(entity_id)
    stats = service.content.cache_stats()
    print(f"Bottle {entity_id}:")
    print(f"  Likes: {counts.like_count}")
    print(f"  Comments: {counts.comment_count}")
    print(f"  Content hash: {result.snapshot.content_hash}")
    print(f"  Promotion: {result.promotion.value}")
    print("Cache Stats:")
    print(f"  Entries: {stats.count}")
    print(f"  Size: {stats.approximate_byte_size} bytes")


@cli.command()
@click.pass_obj
def config(settings):
    """Show effective configuration."""
    values = settings.model_dump(mode="json")
    if values.get("CONTENT_API_TOKEN"):
        values["CONTENT_API_TOKEN"] = "***"
    for key, value in values.items():
        print(f"{key}: {value}")


if __name__ == "__main__":
    cli()
