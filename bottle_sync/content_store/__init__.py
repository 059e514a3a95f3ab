"""Content-addressed storage: payload models, cache, backends and service."""

from bottle_sync.content_store.cache import ContentCache
from bottle_sync.content_store.models import (
    BottlePayload,
    CacheStats,
    CommentPayload,
    ContentPayload,
    UploadResult,
)
from bottle_sync.content_store.service import ContentService
from bottle_sync.content_store.store import (
    ContentStore,
    InMemoryContentStore,
    IpfsHttpContentStore,
)

__all__ = [
    "BottlePayload",
    "CacheStats",
    "CommentPayload",
    "ContentCache",
    "ContentPayload",
    "ContentService",
    "ContentStore",
    "InMemoryContentStore",
    "IpfsHttpContentStore",
    "UploadResult",
]
