"""Data models for content store payloads."""

from dataclasses import dataclass
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class _Payload(BaseModel):
    """Fields shared by every payload stored in the content store."""

    model_config = ConfigDict(
        strict=True, frozen=True, populate_by_name=True, extra="ignore"
    )

    text: str
    author_id: str = Field(alias="authorId")
    created_at_unix: int = Field(alias="createdAtUnix", ge=0)
    created_at_iso: str = Field(alias="createdAtISO")

    def to_json_bytes(self) -> bytes:
        """Serialize using the wire (camelCase) field names."""
        return self.model_dump_json(by_alias=True).encode()


class BottlePayload(_Payload):
    """A bottle message with the engagement counts of its snapshot."""

    kind: Literal["bottle"] = "bottle"
    like_count: int = Field(default=0, alias="likeCount", ge=0)
    comment_count: int = Field(default=0, alias="commentCount", ge=0)


class CommentPayload(_Payload):
    """A comment attached to a bottle."""

    kind: Literal["comment"] = "comment"
    parent_entity_id: int = Field(alias="parentEntityId", ge=0)


ContentPayload = Annotated[
    Union[BottlePayload, CommentPayload], Field(discriminator="kind")
]


@dataclass
class CacheEntry:
    """A payload held by the content cache."""

    payload: BottlePayload | CommentPayload
    stored_at_ms: int
    expires_at_ms: int


@dataclass(frozen=True)
class CacheStats:
    """Observability snapshot of the content cache."""

    count: int
    approximate_byte_size: int


@dataclass(frozen=True)
class UploadResult:
    """Result of storing a payload in the content store."""

    content_hash: str
    size: int
    url: str
