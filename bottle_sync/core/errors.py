"""Error taxonomy shared by the content store, ledger and engagement layers."""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from bottle_sync.content_store.parser import ParseFailureKind


class BottleSyncError(Exception):
    """Base class for all bottle_sync errors."""


class ContentStoreErrorCode(str, Enum):
    """Error codes for content store operations."""

    UPLOAD_FAILED = "UPLOAD_FAILED"
    FETCH_FAILED = "FETCH_FAILED"
    INVALID_HASH = "INVALID_HASH"
    PARSE_FAILED = "PARSE_FAILED"


class ContentStoreError(BottleSyncError):
    """Raised at the content store boundary.

    Carries the hash and the operation involved so callers can tell which
    blob failed without parsing the message. entity_id is set by the
    engagement layer when the failure happened on behalf of a bottle.
    """

    code: ContentStoreErrorCode

    def __init__(
        self,
        code: ContentStoreErrorCode,
        message: str,
        content_hash: str | None = None,
        operation: str | None = None,
        entity_id: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.content_hash = content_hash
        self.operation = operation
        self.entity_id = entity_id

    def __str__(self) -> str:
        details = []
        if self.operation:
            details.append(f"operation={self.operation}")
        if self.entity_id is not None:
            details.append(f"entity={self.entity_id}")
        if self.content_hash:
            details.append(f"hash={self.content_hash}")
        if not details:
            return self.message
        return f"{self.message} ({', '.join(details)})"


class UploadFailedError(ContentStoreError):
    """Storing a payload in the content store failed."""

    def __init__(
        self,
        message: str,
        operation: str = "upload",
        content_hash: str | None = None,
    ) -> None:
        super().__init__(
            ContentStoreErrorCode.UPLOAD_FAILED, message, content_hash, operation
        )


class FetchFailedError(ContentStoreError):
    """Fetching a blob by hash failed at the transport level."""

    def __init__(
        self, message: str, content_hash: str, operation: str = "fetch"
    ) -> None:
        super().__init__(
            ContentStoreErrorCode.FETCH_FAILED, message, content_hash, operation
        )


class InvalidHashError(ContentStoreError):
    """A content hash is malformed for the backend it was given to."""

    def __init__(
        self, message: str, content_hash: str, operation: str = "fetch"
    ) -> None:
        super().__init__(
            ContentStoreErrorCode.INVALID_HASH, message, content_hash, operation
        )


class ParseFailedError(ContentStoreError):
    """A fetched blob is not a valid bottle or comment payload."""

    def __init__(
        self,
        message: str,
        content_hash: str | None = None,
        operation: str = "parse",
        kind: "ParseFailureKind | None" = None,
        field: str | None = None,
    ) -> None:
        super().__init__(
            ContentStoreErrorCode.PARSE_FAILED, message, content_hash, operation
        )
        self.kind = kind
        self.field = field


class LedgerCallFailedError(BottleSyncError):
    """A call to the external ledger failed or was rejected."""

    def __init__(self, operation: str, entity_id: int | None, message: str) -> None:
        super().__init__(message)
        self.operation = operation
        self.entity_id = entity_id
        self.message = message

    def __str__(self) -> str:
        if self.entity_id is None:
            return f"Ledger call {self.operation} failed: {self.message}"
        return (
            f"Ledger call {self.operation} failed for entity "
            f"{self.entity_id}: {self.message}"
        )


class NotLoadedError(BottleSyncError):
    """Counter state was requested for an entity that was never loaded."""

    def __init__(self, entity_id: int) -> None:
        super().__init__(
            f"Entity {entity_id} not loaded. Call load() before mutating counts."
        )
        self.entity_id = entity_id
