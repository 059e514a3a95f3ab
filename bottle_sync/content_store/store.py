"""Content-addressed store backends.

The rest of the package only depends on the ContentStore protocol: store a
payload and get its hash back, or fetch raw bytes by hash. Blobs are never
mutated or deleted; every update produces a new hash.
"""

import hashlib
import re
from typing import Protocol, runtime_checkable

import httpx

from bottle_sync.content_store.models import (
    BottlePayload,
    CommentPayload,
    UploadResult,
)
from bottle_sync.core.errors import (
    FetchFailedError,
    InvalidHashError,
    UploadFailedError,
)
from bottle_sync.core.logging import get_logger
from bottle_sync.metrics import CONTENT_STORE_OPERATIONS

logger = get_logger().bind(module="content_store")


@runtime_checkable
class ContentStore(Protocol):
    """Protocol for content-addressed storage backends."""

    async def upload(self, payload: BottlePayload | CommentPayload) -> UploadResult:
        """Store a payload and return its new hash.

        Raises:
            UploadFailedError: If the backend rejects or cannot store the blob
        """
        ...

    async def fetch(self, content_hash: str) -> bytes:
        """Fetch the raw bytes stored under a hash.

        Raises:
            InvalidHashError: If the hash is malformed for this backend
            FetchFailedError: On transport errors or unknown hashes
        """
        ...


class IpfsHttpContentStore:
    """IPFS backend: uploads through the HTTP RPC API, reads through a gateway."""

    # CIDv0 is base58btc multihash, CIDv1 here is the default base32 encoding
    _CID_V0_PATTERN = re.compile(r"^Qm[1-9A-HJ-NP-Za-km-z]{44}$")
    _CID_V1_PATTERN = re.compile(r"^b[a-z2-7]{50,}$")

    def __init__(
        self,
        gateway_url: str,
        api_url: str,
        api_token: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the IPFS store.

        Args:
            gateway_url: Read gateway base URL, content lives at {gateway_url}/{cid}
            api_url: IPFS HTTP RPC base URL used for uploads
            api_token: Optional bearer token for the RPC API
            timeout: Request timeout in seconds
        """
        self.gateway_url = gateway_url.rstrip("/")
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._headers = {"Authorization": f"Bearer {api_token}"} if api_token else {}

    def is_valid_hash(self, content_hash: str) -> bool:
        """Check whether a string looks like a CIDv0 or base32 CIDv1."""
        return bool(
            self._CID_V0_PATTERN.match(content_hash)
            or self._CID_V1_PATTERN.match(content_hash)
        )

    def url_for(self, content_hash: str) -> str:
        """Gateway URL for a hash."""
        return f"{self.gateway_url}/{content_hash}"

    async def upload(self, payload: BottlePayload | CommentPayload) -> UploadResult:
        """Upload a payload as a JSON file via /api/v0/add."""
        body = payload.to_json_bytes()

        try:
            async with httpx.AsyncClient(
                headers=self._headers,
                timeout=httpx.Timeout(self.timeout, connect=self.timeout / 3),
            ) as client:
                response = await client.post(
                    f"{self.api_url}/api/v0/add",
                    params={"pin": "true", "cid-version": "1"},
                    files={"file": ("data.json", body, "application/json")},
                )
                response.raise_for_status()
                content_hash = response.json()["Hash"]
        except httpx.HTTPStatusError as e:
            CONTENT_STORE_OPERATIONS.labels(operation="upload", status="failure").inc()
            logger.error(
                "Content upload rejected", status_code=e.response.status_code
            )
            raise UploadFailedError(
                f"Failed to upload {payload.kind} to IPFS: "
                f"HTTP {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            CONTENT_STORE_OPERATIONS.labels(operation="upload", status="failure").inc()
            logger.error("Content upload failed", error=str(e))
            raise UploadFailedError(
                f"Failed to upload {payload.kind} to IPFS: {e}"
            ) from e

        CONTENT_STORE_OPERATIONS.labels(operation="upload", status="success").inc()
        logger.debug("Uploaded content", content_hash=content_hash, size=len(body))
        return UploadResult(
            content_hash=content_hash, size=len(body), url=self.url_for(content_hash)
        )

    async def fetch(self, content_hash: str) -> bytes:
        """Fetch raw bytes for a CID from the gateway."""
        if not self.is_valid_hash(content_hash):
            raise InvalidHashError(
                f"Invalid CID format: {content_hash!r}", content_hash
            )

        url = self.url_for(content_hash)
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=self.timeout / 3),
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            CONTENT_STORE_OPERATIONS.labels(operation="fetch", status="failure").inc()
            logger.warning(
                "Gateway returned error",
                content_hash=content_hash,
                status_code=e.response.status_code,
            )
            raise FetchFailedError(
                f"Failed to fetch data from IPFS: HTTP {e.response.status_code}",
                content_hash,
            ) from e
        except httpx.HTTPError as e:
            CONTENT_STORE_OPERATIONS.labels(operation="fetch", status="failure").inc()
            logger.warning(
                "Gateway request failed", content_hash=content_hash, error=str(e)
            )
            raise FetchFailedError(
                f"Failed to fetch data from IPFS: {e}", content_hash
            ) from e

        CONTENT_STORE_OPERATIONS.labels(operation="fetch", status="success").inc()
        return response.content


class InMemoryContentStore:
    """Process-local content-addressed store keyed by SHA-256 of the payload."""

    # SHA-256 produces 64 hex characters
    _HASH_PATTERN = re.compile(r"^[a-f0-9]{64}$")

    def __init__(self, base_url: str = "memory://") -> None:
        self.base_url = base_url
        self._blobs: dict[str, bytes] = {}

    def hash_content(self, content: bytes) -> str:
        """Generate SHA-256 hash of content.

        Args:
            content: Content to hash

        Returns:
            Hex string of SHA-256 hash
        """
        return hashlib.sha256(content).hexdigest()

    async def upload(self, payload: BottlePayload | CommentPayload) -> UploadResult:
        body = payload.to_json_bytes()
        content_hash = self.hash_content(body)
        # Identical content maps to the same hash; never overwrite
        self._blobs.setdefault(content_hash, body)
        CONTENT_STORE_OPERATIONS.labels(operation="upload", status="success").inc()
        return UploadResult(
            content_hash=content_hash,
            size=len(body),
            url=f"{self.base_url}{content_hash}",
        )

    async def fetch(self, content_hash: str) -> bytes:
        if not self._HASH_PATTERN.match(content_hash):
            raise InvalidHashError(
                f"Invalid hash format: expected 64 hex characters, got: {content_hash}",
                content_hash,
            )
        try:
            body = self._blobs[content_hash]
        except KeyError:
            CONTENT_STORE_OPERATIONS.labels(operation="fetch", status="failure").inc()
            raise FetchFailedError(
                "Content not found in store", content_hash
            ) from None
        CONTENT_STORE_OPERATIONS.labels(operation="fetch", status="success").inc()
        return body

    def put_raw(self, content: bytes) -> str:
        """Store raw bytes without validation, returning their hash."""
        content_hash = self.hash_content(content)
        self._blobs.setdefault(content_hash, content)
        return content_hash

    def __len__(self) -> int:
        return len(self._blobs)
