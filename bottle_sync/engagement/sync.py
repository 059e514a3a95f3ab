"""Reconciliation of local counters with the content store and the ledger."""

from bottle_sync.content_store.models import UploadResult
from bottle_sync.content_store.service import ContentService
from bottle_sync.core.config import LikeCountSource
from bottle_sync.core.errors import ContentStoreError, LedgerCallFailedError
from bottle_sync.core.logging import get_logger
from bottle_sync.engagement.tracker import CounterTracker
from bottle_sync.ledger.client import Ledger
from bottle_sync.metrics import COUNT_SYNCS

logger = get_logger().bind(module="count_sync")


class CountSynchronizer:
    """Publishes an entity's local counters as a new content snapshot.

    A sync runs four steps in order: read the tracker, upload a new snapshot,
    point the ledger at it, then advance the tracker's pointer. Each step only
    starts once the previous one succeeded, so the tracker never claims a hash
    the ledger does not know. A failed sync leaves the pointer where it was
    and can be retried by calling sync_counts again; counters are never
    rolled back.
    """

    def __init__(
        self,
        content: ContentService,
        tracker: CounterTracker,
        ledger: Ledger,
        like_count_source: LikeCountSource = LikeCountSource.SNAPSHOT,
    ) -> None:
        """Initialize the synchronizer.

        Args:
            content: Content service used to derive and upload snapshots
            tracker: Source of local counters and the current pointer
            ledger: Ledger holding the authoritative content pointer
            like_count_source: SNAPSHOT writes like counts into snapshots,
                LEDGER leaves them to the ledger's event history
        """
        self.content = content
        self.tracker = tracker
        self.ledger = ledger
        self.like_count_source = like_count_source

    async def sync_counts(self, entity_id: int) -> UploadResult:
        """Write the entity's current counts to a new snapshot and publish it.

        Returns:
            Upload result of the new snapshot

        Raises:
            NotLoadedError: If the entity has no tracked state
            ContentStoreError: If reading the prior snapshot or uploading
                fails, with entity_id set on the error
            LedgerCallFailedError: If the ledger rejects the pointer update
        """
        state = self.tracker.require(entity_id)
        previous_hash = state.current_content_hash
        like_count = (
            state.like_count
            if self.like_count_source is LikeCountSource.SNAPSHOT
            else None
        )

        try:
            result = await self.content.update_bottle_counts(
                previous_hash, like_count, state.comment_count
            )
        except ContentStoreError as e:
            e.entity_id = entity_id
            COUNT_SYNCS.labels(status="upload_failed").inc()
            logger.error(
                "Snapshot upload failed",
                entity_id=entity_id,
                content_hash=previous_hash,
                error=str(e),
            )
            raise

        try:
            await self.ledger.update_content_pointer(entity_id, result.content_hash)
        except LedgerCallFailedError as e:
            COUNT_SYNCS.labels(status="ledger_failed").inc()
            # The uploaded blob is orphaned; the pointer stays on previous_hash
            logger.error(
                "Ledger pointer update failed",
                entity_id=entity_id,
                content_hash=previous_hash,
                orphaned_hash=result.content_hash,
                error=str(e),
            )
            raise

        self.tracker.update_content_hash(entity_id, result.content_hash)
        COUNT_SYNCS.labels(status="success").inc()
        logger.info(
            "Synced counts",
            entity_id=entity_id,
            previous_hash=previous_hash,
            content_hash=result.content_hash,
            like_count=state.like_count,
            comment_count=state.comment_count,
        )
        return result
