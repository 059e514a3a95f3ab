"""Contract for the external engagement ledger."""

from enum import Enum
from typing import Protocol, runtime_checkable


class EngagementAction(str, Enum):
    """Engagement events recorded on the ledger."""

    LIKE = "like"
    UNLIKE = "unlike"


@runtime_checkable
class Ledger(Protocol):
    """Protocol for the authoritative engagement ledger.

    Every call blocks until the ledger has finalized it; no pending state is
    surfaced. Failures raise LedgerCallFailedError.
    """

    async def create_entity(self, content_hash: str) -> int:
        """Register a new bottle pointing at content_hash, returning its id."""
        ...

    async def record_engagement(
        self,
        entity_id: int,
        actor_id: str,
        action: EngagementAction = EngagementAction.LIKE,
    ) -> None:
        """Record a like/unlike event by actor_id on an entity."""
        ...

    async def add_comment(self, entity_id: int, comment_hash: str) -> int:
        """Attach a comment blob to an entity, returning the comment id."""
        ...

    async def update_content_pointer(self, entity_id: int, content_hash: str) -> None:
        """Point the entity at a new content snapshot."""
        ...

    async def read_promotion_flag(self, entity_id: int) -> bool:
        """Whether the entity has already been promoted."""
        ...

    async def request_promotion(self, entity_id: int) -> None:
        """Irreversibly mark the entity as promoted."""
        ...
