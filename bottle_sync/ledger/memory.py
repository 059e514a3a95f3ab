"""In-process ledger implementation for local runs and tests."""

from dataclasses import dataclass, field

from bottle_sync.core.errors import LedgerCallFailedError
from bottle_sync.core.logging import get_logger
from bottle_sync.ledger.client import EngagementAction

logger = get_logger().bind(module="memory_ledger")


@dataclass
class LedgerEntity:
    """What the ledger knows about one bottle."""

    entity_id: int
    content_hash: str
    likers: set[str] = field(default_factory=set)
    comment_ids: list[int] = field(default_factory=list)
    is_promoted: bool = False


@dataclass
class LedgerComment:
    """A comment registered on the ledger."""

    comment_id: int
    entity_id: int
    content_hash: str


class InMemoryLedger:
    """Ledger that keeps its records in process memory.

    Mirrors the contract rules: one like per actor, unlike requires a prior
    like, and promotion can never be undone.
    """

    def __init__(self) -> None:
        self.entities: dict[int, LedgerEntity] = {}
        self.comments: dict[int, LedgerComment] = {}
        self._next_entity_id = 1
        self._next_comment_id = 1

    def _get(self, operation: str, entity_id: int) -> LedgerEntity:
        entity = self.entities.get(entity_id)
        if entity is None:
            raise LedgerCallFailedError(operation, entity_id, "entity does not exist")
        return entity

    async def create_entity(self, content_hash: str) -> int:
        if not content_hash:
            raise LedgerCallFailedError("create_entity", None, "empty content hash")
        entity_id = self._next_entity_id
        self._next_entity_id += 1
        self.entities[entity_id] = LedgerEntity(entity_id, content_hash)
        logger.info("Created entity", entity_id=entity_id, content_hash=content_hash)
        return entity_id

    async def record_engagement(
        self,
        entity_id: int,
        actor_id: str,
        action: EngagementAction = EngagementAction.LIKE,
    ) -> None:
        entity = self._get("record_engagement", entity_id)
        if action is EngagementAction.LIKE:
            if actor_id in entity.likers:
                raise LedgerCallFailedError(
                    "record_engagement", entity_id, f"{actor_id} already liked"
                )
            entity.likers.add(actor_id)
        else:
            if actor_id not in entity.likers:
                raise LedgerCallFailedError(
                    "record_engagement", entity_id, f"{actor_id} has not liked"
                )
            entity.likers.discard(actor_id)

    async def add_comment(self, entity_id: int, comment_hash: str) -> int:
        entity = self._get("add_comment", entity_id)
        comment_id = self._next_comment_id
        self._next_comment_id += 1
        self.comments[comment_id] = LedgerComment(comment_id, entity_id, comment_hash)
        entity.comment_ids.append(comment_id)
        return comment_id

    async def update_content_pointer(self, entity_id: int, content_hash: str) -> None:
        entity = self._get("update_content_pointer", entity_id)
        if not content_hash:
            raise LedgerCallFailedError(
                "update_content_pointer", entity_id, "empty content hash"
            )
        entity.content_hash = content_hash

    async def read_promotion_flag(self, entity_id: int) -> bool:
        return self._get("read_promotion_flag", entity_id).is_promoted

    async def request_promotion(self, entity_id: int) -> None:
        entity = self._get("request_promotion", entity_id)
        entity.is_promoted = True
        logger.info("Entity promoted", entity_id=entity_id)
