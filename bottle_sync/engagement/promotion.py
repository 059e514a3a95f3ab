"""Threshold-based promotion of entities to forever status."""

from dataclasses import dataclass
from enum import Enum

from bottle_sync.core.logging import get_logger
from bottle_sync.engagement.tracker import CounterTracker
from bottle_sync.ledger.client import Ledger
from bottle_sync.metrics import PROMOTION_EVALUATIONS

logger = get_logger().bind(module="promotion")


@dataclass(frozen=True)
class PromotionThresholds:
    """Counts an entity must reach, both at once, to be promoted."""

    likes: int = 100
    comments: int = 4

    def __post_init__(self) -> None:
        """Validate thresholds."""
        if self.likes <= 0:
            raise ValueError("Like threshold must be positive")
        if self.comments < 0:
            raise ValueError("Comment threshold must be non-negative")


class PromotionOutcome(str, Enum):
    BELOW_THRESHOLD = "below_threshold"
    ALREADY_PROMOTED = "already_promoted"
    REQUESTED = "requested"


class PromotionEvaluator:
    """Decides when to ask the ledger to promote an entity.

    Thresholds are checked locally against the tracker's counters; the
    ledger is only consulted once both are met. Promotion itself is owned by
    the ledger and is one-way.
    """

    def __init__(
        self,
        tracker: CounterTracker,
        ledger: Ledger,
        thresholds: PromotionThresholds | None = None,
    ) -> None:
        self.tracker = tracker
        self.ledger = ledger
        self.thresholds = thresholds or PromotionThresholds()

    def meets_thresholds(self, entity_id: int) -> bool:
        """Whether the entity's local counters reach both thresholds.

        Raises:
            NotLoadedError: If the entity has no tracked state
        """
        state = self.tracker.require(entity_id)
        return (
            state.like_count >= self.thresholds.likes
            and state.comment_count >= self.thresholds.comments
        )

    async def evaluate(self, entity_id: int) -> PromotionOutcome:
        """Request promotion if thresholds are met and it has not happened yet.

        Raises:
            NotLoadedError: If the entity has no tracked state
            LedgerCallFailedError: If reading the flag or promoting fails
        """
        if not self.meets_thresholds(entity_id):
            outcome = PromotionOutcome.BELOW_THRESHOLD
        elif await self.ledger.read_promotion_flag(entity_id):
            outcome = PromotionOutcome.ALREADY_PROMOTED
        else:
            await self.ledger.request_promotion(entity_id)
            outcome = PromotionOutcome.REQUESTED
            logger.info("Entity marked as forever", entity_id=entity_id)

        PROMOTION_EVALUATIONS.labels(outcome=outcome.value).inc()
        return outcome
