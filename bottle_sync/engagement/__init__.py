"""Engagement counters, snapshot synchronization and promotion."""

from bottle_sync.engagement.promotion import (
    PromotionEvaluator,
    PromotionOutcome,
    PromotionThresholds,
)
from bottle_sync.engagement.service import (
    BottleService,
    CommitResult,
    build_bottle_service,
)
from bottle_sync.engagement.sync import CountSynchronizer
from bottle_sync.engagement.tracker import (
    CounterTracker,
    EntityCounterState,
    EntityCounts,
)

__all__ = [
    "BottleService",
    "CommitResult",
    "CountSynchronizer",
    "CounterTracker",
    "EntityCounterState",
    "EntityCounts",
    "PromotionEvaluator",
    "PromotionOutcome",
    "PromotionThresholds",
    "build_bottle_service",
]
