"""In-memory engagement counters per entity."""

from dataclasses import dataclass
from typing import NamedTuple

from bottle_sync.core.errors import NotLoadedError


@dataclass
class EntityCounterState:
    """Local counters and current snapshot pointer for one entity."""

    like_count: int
    comment_count: int
    current_content_hash: str


class EntityCounts(NamedTuple):
    like_count: int
    comment_count: int


class CounterTracker:
    """Owns the mutable counter state of every tracked entity.

    Counters are mutated immediately and may run ahead of both the content
    store and the ledger until the next sync. There is no internal locking:
    callers must not interleave mutations of the same entity.
    """

    def __init__(self) -> None:
        self._states: dict[int, EntityCounterState] = {}

    def load(
        self, entity_id: int, content_hash: str, like_count: int, comment_count: int
    ) -> None:
        """Seed or replace the state of an entity wholesale."""
        if like_count < 0 or comment_count < 0:
            raise ValueError("Counts must be non-negative")
        self._states[entity_id] = EntityCounterState(
            like_count=like_count,
            comment_count=comment_count,
            current_content_hash=content_hash,
        )

    def require(self, entity_id: int) -> EntityCounterState:
        """Return the state of an entity.

        Raises:
            NotLoadedError: If load() was never called for the entity
        """
        state = self._states.get(entity_id)
        if state is None:
            raise NotLoadedError(entity_id)
        return state

    def increment_likes(self, entity_id: int) -> int:
        state = self.require(entity_id)
        state.like_count += 1
        return state.like_count

    def decrement_likes(self, entity_id: int) -> int:
        state = self.require(entity_id)
        state.like_count = max(0, state.like_count - 1)
        return state.like_count

    def increment_comments(self, entity_id: int) -> int:
        state = self.require(entity_id)
        state.comment_count += 1
        return state.comment_count

    def update_content_hash(self, entity_id: int, new_hash: str) -> None:
        """Move the snapshot pointer. Only the synchronizer calls this."""
        self.require(entity_id).current_content_hash = new_hash

    def read_counts(self, entity_id: int) -> EntityCounts | None:
        """Current counts, or None if the entity is not loaded."""
        state = self._states.get(entity_id)
        if state is None:
            return None
        return EntityCounts(state.like_count, state.comment_count)

    def is_loaded(self, entity_id: int) -> bool:
        return entity_id in self._states
