"""External engagement ledger contract and implementations."""

from bottle_sync.ledger.client import EngagementAction, Ledger
from bottle_sync.ledger.memory import InMemoryLedger

__all__ = ["EngagementAction", "InMemoryLedger", "Ledger"]
