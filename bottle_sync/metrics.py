"""Prometheus metrics for the content cache and count synchronization."""

from prometheus_client import REGISTRY, Counter

# Cache metrics
CONTENT_CACHE_LOOKUPS = Counter(
    "bottle_sync_content_cache_lookups_total",
    "Total number of content cache lookups",
    ["result"],  # hit, miss, expired
)

# Content store metrics
CONTENT_STORE_OPERATIONS = Counter(
    "bottle_sync_content_store_operations_total",
    "Total number of content store fetch/upload calls",
    ["operation", "status"],  # fetch/upload, success/failure
)

# Sync metrics
COUNT_SYNCS = Counter(
    "bottle_sync_count_syncs_total",
    "Total number of count synchronization attempts",
    ["status"],  # success, upload_failed, ledger_failed
)

# Promotion metrics
PROMOTION_EVALUATIONS = Counter(
    "bottle_sync_promotion_evaluations_total",
    "Total number of promotion evaluations",
    ["outcome"],  # below_threshold, already_promoted, requested
)


def register_metrics() -> None:
    """Register metrics with Prometheus."""
    metrics = [
        CONTENT_CACHE_LOOKUPS,
        CONTENT_STORE_OPERATIONS,
        COUNT_SYNCS,
        PROMOTION_EVALUATIONS,
    ]
    for metric in metrics:
        try:
            REGISTRY.register(metric)
        except ValueError:
            # Metric already registered
            pass


# Register metrics on module import
register_metrics()
