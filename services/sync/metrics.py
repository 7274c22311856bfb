# services/sync/metrics.py
from prometheus_client import Counter, Histogram

SYNC_ITEMS = Counter(
    "sync_items_total",
    "Items reconciled by a sync pass",
    ["source", "action"],
)
SYNC_ERRORS = Counter(
    "sync_errors_total",
    "Items that failed during a sync pass",
    ["source"],
)
SYNC_DURATION = Histogram(
    "sync_duration_seconds",
    "Wall time of one source's sync pass",
    ["source"],
)
