from .normalizer import compute_id
from .reconciler import OWNED_FIELDS, Decision, reconcile
from .scheduler import SyncScheduler
from .service import SyncService

__all__ = [
    "compute_id",
    "OWNED_FIELDS",
    "Decision",
    "reconcile",
    "SyncScheduler",
    "SyncService",
]
