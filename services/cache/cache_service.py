# services/cache/cache_service.py
import time
from collections import OrderedDict
from typing import Any, Hashable, Optional, Tuple

from loguru import logger


class TTLCache:
    """
    Small in-process LRU cache with per-key expiry.

    The owner (the API app) holds the instance; there is no module-level
    singleton.  Expired entries are dropped lazily on access, and the least
    recently used entry goes first once ``max_entries`` is reached.
    """

    def __init__(self, max_entries: int = 100, ttl_seconds: float = 300):
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self.ttl_seconds = ttl_seconds
        self._entries: "OrderedDict[Hashable, Tuple[float, Any]]" = OrderedDict()

    def __len__(self) -> int:
        self._purge_expired()
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        entry = self._entries.get(key)
        if entry is None:
            return False
        if entry[0] <= time.monotonic():
            del self._entries[key]
            return False
        return True

    def get(self, key: Hashable, default: Any = None) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return default
        expires_at, value = entry
        if expires_at <= time.monotonic():
            del self._entries[key]
            return default
        self._entries.move_to_end(key)
        return value

    def set(self, key: Hashable, value: Any, ttl: Optional[float] = None) -> None:
        ttl = self.ttl_seconds if ttl is None else ttl
        self._entries[key] = (time.monotonic() + ttl, value)
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Cache full, evicted {evicted!r}")

    def invalidate(self, key: Optional[Hashable] = None) -> None:
        """Drop one key, or everything when ``key`` is None."""
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def invalidate_prefix(self, prefix: str) -> int:
        stale = [k for k in self._entries if isinstance(k, str) and k.startswith(prefix)]
        for k in stale:
            del self._entries[k]
        return len(stale)

    def _purge_expired(self) -> None:
        now = time.monotonic()
        for k in [k for k, (expires_at, _) in self._entries.items() if expires_at <= now]:
            del self._entries[k]
