"""
Per-process read cache keyed by hierarchical tuples, e.g. (user_id, "clients", "costs").

Reads are served until the entry goes stale; writes invalidate by key prefix and
fan out to every family whose numbers depend on the changed rows.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Hashable, Optional, Tuple

from bizsubs.config.settings import settings

logger = logging.getLogger(__name__)

CacheKey = Tuple[Hashable, ...]

# Families cached per user
SUBSCRIPTIONS = "subscriptions"
LIFETIME_DEALS = "lifetime-deals"
CLIENTS = "clients"
PROJECTS = "projects"
DASHBOARD = "dashboard"
REPORTS = "reports"

# Families whose derived numbers include subscriptions or lifetime deals
_DEPENDENT_FAMILIES = (CLIENTS, PROJECTS, DASHBOARD, REPORTS)

_SOURCE_FAMILIES = {
    "subscription": SUBSCRIPTIONS,
    "lifetime-deal": LIFETIME_DEALS,
    "client": CLIENTS,
    "project": PROJECTS,
}

# Profile tax defaults and currency only feed derived numbers
_PROFILE_FAMILIES = (DASHBOARD, REPORTS)


def freeze(filters: Optional[Dict[str, Any]]) -> Tuple:
    """Hashable, order-independent form of a filter dict for use in cache keys."""
    if not filters:
        return ()
    return tuple(sorted((k, str(v)) for k, v in filters.items() if v is not None))


class QueryCache:
    def __init__(self, ttl_seconds: int = 300, max_entries: int = 2000):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries: Dict[CacheKey, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> Optional[Any]:
        now = time.monotonic()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expiry = entry
            if now >= expiry:
                del self._entries[key]
                return None
            return value

    def set(self, key: CacheKey, value: Any, ttl: Optional[int] = None) -> None:
        expiry = time.monotonic() + (self.ttl_seconds if ttl is None else ttl)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self.max_entries:
                self._evict_expired()
                if len(self._entries) >= self.max_entries:
                    return
            self._entries[key] = (value, expiry)

    def get_or_load(self, key: CacheKey, loader: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        cached = self.get(key)
        if cached is not None:
            return cached
        value = loader()
        self.set(key, value, ttl)
        return value

    def invalidate(self, prefix: CacheKey) -> int:
        """Drop every entry whose key starts with prefix. Returns the number removed."""
        size = len(prefix)
        with self._lock:
            stale = [k for k in self._entries if k[:size] == prefix]
            for k in stale:
                del self._entries[k]
        return len(stale)

    def invalidate_after_change(self, user_id: str, source: str) -> None:
        """Refresh everything derived from the changed entity type for this user."""
        if source == "profile":
            for family in _PROFILE_FAMILIES:
                self.invalidate((user_id, family))
            logger.debug(f"Cache invalidated for user {user_id} after profile change")
            return
        for family in _DEPENDENT_FAMILIES:
            self.invalidate((user_id, family))
        if source != "subscription":
            self.invalidate((user_id, SUBSCRIPTIONS))
        if source != "lifetime-deal":
            self.invalidate((user_id, LIFETIME_DEALS))
        own_family = _SOURCE_FAMILIES.get(source)
        if own_family:
            self.invalidate((user_id, own_family))
        logger.debug(f"Cache invalidated for user {user_id} after {source} change")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def _evict_expired(self) -> None:
        now = time.monotonic()
        for k in [k for k, (_, expiry) in self._entries.items() if now >= expiry]:
            del self._entries[k]


query_cache = QueryCache(
    ttl_seconds=settings.cache_ttl_seconds,
    max_entries=settings.cache_max_entries,
)


def get_query_cache() -> QueryCache:
    return query_cache
