"""
Recommendation cache.

Key/value store with a TTL for externally produced goal recommendations.
Entries are keyed by a hash of the goal plus the client data that produced
them, so any change to either is a miss. The calculation modules never read
or write it; callers own one instance and pass it where needed.

Usage:
    cache = RecommendationCache(ttl_seconds=3600)
    key = recommendation_cache_key(goal, client_data)
    recs = cache.get(key)
    if recs is None:
        recs = fetch_recommendations(goal, client_data)
        cache.set(key, recs)
"""

import json
import time
import hashlib
import logging
import threading
from typing import Any, Callable, Dict, Optional, Tuple

import planning_config as cfg

logger = logging.getLogger(__name__)


def _json_dumps(obj: Any) -> str:
    return json.dumps(obj, ensure_ascii=False, sort_keys=True, default=str)


def _sha256_text(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def recommendation_cache_key(goal: Any, client_data: Any) -> str:
    return _sha256_text(_json_dumps({"goal": goal, "clientData": client_data}))


class RecommendationCache:
    """Thread-safe in-memory TTL cache. clock is injectable for tests."""

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = float(cfg.RECOMMENDATION_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds)
        self._clock = clock
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[key]
                logger.debug(f"Recommendation cache expired: {key[:12]}")
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def invalidate(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        with self._lock:
            now = self._clock()
            stale = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
            for k in stale:
                del self._entries[k]
        if stale:
            logger.debug(f"Purged {len(stale)} expired recommendations")
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
