"""
Recommendation Cache — optional per-goal memo of ranked recommendations.

Entries are keyed by goal id and carry a fingerprint of the inputs that
produced them (goal score, related signals, discipline context). A lookup
with a different fingerprint is a miss, so a cache hit always returns
exactly what recomputation would. Expiry is checked on every read; the
cache can be cleared or dropped at any time without affecting output.

The cache is the only state the engine keeps between evaluations. It is
injected, never module-level, and guards its dict with a lock.
"""

import hashlib
import json
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import structlog

from goalpulse.models.reports import Recommendation

logger = structlog.get_logger()

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def fingerprint(payload: Any) -> str:
    """Stable SHA-256 fingerprint of a JSON-serializable payload."""
    encoded = json.dumps(payload, sort_keys=True, default=str).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()


class RecommendationCache:
    """
    TTL cache of recommendations per goal.

    Attributes:
        ttl: Entry lifetime (default 24 hours)

    Example:
        >>> cache = RecommendationCache(ttl_hours=24)
        >>> cache.put("daily_score", "abc123", recommendations)
        >>> cache.get("daily_score", "abc123")
        [Recommendation(...)]
        >>> cache.get("daily_score", "other") is None
        True
    """

    def __init__(self, ttl_hours: int = 24, clock: Clock = _utc_now):
        self.ttl = timedelta(hours=ttl_hours)
        self._clock = clock
        self._entries: dict[str, tuple[str, datetime, tuple[Recommendation, ...]]] = {}
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, goal_id: str, key: str) -> Optional[list[Recommendation]]:
        """
        Look up cached recommendations for a goal.

        Args:
            goal_id: Goal the recommendations belong to
            key: Fingerprint of the current inputs

        Returns:
            Cached recommendations, or None on miss, expiry or fingerprint mismatch
        """
        with self._lock:
            entry = self._entries.get(goal_id)
            if entry is None:
                self.misses += 1
                return None

            stored_key, stored_at, recommendations = entry
            if self._clock() - stored_at >= self.ttl:
                del self._entries[goal_id]
                self.misses += 1
                logger.debug("recommendation_cache_expired", goal_id=goal_id)
                return None
            if stored_key != key:
                self.misses += 1
                return None

            self.hits += 1
            return list(recommendations)

    def put(self, goal_id: str, key: str, recommendations: list[Recommendation]) -> None:
        with self._lock:
            self._entries[goal_id] = (key, self._clock(), tuple(recommendations))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
