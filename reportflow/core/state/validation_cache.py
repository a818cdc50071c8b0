"""
Short-lived cache for validation results.

Entries expire after a fixed TTL (five minutes by default). Expiry is lazy:
an expired entry is dropped when it is read, or in bulk by clear_expired(),
which the sweeper calls on each pass.
"""

import logging
import re
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from reportflow.core.state.validation_store import current_millis

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300
NARRATIVE_KEY_LENGTH = 100

_WHITESPACE = re.compile(r"\s+")


def get_validation_cache_key(narrative: str, offense_id: str, now_ms: Optional[int] = None) -> str:
    """Build "{offense_id}-{narrative prefix}-{epoch_millis}" with whitespace runs as "_" """
    narrative_part = _WHITESPACE.sub("_", narrative[:NARRATIVE_KEY_LENGTH])
    timestamp = current_millis() if now_ms is None else now_ms
    return f"{offense_id}-{narrative_part}-{timestamp}"


class ValidationCache:
    """Thread-safe TTL cache keyed by validation cache keys"""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._entries: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._expired_count = 0

    def get(self, cache_key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(cache_key)
            if entry is None:
                self._misses += 1
                return None

            expires_at, value = entry
            if self._clock() >= expires_at:
                del self._entries[cache_key]
                self._expired_count += 1
                self._misses += 1
                return None

            self._hits += 1
            return value

    def set(self, cache_key: str, value: Any) -> None:
        with self._lock:
            self._entries[cache_key] = (self._clock() + self.ttl_seconds, value)

    def clear_expired(self) -> int:
        """Drop every expired entry; returns how many were removed"""
        now = self._clock()
        with self._lock:
            expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
            for key in expired:
                del self._entries[key]
            self._expired_count += len(expired)

        if expired:
            logger.debug(f"Dropped {len(expired)} expired validation cache entries")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_metrics(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "ttl_seconds": self.ttl_seconds,
                "hits": self._hits,
                "misses": self._misses,
                "expired": self._expired_count,
            }
