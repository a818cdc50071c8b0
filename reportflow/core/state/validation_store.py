"""
In-process store for validation conversations.

Each report handler that asks the officer for missing fields keeps one
ValidationState per session key here. The store:
- is constructed explicitly and handed out through dependencies (no module global)
- guards its map with a lock, so threadpool request handlers can share it
- copies records on the way in and out, so callers never hold a live reference
- never raises for unknown keys; absence is reported as None
- never schedules its own cleanup; see services.sweeper_service for that
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional

from reportflow.models.validation_state import ValidationState

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "-"


def current_millis() -> int:
    """Wall-clock time in epoch milliseconds"""
    return int(time.time() * 1000)


def generate_session_key(user_id: str, offense_id: str, now_ms: Optional[int] = None) -> str:
    """
    Build "{user_id}-{offense_id}-{epoch_millis}".

    Two calls for the same pair within one millisecond return the same key.
    """
    timestamp = current_millis() if now_ms is None else now_ms
    return f"{user_id}{KEY_SEPARATOR}{offense_id}{KEY_SEPARATOR}{timestamp}"


def generate_multi_offense_session_key(
    user_id: str,
    offense_ids: Iterable[str],
    now_ms: Optional[int] = None
) -> str:
    """Key for a session covering several offenses; timestamp stays last"""
    joined = KEY_SEPARATOR.join(offense_ids)
    return generate_session_key(user_id, joined, now_ms)


def parse_key_timestamp(session_key: str) -> Optional[int]:
    """
    Return the trailing epoch-millis segment of a session key.

    Keys without a separator, or whose trailing segment is not all ASCII
    digits, have no timestamp (None).
    """
    if KEY_SEPARATOR not in session_key:
        return None
    suffix = session_key.rsplit(KEY_SEPARATOR, 1)[1]
    # isdigit() alone admits digits int() rejects, e.g. "²"
    if not (suffix.isascii() and suffix.isdigit()):
        return None
    return int(suffix)


class SessionValidationStore:
    """
    Key-value store mapping session keys to ValidationState records.

    Every set() replaces the whole record (last writer wins). Callers that
    need read-modify-write without racing other requests use update().
    """

    def __init__(self, clock: Optional[Callable[[], int]] = None):
        self._states: Dict[str, ValidationState] = {}
        self._lock = threading.RLock()
        self._clock = clock or current_millis

        # Metrics for monitoring
        self._set_count = 0
        self._clear_count = 0
        self._swept_count = 0

    def get(self, session_key: str) -> Optional[ValidationState]:
        """Return a copy of the stored state, or None"""
        with self._lock:
            state = self._states.get(session_key)
            if state is None:
                return None
            return state.model_copy(deep=True)

    def set(self, session_key: str, state: ValidationState) -> None:
        """Insert or overwrite the record for session_key"""
        with self._lock:
            self._store(session_key, state)

    def clear(self, session_key: str) -> None:
        """Remove the record; unknown keys are ignored"""
        with self._lock:
            if self._states.pop(session_key, None) is not None:
                self._clear_count += 1
                logger.debug(f"🗑️ Cleared validation state {session_key}")

    def update(
        self,
        session_key: str,
        updater: Callable[[Optional[ValidationState]], ValidationState]
    ) -> ValidationState:
        """
        Atomically replace the record with updater(current).

        current is a copy (or None). The updater runs while the store lock
        is held, so it must not call back into the store from another thread.
        """
        with self._lock:
            current = self.get(session_key)
            new_state = updater(current)
            self._store(session_key, new_state)
            return new_state.model_copy(deep=True)

    def sweep_older_than(self, max_age_ms: int, now: Optional[int] = None) -> int:
        """
        Evict every record whose key timestamp is more than max_age_ms old.

        Keys without a parsable timestamp are kept. Returns the eviction count.
        """
        now = self._clock() if now is None else now
        with self._lock:
            expired = []
            for key in self._states:
                created = parse_key_timestamp(key)
                if created is not None and now - created > max_age_ms:
                    expired.append(key)

            for key in expired:
                del self._states[key]

            self._swept_count += len(expired)

        if expired:
            logger.info(f"🧹 Swept {len(expired)} validation states older than {max_age_ms} ms")
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)

    def __contains__(self, session_key: str) -> bool:
        with self._lock:
            return session_key in self._states

    def get_metrics(self) -> Dict[str, int]:
        with self._lock:
            return {
                "active_states": len(self._states),
                "total_sets": self._set_count,
                "total_cleared": self._clear_count,
                "total_swept": self._swept_count,
            }

    def get_state_info(self, session_key: str, now: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """
        Debug view of a session (no prompt or narrative text exposed).

        Used by the session info endpoint only.
        """
        state = self.get(session_key)
        if state is None:
            return None

        now = self._clock() if now is None else now
        created = parse_key_timestamp(session_key)
        return {
            "session_key": session_key,
            "created_at": (
                datetime.fromtimestamp(created / 1000, tz=timezone.utc).isoformat()
                if created is not None else None
            ),
            "age_ms": now - created if created is not None else None,
            "attempt_count": state.attempt_count,
            "provided_field_count": len(state.provided_fields),
            "cumulative_prompt_length": len(state.cumulative_prompt),
        }

    def _store(self, session_key: str, state: ValidationState) -> None:
        # Caller holds the lock
        previous = self._states.get(session_key)
        if previous is not None and state.attempt_count < previous.attempt_count:
            logger.warning(
                f"Attempt count for {session_key} went from "
                f"{previous.attempt_count} to {state.attempt_count}"
            )
        self._states[session_key] = state.model_copy(deep=True)
        self._set_count += 1
