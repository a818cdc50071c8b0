# tests/core/test_validation_store.py
"""
Unit tests for the in-process validation state store and its key helpers.
"""
import threading
import pytest
from unittest.mock import patch

from reportflow.core.state.validation_store import (
    SessionValidationStore,
    current_millis,
    generate_multi_offense_session_key,
    generate_session_key,
    parse_key_timestamp,
)
from reportflow.models.validation_state import ValidationState


def make_state(attempt_count=1, fields=None, prompt="p", narrative="n"):
    return ValidationState(
        provided_fields=fields or [],
        cumulative_prompt=prompt,
        original_narrative=narrative,
        attempt_count=attempt_count,
    )


class TestSessionKeys:
    """Test session key generation and parsing"""

    def test_generate_session_key_format(self):
        """Key is user, offense and timestamp joined by dashes"""
        assert generate_session_key("u1", "o1", now_ms=1234) == "u1-o1-1234"

    def test_generate_session_key_uses_wall_clock(self):
        """Keys generated at different milliseconds differ"""
        with patch("reportflow.core.state.validation_store.time.time", side_effect=[1.0, 1.5]):
            first = generate_session_key("u1", "o1")
            second = generate_session_key("u1", "o1")

        assert first == "u1-o1-1000"
        assert second == "u1-o1-1500"
        assert first != second

    def test_same_millisecond_collides(self):
        """Two keys for the same pair in the same millisecond are equal"""
        assert generate_session_key("u1", "o1", now_ms=5) == generate_session_key("u1", "o1", now_ms=5)

    def test_multi_offense_key(self):
        """Offense ids are joined, timestamp stays last"""
        key = generate_multi_offense_session_key("u1", ["o1", "o2", "o3"], now_ms=42)
        assert key == "u1-o1-o2-o3-42"
        assert parse_key_timestamp(key) == 42

    def test_current_millis(self):
        with patch("reportflow.core.state.validation_store.time.time", return_value=12.3456):
            assert current_millis() == 12345

    @pytest.mark.parametrize("key,expected", [
        ("u1-o1-1000", 1000),
        ("user-with-dashes-o1-77", 77),
        ("-5", 5),
        ("nodashes", None),
        ("u1-o1-abc", None),
        ("u1-o1-", None),
        ("u1-o1-²", None),
        ("u1-o1-١٢٣", None),
    ])
    def test_parse_key_timestamp(self, key, expected):
        """Only a trailing run of digits after the last dash is a timestamp"""
        assert parse_key_timestamp(key) == expected


class TestStoreBasics:
    """Test get / set / clear"""

    def test_get_unknown_key_returns_none(self, store):
        assert store.get("never-set-1") is None

    def test_set_then_get(self, store, sample_state):
        """A stored record reads back equal"""
        store.set("u1-o1-1000", sample_state)
        assert store.get("u1-o1-1000") == sample_state

    def test_last_write_wins(self, store):
        """Second set replaces the first"""
        store.set("k-1", make_state(attempt_count=1, prompt="first"))
        store.set("k-1", make_state(attempt_count=2, prompt="second"))

        state = store.get("k-1")
        assert state.attempt_count == 2
        assert state.cumulative_prompt == "second"
        assert len(store) == 1

    def test_clear_removes(self, store, sample_state):
        store.set("k-1", sample_state)
        store.clear("k-1")
        assert store.get("k-1") is None
        assert "k-1" not in store

    def test_clear_unknown_key_is_noop(self, store, sample_state):
        """Clearing a missing key does nothing and does not raise"""
        store.set("k-1", sample_state)
        store.clear("k-2")
        store.clear("k-2")
        assert store.get("k-1") == sample_state
        assert store.get_metrics()["total_cleared"] == 0

    def test_records_are_isolated_copies(self, store, sample_state):
        """Mutating what went in or came out does not change the store"""
        store.set("k-1", sample_state)
        sample_state.provided_fields.append("time")

        read = store.get("k-1")
        assert read.provided_fields == ["date"]

        read.provided_fields.append("location")
        assert store.get("k-1").provided_fields == ["date"]

    def test_attempt_count_decrease_still_written(self, store, caplog):
        """A lower attempt count is logged but stored"""
        store.set("k-1", make_state(attempt_count=3))
        store.set("k-1", make_state(attempt_count=1))

        assert store.get("k-1").attempt_count == 1
        assert "went from 3 to 1" in caplog.text


class TestSweep:
    """Test age-based eviction"""

    def test_sweep_evicts_only_old_keys(self, store, clock):
        """Keys older than max age go, younger keys stay"""
        now = clock()
        store.set(f"u1-o1-{now - 5000}", make_state())
        store.set(f"u2-o1-{now - 100}", make_state())

        evicted = store.sweep_older_than(1000)

        assert evicted == 1
        assert store.get(f"u1-o1-{now - 5000}") is None
        assert store.get(f"u2-o1-{now - 100}") is not None

    def test_sweep_boundary_is_exclusive(self, store, clock):
        """A key exactly max_age_ms old is kept"""
        now = clock()
        store.set(f"u1-o1-{now - 1000}", make_state())

        assert store.sweep_older_than(1000) == 0
        clock.advance(1)
        assert store.sweep_older_than(1000) == 1

    def test_sweep_with_explicit_now(self, store):
        store.set("u1-o1-1000", make_state())
        assert store.sweep_older_than(500, now=1400) == 0
        assert store.sweep_older_than(500, now=1600) == 1

    def test_sweep_keeps_malformed_keys(self, store):
        """Keys without a timestamp are never swept"""
        store.set("nodashes", make_state())
        store.set("u1-o1-abc", make_state())

        assert store.sweep_older_than(1, now=10**15) == 0
        assert len(store) == 2

    def test_sweep_mixed_good_and_unicode_digit_keys(self, store):
        """A key ending in a non-ASCII digit is kept and does not stop the sweep"""
        store.set("u1-off1-1000", make_state())
        store.set("u2-off1-²", make_state())

        assert store.sweep_older_than(500, now=2000) == 1
        assert store.get("u1-off1-1000") is None
        assert store.get("u2-off1-²") is not None

        info = store.get_state_info("u2-off1-²")
        assert info["created_at"] is None
        assert info["age_ms"] is None

    def test_sweep_on_empty_store(self, store):
        assert store.sweep_older_than(1000) == 0

    def test_sweep_counts_in_metrics(self, store):
        store.set("a-1", make_state())
        store.set("b-2", make_state())
        store.sweep_older_than(10, now=1000)

        metrics = store.get_metrics()
        assert metrics["total_swept"] == 2
        assert metrics["active_states"] == 0


class TestUpdate:
    """Test atomic read-modify-write"""

    def test_update_creates_when_absent(self, store):
        seen = []

        def updater(current):
            seen.append(current)
            return make_state(attempt_count=1)

        result = store.update("k-1", updater)

        assert seen == [None]
        assert result.attempt_count == 1
        assert store.get("k-1").attempt_count == 1

    def test_update_sees_current(self, store):
        store.set("k-1", make_state(attempt_count=2))
        store.update("k-1", lambda s: s.model_copy(update={"attempt_count": s.attempt_count + 1}))
        assert store.get("k-1").attempt_count == 3

    def test_concurrent_updates_do_not_lose_increments(self, store):
        """Threads incrementing through update() never lose a write"""
        store.set("k-1", make_state(attempt_count=0))

        def increment(current):
            return current.model_copy(update={"attempt_count": current.attempt_count + 1})

        def worker():
            for _ in range(50):
                store.update("k-1", increment)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert store.get("k-1").attempt_count == 400


class TestMetricsAndInfo:
    """Test monitoring helpers"""

    def test_metrics(self, store):
        store.set("a-1", make_state())
        store.set("a-1", make_state(attempt_count=2))
        store.set("b-2", make_state())
        store.clear("b-2")

        assert store.get_metrics() == {
            "active_states": 1,
            "total_sets": 3,
            "total_cleared": 1,
            "total_swept": 0,
        }

    def test_state_info(self, store, clock):
        """Info exposes counts and age, not the text itself"""
        created = clock() - 2500
        key = f"u1-o1-{created}"
        store.set(key, make_state(attempt_count=2, fields=["date", "time"], prompt="abcdef"))

        info = store.get_state_info(key)

        assert info["session_key"] == key
        assert info["age_ms"] == 2500
        assert info["attempt_count"] == 2
        assert info["provided_field_count"] == 2
        assert info["cumulative_prompt_length"] == 6
        assert info["created_at"].startswith("1970-01-01T02:46:")
        assert "cumulative_prompt" not in info
        assert "original_narrative" not in info

    def test_state_info_malformed_key(self, store):
        store.set("nodashes", make_state())
        info = store.get_state_info("nodashes")
        assert info["created_at"] is None
        assert info["age_ms"] is None

    def test_state_info_unknown(self, store):
        assert store.get_state_info("missing-1") is None


class TestValidationConversation:
    """A full conversation as a report handler drives it"""

    def test_conversation_lifecycle(self, store, clock):
        """Create, extend, complete, and sweep a validation session"""
        key = generate_session_key("officer7", "robbery", now_ms=clock())

        assert store.get(key) is None

        store.set(key, ValidationState(
            provided_fields=["date"],
            cumulative_prompt="P1",
            original_narrative="N",
            attempt_count=1,
        ))

        state = store.get(key)
        store.set(key, ValidationState(
            provided_fields=["date", "time"],
            cumulative_prompt=state.cumulative_prompt + "\n\nP2",
            original_narrative=state.original_narrative,
            attempt_count=state.attempt_count + 1,
        ))

        state = store.get(key)
        assert state.attempt_count == 2
        assert state.provided_fields == ["date", "time"]
        assert state.original_narrative == "N"
        assert state.cumulative_prompt == "P1\n\nP2"

        store.clear(key)
        assert store.get(key) is None

        # A new session with the same pair, later, ages out
        later_key = generate_session_key("officer7", "robbery", now_ms=clock() + 1)
        store.set(later_key, state)
        clock.advance(31 * 60 * 1000)
        assert store.sweep_older_than(30 * 60 * 1000) == 1
        assert store.get(later_key) is None
