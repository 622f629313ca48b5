"""
Unit tests for session state persistence.

Tests cover:
- Fail-open loading of missing and corrupt state
- Atomic, pretty-printed, non-destructive saves
- refresh() change detection
- "Emit once per session" notification dedupe
"""

import json
import os
from pathlib import Path

import pytest

from homeostat.store.state import (
    ATTENTION_NOTICE,
    TRIAGE_NOTICE,
    NotificationDeduper,
    SessionStateStore,
    atomic_write_text,
    notice_fields,
)


@pytest.fixture
def state_path(temp_dir: Path) -> Path:
    return temp_dir / ".cursor" / "synaptic_state.json"


@pytest.fixture
def store(state_path: Path) -> SessionStateStore:
    return SessionStateStore(state_path, clock=lambda: 1760000000.7)


@pytest.fixture
def deduper(store: SessionStateStore) -> NotificationDeduper:
    return NotificationDeduper(store)


# =============================================================================
# Store
# =============================================================================


class TestLoad:
    """load() never raises."""

    def test_missing_file(self, store: SessionStateStore) -> None:
        """Absent state is {}."""
        assert store.load() == {}

    @pytest.mark.parametrize("content", ["", "   \n", "{not json", "[1, 2]", '"text"'])
    def test_unusable_content(self, store: SessionStateStore, state_path: Path, content: str) -> None:
        """Corrupt or non-object state is {}."""
        state_path.parent.mkdir(parents=True)
        state_path.write_text(content, encoding="utf-8")
        assert store.load() == {}


class TestSave:
    """save() writes the whole record."""

    def test_creates_parents_and_pretty_prints(self, store: SessionStateStore, state_path: Path) -> None:
        """Parent directories are created; output is indented JSON."""
        assert store.save({"session_id": "s1"})
        text = state_path.read_text(encoding="utf-8")
        assert text == '{\n  "session_id": "s1"\n}\n'

    def test_no_temp_files_left(self, store: SessionStateStore, state_path: Path) -> None:
        """The temp file is replaced into place."""
        store.save({"a": 1})
        assert os.listdir(state_path.parent) == [state_path.name]

    def test_write_failure_returns_false(self, temp_dir: Path) -> None:
        """An unwritable location is logged, not raised."""
        blocker = temp_dir / "blocker"
        blocker.write_text("file, not a directory")
        store = SessionStateStore(blocker / "state.json")
        assert store.save({"a": 1}) is False

    def test_atomic_write_replaces(self, temp_dir: Path) -> None:
        """atomic_write_text overwrites existing content."""
        path = temp_dir / "out.txt"
        atomic_write_text(path, "one")
        atomic_write_text(path, "two")
        assert path.read_text(encoding="utf-8") == "two"


class TestRefresh:
    """refresh() change detection."""

    def test_first_call_changed(self, store: SessionStateStore) -> None:
        """No prior hash means changed."""
        result = store.refresh("s1", "h1")
        assert result.changed
        assert result.saved
        assert result.record == {
            "session_id": "s1",
            "last_injected_hash": "h1",
            "last_check_timestamp": 1760000000,
        }

    def test_same_session_same_hash_unchanged(self, store: SessionStateStore) -> None:
        """Repeat with identical inputs is unchanged."""
        store.refresh("s1", "h1")
        assert not store.refresh("s1", "h1").changed

    def test_new_hash_changed(self, store: SessionStateStore) -> None:
        """Editing the homeostasis document is a change."""
        store.refresh("s1", "h1")
        assert store.refresh("s1", "h2").changed

    def test_new_session_changed(self, store: SessionStateStore) -> None:
        """A new session is a change."""
        store.refresh("s1", "h1")
        assert store.refresh("s2", "h1").changed

    def test_unknown_fields_preserved(self, store: SessionStateStore, state_path: Path) -> None:
        """Extra fields survive the read-modify-write."""
        store.save({"future_field": {"x": 1}, "last_triage_notice_hash": "t"})
        store.refresh("s1", "h1")
        record = json.loads(state_path.read_text(encoding="utf-8"))
        assert record["future_field"] == {"x": 1}
        assert record["last_triage_notice_hash"] == "t"

    def test_null_session(self, store: SessionStateStore) -> None:
        """A null session id is recorded and compared like any other."""
        assert store.refresh(None, "h1").changed
        assert not store.refresh(None, "h1").changed
        assert store.load()["session_id"] is None


# =============================================================================
# Dedupe
# =============================================================================


class TestNotificationDeduper:
    """should_emit_once state machine."""

    def test_session_scenario(self, deduper: NotificationDeduper) -> None:
        """Emit, suppress, then emit again in a new session."""
        assert deduper.should_emit_once("s1", ATTENTION_NOTICE, "digest")
        assert not deduper.should_emit_once("s1", ATTENTION_NOTICE, "digest")
        assert not deduper.should_emit_once("s1", ATTENTION_NOTICE, "digest")
        assert deduper.should_emit_once("s2", ATTENTION_NOTICE, "digest")
        assert not deduper.should_emit_once("s2", ATTENTION_NOTICE, "digest")

    def test_new_hash_same_session(self, deduper: NotificationDeduper) -> None:
        """A different content hash is eligible immediately."""
        assert deduper.should_emit_once("s1", ATTENTION_NOTICE, "a")
        assert deduper.should_emit_once("s1", ATTENTION_NOTICE, "b")
        assert not deduper.should_emit_once("s1", ATTENTION_NOTICE, "b")
        assert deduper.should_emit_once("s1", ATTENTION_NOTICE, "a")

    def test_kinds_independent(self, deduper: NotificationDeduper) -> None:
        """Each kind has its own pair."""
        assert deduper.should_emit_once("s1", ATTENTION_NOTICE, "h")
        assert deduper.should_emit_once("s1", TRIAGE_NOTICE, "h")
        assert not deduper.should_emit_once("s1", TRIAGE_NOTICE, "h")

    @pytest.mark.parametrize("content_hash", [None, ""])
    def test_empty_hash_never_emits(self, deduper: NotificationDeduper, store: SessionStateStore, content_hash) -> None:
        """Falsy hashes are never emitted nor recorded."""
        assert not deduper.should_emit_once("s1", ATTENTION_NOTICE, content_hash)
        assert store.load() == {}

    def test_persisted_fields(self, deduper: NotificationDeduper, store: SessionStateStore) -> None:
        """The pair is stored under last_<kind>_notice_*."""
        store.save({"session_id": "s1", "other": True})
        deduper.should_emit_once("s1", TRIAGE_NOTICE, "h")
        hash_field, session_field = notice_fields(TRIAGE_NOTICE)
        record = store.load()
        assert record[hash_field] == "h"
        assert record[session_field] == "s1"
        assert record["other"] is True
        assert record["last_check_timestamp"] == 1760000000

    def test_null_session_first_time(self, deduper: NotificationDeduper, store: SessionStateStore) -> None:
        """Missing session field in the record doesn't count as a null session."""
        hash_field, _ = notice_fields(ATTENTION_NOTICE)
        store.save({hash_field: "h"})
        assert deduper.should_emit_once(None, ATTENTION_NOTICE, "h")
        assert not deduper.should_emit_once(None, ATTENTION_NOTICE, "h")

    def test_corrupt_state_emits(self, deduper: NotificationDeduper, state_path: Path) -> None:
        """Corrupt state is treated as empty."""
        state_path.parent.mkdir(parents=True)
        state_path.write_text("{{{", encoding="utf-8")
        assert deduper.should_emit_once("s1", ATTENTION_NOTICE, "h")
