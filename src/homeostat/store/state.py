"""
Session state persistence for Homeostat.

One small JSON record per workspace holds everything Homeostat owns
durably:

    {
      "session_id": "abc",
      "last_injected_hash": "<sha256 of homeostasis.yaml>",
      "last_check_timestamp": 1760000000,
      "last_attention_notice_hash": "...",
      "last_attention_notice_session_id": "abc",
      "last_triage_notice_hash": "...",
      "last_triage_notice_session_id": "abc"
    }

Design Principles:
    - Fail open: a missing or corrupt file reads as {}
    - Non-destructive: unknown fields are carried through every write
    - Atomic writes: write a temp file, then os.replace
    - No locking: concurrent writers race last-writer-wins; the record is
      advisory and never feeds an allow/deny decision
"""

import json
import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ATTENTION_NOTICE = "attention"
TRIAGE_NOTICE = "triage"


def atomic_write_text(path: Path, content: str) -> None:
    """
    Write text so readers never observe a half-written file.

    Creates parent directories as needed.

    Raises:
        OSError: If the directory or file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


def notice_fields(kind: str) -> tuple[str, str]:
    """Record keys for one notification kind: (hash field, session field)."""
    return f"last_{kind}_notice_hash", f"last_{kind}_notice_session_id"


@dataclass(frozen=True)
class RefreshResult:
    """
    Outcome of SessionStateStore.refresh.

    Attributes:
        changed: Session or homeostasis hash differs from the stored record
        record: The record as written
        saved: Whether the write succeeded
    """

    changed: bool
    record: dict[str, Any]
    saved: bool = True


class SessionStateStore:
    """
    Load/merge/save access to the session record.

    The store keeps no state between calls: every operation reads the
    file again and writes the whole record back.

    Usage:
        store = SessionStateStore(workspace_root / ".cursor/synaptic_state.json")
        result = store.refresh(session_id, homeostasis.hash)
        if result.changed:
            # re-emit derived context
    """

    def __init__(self, path: Path | str, clock: Any = None) -> None:
        self.path = Path(path)
        self._clock = clock or time.time

    def now(self) -> int:
        """Current epoch seconds."""
        return int(self._clock())

    def load(self) -> dict[str, Any]:
        """
        Read the persisted record.

        Returns:
            The record, or {} when the file is absent, unreadable or not
            a JSON object
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read session state %s: %s", self.path, e)
            return {}

        if not raw.strip():
            return {}
        try:
            value = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning("Ignoring corrupt session state %s: %s", self.path, e)
            return {}
        return value if isinstance(value, dict) else {}

    def save(self, record: dict[str, Any]) -> bool:
        """
        Write the full record back, pretty-printed.

        Returns:
            True on success; False if the write failed (logged, not raised)
        """
        payload = json.dumps(record, indent=2, default=str) + "\n"
        try:
            atomic_write_text(self.path, payload)
        except OSError as e:
            logger.warning("Could not write session state %s: %s", self.path, e)
            return False
        logger.debug("Saved session state to %s", self.path)
        return True

    def refresh(self, session_id: str | None, config_hash: str) -> RefreshResult:
        """
        Record the current session and homeostasis hash.

        Always updates session_id, last_injected_hash and
        last_check_timestamp. The changed flag tells the caller whether to
        re-emit derived context.

        Args:
            session_id: Host session identifier (None if unknown)
            config_hash: Hash of the homeostasis document's raw text

        Returns:
            RefreshResult with the changed flag and written record
        """
        previous = self.load()
        record = {
            **previous,
            "session_id": session_id,
            "last_injected_hash": config_hash,
            "last_check_timestamp": self.now(),
        }
        changed = (
            not previous.get("last_injected_hash")
            or previous.get("session_id") != session_id
            or previous.get("last_injected_hash") != config_hash
        )
        saved = self.save(record)
        return RefreshResult(changed=bool(changed), record=record, saved=saved)


class NotificationDeduper:
    """
    "Emit once per session" gate for notifications.

    Per notification kind and session, a content hash moves from unsent
    to sent the first time it is seen. Repeats of the same hash in the
    same session are suppressed. A new session or a different hash is
    eligible again.

    Usage:
        deduper = NotificationDeduper(store)
        if deduper.should_emit_once(session_id, "attention", pulse.attention_hash):
            # show the notice
    """

    def __init__(self, store: SessionStateStore) -> None:
        self.store = store

    def should_emit_once(
        self,
        session_id: str | None,
        kind: str,
        content_hash: str | None,
    ) -> bool:
        """
        Decide whether to surface a notice, recording it if so.

        Args:
            session_id: Host session identifier (None if unknown)
            kind: Notification kind, e.g. "attention" or "triage"
            content_hash: Hash of the notice content

        Returns:
            False for an empty hash or one already sent in this session;
            otherwise True after persisting the (hash, session) pair
        """
        if not content_hash or not kind:
            return False

        hash_field, session_field = notice_fields(kind)
        previous = self.store.load()
        already_sent = (
            previous.get(hash_field) == content_hash
            and session_field in previous
            and previous[session_field] == session_id
        )
        if already_sent:
            return False

        self.store.save({
            **previous,
            hash_field: content_hash,
            session_field: session_id,
            "last_check_timestamp": self.store.now(),
        })
        return True
