"""
Storage module for Homeostat.

A single JSON record per workspace (`.cursor/synaptic_state.json`) holds
the last session id, the last injected homeostasis hash and the
per-kind notice dedupe pairs.

Design principles:
    - Fail-open reads: missing or corrupt state is {}
    - Atomic writes: temp file + os.replace
    - Non-destructive: unknown fields survive every write
"""

from homeostat.store.state import (
    NotificationDeduper,
    RefreshResult,
    SessionStateStore,
    atomic_write_text,
)

__all__ = [
    "NotificationDeduper",
    "RefreshResult",
    "SessionStateStore",
    "atomic_write_text",
]
