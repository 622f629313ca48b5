"""
Hook handling for Homeostat.

The editor host sends one JSON payload per event on stdin. Each payload
is parsed into a typed event (events.py) and dispatched by EventRouter
(router.py), which returns the JSON-ready response.

Event families:
    - Session: sessionStart, beforeSubmitPrompt, preCompact
    - Gating: beforeReadFile, preToolUse, beforeShellExecution,
      beforeMCPExecution
    - Informational: afterFileEdit

handle_payload() is the fail-open boundary: it never raises.
"""

from homeostat.hooks.events import HookEvent, fail_open_response, parse_event
from homeostat.hooks.router import EventRouter, handle_payload, handle_raw

__all__ = [
    "EventRouter",
    "HookEvent",
    "fail_open_response",
    "handle_payload",
    "handle_raw",
    "parse_event",
]
