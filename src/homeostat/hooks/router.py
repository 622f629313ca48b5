"""
Event router for Homeostat hooks.

Maps one parsed hook event to its handler and produces the JSON-ready
response. Each invocation is a single synchronous unit of work: load
configuration, compute the pulse, decide, read-modify-write the session
record, respond.

Fail-open boundary:
    handle_payload() is the only place exceptions are caught. Any fault
    below it turns into the event family's documented default: gating
    events (read, write, shell, MCP) allow, session events continue,
    everything else gets {}. The worst case is a permissive decision,
    never a locked-out agent.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from homeostat.config.loader import ConfigLoader, resolve_workspace_root
from homeostat.context import (
    append_block,
    build_additional_context,
    build_cortex_yaml,
    build_triage_context,
)
from homeostat.hooks.events import (
    FileEditEvent,
    HookEvent,
    McpExecutionEvent,
    PreCompactEvent,
    PreToolUseEvent,
    PromptSubmitEvent,
    ReadFileEvent,
    SessionStartEvent,
    ShellExecutionEvent,
    fail_open_response,
    parse_event,
)
from homeostat.policy.engine import ReflexEngine, extract_file_path
from homeostat.pulse import PulseComputer
from homeostat.schema import HomeostasisDocument, Pulse, TriageGrade
from homeostat.settings import HomeostatSettings, discover_settings
from homeostat.store.state import (
    ATTENTION_NOTICE,
    TRIAGE_NOTICE,
    NotificationDeduper,
    SessionStateStore,
    atomic_write_text,
)
from homeostat.triage import classify_prompt, triage_notice_hash, triage_notice_message

logger = logging.getLogger(__name__)

SHELL_DENY_USER_MESSAGE = "REFLEX TRIGGERED: Inhibition reflex blocked a command."
SHELL_DENY_AGENT_MESSAGE = "Inhibition reflex: shell execution denied by _brain reflexes."
MCP_DENY_USER_MESSAGE = "REFLEX TRIGGERED: Inhibition reflex blocked an MCP tool call."
MCP_DENY_AGENT_MESSAGE = "Inhibition reflex: MCP execution denied by _brain reflexes."


class EventRouter:
    """
    Dispatches hook events for one workspace.

    Usage:
        router = EventRouter(workspace_root)
        response = router.dispatch(parse_event(payload))

    Attributes:
        workspace_root: Absolute workspace root
        settings: Paths and thresholds in use
        loader: Reads the brain documents
        store: Session record access
    """

    def __init__(
        self,
        workspace_root: Path | str,
        settings: HomeostatSettings | None = None,
        store: SessionStateStore | None = None,
        now: datetime | None = None,
    ) -> None:
        self.workspace_root = Path(workspace_root)
        self.settings = settings or HomeostatSettings()
        self.loader = ConfigLoader(self.workspace_root, self.settings)
        self.store = store or SessionStateStore(self.workspace_root / self.settings.state_path)
        self.deduper = NotificationDeduper(self.store)
        self.pulse_computer = PulseComputer(self.settings)
        self._now = now

    @classmethod
    def for_event(cls, event: HookEvent) -> "EventRouter":
        """Build a router for the workspace that owns the event."""
        root = resolve_workspace_root(event.workspace_roots)
        settings = discover_settings(root)
        if settings.brain_root != HomeostatSettings().brain_root:
            root = resolve_workspace_root(event.workspace_roots, settings.brain_root)
        return cls(root, settings)

    @property
    def cortex_path(self) -> Path:
        return self.workspace_root / self.settings.cortex_path

    def dispatch(self, event: HookEvent) -> dict[str, Any]:
        """
        Run the handler for an event.

        Returns:
            The event-specific response; {} for unhandled events
        """
        if isinstance(event, SessionStartEvent):
            return self.on_session_start(event)
        elif isinstance(event, PromptSubmitEvent):
            return self.on_prompt_submit(event)
        elif isinstance(event, PreCompactEvent):
            return self.on_pre_compact(event)
        elif isinstance(event, ReadFileEvent):
            return self.on_read_file(event)
        elif isinstance(event, PreToolUseEvent):
            return self.on_pre_tool_use(event)
        elif isinstance(event, FileEditEvent):
            return self.on_file_edit(event)
        elif isinstance(event, ShellExecutionEvent):
            return self.on_shell_execution(event)
        elif isinstance(event, McpExecutionEvent):
            return self.on_mcp_execution(event)
        else:
            logger.debug("Ignoring unhandled hook event %r", event.event_name)
            return {}

    # =========================================================================
    # Session Events
    # =========================================================================

    def on_session_start(self, event: SessionStartEvent) -> dict[str, Any]:
        """Inject the cortex context and report the pulse line."""
        homeostasis, pulse, _ = self._sync(event.session_id)
        return {
            "continue": True,
            "env": {
                "BRAIN_HOMEOSTASIS_HASH": homeostasis.hash,
                "BRAIN_HOMEOSTASIS_PATH": str(self.workspace_root / self.settings.homeostasis_path),
                "BRAIN_CORTEX_PATH": str(self.cortex_path),
                "BRAIN_VITALS_PATH": str(self.workspace_root / self.settings.vitals_path),
            },
            "user_message": pulse.one_line,
            "additional_context": build_additional_context(
                homeostasis, pulse, self.settings.homeostasis_path
            ),
        }

    def on_prompt_submit(self, event: PromptSubmitEvent) -> dict[str, Any]:
        """
        Refresh context on change, add triage, surface once-per-session notices.
        """
        homeostasis, pulse, changed = self._sync(event.session_id)
        out: dict[str, Any] = {"continue": True}
        context: str | None = None

        if changed:
            context = build_additional_context(homeostasis, pulse, self.settings.homeostasis_path)

        triage = classify_prompt(event.prompt_text, self.settings.triage)
        if triage.prompt_available:
            context = append_block(context, build_triage_context(triage))
        if context:
            out["additional_context"] = context

        messages = []
        if pulse.attention_message and self.deduper.should_emit_once(
            event.session_id, ATTENTION_NOTICE, pulse.attention_hash
        ):
            messages.append(pulse.attention_message)

        if triage.grade == TriageGrade.A and self.deduper.should_emit_once(
            event.session_id, TRIAGE_NOTICE, triage_notice_hash(triage)
        ):
            messages.append(triage_notice_message(triage, self.settings.triage.max_signals))

        if messages:
            out["user_message"] = "\n".join(messages)
        return out

    def on_pre_compact(self, event: PreCompactEvent) -> dict[str, Any]:
        """Advise a fresh chat when a cortex digest is in play."""
        if not self.cortex_path.is_file():
            return {}
        return {
            "user_message": (
                "Context compaction: _brain cortex exists. "
                f"If you changed `{self.settings.homeostasis_path}` or "
                f"`{self.settings.vitals_path}`, start a new chat to re-inject cortex."
            ),
        }

    # =========================================================================
    # Gating Events
    # =========================================================================

    def on_read_file(self, event: ReadFileEvent) -> dict[str, Any]:
        """Sensory reflex: deny reads of protected paths."""
        if not event.file_path:
            return {"permission": "allow"}
        decision = self._engine().check_read(event.file_path)
        if decision.allowed:
            return {"permission": "allow"}
        return {"permission": "deny", "user_message": decision.reason}

    def on_pre_tool_use(self, event: PreToolUseEvent) -> dict[str, Any]:
        """Motor reflex: deny write tools targeting protected paths."""
        if event.tool_name not in self.settings.write_tool_names:
            return {"decision": "allow"}
        file_path = extract_file_path(event.tool_input)
        if not file_path:
            return {"decision": "allow"}
        decision = self._engine().check_write(file_path)
        if decision.allowed:
            return {"decision": "allow"}
        return {"decision": "deny", "reason": decision.reason}

    def on_file_edit(self, event: FileEditEvent) -> dict[str, Any]:
        """Post-edit notification; writes are only ever stopped before they happen."""
        if event.file_path:
            decision = self._engine().check_write(event.file_path)
            if not decision.allowed:
                logger.warning(
                    "Protected path %s was edited (pattern %r); no rollback attempted",
                    decision.subject,
                    decision.rule_matched,
                )
        return {}

    def on_shell_execution(self, event: ShellExecutionEvent) -> dict[str, Any]:
        """Inhibition reflex over a shell command."""
        decision = self._engine().check_command(event.command or "")
        if decision.allowed:
            return {"permission": "allow"}
        return {
            "permission": "deny",
            "user_message": SHELL_DENY_USER_MESSAGE,
            "agent_message": SHELL_DENY_AGENT_MESSAGE,
        }

    def on_mcp_execution(self, event: McpExecutionEvent) -> dict[str, Any]:
        """Inhibition reflex over an external tool call."""
        decision = self._engine().check_tool_call(
            event.tool_name, event.command, event.url, event.tool_input
        )
        if decision.allowed:
            return {"permission": "allow"}
        return {
            "permission": "deny",
            "user_message": MCP_DENY_USER_MESSAGE,
            "agent_message": MCP_DENY_AGENT_MESSAGE,
        }

    # =========================================================================
    # Helpers
    # =========================================================================

    def _engine(self) -> ReflexEngine:
        return ReflexEngine(self.loader.load_reflexes(), self.workspace_root)

    def _sync(self, session_id: str | None) -> tuple[HomeostasisDocument, Pulse, bool]:
        """
        Compute the pulse and refresh the session record.

        The cortex digest is rewritten only when the session or the
        homeostasis hash changed.
        """
        homeostasis = self.loader.load_homeostasis()
        pulse = self.pulse_computer.compute(
            homeostasis,
            self.loader.load_vitals(),
            self.loader.bootstrap_status(),
            workspace_root=str(self.workspace_root),
            now=self._now,
        )

        refreshed = self.store.refresh(session_id, homeostasis.hash)
        if refreshed.changed:
            digest = build_cortex_yaml(homeostasis, pulse, self.settings.homeostasis_path)
            try:
                atomic_write_text(self.cortex_path, digest)
            except OSError as e:
                logger.warning("Could not write cortex digest %s: %s", self.cortex_path, e)

        return homeostasis, pulse, refreshed.changed


def handle_payload(payload: Any) -> dict[str, Any]:
    """
    Handle one decoded hook payload, never raising.

    Args:
        payload: Decoded JSON payload from the host

    Returns:
        The handler's response, or the fail-open default for the event
    """
    event_name = payload.get("hook_event_name") if isinstance(payload, dict) else None
    try:
        event = parse_event(payload)
        return EventRouter.for_event(event).dispatch(event)
    except Exception:
        logger.warning("Hook %r failed; answering with fail-open default", event_name, exc_info=True)
        return fail_open_response(event_name)


def handle_raw(raw: str | bytes | None) -> dict[str, Any]:
    """Decode a raw stdin payload and handle it; bad JSON is an empty payload."""
    try:
        payload = json.loads(raw) if raw and str(raw).strip() else {}
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Hook payload is not valid JSON; treating as empty")
        payload = {}
    return handle_payload(payload)
