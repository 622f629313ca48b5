"""
Hook event types.

Every host event is parsed into exactly one member of a closed set of
event classes, each carrying its own typed payload. Names the host may
send are mapped in EVENT_TYPES; anything else becomes UnknownEvent.

Each class also declares the response the host gets if handling the
event fails for any reason (FAIL_OPEN): gating events allow, session
events continue, everything else gets an empty object.
"""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from homeostat.errors import HookPayloadError
from homeostat.triage import extract_prompt_text


class HookEvent(BaseModel):
    """
    Fields common to every hook payload.

    Attributes:
        event_name: hook_event_name as sent by the host
        session_id: session_id, else conversation_id, as a string
        workspace_roots: Roots of the open workspace
        payload: The raw payload, for fields not modelled here
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    FAIL_OPEN: ClassVar[dict[str, Any]] = {}

    event_name: str = ""
    session_id: str | None = None
    workspace_roots: list[str] = Field(default_factory=list)
    payload: dict[str, Any] = Field(default_factory=dict)


class SessionStartEvent(HookEvent):
    """A new agent session began."""

    FAIL_OPEN: ClassVar[dict[str, Any]] = {"continue": True}


class PromptSubmitEvent(HookEvent):
    """The user submitted a prompt; prompt_text is best effort."""

    FAIL_OPEN: ClassVar[dict[str, Any]] = {"continue": True}

    prompt_text: str | None = None


class PreCompactEvent(HookEvent):
    """The host is about to compact the conversation context."""


class ReadFileEvent(HookEvent):
    """The agent wants to read a file."""

    FAIL_OPEN: ClassVar[dict[str, Any]] = {"permission": "allow"}

    file_path: str | None = None


class PreToolUseEvent(HookEvent):
    """The agent wants to invoke a tool; only write tools are gated."""

    FAIL_OPEN: ClassVar[dict[str, Any]] = {"decision": "allow"}

    tool_name: str | None = None
    tool_input: Any = None


class FileEditEvent(HookEvent):
    """A file was edited. Informational only; nothing is rolled back."""

    file_path: str | None = None


class ShellExecutionEvent(HookEvent):
    """The agent wants to run a shell command."""

    FAIL_OPEN: ClassVar[dict[str, Any]] = {"permission": "allow"}

    command: str | None = None


class McpExecutionEvent(HookEvent):
    """The agent wants to call an external (MCP) tool."""

    FAIL_OPEN: ClassVar[dict[str, Any]] = {"permission": "allow"}

    tool_name: Any = None
    command: Any = None
    url: Any = None
    tool_input: Any = None


class UnknownEvent(HookEvent):
    """Any event name this package does not handle."""


EVENT_TYPES: dict[str, type[HookEvent]] = {
    "sessionStart": SessionStartEvent,
    "beforeSubmitPrompt": PromptSubmitEvent,
    "preCompact": PreCompactEvent,
    "beforeReadFile": ReadFileEvent,
    "beforeTabFileRead": ReadFileEvent,
    "preToolUse": PreToolUseEvent,
    "afterFileEdit": FileEditEvent,
    "afterTabFileEdit": FileEditEvent,
    "beforeShellExecution": ShellExecutionEvent,
    "beforeMCPExecution": McpExecutionEvent,
}


def event_type_for(event_name: Any) -> type[HookEvent]:
    """Event class for a host event name."""
    if not isinstance(event_name, str):
        return UnknownEvent
    return EVENT_TYPES.get(event_name, UnknownEvent)


def fail_open_response(event_name: Any) -> dict[str, Any]:
    """The safe default response for an event name."""
    return dict(event_type_for(event_name).FAIL_OPEN)


def _session_id(payload: dict[str, Any]) -> str | None:
    for key in ("session_id", "conversation_id"):
        value = payload.get(key)
        if value is not None and value != "" and not isinstance(value, (dict, list)):
            return str(value)
    return None


def _workspace_roots(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [root for root in value if isinstance(root, str) and root]


def parse_event(payload: Any) -> HookEvent:
    """
    Parse a decoded hook payload into its event class.

    Args:
        payload: Decoded JSON payload

    Returns:
        A HookEvent subclass instance

    Raises:
        HookPayloadError: If payload is not an object or a field has the
            wrong type
    """
    if not isinstance(payload, dict):
        raise HookPayloadError()

    event_name = payload.get("hook_event_name")
    event_cls = event_type_for(event_name)
    data = {
        **payload,
        "event_name": event_name if isinstance(event_name, str) else "",
        "session_id": _session_id(payload),
        "workspace_roots": _workspace_roots(payload.get("workspace_roots")),
        "payload": payload,
    }
    if event_cls is PromptSubmitEvent:
        data["prompt_text"] = extract_prompt_text(payload)

    try:
        return event_cls.model_validate(data)
    except ValidationError as e:
        errors = e.errors()
        field_name = ".".join(str(part) for part in errors[0]["loc"]) if errors else None
        raise HookPayloadError(
            event_name=data["event_name"],
            field_name=field_name,
        ) from e
