"""
Security tests for the fail-open boundary.

A hook must never lock the agent out: malformed input, corrupt state
and internal faults all produce the event family's safe default, and
nothing propagates out of handle_payload/handle_raw.
"""

import json

import pytest

from homeostat.hooks import router as router_module
from homeostat.hooks.events import parse_event
from homeostat.hooks.router import EventRouter, handle_payload, handle_raw


def _payload(name: str, root, **fields) -> dict:
    return {"hook_event_name": name, "workspace_roots": [str(root)], **fields}


class TestMalformedInput:
    """Bad payloads are answered, never raised."""

    @pytest.mark.parametrize("raw", [None, "", "   ", "{", "\"just a string\"", "42", b"\xff\xfe"])
    def test_raw(self, raw) -> None:
        assert handle_raw(raw) == {}

    def test_wrong_field_type_gating_event(self, healthy_workspace) -> None:
        """A gating event with a broken field still allows."""
        payload = _payload("beforeShellExecution", healthy_workspace.root, command=["rm", "-rf", "/"])
        assert handle_payload(payload) == {"permission": "allow"}

    def test_wrong_field_type_tool_event(self, healthy_workspace) -> None:
        payload = _payload("preToolUse", healthy_workspace.root, tool_name=5, tool_input={"file_path": "_brain_v1/x.md"})
        assert handle_payload(payload) == {"decision": "allow"}

    def test_raw_bytes_payload(self, healthy_workspace) -> None:
        raw = json.dumps(_payload("beforeReadFile", healthy_workspace.root, file_path=".env")).encode()
        assert handle_raw(raw)["permission"] == "deny"


class TestInternalFaults:
    """Any exception below the boundary becomes the safe default."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("beforeReadFile", {"permission": "allow"}),
            ("preToolUse", {"decision": "allow"}),
            ("beforeShellExecution", {"permission": "allow"}),
            ("beforeMCPExecution", {"permission": "allow"}),
            ("sessionStart", {"continue": True}),
            ("beforeSubmitPrompt", {"continue": True}),
            ("preCompact", {}),
            ("afterFileEdit", {}),
        ],
    )
    def test_dispatch_raises(self, monkeypatch, healthy_workspace, name: str, expected: dict) -> None:
        def boom(self, event):
            raise RuntimeError("simulated failure")

        monkeypatch.setattr(EventRouter, "dispatch", boom)
        assert handle_payload(_payload(name, healthy_workspace.root)) == expected

    def test_failure_is_logged(self, monkeypatch, healthy_workspace, caplog) -> None:
        def boom(self, event):
            raise RuntimeError("simulated failure")

        monkeypatch.setattr(EventRouter, "dispatch", boom)
        with caplog.at_level("WARNING", logger="homeostat.hooks.router"):
            handle_payload(_payload("beforeReadFile", healthy_workspace.root))
        assert "fail-open default" in caplog.text

    def test_loader_raises(self, monkeypatch, healthy_workspace) -> None:
        """A fault while reading reflexes allows the command."""
        def boom(self):
            raise OSError("disk gone")

        monkeypatch.setattr(router_module.ConfigLoader, "load_reflexes", boom)
        payload = _payload("beforeShellExecution", healthy_workspace.root, command="rm -rf /")
        assert handle_payload(payload) == {"permission": "allow"}


class TestCorruptState:
    """A damaged session record reads as empty and is rewritten."""

    @pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]", "", "\"text\""])
    def test_corrupt_record(self, healthy_workspace, now, content: str) -> None:
        state = healthy_workspace.write(".cursor/synaptic_state.json", content)
        router = EventRouter(healthy_workspace.root, now=now)

        out = router.dispatch(parse_event(_payload("sessionStart", healthy_workspace.root, session_id="s1")))

        assert out["continue"] is True
        assert json.loads(state.read_text(encoding="utf-8"))["session_id"] == "s1"

    def test_unwritable_state_still_answers(self, healthy_workspace, now) -> None:
        """A state path that is a directory can't be written; the hook still responds."""
        (healthy_workspace.root / ".cursor" / "synaptic_state.json").mkdir(parents=True)
        router = EventRouter(healthy_workspace.root, now=now)

        out = router.dispatch(parse_event(
            _payload("beforeSubmitPrompt", healthy_workspace.root, session_id="s1", prompt="fix typo")
        ))
        assert out["continue"] is True
        assert "_brain triage" in out["additional_context"]
