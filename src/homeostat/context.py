"""
Rendering of derived context for the agent.

Three renderings of the same data:
    - build_cortex_yaml: compact digest written to the cortex file
    - build_additional_context: text block injected into the conversation
    - build_triage_context: one-line triage summary for a prompt
"""

import json
from typing import Any

from homeostat.schema import HomeostasisDocument, Pulse, TriageResult

INSTINCT_LINE = "INSTINCT: sensory=blindness (deny read), motor=withdrawal (deny write), inhibition=deny shell/MCP"


def _q(value: Any) -> str:
    """JSON-quote a scalar for the digest."""
    return json.dumps(value, ensure_ascii=False)


def compact_list(items: list[str] | None) -> str:
    """Render ["a", "b"] on one line; [] when empty."""
    if not items:
        return "[]"
    return "[" + ", ".join(_q(str(item)) for item in items) + "]"


def _or_unknown(value: Any) -> Any:
    return "unknown" if value is None else value


def _mindset_line(homeostasis: HomeostasisDocument) -> str:
    m = homeostasis.mindset
    return (
        f"mode: {_q(m.mode or '')}, "
        f"caution: {_q(m.caution or '')}, "
        f"focus: {_q(m.focus or '')}"
    )


def _vitals_line(pulse: Pulse) -> str:
    v = pulse.vitals
    return (
        f"VITALS: {{ generated_at: {_q(v.generated_at or '')}, "
        f"age_days: {_q(pulse.vitals_age_label)}, "
        f"inflammation: {_q(_or_unknown(v.inflammation))}, "
        f"cortisol: {_q(_or_unknown(v.cortisol))}, "
        f"mode: {_q(_or_unknown(v.mode))} }}"
    )


def _gates_line(pulse: Pulse) -> str:
    gates = pulse.vitals.gates
    return (
        f"GATES: {{ block_new_features: {_q(_or_unknown(gates.block_new_features))}, "
        f"require_wbc: {compact_list(gates.require_wbc)} }}"
    )


def _list_block(items: list[str]) -> str:
    if not items:
        return " []"
    return "".join(f"\n    - {_q(str(item))}" for item in items)


def build_cortex_yaml(homeostasis: HomeostasisDocument, pulse: Pulse, source: str) -> str:
    """
    Render the cortex digest file.

    Args:
        homeostasis: Loaded homeostasis document
        pulse: Current pulse
        source: Workspace-relative path of the homeostasis document

    Returns:
        Digest text ending in a newline
    """
    r = homeostasis.reflexes
    lines = [
        "# AUTO-GENERATED - DO NOT EDIT",
        f"# Source: {source}",
        f"workspace_root: {_q(pulse.workspace_root)}",
        f"MINDSET: {{ {_mindset_line(homeostasis)} }}",
        "REFLEXES:",
        f"  motor:{_list_block(r.motor)}",
        f"  sensory:{_list_block(r.sensory)}",
        f"  inhibition:{_list_block(r.inhibition)}",
        _vitals_line(pulse),
        _gates_line(pulse),
        f"BOOTSTRAP: {{ missing_core_files: {compact_list(pulse.missing_core_files)} }}",
        f"ALERTS: {compact_list(pulse.alerts)}",
        'INSTINCT: "Motor reflex denies writes. Sensory reflex denies reads. Inhibition denies shell/MCP."',
        f"HASH: {_q(homeostasis.hash)}",
        "",
    ]
    return "\n".join(lines)


def build_additional_context(homeostasis: HomeostasisDocument, pulse: Pulse, source: str) -> str:
    """Render the context block injected at session start or on change."""
    r = homeostasis.reflexes
    return "\n".join([
        "_brain cortex (auto-injected by hooks)",
        f"source: {source}",
        f"workspace_root: {pulse.workspace_root}",
        f"hash: {homeostasis.hash}",
        f"MINDSET: {{ {_mindset_line(homeostasis)} }}",
        (
            f"REFLEXES: {{ sensory: {compact_list(r.sensory)}, "
            f"motor: {compact_list(r.motor)}, "
            f"inhibition: {compact_list(r.inhibition)} }}"
        ),
        _vitals_line(pulse),
        _gates_line(pulse),
        f"BOOTSTRAP: {{ missing_core_files: {compact_list(pulse.missing_core_files)} }}",
        f"ALERTS: {compact_list(pulse.alerts)}",
        INSTINCT_LINE,
    ])


def build_triage_context(triage: TriageResult) -> str:
    """Render the compact triage block for a submitted prompt."""
    return "\n".join([
        "_brain triage",
        (
            f"TRIAGE: {{ grade: {_q(triage.grade.value)}, layer: {_q(triage.layer)}, "
            f"reason: {_q(triage.reason)}, phase: {_q(triage.phase)} }}"
        ),
        f"TRIAGE_MATCHES: {compact_list(triage.hits)}",
    ])


def append_block(existing: str | None, extra: str | None) -> str | None:
    """Join two context blocks with a newline, skipping empty ones."""
    if not extra:
        return existing
    if not existing:
        return extra
    return f"{existing}\n{extra}"
