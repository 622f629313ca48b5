"""
Keyword triage of submitted prompts.

Hosts don't agree on where the prompt text lives in a hook payload, so
extraction tries a list of direct keys, then a list of nested containers.
Each candidate may be a string, a list of strings, or an object with a
text-like key.

Classification is a substring scan of the normalized prompt:
    skeletal keyword hit -> grade A (architecture risk)
    surface keyword hit  -> grade C (cosmetic)
    otherwise            -> grade B
Keyword lists come from TriageSettings.
"""

import re
from typing import Any

from homeostat.config.loader import sha256_hex
from homeostat.schema import TriageGrade, TriageResult
from homeostat.settings import TriageSettings

DIRECT_PROMPT_KEYS = (
    "prompt",
    "text",
    "message",
    "user_message",
    "user_prompt",
    "submitted_prompt",
    "current_prompt",
)
NESTED_PROMPT_CONTAINERS = ("payload", "request", "data", "tool_input")
OBJECT_TEXT_KEYS = ("text", "content", "prompt", "message", "input")

_WHITESPACE_RE = re.compile(r"\s+")


def coerce_prompt_text(value: Any, _depth: int = 0) -> str | None:
    """Best-effort text from a string, list of strings or text-bearing object."""
    if _depth > 8:
        return None

    if isinstance(value, str):
        return value.strip() or None

    if isinstance(value, list):
        parts = [item.strip() for item in value if isinstance(item, str) and item.strip()]
        return "\n".join(parts) if parts else None

    if isinstance(value, dict):
        for key in OBJECT_TEXT_KEYS:
            text = coerce_prompt_text(value.get(key), _depth + 1)
            if text:
                return text

    return None


def extract_prompt_text(payload: Any) -> str | None:
    """Find the submitted prompt in a hook payload, if there is one."""
    if not isinstance(payload, dict):
        return None
    for key in DIRECT_PROMPT_KEYS + NESTED_PROMPT_CONTAINERS:
        text = coerce_prompt_text(payload.get(key))
        if text:
            return text
    return None


def normalize_for_keyword_scan(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", text.lower()).strip()


def collect_keyword_hits(normalized: str, keywords: list[str]) -> list[str]:
    """Keywords contained in the text, in keyword-list order."""
    return [kw for kw in keywords if kw and kw.lower() in normalized]


def classify_prompt(prompt_text: str | None, settings: TriageSettings | None = None) -> TriageResult:
    """
    Grade a prompt by keyword hits.

    Args:
        prompt_text: Extracted prompt, or None if none was found
        settings: Keyword lists and signal cap

    Returns:
        TriageResult; grade B with reason "prompt_unavailable" when there
        is no prompt text
    """
    settings = settings or TriageSettings()
    if not prompt_text:
        return TriageResult()

    normalized = normalize_for_keyword_scan(prompt_text)

    skeletal_hits = collect_keyword_hits(normalized, settings.skeletal_keywords)
    if skeletal_hits:
        return TriageResult(
            grade=TriageGrade.A,
            layer="skeletal",
            prompt_available=True,
            reason="skeletal_signals:" + "|".join(skeletal_hits[: settings.max_signals]),
            hits=skeletal_hits,
        )

    surface_hits = collect_keyword_hits(normalized, settings.surface_keywords)
    if surface_hits:
        return TriageResult(
            grade=TriageGrade.C,
            layer="surface",
            prompt_available=True,
            reason="surface_signals:" + "|".join(surface_hits[: settings.max_signals]),
            hits=surface_hits,
        )

    return TriageResult(prompt_available=True, reason="default_logic_scope")


def triage_notice_hash(result: TriageResult) -> str:
    """Dedupe key for the grade A notice."""
    return sha256_hex("|".join([result.grade.value, result.reason, "|".join(result.hits)]))


def triage_notice_message(result: TriageResult, max_signals: int = 3) -> str:
    """User-facing notice for a grade A prompt."""
    top = ", ".join(result.hits[:max_signals])
    if top:
        return f"BRAIN TRIAGE: Grade A (skeletal) -> PHASE ARCHITECT. Signals: {top}"
    return "BRAIN TRIAGE: Grade A (skeletal) -> PHASE ARCHITECT."
