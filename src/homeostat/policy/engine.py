"""
Reflex Engine for Homeostat.

The reflex engine turns pattern matches into allow/deny decisions. It
holds nothing but the currently loaded ReflexSet and never mutates
anything, so the same inputs always produce the same decision.

How it works:
    1. Caller names a category and a subject (path or command)
    2. Paths are normalized to workspace-relative form
    3. The category's patterns are tried in order
    4. First match returns DENY with the category's fixed reason;
       no match returns ALLOW

Categories:
    sensory     path globs over reads
    motor       path globs over writes, checked before the mutation
    inhibition  command wildcards over shell and external tool calls
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from homeostat.errors import UnknownReflexCategoryError
from homeostat.policy.patterns import (
    matches_command_pattern,
    matches_path_pattern,
    normalize_path_sep,
)
from homeostat.schema import ReflexCategory, ReflexDecision, ReflexSet

logger = logging.getLogger(__name__)

SENSORY_REASON = "BLINDNESS: Sensory reflex prevents reading this file."
MOTOR_REASON = "REFLEX TRIGGERED: Motor reflex prevents editing a protected file."
INHIBITION_REASON = "REFLEX TRIGGERED: Inhibition reflex blocked a command."

DENY_REASONS = {
    ReflexCategory.SENSORY: SENSORY_REASON,
    ReflexCategory.MOTOR: MOTOR_REASON,
    ReflexCategory.INHIBITION: INHIBITION_REASON,
}

# Conventional tool_input keys that carry the target file of a write.
FILE_PATH_KEYS = ("file_path", "filePath", "path", "target_file", "targetFile", "filename")


def to_rel_path(file_path: Any, workspace_root: Path | str) -> str:
    """
    Normalize a hook path to workspace-relative form for matching.

    Relative paths are resolved against the workspace root. A path that
    lands outside the root is returned as the normalized original input.

    Args:
        file_path: Path as sent by the host
        workspace_root: Absolute workspace root

    Returns:
        Forward-slash path, or "" for a missing/non-string input
    """
    if not isinstance(file_path, str) or not file_path:
        return ""

    root = os.path.normpath(str(workspace_root))
    candidate = file_path if os.path.isabs(file_path) else os.path.join(root, file_path)
    try:
        rel = normalize_path_sep(os.path.relpath(os.path.normpath(candidate), root))
    except ValueError:
        # Different drives on Windows
        return normalize_path_sep(file_path)

    if rel == ".." or rel.startswith("../"):
        return normalize_path_sep(file_path)
    return rel


def extract_file_path(tool_input: Any) -> str | None:
    """Find the target path in a write tool's input, if any."""
    if not isinstance(tool_input, dict):
        return None
    for key in FILE_PATH_KEYS:
        value = tool_input.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def tool_call_haystack(
    tool_name: Any = None,
    command: Any = None,
    url: Any = None,
    tool_input: Any = None,
) -> str:
    """
    Join external tool call metadata into one matchable string.

    Structured tool input is serialized as compact JSON with sorted keys.
    """
    parts = []
    for value in (tool_name, command, url, tool_input):
        if value is None or value == "" or value == {} or value == []:
            continue
        if isinstance(value, (dict, list)):
            parts.append(json.dumps(value, sort_keys=True, separators=(",", ":"), default=str))
        else:
            parts.append(str(value))
    return " ".join(parts)


class ReflexEngine:
    """
    Pure decision function over a ReflexSet.

    Usage:
        engine = ReflexEngine(reflexes, workspace_root)
        decision = engine.check_read("config/db.secret")
        if not decision.allowed:
            # deny with decision.reason

    Attributes:
        reflexes: The reflex patterns to enforce
        workspace_root: Root used to relativize path subjects
    """

    def __init__(self, reflexes: ReflexSet, workspace_root: Path | str = ".") -> None:
        self.reflexes = reflexes
        self.workspace_root = Path(workspace_root)

    def evaluate(self, category: ReflexCategory | str, subject: str) -> ReflexDecision:
        """
        Evaluate a subject against one reflex category.

        Args:
            category: sensory, motor or inhibition
            subject: File path (sensory/motor) or command text (inhibition)

        Returns:
            ReflexDecision with the first matching pattern, if any

        Raises:
            UnknownReflexCategoryError: If category is not recognized
        """
        category = self._coerce_category(category)

        if category == ReflexCategory.INHIBITION:
            normalized = str(subject or "")
            matches = matches_command_pattern
        else:
            normalized = to_rel_path(subject, self.workspace_root)
            matches = matches_path_pattern

        for pattern in self.reflexes.patterns(category):
            if matches(normalized, pattern):
                logger.info("%s reflex denied %r (pattern %r)", category.value, normalized, pattern)
                return ReflexDecision.deny(
                    category,
                    DENY_REASONS[category],
                    subject=normalized,
                    rule=pattern,
                )

        return ReflexDecision.allow(category, subject=normalized)

    def check_read(self, file_path: str) -> ReflexDecision:
        """Sensory reflex: may this file be read?"""
        return self.evaluate(ReflexCategory.SENSORY, file_path)

    def check_write(self, file_path: str) -> ReflexDecision:
        """Motor reflex: may this file be written?"""
        return self.evaluate(ReflexCategory.MOTOR, file_path)

    def check_command(self, command: str) -> ReflexDecision:
        """Inhibition reflex: may this shell command run?"""
        return self.evaluate(ReflexCategory.INHIBITION, command)

    def check_tool_call(
        self,
        tool_name: Any = None,
        command: Any = None,
        url: Any = None,
        tool_input: Any = None,
    ) -> ReflexDecision:
        """Inhibition reflex over an external tool call's metadata."""
        haystack = tool_call_haystack(tool_name, command, url, tool_input)
        return self.evaluate(ReflexCategory.INHIBITION, haystack)

    @staticmethod
    def _coerce_category(category: ReflexCategory | str) -> ReflexCategory:
        if isinstance(category, ReflexCategory):
            return category
        try:
            return ReflexCategory(str(category).lower())
        except ValueError:
            raise UnknownReflexCategoryError(category=str(category)) from None
