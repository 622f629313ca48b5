"""
Exception hierarchy for Homeostat.

All Homeostat exceptions inherit from HomeostatError, allowing callers to catch
all Homeostat-specific exceptions with a single except clause.

Exception Categories:
    - SettingsError: Settings file missing or invalid
    - HookPayloadError: Hook payload could not be interpreted
    - UnknownReflexCategoryError: Reflex category is not sensory/motor/inhibition
    - BrainRootNotFoundError / VitalsWriteError: Vitals refresh failures

Hook invocations never surface these to the host. The event router catches
them at its boundary and answers with the fail-open default for the event.
The CLI renders them with their code and suggestion.
"""

from dataclasses import dataclass, field
from typing import Any


# =============================================================================
# Error Codes
# =============================================================================

# Settings errors: 1xxx
ERROR_SETTINGS_NOT_FOUND = 1001
ERROR_SETTINGS_INVALID = 1002

# Hook errors: 2xxx
ERROR_HOOK_PAYLOAD_INVALID = 2001
ERROR_HOOK_FIELD_INVALID = 2002

# Reflex errors: 3xxx
ERROR_REFLEX_UNKNOWN_CATEGORY = 3001

# Vitals errors: 4xxx
ERROR_VITALS_BRAIN_ROOT_MISSING = 4001
ERROR_VITALS_WRITE = 4002


# =============================================================================
# Base Exception
# =============================================================================


@dataclass
class HomeostatError(Exception):
    """
    Base exception for all Homeostat errors.

    Attributes:
        message: Human-readable error description
        code: Numeric error code for programmatic handling
        suggestion: Optional hint for how to resolve the error
        context: Optional dict with additional debugging info
    """

    message: str = ""
    code: int = 0
    suggestion: str | None = None
    context: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Format error for display."""
        parts = [f"[E{self.code}] {self.message}"]
        if self.suggestion:
            parts.append(f"\nSuggestion: {self.suggestion}")
        return "".join(parts)

    def __repr__(self) -> str:
        """Format error for debugging."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code}, "
            f"context={self.context!r})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "code": self.code,
            "suggestion": self.suggestion,
            "context": self.context,
        }


# =============================================================================
# Settings Errors
# =============================================================================


@dataclass
class SettingsError(HomeostatError):
    """
    Raised when a settings file cannot be loaded.

    Attributes:
        path: Path of the settings file
        underlying_error: Parser or validation message
    """

    path: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Invalid settings file {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_SETTINGS_INVALID
        self.context.update({
            "path": self.path,
            "underlying_error": self.underlying_error,
        })


@dataclass
class SettingsNotFoundError(SettingsError):
    """Raised when an explicitly requested settings file does not exist."""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Settings file not found: {self.path}"
        if self.code == 0:
            self.code = ERROR_SETTINGS_NOT_FOUND
        if not self.suggestion:
            self.suggestion = "Omit --settings to use the workspace defaults"
        super().__post_init__()


# =============================================================================
# Hook Errors
# =============================================================================


@dataclass
class HookPayloadError(HomeostatError):
    """
    Raised when a hook payload cannot be interpreted.

    Attributes:
        event_name: Hook event name, when it could be read
        field_name: Offending field, when the problem is a single field
    """

    event_name: str = ""
    field_name: str | None = None

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            if self.field_name:
                self.message = f"Invalid field {self.field_name!r} in {self.event_name or 'hook'} payload"
            else:
                self.message = "Hook payload must be a JSON object"
        if self.code == 0:
            self.code = ERROR_HOOK_FIELD_INVALID if self.field_name else ERROR_HOOK_PAYLOAD_INVALID
        self.context.update({
            "event_name": self.event_name,
            "field_name": self.field_name,
        })


# =============================================================================
# Reflex Errors
# =============================================================================


@dataclass
class UnknownReflexCategoryError(HomeostatError):
    """Raised when a reflex category name is not recognized."""

    category: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Unknown reflex category: {self.category}"
        if self.code == 0:
            self.code = ERROR_REFLEX_UNKNOWN_CATEGORY
        if not self.suggestion:
            self.suggestion = "Use one of: sensory, motor, inhibition"
        self.context["category"] = self.category


# =============================================================================
# Vitals Errors
# =============================================================================


@dataclass
class VitalsError(HomeostatError):
    """
    Base class for vitals refresh errors.

    Attributes:
        workspace_root: Workspace the scan was started from
    """

    workspace_root: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        self.context["workspace_root"] = self.workspace_root


@dataclass
class BrainRootNotFoundError(VitalsError):
    """Raised when the brain root directory cannot be located."""

    brain_root: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = (
                f"WBC-1 failed: could not locate {self.brain_root} "
                "in current workspace or parents."
            )
        if self.code == 0:
            self.code = ERROR_VITALS_BRAIN_ROOT_MISSING
        if not self.suggestion:
            self.suggestion = "Run from inside a workspace that contains the brain root"
        super().__post_init__()
        self.context["brain_root"] = self.brain_root


@dataclass
class VitalsWriteError(VitalsError):
    """Raised when the vitals document cannot be written."""

    path: str = ""
    underlying_error: str = ""

    def __post_init__(self) -> None:
        """Set defaults after dataclass init."""
        if not self.message:
            self.message = f"Failed to write vitals to {self.path}: {self.underlying_error}"
        if self.code == 0:
            self.code = ERROR_VITALS_WRITE
        super().__post_init__()
        self.context.update({
            "path": self.path,
            "underlying_error": self.underlying_error,
        })
