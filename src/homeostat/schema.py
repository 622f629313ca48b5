"""
Schema definitions for Homeostat.

This module defines the Pydantic models used throughout Homeostat:
- MindsetConfig/ReflexSet: Typed view of the homeostasis document
- VitalsSnapshot/ChemicalState/Gates: Typed view of the vitals document
- Pulse: Derived health/alert summary, recomputed on every invocation
- ReflexDecision: The result of evaluating a subject against a reflex
- TriageResult: Keyword classification of a submitted prompt

Design Decisions:
    - Typed views are rebuilt from disk on every invocation, never cached
    - Models are immutable (frozen=True)
    - Missing values are None, never a guessed default, so "unknown"
      can be reported faithfully
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Enums
# =============================================================================


class ReflexCategory(str, Enum):
    """
    The three categories of deny-rules.

    SENSORY gates reads, MOTOR gates writes, INHIBITION gates shell
    commands and external tool calls.
    """

    SENSORY = "sensory"
    MOTOR = "motor"
    INHIBITION = "inhibition"


class TriageGrade(str, Enum):
    """Prompt triage grade: A is skeletal, B is muscle, C is surface."""

    A = "A"
    B = "B"
    C = "C"


# =============================================================================
# Homeostasis Models
# =============================================================================


class MindsetConfig(BaseModel):
    """
    Free-text labels from the MINDSET section.

    Attributes:
        mode: Working mode label (e.g. "surgeon")
        caution: Caution level label
        focus: Current focus label
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    mode: str | None = Field(default=None, description="Working mode label")
    caution: str | None = Field(default=None, description="Caution level label")
    focus: str | None = Field(default=None, description="Current focus label")


class ReflexSet(BaseModel):
    """
    Deny-patterns from the REFLEXES section.

    Within a category the first matching pattern wins. An empty list
    denies nothing for that category.

    Attributes:
        sensory: Path globs that deny reads
        motor: Path globs that deny writes
        inhibition: Command wildcards that deny execution
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    sensory: list[str] = Field(default_factory=list, description="Read-deny path globs")
    motor: list[str] = Field(default_factory=list, description="Write-deny path globs")
    inhibition: list[str] = Field(default_factory=list, description="Command-deny wildcards")

    def patterns(self, category: ReflexCategory) -> list[str]:
        """Return the pattern list for a category."""
        return list(getattr(self, category.value))

    def counts(self) -> tuple[int, int, int]:
        """Return (sensory, motor, inhibition) pattern counts."""
        return len(self.sensory), len(self.motor), len(self.inhibition)


# =============================================================================
# Vitals Models
# =============================================================================


class BrainVitals(BaseModel):
    """Markdown statistics recorded by the last vitals scan."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    last_scan_at: str | None = None
    md_files: int | None = Field(default=None, ge=0)
    md_lines: int | None = Field(default=None, ge=0)
    md_bytes: int | None = Field(default=None, ge=0)


class ChemicalState(BaseModel):
    """
    Stress markers from the chemical_state section.

    Attributes:
        inflammation: 0=clean, 1=bloated, 2=toxic
        cortisol: 0=calm, 1=focus, 2=stressed, 3=panic
        mode: rest_digest, fight_flight or deep_focus
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    inflammation: int | None = Field(default=None, ge=0)
    cortisol: int | None = Field(default=None, ge=0)
    mode: str | None = None


class Gates(BaseModel):
    """
    Policy gates from the vitals document.

    Attributes:
        block_new_features: Whether new feature work is blocked
        require_wbc: Labels of required scans; order kept, duplicates dropped
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    block_new_features: bool | None = None
    require_wbc: list[str] = Field(default_factory=list)

    @field_validator("require_wbc")
    @classmethod
    def collapse_duplicates(cls, v: list[str]) -> list[str]:
        """Trim labels, drop blanks and repeated labels."""
        seen: list[str] = []
        for item in v:
            label = str(item).strip()
            if label and label not in seen:
                seen.append(label)
        return seen


class VitalsSnapshot(BaseModel):
    """Typed view of the vitals document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    generated_at: str | None = Field(default=None, description="Timestamp of the snapshot")
    brain_vitals: BrainVitals = Field(default_factory=BrainVitals)
    chemical_state: ChemicalState = Field(default_factory=ChemicalState)
    gates: Gates = Field(default_factory=Gates)

    @property
    def inflammation(self) -> int | None:
        return self.chemical_state.inflammation

    @property
    def cortisol(self) -> int | None:
        return self.chemical_state.cortisol

    @property
    def mode(self) -> str | None:
        return self.chemical_state.mode


# =============================================================================
# Loaded Documents
# =============================================================================


class HomeostasisDocument(BaseModel):
    """
    The first configuration document, as loaded from disk.

    Attributes:
        path: Absolute path the document was read from
        exists: Whether the file was present and readable
        raw: Raw text ("" when absent)
        hash: SHA-256 of raw text
        mindset: Parsed MINDSET section
        reflexes: Parsed REFLEXES section
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str
    exists: bool
    raw: str = ""
    hash: str
    mindset: MindsetConfig = Field(default_factory=MindsetConfig)
    reflexes: ReflexSet = Field(default_factory=ReflexSet)


class VitalsDocument(BaseModel):
    """The second configuration document, as loaded from disk."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str
    exists: bool
    raw: str = ""
    vitals: VitalsSnapshot = Field(default_factory=VitalsSnapshot)


class BootstrapStatus(BaseModel):
    """Which required reference files are present."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    required: list[str] = Field(default_factory=list)
    missing: list[str] = Field(default_factory=list)


# =============================================================================
# Derived Models
# =============================================================================


class Pulse(BaseModel):
    """
    Derived health/alert summary.

    Never persisted. The attention message and hash are present only
    when at least one alert fired.

    Attributes:
        workspace_root: Workspace the pulse was computed for
        one_line: Single-line human-readable status
        alerts: Alert codes in fixed evaluation order
        missing_core_files: Bootstrap paths that are absent
        attention_message: "BRAIN ATTENTION: ..." or None
        attention_hash: SHA-256 of the joined alert codes or None
        vitals_age_days: Age of the vitals snapshot, None when unknown
        vitals: The snapshot the pulse was computed from
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    workspace_root: str = ""
    one_line: str
    alerts: list[str] = Field(default_factory=list)
    missing_core_files: list[str] = Field(default_factory=list)
    attention_message: str | None = None
    attention_hash: str | None = None
    vitals_age_days: float | None = None
    vitals: VitalsSnapshot = Field(default_factory=VitalsSnapshot)

    @property
    def vitals_age_label(self) -> str:
        """Age to one decimal, or "unknown"."""
        if self.vitals_age_days is None:
            return "unknown"
        return f"{self.vitals_age_days:.1f}"


class ReflexDecision(BaseModel):
    """
    Result of evaluating a subject against a reflex category.

    Attributes:
        allowed: Whether the action is permitted
        reason: Human-readable explanation of the decision
        category: Reflex category that was evaluated
        subject: Normalized subject that was matched
        rule_matched: The pattern that caused a denial
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed: bool
    reason: str
    category: ReflexCategory
    subject: str = ""
    rule_matched: str | None = None

    @classmethod
    def allow(cls, category: ReflexCategory, subject: str = "") -> "ReflexDecision":
        """Create an ALLOW decision."""
        return cls(
            allowed=True,
            reason="No reflex pattern matched",
            category=category,
            subject=subject,
        )

    @classmethod
    def deny(
        cls,
        category: ReflexCategory,
        reason: str,
        subject: str = "",
        rule: str | None = None,
    ) -> "ReflexDecision":
        """Create a DENY decision."""
        return cls(
            allowed=False,
            reason=reason,
            category=category,
            subject=subject,
            rule_matched=rule,
        )


class TriageResult(BaseModel):
    """
    Keyword classification of a submitted prompt.

    Attributes:
        grade: A (skeletal), B (muscle) or C (surface)
        layer: "skeletal", "muscle" or "surface"
        prompt_available: Whether any prompt text could be extracted
        reason: Short machine-readable reason
        hits: Matched keywords in keyword-list order
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    grade: TriageGrade = TriageGrade.B
    layer: str = "muscle"
    prompt_available: bool = False
    reason: str = "prompt_unavailable"
    hits: list[str] = Field(default_factory=list)

    @property
    def phase(self) -> str:
        """ARCHITECT_LOCK for grade A, SURGEON_ELIGIBLE otherwise."""
        return "ARCHITECT_LOCK" if self.grade == TriageGrade.A else "SURGEON_ELIGIBLE"
