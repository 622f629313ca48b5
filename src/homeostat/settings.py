"""
Runtime settings for Homeostat.

Every setting has a default that matches the canonical `_brain_v1`
layout, so a workspace needs no settings file at all. A workspace may
override any subset in `.cursor/homeostat.yaml`:

    vitals_stale_days: 14
    write_tool_names: ["Write", "Edit"]
    triage:
      skeletal_keywords: ["architecture", "schema migration"]

Two entry points:
    - load_settings(path): strict, raises SettingsError
    - discover_settings(root): fail-open, used on the hook path
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from homeostat.errors import SettingsError, SettingsNotFoundError

logger = logging.getLogger(__name__)

SETTINGS_REL_PATH = ".cursor/homeostat.yaml"

BRAIN_ROOT = "_brain_v1"
HOMEOSTASIS_REL_PATH = f"{BRAIN_ROOT}/homeostasis.yaml"
VITALS_REL_PATH = f"{BRAIN_ROOT}/4_evolution/vitals.yaml"

# Minimal bootstrap set: if these are missing, the brain layer is not fully wired.
DEFAULT_BOOTSTRAP_PATHS = [
    HOMEOSTASIS_REL_PATH,
    VITALS_REL_PATH,
    f"{BRAIN_ROOT}/1_directives/synapses/0-9/_syn_1_surgical_triage_rubric.md",
    f"{BRAIN_ROOT}/1_directives/synapses/0-9/_syn_2_phase_lock_protocol.md",
    f"{BRAIN_ROOT}/1_directives/synapses/10-99/_syn_10_director_chain_ingestion_order.md",
    f"{BRAIN_ROOT}/2_identity/synapses/0-9/_syn_7_core_values_pillars.md",
    f"{BRAIN_ROOT}/3_context/synapses/0-9/_syn_8_tech_stack_map_drift_protocol.md",
]

# High-signal phrases only, to keep false positives low.
DEFAULT_SKELETAL_KEYWORDS = [
    "architecture",
    "infrastructure",
    "schema migration",
    "database migration",
    "new dependency",
    "install package",
    "upgrade dependency",
    "downgrade dependency",
    "ci pipeline",
    "deployment pipeline",
    "dockerfile",
    "kubernetes",
    "terraform",
    "monorepo",
    "build system",
    "tsconfig",
    "vite.config",
    "webpack config",
    "eslint config",
    "auth flow",
    "permissions model",
    "api contract",
    "cross-cutting",
    "global config",
]

DEFAULT_SURFACE_KEYWORDS = [
    "typo",
    "spelling",
    "wording",
    "copy edit",
    "docs",
    "documentation",
    "readme",
    "comment",
    "formatting",
    "lint fix",
    "ui text",
    "placeholder text",
    "css color",
    "style only",
]


class TriageSettings(BaseModel):
    """
    Keyword lists for prompt triage.

    Attributes:
        skeletal_keywords: Phrases that grade a prompt A (architecture risk)
        surface_keywords: Phrases that grade a prompt C (cosmetic)
        max_signals: How many hits to quote in reasons and messages
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    skeletal_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_SKELETAL_KEYWORDS))
    surface_keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_SURFACE_KEYWORDS))
    max_signals: int = Field(default=3, gt=0)


class VitalsScanSettings(BaseModel):
    """
    Thresholds for the vitals refresh scan.

    Attributes:
        inflamed_lines: Markdown line count above which inflammation is 1
        toxic_lines: Markdown line count above which inflammation is 2
        exclude_glob: Markdown basenames skipped by the scan
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    inflamed_lines: int = Field(default=2500, ge=0)
    toxic_lines: int = Field(default=5000, ge=0)
    exclude_glob: str = "inf_*.md"


class HomeostatSettings(BaseModel):
    """
    Workspace-relative paths and thresholds.

    Attributes:
        brain_root: Directory that marks a workspace root
        homeostasis_path: First configuration document (mindset + reflexes)
        vitals_path: Second configuration document (vitals + gates)
        state_path: Persisted session state (JSON)
        cortex_path: Generated cortex digest
        bootstrap_paths: Files required for a fully configured brain
        vitals_stale_days: Age after which vitals are reported stale
        inflammation_alert_at: Inflammation level that raises an alert
        cortisol_alert_at: Cortisol level that raises an alert
        write_tool_names: Tool names that the motor reflex gates
        triage: Prompt triage keywords
        vitals_scan: Vitals refresh thresholds
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    brain_root: str = BRAIN_ROOT
    homeostasis_path: str = HOMEOSTASIS_REL_PATH
    vitals_path: str = VITALS_REL_PATH
    state_path: str = ".cursor/synaptic_state.json"
    cortex_path: str = ".cursor/cortex.yaml"
    bootstrap_paths: list[str] = Field(default_factory=lambda: list(DEFAULT_BOOTSTRAP_PATHS))
    vitals_stale_days: float = Field(default=7.0, ge=0)
    inflammation_alert_at: int = Field(default=1, ge=0)
    cortisol_alert_at: int = Field(default=2, ge=0)
    write_tool_names: list[str] = Field(default_factory=lambda: ["Write", "Edit", "MultiEdit"])
    triage: TriageSettings = Field(default_factory=TriageSettings)
    vitals_scan: VitalsScanSettings = Field(default_factory=VitalsScanSettings)


def load_settings(path: Path | str) -> HomeostatSettings:
    """
    Load settings from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated HomeostatSettings object

    Raises:
        SettingsNotFoundError: If the file doesn't exist
        SettingsError: If the YAML is invalid or doesn't match the schema
    """
    path = Path(path)
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise SettingsNotFoundError(path=str(path)) from None
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise SettingsError(path=str(path), underlying_error=str(e)) from e

    try:
        return HomeostatSettings.model_validate(data or {})
    except ValidationError as e:
        raise SettingsError(path=str(path), underlying_error=str(e)) from e


def discover_settings(workspace_root: Path | str) -> HomeostatSettings:
    """
    Load the workspace settings file if there is one.

    Never raises: a missing file gives defaults, an invalid one is
    logged and ignored.
    """
    path = Path(workspace_root) / SETTINGS_REL_PATH
    if not path.is_file():
        return HomeostatSettings()

    try:
        settings = load_settings(path)
    except SettingsError as e:
        logger.warning("Ignoring settings file: %s", e.message)
        return HomeostatSettings()

    logger.debug("Loaded settings from %s", path)
    return settings
