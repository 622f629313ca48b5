"""
Configuration loader for Homeostat.

Reads the two brain documents from disk, runs them through ConfigParser
and projects the generic tree into typed views:

    homeostasis.yaml -> MindsetConfig + ReflexSet
    vitals.yaml      -> VitalsSnapshot (brain vitals, chemical state, gates)

A missing or unreadable document is a valid empty state, never an error.
Nothing is cached: every invocation reads the documents again.
"""

import hashlib
import logging
import os
from pathlib import Path

from homeostat.config.parser import ParsedDocument, Scalar, Section, parse_document
from homeostat.schema import (
    BootstrapStatus,
    BrainVitals,
    ChemicalState,
    Gates,
    HomeostasisDocument,
    MindsetConfig,
    ReflexSet,
    VitalsDocument,
    VitalsSnapshot,
)
from homeostat.settings import HomeostatSettings

logger = logging.getLogger(__name__)

MINDSET_SECTION = "MINDSET"
REFLEXES_SECTION = "REFLEXES"
MINDSET_KEYS = ("mode", "caution", "focus")
REFLEX_KEYS = ("sensory", "motor", "inhibition")


def sha256_hex(text: str | None) -> str:
    """Stable digest used for document and notice dedupe."""
    return hashlib.sha256((text or "").encode("utf-8")).hexdigest()


def read_text_if_exists(path: Path) -> str | None:
    """Read a UTF-8 file, returning None if it is absent or unreadable."""
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None


def _label(value: Scalar | None) -> str | None:
    """Free-text label; booleans and ints are kept as their text."""
    if value is None:
        return None
    if isinstance(value, bool):
        text = "true" if value else "false"
    else:
        text = str(value).strip()
    return text or None


def _non_negative_int(value: Scalar | None) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if value >= 0 else None


def _boolean(value: Scalar | None) -> bool | None:
    return value if isinstance(value, bool) else None


# =============================================================================
# Projections
# =============================================================================


def project_mindset(doc: ParsedDocument) -> MindsetConfig:
    """Build MindsetConfig from the MINDSET section."""
    section = doc.section(MINDSET_SECTION)
    return MindsetConfig(**{key: _label(section.scalar(key)) for key in MINDSET_KEYS})


def project_reflexes(doc: ParsedDocument) -> ReflexSet:
    """Build ReflexSet from the REFLEXES section."""
    section = doc.section(REFLEXES_SECTION)
    return ReflexSet(**{key: section.get_list(key) for key in REFLEX_KEYS})


def _project_brain_vitals(section: Section) -> BrainVitals:
    return BrainVitals(
        last_scan_at=_label(section.scalar("last_scan_at")),
        md_files=_non_negative_int(section.scalar("md_files")),
        md_lines=_non_negative_int(section.scalar("md_lines")),
        md_bytes=_non_negative_int(section.scalar("md_bytes")),
    )


def _project_chemical_state(section: Section) -> ChemicalState:
    return ChemicalState(
        inflammation=_non_negative_int(section.scalar("inflammation")),
        cortisol=_non_negative_int(section.scalar("cortisol")),
        mode=_label(section.scalar("mode")),
    )


def _project_gates(section: Section) -> Gates:
    return Gates(
        block_new_features=_boolean(section.scalar("block_new_features")),
        require_wbc=section.get_list("require_wbc"),
    )


def project_vitals(doc: ParsedDocument) -> VitalsSnapshot:
    """Build VitalsSnapshot from the vitals document tree."""
    return VitalsSnapshot(
        generated_at=_label(doc.scalar("generated_at")),
        brain_vitals=_project_brain_vitals(doc.section("brain_vitals")),
        chemical_state=_project_chemical_state(doc.section("chemical_state")),
        gates=_project_gates(doc.section("gates")),
    )


# =============================================================================
# Loader
# =============================================================================


class ConfigLoader:
    """
    Loads the brain documents for one workspace.

    Usage:
        loader = ConfigLoader(workspace_root, settings)
        homeostasis = loader.load_homeostasis()
        vitals = loader.load_vitals()
        bootstrap = loader.bootstrap_status()

    Attributes:
        workspace_root: Absolute workspace root
        settings: Paths and thresholds in use
    """

    def __init__(
        self,
        workspace_root: Path | str,
        settings: HomeostatSettings | None = None,
    ) -> None:
        self.workspace_root = Path(workspace_root)
        self.settings = settings or HomeostatSettings()

    def resolve(self, rel_path: str) -> Path:
        """Absolute path of a workspace-relative path."""
        return self.workspace_root / rel_path

    def load_homeostasis(self) -> HomeostasisDocument:
        """Read and project the homeostasis document."""
        path = self.resolve(self.settings.homeostasis_path)
        raw = read_text_if_exists(path)
        doc = parse_document(raw)
        return HomeostasisDocument(
            path=str(path),
            exists=raw is not None,
            raw=raw or "",
            hash=sha256_hex(raw),
            mindset=project_mindset(doc),
            reflexes=project_reflexes(doc),
        )

    def load_vitals(self) -> VitalsDocument:
        """Read and project the vitals document."""
        path = self.resolve(self.settings.vitals_path)
        raw = read_text_if_exists(path)
        return VitalsDocument(
            path=str(path),
            exists=raw is not None,
            raw=raw or "",
            vitals=project_vitals(parse_document(raw)),
        )

    def load_reflexes(self) -> ReflexSet:
        """Shortcut for the reflex set alone."""
        return self.load_homeostasis().reflexes

    def bootstrap_status(self) -> BootstrapStatus:
        """Report which required bootstrap files are missing."""
        required = list(self.settings.bootstrap_paths)
        missing = [rel for rel in required if not self.resolve(rel).exists()]
        return BootstrapStatus(required=required, missing=missing)


def resolve_workspace_root(
    workspace_roots: object,
    brain_root: str = "_brain_v1",
) -> Path:
    """
    Pick the workspace root that owns the brain directory.

    Multi-root workspaces list several roots. The first one containing
    the brain root wins, else the first string root, else the cwd.
    """
    if isinstance(workspace_roots, (list, tuple)):
        candidates = [root for root in workspace_roots if isinstance(root, str) and root]
        for root in candidates:
            if (Path(root) / brain_root).exists():
                return Path(root)
        if candidates:
            return Path(candidates[0])
    return Path(os.getcwd())
