"""
Vitals refresh scan (WBC-1).

Measures the brain layer and rewrites the vitals document:

    1. Locate the workspace root (walk up until the brain root appears)
    2. Count markdown files, lines and bytes under the brain root,
       skipping excluded basenames (inf_*.md by default)
    3. Derive inflammation from the line count and the feature gate from
       inflammation
    4. Carry forward cortisol, mode and require_wbc from the existing
       document
    5. Write the new document atomically and return a summary

Only this scan writes the vitals document; hooks only read it.
"""

import fnmatch
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from homeostat.config.loader import project_vitals, read_text_if_exists
from homeostat.config.parser import parse_document
from homeostat.errors import BrainRootNotFoundError, VitalsWriteError
from homeostat.settings import HomeostatSettings, VitalsScanSettings, discover_settings
from homeostat.store.state import atomic_write_text

logger = logging.getLogger(__name__)

DEFAULT_MODE = "rest_digest"
STRESSED_MODE = "fight_flight"

_NEWLINE_RE = re.compile(r"\r?\n")


@dataclass(frozen=True)
class MarkdownStats:
    """Markdown totals for the brain root."""

    md_files: int = 0
    md_lines: int = 0
    md_bytes: int = 0


@dataclass(frozen=True)
class CarriedState:
    """Values the scan does not measure and keeps from the previous document."""

    cortisol: int = 0
    mode: str = DEFAULT_MODE
    require_wbc: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class VitalsRefreshResult:
    """
    Outcome of a vitals refresh.

    Attributes:
        workspace_root: Workspace the scan ran in
        vitals_path: Document that was written
        generated_at: ISO-8601 UTC timestamp of the scan
        stats: Markdown totals
        inflammation: Derived inflammation level
        cortisol: Carried cortisol level
        mode: Carried (or defaulted) mode
        block_new_features: Whether the feature gate is closed
        require_wbc: Carried scan requirements
    """

    workspace_root: str
    vitals_path: str
    generated_at: str
    stats: MarkdownStats
    inflammation: int
    cortisol: int
    mode: str
    block_new_features: bool
    require_wbc: list[str]

    def to_dict(self) -> dict[str, Any]:
        """Summary in the JSON shape printed by the CLI."""
        return {
            "status": "ok",
            "workspace_root": self.workspace_root,
            "vitals_path": self.vitals_path,
            "generated_at": self.generated_at,
            "brain_vitals": {
                "md_files": self.stats.md_files,
                "md_lines": self.stats.md_lines,
                "md_bytes": self.stats.md_bytes,
            },
            "chemical_state": {
                "inflammation": self.inflammation,
                "cortisol": self.cortisol,
                "mode": self.mode,
            },
            "gates": {
                "block_new_features": self.block_new_features,
                "require_wbc": list(self.require_wbc),
            },
        }


def find_workspace_root(start: Path | str | None = None, brain_root: str = "_brain_v1") -> Path:
    """
    Walk up from start until a directory containing brain_root is found.

    Raises:
        BrainRootNotFoundError: If no ancestor contains the brain root
    """
    start_path = Path(start or os.getcwd()).resolve()
    for candidate in (start_path, *start_path.parents):
        if (candidate / brain_root).exists():
            return candidate
    raise BrainRootNotFoundError(workspace_root=str(start_path), brain_root=brain_root)


def count_lines(content: str) -> int:
    """Line count as the scan defines it: 0 for empty text, else newline splits."""
    if not content:
        return 0
    return len(_NEWLINE_RE.split(content))


def scan_markdown(brain_root: Path, exclude_glob: str = "inf_*.md") -> MarkdownStats:
    """Total markdown files, lines and bytes below brain_root."""
    files = lines = size = 0
    exclude = exclude_glob.lower()

    for dirpath, dirnames, filenames in os.walk(brain_root):
        dirnames.sort()
        for name in sorted(filenames):
            lowered = name.lower()
            if not lowered.endswith(".md") or fnmatch.fnmatchcase(lowered, exclude):
                continue
            path = Path(dirpath) / name
            if path.is_symlink() or not path.is_file():
                continue

            try:
                data = path.read_bytes()
            except OSError as e:
                logger.warning("Skipping unreadable markdown file %s: %s", path, e)
                continue
            files += 1
            size += len(data)
            lines += count_lines(data.decode("utf-8", errors="replace"))

    return MarkdownStats(md_files=files, md_lines=lines, md_bytes=size)


def compute_inflammation(md_lines: int, scan: VitalsScanSettings | None = None) -> int:
    """0 = clean, 1 = bloated, 2 = toxic."""
    scan = scan or VitalsScanSettings()
    if md_lines > scan.toxic_lines:
        return 2
    if md_lines > scan.inflamed_lines:
        return 1
    return 0


def read_carried_state(raw: str | None) -> CarriedState:
    """Pull cortisol, mode and require_wbc out of an existing vitals document."""
    snapshot = project_vitals(parse_document(raw))
    cortisol = snapshot.cortisol if snapshot.cortisol is not None else 0
    mode = snapshot.mode
    if not mode:
        mode = STRESSED_MODE if cortisol >= 2 else DEFAULT_MODE
    return CarriedState(cortisol=cortisol, mode=mode, require_wbc=list(snapshot.gates.require_wbc))


def _iso_utc(now: datetime) -> str:
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _q(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_vitals_yaml(result: VitalsRefreshResult, settings: HomeostatSettings) -> str:
    """Render the vitals document for a refresh result."""
    brain_root = settings.brain_root
    require_block = (
        ["  require_wbc:", *[f"    - {_q(item)}" for item in result.require_wbc]]
        if result.require_wbc
        else ["  require_wbc: []"]
    )
    return "\n".join([
        "# VITALS",
        "# Current measured state (biomarkers / telemetry) for the Brain layer.",
        "# Machine-managed snapshot.",
        "#",
        "# Rules:",
        "# - Do not edit manually unless a protocol explicitly instructs it.",
        "# - Update only after running a WBC scan.",
        "#",
        "# Scope note:",
        f"# - This file describes the state of `{brain_root}` (the Brain layer), not the host repo codebase.",
        "#",
        "",
        "schema_version: 1",
        f"generated_at: {_q(result.generated_at)}",
        "",
        "scopes:",
        "  brain_md:",
        f"    root: {_q(brain_root)}",
        "    include:",
        '      - "**/*.md"',
        "    exclude:",
        f"      - {_q('**/' + settings.vitals_scan.exclude_glob)}",
        "  host_repo: null",
        "",
        "brain_vitals:",
        f"  last_scan_at: {_q(result.generated_at)}",
        f"  md_files: {result.stats.md_files}",
        f"  md_lines: {result.stats.md_lines}",
        f"  md_bytes: {result.stats.md_bytes}",
        "",
        "chemical_state:",
        f"  inflammation: {result.inflammation}   # [0=clean, 1=bloated, 2=toxic]",
        f"  cortisol: {result.cortisol}       # [0=calm, 1=focus, 2=stressed, 3=panic]",
        f"  mode: {result.mode} # [rest_digest, fight_flight, deep_focus]",
        "",
        "gates:",
        f"  block_new_features: {'true' if result.block_new_features else 'false'}",
        *require_block,
        "",
    ])


def refresh_vitals(
    start: Path | str | None = None,
    settings: HomeostatSettings | None = None,
    now: datetime | None = None,
) -> VitalsRefreshResult:
    """
    Run the WBC-1 scan and rewrite the vitals document.

    Args:
        start: Directory to start the workspace search from (default: cwd)
        settings: Settings to use (default: discovered from the workspace)
        now: Scan time (default: current UTC time)

    Returns:
        VitalsRefreshResult describing what was written

    Raises:
        BrainRootNotFoundError: If no brain root exists at or above start
        VitalsWriteError: If the document cannot be written
    """
    workspace_root = find_workspace_root(start, (settings or HomeostatSettings()).brain_root)
    if settings is None:
        settings = discover_settings(workspace_root)

    brain_path = workspace_root / settings.brain_root
    if not brain_path.is_dir():
        raise BrainRootNotFoundError(
            workspace_root=str(workspace_root),
            brain_root=settings.brain_root,
        )

    vitals_path = workspace_root / settings.vitals_path
    carried = read_carried_state(read_text_if_exists(vitals_path))
    stats = scan_markdown(brain_path, settings.vitals_scan.exclude_glob)
    inflammation = compute_inflammation(stats.md_lines, settings.vitals_scan)

    result = VitalsRefreshResult(
        workspace_root=str(workspace_root),
        vitals_path=str(vitals_path),
        generated_at=_iso_utc(now or datetime.now(UTC)),
        stats=stats,
        inflammation=inflammation,
        cortisol=carried.cortisol,
        mode=carried.mode,
        block_new_features=inflammation >= 2,
        require_wbc=carried.require_wbc,
    )

    try:
        atomic_write_text(vitals_path, render_vitals_yaml(result, settings))
    except OSError as e:
        raise VitalsWriteError(
            workspace_root=str(workspace_root),
            path=str(vitals_path),
            underlying_error=str(e),
        ) from e

    logger.info(
        "Vitals refreshed: %d files, %d lines, inflammation=%d",
        stats.md_files,
        stats.md_lines,
        inflammation,
    )
    return result
