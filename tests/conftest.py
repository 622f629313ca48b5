"""
Pytest configuration and fixtures for Homeostat tests.

This module provides shared fixtures used across unit, integration,
and security tests.
"""

import tempfile
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Generator

import pytest

from homeostat.settings import (
    DEFAULT_BOOTSTRAP_PATHS,
    HOMEOSTASIS_REL_PATH,
    VITALS_REL_PATH,
)

FIXED_NOW = datetime(2026, 3, 15, 12, 0, 0, tzinfo=UTC)


def iso_days_ago(days: float, now: datetime = FIXED_NOW) -> str:
    """ISO-8601 timestamp `days` before now, in the Z form the scan writes."""
    return (now - timedelta(days=days)).isoformat().replace("+00:00", "Z")


class WorkspaceBuilder:
    """Writes brain documents into a temporary workspace."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def write(self, rel_path: str, content: str) -> Path:
        path = self.root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def homeostasis(self, content: str) -> Path:
        return self.write(HOMEOSTASIS_REL_PATH, content)

    def vitals(self, content: str) -> Path:
        return self.write(VITALS_REL_PATH, content)

    def bootstrap(self) -> None:
        """Create every bootstrap file that does not exist yet."""
        for rel_path in DEFAULT_BOOTSTRAP_PATHS:
            path = self.root / rel_path
            if not path.exists():
                self.write(rel_path, "# placeholder\n")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def workspace(temp_dir: Path) -> WorkspaceBuilder:
    """An empty workspace rooted at temp_dir."""
    return WorkspaceBuilder(temp_dir)


@pytest.fixture
def sample_homeostasis_yaml() -> str:
    """Homeostasis document with all three reflex categories."""
    return """# HOMEOSTASIS
MINDSET:
  mode: surgeon      # [architect, surgeon]
  caution: high
  focus: "hooks"

REFLEXES:
  sensory:
    - "**/*.secret"
    - .env
  motor:
    - "_brain_v1/**"
  inhibition:
    - "rm -rf *"
    - git push --force
"""


@pytest.fixture
def fresh_vitals_yaml() -> str:
    """Vitals document generated one day before FIXED_NOW with no alerts."""
    return f"""schema_version: 1
generated_at: "{iso_days_ago(1)}"

brain_vitals:
  last_scan_at: "{iso_days_ago(1)}"
  md_files: 12
  md_lines: 800
  md_bytes: 24000

chemical_state:
  inflammation: 0   # [0=clean, 1=bloated, 2=toxic]
  cortisol: 0       # [0=calm, 1=focus, 2=stressed, 3=panic]
  mode: rest_digest # [rest_digest, fight_flight, deep_focus]

gates:
  block_new_features: false
  require_wbc: []
"""


@pytest.fixture
def healthy_workspace(
    workspace: WorkspaceBuilder,
    sample_homeostasis_yaml: str,
    fresh_vitals_yaml: str,
) -> WorkspaceBuilder:
    """Workspace with both documents and all bootstrap files present."""
    workspace.homeostasis(sample_homeostasis_yaml)
    workspace.vitals(fresh_vitals_yaml)
    workspace.bootstrap()
    return workspace


@pytest.fixture
def now() -> datetime:
    """Fixed wall clock used by time-dependent tests."""
    return FIXED_NOW


@pytest.fixture
def days_ago():
    """Factory for ISO timestamps relative to the fixed clock."""
    return iso_days_ago
