"""
Configuration module for Homeostat.

Reads the two brain documents and turns them into typed views.

Key concepts:
    - ConfigParser: minimal, line-oriented parser for the small YAML
      subset the documents use (top-level scalars, one level of
      sections, scalar and list keys inside sections)
    - ConfigLoader: reads documents from disk, hashes them and projects
      them into MindsetConfig, ReflexSet and VitalsSnapshot

A missing document is a valid empty configuration, not an error.
"""

from homeostat.config.loader import ConfigLoader, resolve_workspace_root, sha256_hex
from homeostat.config.parser import ConfigParser, ParsedDocument, Section, parse_document

__all__ = [
    "ConfigLoader",
    "ConfigParser",
    "ParsedDocument",
    "Section",
    "parse_document",
    "resolve_workspace_root",
    "sha256_hex",
]
