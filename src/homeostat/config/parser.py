"""
Minimal indentation-based parser for the brain configuration documents.

The homeostasis and vitals documents use a tiny subset of YAML:

    generated_at: "2026-01-01T00:00:00Z"   # top-level scalar
    gates:                                  # top-level section
      block_new_features: false             # section scalar
      require_wbc:                          # section list
        - "wbc_1"                           # list item

Only three indentation levels are recognized: 0 (top level), 2 (section
key) and 4 or more (list items under the most recent section list key).
Tabs count as four spaces. A dash line at level 2 directly under a list
key is also accepted as an item.

Design Principles:
    - Fail open: lines that don't fit the subset are skipped, never raised
    - No domain knowledge: the loader projects the tree into typed views
    - Deterministic: the same text always gives an equal tree
"""

import re
from dataclasses import dataclass, field

Scalar = bool | int | str

_KEY_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\s*:\s*(.*)$")
_ITEM_RE = re.compile(r"^-+\s*(.+?)\s*$")
_INLINE_COMMENT_RE = re.compile(r"\s+#")
_INTEGER_RE = re.compile(r"^[-+]?\d+$")

BOM = "\ufeff"

SECTION_INDENT = 2
ITEM_INDENT = 4


@dataclass
class Section:
    """
    A named top-level block.

    Attributes:
        scalars: Key/value pairs at section level
        lists: List fields; an empty list means present-but-empty
    """

    scalars: dict[str, Scalar] = field(default_factory=dict)
    lists: dict[str, list[str]] = field(default_factory=dict)

    def scalar(self, key: str) -> Scalar | None:
        return self.scalars.get(key)

    def get_list(self, key: str) -> list[str]:
        return list(self.lists.get(key, []))

    def has_list(self, key: str) -> bool:
        return key in self.lists


@dataclass
class ParsedDocument:
    """
    Generic tree produced by ConfigParser.

    Attributes:
        scalars: Top-level key/value pairs
        sections: Top-level named sections
    """

    scalars: dict[str, Scalar] = field(default_factory=dict)
    sections: dict[str, Section] = field(default_factory=dict)

    def scalar(self, key: str) -> Scalar | None:
        return self.scalars.get(key)

    def section(self, name: str) -> Section:
        """Return the named section, or an empty one if it is absent."""
        return self.sections.get(name) or Section()


def strip_inline_comment(value: str) -> str:
    """Remove a trailing "  # comment" from a value."""
    if value.lstrip().startswith("#"):
        return ""
    return _INLINE_COMMENT_RE.split(value, maxsplit=1)[0].strip()


def clean_value(raw: str) -> tuple[str, bool]:
    """
    Strip comments and wrapping quotes from a raw value.

    A quoted value keeps any "#" inside the quotes.

    Returns:
        Tuple of (text, was_quoted)
    """
    value = raw.strip()
    if value[:1] in ("'", '"'):
        quote = value[0]
        end = value.find(quote, 1)
        if end != -1:
            rest = value[end + 1 :].strip()
            if not rest or rest.startswith("#"):
                return value[1:end], True

    value = strip_inline_comment(value)
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1], True
    return value, False


def coerce_scalar(raw: str) -> Scalar:
    """
    Turn a raw value into a bool, int or trimmed string.

    Quoted values are always strings.
    """
    value, quoted = clean_value(raw)
    if quoted:
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    if _INTEGER_RE.match(value):
        return int(value)
    return value


def _flow_list_items(value: str) -> list[str] | None:
    """Parse a one-line "[a, 'b']" list, or return None if value isn't one."""
    if not (value.startswith("[") and value.endswith("]")):
        return None
    inner = value[1:-1].strip()
    if not inner:
        return []
    items = []
    for part in inner.split(","):
        item, _ = clean_value(part)
        if item:
            items.append(item)
    return items


class ConfigParser:
    """
    State machine over (indent level, current section, current list key).

    Usage:
        doc = ConfigParser().parse(text)
        doc.section("gates").scalar("block_new_features")
    """

    def parse(self, text: str | None) -> ParsedDocument:
        """
        Parse configuration text into a ParsedDocument.

        Args:
            text: Raw document text (None is treated as empty)

        Returns:
            The parsed tree; never raises on malformed input
        """
        doc = ParsedDocument()
        section: Section | None = None
        list_key: str | None = None

        # A leading byte order mark would hide the first key
        for raw_line in (text or "").removeprefix(BOM).splitlines():
            line = raw_line.replace("\t", "    ").rstrip()
            trimmed = line.strip()
            if not trimmed or trimmed.startswith("#"):
                continue

            indent = len(line) - len(line.lstrip())

            if indent == 0:
                list_key = None
                match = _KEY_RE.match(trimmed)
                if not match:
                    continue
                key, rest = match.groups()
                if not strip_inline_comment(rest):
                    section = doc.sections.setdefault(key, Section())
                else:
                    doc.scalars[key] = coerce_scalar(rest)
                    section = None
                continue

            if section is None:
                continue

            if indent == SECTION_INDENT:
                if trimmed.startswith("-"):
                    if list_key is not None:
                        self._append_item(section, list_key, trimmed)
                    continue
                list_key = self._parse_section_key(section, trimmed)
                continue

            if indent >= ITEM_INDENT and list_key is not None:
                self._append_item(section, list_key, trimmed)

        return doc

    def _parse_section_key(self, section: Section, trimmed: str) -> str | None:
        """Record a section-level key; return it if it opens a list."""
        match = _KEY_RE.match(trimmed)
        if not match:
            return None
        key, rest = match.groups()
        value = strip_inline_comment(rest)

        if not value:
            section.scalars.pop(key, None)
            section.lists.setdefault(key, [])
            return key

        items = _flow_list_items(value)
        if items is not None:
            section.scalars.pop(key, None)
            section.lists[key] = items
            return None

        section.lists.pop(key, None)
        section.scalars[key] = coerce_scalar(rest)
        return None

    def _append_item(self, section: Section, list_key: str, trimmed: str) -> None:
        match = _ITEM_RE.match(trimmed)
        if not match:
            return
        item, _ = clean_value(match.group(1))
        if item:
            section.lists.setdefault(list_key, []).append(item)


def parse_document(text: str | None) -> ParsedDocument:
    """Parse configuration text with a fresh ConfigParser."""
    return ConfigParser().parse(text)
