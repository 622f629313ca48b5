"""
Unit tests for the configuration parser.

Tests cover:
- Top-level scalars and sections
- Section scalars, block lists and inline lists
- Comments, quoting and scalar coercion
- Indentation rules and tab handling
- Fail-open handling of malformed lines
"""

from homeostat.config.parser import (
    ConfigParser,
    clean_value,
    coerce_scalar,
    parse_document,
    strip_inline_comment,
)


class TestScalarHandling:
    """Tests for value cleaning and coercion."""

    def test_strip_inline_comment(self) -> None:
        """Whitespace followed by # starts a comment."""
        assert strip_inline_comment("surgeon   # [architect, surgeon]") == "surgeon"

    def test_hash_without_whitespace_kept(self) -> None:
        """A # glued to the value is not a comment."""
        assert strip_inline_comment("issue#42") == "issue#42"

    def test_comment_only_value_is_empty(self) -> None:
        """A value that is only a comment is empty."""
        assert strip_inline_comment("# nothing here") == ""

    def test_quotes_removed(self) -> None:
        """Matching single or double quotes are removed."""
        assert clean_value('"hooks"') == ("hooks", True)
        assert clean_value("'hooks'") == ("hooks", True)

    def test_quoted_hash_kept(self) -> None:
        """A # inside quotes survives comment stripping."""
        assert clean_value('"a #1 focus"  # note') == ("a #1 focus", True)

    def test_booleans(self) -> None:
        """Exactly true/false become booleans."""
        assert coerce_scalar("true") is True
        assert coerce_scalar("false") is False
        assert coerce_scalar("True") == "True"

    def test_integers(self) -> None:
        """Integer-looking values become ints."""
        assert coerce_scalar("42") == 42
        assert coerce_scalar("-3") == -3
        assert coerce_scalar("4.5") == "4.5"

    def test_quoted_values_not_coerced(self) -> None:
        """Quoted values stay strings."""
        assert coerce_scalar('"true"') == "true"
        assert coerce_scalar("'7'") == "7"


class TestDocumentStructure:
    """Tests for the section/list tree."""

    def test_top_level_scalars(self) -> None:
        """Key with a value at indent 0 is a top-level scalar."""
        doc = parse_document('schema_version: 1\ngenerated_at: "2026-01-01T00:00:00Z"\n')
        assert doc.scalar("schema_version") == 1
        assert doc.scalar("generated_at") == "2026-01-01T00:00:00Z"

    def test_section_scalars(self) -> None:
        """Indent 2 keys belong to the open section."""
        doc = parse_document("MINDSET:\n  mode: surgeon\n  caution: high\n")
        section = doc.section("MINDSET")
        assert section.scalar("mode") == "surgeon"
        assert section.scalar("caution") == "high"

    def test_block_list(self) -> None:
        """Dash lines at indent >= 4 are items of the list key."""
        text = "REFLEXES:\n  motor:\n    - \"_brain_v1/**\"\n    - docs/*.md # pinned\n"
        doc = parse_document(text)
        assert doc.section("REFLEXES").get_list("motor") == ["_brain_v1/**", "docs/*.md"]

    def test_dash_at_section_indent(self) -> None:
        """A dash line at indent 2 under a list key is an item too."""
        doc = parse_document("REFLEXES:\n  sensory:\n  - .env\n  - \"*.pem\"\n")
        assert doc.section("REFLEXES").get_list("sensory") == [".env", "*.pem"]

    def test_empty_flow_list_present(self) -> None:
        """[] marks a list as present but empty."""
        doc = parse_document("gates:\n  require_wbc: []\n")
        gates = doc.section("gates")
        assert gates.has_list("require_wbc")
        assert gates.get_list("require_wbc") == []

    def test_inline_flow_list(self) -> None:
        """A one-line list yields its items."""
        doc = parse_document("REFLEXES:\n  inhibition: [\"rm -rf *\", 'sudo *']\n")
        assert doc.section("REFLEXES").get_list("inhibition") == ["rm -rf *", "sudo *"]

    def test_multiple_lists_in_section(self) -> None:
        """Each list key collects its own items."""
        text = (
            "REFLEXES:\n"
            "  sensory:\n"
            "    - a\n"
            "  motor:\n"
            "    - b\n"
            "    - c\n"
            "  inhibition:\n"
        )
        section = parse_document(text).section("REFLEXES")
        assert section.get_list("sensory") == ["a"]
        assert section.get_list("motor") == ["b", "c"]
        assert section.get_list("inhibition") == []

    def test_new_section_closes_list(self) -> None:
        """Items after a new top-level key don't leak into the old list."""
        text = "gates:\n  require_wbc:\n    - wbc_1\nother:\n    - stray\n"
        doc = parse_document(text)
        assert doc.section("gates").get_list("require_wbc") == ["wbc_1"]
        assert doc.section("other").lists == {}

    def test_last_write_wins(self) -> None:
        """A repeated scalar key keeps the last value."""
        doc = parse_document("MINDSET:\n  mode: a\n  mode: b\n")
        assert doc.section("MINDSET").scalar("mode") == "b"

    def test_missing_section_is_empty(self) -> None:
        """Asking for an absent section returns an empty one."""
        section = parse_document("").section("MINDSET")
        assert section.scalars == {}
        assert section.lists == {}

    def test_tabs_count_as_four_spaces(self) -> None:
        """A tab-indented dash line is an item."""
        doc = parse_document("REFLEXES:\n  motor:\n\t- secrets/**\n")
        assert doc.section("REFLEXES").get_list("motor") == ["secrets/**"]


class TestFailOpen:
    """Malformed input is skipped, never raised."""

    def test_none_text(self) -> None:
        """None parses as an empty document."""
        doc = ConfigParser().parse(None)
        assert doc.scalars == {}
        assert doc.sections == {}

    def test_garbage_lines_skipped(self) -> None:
        """Lines that aren't keys or items are ignored."""
        text = "!!! not yaml\nMINDSET:\n  ??? what\n  mode: surgeon\n   odd: indent\n"
        doc = parse_document(text)
        assert doc.section("MINDSET").scalars == {"mode": "surgeon"}

    def test_section_content_before_any_section(self) -> None:
        """Indented lines with no open section are ignored."""
        doc = parse_document("  mode: surgeon\n    - item\n")
        assert doc.scalars == {}
        assert doc.sections == {}

    def test_parse_is_deterministic(self, sample_homeostasis_yaml: str) -> None:
        """Parsing the same text twice gives equal trees."""
        assert parse_document(sample_homeostasis_yaml) == parse_document(sample_homeostasis_yaml)

    def test_leading_byte_order_mark(self) -> None:
        """A BOM before the first key is dropped."""
        doc = parse_document("\ufeffgenerated_at: x\nREFLEXES:\n  motor: [a]\n")
        assert doc.scalar("generated_at") == "x"
        assert doc.section("REFLEXES").get_list("motor") == ["a"]
