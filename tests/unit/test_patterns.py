"""
Unit tests for reflex pattern matching.

Tests cover:
- Path globs: *, **, ?, literal characters
- Basename-anywhere semantics for patterns without a separator
- Command wildcards and substring matching
- Blank patterns
"""

import pytest

from homeostat.policy.patterns import (
    compile_command_pattern,
    compile_path_pattern,
    glob_to_regex,
    matches_command_pattern,
    matches_path_pattern,
)


# =============================================================================
# Path Globs
# =============================================================================


class TestPathGlobs:
    """Tests for path glob matching."""

    def test_single_star_stays_in_segment(self) -> None:
        """* does not cross a separator."""
        assert matches_path_pattern("src/app.py", "src/*.py")
        assert not matches_path_pattern("src/pkg/app.py", "src/*.py")

    def test_double_star_crosses_segments(self) -> None:
        """** matches any number of segments."""
        assert matches_path_pattern("_brain_v1/a/b/c.md", "_brain_v1/**")
        assert matches_path_pattern("_brain_v1/homeostasis.yaml", "_brain_v1/**")

    def test_trailing_double_star_matches_directory_itself(self) -> None:
        """dir/** also matches dir."""
        assert matches_path_pattern("_brain_v1", "_brain_v1/**")
        assert not matches_path_pattern("_brain_v10/x", "_brain_v1/**")

    def test_leading_double_star_matches_zero_segments(self) -> None:
        """**/x matches x at the root."""
        assert matches_path_pattern("db.secret", "**/*.secret")
        assert matches_path_pattern("config/db.secret", "**/*.secret")
        assert matches_path_pattern("a/b/c/db.secret", "**/*.secret")

    def test_middle_double_star(self) -> None:
        """a/**/b matches zero or more segments between."""
        assert matches_path_pattern("docs/guide.md", "docs/**/guide.md")
        assert matches_path_pattern("docs/x/y/guide.md", "docs/**/guide.md")

    def test_question_mark(self) -> None:
        """? is one non-separator character."""
        assert matches_path_pattern("src/a.py", "src/?.py")
        assert not matches_path_pattern("src/ab.py", "src/?.py")
        assert not matches_path_pattern("src//.py", "src/?.py")

    def test_regex_metacharacters_literal(self) -> None:
        """Dots, plus signs and brackets are literal."""
        assert matches_path_pattern("a+b.txt", "a+b.txt")
        assert not matches_path_pattern("aab.txt", "a+b.txt")
        assert not matches_path_pattern("configXsecret", "config.secret")

    def test_suffix_not_matched(self) -> None:
        """Matching is anchored at both ends."""
        assert not matches_path_pattern("config/db.secret.txt", "**/*.secret")

    def test_backslashes_normalized(self) -> None:
        """Windows separators are treated as /."""
        assert matches_path_pattern("config\\db.secret", "**/*.secret")

    def test_dot_slash_prefix_ignored(self) -> None:
        """./ on either side is ignored."""
        assert matches_path_pattern("./src/app.py", "src/*.py")
        assert matches_path_pattern("src/app.py", "./src/*.py")

    def test_compiled_regex_cached(self) -> None:
        """The same glob compiles to the same object."""
        assert glob_to_regex("src/**") is glob_to_regex("src/**")


class TestBasenameAnywhere:
    """A pattern without a separator matches the basename at any depth."""

    @pytest.mark.parametrize("path", [".env", "app/.env", "a/b/.env"])
    def test_bare_filename(self, path: str) -> None:
        """Bare filename matches at every depth."""
        assert matches_path_pattern(path, ".env")

    @pytest.mark.parametrize("path", ["key.pem", "certs/key.pem", "a/b/c/key.pem"])
    def test_bare_glob(self, path: str) -> None:
        """Bare glob matches basenames at every depth."""
        assert matches_path_pattern(path, "*.pem")

    def test_bare_filename_no_partial(self) -> None:
        """The basename must match whole."""
        assert not matches_path_pattern("app/.env.example", ".env")


class TestBlankPathPatterns:
    """Empty patterns never match."""

    @pytest.mark.parametrize("pattern", ["", "   "])
    def test_blank(self, pattern: str) -> None:
        """Blank pattern matches nothing."""
        assert not matches_path_pattern("anything", pattern)
        assert not matches_path_pattern("", pattern)


# =============================================================================
# Command Wildcards
# =============================================================================


class TestCommandWildcards:
    """Tests for command wildcard matching."""

    def test_wildcard_anchored(self) -> None:
        """With *, the whole command must match."""
        assert matches_command_pattern("rm -rf /tmp/x", "rm -rf *")
        assert not matches_command_pattern("echo rm -rf /tmp/x", "rm -rf *")

    def test_wildcard_case_insensitive(self) -> None:
        """Wildcard match ignores case."""
        assert matches_command_pattern("RM -RF /", "rm -rf *")

    def test_wildcard_crosses_everything(self) -> None:
        """* matches slashes, spaces and newlines."""
        assert matches_command_pattern("sudo a/b c\nd", "sudo *")

    def test_wildcard_metacharacters_literal(self) -> None:
        """Regex characters in the pattern are literal."""
        assert matches_command_pattern("git push origin +main", "git push * +main")
        assert not matches_command_pattern("curl x|sh", "curl x.sh*")

    def test_substring_without_star(self) -> None:
        """Without *, containment anywhere matches."""
        assert matches_command_pattern("cd repo && git push --force origin", "git push --force")
        assert matches_command_pattern("GIT PUSH --FORCE", "git push --force")
        assert not matches_command_pattern("git push", "git push --force")

    @pytest.mark.parametrize("pattern", ["", "  "])
    def test_blank(self, pattern: str) -> None:
        """Blank pattern matches nothing."""
        assert not matches_command_pattern("rm -rf /", pattern)


class TestCompiledPredicates:
    """compile_* return reusable predicates."""

    def test_path_predicate(self) -> None:
        """Path predicate applies the glob."""
        is_secret = compile_path_pattern("**/*.secret")
        assert is_secret("x/y.secret")
        assert not is_secret("x/y.txt")

    def test_command_predicate(self) -> None:
        """Command predicate applies the wildcard."""
        is_rm = compile_command_pattern("rm -rf *")
        assert is_rm("rm -rf /")
        assert not is_rm("ls -la")
