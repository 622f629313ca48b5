"""
Pattern matching for reflexes.

Two dialects:

Path globs (sensory, motor):
    **     any sequence, including "/"; "**/" and "/**" also match zero segments
    *      any sequence without "/"
    ?      exactly one character other than "/"
    A pattern without "/" matches the basename at any depth, so
    ".env" matches ".env", "app/.env" and "a/b/.env".

Command wildcards (inhibition):
    With "*": anchored, case-insensitive, "*" matches any run of characters.
    Without "*": case-insensitive substring containment.

Empty or blank patterns never match.
"""

import re
from functools import lru_cache
from typing import Callable

Matcher = Callable[[str], bool]


def normalize_path_sep(path: str) -> str:
    """Use forward slashes regardless of platform."""
    return str(path or "").replace("\\", "/")


def _strip_dot_prefix(path: str) -> str:
    while path.startswith("./"):
        path = path[2:]
    return path


@lru_cache(maxsize=256)
def glob_to_regex(glob: str) -> re.Pattern[str]:
    """
    Compile a path glob into an anchored regex.

    Examples:
        "_brain_v1/**"   -> ^_brain_v1(?:/.*)?$
        "**/*.secret"    -> ^(?:.*/)?[^/]*\\.secret$
        "src/?.py"       -> ^src/[^/]\\.py$
    """
    g = _strip_dot_prefix(normalize_path_sep(glob.strip()))
    parts = ["^"]
    i = 0
    n = len(g)
    while i < n:
        ch = g[i]
        if ch == "*":
            if g.startswith("**", i):
                i += 2
                if i < n and g[i] == "/":
                    parts.append("(?:.*/)?")
                    i += 1
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")
        elif ch == "/" and g[i + 1 :] == "**":
            parts.append("(?:/.*)?")
            break
        elif ch == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(ch))
        i += 1
    parts.append("$")
    return re.compile("".join(parts), re.DOTALL)


def matches_path_pattern(rel_path: str, pattern: str) -> bool:
    """
    Check a workspace-relative path against a path glob.

    Args:
        rel_path: Candidate path (forward or back slashes)
        pattern: Glob pattern

    Returns:
        True if the pattern accepts the path
    """
    pat = normalize_path_sep(str(pattern or "").strip())
    if not pat:
        return False
    rel = _strip_dot_prefix(normalize_path_sep(rel_path))

    if "/" not in pat:
        basename = rel.rsplit("/", 1)[-1] or rel
        if basename == pat:
            return True
        if glob_to_regex(f"**/{pat}").match(rel):
            return True

    return bool(glob_to_regex(pat).match(rel))


@lru_cache(maxsize=256)
def wildcard_to_regex(pattern: str) -> re.Pattern[str]:
    """Compile a command wildcard: "*" is any run, all else literal."""
    body = ".*".join(re.escape(part) for part in pattern.split("*"))
    return re.compile(f"^{body}$", re.IGNORECASE | re.DOTALL)


def matches_command_pattern(command: str, pattern: str) -> bool:
    """
    Check a command string against a command wildcard.

    Args:
        command: Candidate command (or concatenated tool call text)
        pattern: Wildcard or plain substring

    Returns:
        True if the pattern accepts the command
    """
    pat = str(pattern or "").strip()
    if not pat:
        return False
    cmd = str(command or "")
    if "*" in pat:
        return bool(wildcard_to_regex(pat).match(cmd))
    return pat.lower() in cmd.lower()


def compile_path_pattern(pattern: str) -> Matcher:
    """Return a predicate for one path glob."""
    return lambda path: matches_path_pattern(path, pattern)


def compile_command_pattern(pattern: str) -> Matcher:
    """Return a predicate for one command wildcard."""
    return lambda command: matches_command_pattern(command, pattern)
