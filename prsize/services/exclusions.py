"""Glob based exclusion of files from the change count."""

import re
from collections.abc import Iterable
from functools import lru_cache
from logging import getLogger

from prsize.models import FileChangeStat

logger = getLogger(__name__)


def _find_closing_brace(pattern: str, start: int) -> tuple[int, list[str]] | None:
    """Locate the ``}`` matching the ``{`` at ``start`` and split its body on top level commas."""
    depth = 0
    alternatives: list[str] = []
    current = start + 1
    i = start + 1
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            if depth == 0:
                alternatives.append(pattern[current:i])
                return i, alternatives
            depth -= 1
        elif char == "," and depth == 0:
            alternatives.append(pattern[current:i])
            current = i + 1
        i += 1
    return None


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternation into plain glob patterns.

    Alternatives may contain ``/`` and nest. An escaped or unbalanced ``{``
    stays a literal character.
    """
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "\\":
            i += 2
            continue
        if char == "{":
            found = _find_closing_brace(pattern, i)
            if found is not None:
                end, alternatives = found
                prefix, suffix = pattern[:i], pattern[end + 1 :]
                expanded: list[str] = []
                for alternative in alternatives:
                    expanded.extend(expand_braces(prefix + alternative + suffix))
                return expanded
        i += 1
    return [pattern]


def _translate_class(body: str) -> str:
    negate = body[:1] in ("!", "^")
    if negate:
        body = body[1:]

    parts: list[str] = []
    i = 0
    while i < len(body):
        char = body[i]
        if char == "\\" and i + 1 < len(body):
            parts.append(re.escape(body[i + 1]))
            i += 2
            continue
        parts.append("-" if char == "-" else re.escape(char))
        i += 1

    # A class never matches the path separator
    return f"(?!/)[{'^' if negate else ''}{''.join(parts)}]"


def _translate_segment(segment: str) -> str:
    """Translate a single path segment of a glob into a regular expression."""
    parts: list[str] = []
    i = 0
    n = len(segment)
    while i < n:
        char = segment[i]
        i += 1
        if char == "\\":
            if i < n:
                parts.append(re.escape(segment[i]))
                i += 1
            else:
                parts.append(re.escape(char))
        elif char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = i
            if end < n and segment[end] in "!^":
                end += 1
            if end < n and segment[end] == "]":
                end += 1
            while end < n and segment[end] != "]":
                end += 2 if segment[end] == "\\" else 1
            if end >= n:
                # No closing bracket, treat it literally
                parts.append(re.escape(char))
                continue
            parts.append(_translate_class(segment[i:end]))
            i = end + 1
        else:
            parts.append(re.escape(char))
    return "".join(parts)


def _translate(pattern: str) -> str:
    segments = pattern.split("/")
    regex = ""
    for index, segment in enumerate(segments):
        is_last = index == len(segments) - 1
        if segment == "**":
            # Trailing ** swallows the rest of the path, inner ** any number of directories
            regex += ".*" if is_last else "(?:[^/]*/)*"
            continue
        regex += _translate_segment(segment)
        if not is_last:
            regex += "/"
    return regex


@lru_cache(maxsize=256)
def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a doublestar style glob into a regular expression.

    ``*``, ``?`` and ``[...]`` never cross a ``/``. A ``**`` segment matches
    zero or more whole directories, so ``vendor/**`` matches everything below
    ``vendor`` and ``**/*.lock`` matches lock files at any depth.
    ``{a,b}`` matches either alternative and ``\\x`` matches ``x`` literally.

    Args:
        pattern: Glob pattern using ``/`` as separator

    Returns:
        Compiled regular expression matching the full path
    """
    regex = "|".join(f"(?:{_translate(alternative)})" for alternative in expand_braces(pattern))
    return re.compile(f"(?s:{regex})\\Z")


def is_excluded(path: str, patterns: Iterable[str]) -> str | None:
    """Return the first pattern matching ``path``, or None."""
    for pattern in patterns:
        if compile_glob(pattern).match(path):
            return pattern
    return None


def filter_excluded(stats: Iterable[FileChangeStat], patterns: list[str]) -> list[FileChangeStat]:
    """Drop the stats of every file matching one of the exclusion patterns.

    Args:
        stats: Per-file change statistics
        patterns: Glob patterns, an empty list keeps every file

    Returns:
        Remaining stats in input order
    """
    if not patterns:
        return list(stats)

    kept: list[FileChangeStat] = []
    for stat in stats:
        matched = is_excluded(stat.path, patterns)
        if matched is not None:
            logger.info(f"Excluded file: {stat.path} (matched {matched})")
            continue
        kept.append(stat)
    return kept
