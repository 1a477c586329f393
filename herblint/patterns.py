# Glob-based file scoping for the whole run and for individual rules.

from __future__ import annotations

import fnmatch
from typing import Iterable, Sequence

from herblint.errors import ConfigurationError


def validate_pattern(pattern: str) -> str:
    """Return pattern unchanged, or raise ConfigurationError if it cannot be used."""
    if not pattern or not pattern.strip():
        raise ConfigurationError("glob pattern must not be empty")
    if pattern.count("[") != pattern.count("]"):
        raise ConfigurationError(f"glob pattern {pattern!r} has unbalanced brackets")
    depth = 0
    for char in pattern:
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                break
    if depth != 0:
        raise ConfigurationError(f"glob pattern {pattern!r} has unbalanced braces")
    return pattern


def expand_braces(pattern: str) -> list[str]:
    """Expand `{a,b}` alternatives: "*.{erb,html}" -> ["*.erb", "*.html"]."""
    start = pattern.find("{")
    if start < 0:
        return [pattern]
    depth = 0
    for index in range(start, len(pattern)):
        if pattern[index] == "{":
            depth += 1
        elif pattern[index] == "}":
            depth -= 1
            if depth == 0:
                end = index
                break
    else:
        return [pattern]

    options: list[str] = []
    depth = 0
    current = ""
    for char in pattern[start + 1 : end]:
        if char == "," and depth == 0:
            options.append(current)
            current = ""
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        current += char
    options.append(current)

    prefix, suffix = pattern[:start], pattern[end + 1 :]
    expanded: list[str] = []
    for option in options:
        expanded.extend(expand_braces(prefix + option + suffix))
    return expanded


def normalize_pattern(pattern: str) -> str:
    """Patterns ending in `**` match every file below: "app/**" -> "app/**/*"."""
    if pattern.endswith("**"):
        return pattern + "/*"
    return pattern


def normalize_path(path: str) -> str:
    path = str(path).replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return path


def _match_parts(path_parts: Sequence[str], pattern_parts: Sequence[str]) -> bool:
    if not pattern_parts:
        return not path_parts
    head, rest = pattern_parts[0], pattern_parts[1:]
    if head == "**":
        return any(_match_parts(path_parts[index:], rest) for index in range(len(path_parts) + 1))
    if not path_parts:
        return False
    return fnmatch.fnmatchcase(path_parts[0], head) and _match_parts(path_parts[1:], rest)


def glob_match(path: str, pattern: str) -> bool:
    """
    Match a slash-separated path against a glob.

    `*`, `?` and `[...]` never cross a `/`; a `**` segment spans zero or more
    directories.
    """
    path_parts = normalize_path(path).split("/")
    for expanded in expand_braces(normalize_pattern(pattern)):
        if _match_parts(path_parts, normalize_path(expanded).split("/")):
            return True
    return False


class PatternMatcher:
    """
    Decides whether a file path is in scope.

    1. With `only` patterns the path must match one of them.
    2. Otherwise, with `includes`, the path must match one of those.
    3. A path matching any `excludes` pattern is rejected.
    4. With no patterns at all every path matches.
    """

    def __init__(
        self,
        includes: Iterable[str] = (),
        excludes: Iterable[str] = (),
        only: Iterable[str] = (),
    ) -> None:
        self.includes = [validate_pattern(pattern) for pattern in includes]
        self.excludes = [validate_pattern(pattern) for pattern in excludes]
        self.only = [validate_pattern(pattern) for pattern in only]

    def __repr__(self) -> str:
        return f"PatternMatcher(includes={self.includes!r}, excludes={self.excludes!r}, only={self.only!r})"

    @property
    def empty(self) -> bool:
        return not (self.includes or self.excludes or self.only)

    def match(self, path: str) -> bool:
        if self.only:
            if not any(glob_match(path, pattern) for pattern in self.only):
                return False
        elif self.includes:
            if not any(glob_match(path, pattern) for pattern in self.includes):
                return False
        return not any(glob_match(path, pattern) for pattern in self.excludes)
