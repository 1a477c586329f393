# Inline suppression comments: `<%# herb:disable ... %>`, `<%# herb:enable ... %>`
# and `<%# herb:linter ignore %>`.
#
# DirectiveParser walks the ERB comments of a tree once and produces a
# DirectiveSet that the Linter consults read-only. parse_disable_comment is
# also used by the directive hygiene rules, which need to see malformed
# comments the parser itself drops.

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from herblint.findings.models import Location, Position
from herblint.tree import NodeKind, SyntaxTree

logger = logging.getLogger(__name__)

HERB_DISABLE_PREFIX = "herb:disable"
ALL_RULES = "all"

DIRECTIVE_PATTERN = re.compile(r"\Aherb:(disable|enable)\s+(.*)\Z", re.DOTALL)
IGNORE_PATTERN = re.compile(r"\Aherb:(\w+)\s+ignore\Z")
RULE_NAME_PATTERN = re.compile(r"[^,\s]+")

TOOL_MODES = ("linter", "formatter")


class DirectiveType(str, Enum):
    DISABLE = "disable"
    ENABLE = "enable"
    IGNORE_FILE = "ignore_file"


class DirectiveScope(str, Enum):
    NEXT_LINE = "next_line"
    RANGE_END = "range_end"
    FILE = "file"


@dataclass(frozen=True)
class Directive:
    """One parsed suppression instruction. An empty rules set means every rule."""

    type: DirectiveType
    rules: frozenset[str]
    line: int
    scope: DirectiveScope

    def covers(self, rule_name: Optional[str]) -> bool:
        return not self.rules or rule_name is None or rule_name in self.rules


@dataclass(frozen=True)
class DisableRuleName:
    """
    A rule name inside a disable comment; offset is relative to the comment content.

    entry counts the commas before the name, so names sharing an entry were
    separated by whitespace only.
    """

    name: str
    offset: int
    length: int
    entry: int = 0


@dataclass(frozen=True)
class DisableComment:
    """
    A `herb:disable` comment as written, including malformed ones.

    match is False when the prefix is not followed by whitespace
    (`herb:disableall`). rules_string is the raw text after the prefix, or
    None for a bare `herb:disable`.
    """

    match: bool
    rule_names: tuple[str, ...]
    rule_name_details: tuple[DisableRuleName, ...]
    rules_string: Optional[str]
    content: str
    content_location: Location
    line: int

    @property
    def disables_all(self) -> bool:
        return ALL_RULES in self.rule_names

    @property
    def unseparated(self) -> tuple[DisableRuleName, ...]:
        """Names written without a comma between them (`a b`); suppression reads them as one name."""
        entries = [detail.entry for detail in self.rule_name_details]
        return tuple(detail for detail in self.rule_name_details if entries.count(detail.entry) > 1)

    @property
    def separated(self) -> tuple[DisableRuleName, ...]:
        unseparated = self.unseparated
        return tuple(detail for detail in self.rule_name_details if detail not in unseparated)

    def offset_location(self, detail: DisableRuleName) -> Location:
        """Location of one rule name inside the comment."""
        start = self.content_location.start
        before = self.content[: detail.offset]
        newlines = before.count("\n")
        if newlines:
            line = start.line + newlines
            column = len(before) - (before.rfind("\n") + 1)
        else:
            line = start.line
            column = start.column + detail.offset
        return Location(
            start=Position(line=line, column=column),
            end=Position(line=line, column=column + detail.length),
        )


def is_disable_comment(content: str) -> bool:
    return content.strip().startswith(HERB_DISABLE_PREFIX)


def parse_disable_comment(content: str, content_location: Location, line: int) -> Optional[DisableComment]:
    """
    Parse the text between `<%#` and `%>`.

    Returns None unless the content starts with `herb:disable`.
    """
    stripped = content.strip()
    if not stripped.startswith(HERB_DISABLE_PREFIX):
        return None

    rest = stripped[len(HERB_DISABLE_PREFIX) :]
    if not rest:
        return DisableComment(True, (), (), None, content, content_location, line)
    if not rest[0].isspace():
        return DisableComment(False, (), (), rest, content, content_location, line)

    rules_string = rest[1:]
    rules_offset = content.index(stripped) + len(HERB_DISABLE_PREFIX) + 1
    details = tuple(
        DisableRuleName(
            name=match.group(0),
            offset=rules_offset + match.start(),
            length=len(match.group(0)),
            entry=rules_string.count(",", 0, match.start()),
        )
        for match in RULE_NAME_PATTERN.finditer(rules_string)
    )
    return DisableComment(
        match=True,
        rule_names=tuple(detail.name for detail in details),
        rule_name_details=details,
        rules_string=rules_string,
        content=content,
        content_location=content_location,
        line=line,
    )


def parse_rule_list(rule_list: str) -> Optional[frozenset[str]]:
    """
    Rule set named by a directive argument.

    `all` (alone or among other names) gives the empty set, meaning every
    rule. None means the list names nothing and no directive should exist.
    """
    names = [name.strip() for name in rule_list.split(",")]
    names = [name for name in names if name]
    if not names:
        return None
    if ALL_RULES in names:
        return frozenset()
    return frozenset(names)


@dataclass
class DirectiveSet:
    """All directives of one file."""

    directives: list[Directive] = field(default_factory=list)
    disable_comments: list[DisableComment] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._disables_by_target: dict[int, list[Directive]] = {}
        for directive in self.directives:
            if directive.type == DirectiveType.DISABLE:
                self._disables_by_target.setdefault(directive.line + 1, []).append(directive)

    @property
    def ignore_file(self) -> bool:
        return any(directive.type == DirectiveType.IGNORE_FILE for directive in self.directives)

    @property
    def disables(self) -> list[Directive]:
        return [directive for directive in self.directives if directive.type == DirectiveType.DISABLE]

    def disabled_at(self, line: int, rule_name: Optional[str] = None) -> bool:
        """
        True when a disable directive on the line before `line` covers `rule_name`.

        Only next-line suppression is evaluated; enable directives are
        recorded but never open or close a range.
        """
        return any(directive.covers(rule_name) for directive in self._disables_by_target.get(line, ()))


class DirectiveParser:
    """Collects directives from the ERB comments of a tree."""

    def __init__(self, mode: str = "linter") -> None:
        if mode not in TOOL_MODES:
            raise ValueError(f"unknown tool mode {mode!r}; expected one of {TOOL_MODES}")
        self.mode = mode

    def parse(self, tree: SyntaxTree) -> DirectiveSet:
        directives: list[Directive] = []
        disable_comments: list[DisableComment] = []

        for node in tree.walk():
            if node.kind != NodeKind.ERB_CONTENT or not tree.is_erb_comment(node):
                continue
            token = tree.erb_content_token(node)
            if token is None or node.location is None:
                continue
            content = tree.text_of(token)
            line = node.location.start.line

            directive = self._parse_comment(content.strip(), line)
            if directive is not None:
                directives.append(directive)

            comment = parse_disable_comment(content, token.location or node.location, line)
            if comment is not None:
                disable_comments.append(comment)

        logger.debug(
            "Collected %d directive(s) and %d disable comment(s)",
            len(directives),
            len(disable_comments),
        )
        return DirectiveSet(directives=directives, disable_comments=disable_comments)

    def _parse_comment(self, text: str, line: int) -> Optional[Directive]:
        ignore = IGNORE_PATTERN.match(text)
        if ignore and ignore.group(1) == self.mode:
            return Directive(DirectiveType.IGNORE_FILE, frozenset(), line, DirectiveScope.FILE)

        match = DIRECTIVE_PATTERN.match(text)
        if not match:
            return None
        rules = parse_rule_list(match.group(2))
        if rules is None:
            return None
        if match.group(1) == "disable":
            return Directive(DirectiveType.DISABLE, rules, line, DirectiveScope.NEXT_LINE)
        return Directive(DirectiveType.ENABLE, rules, line, DirectiveScope.RANGE_END)
