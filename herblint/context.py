# Per-file run context handed to every rule, plus offset -> line/column helpers.

from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from herblint.findings.models import Location, Position

if TYPE_CHECKING:
    from herblint.directives import DirectiveSet


class LineIndex:
    """
    Maps character offsets in a source string to Positions.

    Lines are 1-based, columns are 0-based characters. Offsets past the end
    of the source clamp to the end.
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self._line_starts = [0]
        for index, char in enumerate(source):
            if char == "\n":
                self._line_starts.append(index + 1)

    @property
    def line_count(self) -> int:
        return len(self._line_starts)

    def position(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.source)))
        line_index = bisect_right(self._line_starts, offset) - 1
        return Position(line=line_index + 1, column=offset - self._line_starts[line_index])

    def location(self, start_offset: int, end_offset: int) -> Location:
        return Location(start=self.position(start_offset), end=self.position(end_offset))

    def line_start(self, line: int) -> int:
        """Character offset where 1-based `line` begins."""
        return self._line_starts[line - 1]


def position_from_offset(source: str, offset: int) -> Position:
    """One-off conversion; build a LineIndex when converting many offsets."""
    return LineIndex(source).position(offset)


@dataclass
class RunContext:
    """
    What a rule may know about the file it is checking.

    Rules read file_path and source, and the directive rules also consult
    directives and valid_rule_names (every name the registry knows about).
    """

    file_path: str
    source: str
    directives: Optional["DirectiveSet"] = None
    valid_rule_names: frozenset[str] = field(default_factory=frozenset)
    line_index: LineIndex = field(init=False)

    def __post_init__(self) -> None:
        self.line_index = LineIndex(self.source)

    def location_from_offsets(self, start_offset: int, end_offset: int) -> Location:
        return self.line_index.location(start_offset, end_offset)
