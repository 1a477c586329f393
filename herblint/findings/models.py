# Pydantic data models for lint findings: Severity, Position, Location, Offense
# and the two autofix context shapes.

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator


class Severity(str, Enum):
    """Offense severity, ordered from most to least important."""

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"
    HINT = "hint"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANKS[self]


_SEVERITY_RANKS = {
    Severity.ERROR: 4,
    Severity.WARNING: 3,
    Severity.INFO: 2,
    Severity.HINT: 1,
}


class Position(BaseModel):
    """A point in a template: 1-based line, 0-based character column."""

    line: int = Field(..., ge=1, description="1-based line number")
    column: int = Field(..., ge=0, description="0-based character column")

    model_config = {"frozen": True}

    def as_tuple(self) -> tuple[int, int]:
        return (self.line, self.column)


class Location(BaseModel):
    """A start/end span in a template. start never comes after end."""

    start: Position
    end: Position

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_order(self) -> "Location":
        if self.start.as_tuple() > self.end.as_tuple():
            raise ValueError(
                f"location start {self.start.as_tuple()} is after end {self.end.as_tuple()}"
            )
        return self

    @classmethod
    def from_coordinates(
        cls, line: int, column: int, end_line: int, end_column: int
    ) -> "Location":
        return cls(
            start=Position(line=line, column=column),
            end=Position(line=end_line, column=end_column),
        )


def _rule_allows_fix(rule: Any, unsafe: bool) -> bool:
    if getattr(rule, "safe_autofixable", False):
        return True
    return unsafe and getattr(rule, "unsafe_autofixable", False)


class NodeFix(BaseModel):
    """Fix anchored to a tree node; the owning rule mutates the tree in place."""

    kind: Literal["node"] = "node"
    rule: Any
    node_id: int = Field(..., ge=0)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    def autofixable(self, unsafe: bool = False) -> bool:
        return _rule_allows_fix(self.rule, unsafe)


class SourceFix(BaseModel):
    """Fix anchored to a half-open character range [start_offset, end_offset)."""

    kind: Literal["source"] = "source"
    rule: Any
    start_offset: int = Field(..., ge=0)
    end_offset: int = Field(..., ge=0)

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @model_validator(mode="after")
    def _check_range(self) -> "SourceFix":
        if self.start_offset > self.end_offset:
            raise ValueError("start_offset must not exceed end_offset")
        return self

    def autofixable(self, unsafe: bool = False) -> bool:
        return _rule_allows_fix(self.rule, unsafe)

    def overlaps(self, start: int, end: int) -> bool:
        """True when this range shares characters with [start, end), or both insert at one point."""
        if self.start_offset < end and start < self.end_offset:
            return True
        return self.start_offset == self.end_offset == start == end


AutofixContext = Annotated[Union[NodeFix, SourceFix], Field(discriminator="kind")]


class Offense(BaseModel):
    """A single diagnostic reported by a rule (e.g. missing alt text at line 3)."""

    rule_name: str
    message: str
    severity: Severity = Severity.WARNING
    location: Location
    autofix_context: Optional[AutofixContext] = None

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    @property
    def line(self) -> int:
        return self.location.start.line

    @property
    def column(self) -> int:
        return self.location.start.column

    def autofixable(self, unsafe: bool = False) -> bool:
        """True when a fix is attached and the owning rule allows it at this tier."""
        if self.autofix_context is None:
            return False
        return self.autofix_context.autofixable(unsafe)

    def sort_key(self) -> tuple[int, int, str]:
        return (self.line, self.column, self.rule_name)
