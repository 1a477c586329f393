# Per-file and cross-file lint outcomes, read by the reporters.

from __future__ import annotations

from typing import Iterable, Optional

from pydantic import BaseModel, Field

from herblint.findings.models import Offense, Severity


class LintResult(BaseModel):
    """
    Outcome of linting one file.

    offenses holds what is still open; fixed_offenses holds what the autofixer
    resolved, so the two are never confused. ignored marks a file skipped by a
    `herb:linter ignore` directive, parse_failed a file that never got a tree.
    """

    file_path: str
    source: str
    offenses: list[Offense] = Field(default_factory=list)
    fixed_offenses: list[Offense] = Field(default_factory=list)
    ignored_count: int = 0
    ignored: bool = False
    parse_failed: bool = False

    model_config = {"arbitrary_types_allowed": True}

    @property
    def fixed_count(self) -> int:
        return len(self.fixed_offenses)

    @property
    def offense_count(self) -> int:
        return len(self.offenses)

    def count(self, severity: Severity) -> int:
        return sum(1 for offense in self.offenses if offense.severity == severity)

    @property
    def error_count(self) -> int:
        return self.count(Severity.ERROR)

    @property
    def warning_count(self) -> int:
        return self.count(Severity.WARNING)

    def autofixable_count(self, unsafe: bool = False) -> int:
        return sum(1 for offense in self.offenses if offense.autofixable(unsafe))


class AggregatedResult(BaseModel):
    """Roll-up of every LintResult in one run, plus the run-level status."""

    results: list[LintResult] = Field(default_factory=list)
    rule_count: int = 0
    completed: bool = True
    message: Optional[str] = None

    model_config = {"arbitrary_types_allowed": True}

    @classmethod
    def skipped(cls, message: str) -> "AggregatedResult":
        """A run that never touched any file (e.g. linting disabled in config)."""
        return cls(results=[], rule_count=0, completed=False, message=message)

    @classmethod
    def from_results(cls, results: Iterable[LintResult], rule_count: int) -> "AggregatedResult":
        ordered = sorted(results, key=lambda result: result.file_path)
        return cls(results=ordered, rule_count=rule_count)

    def merge(self, other: "AggregatedResult") -> "AggregatedResult":
        return AggregatedResult.from_results(
            [*self.results, *other.results],
            rule_count=max(self.rule_count, other.rule_count),
        )

    @property
    def file_count(self) -> int:
        return len(self.results)

    @property
    def offense_count(self) -> int:
        return sum(result.offense_count for result in self.results)

    def count_by_severity(self) -> dict[Severity, int]:
        counts = {severity: 0 for severity in Severity}
        for result in self.results:
            for offense in result.offenses:
                counts[offense.severity] += 1
        return counts

    @property
    def error_count(self) -> int:
        return self.count_by_severity()[Severity.ERROR]

    @property
    def warning_count(self) -> int:
        return self.count_by_severity()[Severity.WARNING]

    @property
    def info_count(self) -> int:
        return self.count_by_severity()[Severity.INFO]

    @property
    def hint_count(self) -> int:
        return self.count_by_severity()[Severity.HINT]

    @property
    def files_with_offenses_count(self) -> int:
        return sum(1 for result in self.results if result.offenses)

    def autofixable_count(self, unsafe: bool = False) -> int:
        return sum(result.autofixable_count(unsafe) for result in self.results)

    @property
    def fixed_count(self) -> int:
        return sum(result.fixed_count for result in self.results)

    @property
    def ignored_count(self) -> int:
        return sum(result.ignored_count for result in self.results)
