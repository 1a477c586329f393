# Templates end with exactly one newline.

from __future__ import annotations

import re
from typing import Optional

from herblint.context import RunContext
from herblint.findings.models import Offense, Severity, SourceFix
from herblint.rules.base import SourceRule

_TRAILING_NEWLINES = re.compile(r"\n{2,}\Z")


class RequireTrailingNewlineRule(SourceRule):
    rule_name = "erb-require-trailing-newline"
    description = "Require a trailing newline at the end of the file"
    default_severity = Severity.ERROR
    safe_autofixable = True

    def check_source(self, source: str, context: RunContext) -> None:
        if not source:
            return
        end = len(source)
        if not source.endswith("\n"):
            self.add_offense_with_source_autofix(
                "File must end with a newline",
                self.location_from_offsets(end, end),
                end,
                end,
            )
            return
        extra = _TRAILING_NEWLINES.search(source)
        if extra:
            self.add_offense_with_source_autofix(
                "File must end with exactly one newline",
                self.location_from_offsets(extra.start() + 1, end),
                extra.start(),
                end,
            )

    def autofix_source(self, offense: Offense, source: str) -> Optional[str]:
        fix = offense.autofix_context
        if not isinstance(fix, SourceFix) or fix.end_offset > len(source):
            return None
        segment = source[fix.start_offset : fix.end_offset]
        if segment and set(segment) != {"\n"}:
            return None
        return source[: fix.start_offset] + "\n" + source[fix.end_offset :]
