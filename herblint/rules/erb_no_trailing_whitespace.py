# Lines do not end in spaces or tabs.

from __future__ import annotations

import re
from typing import Optional

from herblint.context import RunContext
from herblint.findings.models import Offense, Severity, SourceFix
from herblint.rules.base import SourceRule

_TRAILING_WHITESPACE = re.compile(r"[ \t]+(?=\r?\n|\Z)")


class NoTrailingWhitespaceRule(SourceRule):
    rule_name = "erb-no-trailing-whitespace"
    description = "Disallow trailing whitespace at the end of lines"
    default_severity = Severity.WARNING
    safe_autofixable = True

    def check_source(self, source: str, context: RunContext) -> None:
        for match in _TRAILING_WHITESPACE.finditer(source):
            self.add_offense_with_source_autofix(
                "Trailing whitespace detected",
                self.location_from_offsets(match.start(), match.end()),
                match.start(),
                match.end(),
            )

    def autofix_source(self, offense: Offense, source: str) -> Optional[str]:
        fix = offense.autofix_context
        if not isinstance(fix, SourceFix) or fix.end_offset > len(source):
            return None
        segment = source[fix.start_offset : fix.end_offset]
        if not segment or segment.strip(" \t"):
            return None
        return source[: fix.start_offset] + source[fix.end_offset :]
