# Syntax errors. The Linter reports these itself when a template cannot be
# parsed; the rule is registered so the name can be configured and used in
# directives like any other.

from __future__ import annotations

from herblint.context import RunContext
from herblint.findings.models import Offense, Severity
from herblint.rules.base import Rule
from herblint.tree import SyntaxTree


class ParserNoErrorsRule(Rule):
    rule_name = "parser-no-errors"
    description = "Report templates that cannot be parsed"
    default_severity = Severity.ERROR

    def check(self, tree: SyntaxTree, context: RunContext) -> list[Offense]:
        self._start(context)
        return []
