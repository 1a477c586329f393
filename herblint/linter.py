# Single-file linting: parse -> directives -> rules -> suppression -> autofix.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from herblint.autofixer import Autofixer
from herblint.context import RunContext
from herblint.directives import DirectiveParser, DirectiveSet
from herblint.findings.models import Location, Offense, Severity
from herblint.findings.results import LintResult
from herblint.parser import ParseResult, TemplateParser
from herblint.rules.base import Rule
from herblint.rules.herb_disable_comment import DisableCommentUnnecessaryRule
from herblint.tree import SyntaxTree

logger = logging.getLogger(__name__)

MAX_FIX_PASSES = 10
PARSER_RULE_NAME = "parser-no-errors"
RULE_EXECUTION_ERROR = "rule-execution-error"


@dataclass
class _Check:
    """Offenses for one version of a file's source."""

    offenses: list[Offense] = field(default_factory=list)
    ignored_count: int = 0
    ignored: bool = False
    parse_failed: bool = False
    tree: Optional[SyntaxTree] = None

    @property
    def final(self) -> bool:
        return self.ignored or self.parse_failed


class Linter:
    """
    Lints one file at a time with a fixed set of rule instances.

    A Linter owns its rule instances and its parser; it is not safe to share
    between threads. Give each worker its own (see Runner).

    Args:
        rules: Rule instances to run, typically from RuleRegistry.build_all().
        parser: Template parser; a new TemplateParser by default.
        mode: Tool mode matched by `herb:<mode> ignore` comments.
        valid_rule_names: Names considered valid in herb:disable comments.
            Defaults to the names of `rules`.
        ignore_disable_comments: Report offenses even where a herb:disable
            comment would suppress them.
    """

    def __init__(
        self,
        rules: Iterable[Rule],
        parser: Optional[TemplateParser] = None,
        mode: str = "linter",
        valid_rule_names: Optional[Iterable[str]] = None,
        ignore_disable_comments: bool = False,
    ) -> None:
        self.rules = list(rules)
        self.parser = parser if parser is not None else TemplateParser()
        self.directive_parser = DirectiveParser(mode)
        if valid_rule_names is None:
            valid_rule_names = (rule.rule_name for rule in self.rules)
        self.valid_rule_names = frozenset(valid_rule_names)
        self.ignore_disable_comments = ignore_disable_comments

    def lint(self, file_path: str, source: str, fix: bool = False, unsafe: bool = False) -> LintResult:
        """
        Lint one file; with fix=True also autofix it.

        Fixing runs up to MAX_FIX_PASSES check-then-fix passes and stops as
        soon as a pass fixes nothing. A pass whose output no longer parses is
        thrown away. The returned result describes the final source: open
        offenses are those still present in it, fixed_offenses are those the
        passes resolved.
        """
        check = self._check(file_path, source)
        fixed: list[Offense] = []

        if fix:
            for pass_number in range(1, MAX_FIX_PASSES + 1):
                if check.final or not any(offense.autofixable(unsafe) for offense in check.offenses):
                    break
                outcome = Autofixer(check.tree, source, check.offenses, unsafe=unsafe).apply()
                if not outcome.changed:
                    break
                parsed = self.parser.parse(outcome.source)
                if parsed.failed:
                    logger.warning(
                        "Discarding fix pass %d for %s: fixed source no longer parses (%s)",
                        pass_number,
                        file_path,
                        parsed.errors[0].message,
                    )
                    break
                logger.debug("Fix pass %d on %s: %d fixed", pass_number, file_path, len(outcome.fixed))
                fixed.extend(outcome.fixed)
                source = outcome.source
                check = self._check(file_path, source, parsed)
            else:
                logger.warning("Stopped fixing %s after %d passes without converging", file_path, MAX_FIX_PASSES)

        return LintResult(
            file_path=file_path,
            source=source,
            offenses=check.offenses,
            fixed_offenses=fixed,
            ignored_count=check.ignored_count,
            ignored=check.ignored,
            parse_failed=check.parse_failed,
        )

    def _check(self, file_path: str, source: str, parsed: Optional[ParseResult] = None) -> _Check:
        if parsed is None:
            parsed = self.parser.parse(source)
        if parsed.failed:
            error = parsed.errors[0]
            logger.warning("Skipping rules for %s: %s", file_path, error.message)
            offense = Offense(
                rule_name=PARSER_RULE_NAME,
                message=error.message,
                severity=Severity.ERROR,
                location=error.location,
            )
            return _Check(offenses=[offense], parse_failed=True)

        tree = parsed.tree
        directives = self.directive_parser.parse(tree)
        if directives.ignore_file:
            logger.debug("Ignoring %s: herb:%s ignore directive", file_path, self.directive_parser.mode)
            return _Check(ignored=True, tree=tree)

        context = RunContext(
            file_path=file_path,
            source=source,
            directives=directives,
            valid_rule_names=self.valid_rule_names,
        )
        offenses: list[Offense] = []
        for rule in self.rules:
            if not rule.matches_file(file_path):
                logger.debug("Rule %s does not apply to %s", rule.rule_name, file_path)
                continue
            offenses.extend(self._run_rule(rule, tree, context))

        if self.ignore_disable_comments:
            kept, suppressed = offenses, []
        else:
            kept, suppressed = self._filter(offenses, directives)
            kept.extend(self._unnecessary_directives(file_path, directives, suppressed))

        kept.sort(key=lambda offense: offense.sort_key())
        logger.debug("Linted %s: %d offense(s), %d suppressed", file_path, len(kept), len(suppressed))
        return _Check(offenses=kept, ignored_count=len(suppressed), tree=tree)

    def _run_rule(self, rule: Rule, tree: SyntaxTree, context: RunContext) -> list[Offense]:
        try:
            return rule.check(tree, context)
        except Exception as exc:
            logger.exception("Rule %s failed on %s: %s", rule.rule_name, context.file_path, exc)
            start = tree.root.location.start if tree.root.location is not None else None
            location = Location(start=start, end=start) if start is not None else Location.from_coordinates(1, 0, 1, 0)
            return [
                Offense(
                    rule_name=RULE_EXECUTION_ERROR,
                    message=f"Rule `{rule.rule_name}` failed: {exc}",
                    severity=Severity.ERROR,
                    location=location,
                )
            ]

    @staticmethod
    def _filter(offenses: list[Offense], directives: DirectiveSet) -> tuple[list[Offense], list[Offense]]:
        kept: list[Offense] = []
        suppressed: list[Offense] = []
        for offense in offenses:
            if directives.disabled_at(offense.line, offense.rule_name):
                suppressed.append(offense)
            else:
                kept.append(offense)
        return kept, suppressed

    def _unnecessary_directives(
        self, file_path: str, directives: DirectiveSet, suppressed: list[Offense]
    ) -> list[Offense]:
        found: list[Offense] = []
        for rule in self.rules:
            if isinstance(rule, DisableCommentUnnecessaryRule) and rule.matches_file(file_path):
                found.extend(rule.detect(directives, suppressed))
        return found
