# Hygiene rules for the suppression comments themselves: `<%# herb:disable ... %>`.

from __future__ import annotations

import difflib
import re
from typing import Iterable, Optional

from herblint.context import RunContext
from herblint.directives import ALL_RULES, DirectiveSet, DisableComment
from herblint.findings.models import Offense, Severity
from herblint.rules.base import DirectiveRule, Rule
from herblint.tree import SyntaxTree

_LEADING_COMMA = re.compile(r"\A\s*,")
_TRAILING_COMMA = re.compile(r",\s*\Z")
_CONSECUTIVE_COMMAS = re.compile(r",\s*,")


class DisableCommentMalformedRule(DirectiveRule):
    """Catches `herb:disableall`, stray commas and missing commas in the rule list."""

    rule_name = "herb-disable-comment-malformed"
    description = "Detect malformed herb:disable comments"
    default_severity = Severity.ERROR

    def check_disable_comment(self, comment: DisableComment) -> None:
        if not comment.match:
            self.add_offense(
                "Malformed herb:disable comment: missing space after `herb:disable`",
                comment.content_location,
            )
            return

        rules_string = comment.rules_string
        if not rules_string:
            return
        if _LEADING_COMMA.search(rules_string):
            self.add_offense("Malformed herb:disable comment: leading comma in rule list", comment.content_location)
        if _TRAILING_COMMA.search(rules_string):
            self.add_offense("Malformed herb:disable comment: trailing comma in rule list", comment.content_location)
        if _CONSECUTIVE_COMMAS.search(rules_string):
            self.add_offense(
                "Malformed herb:disable comment: consecutive commas in rule list",
                comment.content_location,
            )
        if comment.unseparated:
            self.add_offense(
                "Malformed herb:disable comment: rule names must be separated by commas",
                comment.content_location,
            )


class DisableCommentMissingRulesRule(DirectiveRule):
    rule_name = "herb-disable-comment-missing-rules"
    description = "Require rule names in herb:disable comments"
    default_severity = Severity.ERROR

    def check_disable_comment(self, comment: DisableComment) -> None:
        if comment.match and not comment.rule_names:
            self.add_offense(
                "`herb:disable` comment must specify at least one rule name or `all`",
                comment.content_location,
            )


class DisableCommentNoDuplicateRulesRule(DirectiveRule):
    rule_name = "herb-disable-comment-no-duplicate-rules"
    description = "Disallow duplicate rule names in herb:disable comments"
    default_severity = Severity.WARNING

    def check_disable_comment(self, comment: DisableComment) -> None:
        if not comment.match:
            return
        seen: set[str] = set()
        for detail in comment.rule_name_details:
            if detail.name in seen:
                self.add_offense(
                    f"Duplicate rule `{detail.name}` in `herb:disable` comment. Remove the duplicate.",
                    self.offset_location(comment, detail),
                )
            seen.add(detail.name)


class DisableCommentNoRedundantAllRule(DirectiveRule):
    rule_name = "herb-disable-comment-no-redundant-all"
    description = "Disallow specific rule names alongside `all` in herb:disable comments"
    default_severity = Severity.WARNING

    def check_disable_comment(self, comment: DisableComment) -> None:
        if not comment.match or not comment.disables_all or len(comment.rule_names) < 2:
            return
        first_all_seen = False
        for detail in comment.rule_name_details:
            if detail.name == ALL_RULES and not first_all_seen:
                first_all_seen = True
                continue
            self.add_offense(
                f"Redundant rule name `{detail.name}` when `all` is already specified",
                self.offset_location(comment, detail),
            )


class DisableCommentValidRuleNameRule(DirectiveRule):
    """Rule names must exist; a close match is offered as a suggestion."""

    rule_name = "herb-disable-comment-valid-rule-name"
    description = "Disallow unknown rule names in herb:disable comments"
    default_severity = Severity.WARNING

    def check_disable_comment(self, comment: DisableComment) -> None:
        if not comment.match:
            return
        valid_names = self.context.valid_rule_names
        if not valid_names:
            return
        for detail in comment.rule_name_details:
            if detail.name == ALL_RULES or detail.name in valid_names:
                continue
            self.add_offense(
                _unknown_rule_message(detail.name, valid_names),
                self.offset_location(comment, detail),
            )


def _unknown_rule_message(name: str, valid_names: Iterable[str]) -> str:
    suggestion = _suggest(name, valid_names)
    if suggestion:
        return f"Unknown rule `{name}`. Did you mean `{suggestion}`?"
    return f"Unknown rule `{name}`."


def _suggest(name: str, valid_names: Iterable[str]) -> Optional[str]:
    matches = difflib.get_close_matches(name, sorted(valid_names), n=1, cutoff=0.75)
    return matches[0] if matches else None


class DisableCommentUnnecessaryRule(Rule):
    """
    Reports disable comments that suppressed nothing.

    Whether a comment was needed is only known after every other rule ran
    and suppression was applied, so check() reports nothing and the Linter
    calls detect() with the suppressed offenses instead.
    """

    rule_name = "herb-disable-comment-unnecessary"
    description = "Disallow herb:disable comments that do not suppress any offense"
    default_severity = Severity.WARNING

    def check(self, tree: SyntaxTree, context: RunContext) -> list[Offense]:
        self._start(context)
        return []

    def detect(self, directives: DirectiveSet, suppressed: list[Offense]) -> list[Offense]:
        self._offenses = []
        by_line: dict[int, set[str]] = {}
        for offense in suppressed:
            by_line.setdefault(offense.line, set()).add(offense.rule_name)

        for comment in directives.disable_comments:
            if not comment.match or not comment.rule_names:
                continue
            # Names missing a comma suppress nothing; the malformed rule reports them.
            details = comment.separated
            hits = by_line.get(comment.line + 1, set())
            if any(detail.name == ALL_RULES for detail in details):
                if not hits:
                    self.add_offense(
                        "Unnecessary herb:disable directive (no offenses were suppressed)",
                        comment.content_location,
                    )
                continue
            for detail in details:
                if detail.name not in hits:
                    self.add_offense(
                        f"Unnecessary herb:disable for rule `{detail.name}` (no matching offense)",
                        comment.offset_location(detail),
                    )
        return list(self._offenses)
