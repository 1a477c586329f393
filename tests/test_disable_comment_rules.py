"""Unit tests for the herb:disable comment hygiene rules."""

from herblint.context import RunContext
from herblint.directives import DirectiveParser
from herblint.findings.models import Location, Offense
from herblint.parser import parse_source
from herblint.registry import default_registry
from herblint.rules.herb_disable_comment import (
    DisableCommentMalformedRule,
    DisableCommentMissingRulesRule,
    DisableCommentNoDuplicateRulesRule,
    DisableCommentNoRedundantAllRule,
    DisableCommentUnnecessaryRule,
    DisableCommentValidRuleNameRule,
)

VALID_NAMES = default_registry().rule_names()


def _run_rule(rule, source: str):
    result = parse_source(source)
    assert not result.failed, result.errors
    context = RunContext(file_path="test.html.erb", source=source, valid_rule_names=VALID_NAMES)
    return rule.check(result.tree, context)


def _suppressed(line: int, rule_name: str) -> Offense:
    return Offense(
        rule_name=rule_name,
        message="suppressed",
        location=Location.from_coordinates(line, 0, line, 1),
    )


class TestMalformed:
    def test_missing_space_after_prefix(self):
        offenses = _run_rule(DisableCommentMalformedRule(), "<%# herb:disableall %>\n")
        assert len(offenses) == 1
        assert "missing space" in offenses[0].message

    def test_stray_commas(self):
        leading = _run_rule(DisableCommentMalformedRule(), "<%# herb:disable , rule-a %>\n")
        trailing = _run_rule(DisableCommentMalformedRule(), "<%# herb:disable rule-a, %>\n")
        doubled = _run_rule(DisableCommentMalformedRule(), "<%# herb:disable rule-a,, rule-b %>\n")
        assert ["leading" in o.message for o in leading] == [True]
        assert ["trailing" in o.message for o in trailing] == [True]
        assert ["consecutive" in o.message for o in doubled] == [True]

    def test_names_without_commas(self):
        offenses = _run_rule(
            DisableCommentMalformedRule(), "<%# herb:disable html-img-require-alt html-tag-name-lowercase %>\n"
        )
        assert len(offenses) == 1
        assert "separated by commas" in offenses[0].message

    def test_well_formed_comment_is_clean(self):
        assert _run_rule(DisableCommentMalformedRule(), "<%# herb:disable rule-a, rule-b %>\n") == []

    def test_other_comments_are_ignored(self):
        assert _run_rule(DisableCommentMalformedRule(), "<%# TODO: herb:disable %>\n<%= x %>\n") == []


class TestMissingRules:
    def test_bare_disable(self):
        offenses = _run_rule(DisableCommentMissingRulesRule(), "<%# herb:disable %>\n")
        assert len(offenses) == 1
        assert "at least one rule" in offenses[0].message

    def test_with_rules_is_clean(self):
        assert _run_rule(DisableCommentMissingRulesRule(), "<%# herb:disable all %>\n") == []


class TestNoDuplicateRules:
    def test_duplicate_reported_at_second_occurrence(self):
        source = "<%# herb:disable rule-a, rule-a %>\n"
        offenses = _run_rule(DisableCommentNoDuplicateRulesRule(), source)
        assert len(offenses) == 1
        assert offenses[0].column == source.rindex("rule-a")

    def test_unique_names_are_clean(self):
        assert _run_rule(DisableCommentNoDuplicateRulesRule(), "<%# herb:disable rule-a, rule-b %>\n") == []


class TestNoRedundantAll:
    def test_names_alongside_all(self):
        source = "<%# herb:disable all, html-img-require-alt %>\n"
        offenses = _run_rule(DisableCommentNoRedundantAllRule(), source)
        assert len(offenses) == 1
        assert "html-img-require-alt" in offenses[0].message
        assert offenses[0].column == source.index("html-img-require-alt")

    def test_all_alone_is_clean(self):
        assert _run_rule(DisableCommentNoRedundantAllRule(), "<%# herb:disable all %>\n") == []


class TestValidRuleName:
    def test_unknown_name_with_suggestion(self):
        offenses = _run_rule(DisableCommentValidRuleNameRule(), "<%# herb:disable html-img-require-alts %>\n")
        assert len(offenses) == 1
        assert "Did you mean `html-img-require-alt`?" in offenses[0].message

    def test_unknown_name_without_suggestion(self):
        offenses = _run_rule(DisableCommentValidRuleNameRule(), "<%# herb:disable zzz %>\n")
        assert offenses[0].message == "Unknown rule `zzz`."

    def test_known_names_and_all_are_clean(self):
        source = "<%# herb:disable all, html-img-require-alt %>\n"
        assert _run_rule(DisableCommentValidRuleNameRule(), source) == []


class TestUnnecessary:
    def _directives(self, source: str):
        return DirectiveParser().parse(parse_source(source).tree)

    def test_check_reports_nothing(self):
        assert _run_rule(DisableCommentUnnecessaryRule(), "<%# herb:disable all %>\n<div></div>\n") == []

    def test_unused_named_rule_reported(self):
        directives = self._directives("<%# herb:disable html-img-require-alt %>\n<div></div>\n")
        offenses = DisableCommentUnnecessaryRule().detect(directives, [])
        assert len(offenses) == 1
        assert "html-img-require-alt" in offenses[0].message

    def test_used_rule_not_reported(self):
        directives = self._directives("<%# herb:disable html-img-require-alt %>\n<img>\n")
        rule = DisableCommentUnnecessaryRule()
        assert rule.detect(directives, [_suppressed(2, "html-img-require-alt")]) == []

    def test_partially_used_comment(self):
        directives = self._directives("<%# herb:disable html-img-require-alt, html-no-duplicate-ids %>\n<img>\n")
        offenses = DisableCommentUnnecessaryRule().detect(directives, [_suppressed(2, "html-img-require-alt")])
        assert len(offenses) == 1
        assert "html-no-duplicate-ids" in offenses[0].message

    def test_unused_all(self):
        directives = self._directives("<%# herb:disable all %>\n<div></div>\n")
        offenses = DisableCommentUnnecessaryRule().detect(directives, [])
        assert len(offenses) == 1
        assert "no offenses were suppressed" in offenses[0].message

    def test_names_without_commas_are_left_to_malformed(self):
        directives = self._directives(
            "<%# herb:disable html-img-require-alt html-tag-name-lowercase, html-no-duplicate-ids %>\n<img>\n"
        )
        offenses = DisableCommentUnnecessaryRule().detect(directives, [])
        assert len(offenses) == 1
        assert "html-no-duplicate-ids" in offenses[0].message
