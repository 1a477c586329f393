"""
Rule registry: the catalog of rule classes and configuration-driven instantiation.

Built-in rules are listed explicitly in BUILTIN_RULES. Custom rules are added
with RuleRegistry.register(); a later registration under an existing
rule_name replaces the earlier one, which is how a project overrides a
built-in rule.
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Sequence

from herblint.config import LinterConfig
from herblint.errors import ConfigurationError
from herblint.rules.base import Rule
from herblint.rules.erb_no_trailing_whitespace import NoTrailingWhitespaceRule
from herblint.rules.erb_require_trailing_newline import RequireTrailingNewlineRule
from herblint.rules.herb_disable_comment import (
    DisableCommentMalformedRule,
    DisableCommentMissingRulesRule,
    DisableCommentNoDuplicateRulesRule,
    DisableCommentNoRedundantAllRule,
    DisableCommentUnnecessaryRule,
    DisableCommentValidRuleNameRule,
)
from herblint.rules.html_attribute_double_quotes import AttributeDoubleQuotesRule
from herblint.rules.html_attribute_values_require_quotes import AttributeValuesRequireQuotesRule
from herblint.rules.html_img_require_alt import ImgRequireAltRule
from herblint.rules.html_no_duplicate_ids import NoDuplicateIdsRule
from herblint.rules.html_tag_name_lowercase import TagNameLowercaseRule
from herblint.rules.parser_no_errors import ParserNoErrorsRule
from herblint.rules.svg_tag_name_capitalization import SvgTagNameCapitalizationRule

logger = logging.getLogger(__name__)

BUILTIN_RULES: Sequence[type[Rule]] = (
    ParserNoErrorsRule,
    ImgRequireAltRule,
    AttributeValuesRequireQuotesRule,
    AttributeDoubleQuotesRule,
    TagNameLowercaseRule,
    NoDuplicateIdsRule,
    SvgTagNameCapitalizationRule,
    RequireTrailingNewlineRule,
    NoTrailingWhitespaceRule,
    DisableCommentMalformedRule,
    DisableCommentMissingRulesRule,
    DisableCommentNoDuplicateRulesRule,
    DisableCommentNoRedundantAllRule,
    DisableCommentValidRuleNameRule,
    DisableCommentUnnecessaryRule,
)


class RuleRegistry:
    """Maps rule_name -> rule class."""

    def __init__(self, rules: Sequence[type[Rule]] = ()) -> None:
        self._rules: dict[str, type[Rule]] = {}
        for rule_class in rules:
            self.register(rule_class)

    def register(self, rule_class: type[Rule]) -> None:
        name = getattr(rule_class, "rule_name", None)
        if not name:
            raise ValueError(f"{rule_class.__name__} does not define rule_name")
        if name in self._rules and self._rules[name] is not rule_class:
            logger.info("Rule %s: %s replaces %s", name, rule_class.__name__, self._rules[name].__name__)
        self._rules[name] = rule_class

    def get(self, name: str) -> Optional[type[Rule]]:
        return self._rules.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[type[Rule]]:
        return iter(self.all())

    def all(self) -> list[type[Rule]]:
        return list(self._rules.values())

    def rule_names(self) -> frozenset[str]:
        return frozenset(self._rules)

    def validate(self, config: LinterConfig) -> None:
        """Raise ConfigurationError if config names rules this registry does not know."""
        unknown = sorted(config.configured_rule_names() - set(self._rules))
        if unknown:
            raise ConfigurationError([f"unknown rule in configuration: {name}" for name in unknown])

    def build_all(self, config: LinterConfig) -> list[Rule]:
        """
        One instance per enabled rule, with configured severity and file scope.

        Raises ConfigurationError for configured rules that are not registered
        or carry invalid patterns.
        """
        self.validate(config)
        instances: list[Rule] = []
        for name, rule_class in self._rules.items():
            if not config.enabled_rule(name, default=rule_class.enabled_by_default):
                logger.debug("Rule %s disabled by configuration", name)
                continue
            instances.append(
                rule_class(
                    severity=config.rule_severity(name) or rule_class.default_severity,
                    pattern_matcher=config.build_pattern_matcher(name),
                )
            )
        logger.debug("Built %d of %d registered rule(s)", len(instances), len(self._rules))
        return instances


def default_registry() -> RuleRegistry:
    """A registry holding every built-in rule."""
    return RuleRegistry(BUILTIN_RULES)
