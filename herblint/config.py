"""
Linter configuration: global on/off switch, file globs and per-rule settings.

Configuration is modelled with pydantic so bad values (unknown severities,
unknown keys, empty globs) are rejected when the config is built, long before
any file is linted. A `.herb.yml` file is read with PyYAML; only its `linter`
section (plus the shared `files` section) is used here.

Example `.herb.yml`:

    linter:
      enabled: true
      failLevel: warning
      exclude:
        - "vendor/**"
      rules:
        html-img-require-alt:
          severity: warning
        erb-no-trailing-whitespace:
          enabled: false
        html-attribute-double-quotes:
          only:
            - "app/views/**"
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from herblint.errors import ConfigurationError
from herblint.findings.models import Severity
from herblint.patterns import PatternMatcher, validate_pattern

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE = ("**/*.html.erb",)
DEFAULT_CONFIG_FILENAMES = (".herb.yml", ".herb.yaml")


def _check_patterns(patterns: list[str]) -> list[str]:
    for pattern in patterns:
        try:
            validate_pattern(pattern)
        except ConfigurationError as exc:
            raise ValueError(str(exc)) from exc
    return patterns


class RuleConfig(BaseModel):
    """Settings for one rule. Unset fields fall back to the rule's own defaults."""

    enabled: Optional[bool] = None
    severity: Optional[Severity] = None
    include: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    only: list[str] = Field(default_factory=list)

    model_config = {"extra": "forbid"}

    @field_validator("include", "exclude", "only")
    @classmethod
    def _valid_patterns(cls, patterns: list[str]) -> list[str]:
        return _check_patterns(patterns)

    @property
    def has_patterns(self) -> bool:
        return bool(self.include or self.exclude or self.only)


class LinterConfig(BaseModel):
    """Resolved linter configuration consumed by the registry and the runner."""

    enabled: bool = True
    include: list[str] = Field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude: list[str] = Field(default_factory=list)
    fail_level: Severity = Field(default=Severity.ERROR, alias="failLevel")
    rules: dict[str, RuleConfig] = Field(default_factory=dict)

    model_config = {"extra": "forbid", "populate_by_name": True}

    @field_validator("include", "exclude")
    @classmethod
    def _valid_patterns(cls, patterns: list[str]) -> list[str]:
        return _check_patterns(patterns)

    @field_validator("rules", mode="before")
    @classmethod
    def _empty_rule_entries(cls, rules: Any) -> Any:
        # `rule-name:` with no body in YAML loads as None.
        if isinstance(rules, Mapping):
            return {name: ({} if value is None else value) for name, value in rules.items()}
        return rules

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "LinterConfig":
        """Build a config from a plain mapping (the `linter` section of a config file)."""
        try:
            return cls.model_validate(dict(data or {}))
        except ValidationError as exc:
            errors = []
            for error in exc.errors():
                where = ".".join(str(part) for part in error["loc"]) or "linter"
                errors.append(f"linter.{where}: {error['msg']}")
            raise ConfigurationError(errors) from exc

    @classmethod
    def load(cls, path: Path) -> "LinterConfig":
        """
        Read a `.herb.yml` file.

        Raises ConfigurationError when the file cannot be read, is not valid
        YAML, or holds invalid settings.
        """
        try:
            with path.open("r", encoding="utf-8") as fh:
                data = yaml.safe_load(fh)
        except OSError as exc:
            raise ConfigurationError(f"cannot read config file {path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"invalid YAML in {path}: {exc}") from exc

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"{path}: top level must be a mapping")

        linter_section = data.get("linter") or {}
        files_section = data.get("files") or {}
        if not isinstance(linter_section, dict) or not isinstance(files_section, dict):
            raise ConfigurationError(f"{path}: 'linter' and 'files' must be mappings")

        merged = dict(linter_section)
        if "include" in files_section:
            merged["include"] = list(files_section["include"] or []) + list(
                linter_section.get("include") or DEFAULT_INCLUDE
            )
        if "exclude" not in merged and "exclude" in files_section:
            merged["exclude"] = files_section["exclude"] or []

        config = cls.from_mapping(merged)
        logger.info("Loaded configuration from %s (%d rule setting(s))", path, len(config.rules))
        return config

    def rule_config(self, name: str) -> Optional[RuleConfig]:
        return self.rules.get(name)

    def enabled_rule(self, name: str, default: bool = True) -> bool:
        rule_config = self.rules.get(name)
        if rule_config is None or rule_config.enabled is None:
            return default
        return rule_config.enabled

    def rule_severity(self, name: str) -> Optional[Severity]:
        rule_config = self.rules.get(name)
        return None if rule_config is None else rule_config.severity

    def build_pattern_matcher(self, name: str) -> Optional[PatternMatcher]:
        """Per-rule file scope, or None when the rule applies to every linted file."""
        rule_config = self.rules.get(name)
        if rule_config is None or not rule_config.has_patterns:
            return None
        return PatternMatcher(
            includes=rule_config.include,
            excludes=rule_config.exclude,
            only=rule_config.only,
        )

    def file_matcher(self) -> PatternMatcher:
        """Top-level file scope used by file discovery."""
        return PatternMatcher(includes=self.include, excludes=self.exclude)

    def configured_rule_names(self) -> set[str]:
        return set(self.rules)


def get_default_config() -> LinterConfig:
    """Every rule at its default severity, linting `**/*.html.erb`."""
    return LinterConfig()


def find_config_file(start: Path) -> Optional[Path]:
    """Look for `.herb.yml` in start and its parents."""
    start = start.resolve()
    directory = start if start.is_dir() else start.parent
    for candidate_dir in (directory, *directory.parents):
        for filename in DEFAULT_CONFIG_FILENAMES:
            candidate = candidate_dir / filename
            if candidate.is_file():
                logger.debug("Found config file %s", candidate)
                return candidate
    return None
