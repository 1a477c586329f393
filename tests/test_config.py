"""Tests for linter configuration loading and validation."""

from pathlib import Path

import pytest

from herblint.config import DEFAULT_INCLUDE, LinterConfig, find_config_file, get_default_config
from herblint.errors import ConfigurationError
from herblint.findings.models import Severity


def _write(tmp_path: Path, text: str, name: str = ".herb.yml") -> Path:
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return path


def test_default_config():
    config = get_default_config()
    assert config.enabled
    assert config.include == list(DEFAULT_INCLUDE)
    assert config.exclude == []
    assert config.fail_level == Severity.ERROR
    assert config.rules == {}


def test_rule_settings_from_mapping():
    config = LinterConfig.from_mapping(
        {
            "rules": {
                "html-img-require-alt": {"severity": "warning"},
                "erb-no-trailing-whitespace": {"enabled": False},
            }
        }
    )
    assert config.rule_severity("html-img-require-alt") == Severity.WARNING
    assert not config.enabled_rule("erb-no-trailing-whitespace")
    assert config.enabled_rule("html-no-duplicate-ids")
    assert config.enabled_rule("html-no-duplicate-ids", default=False) is False


def test_empty_rule_entry_is_accepted():
    config = LinterConfig.from_mapping({"rules": {"html-img-require-alt": None}})
    assert config.rule_config("html-img-require-alt") is not None
    assert config.configured_rule_names() == {"html-img-require-alt"}


def test_invalid_severity_raises_configuration_error():
    with pytest.raises(ConfigurationError) as exc_info:
        LinterConfig.from_mapping({"rules": {"html-img-require-alt": {"severity": "fatal"}}})
    assert any("severity" in error for error in exc_info.value.errors)


def test_unknown_key_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        LinterConfig.from_mapping({"rules": {"html-img-require-alt": {"colour": "red"}}})


def test_invalid_glob_raises_configuration_error():
    with pytest.raises(ConfigurationError):
        LinterConfig.from_mapping({"rules": {"html-img-require-alt": {"include": ["app/[oops"]}}})


def test_fail_level_alias():
    config = LinterConfig.from_mapping({"failLevel": "warning"})
    assert config.fail_level == Severity.WARNING


def test_build_pattern_matcher():
    config = LinterConfig.from_mapping({"rules": {"html-img-require-alt": {"only": ["admin/**"]}}})
    matcher = config.build_pattern_matcher("html-img-require-alt")
    assert matcher is not None
    assert matcher.match("admin/index.html.erb")
    assert not matcher.match("app/index.html.erb")
    assert config.build_pattern_matcher("html-no-duplicate-ids") is None


def test_load_yaml_file(tmp_path):
    path = _write(
        tmp_path,
        """
linter:
  failLevel: warning
  exclude:
    - "vendor/**"
  rules:
    html-tag-name-lowercase:
      enabled: false
""",
    )
    config = LinterConfig.load(path)
    assert config.fail_level == Severity.WARNING
    assert config.exclude == ["vendor/**"]
    assert not config.enabled_rule("html-tag-name-lowercase")


def test_load_merges_files_section(tmp_path):
    path = _write(
        tmp_path,
        """
files:
  include:
    - "**/*.turbo_stream.erb"
  exclude:
    - "tmp/**"
""",
    )
    config = LinterConfig.load(path)
    assert "**/*.turbo_stream.erb" in config.include
    assert "**/*.html.erb" in config.include
    assert config.exclude == ["tmp/**"]


def test_load_empty_file_gives_defaults(tmp_path):
    config = LinterConfig.load(_write(tmp_path, ""))
    assert config == get_default_config()


def test_load_invalid_yaml(tmp_path):
    with pytest.raises(ConfigurationError, match="invalid YAML"):
        LinterConfig.load(_write(tmp_path, "linter: [unclosed"))


def test_load_missing_file(tmp_path):
    with pytest.raises(ConfigurationError, match="cannot read"):
        LinterConfig.load(tmp_path / "missing.yml")


def test_load_non_mapping_top_level(tmp_path):
    with pytest.raises(ConfigurationError):
        LinterConfig.load(_write(tmp_path, "- a\n- b\n"))


def test_find_config_file_searches_parents(tmp_path):
    config_path = _write(tmp_path, "linter: {}\n")
    nested = tmp_path / "app" / "views"
    nested.mkdir(parents=True)
    assert find_config_file(nested) == config_path.resolve()


def test_find_config_file_none(tmp_path):
    nested = tmp_path / "empty"
    nested.mkdir()
    found = find_config_file(nested)
    assert found is None or found.parent not in (nested.resolve(), tmp_path.resolve())
