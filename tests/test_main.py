"""Tests for the Typer CLI."""

from typer.testing import CliRunner

from herblint.main import EXIT_CONFIG_ERROR, EXIT_OFFENSES, app

runner = CliRunner()


def _write(path, text):
    path.write_text(text, encoding="utf-8")
    return path


def test_clean_template_exits_zero(tmp_path):
    template = _write(tmp_path / "ok.html.erb", '<img src="a.png" alt="">\n')
    result = runner.invoke(app, [str(template), "--config", str(_write(tmp_path / "c.yml", "linter: {}\n"))])
    assert result.exit_code == 0, result.output
    assert "Summary" in result.output


def test_error_offense_exits_one(tmp_path):
    template = _write(tmp_path / "bad.html.erb", '<img src="a.png">\n')
    result = runner.invoke(app, [str(template), "--config", str(_write(tmp_path / "c.yml", "linter: {}\n"))])
    assert result.exit_code == EXIT_OFFENSES
    assert "html-img-require-alt" in result.output


def test_warnings_pass_at_default_fail_level(tmp_path):
    template = _write(tmp_path / "warn.html.erb", "<div class=a></div>\n")
    config = _write(tmp_path / "c.yml", "linter: {}\n")
    assert runner.invoke(app, [str(template), "--config", str(config)]).exit_code == 0


def test_fail_level_warning(tmp_path):
    template = _write(tmp_path / "warn.html.erb", "<div class=a></div>\n")
    config = _write(tmp_path / "c.yml", "linter:\n  failLevel: warning\n")
    assert runner.invoke(app, [str(template), "--config", str(config)]).exit_code == EXIT_OFFENSES


def test_fix_rewrites_file(tmp_path):
    template = _write(tmp_path / "fix.html.erb", "<DIV class=a></DIV>")
    config = _write(tmp_path / "c.yml", "linter: {}\n")
    result = runner.invoke(app, [str(template), "--fix", "--config", str(config)])
    assert result.exit_code == 0, result.output
    assert template.read_text(encoding="utf-8") == '<div class="a"></div>\n'


def test_directory_argument(tmp_path):
    views = tmp_path / "views"
    views.mkdir()
    _write(views / "a.html.erb", '<img src="a.png">\n')
    _write(views / "notes.txt", "<img>")
    config = _write(tmp_path / "c.yml", "linter: {}\n")
    result = runner.invoke(app, [str(views), "--config", str(config), "--jobs", "2"])
    assert result.exit_code == EXIT_OFFENSES
    assert "1 file" in result.output


def test_invalid_config_exits_two(tmp_path):
    template = _write(tmp_path / "a.html.erb", "<div></div>\n")
    config = _write(tmp_path / "c.yml", "linter:\n  rules:\n    no-such-rule:\n      enabled: false\n")
    result = runner.invoke(app, [str(template), "--config", str(config)])
    assert result.exit_code == EXIT_CONFIG_ERROR
    assert "no-such-rule" in result.output


def test_disabled_linter(tmp_path):
    template = _write(tmp_path / "a.html.erb", '<img src="a.png">\n')
    config = _write(tmp_path / "c.yml", "linter:\n  enabled: false\n")
    result = runner.invoke(app, [str(template), "--config", str(config)])
    assert result.exit_code == 0
    assert "disabled" in result.output


def test_missing_path_is_rejected(tmp_path):
    result = runner.invoke(app, [str(tmp_path / "missing.html.erb")])
    assert result.exit_code != 0
