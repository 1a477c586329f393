"""Tests for the Rich console reporter."""

import io

from rich.console import Console

from herblint.findings.models import Location, Offense, Severity
from herblint.findings.results import AggregatedResult, LintResult
from herblint.reporting.console import SEVERITY_STYLE, print_results


def _console():
    return Console(file=io.StringIO(), width=200, color_system=None)


def _offense(rule_name="html-img-require-alt", severity=Severity.ERROR, message="Missing alt [img]"):
    return Offense(
        rule_name=rule_name,
        message=message,
        severity=severity,
        location=Location.from_coordinates(3, 4, 3, 10),
    )


def _aggregated():
    return AggregatedResult.from_results(
        [
            LintResult(file_path="app/views/a.html.erb", source="", offenses=[_offense()]),
            LintResult(
                file_path="app/views/b.html.erb",
                source="",
                fixed_offenses=[_offense("html-tag-name-lowercase", Severity.WARNING, "Tag name `DIV`")],
            ),
        ],
        rule_count=3,
    )


def test_every_severity_has_a_style():
    assert set(SEVERITY_STYLE) == set(Severity)


def test_offenses_are_listed_per_file():
    console = _console()
    print_results(_aggregated(), console=console)
    output = console.file.getvalue()
    assert "app/views/a.html.erb" in output
    assert "[html-img-require-alt]" in output
    assert "Missing alt [img]" in output
    assert "ERROR" in output
    assert "2 files" in output
    assert "1 offense" in output
    assert "1 fixed" in output


def test_clean_files_are_not_listed_without_verbose():
    console = _console()
    print_results(_aggregated(), console=console)
    assert "app/views/b.html.erb" not in console.file.getvalue()


def test_verbose_lists_fixed_offenses_and_files():
    console = _console()
    print_results(_aggregated(), verbose=True, console=console)
    output = console.file.getvalue()
    assert "fixed app/views/b.html.erb:3:4" in output
    assert "Files Summary" in output
    assert "FAIL" in output
    assert "OK" in output


def test_skipped_run_prints_message():
    console = _console()
    print_results(AggregatedResult.skipped("Linting is disabled"), console=console)
    output = console.file.getvalue()
    assert "Linting is disabled" in output
    assert "Summary" not in output
