# Rich console output: lint results grouped by file, plus a run summary.

from __future__ import annotations

from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from herblint.findings.models import Offense, Severity
from herblint.findings.results import AggregatedResult, LintResult

# Severity → Rich style
SEVERITY_STYLE = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "bold yellow",
    Severity.INFO: "bold blue",
    Severity.HINT: "bold dim",
}

DEFAULT_SEVERITY_STYLE = "bold white"


def _severity_style(severity: Severity) -> str:
    return SEVERITY_STYLE.get(severity, DEFAULT_SEVERITY_STYLE)


def _shorten_path(path: str | Path) -> str:
    return str(path).replace("\\", "/")


def print_results(
    aggregated: AggregatedResult,
    verbose: bool = False,
    unsafe: bool = False,
    console: Optional[Console] = None,
) -> None:
    """
    Print a run's results: one table per file with offenses, the fixed
    offenses when verbose, and a summary panel.
    """
    console = console or Console()

    if not aggregated.completed:
        console.print(
            Panel(
                f"[yellow]{aggregated.message or 'Linting was skipped.'}[/yellow]",
                title="herblint",
                border_style="yellow",
                box=box.ROUNDED,
            )
        )
        return

    for result in aggregated.results:
        if result.offenses:
            _print_file(result, console, unsafe)
        if verbose and result.fixed_offenses:
            _print_fixed(result, console)

    if verbose:
        _print_file_summary_table(aggregated, console)

    _print_summary(aggregated, console, unsafe)


def _print_file(result: LintResult, console: Console, unsafe: bool) -> None:
    console.print()
    console.print(Panel(
        f"[bold cyan]{escape(_shorten_path(result.file_path))}[/bold cyan]",
        box=box.SIMPLE_HEAD,
        border_style="blue",
        padding=(0, 1),
    ))

    table = Table(
        show_header=True,
        header_style="bold magenta",
        box=box.SIMPLE,
        padding=(0, 1),
        expand=False,
    )
    table.add_column("Line", justify="right", style="dim", width=5)
    table.add_column("Col", justify="right", style="dim", width=4)
    table.add_column("Severity", width=8)
    table.add_column("Rule", width=38)
    table.add_column("Message", style="white")

    for offense in result.offenses:
        table.add_row(
            str(offense.line),
            str(offense.column),
            Text(offense.severity.value.upper(), style=_severity_style(offense.severity)),
            _rule_cell(offense, unsafe),
            Text(offense.message),
        )
    console.print(table)


def _rule_cell(offense: Offense, unsafe: bool) -> Text:
    text = Text(f"[{offense.rule_name}]", style="dim")
    if offense.autofixable(unsafe):
        text.append(" (fixable)", style="green")
    return text


def _print_fixed(result: LintResult, console: Console) -> None:
    for offense in result.fixed_offenses:
        console.print(
            f"  [green]fixed[/green] {_shorten_path(result.file_path)}:{offense.line}:{offense.column} "
            f"[dim]{escape('[' + offense.rule_name + ']')}[/dim] {escape(offense.message)}"
        )


def _print_file_summary_table(aggregated: AggregatedResult, console: Console) -> None:
    """Print a table of clean vs failing files."""
    table = Table(
        title="Files Summary",
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
        padding=(0, 1),
    )
    table.add_column("File", style="white")
    table.add_column("Status", width=10)
    table.add_column("Offenses", justify="right", width=8)
    table.add_column("Fixed", justify="right", width=6)

    for result in aggregated.results:
        if result.ignored:
            status = Text("IGNORED", style="dim")
        elif result.parse_failed:
            status = Text("PARSE", style="bold red")
        elif result.offenses:
            status = Text("FAIL", style="bold red")
        else:
            status = Text("OK", style="bold green")
        table.add_row(
            Text(_shorten_path(result.file_path)),
            status,
            str(result.offense_count),
            str(result.fixed_count),
        )

    console.print()
    console.print(Panel(table, border_style="cyan", box=box.ROUNDED))


def _print_summary(aggregated: AggregatedResult, console: Console, unsafe: bool) -> None:
    """Print a compact summary of the run."""
    total = aggregated.offense_count
    files = aggregated.file_count
    summary_parts = [
        f"[bold]{files} file{'s' if files != 1 else ''}[/bold]",
        f"[bold]{total} offense{'s' if total != 1 else ''}[/bold]",
    ]
    for severity, count in aggregated.count_by_severity().items():
        if count:
            summary_parts.append(f"[{_severity_style(severity)}]{count} {severity.value}[/]")
    if aggregated.fixed_count:
        summary_parts.append(f"[green]{aggregated.fixed_count} fixed[/green]")
    fixable = aggregated.autofixable_count(unsafe)
    if fixable:
        summary_parts.append(f"[green]{fixable} fixable[/green]")
    if aggregated.ignored_count:
        summary_parts.append(f"[dim]{aggregated.ignored_count} suppressed[/dim]")

    console.print()
    console.print(
        Panel(
            " | ".join(summary_parts),
            title="Summary",
            border_style="yellow" if total > 0 else "green",
            box=box.ROUNDED,
        )
    )
