"""
Typer CLI entry point and orchestration of a lint run.

The CLI:
- Accepts one or more template files or directories
- Loads `.herb.yml` (explicit --config, or the nearest one above the first path)
- Discovers templates, lints (and optionally fixes) them with every enabled rule
- Prints results with the Rich reporter

Exit codes: 0 when no remaining offense reaches the configured fail level,
1 when one does, 2 when the configuration is invalid.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape

from herblint.config import LinterConfig, find_config_file, get_default_config
from herblint.errors import ConfigurationError
from herblint.findings.results import AggregatedResult
from herblint.reporting.console import print_results
from herblint.runner import RunOptions, Runner
from herblint.traversal import discover_files

logger = logging.getLogger(__name__)

app = typer.Typer(help="herblint - linter for HTML+ERB templates.")

EXIT_OFFENSES = 1
EXIT_CONFIG_ERROR = 2


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Optional[Path], paths: List[Path]) -> LinterConfig:
    if config_path is not None:
        return LinterConfig.load(config_path)
    found = find_config_file(paths[0]) if paths else None
    if found is None:
        logger.debug("No config file found; using defaults")
        return get_default_config()
    return LinterConfig.load(found)


def _exit_code(aggregated: AggregatedResult, config: LinterConfig) -> int:
    threshold = config.fail_level.rank
    for result in aggregated.results:
        if any(offense.severity.rank >= threshold for offense in result.offenses):
            return EXIT_OFFENSES
    return 0


@app.command()
def analyze(
    paths: List[Path] = typer.Argument(
        ...,
        exists=True,
        readable=True,
        help="Template files or directories to lint.",
    ),
    fix: bool = typer.Option(False, "--fix", help="Apply safe autofixes."),
    unsafe_fix: bool = typer.Option(False, "--unsafe-fix", help="Apply safe and unsafe autofixes."),
    ignore_disable_comments: bool = typer.Option(
        False,
        "--ignore-disable-comments",
        help="Report offenses even where a herb:disable comment suppresses them.",
    ),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to a .herb.yml file."),
    jobs: int = typer.Option(1, "--jobs", "-j", min=1, help="Number of files linted in parallel."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging and a per-file summary."),
) -> None:
    """
    Lint HTML+ERB templates.

    Directories are searched for templates matching the configured include
    globs; files given explicitly are always linted.
    """
    _configure_logging(verbose)
    console = Console()

    try:
        linter_config = _load_config(config, paths)
        files = discover_files(paths, linter_config)
        if not files:
            logger.warning("No templates found under %s", ", ".join(str(path) for path in paths))
        options = RunOptions(
            fix=fix,
            unsafe_fix=unsafe_fix,
            ignore_disable_comments=ignore_disable_comments,
            jobs=jobs,
        )
        aggregated = Runner().run(files, linter_config, options)
    except ConfigurationError as exc:
        console.print(f"[bold red]Configuration error:[/bold red] {escape(str(exc))}")
        raise typer.Exit(code=EXIT_CONFIG_ERROR)

    print_results(aggregated, verbose=verbose, unsafe=unsafe_fix, console=console)
    code = _exit_code(aggregated, linter_config)
    if code:
        raise typer.Exit(code=code)


def main() -> None:
    """Entry point for the `herblint` script and `python -m herblint.main`."""
    app()


if __name__ == "__main__":
    main()
