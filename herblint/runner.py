# Multi-file runs: build rules from config, lint every file, write fixes back,
# and fold the per-file results into one AggregatedResult.

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Union

from herblint.config import LinterConfig, get_default_config
from herblint.findings.results import AggregatedResult, LintResult
from herblint.linter import Linter
from herblint.registry import RuleRegistry, default_registry
from herblint.traversal import display_path

logger = logging.getLogger(__name__)

DISABLED_MESSAGE = "Linting is disabled in the configuration (linter.enabled: false)"


@dataclass(frozen=True)
class RunOptions:
    """
    Per-run switches from the CLI.

    unsafe_fix implies fix. jobs > 1 lints files on a thread pool; each
    worker thread gets its own Linter and rule instances.
    """

    fix: bool = False
    unsafe_fix: bool = False
    ignore_disable_comments: bool = False
    jobs: int = 1

    @property
    def apply_fixes(self) -> bool:
        return self.fix or self.unsafe_fix


def _unique_paths(files: Iterable[Union[str, Path]]) -> list[Path]:
    """Deduplicate by resolved path, keeping first-seen order."""
    seen: set[Path] = set()
    unique: list[Path] = []
    for file in files:
        path = Path(file)
        key = path.resolve()
        if key in seen:
            continue
        seen.add(key)
        unique.append(path)
    return unique


class Runner:
    """
    Lints a set of files against one configuration.

    Each file is read, linted (and fixed) and written back by exactly one
    worker. Configuration problems raise ConfigurationError before any file
    is read.
    """

    def __init__(self, registry: Optional[RuleRegistry] = None) -> None:
        self.registry = registry if registry is not None else default_registry()
        self._local = threading.local()

    def run(
        self,
        files: Iterable[Union[str, Path]],
        config: Optional[LinterConfig] = None,
        options: Optional[RunOptions] = None,
    ) -> AggregatedResult:
        config = config if config is not None else get_default_config()
        options = options if options is not None else RunOptions()

        if not config.enabled:
            logger.info("Linting disabled by configuration; no files checked")
            return AggregatedResult.skipped(DISABLED_MESSAGE)

        rules = self.registry.build_all(config)
        paths = _unique_paths(files)
        logger.info("Linting %d file(s) with %d rule(s)", len(paths), len(rules))

        if options.jobs > 1 and len(paths) > 1:
            results = self._run_parallel(paths, config, options)
        else:
            linter = self._build_linter(config, options, rules=rules)
            results = []
            for path in paths:
                result = self._lint_file(linter, path, options)
                if result is not None:
                    results.append(result)

        aggregated = AggregatedResult.from_results(results, rule_count=len(rules))
        logger.info(
            "Finished: %d file(s), %d offense(s), %d fixed, %d suppressed",
            aggregated.file_count,
            aggregated.offense_count,
            aggregated.fixed_count,
            aggregated.ignored_count,
        )
        return aggregated

    def _build_linter(self, config: LinterConfig, options: RunOptions, rules=None) -> Linter:
        if rules is None:
            rules = self.registry.build_all(config)
        return Linter(
            rules,
            valid_rule_names=self.registry.rule_names(),
            ignore_disable_comments=options.ignore_disable_comments,
        )

    def _thread_linter(self, config: LinterConfig, options: RunOptions) -> Linter:
        linter = getattr(self._local, "linter", None)
        if linter is None:
            linter = self._build_linter(config, options)
            self._local.linter = linter
        return linter

    def _run_parallel(self, paths: list[Path], config: LinterConfig, options: RunOptions) -> list[LintResult]:
        self._local = threading.local()
        results: list[LintResult] = []

        def _task(path: Path) -> Optional[LintResult]:
            return self._lint_file(self._thread_linter(config, options), path, options)

        with ThreadPoolExecutor(max_workers=options.jobs) as executor:
            futures = [executor.submit(_task, path) for path in paths]
            for future in as_completed(futures):
                result = future.result()
                if result is not None:
                    results.append(result)
        return results

    def _lint_file(self, linter: Linter, path: Path, options: RunOptions) -> Optional[LintResult]:
        try:
            source = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Failed to read file %s: %s", path, exc)
            return None

        result = linter.lint(
            display_path(path),
            source,
            fix=options.apply_fixes,
            unsafe=options.unsafe_fix,
        )

        if options.apply_fixes and result.source != source:
            try:
                path.write_bytes(result.source.encode("utf-8"))
            except OSError as exc:
                logger.error("Failed to write fixes to %s: %s", path, exc)
            else:
                logger.info("Wrote %d fix(es) to %s", result.fixed_count, path)
        return result
