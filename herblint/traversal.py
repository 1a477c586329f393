"""
File system traversal: walk directories and collect ERB templates.

Directories are walked recursively, skipping build output, dependency and
VCS directories. Configured include/exclude globs are matched against
display_path(), the path relative to the working directory.

Typical usage:
    from pathlib import Path
    from herblint.config import get_default_config
    from herblint.traversal import discover_files, find_template_files

    # Every .erb file under app/views
    templates = find_template_files(Path("app/views"))

    # Files and directories from the command line, filtered by config globs
    files = discover_files([Path("app/views"), Path("extra.html.erb")], get_default_config())
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Set

from herblint.config import LinterConfig
from herblint.patterns import PatternMatcher

logger = logging.getLogger(__name__)

TEMPLATE_SUFFIX = ".erb"

# Default directories to ignore during traversal
DEFAULT_IGNORE_DIRS: Set[str] = {
    # Build output and caches
    "build",
    "dist",
    "tmp",
    "coverage",
    "__pycache__",
    ".cache",
    ".pytest_cache",

    # Dependency directories
    "node_modules",
    "vendor",
    ".bundle",

    # Version control
    ".git",
    ".svn",
    ".hg",

    # IDE and editor directories
    ".vscode",
    ".idea",

    # Virtual environments
    "venv",
    ".venv",
}


def is_template_file(path: Path) -> bool:
    """
    Check if a file is an ERB template (.erb, including .html.erb).

    Examples:
        >>> is_template_file(Path("show.html.erb"))
        True
        >>> is_template_file(Path("show.html"))
        False
    """
    return path.name.lower().endswith(TEMPLATE_SUFFIX)


def should_ignore_directory(dir_path: Path, ignore_dirs: Set[str]) -> bool:
    """Only the directory name is checked, case-sensitively."""
    return dir_path.name in ignore_dirs


def display_path(path: Path) -> str:
    """
    Path relative to the working directory when possible, with forward slashes.

    Every glob in the configuration (top-level and per rule) is matched
    against this form of the path.
    """
    try:
        relative = path.resolve().relative_to(Path.cwd().resolve())
    except ValueError:
        relative = path
    return relative.as_posix()


def find_template_files(
    root: Path,
    matcher: Optional[PatternMatcher] = None,
    ignore_dirs: Optional[Set[str]] = None,
    follow_symlinks: bool = False,
) -> list[Path]:
    """
    Collect the ERB templates below root.

    Args:
        root: Directory to search.
        matcher: Include/exclude globs, matched against display_path() of
                 each template. None keeps every template.
        ignore_dirs: Directory names never entered. Defaults to DEFAULT_IGNORE_DIRS.
        follow_symlinks: Enter symlinked directories and keep symlinked files.

    Returns:
        Sorted list of template paths.

    Raises:
        FileNotFoundError: If root does not exist.
        NotADirectoryError: If root is not a directory.

    Unreadable subdirectories are logged and skipped.
    """
    if ignore_dirs is None:
        ignore_dirs = DEFAULT_IGNORE_DIRS

    root = root.resolve()
    if not root.exists():
        logger.error("Root directory does not exist: %s", root)
        raise FileNotFoundError(f"Root directory does not exist: {root}")
    if not root.is_dir():
        logger.error("Root path is not a directory: %s", root)
        raise NotADirectoryError(f"Root path is not a directory: {root}")

    logger.info("Starting traversal from: %s", root)
    logger.debug("Traversal config: matcher=%r, ignore_dirs=%s", matcher, ignore_dirs)

    templates: list[Path] = []
    pending = [root]
    while pending:
        directory = pending.pop()
        try:
            entries = list(directory.iterdir())
        except OSError as e:
            logger.warning("Cannot read directory %s: %s", directory, e)
            continue

        for entry in entries:
            if entry.is_symlink() and not follow_symlinks:
                continue
            if entry.is_dir():
                if not should_ignore_directory(entry, ignore_dirs):
                    pending.append(entry)
                continue
            if not (entry.is_file() and is_template_file(entry)):
                continue
            if matcher is not None and not matcher.match(display_path(entry)):
                logger.debug("Out of scope: %s", display_path(entry))
                continue
            templates.append(entry)

    templates.sort()
    logger.info("Traversal complete: found %d template(s) in %s", len(templates), root)
    return templates


def discover_files(paths: Iterable[Path], config: LinterConfig) -> list[Path]:
    """
    Resolve command-line paths into the files to lint.

    Files named explicitly are always linted. Templates found in directories
    are kept when they match config.include and not config.exclude; the
    globs are relative to the working directory, whichever directory was
    named on the command line.
    """
    matcher = config.file_matcher()
    discovered: list[Path] = []
    for path in paths:
        if path.is_file():
            discovered.append(path)
        else:
            discovered.extend(find_template_files(path, matcher))
    return discovered
