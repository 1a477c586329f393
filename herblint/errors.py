# Exceptions raised by herblint. Lint violations are never exceptions; only
# configuration and I/O problems propagate to the caller.

from __future__ import annotations

from typing import Iterable, Union


class HerbLintError(Exception):
    """Base class for all errors raised by herblint."""


class ConfigurationError(HerbLintError):
    """
    Invalid configuration: unknown rule names, bad severities, bad glob patterns.

    Carries every problem found so the CLI can report them together.
    """

    def __init__(self, errors: Union[str, Iterable[str]]) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors: list[str] = list(errors)
        super().__init__("; ".join(self.errors))
