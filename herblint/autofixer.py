# One autofix pass over a single file: node fixes against the tree, then
# source fixes against the text. The Linter repeats passes until nothing
# changes (see Linter.lint).

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from herblint.findings.models import NodeFix, Offense, SourceFix
from herblint.tree import SyntaxTree

logger = logging.getLogger(__name__)


@dataclass
class AutofixResult:
    """Source after the pass and the offenses split into fixed / still open."""

    source: str
    fixed: list[Offense] = field(default_factory=list)
    unfixed: list[Offense] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.fixed)


class Autofixer:
    """
    Applies the fixes attached to offenses.

    Only offenses whose rule allows fixing at the requested tier are
    attempted: safe fixes always, unsafe fixes only with unsafe=True.

    Node fixes run first and mutate the tree in place; the tree is then
    printed back to source. Source fixes carry offsets into the source the
    rules saw, so when node fixes changed anything they are left for the next
    pass. Otherwise they are applied from the highest start offset down,
    which keeps the offsets of the remaining fixes valid; a fix whose range
    overlaps one already applied is skipped.

    A fix that returns False/None, raises, or points at a node that is no
    longer in the tree leaves its offense open. Nothing here raises.
    """

    def __init__(
        self,
        tree: Optional[SyntaxTree],
        source: str,
        offenses: Sequence[Offense],
        unsafe: bool = False,
    ) -> None:
        self.tree = tree
        self.source = source
        self.offenses = list(offenses)
        self.unsafe = unsafe

    def autofixable_offenses(self) -> list[Offense]:
        return [offense for offense in self.offenses if offense.autofixable(self.unsafe)]

    def apply(self) -> AutofixResult:
        result = AutofixResult(source=self.source)
        node_offenses: list[Offense] = []
        source_offenses: list[Offense] = []
        for offense in self.offenses:
            fix = offense.autofix_context
            if not offense.autofixable(self.unsafe):
                result.unfixed.append(offense)
            elif isinstance(fix, NodeFix):
                node_offenses.append(offense)
            else:
                source_offenses.append(offense)

        for offense in node_offenses:
            if self._apply_node_fix(offense):
                result.fixed.append(offense)
            else:
                result.unfixed.append(offense)

        if result.fixed:
            result.source = self.tree.to_source()
            if source_offenses:
                logger.debug(
                    "Deferring %d source fix(es) until the tree edits are re-parsed",
                    len(source_offenses),
                )
                result.unfixed.extend(source_offenses)
            return result

        result.source = self._apply_source_fixes(source_offenses, result)
        return result

    def _apply_node_fix(self, offense: Offense) -> bool:
        fix = offense.autofix_context
        if self.tree is None or fix.node_id >= len(self.tree):
            return False
        node = self.tree.node(fix.node_id)
        if not self.tree.is_attached(node):
            logger.debug("Skipping %s fix at line %d: node is no longer in the tree", offense.rule_name, offense.line)
            return False
        try:
            return bool(fix.rule.autofix(node, self.tree))
        except Exception as exc:
            logger.exception("Autofix for %s failed at line %d: %s", offense.rule_name, offense.line, exc)
            return False

    def _apply_source_fixes(self, offenses: list[Offense], result: AutofixResult) -> str:
        source = self.source
        applied: list[SourceFix] = []
        ordered = sorted(
            offenses,
            key=lambda offense: (offense.autofix_context.start_offset, offense.autofix_context.end_offset),
            reverse=True,
        )
        for offense in ordered:
            fix = offense.autofix_context
            if any(done.overlaps(fix.start_offset, fix.end_offset) for done in applied):
                logger.debug("Skipping overlapping %s fix at line %d", offense.rule_name, offense.line)
                result.unfixed.append(offense)
                continue
            try:
                fixed_source = fix.rule.autofix_source(offense, source)
            except Exception as exc:
                logger.exception("Autofix for %s failed at line %d: %s", offense.rule_name, offense.line, exc)
                fixed_source = None
            if fixed_source is None:
                result.unfixed.append(offense)
                continue
            source = fixed_source
            applied.append(fix)
            result.fixed.append(offense)
        return source
