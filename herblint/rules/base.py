# Rule interfaces: Rule (abstract), VisitorRule (walks the tree), SourceRule
# (scans raw text) and DirectiveRule (inspects herb:disable comments).
# Concrete rules subclass one of these and set the class attributes below.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar, Optional, Union

from herblint.context import RunContext
from herblint.directives import DisableComment, DisableRuleName, parse_disable_comment
from herblint.findings.models import Location, NodeFix, Offense, Severity, SourceFix
from herblint.tree import Node, SyntaxTree

if TYPE_CHECKING:
    from herblint.patterns import PatternMatcher


class Rule(ABC):
    """
    Abstract base class for all lint rules.

    Subclasses must define:
    - rule_name: str, unique kebab-case id (e.g. "html-img-require-alt")
    - description: str, one-line summary shown by reporters
    - check(tree, context) -> list[Offense]

    and may override default_severity, enabled_by_default, safe_autofixable
    and unsafe_autofixable.

    Instances are reused across files. Anything a rule remembers while
    checking one file must be reset in on_new_investigation(), which runs at
    the start of every check().
    """

    rule_name: ClassVar[str]
    description: ClassVar[str] = ""
    default_severity: ClassVar[Severity] = Severity.WARNING
    enabled_by_default: ClassVar[bool] = True
    safe_autofixable: ClassVar[bool] = False
    unsafe_autofixable: ClassVar[bool] = False

    def __init__(
        self,
        severity: Optional[Union[Severity, str]] = None,
        pattern_matcher: Optional["PatternMatcher"] = None,
    ) -> None:
        self.severity = Severity(severity) if severity is not None else self.default_severity
        self.pattern_matcher = pattern_matcher
        self.context: Optional[RunContext] = None
        self._offenses: list[Offense] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(severity={self.severity.value!r})"

    def matches_file(self, file_path: str) -> bool:
        """False when this rule's configured globs exclude file_path."""
        return self.pattern_matcher is None or self.pattern_matcher.match(file_path)

    @abstractmethod
    def check(self, tree: SyntaxTree, context: RunContext) -> list[Offense]:
        """
        Analyze one parsed template and return the offenses found.

        Args:
            tree: The parsed template. Visitor rules walk it; source rules ignore it.
            context: File path, source text and directives for this file.

        Returns:
            One Offense per problem, or an empty list.
        """
        ...

    def on_new_investigation(self) -> None:
        """Reset per-file state. Called at the start of every check()."""

    def _start(self, context: RunContext) -> None:
        self._offenses = []
        self.context = context
        self.on_new_investigation()

    def add_offense(
        self,
        message: str,
        location: Location,
        autofix_context: Optional[Union[NodeFix, SourceFix]] = None,
    ) -> None:
        self._offenses.append(
            Offense(
                rule_name=self.rule_name,
                message=message,
                severity=self.severity,
                location=location,
                autofix_context=autofix_context,
            )
        )


class VisitorRule(Rule):
    """
    Rule that walks the tree depth first.

    Override visit_<kind> for the node kinds you care about, e.g.
    visit_html_element or visit_erb_content. Unhandled kinds fall through
    to generic_visit, which visits the children. A handler that still wants
    the children visited calls self.generic_visit(node) itself.
    """

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.tree: Optional[SyntaxTree] = None

    def check(self, tree: SyntaxTree, context: RunContext) -> list[Offense]:
        self._start(context)
        self.tree = tree
        self.visit(tree.root)
        return list(self._offenses)

    def visit(self, node: Node) -> None:
        handler = getattr(self, f"visit_{node.kind.value}", None)
        if handler is None:
            self.generic_visit(node)
        else:
            handler(node)

    def generic_visit(self, node: Node) -> None:
        for child in self.tree.children(node):
            self.visit(child)

    def add_offense_with_autofix(self, message: str, location: Location, node: Node) -> None:
        self.add_offense(message, location, NodeFix(rule=self, node_id=node.node_id))

    def autofix(self, node: Node, tree: SyntaxTree) -> bool:
        """Mutate tree to resolve the offense anchored at node. True on success."""
        return False


class SourceRule(Rule):
    """
    Rule that scans the raw source instead of the tree, for concerns that are
    not tree shaped (trailing whitespace, final newline).
    """

    def check(self, tree: SyntaxTree, context: RunContext) -> list[Offense]:
        self._start(context)
        self.check_source(context.source, context)
        return list(self._offenses)

    @abstractmethod
    def check_source(self, source: str, context: RunContext) -> None:
        ...

    def add_offense_with_source_autofix(
        self,
        message: str,
        location: Location,
        start_offset: int,
        end_offset: int,
    ) -> None:
        self.add_offense(
            message,
            location,
            SourceFix(rule=self, start_offset=start_offset, end_offset=end_offset),
        )

    def autofix_source(self, offense: Offense, source: str) -> Optional[str]:
        """Return the fixed source, or None when the fix cannot be applied safely."""
        return None

    def location_from_offsets(self, start_offset: int, end_offset: int) -> Location:
        return self.context.location_from_offsets(start_offset, end_offset)


class DirectiveRule(VisitorRule):
    """
    Rule that only looks at `<%# herb:disable ... %>` comments, including
    malformed ones. Subclasses implement check_disable_comment().
    """

    def visit_erb_content(self, node: Node) -> None:
        if not self.tree.is_erb_comment(node):
            return
        token = self.tree.erb_content_token(node)
        if token is None or token.location is None or node.location is None:
            return
        comment = parse_disable_comment(self.tree.text_of(token), token.location, node.location.start.line)
        if comment is not None:
            self.check_disable_comment(comment)

    @abstractmethod
    def check_disable_comment(self, comment: DisableComment) -> None:
        ...

    def offset_location(self, comment: DisableComment, detail: DisableRuleName) -> Location:
        return comment.offset_location(detail)
