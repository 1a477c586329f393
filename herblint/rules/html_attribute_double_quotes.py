# Prefer double quotes around attribute values. Rewriting the quotes can change
# how embedded ERB output is escaped, so the fix is only applied on request.

from __future__ import annotations

from herblint.findings.models import Severity
from herblint.rules.base import VisitorRule
from herblint.tree import Node, SyntaxTree


class AttributeDoubleQuotesRule(VisitorRule):
    rule_name = "html-attribute-double-quotes"
    description = "Prefer double quotes for HTML attribute values"
    default_severity = Severity.WARNING
    unsafe_autofixable = True

    def visit_html_attribute(self, node: Node) -> None:
        value = self.tree.attribute_value(node)
        if value is not None and value.quoted and self._uses_single_quotes(value):
            text = self.tree.attribute_value_text(node) or ""
            if '"' not in text:
                name = self.tree.attribute_name(node)
                self.add_offense_with_autofix(
                    f"Attribute `{name}` uses single quotes. Prefer double quotes: `{name}=\"{text}\"`",
                    node.location,
                    node,
                )
        self.generic_visit(node)

    def _uses_single_quotes(self, value: Node) -> bool:
        children = self.tree.children(value)
        return bool(children) and children[0].token_type == "'"

    def autofix(self, node: Node, tree: SyntaxTree) -> bool:
        value = tree.attribute_value(node)
        if value is None or not value.quoted:
            return False
        if '"' in (tree.attribute_value_text(node) or ""):
            return False
        quotes = [child for child in tree.children(value) if child.token_type == "'"]
        if len(quotes) != 2:
            return False
        for quote in quotes:
            tree.replace(quote, tree.copy_node(quote, text='"', token_type='"'))
        return True
