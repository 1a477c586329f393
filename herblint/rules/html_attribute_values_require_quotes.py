# Unquoted attribute values (`class=foo`) are fixed by wrapping them in double quotes.

from __future__ import annotations

from herblint.findings.models import Severity
from herblint.rules.base import VisitorRule
from herblint.tree import Node, NodeKind, SyntaxTree


class AttributeValuesRequireQuotesRule(VisitorRule):
    rule_name = "html-attribute-values-require-quotes"
    description = "Require quotes around attribute values"
    default_severity = Severity.WARNING
    safe_autofixable = True

    def visit_html_attribute(self, node: Node) -> None:
        value = self.tree.attribute_value(node)
        if value is not None and not value.quoted:
            name = self.tree.attribute_name(node)
            self.add_offense_with_autofix(
                f"Attribute value should be quoted: `{name}=\"{self.tree.text_of(value)}\"`",
                node.location,
                node,
            )
        self.generic_visit(node)

    def autofix(self, node: Node, tree: SyntaxTree) -> bool:
        value = tree.attribute_value(node)
        if value is None or value.quoted:
            return False
        # A value with ERB glued to it (`a<%= b %>`) keeps its parts.
        inner = tree.children(value) or [
            tree.add_node(NodeKind.TOKEN, text=tree.text_of(value), token_type="attribute_value")
        ]
        quoted = tree.add_node(
            NodeKind.HTML_ATTRIBUTE_VALUE,
            quoted=True,
            location=value.location,
            children=[
                tree.add_node(NodeKind.TOKEN, text='"', token_type='"'),
                *inner,
                tree.add_node(NodeKind.TOKEN, text='"', token_type='"'),
            ],
        )
        tree.replace(value, quoted)
        return True
