# HTML tag names are written in lowercase. SVG content is left to
# svg-tag-name-capitalization, since SVG names are case sensitive.

from __future__ import annotations

from herblint.findings.models import Severity
from herblint.rules.base import VisitorRule
from herblint.tree import Node, SyntaxTree


class TagNameLowercaseRule(VisitorRule):
    rule_name = "html-tag-name-lowercase"
    description = "Enforce lowercase tag names"
    default_severity = Severity.ERROR
    safe_autofixable = True

    def on_new_investigation(self) -> None:
        self.svg_depth = 0

    def visit_html_element(self, node: Node) -> None:
        tag = self.tree.tag_name(node)
        if tag is not None and tag.lower() == "svg":
            self._check_tag_names(node)
            self.svg_depth += 1
            self.generic_visit(node)
            self.svg_depth -= 1
            return
        if self.svg_depth == 0:
            self._check_tag_names(node)
        self.generic_visit(node)

    def _check_tag_names(self, element: Node) -> None:
        for tag in (self.tree.open_tag(element), self.tree.close_tag(element)):
            if tag is None:
                continue
            token = self.tree.tag_name_token(tag)
            if token is None:
                continue
            name = self.tree.text_of(token)
            if name != name.lower():
                self.add_offense_with_autofix(
                    f"Tag name `{name}` should be lowercase",
                    token.location,
                    token,
                )

    def autofix(self, node: Node, tree: SyntaxTree) -> bool:
        name = tree.text_of(node)
        if name == name.lower():
            return False
        tree.replace(node, tree.copy_node(node, text=name.lower()))
        return True
