# Inside <svg>, camelCase element names must keep their capitalization.

from __future__ import annotations

from herblint.findings.models import Severity
from herblint.rules.base import VisitorRule
from herblint.tree import Node, SyntaxTree

SVG_ELEMENTS = {
    name.lower(): name
    for name in (
        "animateMotion",
        "animateTransform",
        "clipPath",
        "feBlend",
        "feColorMatrix",
        "feComponentTransfer",
        "feComposite",
        "feConvolveMatrix",
        "feDiffuseLighting",
        "feDisplacementMap",
        "feDistantLight",
        "feDropShadow",
        "feFlood",
        "feFuncA",
        "feFuncB",
        "feFuncG",
        "feFuncR",
        "feGaussianBlur",
        "feImage",
        "feMerge",
        "feMergeNode",
        "feMorphology",
        "feOffset",
        "fePointLight",
        "feSpecularLighting",
        "feSpotLight",
        "feTile",
        "feTurbulence",
        "foreignObject",
        "linearGradient",
        "radialGradient",
        "textPath",
    )
}


class SvgTagNameCapitalizationRule(VisitorRule):
    rule_name = "svg-tag-name-capitalization"
    description = "Enforce correct capitalization of SVG element names"
    default_severity = Severity.WARNING
    safe_autofixable = True

    def on_new_investigation(self) -> None:
        self.inside_svg = False

    def visit_html_element(self, node: Node) -> None:
        tag = self.tree.tag_name(node)
        if tag is not None and tag.lower() == "svg":
            previous = self.inside_svg
            self.inside_svg = True
            self.generic_visit(node)
            self.inside_svg = previous
            return
        if self.inside_svg and tag is not None:
            correct = SVG_ELEMENTS.get(tag.lower())
            if correct is not None and tag != correct:
                token = self.tree.tag_name_token(node)
                self.add_offense_with_autofix(
                    f"SVG element `{tag}` should be `{correct}`",
                    token.location if token is not None else node.location,
                    node,
                )
        self.generic_visit(node)

    def autofix(self, node: Node, tree: SyntaxTree) -> bool:
        fixed = False
        for tag in (tree.open_tag(node), tree.close_tag(node)):
            token = tree.tag_name_token(tag) if tag is not None else None
            if token is None:
                continue
            correct = SVG_ELEMENTS.get(tree.text_of(token).lower())
            if correct is not None and tree.text_of(token) != correct:
                tree.replace(token, tree.copy_node(token, text=correct))
                fixed = True
        return fixed
