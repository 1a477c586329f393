# Images must carry an alt attribute (empty for decorative images).

from __future__ import annotations

from herblint.findings.models import Severity
from herblint.rules.base import VisitorRule
from herblint.tree import Node


class ImgRequireAltRule(VisitorRule):
    rule_name = "html-img-require-alt"
    description = "Require alt attribute on img tags"
    default_severity = Severity.ERROR

    def visit_html_element(self, node: Node) -> None:
        tag = self.tree.tag_name(node)
        if tag is not None and tag.lower() == "img" and self.tree.find_attribute(node, "alt") is None:
            self.add_offense(
                "Missing required `alt` attribute on `<img>` tag. "
                'Add `alt=""` for decorative images or `alt="description"` for informative images.',
                node.location,
            )
        self.generic_visit(node)
