# id values must be unique within a template. Values built from ERB output
# are dynamic and not compared.

from __future__ import annotations

from herblint.findings.models import Location, Severity
from herblint.rules.base import VisitorRule
from herblint.tree import Node


class NoDuplicateIdsRule(VisitorRule):
    rule_name = "html-no-duplicate-ids"
    description = "Disallow duplicate id attribute values"
    default_severity = Severity.ERROR

    def on_new_investigation(self) -> None:
        self.seen_ids: dict[str, Location] = {}

    def visit_html_attribute(self, node: Node) -> None:
        if self.tree.attribute_name(node).lower() == "id":
            value = (self.tree.attribute_value_text(node) or "").strip()
            if value and "<%" not in value:
                first = self.seen_ids.get(value)
                if first is None:
                    self.seen_ids[value] = node.location
                else:
                    self.add_offense(
                        f"Duplicate id `{value}` (first defined at line {first.start.line})",
                        node.location,
                    )
        self.generic_visit(node)
