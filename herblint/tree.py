# Lossless syntax tree for HTML+ERB templates, stored as an arena of nodes.
#
# Node scalars are frozen; only the parent -> children lists are editable.
# A fix that needs a different scalar (new tag name, new quoting) creates a
# fresh node and swaps it into the parent's child slot with replace().

from __future__ import annotations

from dataclasses import dataclass, replace as _dataclass_replace
from enum import Enum
from typing import Iterable, Iterator, Optional

from herblint.findings.models import Location


class NodeKind(str, Enum):
    DOCUMENT = "document"
    HTML_ELEMENT = "html_element"
    HTML_OPEN_TAG = "html_open_tag"
    HTML_CLOSE_TAG = "html_close_tag"
    HTML_ATTRIBUTE = "html_attribute"
    HTML_ATTRIBUTE_NAME = "html_attribute_name"
    HTML_ATTRIBUTE_VALUE = "html_attribute_value"
    HTML_TEXT = "html_text"
    HTML_COMMENT = "html_comment"
    HTML_DOCTYPE = "html_doctype"
    ERB_CONTENT = "erb_content"
    TOKEN = "token"


@dataclass(frozen=True)
class Node:
    """
    One node of the template tree.

    text is only meaningful for leaves; a node with children prints as the
    concatenation of its children. token_type names the lexical role of TOKEN
    nodes ("tag_name", "=", "erb_tag_opening", ...). quoted is set on
    attribute values written with quotes.
    """

    node_id: int
    kind: NodeKind
    location: Optional[Location] = None
    text: str = ""
    token_type: Optional[str] = None
    quoted: bool = False


class SyntaxTree:
    """Arena of Nodes with an editable parent -> children relation."""

    def __init__(self) -> None:
        self._nodes: list[Node] = []
        self._children: dict[int, list[int]] = {}
        self._parents: dict[int, int] = {}
        self._root_id: Optional[int] = None

    # -- construction -----------------------------------------------------

    def add_node(
        self,
        kind: NodeKind,
        *,
        text: str = "",
        token_type: Optional[str] = None,
        quoted: bool = False,
        location: Optional[Location] = None,
        children: Iterable[Node] = (),
    ) -> Node:
        """Create a detached node, optionally adopting `children`."""
        node = Node(
            node_id=len(self._nodes),
            kind=kind,
            location=location,
            text=text,
            token_type=token_type,
            quoted=quoted,
        )
        self._nodes.append(node)
        self._children[node.node_id] = []
        for child in children:
            self.append(node, child)
        return node

    def copy_node(self, node: Node, **changes) -> Node:
        """Detached copy of `node` with new scalars; children are not copied."""
        changes.pop("node_id", None)
        fresh = _dataclass_replace(node, node_id=len(self._nodes), **changes)
        self._nodes.append(fresh)
        self._children[fresh.node_id] = []
        return fresh

    def set_root(self, node: Node) -> None:
        self._root_id = node.node_id

    # -- access -----------------------------------------------------------

    @property
    def root(self) -> Node:
        if self._root_id is None:
            raise ValueError("tree has no root")
        return self._nodes[self._root_id]

    def node(self, node_id: int) -> Node:
        return self._nodes[node_id]

    def __len__(self) -> int:
        return len(self._nodes)

    def children(self, node: Node) -> list[Node]:
        return [self._nodes[child_id] for child_id in self._children[node.node_id]]

    def parent(self, node: Node) -> Optional[Node]:
        parent_id = self._parents.get(node.node_id)
        return None if parent_id is None else self._nodes[parent_id]

    def index_in_parent(self, node: Node) -> int:
        parent_id = self._parents[node.node_id]
        return self._children[parent_id].index(node.node_id)

    def is_attached(self, node: Node) -> bool:
        """True if `node` is still reachable from the root."""
        current = node.node_id
        while current != self._root_id:
            parent_id = self._parents.get(current)
            if parent_id is None:
                return False
            current = parent_id
        return True

    def walk(self, node: Optional[Node] = None) -> Iterator[Node]:
        """Yield `node` (default: root) and every descendant, depth first, in source order."""
        stack = [self.root if node is None else node]
        while stack:
            current = stack.pop()
            yield current
            stack.extend(reversed(self.children(current)))

    def ancestors(self, node: Node) -> Iterator[Node]:
        parent = self.parent(node)
        while parent is not None:
            yield parent
            parent = self.parent(parent)

    # -- mutation ---------------------------------------------------------

    def _detach(self, node: Node) -> None:
        parent_id = self._parents.pop(node.node_id, None)
        if parent_id is not None:
            self._children[parent_id].remove(node.node_id)

    def append(self, parent: Node, child: Node) -> None:
        self._detach(child)
        self._children[parent.node_id].append(child.node_id)
        self._parents[child.node_id] = parent.node_id

    def insert(self, parent: Node, index: int, child: Node) -> None:
        self._detach(child)
        self._children[parent.node_id].insert(index, child.node_id)
        self._parents[child.node_id] = parent.node_id

    def remove(self, node: Node) -> None:
        """Detach `node` (and its subtree) from its parent."""
        self._detach(node)

    def replace(self, old: Node, new: Node) -> None:
        """Put `new` in `old`'s child slot; `old` becomes detached."""
        parent_id = self._parents.get(old.node_id)
        if parent_id is None:
            raise ValueError(f"node {old.node_id} is not attached to a parent")
        self._detach(new)
        siblings = self._children[parent_id]
        siblings[siblings.index(old.node_id)] = new.node_id
        del self._parents[old.node_id]
        self._parents[new.node_id] = parent_id

    # -- printing ---------------------------------------------------------

    def text_of(self, node: Node) -> str:
        """Source text of `node`: its own text for leaves, its children's otherwise."""
        parts: list[str] = []
        for current in self.walk(node):
            if not self._children[current.node_id]:
                parts.append(current.text)
        return "".join(parts)

    def to_source(self) -> str:
        return self.text_of(self.root)

    # -- HTML helpers -----------------------------------------------------

    def first_child(self, node: Node, kind: NodeKind, token_type: Optional[str] = None) -> Optional[Node]:
        for child in self.children(node):
            if child.kind == kind and (token_type is None or child.token_type == token_type):
                return child
        return None

    def open_tag(self, element: Node) -> Optional[Node]:
        if element.kind == NodeKind.HTML_OPEN_TAG:
            return element
        return self.first_child(element, NodeKind.HTML_OPEN_TAG)

    def close_tag(self, element: Node) -> Optional[Node]:
        return self.first_child(element, NodeKind.HTML_CLOSE_TAG)

    def tag_name_token(self, node: Node) -> Optional[Node]:
        """The tag_name token of an open/close tag, or of an element's open tag."""
        if node.kind == NodeKind.HTML_ELEMENT:
            tag = self.open_tag(node)
            if tag is None:
                return None
            node = tag
        return self.first_child(node, NodeKind.TOKEN, "tag_name")

    def tag_name(self, node: Node) -> Optional[str]:
        token = self.tag_name_token(node)
        return None if token is None else self.text_of(token)

    def attributes(self, node: Node) -> list[Node]:
        tag = self.open_tag(node) if node.kind == NodeKind.HTML_ELEMENT else node
        if tag is None:
            return []
        return [child for child in self.children(tag) if child.kind == NodeKind.HTML_ATTRIBUTE]

    def attribute_name(self, attribute: Node) -> str:
        name = self.first_child(attribute, NodeKind.HTML_ATTRIBUTE_NAME)
        return "" if name is None else self.text_of(name)

    def attribute_value(self, attribute: Node) -> Optional[Node]:
        return self.first_child(attribute, NodeKind.HTML_ATTRIBUTE_VALUE)

    def attribute_value_text(self, attribute: Node) -> Optional[str]:
        """Attribute value without its quotes, or None for a bare attribute."""
        value = self.attribute_value(attribute)
        if value is None:
            return None
        if not value.quoted:
            return self.text_of(value)
        inner = [child for child in self.children(value) if child.token_type not in ('"', "'")]
        return "".join(self.text_of(child) for child in inner)

    def find_attribute(self, node: Node, name: str) -> Optional[Node]:
        wanted = name.lower()
        for attribute in self.attributes(node):
            if self.attribute_name(attribute).lower() == wanted:
                return attribute
        return None

    # -- ERB helpers ------------------------------------------------------

    def erb_parts(self, node: Node) -> tuple[str, str, str]:
        """(opening, content, closing) of an ERB tag, e.g. ("<%#", " note ", "%>")."""
        opening = content = closing = ""
        for child in self.children(node):
            if child.token_type == "erb_tag_opening":
                opening = self.text_of(child)
            elif child.token_type == "erb_content":
                content = self.text_of(child)
            elif child.token_type == "erb_tag_closing":
                closing = self.text_of(child)
        return opening, content, closing

    def erb_content_token(self, node: Node) -> Optional[Node]:
        return self.first_child(node, NodeKind.TOKEN, "erb_content")

    def is_erb_comment(self, node: Node) -> bool:
        return node.kind == NodeKind.ERB_CONTENT and self.erb_parts(node)[0] == "<%#"
