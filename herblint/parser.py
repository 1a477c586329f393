# Tree-sitter setup and template parsing: turn HTML+ERB source into a SyntaxTree.
#
# The ERB layer is parsed with tree-sitter-embedded-template. The HTML between
# ERB tags is parsed with tree-sitter-html restricted to those content ranges,
# and both trees are merged into one lossless SyntaxTree: every ERB tag is
# placed inside the deepest HTML node that fully contains it, and any bytes no
# node claims become TOKEN leaves, so to_source() reproduces the input.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

import tree_sitter
from tree_sitter import Language
from tree_sitter import Node as TSNode
from tree_sitter_embedded_template import language as _erb_language_capsule
from tree_sitter_html import language as _html_language_capsule

from herblint.context import LineIndex
from herblint.findings.models import Location
from herblint.tree import Node, NodeKind, SyntaxTree

logger = logging.getLogger(__name__)

_HTML_LANGUAGE = Language(_html_language_capsule())
_ERB_LANGUAGE = Language(_erb_language_capsule())

ERB_NODE_TYPES = frozenset({"directive", "output_directive", "comment_directive", "graphql_directive"})

# `<%%` prints a literal `<%`; the HTML layer skips it and it stays a text token.
ERB_LITERAL_ESCAPE = b"<%%"

_ELEMENT_TYPES = frozenset({"element", "script_element", "style_element"})
_OPEN_TAG_TYPES = frozenset({"start_tag", "self_closing_tag"})
_CLOSE_TAG_TYPES = frozenset({"end_tag", "erroneous_end_tag"})
_TEXT_TYPES = frozenset({"text", "raw_text", "entity"})

# (start_byte, end_byte, node, contained ERB tags or None for an ERB tag itself)
_Piece = tuple[int, int, TSNode, Optional[list[TSNode]]]


def get_html_language() -> Language:
    return _HTML_LANGUAGE


def get_erb_language() -> Language:
    return _ERB_LANGUAGE


def create_parser(language: Optional[Language] = None) -> tree_sitter.Parser:
    """Create a Tree-sitter Parser for `language` (default: the ERB layer)."""
    return tree_sitter.Parser(language or _ERB_LANGUAGE)


@dataclass(frozen=True)
class ParseError:
    message: str
    location: Location


@dataclass
class ParseResult:
    """Either a tree (success) or the errors that prevented one (failure)."""

    source: str
    tree: Optional[SyntaxTree] = None
    errors: list[ParseError] = field(default_factory=list)

    @property
    def failed(self) -> bool:
        return self.tree is None


class _ByteOffsets:
    """Byte offset -> character offset conversion for one source string."""

    def __init__(self, source: str, data: bytes) -> None:
        self._table: Optional[list[int]] = None
        if len(data) != len(source):
            table = []
            for index, char in enumerate(source):
                table.extend([index] * len(char.encode("utf-8")))
            table.append(len(source))
            self._table = table

    def char(self, byte_offset: int) -> int:
        if self._table is None:
            return byte_offset
        return self._table[byte_offset]


def _first_error_node(node: TSNode) -> Optional[TSNode]:
    if node.is_error or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = _first_error_node(child)
        if found is not None:
            return found
    return None


def _ends_with_unquoted_value(ts_node: TSNode) -> bool:
    if ts_node.type == "attribute_value":
        parent = ts_node.parent
        return parent is not None and parent.type == "attribute"
    if ts_node.type == "attribute" and ts_node.named_child_count:
        last = ts_node.named_children[-1]
        return last.type == "attribute_value" and last.end_byte == ts_node.end_byte
    return False


def _claimed_end(ts_node: TSNode, erb_nodes: list[TSNode]) -> int:
    """
    End byte of the piece for ts_node.

    The HTML layer never sees ERB bytes, so in `class=a<%= b %>` the unquoted
    value stops right before the ERB tag. ERB tags glued to the end of an
    unquoted value belong to that value (and to its attribute).
    """
    end = ts_node.end_byte
    if not _ends_with_unquoted_value(ts_node):
        return end
    by_start = {erb.start_byte: erb for erb in erb_nodes}
    while end in by_start:
        end = by_start[end].end_byte
    return end


def _point(data: bytes, offset: int) -> tuple[int, int]:
    line_start = data.rfind(b"\n", 0, offset) + 1
    return data.count(b"\n", 0, offset), offset - line_start


def _html_ranges(data: bytes, content_ranges: list[tree_sitter.Range]) -> list[tree_sitter.Range]:
    """Content ranges for the HTML layer, minus the `<%%` literal escapes inside them."""
    ranges = []
    for content in content_ranges:
        start = content.start_byte
        escape = data.find(ERB_LITERAL_ESCAPE, start, content.end_byte)
        if escape == -1:
            ranges.append(content)
            continue
        while escape != -1:
            if escape > start:
                ranges.append(tree_sitter.Range(_point(data, start), _point(data, escape), start, escape))
            start = escape + len(ERB_LITERAL_ESCAPE)
            escape = data.find(ERB_LITERAL_ESCAPE, start, content.end_byte)
        if start < content.end_byte:
            ranges.append(
                tree_sitter.Range(_point(data, start), _point(data, content.end_byte), start, content.end_byte)
            )
    return ranges


def _classify(ts_node: TSNode, parent_type: Optional[str]) -> tuple[NodeKind, Optional[str], bool]:
    """Map a tree-sitter-html node to (kind, token_type, quoted)."""
    node_type = ts_node.type
    if ts_node.is_named:
        if node_type in _ELEMENT_TYPES:
            return NodeKind.HTML_ELEMENT, None, False
        if node_type in _OPEN_TAG_TYPES:
            return NodeKind.HTML_OPEN_TAG, None, False
        if node_type in _CLOSE_TAG_TYPES:
            return NodeKind.HTML_CLOSE_TAG, None, False
        if node_type == "attribute":
            return NodeKind.HTML_ATTRIBUTE, None, False
        if node_type == "attribute_name":
            return NodeKind.HTML_ATTRIBUTE_NAME, None, False
        if node_type == "quoted_attribute_value":
            return NodeKind.HTML_ATTRIBUTE_VALUE, None, True
        if node_type == "attribute_value" and parent_type == "attribute":
            return NodeKind.HTML_ATTRIBUTE_VALUE, None, False
        if node_type in _TEXT_TYPES:
            return NodeKind.HTML_TEXT, None, False
        if node_type == "comment":
            return NodeKind.HTML_COMMENT, None, False
        if node_type == "doctype":
            return NodeKind.HTML_DOCTYPE, None, False
    return NodeKind.TOKEN, node_type, False


class _TreeBuilder:
    """Merges one ERB parse and one HTML parse into a SyntaxTree."""

    def __init__(self, source: str, data: bytes) -> None:
        self.source = source
        self.data = data
        self.offsets = _ByteOffsets(source, data)
        self.lines = LineIndex(source)
        self.tree = SyntaxTree()

    def location(self, start_byte: int, end_byte: int) -> Location:
        return self.lines.location(self.offsets.char(start_byte), self.offsets.char(end_byte))

    def slice(self, start_byte: int, end_byte: int) -> str:
        return self.source[self.offsets.char(start_byte) : self.offsets.char(end_byte)]

    def build(self, html_root: Optional[TSNode], erb_nodes: list[TSNode]) -> SyntaxTree:
        root = self.tree.add_node(NodeKind.DOCUMENT, location=self.location(0, len(self.data)))
        self.tree.set_root(root)
        ts_children = html_root.children if html_root is not None else []
        pieces = self._pieces(ts_children, erb_nodes)
        self._attach(root, 0, len(self.data), pieces, "document")
        return self.tree

    def _token(self, start_byte: int, end_byte: int, token_type: str) -> Node:
        return self.tree.add_node(
            NodeKind.TOKEN,
            text=self.slice(start_byte, end_byte),
            token_type=token_type,
            location=self.location(start_byte, end_byte),
        )

    def _gap(self, start_byte: int, end_byte: int) -> Node:
        text = self.slice(start_byte, end_byte)
        return self._token(start_byte, end_byte, "whitespace" if text.isspace() else "text")

    def _pieces(self, ts_children: list[TSNode], erb_nodes: list[TSNode]) -> list[_Piece]:
        """
        Sorted, non-overlapping child pieces for one parent.

        HTML children claim the ERB tags they fully contain. Zero-width HTML
        children and HTML children that only partly overlap an ERB tag are
        skipped; their bytes end up in a gap token.
        """
        pieces: list[_Piece] = []
        pending = list(erb_nodes)
        for child in ts_children:
            if child.start_byte >= child.end_byte:
                continue
            end = _claimed_end(child, pending)
            inside = [
                erb for erb in pending
                if child.start_byte <= erb.start_byte and erb.end_byte <= end
            ]
            inside_starts = {erb.start_byte for erb in inside}
            partial = any(
                erb.start_byte < end and child.start_byte < erb.end_byte
                for erb in pending
                if erb.start_byte not in inside_starts
            )
            if partial:
                logger.debug("Dropping %s node overlapping an ERB tag at byte %d", child.type, child.start_byte)
                continue
            pending = [erb for erb in pending if erb.start_byte not in inside_starts]
            pieces.append((child.start_byte, end, child, inside))
        for erb in pending:
            pieces.append((erb.start_byte, erb.end_byte, erb, None))
        pieces.sort(key=lambda piece: piece[0])
        return pieces

    def _attach(self, node: Node, start_byte: int, end_byte: int, pieces: list[_Piece], node_type: str) -> None:
        """Attach pieces to node, filling uncovered bytes of [start_byte, end_byte) with gap tokens."""
        cursor = start_byte
        for piece_start, piece_end, ts_node, inside in pieces:
            if piece_start > cursor:
                self.tree.append(node, self._gap(cursor, piece_start))
            if inside is None:
                self.tree.append(node, self._erb_node(ts_node))
            else:
                self.tree.append(node, self._html_node(ts_node, piece_end, inside, node_type))
            cursor = piece_end
        if cursor < end_byte:
            self.tree.append(node, self._gap(cursor, end_byte))

    def _html_node(self, ts_node: TSNode, end: int, erb_nodes: list[TSNode], parent_type: str) -> Node:
        kind, token_type, quoted = _classify(ts_node, parent_type)
        start = ts_node.start_byte
        pieces = self._pieces(ts_node.children, erb_nodes)
        node = self.tree.add_node(
            kind,
            text="" if pieces else self.slice(start, end),
            token_type=token_type,
            quoted=quoted,
            location=self.location(start, end),
        )
        if pieces:
            self._attach(node, start, end, pieces, ts_node.type)
        return node

    def _erb_node(self, ts_node: TSNode) -> Node:
        children = ts_node.children
        opening = children[0]
        closing = children[-1] if len(children) > 1 and children[-1].type.endswith("%>") else None
        content_end = closing.start_byte if closing is not None else ts_node.end_byte
        tokens = [
            self._token(opening.start_byte, opening.end_byte, "erb_tag_opening"),
            self._token(opening.end_byte, content_end, "erb_content"),
        ]
        if closing is not None:
            tokens.append(self._token(closing.start_byte, closing.end_byte, "erb_tag_closing"))
        return self.tree.add_node(
            NodeKind.ERB_CONTENT,
            location=self.location(ts_node.start_byte, ts_node.end_byte),
            children=tokens,
        )


class TemplateParser:
    """
    Parses HTML+ERB source into a SyntaxTree.

    A parser instance holds Tree-sitter parsers and is not thread-safe;
    give each worker its own.
    """

    def __init__(self) -> None:
        self._erb_parser = create_parser(_ERB_LANGUAGE)

    def _error(self, builder: _TreeBuilder, node: TSNode, layer: str) -> ParseError:
        if node.is_missing:
            message = f"Missing `{node.type}` in {layer}"
        else:
            snippet = builder.slice(node.start_byte, node.end_byte).strip().splitlines()
            found = snippet[0] if snippet else node.type
            message = f"Unexpected `{found}` in {layer}"
        return ParseError(message=message, location=builder.location(node.start_byte, node.end_byte))

    def parse(self, source: str) -> ParseResult:
        data = source.encode("utf-8")
        builder = _TreeBuilder(source, data)

        erb_tree = self._erb_parser.parse(data)
        erb_error = _first_error_node(erb_tree.root_node)
        if erb_error is not None:
            error = self._error(builder, erb_error, "ERB")
            logger.warning("Parse completed with errors: %s", error.message)
            return ParseResult(source=source, errors=[error])

        erb_nodes = [child for child in erb_tree.root_node.children if child.type in ERB_NODE_TYPES]
        content_ranges = [
            child.range
            for child in erb_tree.root_node.children
            if child.type == "content" and child.end_byte > child.start_byte
        ]

        html_root = None
        html_ranges = _html_ranges(data, content_ranges)
        if html_ranges:
            html_parser = tree_sitter.Parser(_HTML_LANGUAGE, included_ranges=html_ranges)
            html_tree = html_parser.parse(data)
            html_error = _first_error_node(html_tree.root_node)
            if html_error is not None:
                error = self._error(builder, html_error, "HTML")
                logger.warning("Parse completed with errors: %s", error.message)
                return ParseResult(source=source, errors=[error])
            html_root = html_tree.root_node

        tree = builder.build(html_root, erb_nodes)
        logger.debug("Parse succeeded: %d nodes, %d ERB tag(s)", len(tree), len(erb_nodes))
        return ParseResult(source=source, tree=tree)


def parse_source(source: str, parser: Optional[TemplateParser] = None) -> ParseResult:
    """Parse a template string; creates a TemplateParser when none is given."""
    if parser is None:
        parser = TemplateParser()
    return parser.parse(source)
