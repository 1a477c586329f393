"""Tests for the editable syntax tree."""

import pytest

from herblint.tree import NodeKind, SyntaxTree


def _small_tree():
    """document > element(open_tag(<, tag_name, >), text)."""
    tree = SyntaxTree()
    lt = tree.add_node(NodeKind.TOKEN, text="<", token_type="<")
    name = tree.add_node(NodeKind.TOKEN, text="DIV", token_type="tag_name")
    gt = tree.add_node(NodeKind.TOKEN, text=">", token_type=">")
    open_tag = tree.add_node(NodeKind.HTML_OPEN_TAG, children=[lt, name, gt])
    text = tree.add_node(NodeKind.HTML_TEXT, text="hello")
    element = tree.add_node(NodeKind.HTML_ELEMENT, children=[open_tag, text])
    root = tree.add_node(NodeKind.DOCUMENT, children=[element])
    tree.set_root(root)
    return tree, element, name, text


def test_to_source_concatenates_leaves():
    tree, *_ = _small_tree()
    assert tree.to_source() == "<DIV>hello"


def test_walk_is_preorder_in_source_order():
    tree, element, name, text = _small_tree()
    kinds = [node.kind for node in tree.walk()]
    assert kinds[0] == NodeKind.DOCUMENT
    assert kinds[1] == NodeKind.HTML_ELEMENT
    assert kinds[-1] == NodeKind.HTML_TEXT


def test_parent_and_ancestors():
    tree, element, name, _ = _small_tree()
    assert tree.parent(tree.root) is None
    ancestors = [node.kind for node in tree.ancestors(name)]
    assert ancestors == [NodeKind.HTML_OPEN_TAG, NodeKind.HTML_ELEMENT, NodeKind.DOCUMENT]


def test_tag_name_helpers():
    tree, element, name, _ = _small_tree()
    assert tree.tag_name(element) == "DIV"
    assert tree.tag_name_token(element) == name
    assert tree.close_tag(element) is None


def test_replace_swaps_child_slot():
    tree, element, name, _ = _small_tree()
    lowered = tree.copy_node(name, text="div")
    tree.replace(name, lowered)
    assert tree.to_source() == "<div>hello"
    assert not tree.is_attached(name)
    assert tree.is_attached(lowered)
    assert tree.parent(lowered).kind == NodeKind.HTML_OPEN_TAG


def test_replace_detached_node_raises():
    tree, _, name, _ = _small_tree()
    orphan = tree.add_node(NodeKind.TOKEN, text="x")
    with pytest.raises(ValueError):
        tree.replace(orphan, name)


def test_remove_and_insert():
    tree, element, _, text = _small_tree()
    tree.remove(text)
    assert tree.to_source() == "<DIV>"
    tree.insert(element, 0, text)
    assert tree.to_source() == "hello<DIV>"
    assert tree.index_in_parent(text) == 0


def test_copy_node_gets_fresh_id():
    tree, _, name, _ = _small_tree()
    copy = tree.copy_node(name, text="span")
    assert copy.node_id != name.node_id
    assert copy.token_type == "tag_name"
    assert tree.parent(copy) is None


def test_attribute_helpers():
    tree = SyntaxTree()
    attr_name = tree.add_node(NodeKind.HTML_ATTRIBUTE_NAME, text="ID")
    eq = tree.add_node(NodeKind.TOKEN, text="=", token_type="=")
    value = tree.add_node(
        NodeKind.HTML_ATTRIBUTE_VALUE,
        quoted=True,
        children=[
            tree.add_node(NodeKind.TOKEN, text="'", token_type="'"),
            tree.add_node(NodeKind.TOKEN, text="main", token_type="attribute_value"),
            tree.add_node(NodeKind.TOKEN, text="'", token_type="'"),
        ],
    )
    attribute = tree.add_node(NodeKind.HTML_ATTRIBUTE, children=[attr_name, eq, value])
    open_tag = tree.add_node(NodeKind.HTML_OPEN_TAG, children=[attribute])
    tree.set_root(tree.add_node(NodeKind.DOCUMENT, children=[open_tag]))

    assert tree.attribute_name(attribute) == "ID"
    assert tree.attribute_value_text(attribute) == "main"
    assert tree.find_attribute(open_tag, "id") == attribute
    assert tree.find_attribute(open_tag, "class") is None


def test_erb_helpers():
    tree = SyntaxTree()
    erb = tree.add_node(
        NodeKind.ERB_CONTENT,
        children=[
            tree.add_node(NodeKind.TOKEN, text="<%#", token_type="erb_tag_opening"),
            tree.add_node(NodeKind.TOKEN, text=" note ", token_type="erb_content"),
            tree.add_node(NodeKind.TOKEN, text="%>", token_type="erb_tag_closing"),
        ],
    )
    tree.set_root(tree.add_node(NodeKind.DOCUMENT, children=[erb]))
    assert tree.erb_parts(erb) == ("<%#", " note ", "%>")
    assert tree.is_erb_comment(erb)
    assert tree.text_of(tree.erb_content_token(erb)) == " note "
