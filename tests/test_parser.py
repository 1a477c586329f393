"""Tests for the tree-sitter HTML+ERB parser wrapper."""

import logging

import pytest

from herblint.parser import (
    TemplateParser,
    create_parser,
    get_erb_language,
    get_html_language,
    parse_source,
)
from herblint.tree import NodeKind


def _kinds(tree):
    return [node.kind for node in tree.walk()]


def test_languages_load():
    """Both grammars are available as tree-sitter Languages."""
    assert get_html_language() is not None
    assert get_erb_language() is not None


def test_create_parser_returns_parser():
    parser = create_parser()
    assert parser is not None
    assert parser.language is not None


@pytest.mark.parametrize(
    "source",
    [
        "",
        "<div></div>\n",
        '<div class="a" id=main>\n  <p>Hello <%= name %>!</p>\n</div>\n',
        "<% if admin? %>\n  <b>hi</b>\n<% end %>\n",
        "<%# a comment %>\n",
        "<!DOCTYPE html>\n<!-- note -->\n<br>\n",
        "<ul>\r\n  <li>one</li>\r\n</ul>\r\n",
        '<a href="<%= root_path %>" title=\'x\'>home</a>\n',
        "<p>Grüße – 日本語 <%= ok %></p>\n",
        "plain text, no tags",
        "<div class=a<%= b %>></div>\n",
        "<%%= literal %>\n<img>\n",
    ],
)
def test_round_trip_is_lossless(source):
    """Printing the tree gives back the exact input."""
    result = parse_source(source)
    assert not result.failed, result.errors
    assert result.tree.to_source() == source


def test_document_root_and_element_kinds():
    result = parse_source('<div id="x"><img src="a.png"></div>\n')
    tree = result.tree
    assert tree.root.kind == NodeKind.DOCUMENT
    kinds = _kinds(tree)
    assert NodeKind.HTML_ELEMENT in kinds
    assert NodeKind.HTML_OPEN_TAG in kinds
    assert NodeKind.HTML_CLOSE_TAG in kinds
    assert NodeKind.HTML_ATTRIBUTE in kinds

    names = [tree.tag_name(node) for node in tree.walk() if node.kind == NodeKind.HTML_ELEMENT]
    assert names == ["div", "img"]


def test_attribute_values_know_their_quoting():
    tree = parse_source("<div class=a id='b' title=\"c\"></div>\n").tree
    values = {}
    for node in tree.walk():
        if node.kind == NodeKind.HTML_ATTRIBUTE:
            values[tree.attribute_name(node)] = (tree.attribute_value(node).quoted, tree.attribute_value_text(node))
    assert values == {"class": (False, "a"), "id": (True, "b"), "title": (True, "c")}


def test_erb_tags_become_erb_content_nodes():
    tree = parse_source("<p><%= user.name %></p>\n<%# note %>\n").tree
    erb_nodes = [node for node in tree.walk() if node.kind == NodeKind.ERB_CONTENT]
    assert [tree.erb_parts(node) for node in erb_nodes] == [
        ("<%=", " user.name ", "%>"),
        ("<%#", " note ", "%>"),
    ]
    assert tree.is_erb_comment(erb_nodes[1])
    assert not tree.is_erb_comment(erb_nodes[0])


def test_erb_inside_element_is_a_descendant_of_it():
    tree = parse_source("<p>Hi <%= name %></p>\n").tree
    erb = next(node for node in tree.walk() if node.kind == NodeKind.ERB_CONTENT)
    ancestor_kinds = [node.kind for node in tree.ancestors(erb)]
    assert NodeKind.HTML_ELEMENT in ancestor_kinds


def test_erb_inside_quoted_attribute_value():
    tree = parse_source('<a href="/users/<%= id %>">x</a>\n').tree
    attribute = next(node for node in tree.walk() if node.kind == NodeKind.HTML_ATTRIBUTE)
    assert tree.attribute_value_text(attribute) == "/users/<%= id %>"


def test_locations_use_lines_and_character_columns():
    tree = parse_source("<p>é</p>\n<img src=a>\n").tree
    img = [node for node in tree.walk() if node.kind == NodeKind.HTML_ELEMENT][-1]
    assert img.location.start.as_tuple() == (2, 0)
    first = next(node for node in tree.walk() if node.kind == NodeKind.HTML_CLOSE_TAG)
    assert first.location.start.as_tuple() == (1, 4)


def test_unclosed_erb_tag_fails(caplog):
    """A template whose ERB layer cannot be parsed yields no tree."""
    with caplog.at_level(logging.WARNING):
        result = parse_source("<div>\n<%= foo\n</div>\n")
    assert result.failed
    assert result.tree is None
    assert len(result.errors) == 1
    assert "ERB" in result.errors[0].message
    assert "Parse completed with errors" in caplog.text


def test_successful_parse_logs_debug(caplog):
    with caplog.at_level(logging.DEBUG, logger="herblint.parser"):
        parse_source("<div></div>\n")
    assert "Parse succeeded" in caplog.text


def test_parser_instance_is_reusable():
    parser = TemplateParser()
    first = parser.parse("<b>1</b>\n")
    second = parser.parse("<i>2</i>\n")
    assert first.tree.to_source() == "<b>1</b>\n"
    assert second.tree.to_source() == "<i>2</i>\n"


def test_erb_glued_to_unquoted_value_belongs_to_the_value():
    tree = parse_source("<div class=a<%= b %><%= c %> id=x></div>\n").tree
    values = {}
    for node in tree.walk():
        if node.kind == NodeKind.HTML_ATTRIBUTE:
            values[tree.attribute_name(node)] = tree.attribute_value_text(node)
    assert values == {"class": "a<%= b %><%= c %>", "id": "x"}
    erb = next(node for node in tree.walk() if node.kind == NodeKind.ERB_CONTENT)
    assert tree.parent(erb).kind == NodeKind.HTML_ATTRIBUTE_VALUE


def test_erb_literal_escape_is_plain_text():
    """`<%%` prints a literal `<%` and must not break the HTML around it."""
    source = "<%%= literal %>\n<p>a <%% b</p>\n<img>\n"
    result = parse_source(source)
    assert not result.failed, result.errors
    tree = result.tree
    assert tree.to_source() == source
    assert not any(node.kind == NodeKind.ERB_CONTENT for node in tree.walk())
    names = [tree.tag_name(node) for node in tree.walk() if node.kind == NodeKind.HTML_ELEMENT]
    assert names == ["p", "img"]
