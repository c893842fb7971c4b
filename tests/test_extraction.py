"""Tests for pagesmith.extraction."""

from __future__ import annotations

import textwrap

from pagesmith.extraction import (
    RelationshipRef,
    blank_frontmatter,
    comment_tags,
    find_definitions,
    find_macro_name,
    find_references,
    frontmatter_block,
    frontmatter_tags,
    html_comment_tags,
    relationship_block_refs,
    relationship_directive_refs,
    split_tag_list,
)


def test_find_references_recognises_all_four_statements() -> None:
    text = textwrap.dedent(
        """\
        {% extends "base.tmpl" %}
        {% include 'partials/nav.tmpl' %}
        {%- import "forms.tmpl" as forms -%}
        {% from "card.tmpl" import card, badge %}
        {{ "include 'nope.tmpl'" }}
        """
    )

    refs = [(r.kind, r.target, r.line) for r in find_references(text)]

    assert refs == [
        ("extends", "base.tmpl", 1),
        ("include", "partials/nav.tmpl", 2),
        ("import", "forms.tmpl", 3),
        ("from", "card.tmpl", 4),
    ]


def test_find_references_empty_for_plain_markup() -> None:
    assert find_references("<p>{{ title }}</p>\n") == []


def test_find_definitions_pairs_end_tags() -> None:
    text = textwrap.dedent(
        """\
        {% macro card(props) %}
          <div>{{ props.title }}</div>
        {% endmacro %}
        {% block content %}{% endblock %}
        """
    )

    defs = [(d.kind, d.name, d.line, d.end_line) for d in find_definitions(text)]

    assert defs == [("macro", "card", 1, 3), ("block", "content", 4, 4)]


def test_find_macro_name_takes_first_macro() -> None:
    text = "{% macro Card(props) %}{% endmacro %}{% macro other() %}{% endmacro %}"
    assert find_macro_name(text) == "Card"
    assert find_macro_name("<div></div>") is None


def test_frontmatter_block_and_blanking_keep_line_count() -> None:
    text = "---\ntags: [a]\n---\n<p>x</p>\n"

    assert frontmatter_block(text) == "tags: [a]"
    assert blank_frontmatter(text) == "\n\n\n<p>x</p>\n"
    assert blank_frontmatter("<p>no frontmatter</p>") == "<p>no frontmatter</p>"


def test_frontmatter_tags_inline_and_dash_list() -> None:
    inline = "---\ntitle: Home\ntags: [landing, 'hero', ]\n---\n"
    listed = "---\ntags:\n  - landing\n\n  - hero\ntitle: Home\n---\n"

    assert frontmatter_tags(inline) == ["landing", "hero"]
    assert frontmatter_tags(listed) == ["landing", "hero"]
    assert frontmatter_tags("no frontmatter here") == []


def test_comment_and_html_tag_directives() -> None:
    assert comment_tags("{# tags: one, two #}") == ["one", "two"]
    assert comment_tags("{#- tags: one -#}") == ["one"]
    assert html_comment_tags("<!-- tags: a,\n b -->") == ["a", "b"]
    assert html_comment_tags("<!-- just a comment -->") == []


def test_split_tag_list_trims_and_drops_empties() -> None:
    assert split_tag_list("[ a , , b\nc ]") == ["a", "b", "c"]


def test_relationship_block_refs_supports_three_value_shapes() -> None:
    text = textwrap.dedent(
        """\
        {#
        relationships:
          next: [pages/b, "pages/c"]
          prev: pages/a
          children:
            - pages/kids/one
            - pages/kids/two
          related:
        #}
        <h1>Hi</h1>
        """
    )

    refs = relationship_block_refs(text)

    assert refs == [
        RelationshipRef("next", "pages/b", 3),
        RelationshipRef("next", "pages/c", 3),
        RelationshipRef("prev", "pages/a", 4),
        RelationshipRef("children", "pages/kids/one", 6),
        RelationshipRef("children", "pages/kids/two", 7),
    ]


def test_relationship_block_must_be_the_leading_comment() -> None:
    text = "<h1>Title</h1>\n{# relationships:\n  next: pages/b #}\n"
    assert relationship_block_refs(text) == []


def test_relationship_directives_anywhere_in_file() -> None:
    text = "<p>x</p>\n{# @rel next: pages/c, pages/d #}\n{# @REL Parent: index #}\n"

    refs = relationship_directive_refs(text)

    assert refs == [
        RelationshipRef("next", "pages/c", 2),
        RelationshipRef("next", "pages/d", 2),
        RelationshipRef("parent", "index", 3),
    ]
