"""Tests for pagesmith.scanner."""

from __future__ import annotations

from conftest import WorkspaceBuilder

from pagesmith.scanner import scan_dependencies


def test_no_references_yields_empty_sets(workspace: WorkspaceBuilder) -> None:
    workspace.templates({"pages/plain.tmpl": "<p>{{ title }}</p>\n"})
    layout = workspace.layout()

    deps = scan_dependencies(layout, layout.pages_dir / "plain.tmpl")

    assert deps.components == set()
    assert deps.elements == set()
    assert deps.visited == [layout.pages_dir / "plain.tmpl"]


def test_cyclic_includes_terminate_and_visit_each_file_once(workspace: WorkspaceBuilder) -> None:
    workspace.templates(
        {
            "elements/a.tmpl": "{% include 'b.tmpl' %}",
            "elements/b.tmpl": "{% include 'a.tmpl' %}",
        }
    )
    layout = workspace.layout()
    a = layout.elements_dir / "a.tmpl"
    b = layout.elements_dir / "b.tmpl"

    deps = scan_dependencies(layout, a)

    assert deps.visited == [a, b]
    assert deps.elements == {a, b}


def test_transitive_dependencies_are_classified_by_root(workspace: WorkspaceBuilder) -> None:
    workspace.templates(
        {
            "pages/home.tmpl": """
                {% extends "../layouts/base.tmpl" %}
                {% from "card.tmpl" import card %}
                {% include "does-not-exist.tmpl" %}
            """,
            "layouts/base.tmpl": "{% include 'icon.tmpl' %}",
            "components/card.tmpl": "{% import 'button.tmpl' as b %}{% macro card(p) %}{% endmacro %}",
            "elements/button.tmpl": "{% macro button() %}{% endmacro %}",
            "elements/icon.tmpl": "<svg></svg>",
        }
    )
    layout = workspace.layout()

    deps = scan_dependencies(layout, layout.pages_dir / "home.tmpl")

    assert deps.components == {layout.components_dir / "card.tmpl"}
    assert deps.elements == {layout.elements_dir / "button.tmpl", layout.elements_dir / "icon.tmpl"}
    # Outside every root: traversed for its own references, never recorded.
    assert layout.template_root / "layouts" / "base.tmpl" in deps.visited


def test_shared_partials_are_scanned_once(workspace: WorkspaceBuilder) -> None:
    workspace.templates(
        {
            "pages/home.tmpl": "{% include 'left.tmpl' %}{% include 'right.tmpl' %}",
            "elements/left.tmpl": "{% include 'shared.tmpl' %}",
            "elements/right.tmpl": "{% include 'shared.tmpl' %}",
            "elements/shared.tmpl": "",
        }
    )
    layout = workspace.layout()

    deps = scan_dependencies(layout, layout.pages_dir / "home.tmpl")

    assert deps.visited.count(layout.elements_dir / "shared.tmpl") == 1
    assert len(deps.elements) == 3
