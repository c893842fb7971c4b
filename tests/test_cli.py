"""Tests for the pagesmith command line."""

from __future__ import annotations

import pytest
from conftest import WorkspaceBuilder

from pagesmith import __version__
from pagesmith.cli import main


def test_build_command_succeeds(workspace: WorkspaceBuilder) -> None:
    workspace.templates({"pages/home.tmpl": "<title>Home {{ title_suffix }}</title>"})

    assert main(["build", "--workspace", str(workspace.root), "--title-suffix", "| Mock"]) == 0
    assert "Home | Mock" in workspace.read(".pagesmith/dist/pages/home.html")


def test_build_with_unknown_space_exits_2(workspace: WorkspaceBuilder, capsys) -> None:
    assert main(["build", "--workspace", str(workspace.root), "--space", "nope"]) == 2
    assert "Unknown space 'nope'" in capsys.readouterr().err


def test_build_error_exits_1(workspace: WorkspaceBuilder, capsys) -> None:
    workspace.templates({"pages/home.tmpl": "<p></p>"})
    workspace.write({".pagesmith/dist": "not a directory"})

    assert main(["build", "--workspace", str(workspace.root)]) == 1
    assert "Cannot create output directory" in capsys.readouterr().err


def test_malformed_config_exits_2(workspace: WorkspaceBuilder, capsys) -> None:
    workspace.write({".pagesmith/spaces.json": "[1, 2"})

    assert main(["build", "--workspace", str(workspace.root)]) == 2
    assert "Failed to parse" in capsys.readouterr().err


def test_check_prints_problems_and_exits_1(workspace: WorkspaceBuilder, capsys) -> None:
    workspace.templates({"pages/home.tmpl": "{% include 'nowhere.tmpl' %}"})

    assert main(["check", "--workspace", str(workspace.root)]) == 1
    out = capsys.readouterr().out
    assert out == ".pagesmith/templates/pages/home.tmpl:1: cannot resolve include target: nowhere.tmpl\n"


def test_check_clean_workspace_exits_0(workspace: WorkspaceBuilder, capsys) -> None:
    workspace.templates({"pages/home.tmpl": "<p></p>"})

    assert main(["check", "--workspace", str(workspace.root)]) == 0
    assert capsys.readouterr().out == ""


def test_check_single_file(workspace: WorkspaceBuilder, capsys) -> None:
    workspace.templates(
        {
            "pages/good.tmpl": "<p></p>",
            "pages/bad.tmpl": "{% extends 'nowhere.tmpl' %}",
        }
    )
    good = workspace.root / ".pagesmith" / "templates" / "pages" / "good.tmpl"

    assert main(["check", "--workspace", str(workspace.root), "--file", str(good)]) == 0
    assert capsys.readouterr().out == ""


def test_check_file_outside_every_space_exits_2(workspace: WorkspaceBuilder, tmp_path, capsys) -> None:
    stray = tmp_path / "stray.tmpl"
    stray.write_text("", encoding="utf-8")

    assert main(["check", "--workspace", str(workspace.root), "--file", str(stray)]) == 2
    assert "not inside any space" in capsys.readouterr().err


def test_symbols_lists_definitions(workspace: WorkspaceBuilder, capsys) -> None:
    workspace.templates({"components/card.tmpl": "{% macro card(p) %}\n{% endmacro %}\n{% block x %}{% endblock %}"})

    assert main(["symbols", "--workspace", str(workspace.root)]) == 0
    assert capsys.readouterr().out == "components/card.tmpl\n  macro card (1-2)\n  block x (3-3)\n"


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--version"])

    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out
