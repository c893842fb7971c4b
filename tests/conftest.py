from __future__ import annotations

import json
import logging
import textwrap
from pathlib import Path
from typing import Any, Mapping

import pytest

from pagesmith.layout import SpaceLayout

LEGACY_TEMPLATES = ".pagesmith/templates"
LEGACY_DIST = ".pagesmith/dist"


class WorkspaceBuilder:
    """Utility for writing template trees into a throwaway workspace."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = (tmp_path / "workspace").resolve()
        self.root.mkdir()

    def write(self, files: Mapping[str, str]) -> None:
        """Write `path -> contents` entries relative to the workspace root."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")

    def templates(self, files: Mapping[str, str], *, root: str = LEGACY_TEMPLATES) -> None:
        """Write template files relative to a template root."""
        self.write({f"{root}/{rel}": content for rel, content in files.items()})

    def scaffold(self, root: str = LEGACY_TEMPLATES) -> None:
        for name in ("pages", "components", "elements", "styles"):
            (self.root / root / name).mkdir(parents=True, exist_ok=True)

    def layout(self, root: str = LEGACY_TEMPLATES, dist: str = LEGACY_DIST) -> SpaceLayout:
        return SpaceLayout.create(self.root, Path(root), Path(dist))

    def read(self, relative: str) -> str:
        return (self.root / relative).read_text(encoding="utf-8")

    def read_json(self, relative: str) -> Any:
        return json.loads(self.read(relative))


@pytest.fixture
def workspace(tmp_path: Path) -> WorkspaceBuilder:
    return WorkspaceBuilder(tmp_path)


@pytest.fixture(autouse=True)
def _reset_pagesmith_logger():
    # The CLI detaches the pagesmith logger from the root; caplog needs it attached.
    yield
    logger = logging.getLogger("pagesmith")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
