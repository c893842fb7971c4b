"""
layout.py

Responsibility: describe where one space keeps its templates and its output.

A space's template root holds four conventional directories:
- `pages/`: final compositions, one rendered HTML artifact each
- `components/`: macro-bearing templates rendered once per preview state
- `elements/`: low-level partials, never rendered on their own
- `styles/`: the stylesheet copied next to the output

Which of the first three a file falls under is its root kind. The kinds are
mutually exclusive because the directories are siblings.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

RootKind = Literal["page", "component", "element"]

# Workspace-level directory holding the legacy layout and the spaces config.
SENTINEL_DIR = ".pagesmith"

TEMPLATE_SUFFIX = ".tmpl"
# Only extensions the renderer produces output for; a probed target must map to a real page.
DEFAULT_TEMPLATE_EXTENSIONS: tuple[str, ...] = (TEMPLATE_SUFFIX, ".html")
OUTPUT_SUFFIX = ".html"
STYLESHEET_NAME = "design-system.css"

ROOT_DIRS: tuple[str, ...] = ("pages", "components", "elements")
CONVENTIONAL_DIRS: tuple[str, ...] = (*ROOT_DIRS, "styles")

_KIND_BY_DIR: dict[str, RootKind] = {"pages": "page", "components": "component", "elements": "element"}


def is_under(directory: Path, path: Path) -> bool:
    """True if `path` lies inside `directory` (both expected to be absolute)."""
    try:
        path.relative_to(directory)
    except ValueError:
        return False
    return True


def to_posix(path: Path) -> str:
    return str(path).replace(os.sep, "/")


def relative_href(from_dir: Path, target: Path) -> str:
    """POSIX relative path from a directory to a file, as used in generated HTML."""
    return os.path.relpath(target, from_dir).replace(os.sep, "/")


def with_output_suffix(rel: str) -> str:
    """Replace a known template extension with the output extension."""
    for ext in DEFAULT_TEMPLATE_EXTENSIONS:
        if rel.lower().endswith(ext):
            return rel[: -len(ext)] + OUTPUT_SUFFIX
    return rel


@dataclass(frozen=True)
class SpaceLayout:
    """Absolute directory layout for one space build."""

    workspace_root: Path
    template_root: Path
    dist_dir: Path

    @classmethod
    def create(cls, workspace_root: Path, template_root: Path, dist_dir: Path) -> "SpaceLayout":
        ws = Path(workspace_root).resolve()
        return cls(
            workspace_root=ws,
            template_root=(ws / template_root).resolve(),
            dist_dir=(ws / dist_dir).resolve(),
        )

    @property
    def pages_dir(self) -> Path:
        return self.template_root / "pages"

    @property
    def components_dir(self) -> Path:
        return self.template_root / "components"

    @property
    def elements_dir(self) -> Path:
        return self.template_root / "elements"

    @property
    def styles_dir(self) -> Path:
        return self.template_root / "styles"

    @property
    def search_roots(self) -> tuple[Path, Path, Path]:
        """Template search roots in their fixed lookup order."""
        return (self.pages_dir, self.components_dir, self.elements_dir)

    @property
    def pages_out_dir(self) -> Path:
        return self.dist_dir / "pages"

    @property
    def components_out_dir(self) -> Path:
        return self.dist_dir / "components"

    @property
    def stylesheet_out(self) -> Path:
        return self.dist_dir / STYLESHEET_NAME

    @property
    def stylesheet_candidates(self) -> tuple[Path, Path]:
        """The space's own stylesheet first, then the workspace-wide fallback."""
        return (
            self.styles_dir / STYLESHEET_NAME,
            self.workspace_root / SENTINEL_DIR / "styles" / STYLESHEET_NAME,
        )

    def kind_of(self, path: Path) -> RootKind | None:
        """Classify an absolute path by the root directory it falls under."""
        for dirname in ROOT_DIRS:
            if is_under(self.template_root / dirname, path):
                return _KIND_BY_DIR[dirname]
        return None

    def page_output_key(self, page_path: Path) -> str:
        """Output-relative manifest key of a page, e.g. `pages/blog/post.html`."""
        rel = to_posix(page_path.relative_to(self.pages_dir))
        return f"pages/{with_output_suffix(rel)}"

    def missing_directories(self) -> list[Path]:
        return [self.template_root / d for d in CONVENTIONAL_DIRS if not (self.template_root / d).is_dir()]
