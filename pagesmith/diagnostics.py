"""
diagnostics.py

Responsibility: static checks over a space's templates without rendering.

Reports every include/import/from/extends target and every page relationship
target that does not resolve to a file, with the line it was written on.
Also lists macro/block definitions for the `symbols` command.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from pagesmith.extraction import Definition, find_definitions, find_references
from pagesmith.layout import DEFAULT_TEMPLATE_EXTENSIONS, SpaceLayout, to_posix
from pagesmith.logging import get_logger
from pagesmith.metadata import relationship_refs
from pagesmith.resolver import resolve_relationship_target, resolve_template_ref

logger = get_logger("diagnostics")


@dataclass(frozen=True)
class Diagnostic:
    path: Path
    line: int
    kind: str
    target: str

    def format(self, root: Path) -> str:
        try:
            shown = to_posix(self.path.relative_to(root))
        except ValueError:
            shown = to_posix(self.path)
        return f"{shown}:{self.line}: cannot resolve {self.kind} target: {self.target}"


def iter_templates(layout: SpaceLayout) -> list[Path]:
    """Every template under the page, component and element roots, sorted per root."""
    found: list[Path] = []
    for root in layout.search_roots:
        if not root.is_dir():
            continue
        files: list[Path] = []
        for dirpath, _dirs, filenames in os.walk(root):
            for name in filenames:
                if name.lower().endswith(DEFAULT_TEMPLATE_EXTENSIONS):
                    files.append(Path(dirpath) / name)
        found.extend(sorted(files, key=lambda p: to_posix(p.relative_to(root))))
    return found


def _read(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Cannot read %s: %s", path, e)
        return None


def check_file(layout: SpaceLayout, path: Path) -> list[Diagnostic]:
    text = _read(path)
    if text is None:
        return []

    problems: list[Diagnostic] = []
    for ref in find_references(text):
        if resolve_template_ref(layout, path, ref.target) is None:
            problems.append(Diagnostic(path=path, line=ref.line, kind=ref.kind, target=ref.target))

    if layout.kind_of(path) == "page":
        for rel in relationship_refs(text):
            if resolve_relationship_target(layout, path, rel.target) is None:
                problems.append(Diagnostic(path=path, line=rel.line, kind=f"relationship {rel.key}", target=rel.target))

    problems.sort(key=lambda d: d.line)
    return problems


def check_space(layout: SpaceLayout) -> list[Diagnostic]:
    problems: list[Diagnostic] = []
    for path in iter_templates(layout):
        problems.extend(check_file(layout, path))
    return problems


def collect_definitions(layout: SpaceLayout) -> dict[Path, list[Definition]]:
    """Macro and block definitions per template; templates defining nothing are left out."""
    out: dict[Path, list[Definition]] = {}
    for path in iter_templates(layout):
        text = _read(path)
        if text is None:
            continue
        defs = find_definitions(text)
        if defs:
            out[path] = defs
    return out
