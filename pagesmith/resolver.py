"""
resolver.py

Responsibility: map a textual template reference to a file on disk.

Two modes:
- `resolve_template_ref`: how include/import/from/extends targets are found
  (next to the referencing file first, then each search root in order).
- `resolve_relationship_target`: how relationship annotations are found
  (workspace-, template-root- or file-relative, with extension probing).

Both return None when nothing matches. Callers decide whether that is worth a
warning; nothing here raises for a missing file.
"""

from __future__ import annotations

import re
from pathlib import Path

from pagesmith.extraction import unquote
from pagesmith.layout import DEFAULT_TEMPLATE_EXTENSIONS, SENTINEL_DIR, SpaceLayout

_ROOT_PREFIX_RE = re.compile(r"^(pages|components|elements)/")


def resolve_template_ref(layout: SpaceLayout, current_file: Path, ref: str) -> Path | None:
    candidate = (current_file.parent / ref).resolve()
    if candidate.is_file():
        return candidate
    for root in layout.search_roots:
        candidate = (root / ref).resolve()
        if candidate.is_file():
            return candidate
    return None


def _probe(base: Path) -> Path | None:
    if base.suffix:
        return base if base.is_file() else None
    for ext in DEFAULT_TEMPLATE_EXTENSIONS:
        with_ext = base.with_name(base.name + ext)
        if with_ext.is_file():
            return with_ext
    return None


def resolve_relationship_target(layout: SpaceLayout, current_file: Path, target: str) -> Path | None:
    """
    Resolve a relationship annotation target.

    Accepted shapes:
    - `.pagesmith/templates/pages/about` (workspace-relative)
    - `pages/about` (template-root-relative; also components/ and elements/)
    - `about` or `../about` (relative to the annotated file)

    Globs are never expanded: a target containing `*` does not resolve.
    """
    cleaned = unquote(target or "")
    if not cleaned or "*" in cleaned:
        return None

    if cleaned.startswith(f"{SENTINEL_DIR}/"):
        base = layout.workspace_root / cleaned
    elif _ROOT_PREFIX_RE.match(cleaned):
        base = layout.template_root / cleaned
    elif not Path(cleaned).is_absolute():
        base = current_file.parent / cleaned
    else:
        return None

    return _probe(base.resolve())
