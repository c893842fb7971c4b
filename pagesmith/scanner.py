"""
scanner.py

Responsibility: recover the transitive set of components and elements a
template depends on, from include/import/from/extends statements.

Traversal is an explicit stack plus a visited set of canonical paths, so
cyclic includes terminate and shared partials are read once per scan.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from pagesmith.extraction import find_references
from pagesmith.layout import SpaceLayout
from pagesmith.logging import get_logger
from pagesmith.resolver import resolve_template_ref

logger = get_logger("scanner")


@dataclass
class DependencySet:
    components: set[Path] = field(default_factory=set)
    elements: set[Path] = field(default_factory=set)
    # Canonical paths in the order they were read.
    visited: list[Path] = field(default_factory=list)


def scan_dependencies(layout: SpaceLayout, entry: Path) -> DependencySet:
    """
    Scan `entry` and everything it references, transitively.

    Unresolved references are dropped: a reference may legitimately point
    outside the three known roots. Files outside the roots are still traversed
    but never recorded as dependencies.
    """
    result = DependencySet()
    seen: set[Path] = set()
    stack = [entry]

    while stack:
        current = stack.pop().resolve()
        if current in seen:
            continue
        seen.add(current)

        try:
            text = current.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Skipping unreadable template %s: %s", current, e)
            continue
        result.visited.append(current)

        for ref in find_references(text):
            resolved = resolve_template_ref(layout, current, ref.target)
            if resolved is None:
                logger.debug("Unresolved %s %r in %s", ref.kind, ref.target, current)
                continue
            kind = layout.kind_of(resolved)
            if kind == "component":
                result.components.add(resolved)
            elif kind == "element":
                result.elements.add(resolved)
            stack.append(resolved)

    return result
