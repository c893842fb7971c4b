"""
manifest.py

Responsibility: accumulate per-output provenance and write it once per space.

Two artifacts land at the space's output root:
- `manifest.json`: output-relative path -> page/components/elements/tags/relationships
- `canvas-metadata.json`: output-relative path -> {tags}, only for tagged outputs

One assembler is created per space build and discarded after `write()`.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pagesmith.extraction import find_macro_name
from pagesmith.layout import SpaceLayout, to_posix
from pagesmith.logging import get_logger
from pagesmith.metadata import RelationshipMap, has_relationships
from pagesmith.scanner import DependencySet

logger = get_logger("manifest")

MANIFEST_NAME = "manifest.json"
CANVAS_METADATA_NAME = "canvas-metadata.json"


def _ref(name: str, path: Path) -> dict[str, str]:
    return {"name": name, "path": to_posix(path)}


class ManifestAssembler:
    def __init__(self, layout: SpaceLayout) -> None:
        self.layout = layout
        self.manifest: dict[str, dict[str, Any]] = {}
        self.canvas_metadata: dict[str, dict[str, list[str]]] = {}
        self._component_names: dict[Path, str] = {}

    def component_name(self, path: Path) -> str:
        """Macro name declared by a component file, falling back to its stem."""
        if path not in self._component_names:
            try:
                name = find_macro_name(path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError):
                name = None
            self._component_names[path] = name or path.stem
        return self._component_names[path]

    def _elements(self, deps: DependencySet) -> list[dict[str, str]]:
        return [_ref(p.stem, p) for p in sorted(deps.elements)]

    def _record(self, key: str, entry: dict[str, Any], tags: list[str]) -> None:
        if tags:
            entry["tags"] = list(tags)
            self.canvas_metadata[key] = {"tags": list(tags)}
        self.manifest[key] = entry

    def add_page(
        self,
        page_path: Path,
        deps: DependencySet,
        *,
        tags: list[str],
        relationships: RelationshipMap,
    ) -> str:
        key = self.layout.page_output_key(page_path)
        entry: dict[str, Any] = {
            "page": _ref(page_path.stem, page_path),
            "components": [_ref(self.component_name(p), p) for p in sorted(deps.components)],
            "elements": self._elements(deps),
        }
        if has_relationships(relationships):
            entry["relationships"] = {k: list(v) for k, v in relationships.items()}
        self._record(key, entry, tags)
        return key

    def add_component_state(
        self,
        key: str,
        component_path: Path,
        macro_name: str,
        deps: DependencySet,
        *,
        tags: list[str],
    ) -> None:
        """Record one preview state; the entry component always comes first."""
        entry_path = component_path.resolve()
        nested = [_ref(self.component_name(p), p) for p in sorted(deps.components) if p != entry_path]
        entry: dict[str, Any] = {
            "page": None,
            "components": [_ref(macro_name, entry_path), *nested],
            "elements": self._elements(deps),
        }
        self._record(key, entry, tags)

    def _write_json(self, name: str, data: dict[str, Any]) -> bool:
        dest = self.layout.dist_dir / name
        try:
            dest.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        except (OSError, TypeError, ValueError) as e:
            logger.warning("Failed writing %s: %s", dest, e)
            return False
        return True

    def write(self) -> bool:
        """Serialize both artifacts. Failures are warnings; returns True if both were written."""
        wrote_manifest = self._write_json(MANIFEST_NAME, self.manifest)
        if wrote_manifest:
            logger.info("Wrote %s with %d entries", MANIFEST_NAME, len(self.manifest))
        wrote_meta = self._write_json(CANVAS_METADATA_NAME, self.canvas_metadata)
        if wrote_meta:
            logger.info("Wrote %s with %d entries", CANVAS_METADATA_NAME, len(self.canvas_metadata))
        return wrote_manifest and wrote_meta
