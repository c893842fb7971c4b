"""
spaces.py

Responsibility: load the optional space configuration into a typed model.

The configuration lives at `.pagesmith/spaces.json` (or `spaces.yml` /
`spaces.yaml`) under the workspace root:

    {"defaultSpace": "site", "spaces": [{"name": "site", "templateRoot": "design/templates", "distDir": "design/dist"}]}

Without a configuration file the workspace runs in legacy mode: exactly one
space with fixed default paths under `.pagesmith/`.

The orchestrator and CLI should treat the parsed result as the single source of truth.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pagesmith import PagesmithError
from pagesmith.layout import SENTINEL_DIR, SpaceLayout, is_under
from pagesmith.logging import get_logger

logger = get_logger("spaces")

CONFIG_NAMES = ("spaces.json", "spaces.yml", "spaces.yaml")
LEGACY_SPACE_NAME = "legacy"
LEGACY_TEMPLATE_ROOT = f"{SENTINEL_DIR}/templates"
LEGACY_DIST_DIR = f"{SENTINEL_DIR}/dist"
LEGACY_MIRROR_DIR = f"{SENTINEL_DIR}/design_iterations"


class ConfigError(PagesmithError):
    pass


@dataclass(frozen=True)
class Space:
    """One independent template-root -> output-directory build unit."""

    name: str
    template_root: Path
    dist_dir: Path

    def layout(self, workspace_root: Path) -> SpaceLayout:
        return SpaceLayout.create(workspace_root, self.template_root, self.dist_dir)


@dataclass(frozen=True)
class SpacesConfig:
    """Parsed spaces configuration for a workspace."""

    workspace_root: Path
    spaces: tuple[Space, ...] = field(default_factory=tuple)
    default_space: str | None = None
    legacy: bool = False
    source: Path | None = None

    def get(self, name: str) -> Space:
        for space in self.spaces:
            if space.name == name:
                return space
        known = ", ".join(s.name for s in self.spaces)
        raise ConfigError(f"Unknown space {name!r} (known: {known})")

    def default(self) -> Space:
        if self.default_space:
            return self.get(self.default_space)
        return self.spaces[0]

    def layout(self, space: Space) -> SpaceLayout:
        return space.layout(self.workspace_root)


def legacy_space() -> Space:
    return Space(name=LEGACY_SPACE_NAME, template_root=Path(LEGACY_TEMPLATE_ROOT), dist_dir=Path(LEGACY_DIST_DIR))


def find_config_file(workspace_root: Path) -> Path | None:
    for name in CONFIG_NAMES:
        candidate = workspace_root / SENTINEL_DIR / name
        if candidate.is_file():
            return candidate
    return None


def _read_config(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
        if not text.strip():
            return {}
        if path.suffix == ".json":
            return json.loads(text)
        return yaml.safe_load(text)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e


def _required_str(entry: dict[str, Any], key: str, index: int) -> str:
    value = entry.get(key)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"spaces[{index}].{key} must be a non-empty string")
    return value.strip()


def load_spaces(workspace_root: str | Path) -> SpacesConfig:
    """
    Load the spaces configuration of a workspace.

    Expected keys:
    - defaultSpace: str (optional; first space when absent)
    - spaces: list of {name, templateRoot, distDir} (paths relative to the workspace root)
    """
    root = Path(workspace_root).resolve()
    path = find_config_file(root)
    if path is None:
        return SpacesConfig(workspace_root=root, spaces=(legacy_space(),), legacy=True)

    data = _read_config(path)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain an object/mapping at the top level.")

    raw_spaces = data.get("spaces") or []
    if not isinstance(raw_spaces, list):
        raise ConfigError("`spaces` must be a list when provided.")
    if not raw_spaces:
        logger.warning("%s declares no spaces; falling back to legacy mode", path)
        return SpacesConfig(workspace_root=root, spaces=(legacy_space(),), legacy=True, source=path)

    spaces: list[Space] = []
    for index, entry in enumerate(raw_spaces):
        if not isinstance(entry, dict):
            raise ConfigError(f"spaces[{index}] must be an object/mapping.")
        space = Space(
            name=_required_str(entry, "name", index),
            template_root=Path(_required_str(entry, "templateRoot", index)),
            dist_dir=Path(_required_str(entry, "distDir", index)),
        )
        if any(s.name == space.name for s in spaces):
            raise ConfigError(f"Duplicate space name {space.name!r}")
        spaces.append(space)

    default_space = data.get("defaultSpace")
    if default_space is not None and not isinstance(default_space, str):
        raise ConfigError("`defaultSpace` must be a string when provided.")
    if default_space and default_space not in {s.name for s in spaces}:
        logger.warning("defaultSpace %r is not a configured space; using %r", default_space, spaces[0].name)
        default_space = None

    config = SpacesConfig(
        workspace_root=root,
        spaces=tuple(spaces),
        default_space=default_space or spaces[0].name,
        source=path,
    )
    _warn_shared_outputs(config)
    return config


def _warn_shared_outputs(config: SpacesConfig) -> None:
    seen: dict[Path, str] = {}
    for space in config.spaces:
        dist = config.layout(space).dist_dir
        if dist in seen:
            logger.warning("Spaces %r and %r share output directory %s", seen[dist], space.name, dist)
        else:
            seen[dist] = space.name


def find_space_for_file(config: SpacesConfig, path: str | Path) -> Space | None:
    """The space whose template root contains `path`; the deepest root wins."""
    target = Path(path).resolve()
    best: tuple[int, Space] | None = None
    for space in config.spaces:
        template_root = config.layout(space).template_root
        if is_under(template_root, target):
            depth = len(template_root.parts)
            if best is None or depth > best[0]:
                best = (depth, space)
    return best[1] if best else None
