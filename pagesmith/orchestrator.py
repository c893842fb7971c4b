"""
orchestrator.py

Responsibility: run the build pipeline for every space of a workspace.

Spaces build one after another and share nothing but the process. In legacy
mode (no spaces configuration) the rendered pages are also mirrored into
`.pagesmith/design_iterations/` and the stylesheet copied to
`.pagesmith/design-system.css`, where older tooling expects them.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from pagesmith.layout import SENTINEL_DIR, STYLESHEET_NAME, SpaceLayout
from pagesmith.logging import get_logger
from pagesmith.manifest import ManifestAssembler
from pagesmith.renderer import DEFAULT_TITLE_SUFFIX, BuildError, RenderPipeline, RenderResult
from pagesmith.spaces import LEGACY_MIRROR_DIR, Space, SpacesConfig, load_spaces

logger = get_logger("orchestrator")


@dataclass
class SpaceBuildResult:
    space: Space
    layout: SpaceLayout
    render: RenderResult
    manifest_entries: int = 0
    manifest_written: bool = False


@dataclass
class WorkspaceBuildResult:
    config: SpacesConfig
    spaces: list[SpaceBuildResult] = field(default_factory=list)

    @property
    def failures(self) -> list[str]:
        return [f for result in self.spaces for f in result.render.failures]


def validate_space(layout: SpaceLayout) -> list[Path]:
    """Warn about each missing conventional directory; the build goes on regardless."""
    missing = layout.missing_directories()
    for directory in missing:
        logger.warning("Missing template directory: %s", directory)
    return missing


def build_space(space: Space, layout: SpaceLayout, *, title_suffix: str = DEFAULT_TITLE_SUFFIX) -> SpaceBuildResult:
    logger.info("Building space %s: %s -> %s", space.name, layout.template_root, layout.dist_dir)
    validate_space(layout)

    assembler = ManifestAssembler(layout)
    render = RenderPipeline(layout, assembler, title_suffix=title_suffix).run()
    written = assembler.write()
    return SpaceBuildResult(
        space=space,
        layout=layout,
        render=render,
        manifest_entries=len(assembler.manifest),
        manifest_written=written,
    )


def mirror_legacy_output(layout: SpaceLayout) -> Path:
    """Replace the legacy mirror with the rendered pages and copy the stylesheet alongside."""
    mirror = layout.workspace_root / LEGACY_MIRROR_DIR
    try:
        if mirror.exists():
            shutil.rmtree(mirror)
        shutil.copytree(layout.pages_out_dir, mirror)
    except OSError as e:
        raise BuildError(f"Cannot mirror {layout.pages_out_dir} to {mirror}: {e}") from e
    logger.info("Mirrored %s to %s", layout.pages_out_dir, mirror)

    css_dest = layout.workspace_root / SENTINEL_DIR / STYLESHEET_NAME
    if not layout.stylesheet_out.is_file():
        logger.warning("No %s in %s; skipping compatibility copy", STYLESHEET_NAME, layout.dist_dir)
        return mirror
    try:
        shutil.copyfile(layout.stylesheet_out, css_dest)
    except OSError as e:
        logger.warning("Failed copying %s to %s: %s", layout.stylesheet_out, css_dest, e)
    return mirror


def build_workspace(
    workspace_root: str | Path,
    *,
    only: Iterable[str] | None = None,
    title_suffix: str = DEFAULT_TITLE_SUFFIX,
) -> WorkspaceBuildResult:
    """
    Build every configured space (or only the named ones) of a workspace.

    Raises:
    - ConfigError: the spaces configuration is malformed or names an unknown space
    - BuildError: an output directory could not be prepared
    """
    config = load_spaces(workspace_root)
    names = list(only or [])
    targets = [config.get(name) for name in names] if names else list(config.spaces)
    if config.legacy:
        logger.info("No spaces configuration found; building legacy space")

    result = WorkspaceBuildResult(config=config)
    for space in targets:
        layout = config.layout(space)
        space_result = build_space(space, layout, title_suffix=title_suffix)
        if config.legacy:
            mirror_legacy_output(layout)
        result.spaces.append(space_result)
    return result
