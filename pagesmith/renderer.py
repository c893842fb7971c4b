"""
renderer.py

Responsibility: render one space's templates into its output directory.

Rules:
- Walk template files in sorted order to ensure deterministic output.
- Pages: every `pages/**/*.tmpl` renders to `pages/**/*.html`; plain
  `pages/**/*.html` files are copied unless a rendered page claims the path.
- Components: every macro-bearing `components/**/*.tmpl` renders one preview
  document per declared state, plus a components index (HTML and JSON).
- All HTML output is pretty-printed before it is written.
- A failure to render one file is logged and skipped; only failing to create
  an output directory aborts the build.

Manifest entries are recorded as each output is written, so a later failure
never loses entries for outputs that already exist.
"""

from __future__ import annotations

import json
import os
import shutil
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from jinja2 import Environment, FileSystemLoader

from pagesmith import PagesmithError
from pagesmith.extraction import blank_frontmatter, find_macro_name
from pagesmith.layout import OUTPUT_SUFFIX, TEMPLATE_SUFFIX, SpaceLayout, relative_href, to_posix
from pagesmith.logging import get_logger
from pagesmith.manifest import ManifestAssembler
from pagesmith.metadata import extract_relationships, extract_tags, read_frontmatter_data
from pagesmith.prettify import prettify_html
from pagesmith.scanner import scan_dependencies

logger = get_logger("renderer")

DEFAULT_TITLE_SUFFIX = "| Wireframe"
PREVIEW_SCRIPT_SRC = "https://cdn.tailwindcss.com"

_PREVIEW_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>{{ component_id }} - {{ state }}</title>
  <link rel="stylesheet" href="{{ stylesheet_href }}"/>
  <script src="{{ script_src }}"></script>
</head>
<body class="sd-preview">
  <main class="p-6">
    <section class="max-w-5xl mx-auto">
      {{ body }}
    </section>
  </main>
</body>
</html>
"""

_INDEX_TEMPLATE = """<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width, initial-scale=1"/>
  <title>Components</title>
  <link rel="stylesheet" href="{{ stylesheet_href }}"/>
  <script src="{{ script_src }}"></script>
</head>
<body class="sd-preview">
  <main class="p-6 max-w-5xl mx-auto">
    <h1 class="text-2xl font-semibold mb-4">Components</h1>
    <ul class="space-y-3">
    {% for component in components %}
      <li>
        <div class="font-mono text-sm text-muted-foreground">{{ component.id }}</div>
        <div class="flex flex-wrap gap-2 mt-1">
        {% for state in component.states %}
          <a class="px-2 py-1 rounded border hover:bg-muted" href="./{{ state.outRel }}">{{ state.name }}</a>
        {% endfor %}
        </div>
      </li>
    {% endfor %}
    </ul>
  </main>
</body>
</html>
"""


class BuildError(PagesmithError):
    """An output directory could not be prepared; the space build is aborted."""


@dataclass(frozen=True)
class ComponentState:
    name: str
    # Opaque value handed to the component macro unchanged.
    props: Any


@dataclass
class RenderResult:
    pages_rendered: int = 0
    pages_copied: int = 0
    component_previews: int = 0
    failures: list[str] = field(default_factory=list)
    components_index: list[dict[str, Any]] = field(default_factory=list)
    stylesheet: Path | None = None


class FrontmatterLoader(FileSystemLoader):
    """File-system loader that keeps frontmatter out of rendered output."""

    def get_source(self, environment: Environment, template: str) -> tuple[str, str | None, Any]:
        source, filename, uptodate = super().get_source(environment, template)
        return blank_frontmatter(source), filename, uptodate


def create_environment(layout: SpaceLayout, roots: Iterable[Path] | None = None) -> Environment:
    """Environment searching `roots` in order; the layout's page-first order by default."""
    search = layout.search_roots if roots is None else roots
    return Environment(
        loader=FrontmatterLoader([str(root) for root in search]),
        autoescape=False,
        keep_trailing_newline=True,
    )


def _iter_template_files(directory: Path, suffix: str) -> list[Path]:
    """
    Return all files under directory with the given suffix, in deterministic
    lexicographic order (relative path ordering).
    """
    files: list[Path] = []
    if not directory.is_dir():
        return files
    for root, _dirs, filenames in os.walk(directory):
        root_path = Path(root)
        for name in filenames:
            if name.lower().endswith(suffix):
                files.append(root_path / name)
    files.sort(key=lambda p: to_posix(p.relative_to(directory)))
    return files


def _ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise BuildError(f"Cannot create output directory {path}: {e}") from e


def prepare_output(layout: SpaceLayout) -> None:
    """Create the output root and empty the pages/components subtrees; other files survive."""
    _ensure_dir(layout.dist_dir)
    for out_dir in (layout.pages_out_dir, layout.components_out_dir):
        try:
            if out_dir.exists():
                shutil.rmtree(out_dir)
        except OSError as e:
            raise BuildError(f"Cannot clean output directory {out_dir}: {e}") from e
        _ensure_dir(out_dir)


def copy_stylesheet(layout: SpaceLayout) -> Path | None:
    for candidate in layout.stylesheet_candidates:
        if candidate.is_file():
            try:
                shutil.copyfile(candidate, layout.stylesheet_out)
            except OSError as e:
                logger.warning("Failed copying stylesheet %s: %s", candidate, e)
                return None
            return layout.stylesheet_out
    logger.warning("%s not found in %s", layout.stylesheet_out.name, ", ".join(map(str, layout.stylesheet_candidates)))
    return None


def load_states(component_path: Path) -> list[ComponentState]:
    """
    States from a sibling `<name>.states.json`, e.g.

        {"default": {"props": {"title": "Title"}}, "dense": {"class": "dense"}}

    A state without a `props` key is treated as the props object itself.
    A missing, empty or malformed descriptor yields one empty `default` state.
    """
    states_path = component_path.with_name(f"{component_path.stem}.states.json")
    raw: Any = {}
    if states_path.is_file():
        try:
            raw = json.loads(states_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Failed to parse states JSON for %s: %s", component_path.name, e)
            raw = {}
        if not isinstance(raw, dict):
            logger.warning("States JSON for %s must be an object", component_path.name)
            raw = {}

    states: list[ComponentState] = []
    for name, definition in raw.items():
        if not name or name in (".", "..") or "/" in name or "\\" in name:
            logger.warning("Skipping state %r of %s: not a valid file name", name, component_path.name)
            continue
        if isinstance(definition, dict) and "props" in definition:
            props = definition["props"]
        else:
            props = definition or {}
        states.append(ComponentState(name=name, props=props))
    return states or [ComponentState(name="default", props={})]


class RenderPipeline:
    def __init__(
        self,
        layout: SpaceLayout,
        assembler: ManifestAssembler,
        *,
        title_suffix: str = DEFAULT_TITLE_SUFFIX,
    ) -> None:
        self.layout = layout
        self.assembler = assembler
        self.title_suffix = title_suffix
        self.env = create_environment(layout)
        # Component names are components-relative; a page with the same name must not shadow them.
        self.preview_env = create_environment(layout, (layout.components_dir, layout.elements_dir, layout.pages_dir))
        self.result = RenderResult()

    def _write_html(self, dest: Path, html: str) -> None:
        _ensure_dir(dest.parent)
        dest.write_text(prettify_html(html), encoding="utf-8", newline="\n")

    def _fail(self, what: Path, e: BaseException) -> None:
        logger.warning("Failed rendering %s: %s", what, e)
        self.result.failures.append(to_posix(what))

    # --- pages ---

    def render_pages(self) -> set[str]:
        """Render every page template; returns output paths relative to the pages output dir."""
        rendered: set[str] = set()
        for page in _iter_template_files(self.layout.pages_dir, TEMPLATE_SUFFIX):
            rel = to_posix(page.relative_to(self.layout.pages_dir))
            out_rel = rel[: -len(TEMPLATE_SUFFIX)] + OUTPUT_SUFFIX
            dest = self.layout.pages_out_dir / out_rel
            try:
                text = page.read_text(encoding="utf-8")
                html = self.env.get_template(rel).render(
                    title_suffix=self.title_suffix,
                    stylesheet_href=relative_href(dest.parent, self.layout.stylesheet_out),
                    page=read_frontmatter_data(text, source=page),
                )
                self._write_html(dest, html)
            except BuildError:
                raise
            except Exception as e:  # noqa: BLE001 - one bad page must not stop the build
                self._fail(page, e)
                continue
            logger.info("Built %s", out_rel)
            rendered.add(out_rel)
            self.result.pages_rendered += 1
            self._record_page(page, text)
        return rendered

    def _record_page(self, page: Path, text: str) -> None:
        deps = scan_dependencies(self.layout, page)
        self.assembler.add_page(
            page.resolve(),
            deps,
            tags=extract_tags(text),
            relationships=extract_relationships(self.layout, page.resolve(), text),
        )

    def copy_static_pages(self, rendered: set[str]) -> None:
        """Copy plain HTML pages through the pretty-printer; rendered pages win ties."""
        for page in _iter_template_files(self.layout.pages_dir, OUTPUT_SUFFIX):
            rel = to_posix(page.relative_to(self.layout.pages_dir))
            if rel in rendered:
                logger.debug("Skipping %s: a rendered page has the same output path", rel)
                continue
            try:
                self._write_html(self.layout.pages_out_dir / rel, page.read_text(encoding="utf-8"))
            except BuildError:
                raise
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Failed copying %s: %s", page, e)
                self.result.failures.append(to_posix(page))
                continue
            logger.info("Copied %s", rel)
            self.result.pages_copied += 1

    # --- components ---

    def render_components(self) -> list[dict[str, Any]]:
        index: list[dict[str, Any]] = []
        for component in _iter_template_files(self.layout.components_dir, TEMPLATE_SUFFIX):
            try:
                text = component.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                self._fail(component, e)
                continue
            macro_name = find_macro_name(text)
            if macro_name is None:
                logger.debug("Skipping %s: no macro definition", component)
                continue

            rel = to_posix(component.relative_to(self.layout.components_dir))
            component_id = rel[: -len(TEMPLATE_SUFFIX)]
            states_built = self._render_states(component, rel, component_id, macro_name, text)
            if states_built:
                index.append({"id": component_id, "states": states_built})
        return index

    def _render_states(
        self, component: Path, rel: str, component_id: str, macro_name: str, text: str
    ) -> list[dict[str, str]]:
        out_base = self.layout.components_out_dir / component_id
        _ensure_dir(out_base)
        deps = scan_dependencies(self.layout, component)
        tags = extract_tags(text)

        built: list[dict[str, str]] = []
        for state in load_states(component):
            dest = out_base / f"{state.name}{OUTPUT_SUFFIX}"
            try:
                macro = getattr(self.preview_env.get_template(rel).module, macro_name)
                html = self.env.from_string(_PREVIEW_TEMPLATE).render(
                    component_id=component_id,
                    state=state.name,
                    stylesheet_href=relative_href(dest.parent, self.layout.stylesheet_out),
                    script_src=PREVIEW_SCRIPT_SRC,
                    body=macro(state.props),
                )
                self._write_html(dest, html)
            except BuildError:
                raise
            except Exception as e:  # noqa: BLE001 - one bad state must not stop the build
                self._fail(dest, e)
                continue

            out_rel = to_posix(dest.relative_to(self.layout.components_out_dir))
            logger.info("Built component %s", out_rel)
            built.append({"name": state.name, "outRel": out_rel})
            self.result.component_previews += 1
            self.assembler.add_component_state(f"components/{out_rel}", component, macro_name, deps, tags=tags)
        return built

    def write_components_index(self, index: list[dict[str, Any]]) -> None:
        if not index:
            return
        dest = self.layout.components_out_dir / "index.html"
        html = self.env.from_string(_INDEX_TEMPLATE).render(
            components=index,
            stylesheet_href=relative_href(dest.parent, self.layout.stylesheet_out),
            script_src=PREVIEW_SCRIPT_SRC,
        )
        try:
            self._write_html(dest, html)
            (self.layout.components_out_dir / "index.json").write_text(
                json.dumps(index, indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
            )
        except OSError as e:
            logger.warning("Failed writing components index: %s", e)

    def run(self) -> RenderResult:
        prepare_output(self.layout)
        rendered = self.render_pages()
        self.copy_static_pages(rendered)
        self.result.components_index = self.render_components()
        self.write_components_index(self.result.components_index)
        self.result.stylesheet = copy_stylesheet(self.layout)
        return self.result
