"""
cli.py

Responsibility: CLI entrypoint for pagesmith.

Commands:
- `build`: render every space (or `--space NAME`) and write manifests
- `check`: report unresolved template references and relationship targets
- `symbols`: list macro and block definitions per template

This module should orchestrate behavior but keep concerns isolated:
- Space configuration: `spaces.py`
- Building: `orchestrator.py`
- Static checks: `diagnostics.py`
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pagesmith import PagesmithError, __version__
from pagesmith.diagnostics import check_file, check_space, collect_definitions
from pagesmith.layout import to_posix
from pagesmith.logging import configure_logging, get_logger
from pagesmith.orchestrator import build_workspace
from pagesmith.renderer import DEFAULT_TITLE_SUFFIX, BuildError
from pagesmith.spaces import ConfigError, Space, SpacesConfig, find_space_for_file, load_spaces

logger = get_logger("cli")


class CLIError(PagesmithError):
    pass


def _selected_space(config: SpacesConfig, name: str | None) -> Space:
    return config.get(name) if name else config.default()


def build_cmd(args: argparse.Namespace) -> int:
    result = build_workspace(args.workspace, only=args.space, title_suffix=args.title_suffix)
    for space_result in result.spaces:
        render = space_result.render
        logger.info(
            "Space %s: %d pages rendered, %d copied, %d component previews, %d manifest entries",
            space_result.space.name,
            render.pages_rendered,
            render.pages_copied,
            render.component_previews,
            space_result.manifest_entries,
        )
    if result.failures:
        logger.warning("%d file(s) failed to render", len(result.failures))
    return 0


def check_cmd(args: argparse.Namespace) -> int:
    config = load_spaces(args.workspace)
    if args.file:
        path = Path(args.file).resolve()
        space = find_space_for_file(config, path)
        if space is None:
            raise CLIError(f"{args.file} is not inside any space's template root")
        problems = check_file(config.layout(space), path)
    else:
        problems = check_space(config.layout(_selected_space(config, args.space)))

    for problem in problems:
        print(problem.format(config.workspace_root))
    if problems:
        logger.warning("%d unresolved reference(s)", len(problems))
        return 1
    logger.info("No unresolved references")
    return 0


def symbols_cmd(args: argparse.Namespace) -> int:
    config = load_spaces(args.workspace)
    layout = config.layout(_selected_space(config, args.space))
    for path, defs in collect_definitions(layout).items():
        print(to_posix(path.relative_to(layout.template_root)))
        for d in defs:
            span = f"{d.line}-{d.end_line}" if d.end_line else f"{d.line}"
            print(f"  {d.kind} {d.name} ({span})")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="pagesmith", description="pagesmith - dependency-aware template build pipeline")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    p.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    sub = p.add_subparsers(dest="command", required=True)

    b = sub.add_parser("build", help="Render pages and component previews, write manifests")
    b.add_argument("--workspace", default=".", help="Workspace root (default: current directory)")
    b.add_argument("--space", action="append", default=None, help="Only build this space (repeatable)")
    b.add_argument("--title-suffix", default=DEFAULT_TITLE_SUFFIX, help="Value of `title_suffix` in page templates")
    b.set_defaults(func=build_cmd)

    c = sub.add_parser("check", help="Report unresolved template references and relationship targets")
    c.add_argument("--workspace", default=".", help="Workspace root (default: current directory)")
    target = c.add_mutually_exclusive_group()
    target.add_argument("--space", default=None, help="Space to check (default: the configured default space)")
    target.add_argument("--file", default=None, help="Check a single template, in whichever space contains it")
    c.set_defaults(func=check_cmd)

    s = sub.add_parser("symbols", help="List macro and block definitions per template")
    s.add_argument("--workspace", default=".", help="Workspace root (default: current directory)")
    s.add_argument("--space", default=None, help="Space to list (default: the configured default space)")
    s.set_defaults(func=symbols_cmd)
    return p


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(verbose=args.verbose, log_file=args.log_file)
    try:
        return int(args.func(args))
    except (ConfigError, CLIError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    except BuildError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
