"""
pagesmith package

This package implements a dependency-aware template build pipeline.

Key responsibilities are split across modules:
- `spaces.py`: load the optional space configuration (or synthesize the legacy space)
- `layout.py`: directory layout of one space and root-kind classification
- `extraction.py`: pattern-based extraction over raw template text
- `resolver.py`: resolve template references and relationship targets to files
- `scanner.py`: transitive include/import/extends dependency scanning
- `metadata.py`: tags and page relationships embedded in template comments
- `renderer.py`: render pages and component previews into an output directory
- `prettify.py`: deterministic HTML pretty-printing of rendered output
- `manifest.py`: manifest.json / canvas-metadata.json assembly
- `orchestrator.py`: run the pipeline for every configured space
- `diagnostics.py`: report unresolved references without building
- `cli.py`: CLI entrypoint (build / check / symbols)
"""

from __future__ import annotations

__all__ = ["PagesmithError", "__version__"]

__version__ = "0.1.0"


class PagesmithError(RuntimeError):
    """Base class for errors that abort a pagesmith command."""
