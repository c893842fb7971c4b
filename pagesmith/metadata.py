"""
metadata.py

Responsibility: author metadata embedded in template source.

- Tags: first non-empty form wins, in order frontmatter > `{# tags: #}` >
  `<!-- tags: -->`.
- Relationships (pages only): the YAML-like `relationships:` block in the
  top comment and `{# @rel key: ... #}` directives are merged per key by
  union, then resolved to output page keys such as `pages/about.html`.
- Page data: the frontmatter mapping, loaded with PyYAML, exposed to the page
  template as `page`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import yaml

from pagesmith.extraction import (
    REL_KEYS,
    RelationshipRef,
    comment_tags,
    frontmatter_block,
    frontmatter_tags,
    html_comment_tags,
    relationship_block_refs,
    relationship_directive_refs,
)
from pagesmith.layout import SpaceLayout
from pagesmith.logging import get_logger
from pagesmith.resolver import resolve_relationship_target

logger = get_logger("metadata")

RelationshipMap = dict[str, list[str]]


def _dedupe(items: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(items))


def extract_tags(text: str) -> list[str]:
    for source in (frontmatter_tags, comment_tags, html_comment_tags):
        tags = _dedupe(source(text))
        if tags:
            return tags
    return []


def relationship_refs(text: str) -> list[RelationshipRef]:
    """All raw relationship targets, block syntax first, then `@rel` directives."""
    return relationship_block_refs(text) + relationship_directive_refs(text)


def merge_relationships(text: str) -> RelationshipMap:
    """Union of both annotation syntaxes per key, unresolved and in first-seen order."""
    merged: RelationshipMap = {key: [] for key in REL_KEYS}
    for ref in relationship_refs(text):
        merged[ref.key].append(ref.target)
    return {key: _dedupe(values) for key, values in merged.items()}


def extract_relationships(layout: SpaceLayout, page_path: Path, text: str) -> RelationshipMap:
    """
    Resolve merged relationship targets of a page to output page keys.

    Targets that resolve outside the pages root are not valid endpoints and
    are dropped without a warning; unresolved targets are warned about.
    """
    resolved: RelationshipMap = {key: [] for key in REL_KEYS}
    for key, targets in merge_relationships(text).items():
        for target in targets:
            found = resolve_relationship_target(layout, page_path, target)
            if found is None:
                logger.warning("Relationship target not resolved for %s: %s", page_path, target)
                continue
            if layout.kind_of(found) != "page":
                continue
            resolved[key].append(layout.page_output_key(found))
        resolved[key] = _dedupe(resolved[key])
    return resolved


def has_relationships(relationships: RelationshipMap) -> bool:
    return any(relationships.get(key) for key in REL_KEYS)


def read_frontmatter_data(text: str, *, source: Path | None = None) -> dict[str, Any]:
    """Frontmatter as a mapping; anything unparseable or non-mapping yields {}."""
    block = frontmatter_block(text)
    if block is None:
        return {}
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        logger.warning("Ignoring malformed frontmatter in %s: %s", source or "<template>", e)
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring frontmatter in %s: expected a mapping", source or "<template>")
        return {}
    return data
