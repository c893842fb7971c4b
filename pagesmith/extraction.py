"""
extraction.py

Responsibility: pattern-based structural extraction over raw template text.

Jinja2 templates are not parsed into an AST here. Every structural fact the
pipeline needs (reference statements, definitions, frontmatter, annotation
comments) is recovered with regular expressions behind the small functions in
this module, so callers never see a regex and a real parser could replace them.

All functions are pure: text in, plain values out. Line numbers are 1-based.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

RefKind = Literal["include", "import", "from", "extends"]
RelKey = Literal["next", "prev", "parent", "children", "related"]

REL_KEYS: tuple[RelKey, ...] = ("next", "prev", "parent", "children", "related")

_REF_RE = re.compile(r"""\{%[-+]?\s*(include|import|from|extends)\s+(['"])([^'"]+)\2[^%]*%\}""")
_MACRO_RE = re.compile(r"\{%[-+]?\s*macro\s+([A-Za-z_]\w*)\s*\(")
_MACRO_END_RE = re.compile(r"\{%[-+]?\s*endmacro\b")
_BLOCK_RE = re.compile(r"\{%[-+]?\s*block\s+(\w+)")
_BLOCK_END_RE = re.compile(r"\{%[-+]?\s*endblock\b")

_FRONTMATTER_RE = re.compile(r"^---[ \t]*\r?\n([\s\S]*?)\r?\n---[ \t]*(?:\r?\n|$)")
_FM_TAGS_INLINE_RE = re.compile(r"\btags\s*:\s*\[([^\]]*)\]", re.IGNORECASE)
_FM_TAGS_LIST_RE = re.compile(r"\btags\s*:\s*\n([\s\S]*)", re.IGNORECASE)
_COMMENT_TAGS_RE = re.compile(r"\{#-?\s*tags\s*:\s*([^#]+?)-?#\}", re.IGNORECASE)
_HTML_TAGS_RE = re.compile(r"<!--\s*tags\s*:\s*([\s\S]*?)-->", re.IGNORECASE)

_HEADER_COMMENT_RE = re.compile(r"^\s*\{#-?([\s\S]*?)-?#\}")
_REL_MARKER_RE = re.compile(r"\brelationships\s*:")
_REL_KEY_LINE_RE = re.compile(r"^\s*(next|prev|parent|children|related)\s*:\s*(.*)$")
_REL_DIRECTIVE_RE = re.compile(
    r"\{#-?\s*@rel\s+(next|prev|parent|children|related)\s*:\s*([^#]+?)-?#\}", re.IGNORECASE
)


@dataclass(frozen=True)
class TemplateRef:
    """One include/import/from/extends statement."""

    kind: RefKind
    target: str
    line: int


@dataclass(frozen=True)
class Definition:
    """A macro or block definition."""

    kind: Literal["block", "macro"]
    name: str
    line: int
    end_line: int | None = None


@dataclass(frozen=True)
class RelationshipRef:
    """A raw (unresolved) relationship target as written by the author."""

    key: RelKey
    target: str
    line: int


def line_at(text: str, offset: int) -> int:
    return text.count("\n", 0, offset) + 1


def unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        return value[1:-1].strip()
    return value


def find_references(text: str) -> list[TemplateRef]:
    return [
        TemplateRef(kind=m.group(1), target=m.group(3), line=line_at(text, m.start()))  # type: ignore[arg-type]
        for m in _REF_RE.finditer(text)
    ]


def find_macro_name(text: str) -> str | None:
    """Name of the first macro defined in the template, if any."""
    m = _MACRO_RE.search(text)
    return m.group(1) if m else None


def find_definitions(text: str) -> list[Definition]:
    """
    Macro and block definitions in source order.

    End lines are paired naively with the next closing tag of the same kind,
    which is right for the flat, non-nested definitions templates usually hold.
    """
    starts: list[tuple[int, str, str]] = []
    for m in _BLOCK_RE.finditer(text):
        starts.append((m.start(), "block", m.group(1)))
    for m in _MACRO_RE.finditer(text):
        starts.append((m.start(), "macro", m.group(1)))
    ends = {
        "block": [m.start() for m in _BLOCK_END_RE.finditer(text)],
        "macro": [m.start() for m in _MACRO_END_RE.finditer(text)],
    }

    defs: list[Definition] = []
    for pos, kind, name in sorted(starts):
        end = next((e for e in ends[kind] if e > pos), None)
        defs.append(
            Definition(
                kind=kind,  # type: ignore[arg-type]
                name=name,
                line=line_at(text, pos),
                end_line=line_at(text, end) if end is not None else None,
            )
        )
    return defs


# --- frontmatter ---


def frontmatter_block(text: str) -> str | None:
    """Body of a leading `---` delimited block, without the delimiters."""
    m = _FRONTMATTER_RE.match(text)
    return m.group(1) if m else None


def blank_frontmatter(text: str) -> str:
    """Replace a leading frontmatter block with as many newlines as it spanned."""
    m = _FRONTMATTER_RE.match(text)
    if not m:
        return text
    return "\n" * m.group(0).count("\n") + text[m.end() :]


# --- tags ---


def split_tag_list(value: str) -> list[str]:
    inner = value.strip()
    if inner.startswith("["):
        inner = inner[1:]
    if inner.endswith("]"):
        inner = inner[:-1]
    items = (unquote(part) for part in re.split(r"[,\n]", inner))
    return [item for item in items if item]


def frontmatter_tags(text: str) -> list[str]:
    """Tags from frontmatter, inline `tags: [a, b]` first, then a dash list."""
    block = frontmatter_block(text)
    if block is None:
        return []

    inline = _FM_TAGS_INLINE_RE.search(block)
    if inline:
        return split_tag_list(inline.group(1))

    listed = _FM_TAGS_LIST_RE.search(block)
    if not listed:
        return []
    items: list[str] = []
    for raw in listed.group(1).splitlines():
        line = raw.strip()
        if not line:
            continue
        if not line.startswith("-"):
            break
        value = unquote(line[1:])
        if value:
            items.append(value)
    return items


def comment_tags(text: str) -> list[str]:
    """Tags from a `{# tags: a, b #}` directive."""
    m = _COMMENT_TAGS_RE.search(text)
    return split_tag_list(m.group(1)) if m else []


def html_comment_tags(text: str) -> list[str]:
    """Tags from a `<!-- tags: a, b -->` directive."""
    m = _HTML_TAGS_RE.search(text)
    return split_tag_list(m.group(1)) if m else []


# --- relationships ---


def _split_values(value: str) -> list[str]:
    return [v for v in (unquote(part) for part in value.split(",")) if v]


def relationship_block_refs(text: str) -> list[RelationshipRef]:
    """
    Targets from a `relationships:` block inside the top-of-file comment.

    Each key accepts an inline `[a, b]` list, a dash list on the following
    lines, or a bare scalar, tried in that order.
    """
    header = _HEADER_COMMENT_RE.match(text)
    if not header:
        return []
    marker = _REL_MARKER_RE.search(header.group(1))
    if not marker:
        return []

    offset = header.start(1) + marker.start()
    raw_lines = header.group(1)[marker.start() :].splitlines(keepends=True)
    line_numbers: list[int] = []
    for raw in raw_lines:
        line_numbers.append(line_at(text, offset))
        offset += len(raw)
    lines = [raw.rstrip("\r\n") for raw in raw_lines]

    refs: list[RelationshipRef] = []
    for i, line in enumerate(lines):
        m = _REL_KEY_LINE_RE.match(line)
        if not m:
            continue
        key: RelKey = m.group(1)  # type: ignore[assignment]
        rest = m.group(2).strip()

        if rest.startswith("[") and "]" in rest:
            inner = rest[1 : rest.index("]")]
            refs.extend(RelationshipRef(key, v, line_numbers[i]) for v in _split_values(inner))
            continue

        listed: list[RelationshipRef] = []
        for j in range(i + 1, len(lines)):
            if _REL_KEY_LINE_RE.match(lines[j]):
                break
            item = lines[j].strip()
            if not item.startswith("-"):
                break
            value = unquote(item[1:])
            if value:
                listed.append(RelationshipRef(key, value, line_numbers[j]))

        if listed:
            refs.extend(listed)
        elif rest:
            refs.append(RelationshipRef(key, unquote(rest), line_numbers[i]))
    return refs


def relationship_directive_refs(text: str) -> list[RelationshipRef]:
    """Targets from `{# @rel <key>: a, b #}` directives anywhere in the file."""
    refs: list[RelationshipRef] = []
    for m in _REL_DIRECTIVE_RE.finditer(text):
        key: RelKey = m.group(1).lower()  # type: ignore[assignment]
        line = line_at(text, m.start())
        refs.extend(RelationshipRef(key, v, line) for v in _split_values(m.group(2)))
    return refs
