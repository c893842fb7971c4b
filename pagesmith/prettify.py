"""
prettify.py

Responsibility: deterministic pretty-printing of rendered HTML.

Rules:
- Block elements start a new line; their children are indented two spaces.
- Inline elements and text flow together and wrap at 120 columns. A wrap
  never happens inside a tag and never splits text that was glued together.
- `pre` and `textarea` are copied verbatim; `script` and `style` bodies are
  dedented and re-indented one level below their tag.
- A run of blank lines in the source becomes at most one blank line.
- Output ends with exactly one newline.

Same input, same output: no state survives between calls.
"""

from __future__ import annotations

import re
import textwrap
from html.parser import HTMLParser

INDENT = "  "
WRAP_WIDTH = 120

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "param", "source", "track", "wbr"}
)
INLINE_ELEMENTS = frozenset(
    {
        "a", "abbr", "b", "bdi", "bdo", "br", "button", "cite", "code", "data", "dfn", "em", "i", "img",
        "input", "kbd", "label", "mark", "q", "s", "samp", "select", "small", "span", "strong", "sub",
        "sup", "time", "u", "var", "wbr",
    }
)
VERBATIM_ELEMENTS = frozenset({"pre", "textarea"})
SCRIPT_ELEMENTS = frozenset({"script", "style"})

# HTML whitespace only; a literal no-break space is content.
_WS = " \t\n\r\f"
_WS_RE = re.compile(r"[ \t\n\r\f]+")


class _Formatter(HTMLParser):
    def __init__(self, width: int) -> None:
        super().__init__(convert_charrefs=False)
        self.width = width
        self.lines: list[str] = []
        self.depth = 0
        self.stack: list[str] = []
        # Current inline run as (text, preceded_by_space).
        self.atoms: list[tuple[str, bool]] = []
        self.pending_space = False
        self.blank_requested = False
        self.blank_after_run = False
        self.verbatim: list[str] | None = None
        self.verbatim_tag = ""
        self.verbatim_depth = 0
        self.script_tag: str | None = None
        self.script_open = ""
        self.script_body: list[str] = []

    # --- output helpers ---

    def _emit(self, text: str) -> None:
        if self.blank_requested and self.lines and self.lines[-1] != "":
            self.lines.append("")
        self.blank_requested = False
        self.lines.append(INDENT * self.depth + text)

    def _emit_multiline(self, text: str) -> None:
        first, *rest = text.split("\n")
        self._emit(first)
        self.lines.extend(rest)

    def _add_atom(self, text: str) -> None:
        self.atoms.append((text, self.pending_space))
        self.pending_space = False
        self.blank_after_run = False

    def _wrap(self) -> list[str]:
        room = max(self.width - len(INDENT) * self.depth, 20)
        lines: list[str] = []
        current = ""
        for text, space in self.atoms:
            if not current:
                current = text
            elif not space:
                current += text
            elif len(current) + 1 + len(text) > room:
                lines.append(current)
                current = text
            else:
                current += " " + text
        if current:
            lines.append(current)
        return lines

    def _flush(self) -> None:
        if self.atoms:
            for line in self._wrap():
                self._emit(line)
            self.atoms = []
            if self.blank_after_run:
                self.blank_requested = True
        self.pending_space = False
        self.blank_after_run = False

    def _emit_verbatim(self) -> None:
        text = "".join(self.verbatim or [])
        self.verbatim = None
        self._emit_multiline(text)

    def _emit_script(self) -> None:
        tag = self.script_tag
        body = "".join(self.script_body)
        self.script_tag = None
        self.script_body = []
        if not body.strip(_WS):
            self._emit(f"{self.script_open}</{tag}>")
            return
        self._emit(self.script_open)
        for line in textwrap.dedent(body).strip("\n").split("\n"):
            line = line.rstrip()
            self.lines.append(INDENT * (self.depth + 1) + line if line else "")
        self._emit(f"</{tag}>")

    # --- parser callbacks ---

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        raw = self.get_starttag_text() or f"<{tag}>"
        if self.verbatim is not None:
            self.verbatim.append(raw)
            if tag == self.verbatim_tag:
                self.verbatim_depth += 1
            return
        if tag in VERBATIM_ELEMENTS:
            self._flush()
            self.verbatim = [raw]
            self.verbatim_tag = tag
            self.verbatim_depth = 1
            return
        if tag in SCRIPT_ELEMENTS:
            self._flush()
            self.script_tag = tag
            self.script_open = raw
            self.script_body = []
            return
        if tag in INLINE_ELEMENTS:
            self._add_atom(raw)
            return
        self._flush()
        self._emit(raw)
        if tag not in VOID_ELEMENTS:
            self.stack.append(tag)
            self.depth += 1

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        raw = self.get_starttag_text() or f"<{tag}/>"
        if self.verbatim is not None:
            self.verbatim.append(raw)
        elif tag in INLINE_ELEMENTS:
            self._add_atom(raw)
        else:
            self._flush()
            self._emit(raw)

    def handle_endtag(self, tag: str) -> None:
        raw = f"</{tag}>"
        if self.verbatim is not None:
            self.verbatim.append(raw)
            if tag == self.verbatim_tag:
                self.verbatim_depth -= 1
                if self.verbatim_depth == 0:
                    self._emit_verbatim()
            return
        if self.script_tag is not None:
            if tag == self.script_tag:
                self._emit_script()
            else:
                self.script_body.append(raw)
            return
        if tag in INLINE_ELEMENTS or tag in VOID_ELEMENTS:
            self._add_atom(raw)
            return
        self._flush()
        if tag in self.stack:
            while self.stack:
                self.depth -= 1
                if self.stack.pop() == tag:
                    break
        self._emit(raw)

    def handle_data(self, data: str) -> None:
        if self.verbatim is not None:
            self.verbatim.append(data)
            return
        if self.script_tag is not None:
            self.script_body.append(data)
            return

        stripped = data.strip(_WS)
        if not stripped:
            if self.atoms:
                self.pending_space = True
                if data.count("\n") >= 2:
                    self.blank_after_run = True
            elif data.count("\n") >= 2:
                self.blank_requested = True
            return

        lead = data[: len(data) - len(data.lstrip(_WS))]
        trail = data[len(data.rstrip(_WS)) :]
        if lead:
            if self.atoms:
                self.pending_space = True
            elif lead.count("\n") >= 2:
                self.blank_requested = True
        for i, word in enumerate(_WS_RE.split(stripped)):
            if i:
                self.pending_space = True
            self._add_atom(word)
        if trail:
            self.pending_space = True
            if trail.count("\n") >= 2:
                self.blank_after_run = True

    def _raw_inline(self, raw: str) -> None:
        if self.verbatim is not None:
            self.verbatim.append(raw)
        elif self.script_tag is not None:
            self.script_body.append(raw)
        else:
            self._add_atom(raw)

    def handle_entityref(self, name: str) -> None:
        self._raw_inline(f"&{name};")

    def handle_charref(self, name: str) -> None:
        self._raw_inline(f"&#{name};")

    def _raw_block(self, raw: str) -> None:
        if self.verbatim is not None:
            self.verbatim.append(raw)
            return
        self._flush()
        self._emit_multiline(raw)

    def handle_comment(self, data: str) -> None:
        self._raw_block(f"<!--{data}-->")

    def handle_decl(self, decl: str) -> None:
        self._raw_block(f"<!{decl}>")

    def unknown_decl(self, data: str) -> None:
        self._raw_block(f"<![{data}]>")

    def handle_pi(self, data: str) -> None:
        self._raw_block(f"<?{data}>")

    def finish(self) -> list[str]:
        self.close()
        if self.script_tag is not None:
            self._emit_script()
        if self.verbatim is not None:
            self._emit_verbatim()
        self._flush()
        return self.lines


def prettify_html(text: str, *, width: int = WRAP_WIDTH) -> str:
    formatter = _Formatter(width)
    formatter.feed(text)
    lines = formatter.finish()
    while lines and not lines[-1].strip():
        lines.pop()
    while lines and not lines[0].strip():
        lines.pop(0)
    return "\n".join(lines) + "\n"
