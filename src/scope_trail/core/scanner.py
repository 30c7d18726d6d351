"""Line scanner: turn Rust source into a stream of scan events.

This is a recogniser for declaration headers, not a parser.  It tracks:

- doc comments (``///`` → :class:`Comment`, ``//!`` → :class:`FileComment`)
- declaration headers (``struct``, ``fn``, ``impl`` ...), possibly spanning
  several lines, ending at ``{`` (opens a scope) or ``;``
- fields and variants inside ``struct`` / ``enum`` bodies
- brace nesting, so the closing brace of a declaration emits
  :data:`EXIT_SCOPE` while ordinary blocks stay silent

String/char literal contents, ordinary comments and attributes are masked
before braces are counted.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

from scope_trail.model import SymbolKind
from scope_trail.model.events import (
    ENTER_SCOPE,
    EXIT_SCOPE,
    Comment,
    FileComment,
    ScanEvent,
    TypeDecl,
)
from scope_trail.model.scope import ScopeNode

_logger = logging.getLogger(__name__)

_DECL_RE = re.compile(
    r"""
    \s*
    (?:pub(?:\s*\([^)]*\))?\s+)?                        # visibility
    (?:(?:unsafe|async|const|default|auto|extern(?:\s+"[^"]*")?)\s+)*
    (?P<keyword>macro_rules!|macro_rules|macro|struct|mod|enum|fn
               |const|static|type|impl|use|trait)
    (?![\w!])
    """,
    re.VERBOSE,
)

# Field or variant inside a struct/enum body.
_MEMBER_RE = re.compile(r"\s*(?:pub(?:\s*\([^)]*\))?\s+)?(?=[A-Za-z_])")

_NAME_RE = re.compile(r"(?:[\w$]|::)+")
_RAW_STRING_RE = re.compile(r'b?r(#*)"')
_CHAR_RE = re.compile(r"'(?:\\(?:x[0-9a-fA-F]{2}|u\{[0-9a-fA-F]+\}|.)|[^\\'])'")

# Kinds whose bodies list fields or variants rather than items.
_DATA_KINDS = frozenset({SymbolKind.STRUCT, SymbolKind.ENUM, SymbolKind.VARIANT})

# Kinds whose header stops at ``=`` (initialiser, alias target, discriminant).
_ASSIGN_KINDS = frozenset(
    {SymbolKind.CONST, SymbolKind.STATIC, SymbolKind.TYPE_ALIAS, SymbolKind.VARIANT}
)
# Kinds whose ``= ...`` initialiser may contain braces.
_INIT_KINDS = frozenset({SymbolKind.CONST, SymbolKind.STATIC})


def _doc_comment(line: str) -> ScanEvent | None:
    """Return the doc-comment event for *line*, or None for anything else."""
    s = line.lstrip()
    if s.startswith("//!"):
        return FileComment(_strip_marker(s[3:]))
    if s.startswith("///") and not s.startswith("////"):
        return Comment(_strip_marker(s[3:]))
    return None


def _strip_marker(text: str) -> str:
    text = text.rstrip()
    return text[1:] if text.startswith(" ") else text


@dataclass
class _LexState:
    """Masks literals and comments; state survives across lines."""

    block_depth: int = 0
    string_end: str | None = None
    raw: bool = False

    @property
    def busy(self) -> bool:
        """True while inside a block comment or a multi-line string."""
        return bool(self.block_depth) or self.string_end is not None

    def clean(self, line: str) -> str:
        out: list[str] = []
        i, n = 0, len(line)
        while i < n:
            if self.block_depth:
                if line.startswith("*/", i):
                    self.block_depth -= 1
                    i += 2
                elif line.startswith("/*", i):
                    self.block_depth += 1
                    i += 2
                else:
                    i += 1
                continue
            if self.string_end is not None:
                if not self.raw and line[i] == "\\":
                    i += 2
                elif line.startswith(self.string_end, i):
                    out.append('"')
                    i += len(self.string_end)
                    self.string_end = None
                else:
                    i += 1
                continue

            if line.startswith("//", i):
                break
            if line.startswith("/*", i):
                self.block_depth = 1
                i += 2
                continue
            prev = line[i - 1] if i else " "
            if not (prev.isalnum() or prev == "_"):
                m = _RAW_STRING_RE.match(line, i)
                if m:
                    out.append('"')
                    self.string_end = '"' + m.group(1)
                    self.raw = True
                    i = m.end()
                    continue
            c = line[i]
            if c == '"':
                out.append('"')
                self.string_end = '"'
                self.raw = False
                i += 1
                continue
            if c == "'":
                m = _CHAR_RE.match(line, i)
                if m:
                    out.append("' '")
                    i = m.end()
                    continue
            out.append(c)
            i += 1
        return "".join(out)


@dataclass
class _Header:
    """A declaration header being accumulated, possibly over several lines."""

    kind: SymbolKind
    line: int
    text: str = ""
    depth: int = 0      # () and [] nesting
    angle: int = 0      # <> nesting


def build_node(kind: SymbolKind, header: str, parent: ScopeNode | None = None) -> ScopeNode:
    """Build a node from the header text that follows the keyword.

    The name is the leading identifier or path.  The arguments are the
    space-separated pieces after it, so that ``" ".join(arguments)``
    reproduces the header with whitespace collapsed; a leading ``""`` piece
    stands for a space between the name and what follows.
    """
    text = " ".join(header.split())
    if kind is SymbolKind.USE:
        return ScopeNode(kind, text).with_parent(parent)
    if kind is SymbolKind.IMPL:
        text = _skip_generics(text)
    elif kind is SymbolKind.STATIC and text.startswith("mut "):
        text = text[4:]

    m = _NAME_RE.match(text)
    name = m.group(0) if m else ""
    rest = text[m.end():] if m else text
    if kind in _ASSIGN_KINDS:
        rest = rest.split("=", 1)[0]
    pieces = rest.rstrip().split(" ") if rest.strip() else []
    if "where" in pieces:
        pieces = pieces[: pieces.index("where")]
        while pieces and not pieces[-1]:
            pieces.pop()
    return ScopeNode(kind, name, tuple(pieces)).with_parent(parent)


def _skip_generics(text: str) -> str:
    """Drop a leading ``<...>`` parameter list (``impl<T> Foo<T>``)."""
    if not text.startswith("<"):
        return text
    depth = 0
    for i, c in enumerate(text):
        if c == "<":
            depth += 1
        elif c == ">" and text[i - 1] != "-":
            depth -= 1
            if depth == 0:
                return text[i + 1:].lstrip()
    return text


class LineScanner:
    """Stateful scanner fed one line at a time."""

    def __init__(self) -> None:
        self._lex = _LexState()
        # One entry per open brace; the node if a declaration opened it.
        self._frames: list[ScopeNode | None] = []
        self._header: _Header | None = None
        self._attr_depth = 0
        self._line = 0

    # ── public API ──────────────────────────────────────────────────

    def feed(self, line: str) -> list[ScanEvent]:
        self._line += 1
        events: list[ScanEvent] = []
        if not self._lex.busy and self._header is None and not self._attr_depth:
            doc = _doc_comment(line)
            if doc is not None:
                events.append(doc)
                return events
        if self._header is not None:
            self._header.text += " "

        code = self._skip_attributes(self._lex.clean(line))
        self._process(code, events)

        h = self._header
        if h is not None and h.kind is SymbolKind.VARIANT and h.depth == 0:
            self._finish_header(events, opened=False)
        return events

    def finish(self) -> list[ScanEvent]:
        """Flush state at end of input, closing any scope still open."""
        events: list[ScanEvent] = []
        if self._header is not None:
            _logger.debug(
                "Unterminated %s header at line %d dropped",
                self._header.kind.keyword,
                self._header.line,
            )
            self._header = None
        open_decls = [f for f in self._frames if f is not None]
        if open_decls:
            _logger.warning("%d declaration scope(s) left open at end of input", len(open_decls))
        events.extend(EXIT_SCOPE for _ in open_decls)
        self._frames.clear()
        return events

    @property
    def current_scope(self) -> ScopeNode | None:
        """Innermost declaration whose body is currently open."""
        for frame in reversed(self._frames):
            if frame is not None:
                return frame
        return None

    # ── internals ───────────────────────────────────────────────────

    def _skip_attributes(self, code: str) -> str:
        """Strip ``#[...]`` / ``#![...]`` prefixes, even across lines."""
        while True:
            if not self._attr_depth:
                s = code.lstrip()
                if s.startswith("#["):
                    code = s[1:]
                elif s.startswith("#!["):
                    code = s[2:]
                else:
                    return code
            for i, c in enumerate(code):
                if c == "[":
                    self._attr_depth += 1
                elif c == "]":
                    self._attr_depth -= 1
                    if self._attr_depth == 0:
                        code = code[i + 1:]
                        break
            else:
                return ""

    def _in_data_body(self) -> bool:
        top = self._frames[-1] if self._frames else None
        return top is not None and top.kind in _DATA_KINDS

    def _in_initializer(self) -> bool:
        h = self._header
        return h is not None and h.kind in _INIT_KINDS and "=" in h.text

    def _start_header(self, code: str, pos: int) -> int | None:
        m = _DECL_RE.match(code, pos)
        if m:
            kind = SymbolKind.classify(m.group("keyword"))
            self._header = _Header(kind, self._line)
            return m.end()
        if self._in_data_body():
            m = _MEMBER_RE.match(code, pos)
            if m:
                ident = _NAME_RE.match(code, m.end())
                kind = SymbolKind.classify(ident.group(0) if ident else "")
                self._header = _Header(kind, self._line)
                return m.end()
        return None

    def _process(self, code: str, events: list[ScanEvent]) -> None:
        pos = 0
        at_boundary = True
        while pos < len(code):
            if self._header is not None:
                pos = self._feed_header(code, pos, events)
                at_boundary = True
                continue
            if at_boundary:
                started = self._start_header(code, pos)
                if started is not None:
                    pos = started
                    continue
            c = code[pos]
            pos += 1
            if c == "{":
                self._frames.append(None)
                at_boundary = True
            elif c == "}":
                self._close(events)
                at_boundary = True
            elif c == ";" or (c == "," and self._in_data_body()):
                at_boundary = True
            elif not c.isspace():
                at_boundary = False

    def _feed_header(self, code: str, pos: int, events: list[ScanEvent]) -> int:
        """Consume header text; return the position after its terminator."""
        h = self._header
        assert h is not None
        while pos < len(code):
            c = code[pos]
            if h.kind is SymbolKind.USE:
                if c == ";":
                    self._finish_header(events, opened=False)
                    return pos + 1
            elif c in "([" or (c == "{" and self._in_initializer()):
                h.depth += 1
            elif c in ")]" or (c == "}" and h.depth and self._in_initializer()):
                h.depth = max(0, h.depth - 1)
            elif c == "<":
                h.angle += 1
            elif c == ">" and h.angle and not h.text.endswith(("-", "=")):
                h.angle -= 1
            elif h.depth == 0:
                if c == "{":
                    self._finish_header(events, opened=True)
                    return pos + 1
                if c == ";":
                    self._finish_header(events, opened=False)
                    return pos + 1
                if c == "}":
                    # The enclosing body closes; the caller handles the brace.
                    if h.kind is SymbolKind.VARIANT:
                        self._finish_header(events, opened=False)
                    else:
                        _logger.debug("Abandoned %s header at line %d", h.kind.keyword, h.line)
                        self._header = None
                    return pos
                if c == "," and h.kind is SymbolKind.VARIANT and not h.angle:
                    self._finish_header(events, opened=False)
                    return pos + 1
            h.text += c
            pos += 1
        return pos

    def _finish_header(self, events: list[ScanEvent], *, opened: bool) -> None:
        h = self._header
        assert h is not None
        self._header = None
        node = build_node(h.kind, h.text, self.current_scope)
        events.append(TypeDecl(node.clone()))
        if opened:
            self._frames.append(node)
            events.append(ENTER_SCOPE)

    def _close(self, events: list[ScanEvent]) -> None:
        if not self._frames:
            _logger.warning("Unbalanced '}' at line %d ignored", self._line)
            return
        if self._frames.pop() is not None:
            events.append(EXIT_SCOPE)


def scan_lines(lines: Iterable[str]) -> Iterator[tuple[int, ScanEvent]]:
    """Yield ``(line_number, event)`` pairs in file order (1-based lines)."""
    scanner = LineScanner()
    line_no = 0
    for line_no, line in enumerate(lines, start=1):
        for event in scanner.feed(line):
            yield line_no, event
    for event in scanner.finish():
        yield line_no, event


def scan_source(text: str) -> Iterator[tuple[int, ScanEvent]]:
    """Scan a whole source string.

    Only ``\\n`` ends a line (a ``\\r`` before it is dropped); form feeds and
    other Unicode line separators stay inside the line they appear on.
    """
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return scan_lines(line[:-1] if line.endswith("\r") else line for line in lines)
