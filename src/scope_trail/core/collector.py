"""Collector: fold a file's scan events into annotations."""

from __future__ import annotations

import logging
from typing import Iterable

from scope_trail.model import AnnotationKind, EventKind, SymbolKind
from scope_trail.model.annotation import Annotation, Location, make_fingerprint
from scope_trail.model.events import ScanEvent
from scope_trail.model.scope import ScopeNode

_logger = logging.getLogger(__name__)


class AnnotationCollector:
    """Pairs doc comments with the scope they document.

    ``///`` blocks attach to the next declaration, ``//!`` lines to the
    scope they appear in.  A ``///`` block with no declaration after it is
    reported against its enclosing scope as an orphan.
    """

    def __init__(
        self,
        path: str,
        *,
        include_inner: bool = True,
        include_orphans: bool = True,
    ) -> None:
        self.path = path.replace("\\", "/")
        self.include_inner = include_inner
        self.include_orphans = include_orphans
        self.annotations: list[Annotation] = []
        self._stack: list[ScopeNode] = []
        self._last_decl: ScopeNode | None = None
        self._pending: list[tuple[int, str]] = []
        self._inner: list[tuple[int, str]] = []

    @property
    def current_scope(self) -> ScopeNode | None:
        return self._stack[-1] if self._stack else None

    def feed(self, line: int, event: ScanEvent) -> None:
        kind = getattr(event, "kind", None)
        if kind is EventKind.COMMENT:
            self._flush_inner()
            self._pending.append((line, event.text))
        elif kind is EventKind.FILE_COMMENT:
            self._flush_orphans()
            if self._inner and self._inner[-1][0] != line - 1:
                self._flush_inner()
            self._inner.append((line, event.text))
        elif kind is EventKind.TYPE_DECL:
            self._flush_inner()
            if self._pending:
                self._emit(
                    AnnotationKind.ITEM,
                    self._pending,
                    event.node.render(),
                    event.node.kind,
                    decl_line=line,
                )
                self._pending = []
            self._last_decl = event.node
        elif kind is EventKind.ENTER_SCOPE:
            self._flush_inner()
            if self._last_decl is None:
                _logger.warning("%s:%d: scope entered without a declaration", self.path, line)
                return
            self._stack.append(self._last_decl.clone())
            self._last_decl = None
        elif kind is EventKind.EXIT_SCOPE:
            self._flush_all()
            if not self._stack:
                _logger.warning("%s:%d: scope exit with no open scope", self.path, line)
                return
            self._stack.pop()
        else:
            raise TypeError(f"Unknown scan event: {event!r}")

    def finish(self) -> list[Annotation]:
        self._flush_all()
        if self._stack:
            _logger.debug("%s: %d scope(s) still open at end of file", self.path, len(self._stack))
        return self.annotations

    # ── internals ───────────────────────────────────────────────────

    def _flush_all(self) -> None:
        self._flush_inner()
        self._flush_orphans()

    def _flush_inner(self) -> None:
        if not self._inner:
            return
        scope = self.current_scope
        if self.include_inner:
            self._emit(
                AnnotationKind.INNER,
                self._inner,
                scope.render() if scope is not None else "",
                scope.kind if scope is not None else None,
            )
        self._inner = []

    def _flush_orphans(self) -> None:
        if not self._pending:
            return
        scope = self.current_scope
        if self.include_orphans:
            self._emit(
                AnnotationKind.ORPHAN,
                self._pending,
                scope.render() if scope is not None else "",
                None,
            )
        else:
            _logger.debug(
                "%s:%d: doc comment with no declaration dropped",
                self.path,
                self._pending[0][0],
            )
        self._pending = []

    def _emit(
        self,
        kind: AnnotationKind,
        lines: list[tuple[int, str]],
        scope: str,
        target_kind: SymbolKind | None,
        *,
        decl_line: int | None = None,
    ) -> None:
        text = "\n".join(t for _, t in lines)
        fingerprint = make_fingerprint(kind.value, self.path, scope, text)
        index = len(self.annotations)
        self.annotations.append(
            Annotation(
                annotation_id=f"ann_{fingerprint[7:15]}_{index:04d}",
                kind=kind,
                location=Location(
                    path=self.path,
                    line_start=lines[0][0],
                    line_end=lines[-1][0],
                ),
                scope=scope,
                text=text,
                fingerprint=fingerprint,
                target_kind=target_kind,
                decl_line=decl_line,
            )
        )


def collect(
    events: Iterable[tuple[int, ScanEvent]],
    path: str,
    *,
    include_inner: bool = True,
    include_orphans: bool = True,
) -> list[Annotation]:
    """Run a collector over ``(line, event)`` pairs and return its annotations."""
    collector = AnnotationCollector(
        path,
        include_inner=include_inner,
        include_orphans=include_orphans,
    )
    for line, event in events:
        collector.feed(line, event)
    return collector.finish()
