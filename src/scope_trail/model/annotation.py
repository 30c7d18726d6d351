"""Annotation: one doc comment and the scope path it belongs to."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

from . import AnnotationKind, SymbolKind


@dataclass(frozen=True, slots=True)
class Location:
    """Source lines covered by the comment block."""

    path: str
    line_start: int
    line_end: int


@dataclass(frozen=True, slots=True)
class Annotation:
    """Immutable, schema-aligned collector output.

    Corresponds to ``annotations[]`` in ``scan_report.schema.json``.
    ``scope`` is the rendered scope path; ``""`` means the file itself.
    """

    annotation_id: str
    kind: AnnotationKind
    location: Location
    scope: str
    text: str
    fingerprint: str
    target_kind: SymbolKind | None = None
    decl_line: int | None = None

    @property
    def summary(self) -> str:
        """First non-blank line of the comment text."""
        for line in self.text.splitlines():
            if line.strip():
                return line.strip()
        return ""

    # ── serialisation ───────────────────────────────────────────────

    def to_dict(self) -> dict:
        d: dict = {
            "annotation_id": self.annotation_id,
            "kind": self.kind.value,
            "location": {
                "path": self.location.path,
                "line_start": self.location.line_start,
                "line_end": self.location.line_end,
            },
            "scope": self.scope,
            "text": self.text,
            "fingerprint": self.fingerprint,
        }
        if self.target_kind is not None:
            d["target_kind"] = self.target_kind.value
        if self.decl_line is not None:
            d["decl_line"] = self.decl_line
        return d


def make_fingerprint(
    kind: str,
    rel_path: str,
    scope: str,
    text: str,
) -> str:
    """Deterministic annotation fingerprint: sha256(kind|path|scope|text)."""
    # Normalize path separators for cross-platform stability
    rel_path = rel_path.replace("\\", "/")
    payload = "|".join([kind, rel_path, scope, text.strip()])
    return "sha256:" + hashlib.sha256(payload.encode()).hexdigest()
