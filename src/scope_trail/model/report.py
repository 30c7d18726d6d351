"""ScanReport: the schema-aligned result of scanning a tree."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from scope_trail import __version__
from scope_trail.model import AnnotationKind
from scope_trail.model.annotation import Annotation


@dataclass(slots=True)
class ScanReport:
    """Assembled scan result matching ``scan_report.schema.json``.

    Constructed by ``core.runner`` once every file has been collected.
    """

    # ── run metadata ────────────────────────────────────────────────
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )
    tool_version: str = __version__
    config: dict = field(default_factory=dict)

    # ── payload ─────────────────────────────────────────────────────
    files: list[str] = field(default_factory=list)
    annotations: list[Annotation] = field(default_factory=list)

    def scopes(self) -> dict[str, int]:
        """Annotation count per distinct scope path, in first-seen order."""
        counts: dict[str, int] = {}
        for a in self.annotations:
            counts[a.scope] = counts.get(a.scope, 0) + 1
        return counts

    def orphans(self) -> list[Annotation]:
        return [a for a in self.annotations if a.kind is AnnotationKind.ORPHAN]

    # ── serialisation ───────────────────────────────────────────────

    def to_dict(self) -> dict[str, Any]:
        """Produce the full report JSON matching the schema."""
        kind_counts: dict[str, int] = {}
        target_counts: dict[str, int] = {}
        for a in self.annotations:
            kind_counts[a.kind.value] = kind_counts.get(a.kind.value, 0) + 1
            if a.target_kind is not None:
                key = a.target_kind.value
                target_counts[key] = target_counts.get(key, 0) + 1

        return {
            "schema_version": "scan_report_v1",
            "run": {
                "run_id": self.run_id,
                "created_at": self.created_at,
                "tool_version": self.tool_version,
                "config": self.config,
            },
            "summary": {
                "files_scanned": len(self.files),
                "counts": {
                    "annotations_total": len(self.annotations),
                    "by_kind": kind_counts,
                    "by_target_kind": target_counts,
                },
            },
            "files": list(self.files),
            "scopes": [
                {"scope": scope, "annotations": n}
                for scope, n in self.scopes().items()
            ],
            "annotations": [a.to_dict() for a in self.annotations],
        }
