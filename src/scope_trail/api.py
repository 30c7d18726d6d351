"""
scope_trail.api
===============

Programmatic entrypoints for using scope_trail as a library.

Goals:
  - No argparse / CLI dependencies
  - Deterministic mode support (ci_mode=True)
  - Stable, JSON-friendly outputs that match the bundled schema

Usage::

    from scope_trail.api import scan_path, scope_path

    report, report_dict = scan_path("crates/", ci_mode=True)
    scope_path(source_text, line=42)   # e.g. "mod net§impl Client§fn send()"
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from scope_trail.core.config import ScanConfig
from scope_trail.core.runner import run_scan
from scope_trail.core.scanner import scan_source
from scope_trail.model import EventKind
from scope_trail.model.report import ScanReport
from scope_trail.model.scope import ScopeNode


def scan_path(
    root: str | Path,
    *,
    ci_mode: bool = False,
    config: ScanConfig | None = None,
    **overrides: Any,
) -> tuple[ScanReport, dict[str, Any]]:
    """Scan *root* and return ``(report, report_dict)``.

    Without *config*, settings are discovered from the root (config file,
    environment); *overrides* are applied on top.
    """
    cfg = config if config is not None else ScanConfig.discover(Path(root))
    cfg = cfg.replace(ci_mode=ci_mode, **overrides)
    report = run_scan(cfg)
    return report, report.to_dict()


def enclosing_scope(source: str, line: int) -> ScopeNode | None:
    """Innermost declaration whose body is open when *line* starts.

    A declaration whose header sits on *line* itself does not count yet.
    """
    stack: list[ScopeNode] = []
    last: ScopeNode | None = None
    for line_no, event in scan_source(source):
        if line_no >= line:
            break
        if event.kind is EventKind.TYPE_DECL:
            last = event.node
        elif event.kind is EventKind.ENTER_SCOPE and last is not None:
            stack.append(last)
            last = None
        elif event.kind is EventKind.EXIT_SCOPE and stack:
            stack.pop()
    return stack[-1].clone() if stack else None


def scope_path(source: str, line: int) -> str:
    """Rendered scope path enclosing *line*; ``""`` at file top level."""
    node = enclosing_scope(source, line)
    return node.render() if node is not None else ""
