"""Runner: discovers files, scans and collects each one, builds a ScanReport."""

from __future__ import annotations

import logging
from pathlib import Path

from scope_trail.contracts.load import validate_instance
from scope_trail.core.collector import collect
from scope_trail.core.config import ScanConfig
from scope_trail.core.discover import iter_source_files
from scope_trail.core.scanner import scan_source
from scope_trail.model.annotation import Annotation
from scope_trail.model.report import ScanReport
from scope_trail.utils.json_norm import stable_json_dump

_logger = logging.getLogger(__name__)

# Fixed run metadata for deterministic mode.
_DETERMINISTIC_RUN_ID = "00000000-0000-0000-0000-000000000000"
_DETERMINISTIC_TIMESTAMP = "2000-01-01T00:00:00+00:00"


def _relative(path: Path, root: Path) -> str:
    base = root if root.is_dir() else root.parent
    try:
        return path.relative_to(base).as_posix()
    except ValueError:
        return path.as_posix()


def scan_file(path: Path, rel_path: str, config: ScanConfig) -> list[Annotation]:
    """Scan one file and return its annotations.

    Raises ``OSError`` if the file cannot be read.
    """
    source = path.read_text(encoding="utf-8", errors="replace")
    return collect(
        scan_source(source),
        rel_path,
        include_inner=config.include_inner,
        include_orphans=config.include_orphans,
    )


def run_scan(config: ScanConfig) -> ScanReport:
    """Scan every source file under ``config.root`` and assemble a ``ScanReport``.

    Raises ``FileNotFoundError`` when the root does not exist and
    ``jsonschema.ValidationError`` if the assembled report breaks its schema.
    """
    root = config.root.resolve()
    if not root.exists():
        raise FileNotFoundError(f"Scan root does not exist: {config.root}")

    files: list[str] = []
    annotations: list[Annotation] = []
    for path in iter_source_files(config.replace(root=root).discover_config()):
        rel = _relative(path, root)
        try:
            found = scan_file(path, rel, config)
        except OSError as exc:
            _logger.warning("Cannot read %s, skipped: %s", rel, exc)
            continue
        _logger.debug("%s: %d annotation(s)", rel, len(found))
        files.append(rel)
        annotations.extend(found)

    report = ScanReport(config=config.to_dict(), files=files, annotations=annotations)
    if config.ci_mode:
        report.run_id = _DETERMINISTIC_RUN_ID
        report.created_at = _DETERMINISTIC_TIMESTAMP

    report_dict = report.to_dict()
    validate_instance(report_dict, "scan_report.schema.json")

    if config.out_path is not None:
        out = config.out_path
        out.parent.mkdir(parents=True, exist_ok=True)
        with out.open("w", encoding="utf-8") as fp:
            stable_json_dump(report_dict, fp)
        _logger.info("Report written to %s", out)
    return report
