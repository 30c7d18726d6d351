"""Load and validate JSON instances against bundled schemas.

Usage::

    from scope_trail.contracts.load import validate_instance, validate_file

    validate_instance(report_dict, "scan_report.schema.json")
    validate_file(Path("out/scan_report.json"), "scan_report.schema.json")
"""

from __future__ import annotations

import json
from importlib import resources
from pathlib import Path
from typing import Any

import jsonschema

SCHEMA_DIR = "data/schemas"

DEFAULT_SCHEMA = "scan_report.schema.json"


def _schema_path(name: str) -> Path:
    """Resolve a bundled schema.

    Priority:
    1. ``data/schemas/`` relative to the package root (source checkout)
    2. pip-installed package data via importlib.resources
    """
    canonical = Path(__file__).resolve().parents[1] / SCHEMA_DIR / name
    if canonical.exists():
        return canonical
    with resources.as_file(resources.files("scope_trail") / SCHEMA_DIR / name) as p:
        if not p.exists():
            raise FileNotFoundError(f"Unknown schema: {name}")
        return p


def load_schema(name: str) -> dict[str, Any]:
    """Load a bundled JSON schema by filename."""
    path = _schema_path(name)
    return json.loads(path.read_text(encoding="utf-8"))


def validate_instance(instance: Any, schema_name: str = DEFAULT_SCHEMA) -> None:
    """Validate *instance* against the named schema.

    Raises ``jsonschema.ValidationError`` on failure.
    """
    schema = load_schema(schema_name)
    jsonschema.validate(instance=instance, schema=schema)


def validate_file(instance_path: Path, schema_name: str = DEFAULT_SCHEMA) -> None:
    """Load a JSON file and validate it against the named schema."""
    instance = json.loads(instance_path.read_text(encoding="utf-8"))

    # The schema pins schema_version via "const"; surface a readable error
    # before the generic jsonschema traceback.
    if schema_name == DEFAULT_SCHEMA:
        sv = instance.get("schema_version") if isinstance(instance, dict) else None
        if sv != "scan_report_v1":
            raise ValueError(
                f"{instance_path}: expected schema_version='scan_report_v1', got {sv!r}"
            )

    validate_instance(instance, schema_name)
