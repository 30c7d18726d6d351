"""Scan configuration dataclass."""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from scope_trail.core.discover import DEFAULT_EXCLUDES, DiscoverConfig

_logger = logging.getLogger(__name__)

# Config files looked up in the scan root, first match wins.
CONFIG_FILENAMES = (".scope-trail.yml", ".scope-trail.yaml", "scope-trail.yml")

# Environment override for the per-file size limit (bytes).
MAX_FILE_BYTES_ENV = "SCOPE_TRAIL_MAX_FILE_BYTES"

_LIST_KEYS = frozenset({"extensions", "ignore_dirs"})
_BOOL_KEYS = frozenset({"include_inner", "include_orphans", "follow_symlinks", "ci_mode"})


def _check_type(path: Path, key: str, value: Any) -> None:
    """Raise ``ValueError`` when a YAML value has the wrong type for *key*."""
    if key in _LIST_KEYS:
        ok = isinstance(value, list) and all(isinstance(v, str) for v in value)
        expected = "a list of strings"
    elif key in _BOOL_KEYS:
        ok = isinstance(value, bool)
        expected = "true or false"
    elif key == "max_file_bytes":
        ok = isinstance(value, int) and not isinstance(value, bool) and value >= 0
        expected = "a non-negative integer"
    elif key == "out_path":
        ok = value is None or isinstance(value, str)
        expected = "a path string"
    else:
        return
    if not ok:
        raise ValueError(f"{path}: '{key}' must be {expected}, got {value!r}")


@dataclass(frozen=True)
class ScanConfig:
    """Immutable scan configuration.

    Precedence, lowest first: defaults, YAML file, environment, CLI flags
    (applied by the caller through :meth:`replace`).
    """

    root: Path
    extensions: tuple[str, ...] = (".rs",)
    ignore_dirs: frozenset[str] = DEFAULT_EXCLUDES
    include_inner: bool = True      # report //! comments
    include_orphans: bool = True    # report /// blocks with no declaration
    max_file_bytes: int = 2_000_000
    follow_symlinks: bool = False
    out_path: Path | None = None
    ci_mode: bool = False
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_yaml(cls, path: Path, *, root: Path | None = None) -> ScanConfig:
        """Load configuration from a YAML file.

        Unknown keys are logged and ignored.  Raises ``yaml.YAMLError`` for
        malformed YAML and ``ValueError`` when the document is not a mapping or
        a known key holds a value of the wrong type.
        """
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: expected a mapping at top level, got {type(data).__name__}")

        names = {f.name for f in dataclasses.fields(cls)} - {"root", "extra"}
        known = {k: v for k, v in data.items() if k in names}
        unknown = {k: v for k, v in data.items() if k not in names}
        for key in unknown:
            _logger.warning("%s: unknown config key '%s' ignored", path, key)

        for key, value in known.items():
            _check_type(path, key, value)

        if "extensions" in known:
            known["extensions"] = tuple(
                e if e.startswith(".") else f".{e}" for e in known["extensions"]
            )
        if "ignore_dirs" in known:
            known["ignore_dirs"] = frozenset(known["ignore_dirs"])
        if "out_path" in known and known["out_path"] is not None:
            known["out_path"] = Path(known["out_path"])

        base = root if root is not None else path.parent
        return cls(root=base, extra=unknown, **known)

    @classmethod
    def discover(cls, root: Path) -> ScanConfig:
        """Build the configuration for *root*: config file, then environment."""
        config = cls(root=root)
        search_dir = root if root.is_dir() else root.parent
        for name in CONFIG_FILENAMES:
            candidate = search_dir / name
            if candidate.is_file():
                _logger.debug("Loading config from %s", candidate)
                config = cls.from_yaml(candidate, root=root)
                break
        return config.with_env()

    def with_env(self, environ: dict[str, str] | None = None) -> ScanConfig:
        env = os.environ if environ is None else environ
        raw = env.get(MAX_FILE_BYTES_ENV, "")
        if not raw:
            return self
        try:
            limit = int(raw)
        except ValueError:
            raise ValueError(f"{MAX_FILE_BYTES_ENV} must be an integer, got {raw!r}") from None
        return self.replace(max_file_bytes=limit)

    def replace(self, **changes: Any) -> ScanConfig:
        return dataclasses.replace(self, **changes)

    def discover_config(self) -> DiscoverConfig:
        return DiscoverConfig(
            root=self.root,
            include_exts=self.extensions,
            ignore_dirs=self.ignore_dirs,
            follow_symlinks=self.follow_symlinks,
            max_file_bytes=self.max_file_bytes,
        )

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly summary recorded in the report."""
        return {
            "root": self.root.as_posix(),
            "extensions": list(self.extensions),
            "ignore_dirs": sorted(self.ignore_dirs),
            "include_inner": self.include_inner,
            "include_orphans": self.include_orphans,
            "max_file_bytes": self.max_file_bytes,
        }
