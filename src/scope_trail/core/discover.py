"""File discovery: find Rust sources respecting exclusion patterns."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

# Default exclusion prefixes (relative to scan root).
DEFAULT_EXCLUDES = frozenset(
    {
        ".git",
        ".github",
        ".hg",
        "target",
        "node_modules",
        "vendor",
        ".cargo",
        ".idea",
        ".vscode",
    }
)

_DEFAULT_IGNORE_FILES = frozenset({".DS_Store"})


@dataclass(frozen=True)
class DiscoverConfig:
    """Configuration for file discovery.

    All parameters are optional and have sensible defaults.
    """

    root: Path = field(default_factory=lambda: Path("."))
    include_exts: tuple[str, ...] = (".rs",)
    ignore_dirs: frozenset[str] = DEFAULT_EXCLUDES
    ignore_files: frozenset[str] = _DEFAULT_IGNORE_FILES
    follow_symlinks: bool = False
    max_file_bytes: int = 2_000_000  # 2 MB safety limit


def iter_source_files(cfg: DiscoverConfig) -> Iterator[Path]:
    """Yield source files under *cfg.root* in sorted order.

    A root that is itself a file is yielded as-is when its extension
    matches.  Ignored directories are pruned, not descended into.
    """
    root = cfg.root
    if root.is_file():
        if root.suffix.lower() in cfg.include_exts:
            yield root.resolve()
    elif root.is_dir():
        yield from _walk(root, cfg, set())


def _walk(directory: Path, cfg: DiscoverConfig, seen: set[Path]) -> Iterator[Path]:
    # seen guards against symlink cycles when follow_symlinks is set
    real = directory.resolve()
    if real in seen:
        return
    seen.add(real)
    try:
        entries = sorted(directory.iterdir())
    except OSError:
        return
    for entry in entries:
        if entry.is_symlink() and not cfg.follow_symlinks:
            continue
        if entry.is_dir():
            if entry.name not in cfg.ignore_dirs:
                yield from _walk(entry, cfg, seen)
        elif _wanted(entry, cfg):
            yield entry.resolve()


def _wanted(path: Path, cfg: DiscoverConfig) -> bool:
    if path.name in cfg.ignore_files or path.suffix.lower() not in cfg.include_exts:
        return False
    try:
        return path.is_file() and path.stat().st_size <= cfg.max_file_bytes
    except OSError:
        return False
