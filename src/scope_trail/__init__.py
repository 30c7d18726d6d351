"""scope_trail: report where each doc comment lives in a Rust source tree."""

__all__ = [
    "__version__",
    "scan_path",
    "scope_path",
    "SymbolKind",
    "ScopeNode",
]
__version__ = "0.1.0"

# Programmatic entrypoints.
from scope_trail.api import scan_path, scope_path  # noqa: E402, F401
from scope_trail.model import SymbolKind  # noqa: E402, F401
from scope_trail.model.scope import ScopeNode  # noqa: E402, F401
