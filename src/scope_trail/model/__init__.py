"""Enums shared across the scanner, collector and report layers."""

from __future__ import annotations

from enum import Enum


class SymbolKind(str, Enum):
    """Declaration kinds a scope node can have.

    The value of each member is the keyword used when rendering a scope
    path.  ``UNKNOWN`` renders as ``"?"`` so an undetermined kind never
    looks like a real keyword.
    """

    STRUCT = "struct"
    MODULE = "mod"
    ENUM = "enum"
    FUNCTION = "fn"
    CONST = "const"
    STATIC = "static"
    TYPE_ALIAS = "type"
    VARIANT = "variant"
    IMPL = "impl"
    USE = "use"
    MACRO = "macro"
    TRAIT = "trait"
    UNKNOWN = "?"

    @property
    def keyword(self) -> str:
        """Canonical keyword for this kind."""
        return self.value

    @classmethod
    def classify(cls, token: str) -> "SymbolKind":
        """Map a raw keyword token to a kind.

        Total: anything that is not a known keyword is a ``VARIANT``
        (bare identifiers such as enum variants and struct fields).
        """
        return _KEYWORDS.get(token, cls.VARIANT)

    def __str__(self) -> str:
        return self.value


_KEYWORDS: dict[str, SymbolKind] = {
    "struct": SymbolKind.STRUCT,
    "mod": SymbolKind.MODULE,
    "enum": SymbolKind.ENUM,
    "fn": SymbolKind.FUNCTION,
    "const": SymbolKind.CONST,
    "static": SymbolKind.STATIC,
    "type": SymbolKind.TYPE_ALIAS,
    "impl": SymbolKind.IMPL,
    "use": SymbolKind.USE,
    "trait": SymbolKind.TRAIT,
    "macro": SymbolKind.MACRO,
    "macro_rules": SymbolKind.MACRO,
    "macro_rules!": SymbolKind.MACRO,
}


class AnnotationKind(str, Enum):
    """How a collected comment relates to the code around it."""

    ITEM = "item"        # ``///`` attached to the following declaration
    INNER = "inner"      # ``//!`` describing the enclosing scope or file
    ORPHAN = "orphan"    # ``///`` with no declaration after it


class EventKind(str, Enum):
    """Tag carried by every scan event class."""

    COMMENT = "comment"
    FILE_COMMENT = "file_comment"
    TYPE_DECL = "type_decl"
    ENTER_SCOPE = "enter_scope"
    EXIT_SCOPE = "exit_scope"
