"""Scan events: the values the line scanner hands to the collector.

Five variants, each its own frozen dataclass with a class-level ``kind``
tag from :class:`EventKind`; consumers dispatch on that tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from . import EventKind
from .scope import ScopeNode


@dataclass(frozen=True, slots=True)
class Comment:
    """Outer doc comment (``///``) text, marker stripped."""

    text: str
    kind: ClassVar[EventKind] = EventKind.COMMENT


@dataclass(frozen=True, slots=True)
class FileComment:
    """Inner doc comment (``//!``) text, marker stripped."""

    text: str
    kind: ClassVar[EventKind] = EventKind.FILE_COMMENT


@dataclass(frozen=True, slots=True)
class TypeDecl:
    """A finished declaration header, parent chain already wired."""

    node: ScopeNode
    kind: ClassVar[EventKind] = EventKind.TYPE_DECL


@dataclass(frozen=True, slots=True)
class EnterScope:
    kind: ClassVar[EventKind] = EventKind.ENTER_SCOPE


@dataclass(frozen=True, slots=True)
class ExitScope:
    kind: ClassVar[EventKind] = EventKind.EXIT_SCOPE


ScanEvent = Union[Comment, FileComment, TypeDecl, EnterScope, ExitScope]

ENTER_SCOPE = EnterScope()
EXIT_SCOPE = ExitScope()
