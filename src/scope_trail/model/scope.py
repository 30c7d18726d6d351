"""ScopeNode: one declaration plus the chain of declarations enclosing it."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator

from . import SymbolKind

# Separator between rendered scope levels.
SCOPE_SEPARATOR = "§"


@dataclass(frozen=True, slots=True)
class ScopeNode:
    """Immutable declaration node with an exclusively owned parent chain.

    ``parent`` is the immediately enclosing declaration, or ``None`` at
    file top level.  Every constructor path copies the parent chain, so two
    live nodes never share an ancestor object.  Equality and hashing are
    structural and recurse through the whole chain.

    The chain must be acyclic.  Frozen instances make a cycle impossible
    to build through the public API.
    """

    kind: SymbolKind
    name: str
    arguments: tuple[str, ...] = ()
    parent: ScopeNode | None = None

    def __post_init__(self) -> None:
        # Accept any iterable of tokens but store an ordered tuple.
        if not isinstance(self.arguments, tuple):
            object.__setattr__(self, "arguments", tuple(self.arguments))

    # ── constructors ────────────────────────────────────────────────

    @classmethod
    def empty(cls) -> ScopeNode:
        """Placeholder node used before a real declaration is known."""
        return cls(SymbolKind.UNKNOWN, "")

    def clone(self) -> ScopeNode:
        """Deep copy, duplicating every ancestor."""
        return ScopeNode(
            kind=self.kind,
            name=self.name,
            arguments=self.arguments,
            parent=self.parent.clone() if self.parent is not None else None,
        )

    def with_parent(self, parent: ScopeNode | None) -> ScopeNode:
        """Return a copy of this node nested under a private copy of *parent*."""
        return ScopeNode(
            kind=self.kind,
            name=self.name,
            arguments=self.arguments,
            parent=parent.clone() if parent is not None else None,
        )

    def with_arguments(self, arguments: Iterable[str]) -> ScopeNode:
        """Return a copy of this node with *arguments* replacing its own."""
        return ScopeNode(
            kind=self.kind,
            name=self.name,
            arguments=tuple(arguments),
            parent=self.parent.clone() if self.parent is not None else None,
        )

    # ── chain inspection ────────────────────────────────────────────

    def ancestors(self) -> Iterator[ScopeNode]:
        """Yield enclosing nodes, innermost first."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    @property
    def depth(self) -> int:
        """Number of ancestors above this node."""
        return sum(1 for _ in self.ancestors())

    # ── rendering ───────────────────────────────────────────────────

    def segment(self) -> str:
        """This node alone: ``<keyword> <name><arguments>``."""
        return f"{self.kind.keyword} {self.name}{' '.join(self.arguments)}"

    def render(self) -> str:
        """Full scope path, outermost first, macro ancestors elided.

        ``fn run`` inside ``macro_rules! gen`` inside ``mod outer`` renders
        as ``"mod outer§fn run"``.
        """
        parts: list[str] = []
        _render_into(parts, self, is_ancestor=False)
        return "".join(parts)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        chain = [self, *self.ancestors()]
        links = " < ".join(f"{n.kind.keyword} {n.name!r}" for n in chain)
        return f"ScopeNode({links})"


def _render_into(parts: list[str], node: ScopeNode, is_ancestor: bool) -> None:
    """Append the rendering of *node* and its ancestors to *parts*.

    A macro reached as an ancestor contributes nothing; the walk carries
    on to its own parent.  The leaf is always written.
    """
    if is_ancestor and node.kind is SymbolKind.MACRO:
        if node.parent is not None:
            _render_into(parts, node.parent, is_ancestor=True)
        return

    if node.parent is not None:
        _render_into(parts, node.parent, is_ancestor=True)
    parts.append(node.segment())
    if is_ancestor:
        parts.append(SCOPE_SEPARATOR)
