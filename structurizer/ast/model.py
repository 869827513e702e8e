"""Statement nodes of the structured control-flow tree."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from ..expr import Expr
from .zipper import ASTZipper


@dataclass(eq=False)
class ASTNode:
    """Base class for every statement in the tree.

    Nodes compare by identity.  The link fields are maintained exclusively
    by :class:`ASTZipper`; a node whose ``manager`` is ``None`` is free.
    """

    parent: Optional["ASTNode"] = field(default=None, init=False, repr=False)
    previous: Optional["ASTNode"] = field(default=None, init=False, repr=False)
    next: Optional["ASTNode"] = field(default=None, init=False, repr=False)
    manager: Optional[ASTZipper] = field(default=None, init=False, repr=False)

    @property
    def level(self) -> int:
        """Number of ancestors above this node (the program is level 0)."""

        level = 0
        current = self.parent
        while current is not None:
            current = current.parent
            level += 1
        return level

    def accept(self, visitor: "ASTVisitor") -> Any:
        raise NotImplementedError

    def clear(self) -> None:
        self.parent = None
        self.previous = None
        self.next = None
        self.manager = None


@dataclass(eq=False)
class ASTContainer(ASTNode):
    """A node that lists child statements in its own zipper."""

    nodes: ASTZipper = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.nodes = ASTZipper(self)

    def children(self) -> Iterator[ASTNode]:
        return iter(self.nodes)

    def clear(self) -> None:
        super().clear()
        self.nodes.first = None
        self.nodes.last = None


@dataclass(eq=False)
class ASTProgram(ASTContainer):
    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_program(self)


@dataclass(eq=False)
class ASTIfThen(ASTContainer):
    condition: Expr

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_if_then(self)


@dataclass(eq=False)
class ASTIfElse(ASTContainer):
    """Else branch of the :class:`ASTIfThen` immediately preceding it."""

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_if_else(self)


@dataclass(eq=False)
class ASTDoWhile(ASTContainer):
    condition: Expr

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_do_while(self)


@dataclass(eq=False)
class ASTBlockEncoded(ASTNode):
    """Instruction range ``[start, end)`` still waiting to be decoded."""

    start: int
    end: int

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_block_encoded(self)


@dataclass(eq=False)
class ASTBlockDecoded(ASTNode):
    """Block whose content was produced by the decoder.

    The payload is opaque here; only the decoder and the code generator
    interpret it.
    """

    content: Any

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_block_decoded(self)


@dataclass(eq=False)
class ASTVarSet(ASTNode):
    index: int
    condition: Expr

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_var_set(self)


@dataclass(eq=False)
class ASTLabel(ASTNode):
    index: int
    unused: bool = False

    def mark_unused(self) -> None:
        self.unused = True

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_label(self)


@dataclass(eq=False)
class ASTGoto(ASTNode):
    condition: Expr
    label: int

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_goto(self)


@dataclass(eq=False)
class ASTReturn(ASTNode):
    condition: Expr
    kills: bool = False

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_return(self)


@dataclass(eq=False)
class ASTBreak(ASTNode):
    condition: Expr

    def accept(self, visitor: "ASTVisitor") -> Any:
        return visitor.visit_break(self)


class ASTVisitor(ABC):
    """Double-dispatch base for tree walkers.

    Every node kind has an abstract hook, so a walker that forgets one
    cannot be instantiated.
    """

    def visit(self, node: ASTNode) -> Any:
        return node.accept(self)

    @abstractmethod
    def visit_program(self, node: ASTProgram) -> Any: ...

    @abstractmethod
    def visit_if_then(self, node: ASTIfThen) -> Any: ...

    @abstractmethod
    def visit_if_else(self, node: ASTIfElse) -> Any: ...

    @abstractmethod
    def visit_do_while(self, node: ASTDoWhile) -> Any: ...

    @abstractmethod
    def visit_block_encoded(self, node: ASTBlockEncoded) -> Any: ...

    @abstractmethod
    def visit_block_decoded(self, node: ASTBlockDecoded) -> Any: ...

    @abstractmethod
    def visit_var_set(self, node: ASTVarSet) -> Any: ...

    @abstractmethod
    def visit_label(self, node: ASTLabel) -> Any: ...

    @abstractmethod
    def visit_goto(self, node: ASTGoto) -> Any: ...

    @abstractmethod
    def visit_return(self, node: ASTReturn) -> Any: ...

    @abstractmethod
    def visit_break(self, node: ASTBreak) -> Any: ...


__all__ = [
    "ASTNode",
    "ASTContainer",
    "ASTProgram",
    "ASTIfThen",
    "ASTIfElse",
    "ASTDoWhile",
    "ASTBlockEncoded",
    "ASTBlockDecoded",
    "ASTVarSet",
    "ASTLabel",
    "ASTGoto",
    "ASTReturn",
    "ASTBreak",
    "ASTVisitor",
]
