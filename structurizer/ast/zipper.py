"""Intrusive sibling lists embedded in every container node.

A zipper never owns the nodes it lists.  It only tracks the first and last
member of a chain that is threaded through the nodes' own ``previous`` and
``next`` fields, which keeps every splice O(1).  Each member points back at
the zipper listing it through ``manager`` and at the zipper's owner through
``parent``; a node with no manager is free and may be inserted elsewhere.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterator, Optional

from ..errors import ASTConsistencyError

if TYPE_CHECKING:  # pragma: no cover - import cycle guard
    from .model import ASTNode


class ASTZipper:
    """Doubly linked list of sibling nodes owned by a container."""

    def __init__(self, owner: Optional["ASTNode"] = None) -> None:
        self.owner = owner
        self.first: Optional["ASTNode"] = None
        self.last: Optional["ASTNode"] = None

    def __iter__(self) -> Iterator["ASTNode"]:
        current = self.first
        while current is not None:
            following = current.next
            yield current
            current = following

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return self.first is not None

    # ------------------------------------------------------------------
    # insertion
    # ------------------------------------------------------------------
    def init(self, new_first: Optional["ASTNode"], parent: Optional["ASTNode"] = None) -> None:
        """Adopt the chain starting at ``new_first`` as the whole content."""

        if parent is None:
            parent = self.owner
        if new_first is not None:
            self._expect_free(new_first)
        self.first = new_first
        self.last = new_first
        current = new_first
        while current is not None:
            current.manager = self
            current.parent = parent
            self.last = current
            current = current.next

    def push_back(self, new_node: "ASTNode") -> None:
        self._expect_free(new_node)
        new_node.previous = self.last
        if self.last is not None:
            self.last.next = new_node
        new_node.next = None
        self.last = new_node
        if self.first is None:
            self.first = new_node
        self._adopt(new_node)

    def push_front(self, new_node: "ASTNode") -> None:
        self._expect_free(new_node)
        new_node.previous = None
        new_node.next = self.first
        if self.first is not None:
            self.first.previous = new_node
        if self.last is None:
            self.last = new_node
        self.first = new_node
        self._adopt(new_node)

    def insert_after(self, new_node: "ASTNode", at_node: Optional["ASTNode"]) -> None:
        """Splice ``new_node`` right after ``at_node`` (front when ``None``)."""

        if at_node is None:
            self.push_front(new_node)
            return
        self._expect_free(new_node)
        self._expect_member(at_node)
        following = at_node.next
        if following is not None:
            following.previous = new_node
        new_node.previous = at_node
        if at_node is self.last:
            self.last = new_node
        new_node.next = following
        at_node.next = new_node
        self._adopt(new_node)

    def insert_before(self, new_node: "ASTNode", at_node: Optional["ASTNode"]) -> None:
        """Splice ``new_node`` right before ``at_node`` (back when ``None``)."""

        if at_node is None:
            self.push_back(new_node)
            return
        self._expect_free(new_node)
        self._expect_member(at_node)
        preceding = at_node.previous
        if preceding is not None:
            preceding.next = new_node
        new_node.next = at_node
        if at_node is self.first:
            self.first = new_node
        new_node.previous = preceding
        at_node.previous = new_node
        self._adopt(new_node)

    # ------------------------------------------------------------------
    # removal
    # ------------------------------------------------------------------
    def remove(self, node: "ASTNode") -> None:
        """Take ``node`` out of the list and mark it free."""

        self.detach_single(node)

    def detach_single(self, node: "ASTNode") -> None:
        """Unlink ``node`` leaving its own children untouched."""

        self._expect_member(node)
        preceding = node.previous
        following = node.next
        node.previous = None
        node.next = None
        if preceding is None:
            self.first = following
        else:
            preceding.next = following
        if following is None:
            self.last = preceding
        else:
            following.previous = preceding
        self._release(node)

    def detach_tail(self, node: "ASTNode") -> None:
        """Cut the list so that ``node`` and its successors become an orphan run."""

        self._expect_member(node)
        preceding = node.previous
        if preceding is None:
            self.first = None
            self.last = None
        else:
            preceding.next = None
            self.last = preceding
        node.previous = None
        current = node
        while current is not None:
            self._release(current)
            current = current.next

    def detach_segment(self, start: "ASTNode", end: "ASTNode") -> None:
        """Cut out the inclusive run ``[start, end]`` as an orphan chain."""

        self._expect_member(start)
        self._expect_member(end)
        if start is end:
            self.detach_single(start)
            return
        current = start
        while current is not None and current is not end:
            current = current.next
        if current is None:
            raise ASTConsistencyError("segment end is not reachable from its start")
        preceding = start.previous
        following = end.next
        if preceding is None:
            self.first = following
        else:
            preceding.next = following
        if following is None:
            self.last = preceding
        else:
            following.previous = preceding
        start.previous = None
        end.next = None
        current = start
        while current is not None:
            self._release(current)
            current = current.next

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _adopt(self, node: "ASTNode") -> None:
        node.manager = self
        node.parent = self.owner

    @staticmethod
    def _release(node: "ASTNode") -> None:
        node.manager = None
        node.parent = None

    def _expect_free(self, node: "ASTNode") -> None:
        if node.manager is not None:
            raise ASTConsistencyError(
                f"{type(node).__name__} is already attached to another sibling list"
            )

    def _expect_member(self, node: "ASTNode") -> None:
        if node.manager is not self:
            raise ASTConsistencyError(
                f"{type(node).__name__} is not a member of this sibling list"
            )


__all__ = ["ASTZipper"]
