"""Tree owner, incremental build API and goto elimination pass."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from ..config import StructurizerOptions
from ..errors import ASTConsistencyError, MalformedProgramError, StructurizerError
from ..expr import Expr, ExprBoolean, ExprVar, are_equal, make_not
from .model import (
    ASTBlockDecoded,
    ASTBlockEncoded,
    ASTBreak,
    ASTContainer,
    ASTDoWhile,
    ASTGoto,
    ASTIfElse,
    ASTIfThen,
    ASTLabel,
    ASTNode,
    ASTProgram,
    ASTReturn,
    ASTVarSet,
)
from .printer import ASTClearer, ASTPrinter

logger = logging.getLogger(__name__)


class ASTManager:
    """Own a statement tree from construction to teardown.

    The decoder feeds the flat program through the ``declare_label`` /
    ``insert_*`` calls in address order.  :meth:`decompile` then rewrites the
    gotos in place into ``if``/``else`` and ``do``/``while`` containers and
    the code generator walks :attr:`program` read-only.

    The elimination strategy follows Erosa & Hendren, "Taming control flow:
    A structured approach to eliminating goto statements" (1994): each goto
    is moved outward until it sits at the same level as its label, after
    which the statements between the two are enclosed in a conditional (for
    forward jumps) or a loop (for backward jumps).  Inward movement is not
    performed, so a goto whose label ends up nested deeper than the goto
    stays in the worklist; :meth:`is_fully_decompiled` reports that case.
    """

    def __init__(self, options: Optional[StructurizerOptions] = None) -> None:
        self.options = options or StructurizerOptions()
        self._program: Optional[ASTProgram] = ASTProgram()
        self._labels_map: Dict[int, int] = {}
        self._labels: List[Optional[ASTLabel]] = []
        self._gotos: List[ASTGoto] = []
        self._variables = 0
        self._false_condition = ExprBoolean(False)
        self._decompiled = False
        self._unusable = False

    # ------------------------------------------------------------------
    # accessors
    # ------------------------------------------------------------------
    @property
    def program(self) -> ASTProgram:
        self._ensure_usable()
        assert self._program is not None
        return self._program

    @property
    def variables(self) -> int:
        """Number of synthetic flag variables minted so far."""

        return self._variables

    @property
    def labels(self) -> Tuple[Optional[ASTLabel], ...]:
        return tuple(self._labels)

    @property
    def gotos(self) -> Tuple[ASTGoto, ...]:
        """Gotos still waiting to be structured."""

        return tuple(self._gotos)

    # ------------------------------------------------------------------
    # build API
    # ------------------------------------------------------------------
    def declare_label(self, address: int) -> int:
        """Reserve a label index for ``address``; repeated calls are no-ops."""

        self._ensure_buildable()
        index = self._labels_map.get(address)
        if index is None:
            index = len(self._labels)
            self._labels_map[address] = index
            self._labels.append(None)
        return index

    def insert_label(self, address: int, *, container: Optional[ASTContainer] = None) -> ASTLabel:
        target = self._build_target(container)
        index = self._label_index(address)
        if self._labels[index] is not None:
            raise MalformedProgramError(f"label for address 0x{address:X} placed twice")
        label = ASTLabel(index)
        self._labels[index] = label
        target.nodes.push_back(label)
        return label

    def insert_goto(
        self, condition: Expr, address: int, *, container: Optional[ASTContainer] = None
    ) -> ASTGoto:
        target = self._build_target(container)
        goto_node = ASTGoto(condition, self._label_index(address))
        self._gotos.append(goto_node)
        target.nodes.push_back(goto_node)
        return goto_node

    def insert_block(
        self, start_address: int, end_address: int, *, container: Optional[ASTContainer] = None
    ) -> ASTBlockEncoded:
        target = self._build_target(container)
        block = ASTBlockEncoded(start_address, end_address)
        target.nodes.push_back(block)
        return block

    def insert_return(
        self, condition: Expr, kills: bool = False, *, container: Optional[ASTContainer] = None
    ) -> ASTReturn:
        target = self._build_target(container)
        node = ASTReturn(condition, kills)
        target.nodes.push_back(node)
        return node

    def insert_break(self, condition: Expr, *, container: Optional[ASTContainer] = None) -> ASTBreak:
        target = self._build_target(container)
        node = ASTBreak(condition)
        target.nodes.push_back(node)
        return node

    def insert_if_then(
        self, condition: Expr, *, container: Optional[ASTContainer] = None
    ) -> ASTIfThen:
        target = self._build_target(container)
        node = ASTIfThen(condition)
        target.nodes.push_back(node)
        return node

    def insert_if_else(self, *, container: Optional[ASTContainer] = None) -> ASTIfElse:
        target = self._build_target(container)
        if not isinstance(target.nodes.last, ASTIfThen):
            raise MalformedProgramError("else branch must directly follow an if statement")
        node = ASTIfElse()
        target.nodes.push_back(node)
        return node

    def insert_do_while(
        self, condition: Expr, *, container: Optional[ASTContainer] = None
    ) -> ASTDoWhile:
        target = self._build_target(container)
        node = ASTDoWhile(condition)
        target.nodes.push_back(node)
        return node

    def transform_block_encoded(self, node: ASTBlockEncoded, content: object) -> ASTBlockDecoded:
        """Swap an encoded block for its decoded form at the same position."""

        self._ensure_usable()
        zipper = node.manager
        if zipper is None:
            raise ASTConsistencyError("cannot decode a block that is not part of the tree")
        previous = node.previous
        zipper.detach_single(node)
        decoded = ASTBlockDecoded(content)
        zipper.insert_after(decoded, previous)
        return decoded

    # ------------------------------------------------------------------
    # goto elimination
    # ------------------------------------------------------------------
    def decompile(self) -> None:
        """Structure every goto the configured mode allows.

        Any :class:`StructurizerError` leaves the tree half rewritten; the
        manager refuses further use afterwards.
        """

        self._ensure_usable()
        if self._decompiled:
            raise StructurizerError("decompile has already run on this manager")
        self._decompiled = True
        try:
            self._eliminate_gotos()
            if self.options.full_decompile:
                self._remove_labels()
            else:
                self._mark_unused_labels()
        except StructurizerError:
            self._unusable = True
            raise
        if not self.is_fully_decompiled():
            logger.warning("%d goto(s) could not be structured", len(self._gotos))

    def is_fully_decompiled(self) -> bool:
        if self.options.full_decompile:
            return not self._gotos
        for goto_node in self._gotos:
            if self._is_backwards_jump(goto_node, self._resolve_label(goto_node)):
                return False
        return True

    def _eliminate_gotos(self) -> None:
        full_decompile = self.options.full_decompile
        index = 0
        while index < len(self._gotos):
            goto_node = self._gotos[index]
            label = self._resolve_label(goto_node)
            if not full_decompile and not self._is_backwards_jump(goto_node, label):
                index += 1
                continue
            moves = 0
            if self._indirectly_related(goto_node, label):
                while not self._directly_related(goto_node, label):
                    self._move_outward(goto_node)
                    moves += 1
            if self._directly_related(goto_node, label):
                goto_level = goto_node.level
                label_level = label.level
                while label_level < goto_level:
                    self._move_outward(goto_node)
                    goto_level -= 1
                    moves += 1
            if label.parent is goto_node.parent:
                if self._precedes(label, goto_node):
                    self._enclose_do_while(goto_node, label)
                    kind = "do-while"
                else:
                    self._enclose_if_then(goto_node, label)
                    kind = "if"
                logger.debug(
                    "goto to Label_%d structured as %s after %d outward move(s)",
                    label.index,
                    kind,
                    moves,
                )
                del self._gotos[index]
                continue
            logger.debug("goto to Label_%d is nested above its label; left in place", label.index)
            index += 1

    def _remove_labels(self) -> None:
        for label in self._labels:
            if label is None or label.manager is None:
                continue
            label.manager.remove(label)
        self._labels.clear()

    def _mark_unused_labels(self) -> None:
        referenced = {goto_node.label for goto_node in self._gotos}
        for label in self._labels:
            if label is not None and label.index not in referenced:
                label.mark_unused()

    # ------------------------------------------------------------------
    # relationship queries
    # ------------------------------------------------------------------
    @staticmethod
    def _is_backwards_jump(goto_node: ASTNode, label_node: ASTNode) -> bool:
        goto_level = goto_node.level
        label_level = label_node.level
        while goto_level > label_level:
            goto_level -= 1
            goto_node = goto_node.parent
        while label_level > goto_level:
            label_level -= 1
            label_node = label_node.parent
        while goto_node.parent is not label_node.parent:
            goto_node = goto_node.parent
            label_node = label_node.parent
        return ASTManager._precedes(label_node, goto_node)

    @staticmethod
    def _precedes(candidate: ASTNode, node: ASTNode) -> bool:
        current = node.previous
        while current is not None:
            if current is candidate:
                return True
            current = current.previous
        return False

    @staticmethod
    def _indirectly_related(first: ASTNode, second: ASTNode) -> bool:
        return not (
            first.parent is second.parent or ASTManager._directly_related(first, second)
        )

    @staticmethod
    def _directly_related(first: ASTNode, second: ASTNode) -> bool:
        if first.parent is second.parent:
            return False
        first_level = first.level
        second_level = second.level
        if first_level > second_level:
            deeper, deeper_level = first, first_level
            shallower, shallower_level = second, second_level
        else:
            deeper, deeper_level = second, second_level
            shallower, shallower_level = first, first_level
        while deeper_level > shallower_level:
            deeper_level -= 1
            deeper = deeper.parent
        return shallower.parent is deeper.parent

    # ------------------------------------------------------------------
    # tree rewrites
    # ------------------------------------------------------------------
    def _enclose_do_while(self, goto_node: ASTGoto, label: ASTLabel) -> None:
        zipper = goto_node.manager
        loop_start = label.next
        if loop_start is goto_node:
            zipper.remove(goto_node)
            return
        condition = goto_node.condition
        zipper.detach_segment(loop_start, goto_node)
        loop = ASTDoWhile(condition)
        loop.nodes.init(loop_start, loop)
        zipper.insert_after(loop, label)
        loop.nodes.remove(goto_node)

    def _enclose_if_then(self, goto_node: ASTGoto, label: ASTLabel) -> None:
        zipper = goto_node.manager
        if_end = label.previous
        if if_end is goto_node:
            zipper.remove(goto_node)
            return
        previous = goto_node.previous
        condition = goto_node.condition
        do_else = False
        if not self.options.disable_else_derivation and isinstance(previous, ASTIfThen):
            do_else = are_equal(previous.condition, condition)
        zipper.detach_segment(goto_node, if_end)
        if_node: ASTContainer
        if do_else:
            if_node = ASTIfElse()
        else:
            if_node = ASTIfThen(make_not(condition))
        if_node.nodes.init(goto_node, if_node)
        zipper.insert_after(if_node, previous)
        if_node.nodes.remove(goto_node)

    def _move_outward(self, goto_node: ASTGoto) -> None:
        """Lift ``goto_node`` one level up, right after its current parent.

        The jump condition is stored in a fresh flag at the old position and
        the lifted goto tests the flag instead.  Inside a loop a ``break`` on
        the flag stops the iteration; inside a conditional the statements
        that followed the goto are guarded by the negated flag.
        """

        zipper = goto_node.manager
        parent = goto_node.parent
        if not isinstance(parent, (ASTDoWhile, ASTIfThen, ASTIfElse)):
            raise ASTConsistencyError(
                f"cannot move a goto out of {type(parent).__name__ if parent else 'nothing'}"
            )
        parent_zipper = parent.manager
        if zipper is None or parent_zipper is None:
            raise ASTConsistencyError("goto or its parent is detached from the tree")

        previous = goto_node.previous
        following = goto_node.next
        condition = goto_node.condition
        zipper.detach_single(goto_node)

        var_index = self._new_variable()
        var_condition = ExprVar(var_index)
        var_node = ASTVarSet(var_index, condition)
        var_node_init = ASTVarSet(var_index, self._false_condition)
        if isinstance(parent, ASTIfElse) and parent.previous is not None:
            parent_zipper.insert_before(var_node_init, parent.previous)
        else:
            parent_zipper.insert_before(var_node_init, parent)
        zipper.insert_after(var_node, previous)
        goto_node.condition = var_condition

        if isinstance(parent, ASTDoWhile):
            zipper.insert_after(ASTBreak(var_condition), var_node)
        elif following is not None:
            zipper.detach_tail(following)
            guard = ASTIfThen(make_not(var_condition))
            guard.nodes.init(following, guard)
            zipper.insert_after(guard, var_node)

        anchor: ASTNode = parent
        if isinstance(parent, ASTIfThen) and isinstance(parent.next, ASTIfElse):
            anchor = parent.next
        parent_zipper.insert_after(goto_node, anchor)

    def _new_variable(self) -> int:
        index = self._variables
        self._variables += 1
        logger.debug("minted synthetic variable V%d", index)
        return index

    # ------------------------------------------------------------------
    # diagnostics and teardown
    # ------------------------------------------------------------------
    def print(self) -> str:
        """Return the pseudo-code dump of the current tree."""

        return ASTPrinter().render(self.program)

    def sanity_check(self) -> bool:
        healthy = True
        for label in self._labels:
            if label is not None and label.parent is None:
                logger.warning("sanity check failed: Label_%d is detached", label.index)
                healthy = False
        return healthy

    def show_current_state(self, state: str) -> None:
        logger.debug("state %s:\n\n%s", state, self.print())
        self.sanity_check()

    def clear(self) -> None:
        """Tear the tree down; the manager cannot be used afterwards."""

        if self._program is None:
            return
        ASTClearer().visit(self._program)
        self._program = None
        self._labels_map.clear()
        self._labels.clear()
        self._gotos.clear()

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _ensure_usable(self) -> None:
        if self._unusable:
            raise StructurizerError("manager is unusable after a failed decompile")
        if self._program is None:
            raise StructurizerError("manager has been cleared")

    def _ensure_buildable(self) -> None:
        self._ensure_usable()
        if self._decompiled:
            raise StructurizerError("cannot extend the program after decompile")

    def _build_target(self, container: Optional[ASTContainer]) -> ASTContainer:
        self._ensure_buildable()
        if container is None:
            return self.program
        if not isinstance(container, ASTContainer):
            raise ASTConsistencyError(f"{type(container).__name__} cannot hold statements")
        root: ASTNode = container
        while root.parent is not None:
            root = root.parent
        if root is not self._program:
            raise ASTConsistencyError("container does not belong to this program")
        return container

    def _label_index(self, address: int) -> int:
        index = self._labels_map.get(address)
        if index is None:
            raise MalformedProgramError(f"address 0x{address:X} was never declared as a label")
        return index

    def _resolve_label(self, goto_node: ASTGoto) -> ASTLabel:
        if not 0 <= goto_node.label < len(self._labels):
            raise MalformedProgramError(f"goto refers to unknown label index {goto_node.label}")
        label = self._labels[goto_node.label]
        if label is None:
            raise MalformedProgramError(f"goto refers to Label_{goto_node.label} which was never placed")
        return label


__all__ = ["ASTManager"]
