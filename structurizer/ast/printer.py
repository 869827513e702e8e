"""Pseudo-code rendering and teardown walkers for the statement tree."""

from __future__ import annotations

from pathlib import Path
from typing import List

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
    ASTVisitor,
)


class ASTPrinter(ASTVisitor):
    """Render a tree into a stable, indented pseudo-code listing.

    The output is meant for logs and tests only::

        program {
          Block(0, 8);
          if (!P0) {
            Block(8, 16);
          }
        }
    """

    def __init__(self, indent: str = "  ") -> None:
        self._indent_unit = indent
        self._scope = 0
        self._lines: List[str] = []

    def render(self, node: ASTNode) -> str:
        self._scope = 0
        self._lines = []
        self.visit(node)
        return "".join(self._lines)

    def write(self, node: ASTNode, output_path: Path) -> None:
        output_path.write_text(self.render(node), "utf-8")

    # ------------------------------------------------------------------
    # containers
    # ------------------------------------------------------------------
    def visit_program(self, node: ASTProgram) -> None:
        self._scope += 1
        self._lines.append("program {\n")
        self._visit_children(node)
        self._lines.append("}\n")
        self._scope -= 1

    def visit_if_then(self, node: ASTIfThen) -> None:
        self._emit(f"if ({node.condition.render()}) {{")
        self._nested(node)
        self._emit("}")

    def visit_if_else(self, node: ASTIfElse) -> None:
        self._emit("else {")
        self._nested(node)
        self._emit("}")

    def visit_do_while(self, node: ASTDoWhile) -> None:
        self._emit("do {")
        self._nested(node)
        self._emit(f"}} while ({node.condition.render()});")

    # ------------------------------------------------------------------
    # leaves
    # ------------------------------------------------------------------
    def visit_block_encoded(self, node: ASTBlockEncoded) -> None:
        self._emit(f"Block({node.start}, {node.end});")

    def visit_block_decoded(self, node: ASTBlockDecoded) -> None:
        self._emit("Block;")

    def visit_var_set(self, node: ASTVarSet) -> None:
        self._emit(f"V{node.index} := {node.condition.render()};")

    def visit_label(self, node: ASTLabel) -> None:
        # labels are flushed left
        self._lines.append(f"Label_{node.index}:\n")

    def visit_goto(self, node: ASTGoto) -> None:
        self._emit(f"({node.condition.render()}) -> goto Label_{node.label};")

    def visit_return(self, node: ASTReturn) -> None:
        action = "discard" if node.kills else "exit"
        self._emit(f"({node.condition.render()}) -> {action};")

    def visit_break(self, node: ASTBreak) -> None:
        self._emit(f"({node.condition.render()}) -> break;")

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------
    def _emit(self, text: str) -> None:
        self._lines.append(f"{self._indent_unit * self._scope}{text}\n")

    def _nested(self, node: ASTContainer) -> None:
        self._scope += 1
        self._visit_children(node)
        self._scope -= 1

    def _visit_children(self, node: ASTContainer) -> None:
        for child in node.children():
            self.visit(child)


class ASTClearer(ASTVisitor):
    """Tear a tree down, dropping every link between its nodes."""

    def visit(self, node: ASTNode) -> None:
        node.accept(self)
        node.clear()

    def visit_program(self, node: ASTProgram) -> None:
        self._clear_children(node)

    def visit_if_then(self, node: ASTIfThen) -> None:
        self._clear_children(node)

    def visit_if_else(self, node: ASTIfElse) -> None:
        self._clear_children(node)

    def visit_do_while(self, node: ASTDoWhile) -> None:
        self._clear_children(node)

    def visit_block_encoded(self, node: ASTBlockEncoded) -> None:
        pass

    def visit_block_decoded(self, node: ASTBlockDecoded) -> None:
        node.content = None

    def visit_var_set(self, node: ASTVarSet) -> None:
        pass

    def visit_label(self, node: ASTLabel) -> None:
        pass

    def visit_goto(self, node: ASTGoto) -> None:
        pass

    def visit_return(self, node: ASTReturn) -> None:
        pass

    def visit_break(self, node: ASTBreak) -> None:
        pass

    def _clear_children(self, node: ASTContainer) -> None:
        for child in list(node.children()):
            self.visit(child)


__all__ = ["ASTPrinter", "ASTClearer"]
