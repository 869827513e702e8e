"""Helpers to serialise structured trees for offline analysis."""

from __future__ import annotations

from typing import Any, Dict, List

from .ast.model import (
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
from .expr import (
    Expr,
    ExprAnd,
    ExprBoolean,
    ExprCondCode,
    ExprNot,
    ExprOr,
    ExprPredicate,
    ExprVar,
)


def serialize_expr(expr: Expr) -> Any:
    """Convert a condition into the JSON form accepted by the listing loader."""

    if isinstance(expr, ExprBoolean):
        return expr.value
    if isinstance(expr, ExprPredicate):
        return {"pred": expr.predicate}
    if isinstance(expr, ExprCondCode):
        return {"cc": int(expr.cc)}
    if isinstance(expr, ExprVar):
        return {"var": expr.var_index}
    if isinstance(expr, ExprNot):
        return {"not": serialize_expr(expr.operand)}
    if isinstance(expr, ExprAnd):
        return {"and": [serialize_expr(expr.operand1), serialize_expr(expr.operand2)]}
    if isinstance(expr, ExprOr):
        return {"or": [serialize_expr(expr.operand1), serialize_expr(expr.operand2)]}
    raise TypeError(f"unsupported expression type: {type(expr)!r}")


def serialize_node(node: ASTNode) -> Dict[str, Any]:
    """Serialise a statement (and its children) into tagged dictionaries."""

    return _NodeSerializer().visit(node)


class _NodeSerializer(ASTVisitor):
    def visit_program(self, node: ASTProgram) -> Dict[str, Any]:
        return {"op": "program", "body": self._body(node)}

    def visit_if_then(self, node: ASTIfThen) -> Dict[str, Any]:
        return {"op": "if", "condition": serialize_expr(node.condition), "body": self._body(node)}

    def visit_if_else(self, node: ASTIfElse) -> Dict[str, Any]:
        return {"op": "else", "body": self._body(node)}

    def visit_do_while(self, node: ASTDoWhile) -> Dict[str, Any]:
        return {
            "op": "do_while",
            "condition": serialize_expr(node.condition),
            "body": self._body(node),
        }

    def visit_block_encoded(self, node: ASTBlockEncoded) -> Dict[str, Any]:
        return {"op": "block", "start": node.start, "end": node.end}

    def visit_block_decoded(self, node: ASTBlockDecoded) -> Dict[str, Any]:
        # the decoded payload is opaque to the structurizer
        return {"op": "decoded_block"}

    def visit_var_set(self, node: ASTVarSet) -> Dict[str, Any]:
        return {"op": "var_set", "index": node.index, "condition": serialize_expr(node.condition)}

    def visit_label(self, node: ASTLabel) -> Dict[str, Any]:
        return {"op": "label", "index": node.index, "unused": node.unused}

    def visit_goto(self, node: ASTGoto) -> Dict[str, Any]:
        return {"op": "goto", "label": node.label, "condition": serialize_expr(node.condition)}

    def visit_return(self, node: ASTReturn) -> Dict[str, Any]:
        return {"op": "return", "condition": serialize_expr(node.condition), "kills": node.kills}

    def visit_break(self, node: ASTBreak) -> Dict[str, Any]:
        return {"op": "break", "condition": serialize_expr(node.condition)}

    def _body(self, node: ASTContainer) -> List[Dict[str, Any]]:
        return [self.visit(child) for child in node.children()]


__all__ = ["serialize_expr", "serialize_node"]
