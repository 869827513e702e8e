"""Public package exports for the control-flow structurizer."""

from .ast import ASTManager, ASTPrinter, ASTProgram
from .config import DecompileMode, StructurizerOptions
from .errors import ASTConsistencyError, MalformedProgramError, StructurizerError
from .expr import (
    Expr,
    ExprAnd,
    ExprBoolean,
    ExprCondCode,
    ExprNot,
    ExprOr,
    ExprPredicate,
    ExprVar,
    make_and,
    make_not,
    make_or,
)
from .listing import build_manager, load_listing
from .serialize import serialize_expr, serialize_node

__all__ = [
    "ASTManager",
    "ASTPrinter",
    "ASTProgram",
    "DecompileMode",
    "StructurizerOptions",
    "StructurizerError",
    "MalformedProgramError",
    "ASTConsistencyError",
    "Expr",
    "ExprAnd",
    "ExprBoolean",
    "ExprCondCode",
    "ExprNot",
    "ExprOr",
    "ExprPredicate",
    "ExprVar",
    "make_and",
    "make_not",
    "make_or",
    "build_manager",
    "load_listing",
    "serialize_expr",
    "serialize_node",
]
