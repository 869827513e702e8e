"""Public exports for the structured statement tree."""

from .manager import ASTManager
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
from .printer import ASTClearer, ASTPrinter
from .zipper import ASTZipper

__all__ = [
    "ASTManager",
    "ASTZipper",
    "ASTPrinter",
    "ASTClearer",
    "ASTVisitor",
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
]
