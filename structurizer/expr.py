"""Boolean condition expressions used to guard structured statements.

Expressions are immutable values.  A single instance is routinely shared by
several statement nodes (a lifted goto and the flag assignment that replaced
it, for example) so nothing in the package ever mutates one in place.
Equality is structural: the frozen dataclasses compare field by field and a
variable reference never equals a predicate reference with the same index.

The ``make_*`` helpers are the smart constructors.  They keep double
negations and boolean literals out of compound nodes so that the equality
checks performed while enclosing gotos see canonical shapes.
"""

from __future__ import annotations

from dataclasses import dataclass


class Expr:
    """Base class for all condition expression nodes."""

    def render(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class ExprVar(Expr):
    """Reference to a synthetic flag minted during goto elimination."""

    var_index: int

    def render(self) -> str:
        return f"V{self.var_index}"


@dataclass(frozen=True)
class ExprCondCode(Expr):
    """Reference to a hardware condition code."""

    cc: int

    def render(self) -> str:
        return f"CC{int(self.cc)}"


@dataclass(frozen=True)
class ExprPredicate(Expr):
    """Reference to a predicate register."""

    predicate: int

    def render(self) -> str:
        return f"P{self.predicate}"


@dataclass(frozen=True)
class ExprNot(Expr):
    operand: Expr

    def render(self) -> str:
        return f"!{self.operand.render()}"


@dataclass(frozen=True)
class ExprAnd(Expr):
    operand1: Expr
    operand2: Expr

    def render(self) -> str:
        return f"( {self.operand1.render()} && {self.operand2.render()})"


@dataclass(frozen=True)
class ExprOr(Expr):
    operand1: Expr
    operand2: Expr

    def render(self) -> str:
        return f"( {self.operand1.render()} || {self.operand2.render()})"


@dataclass(frozen=True)
class ExprBoolean(Expr):
    value: bool

    def render(self) -> str:
        return "true" if self.value else "false"


TRUE = ExprBoolean(True)
FALSE = ExprBoolean(False)


# ---------------------------------------------------------------------------
# smart constructors
# ---------------------------------------------------------------------------


def make_not(operand: Expr) -> Expr:
    if isinstance(operand, ExprNot):
        return operand.operand
    return ExprNot(operand)


def make_and(first: Expr, second: Expr) -> Expr:
    if isinstance(first, ExprBoolean):
        return second if first.value else first
    if isinstance(second, ExprBoolean):
        return first if second.value else second
    return ExprAnd(first, second)


def make_or(first: Expr, second: Expr) -> Expr:
    if isinstance(first, ExprBoolean):
        return first if first.value else second
    if isinstance(second, ExprBoolean):
        return second if second.value else first
    return ExprOr(first, second)


# ---------------------------------------------------------------------------
# queries
# ---------------------------------------------------------------------------


def are_equal(first: Expr, second: Expr) -> bool:
    return first == second


def are_opposite(first: Expr, second: Expr) -> bool:
    """Return ``True`` when one side is the negation of the other.

    Only a single ``!`` layer is unwrapped, and only on the first side that
    carries one.
    """

    if isinstance(first, ExprNot):
        return are_equal(first.operand, second)
    if isinstance(second, ExprNot):
        return are_equal(second.operand, first)
    return False


def is_true(expr: Expr) -> bool:
    return isinstance(expr, ExprBoolean) and expr.value


__all__ = [
    "Expr",
    "ExprVar",
    "ExprCondCode",
    "ExprPredicate",
    "ExprNot",
    "ExprAnd",
    "ExprOr",
    "ExprBoolean",
    "TRUE",
    "FALSE",
    "make_not",
    "make_and",
    "make_or",
    "are_equal",
    "are_opposite",
    "is_true",
]
