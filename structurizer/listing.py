"""Replay JSON program listings into an :class:`ASTManager`.

A listing is the flat program a decoder would hand to the manager, written
down as JSON so the structurizer can be exercised without a bytecode front
end.  The top level is either a list of statements or an object with a
``program`` key holding that list.  Each statement carries an ``op`` tag:

``block``     ``start``/``end`` instruction addresses
``label``     ``address``
``goto``      ``target`` address and ``condition``
``return``    ``condition`` and optional ``kills``
``break``     ``condition``
``if``        ``condition`` and nested ``body``
``else``      nested ``body`` (must follow an ``if``)
``do_while``  ``condition`` and nested ``body``

Conditions are ``true``/``false`` or single-key objects: ``{"pred": n}``,
``{"cc": n}``, ``{"var": n}``, ``{"not": e}``, ``{"and": [a, b]}`` and
``{"or": [a, b]}``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional, Sequence

from .ast import ASTManager
from .ast.model import ASTContainer
from .config import StructurizerOptions
from .errors import MalformedProgramError
from .expr import (
    Expr,
    ExprBoolean,
    ExprCondCode,
    ExprPredicate,
    ExprVar,
    make_and,
    make_not,
    make_or,
)

_NESTED_OPS = ("if", "else", "do_while")


def parse_expr(entry: Any) -> Expr:
    """Build a condition from its JSON form through the smart constructors."""

    if isinstance(entry, bool):
        return ExprBoolean(entry)
    if isinstance(entry, Mapping) and len(entry) == 1:
        ((kind, value),) = entry.items()
        if kind == "pred":
            return ExprPredicate(_integer(value, kind))
        if kind == "cc":
            return ExprCondCode(_integer(value, kind))
        if kind == "var":
            return ExprVar(_integer(value, kind))
        if kind == "not":
            return make_not(parse_expr(value))
        if kind in {"and", "or"}:
            if not isinstance(value, list) or len(value) != 2:
                raise MalformedProgramError(f"'{kind}' expects exactly two operands")
            first, second = (parse_expr(operand) for operand in value)
            return make_and(first, second) if kind == "and" else make_or(first, second)
    raise MalformedProgramError(f"unsupported condition: {entry!r}")


def build_manager(payload: Any, options: Optional[StructurizerOptions] = None) -> ASTManager:
    """Create a manager holding the program described by ``payload``."""

    statements = _statements(payload)
    manager = ASTManager(options)
    for address in _label_addresses(statements):
        manager.declare_label(address)
    _replay(manager, statements, None)
    return manager


def load_listing(path: Path, options: Optional[StructurizerOptions] = None) -> ASTManager:
    try:
        payload = json.loads(path.read_text("utf-8"))
    except ValueError as exc:
        raise MalformedProgramError(f"{path} is not valid JSON: {exc}") from exc
    return build_manager(payload, options)


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _statements(payload: Any) -> List[Mapping[str, Any]]:
    if isinstance(payload, Mapping):
        payload = payload.get("program")
    if not isinstance(payload, list):
        raise MalformedProgramError("listing must contain a list of statements")
    for entry in payload:
        if not isinstance(entry, Mapping) or "op" not in entry:
            raise MalformedProgramError(f"statement without an 'op' tag: {entry!r}")
    return payload


def _label_addresses(statements: Sequence[Mapping[str, Any]]) -> Iterator[int]:
    for entry in statements:
        op = entry["op"]
        if op == "label":
            yield _integer(_field(entry, "address"), "address")
        elif op in _NESTED_OPS:
            yield from _label_addresses(_statements(entry.get("body", [])))


def _replay(
    manager: ASTManager,
    statements: Sequence[Mapping[str, Any]],
    container: Optional[ASTContainer],
) -> None:
    for entry in statements:
        op = entry["op"]
        if op == "block":
            manager.insert_block(
                _integer(_field(entry, "start"), "start"),
                _integer(_field(entry, "end"), "end"),
                container=container,
            )
        elif op == "label":
            manager.insert_label(_integer(entry["address"], "address"), container=container)
        elif op == "goto":
            manager.insert_goto(
                parse_expr(entry.get("condition", True)),
                _integer(_field(entry, "target"), "target"),
                container=container,
            )
        elif op == "return":
            manager.insert_return(
                parse_expr(entry.get("condition", True)),
                _boolean(entry.get("kills", False), "kills"),
                container=container,
            )
        elif op == "break":
            manager.insert_break(parse_expr(entry.get("condition", True)), container=container)
        elif op == "if":
            node = manager.insert_if_then(
                parse_expr(_field(entry, "condition")), container=container
            )
            _replay(manager, _statements(entry.get("body", [])), node)
        elif op == "else":
            node = manager.insert_if_else(container=container)
            _replay(manager, _statements(entry.get("body", [])), node)
        elif op == "do_while":
            node = manager.insert_do_while(
                parse_expr(_field(entry, "condition")), container=container
            )
            _replay(manager, _statements(entry.get("body", [])), node)
        else:
            raise MalformedProgramError(f"unknown statement op: {op!r}")


def _field(entry: Mapping[str, Any], key: str) -> Any:
    if key not in entry:
        raise MalformedProgramError(f"'{entry['op']}' statement is missing '{key}'")
    return entry[key]


def _integer(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedProgramError(f"'{name}' must be an integer, got {value!r}")
    return value


def _boolean(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise MalformedProgramError(f"'{name}' must be a boolean, got {value!r}")
    return value


__all__ = ["build_manager", "load_listing", "parse_expr"]
