"""Configuration knobs for the goto elimination pass."""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional


class DecompileMode(Enum):
    """How aggressively :meth:`ASTManager.decompile` rewrites jumps."""

    FULL = "full"
    BACKWARDS = "backwards"


@dataclass(frozen=True)
class StructurizerOptions:
    """Options consumed by :class:`~structurizer.ast.manager.ASTManager`.

    ``mode`` selects between full elimination, where every goto is processed
    and labels are dropped afterwards, and the restricted backwards mode that
    only turns loop-forming jumps into ``do``/``while`` constructs.
    ``disable_else_derivation`` turns off merging a forward skip into the
    preceding ``if`` as its ``else`` branch.
    """

    mode: DecompileMode = DecompileMode.FULL
    disable_else_derivation: bool = False

    @property
    def full_decompile(self) -> bool:
        return self.mode is DecompileMode.FULL

    @classmethod
    def from_mapping(cls, entry: Mapping[str, Any]) -> "StructurizerOptions":
        """Create options from a decoded JSON object."""

        unknown = set(entry) - {"mode", "disable_else_derivation"}
        if unknown:
            raise ValueError(f"unknown structurizer options: {', '.join(sorted(unknown))}")
        mode = entry.get("mode", DecompileMode.FULL.value)
        try:
            resolved = DecompileMode(mode)
        except ValueError:
            raise ValueError(f"unsupported decompile mode: {mode!r}") from None
        disable_else = entry.get("disable_else_derivation", False)
        if not isinstance(disable_else, bool):
            raise ValueError("disable_else_derivation must be a boolean")
        return cls(mode=resolved, disable_else_derivation=disable_else)

    @classmethod
    def load(cls, path: Optional[Path]) -> "StructurizerOptions":
        """Load options from ``path``; a missing file yields the defaults."""

        if path is None or not path.exists():
            return cls()
        payload = json.loads(path.read_text("utf-8"))
        if not isinstance(payload, Mapping):
            raise ValueError(f"structurizer options in {path} must be a JSON object")
        return cls.from_mapping(payload)


__all__ = ["DecompileMode", "StructurizerOptions"]
