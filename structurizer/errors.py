"""Exception hierarchy shared by the structurizer components."""

from __future__ import annotations


class StructurizerError(Exception):
    """Base class for every error raised by the structurizer."""


class MalformedProgramError(StructurizerError, ValueError):
    """The flat program handed to the manager cannot be structured.

    Raised for label addresses that were never declared, labels placed twice
    and gotos whose label never made it into the tree.
    """


class ASTConsistencyError(StructurizerError, RuntimeError):
    """The tree violated one of its own linkage invariants.

    This always points at a defect upstream (a tree built by hand or by a
    decoder that bypassed the manager) rather than at bad input.
    """


__all__ = ["StructurizerError", "MalformedProgramError", "ASTConsistencyError"]
