from pathlib import Path

import pytest

from structurizer.ast import ASTManager, ASTPrinter, ASTVisitor
from structurizer.ast.model import ASTGoto, ASTIfThen, ASTLabel, ASTVarSet
from structurizer.expr import FALSE, TRUE, ExprCondCode, ExprPredicate, ExprVar, make_and, make_not


def test_printer_renders_every_leaf_kind():
    manager = ASTManager()
    manager.declare_label(0x10)
    manager.insert_label(0x10)
    manager.insert_block(0, 16)
    manager.insert_goto(make_and(ExprPredicate(2), make_not(ExprCondCode(5))), 0x10)
    branch = manager.insert_if_then(ExprVar(3))
    manager.insert_break(TRUE, container=branch)
    manager.insert_return(FALSE)
    manager.insert_return(TRUE, kills=True)

    assert manager.print() == (
        "program {\n"
        "Label_0:\n"
        "  Block(0, 16);\n"
        "  (( P2 && !CC5)) -> goto Label_0;\n"
        "  if (V3) {\n"
        "    (true) -> break;\n"
        "  }\n"
        "  (false) -> exit;\n"
        "  (true) -> discard;\n"
        "}\n"
    )


def test_printer_handles_detached_subtrees():
    branch = ASTIfThen(ExprPredicate(0))
    branch.nodes.push_back(ASTVarSet(1, ExprPredicate(4)))
    branch.nodes.push_back(ASTGoto(ExprVar(1), 2))

    assert ASTPrinter().render(branch) == (
        "if (P0) {\n"
        "  V1 := P4;\n"
        "  (V1) -> goto Label_2;\n"
        "}\n"
    )
    assert ASTPrinter().render(ASTLabel(7)) == "Label_7:\n"


def test_printer_write(tmp_path: Path):
    manager = ASTManager()
    manager.insert_do_while(ExprPredicate(1))
    output = tmp_path / "tree.txt"

    ASTPrinter().write(manager.program, output)

    assert output.read_text("utf-8") == "program {\n  do {\n  } while (P1);\n}\n"


def test_visitor_must_handle_every_node_kind():
    class IncompleteVisitor(ASTVisitor):
        def visit_program(self, node):
            return None

    with pytest.raises(TypeError):
        IncompleteVisitor()
