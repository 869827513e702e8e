import pytest

from structurizer.ast.model import ASTBlockEncoded, ASTIfThen, ASTProgram
from structurizer.ast.zipper import ASTZipper
from structurizer.errors import ASTConsistencyError
from structurizer.expr import ExprPredicate


def _blocks(count: int) -> list:
    return [ASTBlockEncoded(index * 4, index * 4 + 4) for index in range(count)]


def _filled(count: int):
    program = ASTProgram()
    nodes = _blocks(count)
    for node in nodes:
        program.nodes.push_back(node)
    return program, nodes


def _assert_chain(zipper: ASTZipper, expected: list) -> None:
    assert list(zipper) == expected
    assert zipper.first is (expected[0] if expected else None)
    assert zipper.last is (expected[-1] if expected else None)
    for previous, node in zip([None] + expected[:-1], expected):
        assert node.previous is previous
        assert node.manager is zipper
        assert node.parent is zipper.owner
    if expected:
        assert expected[-1].next is None


def _assert_free(node) -> None:
    assert node.manager is None
    assert node.parent is None


def test_push_back_keeps_insertion_order():
    program, nodes = _filled(3)

    _assert_chain(program.nodes, nodes)
    assert len(program.nodes) == 3
    assert program.nodes


def test_push_front_on_single_element_list_keeps_last():
    program, (only,) = _filled(1)
    front = ASTBlockEncoded(100, 104)

    program.nodes.push_front(front)

    _assert_chain(program.nodes, [front, only])


def test_push_front_on_empty_list():
    program = ASTProgram()
    node = ASTBlockEncoded(0, 4)

    program.nodes.push_front(node)

    _assert_chain(program.nodes, [node])
    assert not ASTZipper()


def test_insert_after_and_before_members():
    program, (a, b) = _filled(2)
    middle = ASTBlockEncoded(50, 54)
    tail = ASTBlockEncoded(60, 64)
    head = ASTBlockEncoded(70, 74)

    program.nodes.insert_after(middle, a)
    program.nodes.insert_after(tail, b)
    program.nodes.insert_before(head, a)

    _assert_chain(program.nodes, [head, a, middle, b, tail])


def test_insert_with_missing_anchor_targets_list_ends():
    program, (a,) = _filled(1)
    front = ASTBlockEncoded(10, 14)
    back = ASTBlockEncoded(20, 24)

    program.nodes.insert_after(front, None)
    program.nodes.insert_before(back, None)

    _assert_chain(program.nodes, [front, a, back])


def test_inserting_an_attached_node_is_rejected():
    program, (a, b) = _filled(2)
    other = ASTProgram()

    with pytest.raises(ASTConsistencyError, match="already attached"):
        other.nodes.push_back(a)
    with pytest.raises(ASTConsistencyError):
        program.nodes.insert_after(b, a)


def test_operations_on_foreign_nodes_are_rejected():
    program, (a,) = _filled(1)
    stranger = ASTBlockEncoded(8, 12)

    with pytest.raises(ASTConsistencyError, match="not a member"):
        program.nodes.remove(stranger)
    with pytest.raises(ASTConsistencyError):
        program.nodes.insert_after(ASTBlockEncoded(0, 1), stranger)
    with pytest.raises(ASTConsistencyError):
        ASTProgram().nodes.detach_tail(a)


@pytest.mark.parametrize("position", [0, 1, 2])
def test_remove_relinks_neighbours(position):
    program, nodes = _filled(3)
    victim = nodes[position]

    program.nodes.remove(victim)

    _assert_chain(program.nodes, [node for node in nodes if node is not victim])
    _assert_free(victim)
    assert victim.previous is None
    assert victim.next is None


def test_remove_last_remaining_node_empties_list():
    program, (only,) = _filled(1)

    program.nodes.remove(only)

    _assert_chain(program.nodes, [])


def test_detach_single_leaves_children_of_container_alone():
    program = ASTProgram()
    container = ASTIfThen(ExprPredicate(0))
    program.nodes.push_back(container)
    child = ASTBlockEncoded(0, 4)
    container.nodes.push_back(child)

    program.nodes.detach_single(container)

    _assert_free(container)
    _assert_chain(container.nodes, [child])


def test_detach_tail_orphans_the_rest_of_the_chain():
    program, (a, b, c) = _filled(3)

    program.nodes.detach_tail(b)

    _assert_chain(program.nodes, [a])
    assert b.previous is None
    assert b.next is c
    assert c.previous is b
    _assert_free(b)
    _assert_free(c)


def test_detach_tail_from_first_node_empties_list():
    program, nodes = _filled(2)

    program.nodes.detach_tail(nodes[0])

    _assert_chain(program.nodes, [])
    for node in nodes:
        _assert_free(node)


def test_detach_segment_cuts_inclusive_run():
    program, (a, b, c, d) = _filled(4)

    program.nodes.detach_segment(b, c)

    _assert_chain(program.nodes, [a, d])
    assert b.previous is None
    assert b.next is c
    assert c.next is None
    _assert_free(b)
    _assert_free(c)


def test_detach_segment_at_both_ends():
    program, (a, b, c) = _filled(3)

    program.nodes.detach_segment(a, c)

    _assert_chain(program.nodes, [])
    assert a.next is b and b.next is c


def test_detach_segment_of_single_node():
    program, (a, b, c) = _filled(3)

    program.nodes.detach_segment(b, b)

    _assert_chain(program.nodes, [a, c])
    _assert_free(b)


def test_detach_segment_rejects_reversed_bounds():
    program, (a, b, c) = _filled(3)

    with pytest.raises(ASTConsistencyError, match="not reachable"):
        program.nodes.detach_segment(c, a)
    _assert_chain(program.nodes, [a, b, c])


def test_init_adopts_a_detached_chain():
    program, (a, b, c, d) = _filled(4)
    program.nodes.detach_segment(b, c)
    container = ASTIfThen(ExprPredicate(1))

    container.nodes.init(b, container)
    program.nodes.insert_after(container, a)

    _assert_chain(container.nodes, [b, c])
    _assert_chain(program.nodes, [a, container, d])
    assert b.level == 2


def test_init_requires_a_free_chain():
    program, (a,) = _filled(1)

    with pytest.raises(ASTConsistencyError):
        ASTIfThen(ExprPredicate(0)).nodes.init(a)


def test_iteration_tolerates_removal_of_current_node():
    program, nodes = _filled(3)

    for node in program.nodes:
        program.nodes.remove(node)

    _assert_chain(program.nodes, [])
    assert all(node.manager is None for node in nodes)
