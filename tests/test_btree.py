# tests/test_btree.py
import pytest

from btree_index.db.btree import BTree
from btree_index.utils import build_tree, levels

SEVENTEEN = [5, 10, 15, 20, 25, 28, 30, 31, 32, 33, 35, 40, 45, 50, 55, 60, 65]


def test_initial_state():
    tree = BTree(1)
    assert tree.order == 1
    assert tree.root.keys == []
    assert tree.root.children == []
    assert tree.height() == 1
    assert len(tree) == 0


@pytest.mark.parametrize("order", [0, -3, 1.5, "2", True])
def test_invalid_order_raises(order):
    with pytest.raises(ValueError):
        BTree(order)


def test_empty_tree_queries():
    tree = BTree(2)
    assert tree.search(1) is None
    assert not tree.contains(1)
    assert tree.remove(1) is False
    assert tree.root.keys == [] and tree.root.children == []


def test_insertion_step_by_step():
    tree = BTree(1)
    tree.insert(8)
    assert tree.root.keys == [8]
    tree.insert(9)
    assert tree.root.keys == [8, 9]

    tree.insert(10)
    assert tree.root.keys == [9]
    assert tree.root.children[0].keys == [8]
    assert tree.root.children[1].keys == [10]

    tree.insert(11)
    assert tree.root.keys == [9]
    assert tree.root.children[1].keys == [10, 11]

    tree.insert(15)
    assert tree.root.keys == [9, 11]
    assert [c.keys for c in tree.root.children] == [[8], [10], [15]]

    tree.insert(20)
    assert [c.keys for c in tree.root.children] == [[8], [10], [15, 20]]

    tree.insert(17)
    root = tree.root
    assert root.keys == [11]
    assert root.children[0].keys == [9]
    assert root.children[0].children[0].keys == [8]
    assert root.children[0].children[1].keys == [10]
    assert root.children[1].keys == [17]
    assert root.children[1].children[0].keys == [15]
    assert root.children[1].children[1].keys == [20]
    assert tree.height() == 3
    tree.check_invariants()


def test_search_returns_containing_node():
    tree = build_tree([8, 9, 10, 11, 15, 20, 17], order=1)
    assert tree.search(11) is tree.root
    assert tree.search(15).keys == [15]
    assert tree.search(16) is None
    assert 20 in tree
    assert 21 not in tree


def test_seventeen_keys_structure():
    tree = build_tree(SEVENTEEN, order=1)
    assert levels(tree) == [
        [[31]],
        [[20], [40]],
        [[10], [28], [33], [50, 60]],
        [[5], [15], [25], [30], [32], [35], [45], [55], [65]],
    ]
    assert tree.height() == 4
    tree.check_invariants()


def test_leaf_deletions_borrow_and_merge():
    tree = build_tree(SEVENTEEN, order=1)

    # fusión en la hoja y préstamo del hermano derecho en el nivel superior
    assert tree.remove(32)
    right = tree.root.children[1]
    assert right.keys == [50]
    assert right.children[0].keys == [40]
    assert [c.keys for c in right.children[0].children] == [[33, 35], [45]]
    tree.check_invariants()

    # clave en la raíz: la reemplaza su predecesor y el árbol pierde un nivel
    assert tree.remove(31)
    assert tree.height() == 3
    assert tree.root.keys == [30, 50]
    assert tree.root.children[0].keys == [10, 20]
    tree.check_invariants()

    assert tree.remove(30)
    assert tree.root.keys == [28, 50]
    assert tree.root.children[1].keys == [40]
    assert [c.keys for c in tree.root.children[1].children] == [[33, 35], [45]]
    assert [c.keys for c in tree.root.children[0].children] == [[5], [15], [25]]
    tree.check_invariants()

    for k in SEVENTEEN:
        assert tree.contains(k) == (k not in (30, 31, 32))


def test_internal_key_deletion():
    tree = build_tree(SEVENTEEN, order=1)

    tree.remove(33)
    right = tree.root.children[1]
    assert right.keys == [50]
    assert right.children[0].keys == [40]
    assert [c.keys for c in right.children[0].children] == [[32, 35], [45]]
    tree.check_invariants()

    tree.remove(30)
    assert tree.root.keys == [31, 50]
    assert levels(tree)[1] == [[10, 20], [40], [60]]
    tree.check_invariants()


def test_tree_shrinks_after_deletion():
    tree = build_tree([5, 10, 15, 20, 30, 35, 70], order=1)
    assert tree.height() == 3

    tree.remove(10)
    assert tree.height() == 2
    assert tree.root.keys == [20, 35]
    assert [c.keys for c in tree.root.children] == [[5, 15], [30], [70]]
    assert tree.root.parent is None
    tree.check_invariants()


def test_remove_absent_key_is_noop():
    tree = build_tree(SEVENTEEN, order=1)
    before = levels(tree)
    assert tree.remove(29) is False
    assert tree.remove(1000) is False
    assert levels(tree) == before
    assert len(tree) == len(SEVENTEEN)


def test_duplicates_are_a_multiset():
    tree = BTree(1)
    for _ in range(5):
        tree.insert(5)
    tree.insert(4)
    tree.insert(6)
    tree.check_invariants()
    assert len(tree) == 7

    for remaining in range(4, -1, -1):
        assert tree.remove(5)
        tree.check_invariants()
        assert tree.contains(5) == (remaining > 0)
    assert tree.remove(5) is False
    assert tree.contains(4) and tree.contains(6)


def test_insert_then_remove_everything():
    keys = list(range(1, 101))
    tree = build_tree(keys, order=2)
    heights = [tree.height()]
    for k in reversed(keys):
        assert tree.remove(k)
        tree.check_invariants()
        heights.append(tree.height())
    assert heights == sorted(heights, reverse=True)
    assert tree.root.keys == [] and tree.root.children == []
    assert tree.height() == 1
    assert len(tree) == 0


def test_string_keys():
    tree = build_tree(["pera", "manzana", "uva", "kiwi", "banana", "mango"], order=1)
    tree.check_invariants()
    assert tree.contains("kiwi")
    tree.remove("kiwi")
    assert not tree.contains("kiwi")
    tree.check_invariants()


def test_check_invariants_detects_corruption():
    tree = build_tree(range(20), order=2)
    tree.root.children[0].keys.append(10_000)
    with pytest.raises(AssertionError):
        tree.check_invariants()
