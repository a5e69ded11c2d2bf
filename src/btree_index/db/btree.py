# src/btree_index/db/btree.py
"""
B-tree genérico en memoria, parametrizado por su orden:
- búsqueda por descenso desde la raíz
- inserción con división (split) de nodos llenos, propagada hacia la raíz
- borrado con reparación de underflow (préstamo de un hermano o fusión)
Los nodos no raíz guardan entre `order` y `2*order` claves; la raíz no tiene mínimo.
Las claves duplicadas se permiten (semántica de multiconjunto).
"""
from collections import deque
from typing import Any, Iterator, Optional, Tuple

from .node import BTreeNode


class BTree:
    """B-tree. API: insert(key), remove(key), search(key), contains(key), height()."""

    def __init__(self, order: int = 2):
        if isinstance(order, bool) or not isinstance(order, int) or order < 1:
            raise ValueError("order must be >= 1")
        self.root = BTreeNode()
        self.order = order
        self._size = 0

    def __len__(self):
        return self._size

    def __contains__(self, key: Any) -> bool:
        return self.contains(key)

    def height(self) -> int:
        node = self.root
        depth = 1
        while node.children:
            depth += 1
            node = node.children[0]
        return depth

    def contains(self, key: Any) -> bool:
        return self.search(key) is not None

    def search(self, key: Any, node: Optional[BTreeNode] = None) -> Optional[BTreeNode]:
        """
        Devuelve el primer nodo (bajando desde `node`, por defecto la raíz)
        que contiene key, o None si no está.
        """
        node = self.root if node is None else node
        while node.keys:
            for k in node.keys:
                if k == key:
                    return node
            if node.is_leaf():
                return None
            node = node.children[node.slot_for(key)]
        return None

    def find_leaf(self, key: Any) -> BTreeNode:
        """Hoja donde debe insertarse key (ignora igualdad: los duplicados van a la derecha)."""
        node = self.root
        while not node.is_leaf():
            node = node.children[node.slot_for(key)]
        return node

    def insert(self, key: Any) -> None:
        leaf = self.find_leaf(key)
        self._size += 1
        if not leaf.is_full(self.order):
            leaf.insert_key(key)
            return
        # la hoja queda con 2*order + 1 claves y hay que dividirla
        leaf.insert_key(key)
        self.split(leaf)

    def split(self, node: BTreeNode) -> None:
        """
        Divide un nodo con 2*order + 1 claves por su mediana. La mediana sube al
        padre (o a una raíz nueva) y la mitad derecha pasa a un hermano nuevo.
        Si el padre ya estaba lleno antes de recibir la mediana, se divide también.
        """
        while node is not None:
            assert len(node.keys) == 2 * self.order + 1, "split expects an overflowing node"
            median = node.keys[self.order]
            sibling = BTreeNode(node.keys[self.order + 1:], node.children[self.order + 1:])
            node.keys = node.keys[:self.order]
            node.children = node.children[:self.order + 1]

            parent = node.parent
            new_root = parent is None
            if new_root:
                parent = BTreeNode()
            parent_was_full = parent.is_full(self.order)

            parent.insert_key(median)
            if new_root:
                parent.add_child(node)
                self.root = parent
            parent.add_child(sibling, after=node)

            node = parent if parent_was_full else None

    def remove(self, key: Any) -> bool:
        """
        Elimina una aparición de key. Devuelve False (sin tocar el árbol) si no está.
        Si la clave está en un nodo interno se reemplaza por su predecesor en orden,
        que se saca de la hoja correspondiente.
        """
        node = self.search(key)
        if node is None:
            return False

        if node.is_leaf():
            node.keys.remove(key)
            leaf = node
        else:
            pos = node.keys.index(key)
            leaf = node.children[pos]
            while not leaf.is_leaf():
                leaf = leaf.children[-1]
            node.keys[pos] = leaf.keys.pop()

        self._size -= 1
        if leaf.parent is not None and len(leaf.keys) < self.order:
            self.handle_underflow(leaf)
        return True

    def handle_underflow(self, node: BTreeNode) -> None:
        """
        Repara un nodo no raíz con menos de `order` claves. Orden de preferencia:
        préstamo del hermano izquierdo, préstamo del derecho, fusión con el
        izquierdo, fusión con el derecho. Tras una fusión el padre pierde una
        clave; si queda en underflow se repara a su vez, y si era la raíz y quedó
        vacía el nodo fusionado pasa a ser la raíz.
        """
        while node.parent is not None and len(node.keys) < self.order:
            parent = node.parent
            pos = node.index_in_parent()
            left = node.left_sibling()
            right = node.right_sibling()

            if left is not None and len(left.keys) > self.order:
                self._borrow_from_left(node, left, parent, pos)
                return
            if right is not None and len(right.keys) > self.order:
                self._borrow_from_right(node, right, parent, pos)
                return

            if left is not None:
                merged = self._merge_into_left(node, left, parent, pos)
            else:
                merged = self._merge_into_right(node, right, parent, pos)

            if parent.parent is None and not parent.keys:
                # la raíz se quedó sin claves: el árbol pierde un nivel
                merged.parent = None
                self.root = merged
                return
            node = parent

    def _borrow_from_left(self, node: BTreeNode, left: BTreeNode, parent: BTreeNode, pos: int) -> None:
        node.keys.insert(0, parent.keys[pos - 1])
        parent.keys[pos - 1] = left.keys.pop()
        if not left.is_leaf():
            child = left.children.pop()
            child.parent = node
            node.children.insert(0, child)

    def _borrow_from_right(self, node: BTreeNode, right: BTreeNode, parent: BTreeNode, pos: int) -> None:
        node.keys.append(parent.keys[pos])
        parent.keys[pos] = right.keys.pop(0)
        if not right.is_leaf():
            child = right.children.pop(0)
            child.parent = node
            node.children.append(child)

    def _merge_into_left(self, node: BTreeNode, left: BTreeNode, parent: BTreeNode, pos: int) -> BTreeNode:
        left.keys.append(parent.keys.pop(pos - 1))
        left.keys.extend(node.keys)
        for child in node.children:
            child.parent = left
            left.children.append(child)
        parent.children.pop(pos)
        assert len(left.keys) <= 2 * self.order, "merge overflowed the left sibling"
        return left

    def _merge_into_right(self, node: BTreeNode, right: BTreeNode, parent: BTreeNode, pos: int) -> BTreeNode:
        right.keys[:0] = node.keys + [parent.keys.pop(pos)]
        for child in node.children:
            child.parent = right
        right.children[:0] = node.children
        parent.children.pop(pos)
        assert len(right.keys) <= 2 * self.order, "merge overflowed the right sibling"
        return right

    def nodes(self) -> Iterator[Tuple[int, BTreeNode]]:
        """Recorre los nodos por niveles: (profundidad, nodo), la raíz tiene profundidad 1."""
        queue = deque([(1, self.root)])
        while queue:
            depth, node = queue.popleft()
            yield depth, node
            queue.extend((depth + 1, child) for child in node.children)

    def check_invariants(self) -> None:
        """Verifica que el árbol esté bien formado; lanza AssertionError si no."""
        assert self.root.parent is None, "root has a parent"
        leaf_depths = set()
        total = 0
        stack = [(self.root, 1, None, None)]
        while stack:
            node, depth, low, high = stack.pop()
            total += len(node.keys)
            assert node.keys == sorted(node.keys), f"keys out of order in {node!r}"
            if low is not None:
                assert all(low <= k for k in node.keys), f"{node!r} has keys below {low!r}"
            if high is not None:
                assert all(k <= high for k in node.keys), f"{node!r} has keys above {high!r}"
            assert len(node.keys) <= 2 * self.order, f"{node!r} holds more than 2*order keys"
            if node is not self.root:
                assert len(node.keys) >= self.order, f"{node!r} holds fewer than order keys"

            if node.is_leaf():
                leaf_depths.add(depth)
                continue
            assert node.keys, "internal node without keys"
            assert len(node.children) == len(node.keys) + 1, f"{node!r} has a wrong number of children"
            for i, child in enumerate(node.children):
                assert child.parent is node, f"{child!r} has a stale parent link"
                child_low = node.keys[i - 1] if i > 0 else low
                child_high = node.keys[i] if i < len(node.keys) else high
                stack.append((child, depth + 1, child_low, child_high))

        assert leaf_depths == {self.height()}, "leaves at unequal depths"
        assert total == self._size, "stored key count does not match len()"
