# src/btree_index/db/node.py
import weakref
from typing import Any, List, Optional


class BTreeNode:
    """
    Nodo de un B-tree.
    - keys: claves ordenadas de menor a mayor
    - children: nodos hijos (vacío si es hoja, si no len(keys) + 1)
    - parent: referencia débil al nodo padre (None en la raíz)
    """

    def __init__(self, keys: Optional[List[Any]] = None, children: Optional[List['BTreeNode']] = None):
        self.keys: List[Any] = list(keys) if keys else []
        self.children: List['BTreeNode'] = []
        self._parent: Optional[weakref.ref] = None
        for child in children or []:
            child.parent = self
            self.children.append(child)

    @property
    def parent(self) -> Optional['BTreeNode']:
        # el padre no es dueño del hijo: solo sirve para navegar hacia arriba
        if self._parent is None:
            return None
        return self._parent()

    @parent.setter
    def parent(self, node: Optional['BTreeNode']) -> None:
        self._parent = weakref.ref(node) if node is not None else None

    def is_leaf(self) -> bool:
        return len(self.children) == 0

    def is_full(self, order: int) -> bool:
        return len(self.keys) >= 2 * order

    def slot_for(self, key: Any) -> int:
        """Índice de la primera clave estrictamente mayor que key (o len(keys))."""
        for i, k in enumerate(self.keys):
            if key < k:
                return i
        return len(self.keys)

    def insert_key(self, key: Any) -> None:
        """Inserta key manteniendo el orden. No elimina duplicados."""
        self.keys.insert(self.slot_for(key), key)

    def add_child(self, child: 'BTreeNode', after: Optional['BTreeNode'] = None) -> None:
        """
        Enlaza child a este nodo. La clave separadora correspondiente ya debe
        estar en self.keys.
        Si se pasa `after`, child queda justo a la derecha de ese hijo; si no,
        la posición sale de la primera clave de child.
        """
        child.parent = self
        if after is not None:
            idx = after.index_in_parent() + 1
        else:
            idx = self.slot_for(child.keys[0]) if child.keys else len(self.children)
        self.children.insert(idx, child)

    def index_in_parent(self) -> Optional[int]:
        parent = self.parent
        if parent is None:
            return None
        for i, c in enumerate(parent.children):
            if c is self:
                return i
        raise ValueError("node is not listed among its parent's children")

    def left_sibling(self) -> Optional['BTreeNode']:
        idx = self.index_in_parent()
        if idx is None or idx == 0:
            return None
        return self.parent.children[idx - 1]

    def right_sibling(self) -> Optional['BTreeNode']:
        idx = self.index_in_parent()
        if idx is None or idx + 1 == len(self.parent.children):
            return None
        return self.parent.children[idx + 1]

    def __repr__(self):
        return f"BTreeNode(keys={self.keys!r}, children={len(self.children)})"
