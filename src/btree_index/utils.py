# src/btree_index/utils.py
from typing import Any, Dict, Iterable, List

from btree_index.db.btree import BTree


def parse_key(raw: Any) -> Any:
    """
    Convierte un texto en int, luego float (acepta notación como "1e3" o "inf");
    si no se puede lo deja como str. "nan" se rechaza con ValueError: nan != nan,
    así que una clave NaN nunca se podría volver a encontrar.
    """
    if not isinstance(raw, str):
        return raw
    s = raw.strip()
    for conv in (int, float):
        try:
            value = conv(s)
        except ValueError:
            continue
        if value != value:
            raise ValueError(f"NaN is not a valid key: {raw!r}")
        return value
    return s


def parse_keys(text: str) -> List[Any]:
    """'8, 9,10' -> [8, 9, 10]. Acepta comas, espacios o saltos de línea como separador."""
    parts = text.replace(",", " ").split()
    return [parse_key(p) for p in parts]


def build_tree(keys: Iterable[Any], order: int = 2) -> BTree:
    tree = BTree(order=order)
    for k in keys:
        tree.insert(k)
    return tree


def levels(tree: BTree) -> List[List[List[Any]]]:
    """Claves de cada nodo agrupadas por nivel (nivel 0 = raíz)."""
    out: List[List[List[Any]]] = []
    for depth, node in tree.nodes():
        while len(out) < depth:
            out.append([])
        out[depth - 1].append(list(node.keys))
    return out


def format_tree(tree: BTree) -> str:
    """
    Representación en texto, un nivel por línea:
      L1: [11]
      L2: [9] [17]
      L3: [8] [10] | [15] [20]
    Los nodos de distintos padres se separan con '|'.
    """
    lines = []
    current_depth = 0
    parts: List[str] = []
    last_parent = None
    for depth, node in tree.nodes():
        if depth != current_depth:
            if parts:
                lines.append(f"L{current_depth}: " + " ".join(parts))
            current_depth = depth
            parts = []
            last_parent = None
        parent = node.parent
        if parts and parent is not last_parent:
            parts.append("|")
        parts.append("[" + ", ".join(repr(k) for k in node.keys) + "]")
        last_parent = parent
    if parts:
        lines.append(f"L{current_depth}: " + " ".join(parts))
    return "\n".join(lines)


def tree_summary(tree: BTree) -> Dict[str, Any]:
    node_count = 0
    leaf_count = 0
    for _, node in tree.nodes():
        node_count += 1
        if node.is_leaf():
            leaf_count += 1
    return {
        "order": tree.order,
        "size": len(tree),
        "height": tree.height(),
        "nodes": node_count,
        "leaves": leaf_count,
    }
