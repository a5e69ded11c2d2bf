# src/btree_index/viz/visualizer.py
"""
Visualizador sencillo que usa networkx + matplotlib para dibujar un B-tree y
la evolución de su altura durante una carga de trabajo.
Si no están instalados, lanza ImportError al importarlo (CLI lo manejará).
"""
from typing import Any, Dict, Optional, Tuple

import networkx as nx
import matplotlib.pyplot as plt

from btree_index.db.btree import BTree


def tree_to_networkx(tree: BTree) -> nx.DiGraph:
    """
    DiGraph con un nodo por nodo del árbol (id = orden BFS) y aristas padre -> hijo.
    Atributos de nodo: keys, depth, leaf.
    """
    G = nx.DiGraph()
    ids: Dict[int, int] = {}
    for i, (depth, node) in enumerate(tree.nodes()):
        ids[id(node)] = i
        G.add_node(i, keys=list(node.keys), depth=depth, leaf=node.is_leaf())
        parent = node.parent
        if parent is not None:
            G.add_edge(ids[id(parent)], i)
    return G


def tree_layout(G: nx.DiGraph) -> Dict[int, Tuple[float, float]]:
    """Hojas repartidas de izquierda a derecha; cada padre centrado sobre sus hijos."""
    pos: Dict[int, Tuple[float, float]] = {}
    next_x = [0.0]

    def _place(n: int) -> float:
        children = list(G.successors(n))
        if not children:
            x = next_x[0]
            next_x[0] += 1.0
        else:
            xs = [_place(c) for c in children]
            x = (xs[0] + xs[-1]) / 2.0
        pos[n] = (x, -float(G.nodes[n]["depth"]))
        return x

    if len(G):
        _place(0)
    return pos


def visualize_tree(tree: BTree, title: str = "B-tree", out_path: Optional[Any] = None):
    """Dibuja el árbol; si out_path se indica guarda la figura en vez de mostrarla."""
    G = tree_to_networkx(tree)
    pos = tree_layout(G)
    labels = {n: " | ".join(str(k) for k in G.nodes[n]["keys"]) or "∅" for n in G.nodes}

    width = max(6.0, 1.2 * sum(1 for n in G.nodes if G.nodes[n]["leaf"]))
    plt.figure(figsize=(min(width, 30.0), 2.0 + 1.5 * tree.height()))
    nx.draw_networkx_edges(G, pos, arrows=False, width=1.0, alpha=0.7)
    nx.draw_networkx_labels(G, pos, labels=labels, font_size=8,
                            bbox=dict(boxstyle="round", fc="lightyellow", ec="gray"))
    plt.title(title)
    plt.axis('off')
    if out_path is not None:
        plt.savefig(str(out_path), bbox_inches="tight")
        plt.close()
    else:
        plt.show()


def plot_height_profile(result: Dict[str, Any], out_path: Optional[Any] = None):
    """Altura y tamaño del árbol por paso (resultado de WorkloadSimulator.run)."""
    steps = result.get("steps", [])
    xs = [s["step"] for s in steps]
    fig, ax1 = plt.subplots(figsize=(10, 4))
    ax1.plot(xs, [s["height"] for s in steps], color="red", label="height")
    ax1.set_xlabel("step")
    ax1.set_ylabel("height")
    ax2 = ax1.twinx()
    ax2.plot(xs, [s["size"] for s in steps], color="steelblue", alpha=0.6, label="size")
    ax2.set_ylabel("size")
    ax1.set_title(f"Workload (order={result.get('order')})")
    if out_path is not None:
        fig.savefig(str(out_path), bbox_inches="tight")
        plt.close(fig)
    else:
        plt.show()
