# src/btree_index/sim/workload.py
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from btree_index.db.btree import BTree


class WorkloadSimulator:
    """
    Ejecuta una carga aleatoria de inserciones y borrados sobre un BTree y la
    compara paso a paso con un multiconjunto de referencia (Counter).
    - Fase 1: inserta una permutación de n claves (más duplicados opcionales).
    - Fase 2: elimina todas las claves en otro orden aleatorio, intercalando
      borrados de claves ausentes (deben ser no-op).
    Por cada paso registra altura, número de nodos y tamaño.
    """

    def __init__(self, order: int = 2, seed: Optional[int] = None, check_every: int = 1):
        self.order = int(order)
        self.rng = np.random.default_rng(seed)
        # cada cuántos pasos se llama a check_invariants (0 = nunca)
        self.check_every = int(check_every)

    def _plan(self, n: int, duplicates: float, absent_removals: float) -> List[Tuple[str, int]]:
        keys = [int(k) for k in self.rng.permutation(n)]
        n_dup = int(round(n * duplicates))
        if n_dup and n:
            extra = [int(k) for k in self.rng.choice(n, size=n_dup, replace=True)]
            keys.extend(extra)
            keys = [keys[i] for i in self.rng.permutation(len(keys))]

        ops: List[Tuple[str, int]] = [("insert", k) for k in keys]
        removals = [keys[i] for i in self.rng.permutation(len(keys))]
        n_absent = int(round(len(removals) * absent_removals))
        # claves fuera del rango [0, n) nunca están en el árbol
        absent = [int(k) for k in self.rng.integers(n, 2 * n + 1, size=n_absent)]
        for k in absent:
            pos = int(self.rng.integers(0, len(removals) + 1))
            removals.insert(pos, k)
        ops.extend(("remove", k) for k in removals)
        return ops

    def run(self, n: int = 100, duplicates: float = 0.0, absent_removals: float = 0.1) -> Dict[str, Any]:
        """
        n: número de claves distintas (0..n-1)
        duplicates: fracción de claves extra repetidas
        absent_removals: fracción de borrados extra de claves que no existen
        Retorna un dict con los pasos, resumen de alturas y discrepancias encontradas.
        """
        tree = BTree(order=self.order)
        reference: Counter = Counter()
        steps: List[Dict[str, Any]] = []
        mismatches: List[Dict[str, Any]] = []
        height_violations = 0
        prev_height = tree.height()

        for i, (op, key) in enumerate(self._plan(n, duplicates, absent_removals)):
            if op == "insert":
                tree.insert(key)
                reference[key] += 1
                removed = None
                if tree.height() < prev_height:
                    height_violations += 1
            else:
                removed = tree.remove(key)
                expected = reference[key] > 0
                if expected:
                    reference[key] -= 1
                if removed != expected:
                    mismatches.append({"step": i, "op": op, "key": key, "reason": "remove result"})
                if tree.height() > prev_height:
                    height_violations += 1

            if tree.contains(key) != (reference[key] > 0):
                mismatches.append({"step": i, "op": op, "key": key, "reason": "contains"})
            if len(tree) != sum(reference.values()):
                mismatches.append({"step": i, "op": op, "key": key, "reason": "size"})
            if self.check_every and i % self.check_every == 0:
                try:
                    tree.check_invariants()
                except AssertionError as e:
                    mismatches.append({"step": i, "op": op, "key": key, "reason": f"invariant: {e}"})

            node_count = sum(1 for _ in tree.nodes())
            prev_height = tree.height()
            steps.append({
                "step": i,
                "op": op,
                "key": key,
                "removed": removed,
                "size": len(tree),
                "height": prev_height,
                "nodes": node_count,
            })

        heights = [s["height"] for s in steps]
        return {
            "order": self.order,
            "steps": steps,
            "mismatches": mismatches,
            "height_violations": height_violations,
            "max_height": max(heights) if heights else tree.height(),
            "final_height": tree.height(),
            "final_size": len(tree),
            "final_root_keys": list(tree.root.keys),
            "final_root_children": len(tree.root.children),
            "total_ops": len(steps),
        }
