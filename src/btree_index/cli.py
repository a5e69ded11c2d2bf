# src/btree_index/cli.py
import argparse
import os
import sys
from pathlib import Path

from btree_index.db.btree import BTree
from btree_index.io import load_keys, save_workload_result
from btree_index.sim.workload import WorkloadSimulator
from btree_index.utils import format_tree, parse_keys, tree_summary

# visualización opcional
try:
    from btree_index.viz.visualizer import visualize_tree, plot_height_profile
    HAS_VIS = True
except Exception:
    HAS_VIS = False

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
DEFAULT_OUT_DIR = os.path.join(PROJECT_ROOT, "results")
DEFAULT_ORDER = 2


def cmd_show(args) -> int:
    try:
        keys = load_keys(args.keys_file) if args.keys_file else parse_keys(args.keys or "")
        to_remove = parse_keys(args.remove or "")
    except FileNotFoundError as e:
        print("ERROR: no se encontró el archivo de claves:", e)
        return 1
    except ValueError as e:
        print("ERROR: clave inválida:", e)
        return 1

    tree = BTree(order=args.order)
    try:
        for k in keys:
            tree.insert(k)
        for k in to_remove:
            if not tree.remove(k):
                print("Warning: clave no encontrada, no se elimina:", k)
    except TypeError as e:
        print("ERROR: claves no comparables entre sí:", e)
        return 1

    summary = tree_summary(tree)
    print("=== B-TREE ===")
    print(format_tree(tree))
    print("Orden:", summary["order"], "| Altura:", summary["height"], "| Claves:", summary["size"],
          "| Nodos:", summary["nodes"])

    if args.plot or args.out:
        if not HAS_VIS:
            print("Visualización no disponible. Instala networkx y matplotlib.")
        else:
            try:
                visualize_tree(tree, title=f"B-tree (order={args.order})", out_path=args.out)
                if args.out:
                    print("Figura guardada en:", args.out)
            except Exception as ex:
                print("Warning: no se pudo dibujar el árbol:", ex)
    return 0


def cmd_simulate(args) -> int:
    sim = WorkloadSimulator(order=args.order, seed=args.seed, check_every=args.check_every)
    print("Ejecutando carga (n=%s duplicates=%s absent=%s) ..." % (args.n, args.duplicates, args.absent))
    result = sim.run(n=args.n, duplicates=args.duplicates, absent_removals=args.absent)

    print("Operaciones:", result["total_ops"])
    print("Altura máxima:", result["max_height"], "| Altura final:", result["final_height"])
    print("Claves finales:", result["final_size"], "| Discrepancias:", len(result["mismatches"]))
    for m in result["mismatches"][:10]:
        print("  ", m)

    if args.out:
        out_dir = save_workload_result(result, Path(args.out), compress=args.compress)
        print("Resultados guardados en:", out_dir)

    if args.plot:
        if not HAS_VIS:
            print("Visualización no disponible. Instala networkx y matplotlib.")
        else:
            try:
                out_png = Path(args.out) / "height_profile.png" if args.out else None
                plot_height_profile(result, out_path=out_png)
            except Exception as ex:
                print("Warning: no se pudo dibujar el perfil de altura:", ex)

    return 1 if (result["mismatches"] or result["height_violations"]) else 0


def _order(value: str) -> int:
    try:
        order = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"order must be an integer: {value!r}")
    if order < 1:
        raise argparse.ArgumentTypeError("order must be >= 1")
    return order


def main(argv=None) -> int:
    p = argparse.ArgumentParser(prog="btree_index")
    sub = p.add_subparsers(dest="cmd", required=True)

    ps = sub.add_parser("show", help="Construir un árbol con claves dadas e imprimirlo")
    ps.add_argument("--order", type=_order, default=DEFAULT_ORDER, help="Orden del árbol (>= 1)")
    src = ps.add_mutually_exclusive_group()
    src.add_argument("--keys", help="Claves separadas por comas, p.ej. '8,9,10'")
    src.add_argument("--keys-file", help="CSV (columna key) o texto con una clave por línea")
    ps.add_argument("--remove", help="Claves a eliminar tras insertar, separadas por comas")
    ps.add_argument("--plot", action="store_true", help="Mostrar el árbol (si hay dependencias)")
    ps.add_argument("--out", help="Guardar la figura en este archivo en vez de mostrarla")

    pm = sub.add_parser("simulate", help="Carga aleatoria de inserciones/borrados contra un modelo de referencia")
    pm.add_argument("--order", type=_order, default=DEFAULT_ORDER, help="Orden del árbol (>= 1)")
    pm.add_argument("--n", type=int, default=1000, help="Número de claves distintas")
    pm.add_argument("--seed", type=int, default=None, help="Semilla para reproducibilidad (numpy)")
    pm.add_argument("--duplicates", type=float, default=0.0, help="Fracción de claves duplicadas extra")
    pm.add_argument("--absent", type=float, default=0.1, help="Fracción de borrados de claves inexistentes")
    pm.add_argument("--check-every", type=int, default=1, help="Validar invariantes cada N pasos (0 = nunca)")
    pm.add_argument("--out", help=f"Directorio de salida para CSV/JSON (p.ej. {DEFAULT_OUT_DIR})")
    pm.add_argument("--compress", action="store_true", help="Guardar el CSV comprimido (.csv.gz)")
    pm.add_argument("--plot", action="store_true", help="Dibujar altura/tamaño por paso")

    args = p.parse_args(argv)
    if args.cmd == "show":
        return cmd_show(args)
    if args.cmd == "simulate":
        return cmd_simulate(args)
    return 1


if __name__ == "__main__":
    sys.exit(main())
