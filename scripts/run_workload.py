# scripts/run_workload.py
"""
Ejecuta varias cargas aleatorias (una por orden) y guarda resultados legibles.
Uso (ejemplo, desde la raíz del proyecto):
  python scripts/run_workload.py --orders 1,2,4,8 --n 2000 --seed 0 --out results/sweep

Salida en --out:
  order_<k>/workload_steps.csv + summary.json por cada orden
  sweep.csv con una fila por orden (altura máxima, discrepancias, ...)
"""
from pathlib import Path
import argparse
import sys

import pandas as pd

try:
    from btree_index.sim.workload import WorkloadSimulator
    from btree_index.io import save_workload_result
except Exception:
    print("ERROR: no se pudo importar btree_index. Instala el paquete (pip install -e .) desde la raíz del proyecto.")
    raise


def main(argv=None):
    argv = argv or sys.argv[1:]
    p = argparse.ArgumentParser(description="Run random B-tree workloads for several orders and export results")
    p.add_argument("--orders", default="1,2,3,4", help="Órdenes a probar, separados por comas")
    p.add_argument("--n", type=int, default=1000, help="Claves distintas por carga")
    p.add_argument("--duplicates", type=float, default=0.1, help="Fracción de duplicados extra")
    p.add_argument("--seed", type=int, default=None, help="Semilla aleatoria (numpy)")
    p.add_argument("--check-every", type=int, default=10, help="Validar invariantes cada N pasos")
    p.add_argument("--out", "-o", default="results/sweep", help="Directorio de salida")
    args = p.parse_args(argv)

    try:
        orders = [int(o) for o in args.orders.split(",") if o.strip()]
    except ValueError:
        print("ERROR: --orders debe ser una lista de enteros:", args.orders)
        return 1

    out_dir = Path(args.out)
    rows = []
    for order in orders:
        print(f"Orden {order}: ejecutando {args.n} claves ...")
        sim = WorkloadSimulator(order=order, seed=args.seed, check_every=args.check_every)
        res = sim.run(n=args.n, duplicates=args.duplicates)
        save_workload_result(res, out_dir / f"order_{order}")
        rows.append({
            "order": order,
            "total_ops": res["total_ops"],
            "max_height": res["max_height"],
            "final_size": res["final_size"],
            "mismatches": len(res["mismatches"]),
            "height_violations": res["height_violations"],
        })

    df = pd.DataFrame(rows, columns=["order", "total_ops", "max_height", "final_size", "mismatches", "height_violations"])
    out_dir.mkdir(parents=True, exist_ok=True)
    df.to_csv(out_dir / "sweep.csv", index=False)
    print(df.to_string(index=False))
    print("Resultados guardados en:", out_dir)
    return 0 if df["mismatches"].sum() == 0 else 1


if __name__ == "__main__":
    raise SystemExit(main())
