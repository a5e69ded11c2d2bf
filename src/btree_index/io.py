# src/btree_index/io.py
import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from btree_index.utils import parse_key, parse_keys

STEP_COLUMNS = ["step", "op", "key", "removed", "size", "height", "nodes"]


def load_keys(path) -> List[Any]:
    """
    Lee una lista de claves desde:
      - CSV (.csv / .csv.gz) con columna 'key' (o la primera columna)
      - texto plano con una clave por línea o separadas por comas
    Las claves numéricas se convierten a int/float.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)
    if p.suffix == ".csv" or str(p).endswith(".csv.gz"):
        df = pd.read_csv(p, dtype=str)
        col = "key" if "key" in df.columns else df.columns[0]
        return [parse_key(v) for v in df[col].dropna()]
    with open(p, encoding="utf-8") as fh:
        return parse_keys(fh.read())


def steps_frame(result: Dict[str, Any]) -> pd.DataFrame:
    return pd.DataFrame(result.get("steps", []), columns=STEP_COLUMNS)


def save_workload_result(result: Dict[str, Any], out_dir, compress: bool = False) -> Path:
    """
    Guarda en out_dir:
      - workload_steps.csv (o .csv.gz): una fila por operación
      - summary.json: resumen sin la lista de pasos
    Devuelve out_dir.
    """
    out_p = Path(out_dir)
    out_p.mkdir(parents=True, exist_ok=True)

    df = steps_frame(result)
    if compress:
        df.to_csv(out_p / "workload_steps.csv.gz", index=False, compression="gzip")
    else:
        df.to_csv(out_p / "workload_steps.csv", index=False)

    summary = {k: v for k, v in result.items() if k != "steps"}
    with open(out_p / "summary.json", "w", encoding="utf-8") as fh:
        json.dump(summary, fh, indent=2, ensure_ascii=False)
    return out_p
