"""Reading cluster lists supplied by the operator."""

import csv
from pathlib import Path
from typing import Iterable, List

CLUSTER_COLUMN = "clustername"


def read_cluster_names(path: Path) -> List[str]:
    """Read cluster names from a CSV with a ClusterName column, or one name per line."""
    path = Path(path)
    with open(path, "r", newline="", encoding="utf-8-sig") as f:
        lines = f.read().splitlines()

    rows = [line for line in lines if line.strip() and not line.lstrip().startswith("#")]
    if not rows:
        return []

    header = [cell.strip().lower() for cell in next(csv.reader([rows[0]]))]
    if CLUSTER_COLUMN in header:
        column = header.index(CLUSTER_COLUMN)
        names = []
        for record in csv.reader(rows[1:]):
            if len(record) > column:
                names.append(record[column])
    else:
        names = rows

    return dedupe(name.strip() for name in names)


def dedupe(names: Iterable[str]) -> List[str]:
    """Drop blanks and repeats, keeping first-seen order."""
    return list(dict.fromkeys(name for name in names if name))
