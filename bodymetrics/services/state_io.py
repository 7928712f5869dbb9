from __future__ import annotations

import csv
import os
from pathlib import Path
from typing import Iterable, Sequence


def read_rows(path: str | Path, delimiter: str = ";") -> list[list[str]]:
    p = Path(path)
    if not p.exists():
        return []
    with p.open("r", newline="", encoding="utf-8") as file:
        reader = csv.reader(file, delimiter=delimiter)
        return [row for row in reader if row and any(cell.strip() for cell in row)]


def write_rows_atomic(
    path: str | Path,
    rows: Iterable[Sequence[str]],
    delimiter: str = ";",
) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    tmp = p.with_suffix(f"{p.suffix}.tmp")
    with tmp.open("w", newline="", encoding="utf-8") as file:
        writer = csv.writer(file, delimiter=delimiter, lineterminator="\n")
        writer.writerows(rows)
    os.replace(str(tmp), str(p))


def append_rows(
    path: str | Path,
    rows: Iterable[Sequence[str]],
    delimiter: str = ";",
) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("a", newline="", encoding="utf-8") as file:
        writer = csv.writer(file, delimiter=delimiter, lineterminator="\n")
        writer.writerows(rows)
