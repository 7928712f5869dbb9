from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from bodymetrics.core.constants import MEASUREMENT_FIELDS
from bodymetrics.exceptions import MalformedStateError
from bodymetrics.logging_config import get_logger
from bodymetrics.services.state_io import append_rows, read_rows, write_rows_atomic

logger = get_logger(__name__)

ROW_WIDTH = len(MEASUREMENT_FIELDS) + 2


@dataclass
class IdentityRecord:
    subject_id: str
    values: tuple[float, ...]
    count: int = 0

    def to_row(self) -> list[str]:
        return [str(self.subject_id), *(repr(float(v)) for v in self.values), str(int(self.count))]

    @staticmethod
    def from_row(row: list[str]) -> "IdentityRecord":
        if len(row) != ROW_WIDTH:
            raise MalformedStateError(
                f"identity row must have {ROW_WIDTH} columns, got {len(row)}"
            )
        try:
            values = tuple(float(cell) for cell in row[1:-1])
            count = int(float(row[-1]))
        except ValueError as exc:
            raise MalformedStateError(f"identity row for {row[0]!r} is not numeric") from exc
        return IdentityRecord(subject_id=row[0], values=values, count=count)

    def as_dict(self) -> dict:
        return {
            "subject_id": self.subject_id,
            "values": dict(zip(MEASUREMENT_FIELDS, (float(v) for v in self.values))),
            "count": int(self.count),
        }


class IdentityStore:
    """Delimited flat-file table of identity rows, one writer at a time.

    Rows look like ``id;height;leg;arm;shoulder;torso;count`` with no header.
    A missing file reads as an empty table. Every mutation holds the store
    lock across its read-modify-write so concurrent callers serialize.
    """

    def __init__(self, path: str | Path, delimiter: str = ";"):
        self.path = Path(path)
        self.delimiter = delimiter
        self._lock = threading.Lock()

    def _load_locked(self) -> list[IdentityRecord]:
        return [IdentityRecord.from_row(row) for row in read_rows(self.path, self.delimiter)]

    def load(self) -> list[IdentityRecord]:
        with self._lock:
            return self._load_locked()

    def get(self, subject_id: str) -> Optional[IdentityRecord]:
        with self._lock:
            for record in self._load_locked():
                if record.subject_id == subject_id:
                    return record
        return None

    def upsert(self, record: IdentityRecord) -> None:
        with self._lock:
            records = self._load_locked()
            replaced = False
            for idx, existing in enumerate(records):
                if existing.subject_id == record.subject_id:
                    records[idx] = record
                    replaced = True
                    break
            if not replaced:
                records.append(record)
            write_rows_atomic(
                self.path,
                [item.to_row() for item in records],
                self.delimiter,
            )
        logger.debug("Stored %s in %s (count=%d)", record.subject_id, self.path, record.count)

    def append(self, record: IdentityRecord) -> None:
        with self._lock:
            append_rows(self.path, [record.to_row()], self.delimiter)
        logger.info("Appended %s to %s", record.subject_id, self.path)

    def __len__(self) -> int:
        return len(self.load())
