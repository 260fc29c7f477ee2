"""Canonical JSONL files for tick records and world events."""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import IO, Any, Iterable, Mapping, Union

import numpy as np

from .schema import TickData

Record = Union[TickData, Mapping[str, Any], Any]


def _normalize_record(record: Record) -> Mapping[str, Any]:
    if isinstance(record, TickData):
        return record.to_ordered_dict()
    if hasattr(record, "to_dict"):
        return record.to_dict()
    if is_dataclass(record):
        return asdict(record)
    if isinstance(record, Mapping):
        return dict(record)
    raise TypeError(f"Unsupported record type: {type(record)!r}")


def _to_builtin(obj: Any) -> Any:
    # numpy scalars and arrays leak in from the sensory buffers
    if isinstance(obj, np.generic):
        return obj.item()
    if isinstance(obj, np.ndarray):
        return obj.tolist()
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _canonical_json(payload: Mapping[str, Any]) -> str:
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), default=_to_builtin)


class JsonlLogger:
    """One canonical JSON object per line; the file is truncated on open."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.count = 0
        self._fh: IO[str] | None = None

    def __enter__(self) -> "JsonlLogger":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        if self._fh is not None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("w", encoding="utf-8")

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def write(self, record: Record) -> None:
        if self._fh is None:
            self.open()
        self._fh.write(_canonical_json(_normalize_record(record)) + "\n")
        self.count += 1

    def write_tick(self, tick: TickData | Mapping[str, Any]) -> None:
        self.write(tick)
        self._fh.flush()

    def write_all(self, records: Iterable[Record]) -> int:
        for record in records:
            self.write(record)
        return self.count


def read_ticks(path: str | Path) -> list[dict[str, Any]]:
    """Load a JSONL log back into dicts."""
    with Path(path).open(encoding="utf-8") as fh:
        return [json.loads(line) for line in fh if line.strip()]


__all__ = ["JsonlLogger", "Record", "_canonical_json", "_normalize_record", "read_ticks"]
