"""Hashes of tick traces and world grids, used to check that seeded runs replay exactly."""

from __future__ import annotations

import hashlib
from typing import Iterable

import numpy as np

from .logger import Record, _canonical_json, _normalize_record


def tick_hash(tick: Record) -> str:
    return hashlib.sha256(_canonical_json(_normalize_record(tick)).encode("utf-8")).hexdigest()


def world_hash(cells: np.ndarray) -> str:
    """Hash of a material grid, shape included."""
    arr = np.ascontiguousarray(cells, dtype=np.int32)
    h = hashlib.sha256(str(arr.shape).encode("utf-8"))
    h.update(arr.tobytes())
    return h.hexdigest()


class RunHash:
    """Chains per-tick hashes into one digest for a whole run."""

    def __init__(self) -> None:
        self._hasher = hashlib.sha256()
        self.ticks = 0

    def update(self, tick: Record) -> str:
        digest = tick_hash(tick)
        self._hasher.update(digest.encode("utf-8"))
        self.ticks += 1
        return digest

    def hexdigest(self) -> str:
        return self._hasher.hexdigest()


def trace_hash(ticks: Iterable[Record]) -> str:
    rh = RunHash()
    for tick in ticks:
        rh.update(tick)
    return rh.hexdigest()


__all__ = ["RunHash", "tick_hash", "trace_hash", "world_hash"]
