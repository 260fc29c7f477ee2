"""Material grid of the flat world and its drawing helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence, Tuple

import numpy as np

from fworld.geometry import Cell, dist, next_grid_point, norm_vec_line
from fworld.rng import RandomSource


@dataclass(frozen=True)
class MaterialCatalog:
    """Ordered material names; the index of a name is its grid code."""

    names: Tuple[str, ...]
    barrier_idx: int = 1
    index: Dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "index", {name: i for i, name in enumerate(self.names)})

    def __len__(self) -> int:
        return len(self.names)

    def __contains__(self, name: object) -> bool:
        return name in self.index

    def code(self, name: str) -> int:
        return self.index[name]

    def name(self, code: int) -> str:
        return self.names[code]

    def is_barrier(self, code: int) -> bool:
        return 0 < code <= self.barrier_idx


@dataclass
class Grid:
    """2D grid of material codes, indexed by (x, y) cells."""

    size: Tuple[int, int]  # X, Y
    cells: np.ndarray = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.cells = np.zeros((self.size[1], self.size[0]), dtype=np.int32)

    @classmethod
    def from_array(cls, cells: np.ndarray) -> "Grid":
        cells = np.asarray(cells, dtype=np.int32)
        if cells.ndim != 2:
            raise ValueError(f"grid must be 2D, got shape {cells.shape}")
        grid = cls(size=(cells.shape[1], cells.shape[0]))
        grid.cells[...] = cells
        return grid

    def in_bounds(self, p: Cell) -> bool:
        return 0 <= p[0] < self.size[0] and 0 <= p[1] < self.size[1]

    def _check(self, p: Cell) -> None:
        if not self.in_bounds(p):
            raise IndexError(f"cell {p} outside world of size {self.size}")

    def get(self, p: Cell) -> int:
        self._check(p)
        return int(self.cells[p[1], p[0]])

    def set(self, p: Cell, mat: int) -> None:
        self._check(p)
        self.cells[p[1], p[0]] = mat

    def clear(self) -> None:
        self.cells.fill(0)

    def copy(self) -> "Grid":
        return Grid.from_array(self.cells.copy())

    def count(self, mat: int) -> int:
        return int(np.count_nonzero(self.cells == mat))

    # drawing, used at generation time only

    def line_horiz(self, st: Cell, ed: Cell, mat: int) -> None:
        for x in range(min(st[0], ed[0]), max(st[0], ed[0]) + 1):
            self.set((x, st[1]), mat)

    def line_vert(self, st: Cell, ed: Cell, mat: int) -> None:
        for y in range(min(st[1], ed[1]), max(st[1], ed[1]) + 1):
            self.set((st[0], y), mat)

    def line(self, st: Cell, ed: Cell, mat: int) -> None:
        dx, dy = ed[0] - st[0], ed[1] - st[1]
        if dx == 0:
            self.line_vert(st, ed, mat)
            return
        if dy == 0:
            self.line_horiz(st, ed, mat)
            return
        length = dist((0.0, 0.0), (dx, dy))
        v = norm_vec_line((float(dx), float(dy)))
        op = (float(st[0]), float(st[1]))
        cp = op
        while True:
            cp, gp = next_grid_point(cp, v)
            self.set(gp, mat)
            if dist(cp, op) >= length:
                break

    def rect(self, st: Cell, ed: Cell, mat: int) -> None:
        """Draw the outline of the rectangle spanned by st and ed."""
        self.line_horiz(st, (ed[0], st[1]), mat)
        self.line_horiz((st[0], ed[1]), ed, mat)
        self.line_vert(st, (st[0], ed[1]), mat)
        self.line_vert((ed[0], st[1]), ed, mat)

    def random_scatter(self, n: int, mat: int, stream: RandomSource) -> None:
        """Place n cells of mat on random empty cells.

        Occupied cells are rejected and redrawn, so n must not exceed the
        number of empty cells or this never returns.
        """
        placed = 0
        while placed < n:
            p = (stream.randint(0, self.size[0] - 1), stream.randint(0, self.size[1] - 1))
            if self.cells[p[1], p[0]] == 0:
                self.cells[p[1], p[0]] = mat
                placed += 1


def build_catalog(names: Sequence[str], barrier_idx: int) -> MaterialCatalog:
    return MaterialCatalog(names=tuple(names), barrier_idx=barrier_idx)


__all__ = ["Grid", "MaterialCatalog", "build_catalog"]
