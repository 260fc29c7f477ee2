from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

import pytest

from fworld.config import WorldParams
from fworld.engine import FWorld
from fworld.world import Grid, build_catalog


class ScriptedStream:
    """Random source that replays fixed values, for pinning stochastic branches."""

    def __init__(self, values: Iterable[float], randint_value: int = 0) -> None:
        self.values = list(values)
        self.randint_value = randint_value
        self.draws = 0

    def random(self) -> float:
        val = self.values[self.draws % len(self.values)]
        self.draws += 1
        return val

    def randint(self, a: int, b: int) -> int:
        return min(max(self.randint_value, a), b)


@pytest.fixture
def scripted():
    return ScriptedStream


@pytest.fixture
def box_grid() -> Grid:
    """10x10 world enclosed by a wall, empty inside."""
    grid = Grid(size=(10, 10))
    grid.rect((0, 0), (9, 9), 1)
    return grid


@pytest.fixture
def make_env(box_grid):
    """Build a small boxed world with materials placed by name.

    The agent starts at (5, 5) facing +x, so (6, 5) is the front cell.
    """

    def _make(
        items: Optional[Dict[Tuple[int, int], str]] = None,
        seed: int = 1,
        **overrides,
    ) -> FWorld:
        params = WorldParams(size=(10, 10), **overrides)
        catalog = build_catalog(params.mats, params.barrier_idx)
        grid = box_grid.copy()
        for cell, name in (items or {}).items():
            grid.set(cell, catalog.code(name))
        return FWorld(params, seed=seed, grid=grid)

    return _make
