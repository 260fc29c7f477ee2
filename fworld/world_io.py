"""World snapshots (TSV), canonical patterns (JSON) and world generation."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Mapping

import numpy as np

from fworld.config import ConfigError, WorldParams
from fworld.rng import RandomSource
from fworld.world import Grid, MaterialCatalog

logger = logging.getLogger(__name__)


def save_world(grid: Grid, catalog: MaterialCatalog, path: str | Path) -> None:
    """One line per grid row; every cell name is followed by a tab."""
    lines = []
    for y in range(grid.size[1]):
        row = []
        for x in range(grid.size[0]):
            code = int(grid.cells[y, x])
            row.append("" if code == 0 else catalog.name(code))
        lines.append("".join(f"{name}\t" for name in row))
    Path(path).write_text("\n".join(lines) + "\n")


def open_world(grid: Grid, catalog: MaterialCatalog, path: str | Path) -> None:
    """Replace grid contents with a TSV snapshot of exactly the grid's size.

    Unknown names are logged and the cell stays empty.
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"world file not found: {path}")
    sx, sy = grid.size
    lines = path.read_text().split("\n")
    while lines and not lines[-1]:
        lines.pop()
    if len(lines) != sy:
        raise ConfigError(f"world file {path} has {len(lines)} rows, expected {sy}")
    rows = []
    for y, line in enumerate(lines):
        names = line.split("\t")
        if len(names) == sx + 1 and names[-1] == "":
            names.pop()
        if len(names) != sx:
            raise ConfigError(f"world file {path} row {y} has {len(names)} cells, expected {sx}")
        rows.append(names)

    grid.clear()
    for y, names in enumerate(rows):
        for x, name in enumerate(names):
            if not name:
                continue
            if name not in catalog:
                logger.warning("unknown material %r at (%d, %d) in %s", name, x, y, path)
                continue
            grid.cells[y, x] = catalog.code(name)


def load_patterns(
    path: str | Path, pat_size: tuple[int, int], required: Iterable[str]
) -> Dict[str, np.ndarray]:
    """Read the name -> pattern map; every required name must be present."""
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"patterns file not found: {path}")
    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"patterns file {path} is not valid JSON: {exc}") from exc
    shape = (pat_size[1], pat_size[0])
    pats: Dict[str, np.ndarray] = {}
    for name, values in raw.items():
        arr = np.asarray(values, dtype=np.float32)
        if arr.shape != shape:
            raise ConfigError(f"pattern {name!r} has shape {arr.shape}, expected {shape}")
        arr.flags.writeable = False
        pats[name] = arr
    missing = [name for name in required if name not in pats]
    if missing:
        raise ConfigError(f"patterns missing for {missing}")
    return pats


def save_patterns(pats: Mapping[str, np.ndarray], path: str | Path) -> None:
    payload = {name: np.asarray(arr).round(4).tolist() for name, arr in pats.items()}
    Path(path).write_text(json.dumps(payload, indent=1))


def _scaled(grid: Grid, x: int, y: int) -> tuple[int, int]:
    return (x * grid.size[0] // 100, y * grid.size[1] // 100)


def gen_world(grid: Grid, catalog: MaterialCatalog, params: WorldParams, stream: RandomSource) -> None:
    """Border wall, two square rooms and a double-thick diagonal, then resources.

    Obstacle coordinates are laid out for a 100x100 world and scaled to the
    grid size. The centre start cell is never given a resource.
    """
    wall = catalog.code("Wall")
    food = catalog.code("Food")
    water = catalog.code("Water")
    grid.clear()
    sx, sy = grid.size
    grid.rect((0, 0), (sx - 1, sy - 1), wall)
    grid.rect(_scaled(grid, 20, 20), _scaled(grid, 40, 40), wall)
    grid.rect(_scaled(grid, 60, 60), _scaled(grid, 80, 80), wall)
    grid.line(_scaled(grid, 60, 20), _scaled(grid, 80, 40), wall)
    grid.line(_scaled(grid, 60, 19), _scaled(grid, 80, 39), wall)

    ctr = (sx // 2, sy // 2)
    grid.set(ctr, wall)
    grid.random_scatter(params.n_food, food, stream)
    grid.random_scatter(params.n_water, water, stream)
    grid.set(ctr, 0)
    logger.debug("generated %dx%d world: %d food, %d water", sx, sy, grid.count(food), grid.count(water))


__all__ = ["gen_world", "load_patterns", "open_world", "save_patterns", "save_world"]
