"""Ray-cast perception: peripheral depth, fovea and proximal touch."""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass, field
from typing import Callable, List, Mapping, Tuple

import numpy as np

from fworld.entities import Agent
from fworld.geometry import Cell, Vec2, dist, heading_vector, next_grid_point
from fworld.world import Grid, MaterialCatalog

# front, left, right, back relative to heading; left is the positive
# rotation direction, matching the "Left" action and the ray order.
PROX_OFFSETS: Tuple[int, ...] = (0, 90, -90, 180)
PROX_FRONT, PROX_LEFT, PROX_RIGHT, PROX_BACK = range(4)

StopRule = Callable[[int], bool]


@dataclass
class Percept:
    """Raw scan buffers, fully recomputed every action."""

    depths: np.ndarray
    depth_logs: np.ndarray
    view_mats: np.ndarray
    fov_depths: np.ndarray
    fov_depth_logs: np.ndarray
    fov_mats: np.ndarray
    prox_mats: List[int] = field(default_factory=lambda: [0, 0, 0, 0])
    prox_pos: List[Cell] = field(default_factory=lambda: [(0, 0)] * 4)

    @property
    def front_mat(self) -> int:
        return self.prox_mats[PROX_FRONT]

    @property
    def front_pos(self) -> Cell:
        return self.prox_pos[PROX_FRONT]


def max_log_depth(size: Tuple[int, int]) -> float:
    return math.log(1 + math.hypot(size[0], size[1]))


def log_depth(depth: float, maxld: float) -> float:
    """Range-normalized log depth; a ray that hit nothing reads as farthest."""
    if depth > 0:
        return math.log(1 + depth) / maxld
    return 1.0


def trace_ray(grid: Grid, origin: Vec2, ang: int, stop: StopRule) -> Tuple[float, int]:
    """Walk cells from origin along ang until stop(mat) or the world edge.

    Returns (depth, mat), with (-1, 0) when the edge was reached first.
    """
    v = heading_vector(ang)
    cp = origin
    while True:
        cp, gp = next_grid_point(cp, v)
        if not grid.in_bounds(gp):
            return -1.0, 0
        mat = int(grid.cells[gp[1], gp[0]])
        if stop(mat):
            return dist(cp, origin), mat


def scan_depth(
    grid: Grid, catalog: MaterialCatalog, agent: Agent, fov: int, ang_inc: int
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Trace the full field of view, left (+fov/2) to right (-fov/2), for barriers."""
    hang = fov // 2
    angles = range(hang, -hang - 1, -ang_inc)
    maxld = max_log_depth(grid.size)
    depths = np.empty(len(angles), dtype=np.float32)
    logs = np.empty(len(angles), dtype=np.float32)
    mats = np.empty(len(angles), dtype=np.int32)
    for idx, ang in enumerate(angles):
        depth, mat = trace_ray(grid, agent.pos_f, ang + agent.angle, catalog.is_barrier)
        depths[idx] = depth
        logs[idx] = log_depth(depth, maxld)
        mats[idx] = mat
    return depths, logs, mats


def scan_fovea(
    grid: Grid, catalog: MaterialCatalog, agent: Agent, fovea_size: int, fovea_ang_inc: int
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Trace the narrow foveal window, left to right, for any non-empty material."""
    nmat = len(catalog)
    width = 1 + 2 * fovea_size
    maxld = max_log_depth(grid.size)
    depths = np.empty(width, dtype=np.float32)
    logs = np.empty(width, dtype=np.float32)
    mats = np.empty(width, dtype=np.int32)
    for idx, fi in enumerate(range(-fovea_size, fovea_size + 1)):
        ang = -fi * fovea_ang_inc
        depth, mat = trace_ray(grid, agent.pos_f, ang + agent.angle, lambda m: 0 < m < nmat)
        depths[idx] = depth
        logs[idx] = log_depth(depth, maxld)
        mats[idx] = mat
    return depths, logs, mats


def scan_prox(grid: Grid, catalog: MaterialCatalog, agent: Agent) -> Tuple[List[int], List[Cell]]:
    """Material and cell one step away in each of the four body directions.

    A neighbour outside the grid reads as the highest barrier material.
    """
    mats: List[int] = []
    cells: List[Cell] = []
    for off in PROX_OFFSETS:
        _, gp = next_grid_point(agent.pos_f, heading_vector(agent.angle + off))
        mats.append(grid.get(gp) if grid.in_bounds(gp) else catalog.barrier_idx)
        cells.append(gp)
    return mats, cells


def perceive(
    grid: Grid,
    catalog: MaterialCatalog,
    agent: Agent,
    *,
    fov: int,
    ang_inc: int,
    fovea_size: int,
    fovea_ang_inc: int,
) -> Percept:
    depths, logs, mats = scan_depth(grid, catalog, agent, fov, ang_inc)
    fdepths, flogs, fmats = scan_fovea(grid, catalog, agent, fovea_size, fovea_ang_inc)
    pmats, ppos = scan_prox(grid, catalog, agent)
    return Percept(
        depths=depths,
        depth_logs=logs,
        view_mats=mats,
        fov_depths=fdepths,
        fov_depth_logs=flogs,
        fov_mats=fmats,
        prox_mats=pmats,
        prox_pos=ppos,
    )


def states_checksum(states: Mapping[str, np.ndarray]) -> str:
    """Stable checksum over a set of rendered tensors."""
    h = hashlib.sha256()
    for name in sorted(states):
        arr = np.ascontiguousarray(states[name], dtype=np.float32)
        h.update(name.encode("utf-8"))
        h.update(repr(arr.shape).encode("utf-8"))
        h.update(arr.tobytes())
    return h.hexdigest()


__all__ = [
    "PROX_BACK",
    "PROX_FRONT",
    "PROX_LEFT",
    "PROX_OFFSETS",
    "PROX_RIGHT",
    "Percept",
    "log_depth",
    "max_log_depth",
    "perceive",
    "scan_depth",
    "scan_fovea",
    "scan_prox",
    "states_checksum",
    "trace_ray",
]
