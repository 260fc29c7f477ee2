"""Grid geometry: angle wrapping and Bresenham-style stepping along a heading."""

from __future__ import annotations

import math
from typing import Tuple

Vec2 = Tuple[float, float]
Cell = Tuple[int, int]


def ang_mod(ang: int) -> int:
    """Wrap an angle in degrees into [0, 360).

    Only a single wrap is applied in each direction, so inputs must lie in
    [-360, 720). Heading arithmetic in the environment never leaves that
    range (heading in [0, 360) plus an offset of at most +/-180).
    """
    if ang < 0:
        ang += 360
    elif ang >= 360:
        ang -= 360
    return ang


def norm_vec_line(v: Vec2) -> Vec2:
    """Rescale v so that its largest-magnitude component is exactly 1."""
    ax, ay = abs(v[0]), abs(v[1])
    if ax > ay:
        return (v[0] / ax, v[1] / ax)
    return (v[0] / ay, v[1] / ay)


def heading_vector(ang: int) -> Vec2:
    """Per-step increment along the given heading, in degrees.

    Every step moves exactly one cell along the dominant axis, so a ray walk
    never skips a row or column.
    """
    a = math.radians(ang_mod(ang))
    return norm_vec_line((math.cos(a), math.sin(a)))


def round_half_away(v: float) -> int:
    return int(math.copysign(math.floor(abs(v) + 0.5), v))


def to_cell(p: Vec2) -> Cell:
    return (round_half_away(p[0]), round_half_away(p[1]))


def next_grid_point(cp: Vec2, v: Vec2) -> Tuple[Vec2, Cell]:
    """Advance the float position by v and return it with its nearest cell."""
    n = (cp[0] + v[0], cp[1] + v[1])
    return n, to_cell(n)


def dist(a: Vec2, b: Vec2) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


__all__ = [
    "Cell",
    "Vec2",
    "ang_mod",
    "dist",
    "heading_vector",
    "next_grid_point",
    "norm_vec_line",
    "round_half_away",
    "to_cell",
]
