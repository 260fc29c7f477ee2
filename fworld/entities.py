"""Agent body placement in the flat world."""

from __future__ import annotations

from dataclasses import dataclass

from fworld.geometry import Cell, Vec2, ang_mod, heading_vector, next_grid_point


@dataclass
class Agent:
    """Egocentric pose of the agent plus its most recent motor command."""

    pos_f: Vec2 = (0.0, 0.0)
    pos_i: Cell = (0, 0)
    angle: int = 0  # degrees, multiple of the rotation increment
    rot_ang: int = 0  # rotation applied by the last action, drives vestibular
    act: int = 0  # index of the last action taken

    def place(self, cell: Cell, angle: int = 0) -> None:
        self.pos_i = cell
        self.pos_f = (float(cell[0]), float(cell[1]))
        self.angle = ang_mod(angle)
        self.rot_ang = 0

    def rotate(self, delta: int) -> None:
        self.rot_ang = delta
        self.angle = ang_mod(self.angle + delta)

    def advance(self, backward: bool = False) -> Cell:
        """Move one grid step along the heading (or against it)."""
        ang = ang_mod(self.angle + 180) if backward else self.angle
        self.pos_f, self.pos_i = next_grid_point(self.pos_f, heading_vector(ang))
        return self.pos_i


__all__ = ["Agent"]
