"""Consumption events and the resource refresh scheduler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping

from fworld.geometry import Cell, Vec2
from fworld.world import Grid

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorldEvent:
    """Snapshot of the world at the moment a resource was consumed."""

    tick: int
    pos_i: Cell
    pos_f: Vec2
    angle: int
    act: int
    mat: int  # material consumed, restored on refresh
    mat_pos: Cell

    def to_dict(self) -> Dict[str, object]:
        return {
            "tick": self.tick,
            "pos_i": list(self.pos_i),
            "pos_f": list(self.pos_f),
            "angle": self.angle,
            "act": self.act,
            "mat": self.mat,
            "mat_pos": list(self.mat_pos),
        }


@dataclass
class RefreshScheduler:
    """Pending refreshes keyed by tick, plus the full consumption history."""

    pending: Dict[int, WorldEvent] = field(default_factory=dict)
    history: List[WorldEvent] = field(default_factory=list)

    def add(self, ev: WorldEvent) -> None:
        if ev.tick in self.pending:
            logger.warning("replacing pending refresh at tick %d", ev.tick)
        self.pending[ev.tick] = ev
        self.history.append(ev)

    def refresh(self, grid: Grid, tick: int, delays: Mapping[int, int]) -> List[WorldEvent]:
        """Restore every consumed resource whose delay has elapsed.

        delays maps material code to ticks; materials absent from it never
        come back.
        """
        done: List[WorldEvent] = []
        for key, ev in list(self.pending.items()):
            delay = delays.get(ev.mat)
            if delay is None or tick - ev.tick < delay:
                continue
            grid.set(ev.mat_pos, ev.mat)
            del self.pending[key]
            done.append(ev)
        if done:
            logger.debug("tick %d: refreshed %d resource(s)", tick, len(done))
        return done

    def clear(self) -> None:
        self.pending.clear()
        self.history.clear()


__all__ = ["RefreshScheduler", "WorldEvent"]
