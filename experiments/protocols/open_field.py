from __future__ import annotations

import math
from typing import Any, Dict, Set, Tuple

from experiments.protocols.base import Protocol
from metrics.schema import TickData


class OpenFieldProtocol(Protocol):
    """Exploration assay: how much ground the agent covers."""

    name = "open_field"

    def __init__(self, config: dict | None = None) -> None:
        cfg = config or {}
        self.start = tuple(cfg["start"]) if "start" in cfg else None
        self.distance_travelled = 0.0
        self.turns = 0
        self.bumps = 0
        self.visited: Set[Tuple[int, int]] = set()
        self.ticks_run = 0
        self._last_pos: Tuple[float, float] | None = None

    def setup(self, env: Any) -> None:
        if self.start is not None:
            env.place_agent(self.start, 0)
        self._last_pos = env.agent.pos_f
        self.visited.add(tuple(env.agent.pos_i))

    def on_tick(self, env: Any, tickdata: TickData, tick_index: int) -> None:
        self.ticks_run += 1
        if self._last_pos is not None:
            self.distance_travelled += math.dist(self._last_pos, tickdata.pos)
        self._last_pos = tickdata.pos
        self.visited.add(tuple(tickdata.pos_i))
        if tickdata.rot_ang != 0:
            self.turns += 1
        if tickdata.drives.get("BumpPain", 0.0) > 0:
            self.bumps += 1

    def is_done(self, env: Any, tickdata: TickData, tick_index: int) -> bool:
        return False

    def summarize(self) -> Dict[str, float | int]:
        exploration_score = len(self.visited) - 0.5 * self.bumps
        return {
            "ticks_run": self.ticks_run,
            "distance_travelled": self.distance_travelled,
            "turns": self.turns,
            "bumps": self.bumps,
            "cells_visited": len(self.visited),
            "exploration_score": exploration_score,
            "score": exploration_score,
        }


__all__ = ["OpenFieldProtocol"]
