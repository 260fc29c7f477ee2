from __future__ import annotations

from typing import Any, Dict

from experiments.protocols.base import Protocol
from metrics.schema import TickData


class ForagingProtocol(Protocol):
    """Reflex foraging from the world centre until a drive runs out."""

    name = "foraging"

    def __init__(self, config: dict | None = None) -> None:
        cfg = config or {}
        self.start = tuple(cfg["start"]) if "start" in cfg else None
        self.start_angle = int(cfg.get("start_angle", 0))
        self.stop_on_depletion = bool(cfg.get("stop_on_depletion", True))
        self.eats = 0
        self.drinks = 0
        self.bumps = 0
        self.ticks_run = 0
        self.depleted = False
        self.min_energy = 1.0
        self.min_hydra = 1.0

    def setup(self, env: Any) -> None:
        if self.start is not None:
            env.place_agent(self.start, self.start_angle)

    def on_tick(self, env: Any, tickdata: TickData, tick_index: int) -> None:
        self.ticks_run += 1
        drives = tickdata.drives
        self.eats += int(drives.get("FoodRew", 0.0) > 0)
        self.drinks += int(drives.get("WaterRew", 0.0) > 0)
        self.bumps += int(drives.get("BumpPain", 0.0) > 0)
        self.min_energy = min(self.min_energy, drives.get("Energy", 1.0))
        self.min_hydra = min(self.min_hydra, drives.get("Hydra", 1.0))
        if drives.get("Energy", 1.0) <= 0 or drives.get("Hydra", 1.0) <= 0:
            self.depleted = True

    def is_done(self, env: Any, tickdata: TickData, tick_index: int) -> bool:
        return self.stop_on_depletion and self.depleted

    def summarize(self) -> Dict[str, float | int | bool]:
        score = self.eats + self.drinks - 0.1 * self.bumps
        return {
            "ticks_run": self.ticks_run,
            "eats": self.eats,
            "drinks": self.drinks,
            "bumps": self.bumps,
            "depleted": self.depleted,
            "min_energy": self.min_energy,
            "min_hydra": self.min_hydra,
            "score": score,
        }


__all__ = ["ForagingProtocol"]
