"""Interoceptive drives of the agent body."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple

DRIVES: Tuple[str, ...] = ("Energy", "Hydra", "BumpPain", "FoodRew", "WaterRew")


def _clamp01(v: float) -> float:
    return max(0.0, min(1.0, v))


@dataclass
class Body:
    """Named drives, each clamped to [0, 1].

    Energy and Hydra start full and are drained by every action; the pain
    and reward flags last for a single action.
    """

    names: Tuple[str, ...] = DRIVES
    state: Dict[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.state = {name: 0.0 for name in self.names}
        for name in ("Energy", "Hydra"):
            if name in self.state:
                self.state[name] = 1.0

    def __getitem__(self, name: str) -> float:
        return self.state[name]

    def set_state(self, name: str, val: float) -> None:
        self.state[name] = _clamp01(val)

    def inc_state(self, name: str, delta: float) -> float:
        val = _clamp01(self.state[name] + delta)
        self.state[name] = val
        return val

    def pass_time(self, time_cost: float) -> None:
        self.inc_state("Energy", -time_cost)
        self.inc_state("Hydra", -time_cost)
        for flag in ("BumpPain", "FoodRew", "WaterRew"):
            self.state[flag] = 0.0

    def charge(self, ecost: float, hcost: float) -> None:
        """Apply the accumulated cost of one action; negative cost restores."""
        self.inc_state("Energy", -ecost)
        self.inc_state("Hydra", -hcost)

    def snapshot(self) -> Dict[str, float]:
        return dict(self.state)


__all__ = ["Body", "DRIVES"]
