"""Hierarchical time counters: Run > Epoch > Trial, plus Tick, Event, Scene."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class TimeScale(str, Enum):
    RUN = "Run"
    EPOCH = "Epoch"
    TRIAL = "Trial"
    EPISODE = "Episode"
    TICK = "Tick"
    EVENT = "Event"
    SCENE = "Scene"


@dataclass
class Ctr:
    """Counter with change flag and optional wrap at max."""

    cur: int = 0
    prv: int = -1
    chg: bool = True
    max: int = 0

    def init(self) -> None:
        self.prv = -1
        self.cur = 0
        self.chg = True

    def incr(self) -> bool:
        """Advance by one; True when cur reached max and wrapped to 0."""
        self.prv = self.cur
        self.cur += 1
        self.chg = True
        if self.max > 0 and self.cur >= self.max:
            self.cur = 0
            return True
        return False

    def set(self, cur: int) -> bool:
        if cur == self.cur:
            self.chg = False
            return False
        self.prv = self.cur
        self.cur = cur
        self.chg = True
        return True

    def same(self) -> None:
        self.chg = False

    def query(self) -> Tuple[int, int, bool]:
        return self.cur, self.prv, self.chg


def make_counters(max_trials: int = 0) -> Dict[TimeScale, Ctr]:
    ctrs = {scale: Ctr() for scale in TimeScale}
    ctrs[TimeScale.TRIAL].max = max_trials
    return ctrs


def parse_scale(name: str) -> TimeScale | None:
    try:
        return TimeScale(name)
    except ValueError:
        return None


__all__ = ["Ctr", "TimeScale", "make_counters", "parse_scale"]
