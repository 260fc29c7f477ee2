"""Hand-coded subcortical action generator (instinctive foraging reflexes)."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Mapping, Sequence

import numpy as np

from brain.contracts import ActionProposal
from fworld.config import WorldParams
from fworld.rng import RandomSource, bool_prob
from fworld.sensors import Percept
from fworld.world import MaterialCatalog

logger = logging.getLogger(__name__)

_FAR = 100000.0


@dataclass(frozen=True)
class FovealSummary:
    food_wt: float
    water_wt: float
    food_depth: float
    water_depth: float
    nearest: float  # nearest foveal hit, ignoring rays that hit nothing
    non_wall: int  # a non-resource, non-barrier material in view, else 0


def read_fovea(percept: Percept, catalog: MaterialCatalog, drives: Mapping[str, float]) -> FovealSummary:
    """Need-weighted food and water salience in the fovea."""
    food = catalog.code("Food")
    water = catalog.code("Water")
    fwt = wwt = 0.0
    fdp = wdp = nearest = _FAR
    non_wall = 0
    for mat, depth, ld in zip(percept.fov_mats, percept.fov_depths, percept.fov_depth_logs):
        mat, depth, ld = int(mat), float(depth), float(ld)
        if mat == water:
            wwt += 1 - ld
            wdp = min(wdp, depth)
        elif mat == food:
            fwt += 1 - ld
            fdp = min(fdp, depth)
        elif mat > catalog.barrier_idx:
            non_wall = mat
        if depth >= 0:
            nearest = min(nearest, depth)
    fwt *= 1 - drives["Energy"]
    wwt *= 1 - drives["Hydra"]
    return FovealSummary(fwt, wwt, fdp, wdp, nearest, non_wall)


def read_full_field(depth_logs: Sequence[float]) -> tuple[float, float]:
    """Left and right closeness from the peripheral log depths.

    Uses the nearest depth on each side, or the side averages when the
    two minima are within 0.1 of each other.
    """
    logs = np.asarray(depth_logs, dtype=np.float64)
    hang = len(logs) // 2
    left = logs[: max(hang - 1, 0)]
    right = logs[hang + 2 :]
    minl = float(left.min()) if left.size else 1.0
    minr = float(right.min()) if right.size else 1.0
    if abs(minl - minr) < 0.1 and hang > 1:
        return 1 - float(left.sum()) / (hang - 1), 1 - float(right.sum()) / (hang - 1)
    return 1 - minl, 1 - minr


def right_turn_prob(ldf: float, rdf: float, gain: float) -> float:
    """Softmax toward the more open side: closer on the left favours right."""
    if ldf + rdf <= 0:
        return 0.5
    lpow = math.exp(ldf * gain)
    rpow = math.exp(rdf * gain)
    return lpow / (rpow + lpow)


class ReflexPolicy:
    """Chooses an action and urgency from the current percept and drives.

    Every random draw comes from the injected stream: first the left/right
    choice, then one exploration draw.
    """

    def __init__(
        self,
        params: WorldParams,
        catalog: MaterialCatalog,
        acts: Sequence[str],
        stream: RandomSource,
    ) -> None:
        self.params = params
        self.catalog = catalog
        self.acts = tuple(acts)
        self.act_map = {name: i for i, name in enumerate(self.acts)}
        self.stream = stream

    def _proposal(self, act: int, urgency: float, trace: str) -> ActionProposal:
        name = self.acts[act]
        level = logging.INFO if self.params.trace_act_gen else logging.DEBUG
        logger.log(level, "%s: act: %s", trace, name)
        return ActionProposal(act=act, name=name, urgency=urgency, trace=trace)

    def propose(self, percept: Percept, drives: Mapping[str, float], last_act: int) -> ActionProposal:
        p = self.params
        cat = self.catalog
        left, right = self.act_map["Left"], self.act_map["Right"]
        eat = self.act_map["Eat"]
        forward = self.act_map["Forward"]

        front = min(int(percept.front_mat), len(cat))
        fov = read_fovea(percept, cat, drives)
        ldf, rdf = read_full_field(percept.depth_logs)
        rlp = right_turn_prob(ldf, rdf, p.softmax_gain)
        rlact = right if bool_prob(self.stream, rlp) else left
        frnd = self.stream.random()
        turning = last_act in (left, right)

        if front == cat.code("Wall"):
            if turning:
                return self._proposal(last_act, p.wall_urgency, "at wall, keep turning")
            return self._proposal(rlact, p.wall_urgency, f"at wall, rlp: {rlp:.3g}, turn")
        if front == cat.code("Food"):
            return self._proposal(eat, p.eat_urgency, "at food")
        if front == cat.code("Water"):
            return self._proposal(self.act_map["Drink"], p.eat_urgency, "at water")
        if fov.food_wt != fov.water_wt:
            target = "food" if fov.food_wt > fov.water_wt else "water"
            depth = fov.food_depth if target == "food" else fov.water_depth
            if depth > p.far_dist:
                if frnd < p.far_turn_p:
                    return self._proposal(rlact, 0.0, f"far {target} in view, explore, turn")
                return self._proposal(forward, 0.0, f"far {target} in view")
            return self._proposal(forward, p.close_urgency, f"close {target} in view")
        if fov.nearest < p.close_depth and fov.non_wall == 0:
            if turning:
                return self._proposal(last_act, p.close_urgency, "close to wall, keep turning")
            return self._proposal(rlact, p.close_urgency, f"close to wall, rlp: {rlp:.3g}, turn")
        if frnd < p.rnd_exp_same and 0 <= last_act < eat:
            return self._proposal(last_act, 0.0, "explore, same")
        if frnd < p.rnd_exp_same + p.rnd_exp_turn:
            return self._proposal(rlact, 0.0, "explore, turn")
        return self._proposal(forward, 0.0, "explore, forward")


__all__ = ["FovealSummary", "ReflexPolicy", "read_fovea", "read_full_field", "right_turn_prob"]
