"""World parameters and configuration validation."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

DEFAULT_PATS_PATH = Path(__file__).with_name("pats.json")

# Names the body model and the reflex policy look up directly.
REQUIRED_MATS: Tuple[str, ...] = ("Wall", "Food", "Water", "FoodWas", "WaterWas")
REQUIRED_ACTS: Tuple[str, ...] = ("Forward", "Left", "Right", "Eat", "Drink")
REQUIRED_INTERS: Tuple[str, ...] = ("Energy", "Hydra", "BumpPain", "FoodRew", "WaterRew")


class ConfigError(ValueError):
    """Setup-time configuration failure; the environment cannot be built."""


@dataclass
class WorldParams:
    """Every tunable constant of the world, body and reflex policy."""

    size: Tuple[int, int] = (100, 100)  # X, Y
    pat_size: Tuple[int, int] = (5, 5)  # X, Y
    mats: Tuple[str, ...] = ("Empty", "Wall", "Food", "Water", "FoodWas", "WaterWas")
    barrier_idx: int = 1
    acts: Tuple[str, ...] = ("Forward", "Left", "Right", "Eat", "Drink")
    inters: Tuple[str, ...] = ("Energy", "Hydra", "BumpPain", "FoodRew", "WaterRew")

    # vision
    fov: int = 180
    ang_inc: int = 15
    fovea_size: int = 1
    fovea_ang_inc: int = 5

    # population codes: (min, max, sigma)
    pop_size: int = 16
    pop_code: Tuple[float, float, float] = (-0.2, 1.2, 0.1)
    depth_size: int = 32
    depth_pools: int = 8
    depth_code: Tuple[float, float, float] = (0.1, 1.0, 0.05)
    ang_code: Tuple[float, float, float] = (0.0, 1.0, 0.1)

    # body costs, per tick
    time_cost: float = 0.001
    move_cost: float = 0.002
    rot_cost: float = 0.001
    bump_cost: float = 0.01
    eat_cost: float = 0.005
    drink_cost: float = 0.005
    eat_val: float = 0.9
    drink_val: float = 0.9
    refresh: Dict[str, int] = field(default_factory=lambda: {"Food": 100, "Water": 50})

    # reflex policy
    wall_urgency: float = 0.9
    eat_urgency: float = 0.8
    close_urgency: float = 0.5
    far_dist: float = 10.0
    far_turn_p: float = 0.2
    close_depth: float = 4.0
    rnd_exp_same: float = 0.33
    rnd_exp_turn: float = 0.33
    softmax_gain: float = 10.0
    trace_act_gen: bool = False

    # decoding
    fwd_margin: float = 2.0
    pct_cortex: float = 0.0

    # generation and files
    n_food: int = 50
    n_water: int = 50
    max_trials: int = 0
    pats_path: Optional[str] = str(DEFAULT_PATS_PATH)
    world_path: Optional[str] = None

    @property
    def n_fov_rays(self) -> int:
        return self.fov // self.ang_inc + 1

    @property
    def fovea_width(self) -> int:
        return 1 + 2 * self.fovea_size

    def validate(self) -> "WorldParams":
        sx, sy = self.size
        if sx <= 0 or sy <= 0:
            raise ConfigError(f"world size must be positive, got {self.size}")
        px, py = self.pat_size
        if px <= 0 or py <= 0:
            raise ConfigError(f"pattern size must be positive, got {self.pat_size}")
        if not self.mats or self.mats[0] != "Empty":
            raise ConfigError("material 0 must be 'Empty'")
        for group, names, required in (
            ("materials", self.mats, REQUIRED_MATS),
            ("actions", self.acts, REQUIRED_ACTS),
            ("drives", self.inters, REQUIRED_INTERS),
        ):
            if len(set(names)) != len(names):
                raise ConfigError(f"duplicate {group} in {names}")
            missing = [name for name in required if name not in names]
            if missing:
                raise ConfigError(f"{group} missing required names {missing}")
        if not 1 <= self.barrier_idx < len(self.mats):
            raise ConfigError(f"barrier_idx {self.barrier_idx} outside material range")
        if self.ang_inc <= 0 or self.fov % self.ang_inc != 0:
            raise ConfigError(f"fov {self.fov} must be a multiple of ang_inc {self.ang_inc}")
        if self.fov % 2 != 0 or not 0 < self.fov <= 360:
            raise ConfigError(f"fov must be an even number of degrees in (0, 360], got {self.fov}")
        if self.fovea_size < 0 or self.fovea_ang_inc <= 0:
            raise ConfigError("fovea_size must be >= 0 and fovea_ang_inc > 0")
        if self.depth_pools <= 0 or self.depth_size % self.depth_pools != 0:
            raise ConfigError(f"depth_size {self.depth_size} must divide into {self.depth_pools} pools")
        if self.pop_size < 2 or self.depth_size < 2:
            raise ConfigError("population codes need at least 2 units")
        for name in ("pop_code", "depth_code", "ang_code"):
            lo, hi, sigma = getattr(self, name)
            if hi <= lo or sigma <= 0:
                raise ConfigError(f"{name} needs min < max and sigma > 0, got {(lo, hi, sigma)}")
        for mat, delay in self.refresh.items():
            if mat not in self.mats:
                raise ConfigError(f"refresh delay given for unknown material {mat!r}")
            if delay < 0:
                raise ConfigError(f"refresh delay for {mat} must be >= 0")
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, cfg: Mapping[str, Any] | None = None) -> "WorldParams":
        cfg = dict(cfg or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(cfg) - known)
        if unknown:
            raise ConfigError(f"unknown world parameters: {unknown}")
        for key in ("size", "pat_size", "mats", "acts", "inters", "pop_code", "depth_code", "ang_code"):
            if key in cfg:
                try:
                    cfg[key] = tuple(cfg[key])
                except TypeError as exc:
                    raise ConfigError(f"{key} must be a sequence, got {cfg[key]!r}") from exc
        for key in ("size", "pat_size"):
            if key in cfg and len(cfg[key]) != 2:
                raise ConfigError(f"{key} must have exactly two entries, got {cfg[key]!r}")
        return cls(**cfg).validate()

    @classmethod
    def from_json(cls, path: str | Path) -> "WorldParams":
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"world config not found: {path}")
        try:
            cfg = json.loads(path.read_text())
        except json.JSONDecodeError as exc:
            raise ConfigError(f"world config {path} is not valid JSON: {exc}") from exc
        return cls.from_dict(cfg)


__all__ = ["ConfigError", "DEFAULT_PATS_PATH", "WorldParams"]
