"""Per-tick record of the flat world, shared by the runner, API and analysis."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Tuple

SCHEMA_VERSION = "1.0.0"


@dataclass
class TickData:
    """Single source of truth for analysis and the JSON API."""

    schema_version: str = SCHEMA_VERSION
    tick: int = 0
    run: int = 0
    epoch: int = 0
    trial: int = 0
    event: int = 0
    scene: int = 0
    # Body pose
    pos: Tuple[float, float] = (0.0, 0.0)
    pos_i: Tuple[int, int] = (0, 0)
    angle: int = 0
    rot_ang: int = 0
    # Action
    action_name: str = ""
    gen_action: str = ""
    urgency: float = 0.0
    # Interoception
    drives: Dict[str, float] = field(default_factory=dict)
    # Perception summary
    front_mat: str = ""
    fovea_mat: str = ""
    pending_refresh: int = 0
    obs_checksum: str = ""
    # Assay info
    protocol_name: str = ""

    def to_ordered_dict(self) -> Dict[str, Any]:
        """Return a plain dict in schema order for deterministic serialization."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


__all__ = ["SCHEMA_VERSION", "TickData"]
