"""Renders percepts and body state into population-coded input tensors."""

from __future__ import annotations

from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np

from fworld.config import WorldParams
from fworld.entities import Agent
from fworld.popcode import OneD, Ring
from fworld.sensors import Percept
from fworld.world import MaterialCatalog

CHANNELS: Tuple[str, ...] = (
    "Depth",
    "DepthRender",
    "FovDepth",
    "FovDepthRender",
    "Fovea",
    "ProxSoma",
    "Vestibular",
    "Inters",
    "Action",
)


class StateBuffers:
    """Two generations of named tensors: `next` is written, `cur` is read.

    The generations never share memory; `promote` copies every next tensor
    into its current counterpart, cloning it the first time a channel is
    seen.
    """

    def __init__(self) -> None:
        self.next: Dict[str, np.ndarray] = {}
        self.cur: Dict[str, np.ndarray] = {}

    def allocate(self, name: str, shape: Sequence[int]) -> np.ndarray:
        arr = np.zeros(tuple(shape), dtype=np.float32)
        self.next[name] = arr
        return arr

    def promote(self) -> None:
        for name, ns in self.next.items():
            cs = self.cur.get(name)
            if cs is None:
                self.cur[name] = ns.copy()
            else:
                np.copyto(cs, ns)

    def observe(self, name: str) -> Optional[np.ndarray]:
        """Read-only view of the current tensor, or None if unknown."""
        cs = self.cur.get(name)
        if cs is None:
            return None
        view = cs.view()
        view.flags.writeable = False
        return view

    def clear_current(self) -> None:
        self.cur.clear()


class SensoryEncoder:
    """Owns the tensor shapes and the per-sense renderers."""

    def __init__(
        self,
        params: WorldParams,
        catalog: MaterialCatalog,
        patterns: Mapping[str, np.ndarray],
    ) -> None:
        self.params = params
        self.catalog = catalog
        self.patterns = patterns
        self.pop_code = OneD.from_range(params.pop_code)
        self.depth_code = OneD.from_range(params.depth_code)
        self.ang_code = Ring.from_range(params.ang_code)
        self.buffers = StateBuffers()
        self._allocate()

    def _allocate(self) -> None:
        p = self.params
        px, py = p.pat_size
        per_pool = p.depth_size // p.depth_pools
        fsz = p.fovea_width
        b = self.buffers
        b.allocate("Depth", (p.depth_pools, p.n_fov_rays, per_pool, 1))
        b.allocate("DepthRender", (1, p.n_fov_rays, p.depth_size, 1))
        b.allocate("FovDepth", (p.depth_pools, fsz, per_pool, 1))
        b.allocate("FovDepthRender", (1, fsz, p.depth_size, 1))
        b.allocate("Fovea", (1, fsz, py, px))
        b.allocate("ProxSoma", (1, 4, 2, 1))
        b.allocate("Vestibular", (1, 2, p.pop_size, 1))
        b.allocate("Inters", (1, len(p.inters), p.pop_size, 1))
        b.allocate("Action", (py, px))

    def _render_depths(self, logs: np.ndarray, pooled: np.ndarray, full: np.ndarray) -> None:
        p = self.params
        per_pool = p.depth_size // p.depth_pools
        for i, ld in enumerate(logs):
            code = self.depth_code.encode(float(ld), p.depth_size)
            full[0, i, :, 0] = code
            pooled[:, i, :, 0] = code.reshape(p.depth_pools, per_pool)

    def render_view(self, percept: Percept) -> None:
        nx = self.buffers.next
        self._render_depths(percept.depth_logs, nx["Depth"], nx["DepthRender"])
        self._render_depths(percept.fov_depth_logs, nx["FovDepth"], nx["FovDepthRender"])
        fv = nx["Fovea"]
        for i, mat in enumerate(percept.fov_mats):
            if 0 <= mat < len(self.catalog):
                fv[0, i] = self.patterns[self.catalog.name(int(mat))]

    def render_prox_soma(self, percept: Percept) -> None:
        ps = self.buffers.next["ProxSoma"]
        ps.fill(0)
        for i, mat in enumerate(percept.prox_mats):
            if mat != 0:
                ps[0, i, 0, 0] = 1  # on
            else:
                ps[0, i, 1, 0] = 1  # off

    def render_inters(self, drives: Mapping[str, float]) -> None:
        ins = self.buffers.next["Inters"]
        for idx, name in enumerate(self.params.inters):
            self.pop_code.encode_into(ins[0, idx, :, 0], drives[name])

    def render_vestibular(self, agent: Agent) -> None:
        vs = self.buffers.next["Vestibular"]
        rot = 0.5 * (-agent.rot_ang / self.params.ang_inc) + 0.5
        self.pop_code.encode_into(vs[0, 0, :, 0], rot)
        self.ang_code.encode_into(vs[0, 1, :, 0], agent.angle / 360.0)

    def render_action(self, act_name: Optional[str]) -> None:
        pat = self.patterns.get(act_name) if act_name is not None else None
        if pat is not None:
            self.buffers.next["Action"][...] = pat

    def render(self, percept: Percept, drives: Mapping[str, float], agent: Agent, act_name: Optional[str]) -> None:
        """Run every renderer; only the next generation is written."""
        self.render_view(percept)
        self.render_prox_soma(percept)
        self.render_inters(drives)
        self.render_vestibular(agent)
        self.render_action(act_name)


__all__ = ["CHANNELS", "SensoryEncoder", "StateBuffers"]
