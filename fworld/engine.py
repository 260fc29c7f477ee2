"""The flat-world environment: one agent, a material grid and its senses."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

import numpy as np

from brain.contracts import ActionProposal
from brain.systems.decoder import choose_action, decode_act
from brain.systems.reflex import ReflexPolicy
from fworld.config import WorldParams
from fworld.counters import Ctr, TimeScale, make_counters, parse_scale
from fworld.encoder import SensoryEncoder
from fworld.entities import Agent
from fworld.events import RefreshScheduler, WorldEvent
from fworld.geometry import Cell
from fworld.physiology import Body
from fworld.pipeline import ACT_ORDER, STEP_ORDER, Pipeline
from fworld.rng import RandomSource, spawn_streams
from fworld.sensors import PROX_BACK, PROX_FRONT, Percept, perceive, states_checksum
from fworld.world import Grid, build_catalog
from fworld.world_io import gen_world, load_patterns, open_world
from metrics.schema import TickData

logger = logging.getLogger(__name__)

# Chooser gets the environment and the reflex proposal, returns an action index.
Chooser = Callable[["FWorld", ActionProposal], int]


@dataclass
class ActContext:
    """Mutable state of one take_act call passed through the act pipeline."""

    act: int
    name: str
    ecost: float = 0.0
    hcost: float = 0.0


class FWorld:
    """Grid world environment with egocentric, population-coded senses.

    Tensors written by an action become visible through observe() only
    after the next step().
    """

    def __init__(
        self,
        params: Optional[WorldParams] = None,
        *,
        seed: int = 0,
        patterns: Optional[Mapping[str, np.ndarray]] = None,
        grid: Optional[Grid] = None,
        streams: Optional[Mapping[str, RandomSource]] = None,
    ) -> None:
        self.params = (params or WorldParams()).validate()
        p = self.params
        self.seed = seed
        self.streams: Dict[str, RandomSource] = dict(spawn_streams(seed, ("world", "act_gen", "decode", "blend")))
        self.streams.update(streams or {})

        self.catalog = build_catalog(p.mats, p.barrier_idx)
        self.acts: Tuple[str, ...] = p.acts
        self.act_map = {name: i for i, name in enumerate(self.acts)}
        if patterns is None:
            patterns = load_patterns(p.pats_path, p.pat_size, tuple(p.mats) + tuple(p.acts))
        self.patterns = dict(patterns)
        self.refresh_delays = {self.catalog.code(m): d for m, d in p.refresh.items()}

        if grid is not None:
            if tuple(grid.size) != tuple(p.size):
                raise ValueError(f"grid size {grid.size} does not match params size {p.size}")
            snapshot = grid.copy()
        else:
            snapshot = Grid(size=p.size)
            if p.world_path:
                open_world(snapshot, self.catalog, p.world_path)
            else:
                gen_world(snapshot, self.catalog, p, self.streams["world"])
        self.snapshot = snapshot
        self.grid = snapshot.copy()

        self.agent = Agent()
        self.body = Body(names=p.inters)
        self.events = RefreshScheduler()
        self.ctrs: Dict[TimeScale, Ctr] = make_counters(p.max_trials)
        self.encoder = SensoryEncoder(p, self.catalog, self.patterns)
        self.reflex = ReflexPolicy(p, self.catalog, self.acts, self.streams["act_gen"])
        self.last_proposal: Optional[ActionProposal] = None

        self._act_pipeline = Pipeline(
            handlers={
                "physiology": self._physiology_phase,
                "motor": self._motor_phase,
                "sensors": self._sensors_phase,
                "costs": self._costs_phase,
                "render": self._render_phase,
            },
            order=ACT_ORDER,
        )
        self._step_pipeline = Pipeline(
            handlers={
                "promote": lambda _ctx: self.encoder.buffers.promote(),
                "counters": self._counters_phase,
                "refresh": self._refresh_phase,
                "trial": self._trial_phase,
            },
            order=STEP_ORDER,
        )
        self.init(0)

    # -- setup ---------------------------------------------------------------

    def _scan_args(self) -> Dict[str, int]:
        p = self.params
        return {
            "fov": p.fov,
            "ang_inc": p.ang_inc,
            "fovea_size": p.fovea_size,
            "fovea_ang_inc": p.fovea_ang_inc,
        }

    def init(self, run: int = 0) -> None:
        """Start a run: restore the world, reset counters, body and agent."""
        self.grid = self.snapshot.copy()
        for ctr in self.ctrs.values():
            ctr.init()
        self.ctrs[TimeScale.RUN].cur = run
        # first step() brings these to 0
        self.ctrs[TimeScale.TRIAL].cur = -1
        self.ctrs[TimeScale.TICK].cur = -1
        self.ctrs[TimeScale.EVENT].cur = -1

        self.body.reset()
        self.events.clear()
        self.last_proposal = None
        self.agent = Agent()
        self.agent.place((self.params.size[0] // 2, self.params.size[1] // 2), 0)
        self.encoder.buffers.clear_current()
        self._rescan()
        self._render(None)
        self.encoder.buffers.promote()
        logger.debug("init run %d at %s", run, self.agent.pos_i)

    def place_agent(self, cell: Cell, angle: int = 0) -> None:
        """Move the agent without cost and refresh its senses."""
        self.agent.place(cell, angle)
        self._rescan()
        self._render(self._act_name(self.agent.act))
        self.encoder.buffers.promote()

    # -- acting --------------------------------------------------------------

    def _act_name(self, act: int) -> str:
        return self.acts[act] if 0 <= act < len(self.acts) else "Stay"

    def _rescan(self) -> None:
        self.percept: Percept = perceive(self.grid, self.catalog, self.agent, **self._scan_args())

    def _render(self, act_name: Optional[str]) -> None:
        self.encoder.render(self.percept, self.body.state, self.agent, act_name)

    def take_act(self, act: int) -> None:
        """Execute one action; an index outside the action list means Stay."""
        ctx = ActContext(act=act, name=self._act_name(act))
        self._act_pipeline.run(ctx)

    def act(self, name: str) -> None:
        idx = self.act_map.get(name)
        if idx is None:
            logger.warning("action not recognized: %s", name)
            return
        self.take_act(idx)

    def _physiology_phase(self, ctx: ActContext) -> None:
        self.ctrs[TimeScale.SCENE].same()
        self.body.pass_time(self.params.time_cost)
        self.agent.rot_ang = 0
        self.agent.act = ctx.act

    def _motor_phase(self, ctx: ActContext) -> None:
        p = self.params
        if ctx.name in ("Left", "Right"):
            self.agent.rotate(p.ang_inc if ctx.name == "Left" else -p.ang_inc)
            ctx.ecost = ctx.hcost = p.rot_cost
        elif ctx.name in ("Forward", "Backward"):
            ctx.ecost = ctx.hcost = p.move_cost
            target = self.percept.prox_mats[PROX_FRONT if ctx.name == "Forward" else PROX_BACK]
            if self.catalog.is_barrier(target):
                self.body.set_state("BumpPain", 1.0)
                ctx.ecost += p.bump_cost
                ctx.hcost += p.bump_cost
            else:
                self.agent.advance(backward=ctx.name == "Backward")
        elif ctx.name == "Eat":
            if self._consume(ctx, "Food", "FoodWas", "FoodRew"):
                ctx.hcost += p.eat_cost
                ctx.ecost -= p.eat_val
        elif ctx.name == "Drink":
            if self._consume(ctx, "Water", "WaterWas", "WaterRew"):
                ctx.ecost += p.drink_cost
                ctx.hcost -= p.drink_val

    def _consume(self, ctx: ActContext, mat: str, was: str, reward: str) -> bool:
        front = self.percept.front_mat
        if front >= len(self.catalog) or self.catalog.name(front) != mat:
            return False
        pos = self.percept.front_pos
        self.body.set_state(reward, 1.0)
        self.events.add(
            WorldEvent(
                tick=self.ctrs[TimeScale.TICK].cur,
                pos_i=self.agent.pos_i,
                pos_f=self.agent.pos_f,
                angle=self.agent.angle,
                act=ctx.act,
                mat=front,
                mat_pos=pos,
            )
        )
        self.grid.set(pos, self.catalog.code(was))
        self.ctrs[TimeScale.EVENT].set(0)
        self.ctrs[TimeScale.SCENE].incr()
        return True

    def _sensors_phase(self, ctx: ActContext) -> None:
        self._rescan()

    def _costs_phase(self, ctx: ActContext) -> None:
        self.body.charge(ctx.ecost, ctx.hcost)

    def _render_phase(self, ctx: ActContext) -> None:
        self._render(ctx.name)

    def act_gen(self) -> ActionProposal:
        """Reflex action for the current percept; does not act."""
        proposal = self.reflex.propose(self.percept, self.body.state, self.agent.act)
        self.last_proposal = proposal
        return proposal

    def decode_act(self, vec: np.ndarray) -> int:
        return decode_act(vec, self.acts, self.patterns, self.params.fwd_margin, self.streams["decode"])

    def choose_action(self, net_act: int, proposal: ActionProposal) -> int:
        return choose_action(net_act, proposal.act, proposal.urgency, self.params.pct_cortex, self.streams["blend"])

    # -- stepping ------------------------------------------------------------

    def step(self) -> bool:
        """Promote rendered tensors, advance counters, restore resources."""
        self.ctrs[TimeScale.EPOCH].same()
        self._step_pipeline.run(self)
        return True

    def _counters_phase(self, _ctx: object) -> None:
        self.ctrs[TimeScale.TICK].incr()
        self.ctrs[TimeScale.EVENT].incr()

    def _refresh_phase(self, _ctx: object) -> None:
        self.events.refresh(self.grid, self.ctrs[TimeScale.TICK].cur, self.refresh_delays)

    def _trial_phase(self, _ctx: object) -> None:
        if self.ctrs[TimeScale.TRIAL].incr():
            self.ctrs[TimeScale.EPOCH].incr()

    # -- queries -------------------------------------------------------------

    def observe(self, name: str) -> Optional[np.ndarray]:
        return self.encoder.buffers.observe(name)

    def counter(self, scale: TimeScale | str) -> Tuple[int, int, bool]:
        ts = parse_scale(scale) if isinstance(scale, str) else scale
        if ts is None:
            return -1, -1, False
        return self.ctrs[ts].query()

    def state_string(self) -> str:
        return "Evt_{}_Pos_{}_{}_Ang_{}_Act_{}".format(
            self.ctrs[TimeScale.EVENT].cur,
            self.agent.pos_i[0],
            self.agent.pos_i[1],
            self.agent.angle,
            self._act_name(self.agent.act),
        )

    def tick_data(self, protocol_name: str = "") -> TickData:
        cur = {ts: ctr.cur for ts, ctr in self.ctrs.items()}
        front = min(self.percept.front_mat, len(self.catalog) - 1)
        fovea = int(self.percept.fov_mats[self.params.fovea_size])
        prop = self.last_proposal
        return TickData(
            tick=cur[TimeScale.TICK],
            run=cur[TimeScale.RUN],
            epoch=cur[TimeScale.EPOCH],
            trial=cur[TimeScale.TRIAL],
            event=cur[TimeScale.EVENT],
            scene=cur[TimeScale.SCENE],
            pos=(round(self.agent.pos_f[0], 6), round(self.agent.pos_f[1], 6)),
            pos_i=self.agent.pos_i,
            angle=self.agent.angle,
            rot_ang=self.agent.rot_ang,
            action_name=self._act_name(self.agent.act),
            gen_action=prop.name if prop else "",
            urgency=prop.urgency if prop else 0.0,
            drives={k: round(v, 6) for k, v in self.body.state.items()},
            front_mat=self.catalog.name(front),
            fovea_mat=self.catalog.name(fovea),
            pending_refresh=len(self.events.pending),
            obs_checksum=states_checksum(self.encoder.buffers.cur),
            protocol_name=protocol_name,
        )

    def run(self, ticks: int, chooser: Optional[Chooser] = None, protocol_name: str = "") -> List[TickData]:
        """Drive step -> choose -> act for N ticks; reflexes choose by default."""
        trace: List[TickData] = []
        for _ in range(ticks):
            self.step()
            proposal = self.act_gen()
            act = chooser(self, proposal) if chooser else proposal.act
            self.take_act(act)
            trace.append(self.tick_data(protocol_name))
        return trace


__all__ = ["ActContext", "Chooser", "FWorld"]
