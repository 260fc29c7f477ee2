from __future__ import annotations

from typing import Any, Dict, List

from flask import jsonify, request

from app.routes import bp
from fworld.config import WorldParams
from fworld.engine import FWorld
from metrics.schema import TickData


class WorldState:
    """Wrapper to hold the environment and tick history for API responses."""

    def __init__(self, seed: int = 1337, params: WorldParams | None = None) -> None:
        self.seed = seed
        self.params = params
        self.env = FWorld(params, seed=seed)
        self.history: List[TickData] = []

    def step(self, batch_size: int) -> Dict[str, Any]:
        ticks = self.env.run(batch_size, protocol_name="api")
        self.history.extend(ticks)
        return serialize_tick(ticks[-1])


state: WorldState | None = None


def init_state(seed: int = 1337, params: WorldParams | None = None) -> None:
    global state
    state = WorldState(seed=seed, params=params)


def serialize_tick(tick: TickData) -> Dict[str, Any]:
    payload = tick.to_ordered_dict()
    payload["pos"] = list(tick.pos)
    payload["pos_i"] = list(tick.pos_i)
    return payload


def _agent_payload(env: FWorld) -> Dict[str, Any]:
    return {
        "pos": list(env.agent.pos_f),
        "pos_i": list(env.agent.pos_i),
        "angle": env.agent.angle,
        "rot_ang": env.agent.rot_ang,
        "act": env.agent.act,
        "drives": env.body.snapshot(),
        "state": env.state_string(),
    }


@bp.route("/", methods=["GET"])
def index() -> Any:
    assert state is not None, "World state not initialized"
    return jsonify({"status": "ok", "seed": state.seed, "acts": list(state.env.acts)})


@bp.route("/step", methods=["POST"])
def step() -> Any:
    assert state is not None, "World state not initialized"
    req = request.get_json(silent=True) or {}
    batch_size = int(req.get("batch_size", 1))
    batch_size = max(1, min(batch_size, 100))
    payload = state.step(batch_size)
    return jsonify(payload)


@bp.route("/act", methods=["POST"])
def act() -> Any:
    assert state is not None, "World state not initialized"
    req = request.get_json(silent=True) or {}
    name = str(req.get("action", ""))
    if name not in state.env.act_map:
        return jsonify({"error": f"unknown action {name!r}", "acts": list(state.env.acts)}), 400
    state.env.step()
    state.env.act(name)
    tick = state.env.tick_data("api")
    state.history.append(tick)
    return jsonify(serialize_tick(tick))


@bp.route("/actgen", methods=["GET"])
def actgen() -> Any:
    assert state is not None, "World state not initialized"
    prop = state.env.act_gen()
    return jsonify({"act": prop.act, "name": prop.name, "urgency": prop.urgency, "trace": prop.trace})


@bp.route("/observe/<channel>", methods=["GET"])
def observe(channel: str) -> Any:
    assert state is not None, "World state not initialized"
    arr = state.env.observe(channel)
    if arr is None:
        return jsonify({"error": f"unknown channel {channel!r}"}), 404
    return jsonify({"channel": channel, "shape": list(arr.shape), "values": arr.tolist()})


@bp.route("/counter/<scale>", methods=["GET"])
def counter(scale: str) -> Any:
    assert state is not None, "World state not initialized"
    cur, prv, chg = state.env.counter(scale)
    return jsonify({"scale": scale, "cur": cur, "prv": prv, "chg": chg})


@bp.route("/world", methods=["GET"])
def world() -> Any:
    assert state is not None, "World state not initialized"
    env = state.env
    return jsonify(
        {
            "size": list(env.grid.size),
            "mats": list(env.catalog.names),
            "cells": env.grid.cells.tolist(),
            "agent": _agent_payload(env),
            "pending_refresh": len(env.events.pending),
            "events": [ev.to_dict() for ev in env.events.history],
        }
    )


@bp.route("/reset", methods=["POST"])
def reset() -> Any:
    assert state is not None, "World state not initialized"
    req = request.get_json(silent=True) or {}
    new_seed = int(req.get("seed", state.seed))
    init_state(seed=new_seed, params=state.params)
    return jsonify({"status": "reset", "seed": new_seed})


@bp.route("/history", methods=["GET"])
def history() -> Any:
    assert state is not None, "World state not initialized"
    return jsonify([serialize_tick(t) for t in state.history])
