from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Dict, Type

from experiments.protocols.base import Protocol
from experiments.protocols.foraging import ForagingProtocol
from experiments.protocols.open_field import OpenFieldProtocol
from fworld.config import WorldParams
from fworld.engine import FWorld
from metrics.hash import RunHash, world_hash
from metrics.logger import JsonlLogger
from metrics.schema import SCHEMA_VERSION

PROTOCOLS: Dict[str, Type[Protocol]] = {
    "foraging": ForagingProtocol,
    "open_field": OpenFieldProtocol,
}


def list_protocols() -> str:
    return "\n".join(sorted(PROTOCOLS.keys()))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Headless flat-world runner")
    parser.add_argument("--protocol", choices=sorted(PROTOCOLS.keys()))
    parser.add_argument("--seed", type=int, default=1337)
    parser.add_argument("--ticks", type=int, default=1000)
    parser.add_argument("--out", type=str, required=False)
    parser.add_argument("--list", action="store_true", help="List available protocols")
    parser.add_argument("--protocol-config", type=str, help="Path to JSON protocol config")
    parser.add_argument("--world-config", type=str, help="Path to JSON world parameters")
    parser.add_argument("--log-level", type=str, default="WARNING")
    return parser.parse_args()


def run(
    protocol_name: str,
    seed: int,
    ticks: int,
    outdir: Path,
    protocol_config: dict | None = None,
    params: WorldParams | None = None,
) -> Dict[str, object]:
    proto_cls = PROTOCOLS[protocol_name]
    protocol = proto_cls(protocol_config)
    env = FWorld(params, seed=seed)
    protocol.setup(env)

    outdir.mkdir(parents=True, exist_ok=True)
    tick_path = outdir / "ticks.jsonl"
    summary_path = outdir / "summary.json"
    event_path = outdir / "events.jsonl"

    rh = RunHash()
    ticks_run_actual = 0
    with JsonlLogger(tick_path) as tick_log:
        for i in range(ticks):
            tick = env.run(1, chooser=protocol.choose, protocol_name=protocol_name)[0]
            ticks_run_actual += 1
            protocol.on_tick(env, tick, i)
            tick_log.write_tick(tick)
            rh.update(tick)
            if protocol.is_done(env, tick, i):
                break

    with JsonlLogger(event_path) as event_log:
        event_log.write_all(env.events.history)

    summary = protocol.summarize()
    summary.update(
        {
            "protocol": protocol_name,
            "seed": seed,
            "ticks_requested": ticks,
            "ticks_run": ticks_run_actual,
            "schema_version": SCHEMA_VERSION,
            "run_hash": rh.hexdigest(),
            "world_hash": world_hash(env.snapshot.cells),
            "protocol_config": protocol_config or {},
            "events": len(env.events.history),
        }
    )
    summary_path.write_text(json.dumps(summary, sort_keys=True, separators=(",", ":")))
    return summary


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    if args.list:
        print(list_protocols())
        return
    if not args.protocol:
        raise SystemExit("Protocol required unless --list is used")
    protocol_config = None
    if args.protocol_config:
        protocol_config = json.loads(Path(args.protocol_config).read_text())
    params = WorldParams.from_json(args.world_config) if args.world_config else None
    outdir = Path(args.out) if args.out else Path(f"runs/{args.protocol}_{args.seed}")
    run(args.protocol, args.seed, args.ticks, outdir, protocol_config=protocol_config, params=params)


if __name__ == "__main__":
    main()
