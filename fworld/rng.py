"""Seeded random streams for world generation, the reflex policy and decoding.

Every stochastic decision in the environment draws from a named stream so
that a world built from the same seed replays identically, and tests can
swap any stream for a scripted one.
"""

from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Protocol


def _derive_seed(base_seed: int, name: str, run: int = 0) -> int:
    """Derive a child seed from the base seed, stream name and run number."""
    payload = f"{base_seed}:{run}:{name}".encode("utf-8")
    digest = hashlib.sha256(payload).digest()
    return int.from_bytes(digest[:8], "big") & ((1 << 63) - 1)


class RandomSource(Protocol):
    """What the policy and generators need from a stream."""

    def random(self) -> float: ...

    def randint(self, a: int, b: int) -> int: ...


@dataclass
class RNGStream:
    """Named random stream with a dedicated Random instance."""

    seed: int
    _random: random.Random = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._random = random.Random(self.seed)

    def random(self) -> float:
        return self._random.random()

    def randint(self, a: int, b: int) -> int:
        return self._random.randint(a, b)


def bool_prob(stream: RandomSource, p: float) -> bool:
    """True with probability p, drawing exactly one value from stream."""
    return stream.random() < p


class RNG:
    """Seeded factory that hands out isolated, cached streams by name."""

    def __init__(self, seed: int, run: int = 0) -> None:
        self.seed = seed
        self.run = run
        self._streams: Dict[str, RNGStream] = {}

    def stream(self, name: str) -> RNGStream:
        if name not in self._streams:
            self._streams[name] = RNGStream(seed=_derive_seed(self.seed, name=name, run=self.run))
        return self._streams[name]


def spawn_streams(seed: int, names: Iterable[str], run: int = 0) -> Mapping[str, RNGStream]:
    rng = RNG(seed=seed, run=run)
    return {name: rng.stream(name) for name in names}


__all__ = ["RNG", "RNGStream", "RandomSource", "bool_prob", "spawn_streams"]
