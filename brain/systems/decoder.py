"""Decode a motor output pattern into an action and blend with the reflexes."""

from __future__ import annotations

from typing import Mapping, Sequence

import numpy as np

from fworld.rng import RandomSource, bool_prob


def correlation(a: np.ndarray, b: np.ndarray) -> float:
    """Pearson correlation; 0 when either side has no variance."""
    a = np.asarray(a, dtype=np.float64).reshape(-1)
    b = np.asarray(b, dtype=np.float64).reshape(-1)
    da = a - a.mean()
    db = b - b.mean()
    denom = np.sqrt((da * da).sum() * (db * db).sum())
    if denom == 0:
        return 0.0
    return float((da * db).sum() / denom)


def decode_act(
    vec: np.ndarray,
    acts: Sequence[str],
    patterns: Mapping[str, np.ndarray],
    fwd_margin: float,
    stream: RandomSource,
) -> int:
    """Index of the action whose pattern best matches vec.

    Forward must beat the best other action by fwd_margin. The best other
    action wins even with a negative correlation; a random action is drawn
    only when no pattern other than Forward is available.
    """
    best_name = ""
    best = 0.0
    fwd = 0.0
    for name in acts:
        pat = patterns.get(name)
        if pat is None:
            continue
        d = correlation(vec, pat)
        if name == "Forward":
            fwd = d
        elif not best_name or d > best:
            best_name = name
            best = d
    if fwd > fwd_margin * best:
        best_name = "Forward"
    if best_name not in acts:
        return stream.randint(0, len(acts) - 1)
    return list(acts).index(best_name)


def choose_action(
    net_act: int,
    gen_act: int,
    urgency: float,
    pct_cortex: float,
    stream: RandomSource,
) -> int:
    """Urgent reflexes win; otherwise the network drives pct_cortex of the time."""
    if bool_prob(stream, urgency):
        return gen_act
    if bool_prob(stream, pct_cortex):
        return net_act
    return gen_act


__all__ = ["choose_action", "correlation", "decode_act"]
