"""Gaussian-bump population codes for scalar sensory values."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass
class OneD:
    """Linear population code over [min, max].

    Unit i is tuned to min + i * (max - min) / (n - 1); sigma is a fraction
    of the range.
    """

    min: float = -0.5
    max: float = 1.5
    sigma: float = 0.2
    clip: bool = True
    thr: float = 0.1
    min_sum: float = 0.2

    @classmethod
    def from_range(cls, triple: tuple[float, float, float]) -> "OneD":
        lo, hi, sigma = triple
        return cls(min=lo, max=hi, sigma=sigma)

    def _targets(self, n: int) -> np.ndarray:
        return np.linspace(self.min, self.max, n, dtype=np.float64)

    def encode(self, val: float, n: int) -> np.ndarray:
        if self.clip:
            val = min(max(val, self.min), self.max)
        sr = self.sigma * (self.max - self.min)
        d = (self._targets(n) - val) / sr
        return np.exp(-(d * d)).astype(np.float32)

    def encode_into(self, out: np.ndarray, val: float) -> None:
        out.reshape(-1)[...] = self.encode(val, out.size)

    def decode(self, pat: np.ndarray) -> float:
        """Activation-weighted average of unit targets above threshold."""
        acts = np.asarray(pat, dtype=np.float64).reshape(-1)
        trg = self._targets(acts.size)
        acts = np.where(acts >= self.thr, acts, 0.0)
        total = acts.sum()
        if total < self.min_sum:
            return 0.0
        return float((acts * trg).sum() / total)


@dataclass
class Ring(OneD):
    """Circular population code; distances wrap around the range."""

    def _targets(self, n: int) -> np.ndarray:
        return self.min + (self.max - self.min) * np.arange(n, dtype=np.float64) / n

    def encode(self, val: float, n: int) -> np.ndarray:
        rng = self.max - self.min
        sr = self.sigma * rng
        d = np.abs(self._targets(n) - val)
        d = np.where(d > 0.5 * rng, rng - d, d) / sr
        return np.exp(-(d * d)).astype(np.float32)

    def decode(self, pat: np.ndarray) -> float:
        acts = np.asarray(pat, dtype=np.float64).reshape(-1)
        rng = self.max - self.min
        phase = 2 * np.pi * (self._targets(acts.size) - self.min) / rng
        ang = np.arctan2((acts * np.sin(phase)).sum(), (acts * np.cos(phase)).sum())
        return float(self.min + (ang % (2 * np.pi)) / (2 * np.pi) * rng)


__all__ = ["OneD", "Ring"]
