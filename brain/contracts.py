"""Data contracts between the environment and action generators."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ActionProposal:
    """Action chosen by a generator, with how strongly it insists on it."""

    act: int  # index into the active action list
    name: str
    urgency: float  # 0-1 probability that this overrides other sources
    trace: str = ""  # which decision branch produced it

    def validate(self) -> None:
        if self.act < 0:
            raise ValueError(f"act must be a non-negative index, got {self.act}")
        if not self.name:
            raise ValueError("name must be non-empty")
        if not 0.0 <= self.urgency <= 1.0:
            raise ValueError(f"urgency must be in [0,1], got {self.urgency}")


__all__ = ["ActionProposal"]
