"""Protocol base classes for headless experiments."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict

from brain.contracts import ActionProposal
from metrics.schema import TickData


class Protocol(ABC):
    name: str = "base"

    @abstractmethod
    def setup(self, env: Any) -> None:
        """Deterministically configure the world before running."""

    def choose(self, env: Any, proposal: ActionProposal) -> int:
        """Action to take this tick; the reflex proposal by default."""
        return proposal.act

    @abstractmethod
    def on_tick(self, env: Any, tickdata: TickData, tick_index: int) -> None:
        """Hook invoked every tick."""

    @abstractmethod
    def is_done(self, env: Any, tickdata: TickData, tick_index: int) -> bool:
        """Return True to end the episode early."""

    @abstractmethod
    def summarize(self) -> Dict[str, Any]:
        """Return summary metrics and score."""


__all__ = ["Protocol"]
