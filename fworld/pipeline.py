"""Named, ordered phases for acting and stepping the environment."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Tuple

# take_act: drain -> move/consume -> rescan -> charge -> render
ACT_ORDER: Tuple[str, ...] = (
    "physiology",
    "motor",
    "sensors",
    "costs",
    "render",
)

# step: promote -> counters -> refresh -> trial
STEP_ORDER: Tuple[str, ...] = (
    "promote",
    "counters",
    "refresh",
    "trial",
)

Step = Callable[[Any], None]


class Pipeline:
    """Executes named steps in a fixed, explicit order."""

    def __init__(self, handlers: Dict[str, Step], order: Iterable[str]) -> None:
        self.handlers = handlers
        self.order = tuple(order)
        unknown = set(handlers) - set(self.order)
        if unknown:
            raise ValueError(f"handlers not in pipeline order: {sorted(unknown)}")

    def run(self, context: Any) -> None:
        for name in self.order:
            handler = self.handlers.get(name)
            if handler:
                handler(context)


__all__ = ["ACT_ORDER", "Pipeline", "STEP_ORDER", "Step"]
