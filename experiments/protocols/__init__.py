from experiments.protocols.base import Protocol
from experiments.protocols.foraging import ForagingProtocol
from experiments.protocols.open_field import OpenFieldProtocol

__all__ = [
    "Protocol",
    "ForagingProtocol",
    "OpenFieldProtocol",
]
