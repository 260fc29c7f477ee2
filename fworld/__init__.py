"""Flat grid world with an embodied agent, egocentric senses and reflexes."""

from fworld.config import ConfigError, WorldParams
from fworld.counters import TimeScale
from fworld.engine import FWorld
from fworld.world import Grid, MaterialCatalog

__all__ = ["ConfigError", "FWorld", "Grid", "MaterialCatalog", "TimeScale", "WorldParams"]
