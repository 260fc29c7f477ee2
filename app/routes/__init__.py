"""JSON routes over the single flat-world environment."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("fworld", __name__)

# api registers its handlers on bp at import time
from . import api  # noqa: E402,F401

__all__ = ["bp"]
