"""Flask app factory exposing JSON routes over one flat-world environment."""

from typing import Any, Dict

from flask import Flask

from app.routes import bp
from app.routes.api import init_state
from fworld.config import WorldParams


def create_app(config: Dict[str, Any] | None = None) -> Flask:
    """Create the Flask application and initialize the world.

    config may hold "seed" and "world" (a WorldParams dict).
    """
    cfg = config or {}
    params = WorldParams.from_dict(cfg["world"]) if "world" in cfg else None
    init_state(seed=int(cfg.get("seed", 1337)), params=params)
    flask_app = Flask(__name__)
    flask_app.register_blueprint(bp)
    return flask_app


if __name__ == "__main__":
    app = create_app()
    app.run(host="0.0.0.0", port=5000)
