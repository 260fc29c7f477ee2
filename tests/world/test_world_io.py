import json
import logging

import numpy as np
import pytest

from fworld.config import DEFAULT_PATS_PATH, ConfigError, WorldParams
from fworld.rng import RNGStream
from fworld.world import Grid, build_catalog
from fworld.world_io import gen_world, load_patterns, open_world, save_patterns, save_world

PARAMS = WorldParams()
CATALOG = build_catalog(PARAMS.mats, PARAMS.barrier_idx)


def test_save_world_uses_trailing_tabs_and_blank_empty(tmp_path):
    grid = Grid(size=(3, 2))
    grid.set((0, 0), CATALOG.code("Wall"))
    grid.set((2, 0), CATALOG.code("Food"))
    path = tmp_path / "world.tsv"
    save_world(grid, CATALOG, path)
    lines = path.read_text().splitlines()
    assert lines == ["Wall\t\tFood\t", "\t\t\t"]


def test_open_world_restores_saved_grid(tmp_path):
    grid = Grid(size=(5, 4))
    grid.rect((0, 0), (4, 3), CATALOG.code("Wall"))
    grid.set((2, 1), CATALOG.code("Water"))
    path = tmp_path / "world.tsv"
    save_world(grid, CATALOG, path)

    loaded = Grid(size=(5, 4))
    loaded.set((2, 2), CATALOG.code("Food"))  # stale contents are cleared
    open_world(loaded, CATALOG, path)
    assert np.array_equal(loaded.cells, grid.cells)


def test_open_world_skips_unknown_material(tmp_path, caplog):
    path = tmp_path / "world.tsv"
    path.write_text("Wall\tLava\tFood\t\n")
    grid = Grid(size=(3, 1))
    with caplog.at_level(logging.WARNING):
        open_world(grid, CATALOG, path)
    assert grid.get((0, 0)) == CATALOG.code("Wall")
    assert grid.get((1, 0)) == 0
    assert grid.get((2, 0)) == CATALOG.code("Food")
    assert "Lava" in caplog.text


@pytest.mark.parametrize(
    "text",
    [
        "Wall\tWall\t\n",
        "Wall\tWall\t\nWall\tWall\t\nWall\tWall\t\n",
        "Wall\tWall\tWall\t\n\t\t\n",
        "Wall\nWall\n",
    ],
)
def test_open_world_rejects_wrong_size(tmp_path, text):
    path = tmp_path / "world.tsv"
    path.write_text(text)
    grid = Grid(size=(2, 2))
    grid.set((1, 1), CATALOG.code("Food"))
    with pytest.raises(ConfigError):
        open_world(grid, CATALOG, path)
    assert grid.get((1, 1)) == CATALOG.code("Food")


def test_open_world_accepts_rows_without_trailing_tab(tmp_path):
    path = tmp_path / "world.tsv"
    path.write_text("Wall\tFood\n\tWater\n\n")
    grid = Grid(size=(2, 2))
    open_world(grid, CATALOG, path)
    assert grid.get((1, 0)) == CATALOG.code("Food")
    assert grid.get((0, 1)) == 0
    assert grid.get((1, 1)) == CATALOG.code("Water")


def test_open_world_missing_file_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        open_world(Grid(size=(2, 2)), CATALOG, tmp_path / "nope.tsv")


def test_default_patterns_cover_materials_and_actions():
    required = tuple(PARAMS.mats) + tuple(PARAMS.acts) + ("Stay", "Backward")
    pats = load_patterns(DEFAULT_PATS_PATH, PARAMS.pat_size, required)
    assert all(p.shape == (5, 5) for p in pats.values())
    assert not pats["Empty"].any()
    flat = {name: tuple(p.reshape(-1)) for name, p in pats.items() if name != "Empty"}
    assert len(set(flat.values())) == len(flat)


def test_load_patterns_errors(tmp_path):
    with pytest.raises(ConfigError):
        load_patterns(tmp_path / "missing.json", (5, 5), ["Food"])

    bad_shape = tmp_path / "bad.json"
    bad_shape.write_text(json.dumps({"Food": [[1, 0], [0, 1]]}))
    with pytest.raises(ConfigError):
        load_patterns(bad_shape, (5, 5), ["Food"])

    missing = tmp_path / "missing_entry.json"
    missing.write_text(json.dumps({"Food": np.ones((5, 5)).tolist()}))
    with pytest.raises(ConfigError):
        load_patterns(missing, (5, 5), ["Food", "Water"])


def test_save_patterns_is_loadable(tmp_path):
    pats = {"Food": np.eye(5, dtype=np.float32), "Water": np.ones((5, 5), dtype=np.float32)}
    path = tmp_path / "pats.json"
    save_patterns(pats, path)
    loaded = load_patterns(path, (5, 5), ["Food", "Water"])
    assert np.array_equal(loaded["Food"], pats["Food"])


def test_gen_world_layout():
    grid = Grid(size=PARAMS.size)
    gen_world(grid, CATALOG, PARAMS, RNGStream(seed=3))
    wall = CATALOG.code("Wall")
    assert all(grid.get((x, 0)) == wall for x in range(100))
    assert all(grid.get((0, y)) == wall for y in range(100))
    assert all(grid.get((99, y)) == wall for y in range(100))
    assert grid.get((20, 20)) == wall and grid.get((40, 40)) == wall
    assert grid.get((80, 40)) == wall and grid.get((80, 39)) == wall
    assert grid.get((50, 50)) == 0
    assert grid.count(CATALOG.code("Food")) == PARAMS.n_food
    assert grid.count(CATALOG.code("Water")) == PARAMS.n_water


def test_gen_world_is_seeded():
    a = Grid(size=(30, 30))
    b = Grid(size=(30, 30))
    params = WorldParams(size=(30, 30), n_food=10, n_water=10)
    gen_world(a, CATALOG, params, RNGStream(seed=9))
    gen_world(b, CATALOG, params, RNGStream(seed=9))
    assert np.array_equal(a.cells, b.cells)
