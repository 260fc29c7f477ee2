import numpy as np
import pytest

from fworld.rng import RNGStream
from fworld.world import Grid, MaterialCatalog, build_catalog

MATS = ("Empty", "Wall", "Food", "Water", "FoodWas", "WaterWas")


def test_catalog_codes_and_barriers():
    cat = build_catalog(MATS, barrier_idx=1)
    assert len(cat) == 6
    assert cat.code("Food") == 2
    assert cat.name(3) == "Water"
    assert "WaterWas" in cat
    assert "Lava" not in cat
    assert cat.is_barrier(1)
    assert not cat.is_barrier(0)
    assert not cat.is_barrier(2)


def test_catalog_is_immutable():
    cat = MaterialCatalog(names=MATS)
    with pytest.raises(Exception):
        cat.names = ("Empty",)


def test_get_set_and_bounds():
    grid = Grid(size=(4, 3))
    assert grid.cells.shape == (3, 4)
    grid.set((3, 2), 2)
    assert grid.get((3, 2)) == 2
    assert grid.cells[2, 3] == 2
    for bad in [(4, 0), (0, 3), (-1, 0), (0, -1)]:
        assert not grid.in_bounds(bad)
        with pytest.raises(IndexError):
            grid.get(bad)
        with pytest.raises(IndexError):
            grid.set(bad, 1)


def test_rect_draws_outline_only():
    grid = Grid(size=(5, 5))
    grid.rect((0, 0), (4, 4), 1)
    assert grid.count(1) == 16
    assert grid.get((2, 2)) == 0
    assert grid.get((4, 0)) == 1 and grid.get((0, 4)) == 1


def test_line_diagonal_and_straight():
    grid = Grid(size=(6, 6))
    grid.line((0, 0), (3, 3), 1)
    for i in range(1, 4):
        assert grid.get((i, i)) == 1
    grid.line((0, 5), (5, 5), 2)
    assert all(grid.get((x, 5)) == 2 for x in range(6))


def test_random_scatter_only_fills_empty_cells():
    grid = Grid(size=(8, 8))
    grid.rect((0, 0), (7, 7), 1)
    walls = grid.count(1)
    grid.random_scatter(10, 2, RNGStream(seed=5))
    assert grid.count(2) == 10
    assert grid.count(1) == walls


def test_copy_does_not_alias():
    grid = Grid(size=(3, 3))
    dup = grid.copy()
    dup.set((1, 1), 3)
    assert grid.get((1, 1)) == 0
    assert np.count_nonzero(dup.cells) == 1


def test_from_array_rejects_non_2d():
    with pytest.raises(ValueError):
        Grid.from_array(np.zeros((2, 2, 2)))
