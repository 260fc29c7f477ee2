import logging

from fworld.events import RefreshScheduler, WorldEvent
from fworld.world import Grid

FOOD, WATER, FOOD_WAS, WATER_WAS = 2, 3, 4, 5


def _event(tick: int, mat: int, pos=(1, 1)) -> WorldEvent:
    return WorldEvent(tick=tick, pos_i=(0, 1), pos_f=(0.0, 1.0), angle=0, act=3, mat=mat, mat_pos=pos)


def test_refresh_restores_after_delay():
    grid = Grid(size=(3, 3))
    grid.set((1, 1), FOOD_WAS)
    sched = RefreshScheduler()
    sched.add(_event(5, FOOD))
    delays = {FOOD: 3}

    assert sched.refresh(grid, 7, delays) == []
    assert grid.get((1, 1)) == FOOD_WAS

    done = sched.refresh(grid, 8, delays)
    assert [ev.tick for ev in done] == [5]
    assert grid.get((1, 1)) == FOOD
    assert sched.pending == {}
    assert len(sched.history) == 1


def test_refresh_handles_materials_independently():
    grid = Grid(size=(3, 3))
    sched = RefreshScheduler()
    sched.add(_event(0, FOOD, pos=(0, 0)))
    sched.add(_event(1, WATER, pos=(2, 2)))
    sched.refresh(grid, 3, {FOOD: 100, WATER: 2})
    assert grid.get((2, 2)) == WATER
    assert grid.get((0, 0)) == 0
    assert list(sched.pending) == [0]


def test_material_without_delay_never_refreshes():
    grid = Grid(size=(3, 3))
    sched = RefreshScheduler()
    sched.add(_event(0, WATER))
    assert sched.refresh(grid, 10_000, {FOOD: 1}) == []
    assert len(sched.pending) == 1


def test_same_tick_collision_is_logged(caplog):
    sched = RefreshScheduler()
    with caplog.at_level(logging.WARNING):
        sched.add(_event(4, FOOD))
        sched.add(_event(4, WATER))
    assert "replacing pending refresh" in caplog.text
    assert sched.pending[4].mat == WATER
    assert len(sched.history) == 2


def test_clear_drops_pending_and_history():
    sched = RefreshScheduler()
    sched.add(_event(1, FOOD))
    sched.clear()
    assert not sched.pending and not sched.history


def test_event_to_dict_is_json_ready():
    payload = _event(2, FOOD).to_dict()
    assert payload["mat_pos"] == [1, 1]
    assert payload["tick"] == 2
