import logging

import numpy as np
import pytest

from fworld.counters import TimeScale


def test_init_places_agent_at_center_with_full_drives(make_env):
    env = make_env()
    assert env.agent.pos_i == (5, 5)
    assert env.agent.angle == 0
    assert env.body["Energy"] == 1.0 and env.body["Hydra"] == 1.0
    assert env.counter("Tick") == (-1, -1, True)
    assert env.counter("Run") == (0, -1, True)
    assert env.observe("Depth") is not None


def test_first_step_brings_tick_trial_event_to_zero(make_env):
    env = make_env()
    assert env.step() is True
    assert env.counter(TimeScale.TICK) == (0, -1, True)
    assert env.counter("Trial")[0] == 0
    assert env.counter("Event")[0] == 0
    assert env.counter("Epoch") == (0, -1, False)


def test_trial_wrap_advances_epoch(make_env):
    env = make_env(max_trials=2)
    for _ in range(3):
        env.step()
    assert env.counter("Trial") == (0, 1, True)
    assert env.counter("Epoch") == (1, 0, True)
    env.step()
    assert env.counter("Epoch") == (1, 0, False)


def test_unknown_counter_scale(make_env):
    assert make_env().counter("Century") == (-1, -1, False)


def test_forward_moves_one_cell(make_env):
    env = make_env()
    env.step()
    env.act("Forward")
    assert env.agent.pos_i == (6, 5)
    assert env.body["Energy"] == pytest.approx(1.0 - 0.001 - 0.002)
    assert env.body["BumpPain"] == 0.0


def test_forward_into_wall_bumps(make_env):
    env = make_env(items={(6, 5): "Wall"})
    env.step()
    env.act("Forward")
    assert env.agent.pos_i == (5, 5)
    assert env.body["BumpPain"] == 1.0
    assert env.body["Energy"] == pytest.approx(1.0 - 0.001 - 0.002 - 0.01)
    assert env.body["Hydra"] == pytest.approx(1.0 - 0.001 - 0.002 - 0.01)


def test_turns_change_heading_and_rotation(make_env):
    env = make_env()
    env.act("Left")
    assert (env.agent.angle, env.agent.rot_ang) == (15, 15)
    env.act("Right")
    env.act("Right")
    assert (env.agent.angle, env.agent.rot_ang) == (345, -15)
    assert env.body["Energy"] == pytest.approx(1.0 - 3 * (0.001 + 0.001))


def test_eat_consumes_food_and_rewards(make_env):
    env = make_env(items={(6, 5): "Food"})
    env.body.set_state("Energy", 0.05)
    env.step()
    env.act("Eat")
    assert env.body["FoodRew"] == 1.0
    assert env.body["Energy"] == pytest.approx(0.05 - 0.001 + 0.9)
    assert env.body["Hydra"] == pytest.approx(1.0 - 0.001 - 0.005)
    assert env.grid.get((6, 5)) == env.catalog.code("FoodWas")
    assert len(env.events.pending) == 1
    ev = env.events.history[0]
    assert (ev.tick, ev.mat, ev.mat_pos) == (0, env.catalog.code("Food"), (6, 5))
    assert env.counter("Scene") == (1, 0, True)
    assert env.counter("Event")[0] == 0


def test_drink_mirrors_eat(make_env):
    env = make_env(items={(6, 5): "Water"})
    env.act("Drink")
    assert env.body["WaterRew"] == 1.0
    assert env.body["Energy"] == pytest.approx(1.0 - 0.001 - 0.005)
    assert env.grid.get((6, 5)) == env.catalog.code("WaterWas")


def test_eat_without_food_only_costs_time(make_env):
    env = make_env(items={(6, 5): "Water"})
    env.act("Eat")
    assert env.body["FoodRew"] == 0.0
    assert env.body["Energy"] == pytest.approx(0.999)
    assert env.grid.get((6, 5)) == env.catalog.code("Water")
    assert not env.events.history


def test_flags_last_one_action(make_env):
    env = make_env(items={(6, 5): "Food"})
    env.act("Eat")
    env.act("Left")
    assert env.body["FoodRew"] == 0.0


def test_consumed_food_refreshes_after_delay(make_env):
    env = make_env(items={(6, 5): "Food"}, refresh={"Food": 3, "Water": 50})
    env.step()
    env.act("Eat")
    for _ in range(2):
        env.step()
        assert env.grid.get((6, 5)) == env.catalog.code("FoodWas")
    env.step()
    assert env.grid.get((6, 5)) == env.catalog.code("Food")
    assert not env.events.pending


def test_unknown_action_is_logged_and_skipped(make_env, caplog):
    env = make_env()
    with caplog.at_level(logging.WARNING):
        env.act("Fly")
    assert "action not recognized: Fly" in caplog.text
    assert env.body["Energy"] == 1.0
    assert env.agent.pos_i == (5, 5)


def test_out_of_range_index_is_stay(make_env):
    env = make_env()
    env.take_act(99)
    assert env.agent.pos_i == (5, 5)
    assert env.body["Energy"] == pytest.approx(0.999)
    assert env.state_string().endswith("Act_Stay")


def test_observations_update_only_on_step(make_env):
    env = make_env()
    before = env.observe("Vestibular").copy()
    env.act("Left")
    assert np.array_equal(env.observe("Vestibular"), before)
    env.step()
    assert not np.array_equal(env.observe("Vestibular"), before)


def test_observe_is_stable_and_read_only(make_env):
    env = make_env()
    env.step()
    a = env.observe("Inters")
    b = env.observe("Inters")
    assert np.array_equal(a, b)
    with pytest.raises(ValueError):
        a[...] = 0
    assert env.observe("Smell") is None


def test_place_agent_refreshes_senses(make_env):
    env = make_env(items={(3, 3): "Food"})
    env.place_agent((2, 3), 0)
    assert env.percept.front_mat == env.catalog.code("Food")
    assert env.act_gen().name == "Eat"


def test_state_string(make_env):
    env = make_env()
    env.step()
    env.act("Left")
    assert env.state_string() == "Evt_0_Pos_5_5_Ang_15_Act_Left"


def test_init_restores_world_and_counters(make_env):
    env = make_env(items={(6, 5): "Food"})
    env.step()
    env.act("Eat")
    env.act("Forward")
    env.init(2)
    assert env.grid.get((6, 5)) == env.catalog.code("Food")
    assert env.agent.pos_i == (5, 5)
    assert env.counter("Run") == (2, -1, True)
    assert env.counter("Tick")[0] == -1
    assert not env.events.history
    assert env.body["FoodRew"] == 0.0


def test_act_gen_eats_food_in_front(make_env):
    env = make_env(items={(6, 5): "Food"})
    prop = env.act_gen()
    assert (prop.name, prop.urgency) == ("Eat", 0.8)
    prop.validate()


def test_decode_act_via_env(make_env):
    env = make_env()
    assert env.decode_act(env.patterns["Right"]) == env.act_map["Right"]
    assert env.decode_act(env.patterns["Forward"]) == env.act_map["Forward"]


def test_run_with_custom_chooser(make_env):
    env = make_env()
    left = env.act_map["Left"]
    trace = env.run(3, chooser=lambda _env, _prop: left)
    assert env.agent.angle == 45
    assert [t.tick for t in trace] == [0, 1, 2]
    assert all(t.action_name == "Left" for t in trace)


def test_act_gen_after_stay_gives_valid_proposal(make_env, scripted):
    env = make_env()
    env.take_act(-1)
    assert env.state_string().endswith("Act_Stay")
    env.reflex.stream = scripted([0.1])
    prop = env.act_gen()
    prop.validate()
    assert prop.name in ("Left", "Right")
    assert prop.trace == "explore, turn"
