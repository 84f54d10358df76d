import random
from dataclasses import replace

import pytest

from analysis_reports.simulation.factory_grid import FactoryParams, params_from_dict
from analysis_reports.simulation.factory_model import FactoryModel


def test_no_spares_crashes_on_first_failure(small_factory):
    p = replace(small_factory, spares=0)
    r = FactoryModel(p).simulate(seed=1)
    assert r["crashed"] is True
    assert r["failures"] == 1
    assert r["crash_time"] == pytest.approx(r["sim_time"])
    assert 0 < r["crash_time"] < p.horizon


def test_reliable_machines_never_crash(small_factory):
    p = replace(small_factory, mean_life=1e9, horizon=10.0)
    r = FactoryModel(p).simulate(seed=3)
    assert r["crashed"] is False
    assert r["crash_time"] is None
    assert r["failures"] == 0
    assert r["sim_time"] == pytest.approx(10.0)
    assert r["availability"] == pytest.approx(1.0)
    assert r["mean_operating"] == pytest.approx(p.num_operating)
    assert r["repair_util"] == 0.0


def test_same_seed_same_result(small_factory):
    model = FactoryModel(small_factory)
    assert model.simulate(seed=42) == model.simulate(seed=42)


def test_horizon_mode_runs_past_crash(small_factory):
    p = replace(small_factory, spares=0, mean_life=1.0, mean_repair=2.0)
    r = FactoryModel(p).simulate(seed=7, stop_at_crash=False)
    assert r["crashed"] is True
    assert r["sim_time"] == pytest.approx(p.horizon)
    assert r["failures"] > 1
    assert r["repairs"] >= 1
    assert 0.0 <= r["availability"] < 1.0
    assert r["mean_operating"] < p.num_operating
    assert 0.0 < r["repair_util"] <= 1.0


def test_single_repairman_builds_a_queue(small_factory):
    p = replace(small_factory, spares=2, mean_life=0.5, mean_repair=5.0)
    r = FactoryModel(p).simulate(seed=11, stop_at_crash=False)
    assert r["max_queue"] >= 1


def test_state_counters_exposed(small_factory):
    model = FactoryModel(small_factory)
    assert model.get_state() is None
    r = model.simulate(seed=5)
    assert model.get_state()["failures"] == r["failures"]


def test_weibull_lifetime_keeps_the_mean():
    model = FactoryModel(FactoryParams(life_dist="weibull", weibull_shape=2.0, mean_life=10.0))
    random.seed(0)
    draws = [model.draw_life() for _ in range(20000)]
    assert sum(draws) / len(draws) == pytest.approx(10.0, rel=0.03)


@pytest.mark.parametrize("field, value", [
    ("num_operating", 0),
    ("spares", -1),
    ("repairmen", 0),
    ("mean_life", 0.0),
    ("mean_repair", -2.0),
    ("horizon", 0.0),
    ("budget", -1.0),
    ("life_dist", "gamma"),
])
def test_invalid_params_rejected(field, value):
    with pytest.raises(ValueError, match=field):
        FactoryParams(**{field: value})


def test_params_from_dict_ignores_none_and_rejects_unknown():
    p = params_from_dict({"spares": 4, "budget": None})
    assert p.spares == 4
    assert p.budget == FactoryParams().budget
    with pytest.raises(ValueError, match="Unknown"):
        params_from_dict({"spare_parts": 4})


@pytest.mark.parametrize("field, value", [
    ("mean_life", "10"),
    ("spares", 3.0),
    ("repairmen", True),
    ("num_operating", "5"),
    ("horizon", float("inf")),
    ("mean_repair", float("nan")),
    ("budget", None),
])
def test_wrong_types_rejected_with_value_error(field, value):
    with pytest.raises(ValueError, match=field):
        FactoryParams(**{field: value})


def test_wrong_type_from_dict_is_value_error():
    with pytest.raises(ValueError, match="mean_life"):
        params_from_dict({"mean_life": "10"})


def test_swap_time_costs_availability_but_never_crashes(small_factory):
    base = replace(small_factory, spares=50, repairmen=3)
    instant = FactoryModel(base).simulate(seed=4, stop_at_crash=False)
    slow = FactoryModel(replace(base, swap_time=0.5)).simulate(seed=4, stop_at_crash=False)
    assert instant["crashed"] is False
    assert instant["availability"] == pytest.approx(1.0)
    assert slow["crashed"] is False
    assert slow["failures"] > 0
    assert slow["availability"] < 1.0


def test_weibull_replication(small_factory):
    p = replace(small_factory, life_dist="weibull", weibull_shape=2.0)
    model = FactoryModel(p)
    r = model.simulate(seed=9, stop_at_crash=False)
    assert r["sim_time"] == pytest.approx(p.horizon)
    assert r["failures"] > 0
    assert 0.0 <= r["availability"] <= 1.0
    assert model.simulate(seed=9, stop_at_crash=False) == r
