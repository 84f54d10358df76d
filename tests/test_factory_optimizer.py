import math
from dataclasses import replace

import pytest

from analysis_reports.simulation.factory_grid import resolve_objective
from analysis_reports.simulation.factory_runner import (
    censored_crash_times, ci95, factory_monte_carlo, run_trials, trials_frame,
)
from analysis_reports.simulation.factory_optimizer import (
    config_cost, factory_grid_search, feasible_configs, plot_grid_heatmap,
    print_detailed, print_factory_report, summaries_frame,
)


def test_ci95_normal_approximation():
    m, lo, hi = ci95([1.0, 2.0, 3.0])
    assert m == pytest.approx(2.0)
    assert hi - m == pytest.approx(1.96 / math.sqrt(3))
    assert m - lo == pytest.approx(hi - m)
    assert ci95([]) == (0.0, 0.0, 0.0)
    assert ci95([4.0]) == (4.0, 4.0, 4.0)


def test_censored_crash_times_use_sim_time():
    results = [
        dict(crashed=True, crash_time=3.0, sim_time=3.0),
        dict(crashed=False, crash_time=None, sim_time=50.0),
    ]
    assert censored_crash_times(results) == [3.0, 50.0]


def test_monte_carlo_summary(small_factory):
    s = factory_monte_carlo(small_factory, n_trials=30)
    assert s["n_trials"] == 30
    assert s["spares"] == 1 and s["repairmen"] == 1
    assert s["cost"] == pytest.approx(350.0)
    assert 0.0 <= s["crash_prob"] <= 1.0
    assert s["crash_time_lo"] <= s["crash_time_mean"] <= s["crash_time_hi"]
    assert s["crash_time_mean"] <= small_factory.horizon


def test_more_spares_delay_the_crash(small_factory):
    none = factory_monte_carlo(replace(small_factory, spares=0), n_trials=100)
    many = factory_monte_carlo(replace(small_factory, spares=4, repairmen=2), n_trials=100)
    assert many["crash_time_mean"] > 2 * none["crash_time_mean"]
    assert many["crash_prob"] <= none["crash_prob"]


def test_run_trials_rejects_zero(small_factory):
    with pytest.raises(ValueError):
        run_trials(small_factory, n_trials=0)


def test_trials_frame(small_factory):
    df = trials_frame(run_trials(small_factory, n_trials=5))
    assert len(df) == 5
    assert df.index.name == "trial"
    assert {"crashed", "crash_time", "availability"} <= set(df.columns)


def test_feasible_configs_respect_budget(small_factory):
    combos = feasible_configs(small_factory, max_spares=8, max_repairmen=3)
    assert combos == [(0, 1), (0, 2), (1, 1), (1, 2), (2, 1), (3, 1)]
    assert all(config_cost(s, r, small_factory) <= small_factory.budget for s, r in combos)


def test_grid_search_ranks_best_first(small_factory):
    summaries = factory_grid_search(small_factory, max_spares=3, max_repairmen=2, n_trials=10)
    assert [(s["spares"], s["repairmen"]) for s in summaries] != []
    assert [s["rank"] for s in summaries] == list(range(1, len(summaries) + 1))
    means = [s["crash_time_mean"] for s in summaries]
    assert means == sorted(means, reverse=True)
    assert all(s["cost"] <= small_factory.budget for s in summaries)

    df = summaries_frame(summaries)
    assert df.index.name == "rank"
    assert len(df) == len(summaries)


def test_grid_search_lower_is_better_objective(small_factory):
    summaries = factory_grid_search(small_factory, max_spares=2, max_repairmen=1,
                                    n_trials=10, objective="crash_prob")
    probs = [s["crash_prob"] for s in summaries]
    assert probs == sorted(probs)


def test_grid_search_over_budget_raises(small_factory):
    with pytest.raises(ValueError, match="budget"):
        factory_grid_search(replace(small_factory, budget=100.0), n_trials=2)


def test_unknown_objective():
    with pytest.raises(ValueError):
        resolve_objective("profit")
    assert resolve_objective("availability_mean") == ("availability_mean", True)


def test_report_and_heatmap(small_factory, capsys):
    summaries = factory_grid_search(small_factory, max_spares=2, max_repairmen=2, n_trials=5)
    print_factory_report(summaries, top_n=3)
    out = capsys.readouterr().out
    assert "TOP 3 FACTORY CONFIGURATIONS" in out
    fig = plot_grid_heatmap(summaries)
    assert fig.axes[0].get_xlabel() == "Spares"


def test_ties_go_to_the_cheaper_config(small_factory):
    # machines that never fail: every config reaches the horizon
    p = replace(small_factory, mean_life=1e9, horizon=10.0)
    summaries = factory_grid_search(p, max_spares=3, max_repairmen=2, n_trials=3)
    assert {s["crash_time_mean"] for s in summaries} == {10.0}
    costs = [s["cost"] for s in summaries]
    assert costs == sorted(costs)
    assert (summaries[0]["spares"], summaries[0]["repairmen"]) == (0, 1)


def test_availability_objective_uses_horizon_runs(small_factory):
    summaries = factory_grid_search(small_factory, max_spares=3, max_repairmen=2,
                                    n_trials=20, objective="availability")
    avail = [s["availability_mean"] for s in summaries]
    assert avail == sorted(avail, reverse=True)
    assert avail[0] > avail[-1]
    assert summaries[0]["spares"] > 0


def test_print_detailed(small_factory, capsys):
    s = factory_monte_carlo(small_factory, n_trials=10)
    print_detailed(s, small_factory)
    out = capsys.readouterr().out
    assert "Machines operating:   3" in out
    assert "Spares:               1" in out
    assert "Repairmen:            1" in out
    assert "$    350.00  (budget $600.00)" in out
    assert "censored at 50" in out
    assert f"P(crash):    {s['crash_prob']:>10.3f}" in out
    assert f"Availability:         {s['availability_mean']*100:.1f}%" in out
    assert f"Longest repair queue: {s['max_queue']}" in out
