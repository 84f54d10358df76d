"""Factory reliability report: budgeted grid search, then a horizon run of the winner."""

from __future__ import annotations

import logging
from typing import Optional

from analysis_reports.simulation.factory_grid import (
    FactoryParams, MAX_SPARES, MAX_REPAIRMEN, N_TRIALS,
)
from analysis_reports.simulation.factory_optimizer import (
    factory_grid_search, plot_grid_heatmap, print_detailed, print_factory_report,
    summaries_frame,
)
from analysis_reports.simulation.factory_runner import run_trials, summarize_trials, trials_frame
from analysis_reports.reports.base import Report

logger = logging.getLogger(__name__)


def factory_report(params: Optional[FactoryParams] = None,
                   max_spares: int = MAX_SPARES, max_repairmen: int = MAX_REPAIRMEN,
                   n_trials: int = N_TRIALS, objective: str = "crash_time",
                   base_seed: int = 0, verbose: bool = False) -> Report:
    params = params or FactoryParams()
    summaries = factory_grid_search(params, max_spares, max_repairmen, n_trials,
                                    objective=objective, base_seed=base_seed)
    best = summaries[0]
    best_params = params.with_config(best["spares"], best["repairmen"])

    # Horizon mode: keep running after the crash to measure availability
    horizon_trials = run_trials(best_params, n_trials, stop_at_crash=False, base_seed=base_seed)
    horizon = summarize_trials(best_params, horizon_trials)

    rep = Report(title="Factory reliability: spares x repairmen")
    rep.tables["ranking"] = summaries_frame(summaries)
    rep.tables["best_horizon_trials"] = trials_frame(horizon_trials)
    rep.tables["best_horizon_summary"] = summaries_frame([dict(horizon, rank=1)])
    rep.figures["heatmap"] = plot_grid_heatmap(summaries, best["objective"])

    if verbose:
        print_factory_report(summaries)
        print_detailed(best, params)
        print(f"  Horizon run ({params.horizon:g} days, no stop at crash): "
              f"availability {horizon['availability_mean']*100:.1f}% "
              f"[{horizon['availability_lo']*100:.1f}, {horizon['availability_hi']*100:.1f}]")

    logger.info("Best: spares=%d repairmen=%d cost=%.2f", best["spares"], best["repairmen"],
                best["cost"])
    return rep
