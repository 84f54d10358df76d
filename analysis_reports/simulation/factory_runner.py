"""Monte Carlo runner for the factory reliability model.

Replication i uses seed base_seed + i, so a summary is reproducible and
two configurations compared with the same base_seed share their random
streams trial by trial (common random numbers).
"""

from __future__ import annotations

import math
import logging
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np
import pandas as pd

from analysis_reports.simulation.factory_grid import FactoryParams
from analysis_reports.simulation.factory_model import FactoryModel

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
#  HELPERS
# ══════════════════════════════════════════════════════════════════════════

def ci95(xs: Sequence[float]) -> Tuple[float, float, float]:
    """(mean, lo, hi) with the normal approximation; NaNs are dropped."""
    xs = np.asarray(xs, dtype=float)
    xs = xs[~np.isnan(xs)]
    n = len(xs)
    if n == 0:
        return (0.0, 0.0, 0.0)
    m = float(xs.mean())
    if n == 1:
        return (m, m, m)
    s = float(xs.std(ddof=1))
    half = 1.96 * s / math.sqrt(n)
    return (m, m - half, m + half)


def censored_crash_times(results: List[Dict[str, Any]]) -> List[float]:
    """Crash time per trial; runs that never crashed count at sim_time."""
    return [r["crash_time"] if r["crashed"] else r["sim_time"] for r in results]


# ══════════════════════════════════════════════════════════════════════════
#  MONTE CARLO
# ══════════════════════════════════════════════════════════════════════════

def run_trials(params: FactoryParams, n_trials: int = 200,
               stop_at_crash: bool = True, base_seed: int = 0) -> List[Dict[str, Any]]:
    if n_trials < 1:
        raise ValueError(f"n_trials must be >= 1, got {n_trials!r}")
    model = FactoryModel(params)
    return [model.simulate(seed=base_seed + i, stop_at_crash=stop_at_crash)
            for i in range(n_trials)]


def summarize_trials(params: FactoryParams, results: List[Dict[str, Any]]) -> Dict[str, Any]:
    crash_times = censored_crash_times(results)
    ct_mean, ct_lo, ct_hi = ci95(crash_times)
    avail = [r["availability"] for r in results]
    av_mean, av_lo, av_hi = ci95(avail)

    return dict(
        spares=params.spares,
        repairmen=params.repairmen,
        cost=params.spares * params.spare_cost + params.repairmen * params.repairman_cost,
        n_trials=len(results),
        crash_time_mean=ct_mean,
        crash_time_std=float(np.std(crash_times, ddof=1)) if len(results) > 1 else 0.0,
        crash_time_lo=ct_lo,
        crash_time_hi=ct_hi,
        crash_time_p5=float(np.percentile(crash_times, 5)),
        crash_time_p95=float(np.percentile(crash_times, 95)),
        crash_prob=float(np.mean([1 if r["crashed"] else 0 for r in results])),
        availability_mean=av_mean,
        availability_lo=av_lo,
        availability_hi=av_hi,
        mean_operating=float(np.mean([r["mean_operating"] for r in results])),
        failures_mean=float(np.mean([r["failures"] for r in results])),
        repair_util_mean=float(np.mean([r["repair_util"] for r in results])),
        max_queue=int(max(r["max_queue"] for r in results)),
    )


def factory_monte_carlo(params: FactoryParams, n_trials: int = 200,
                        stop_at_crash: bool = True, base_seed: int = 0) -> Dict[str, Any]:
    """Run n_trials replications of one (spares, repairmen) config and summarize."""
    results = run_trials(params, n_trials, stop_at_crash=stop_at_crash, base_seed=base_seed)
    summary = summarize_trials(params, results)
    logger.debug("spares=%d repairmen=%d crash_time=%.2f avail=%.3f",
                 params.spares, params.repairmen,
                 summary["crash_time_mean"], summary["availability_mean"])
    return summary


def trials_frame(results: List[Dict[str, Any]]) -> pd.DataFrame:
    """Per-trial results as a DataFrame indexed by trial number."""
    df = pd.DataFrame(results)
    df.index.name = "trial"
    return df
