# -*- coding: utf-8 -*-
"""Factory Grid — Single Source of Truth for ALL Factory Simulation Parameters.

The factory model, the Monte Carlo runner and the optimizer read their
defaults from THIS file.  Overrides go through FactoryParams (frozen
dataclass) via dataclasses.replace() or params_from_dict().
"""

from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Optional


# ══════════════════════════════════════════════════════════════════════════
#  OPERATIONAL CONSTANTS
# ══════════════════════════════════════════════════════════════════════════

NUM_OPERATING   = 5            # machines that must run for the line to produce
MEAN_LIFE       = 10.0         # mean time between failures per machine (days)
MEAN_REPAIR     = 2.0          # mean repair time per machine (days)
SWAP_TIME       = 0.0          # time to put a spare into a slot (days)
HORIZON         = 365.0        # simulated period (days)
LIFE_DIST       = "exponential"
WEIBULL_SHAPE   = 1.5

LIFE_DISTRIBUTIONS = ("exponential", "weibull")


# ══════════════════════════════════════════════════════════════════════════
#  COSTS (per day)
# ══════════════════════════════════════════════════════════════════════════

SPARE_COST      = 100.0        # $/spare machine/day
REPAIRMAN_COST  = 250.0        # $/repairman/day
BUDGET          = 1000.0       # $/day available for spares + repairmen


# ══════════════════════════════════════════════════════════════════════════
#  SWEEP DEFAULTS
# ══════════════════════════════════════════════════════════════════════════

MAX_SPARES      = 8
MAX_REPAIRMEN   = 4
N_TRIALS        = 200

OBJECTIVES = {
    # name -> (summary key, higher is better)
    "crash_time": ("crash_time_mean", True),
    "availability": ("availability_mean", True),
    "crash_prob": ("crash_prob", False),
}


# ══════════════════════════════════════════════════════════════════════════
#  PARAMETERS
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class FactoryParams:
    num_operating: int = NUM_OPERATING
    spares: int = 3
    repairmen: int = 1

    mean_life: float = MEAN_LIFE
    mean_repair: float = MEAN_REPAIR
    swap_time: float = SWAP_TIME
    horizon: float = HORIZON

    life_dist: str = LIFE_DIST
    weibull_shape: float = WEIBULL_SHAPE

    spare_cost: float = SPARE_COST
    repairman_cost: float = REPAIRMAN_COST
    budget: float = BUDGET

    def __post_init__(self):
        validate_params(self)

    def with_config(self, spares: int, repairmen: int) -> "FactoryParams":
        return replace(self, spares=spares, repairmen=repairmen)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _is_int(v) -> bool:
    return isinstance(v, numbers.Integral) and not isinstance(v, bool)


def _is_real(v) -> bool:
    return (isinstance(v, numbers.Real) and not isinstance(v, bool)
            and math.isfinite(v))


def validate_params(p: FactoryParams) -> None:
    """Raise ValueError naming the first invalid field."""
    for name, low in (("num_operating", 1), ("spares", 0), ("repairmen", 1)):
        v = getattr(p, name)
        if not _is_int(v) or v < low:
            raise ValueError(f"{name} must be an integer >= {low}, got {v!r}")
    for name in ("mean_life", "mean_repair", "horizon", "weibull_shape"):
        v = getattr(p, name)
        if not _is_real(v) or v <= 0:
            raise ValueError(f"{name} must be a finite number > 0, got {v!r}")
    for name in ("swap_time", "spare_cost", "repairman_cost", "budget"):
        v = getattr(p, name)
        if not _is_real(v) or v < 0:
            raise ValueError(f"{name} must be a finite number >= 0, got {v!r}")
    if p.life_dist not in LIFE_DISTRIBUTIONS:
        raise ValueError(
            f"Invalid life_dist '{p.life_dist}'. Use one of {', '.join(LIFE_DISTRIBUTIONS)}."
        )


def params_from_dict(d: Optional[Dict[str, Any]] = None,
                     base: Optional[FactoryParams] = None) -> FactoryParams:
    """Build FactoryParams from a plain dict (JSON config, CLI flags).

    Keys with a None value are ignored so argparse defaults can be passed
    straight through.
    """
    base = base or FactoryParams()
    if not d:
        return base
    known = {f.name for f in fields(FactoryParams)}
    unknown = sorted(set(d) - known)
    if unknown:
        raise ValueError(f"Unknown factory parameter(s): {', '.join(unknown)}")
    overrides = {k: v for k, v in d.items() if v is not None}
    return replace(base, **overrides)


def resolve_objective(name: str):
    """Return (summary key, higher_is_better) for an objective name."""
    if name in OBJECTIVES:
        return OBJECTIVES[name]
    for key, better in OBJECTIVES.values():
        if name == key:
            return key, better
    raise ValueError(f"Invalid objective '{name}'. Use one of {', '.join(OBJECTIVES)}.")
