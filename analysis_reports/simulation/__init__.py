"""Factory reliability discrete-event simulation and (spares, repairmen) sweep."""

from analysis_reports.simulation.factory_grid import FactoryParams, params_from_dict
from analysis_reports.simulation.factory_model import FactoryModel
from analysis_reports.simulation.factory_runner import factory_monte_carlo, ci95
from analysis_reports.simulation.factory_optimizer import factory_grid_search, feasible_configs

__all__ = [
    "FactoryParams", "params_from_dict", "FactoryModel",
    "factory_monte_carlo", "ci95", "factory_grid_search", "feasible_configs",
]
