"""Sports statistics exploration: per-game rates, team totals, leaders."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
import pandas as pd

from analysis_reports.data.loading import clean_frame, snake_case
from analysis_reports.data.describe import (
    correlation_table, describe_numeric, group_summary, top_n,
)
from analysis_reports.data import plots
from analysis_reports.reports.base import Report

logger = logging.getLogger(__name__)


def per_game(df: pd.DataFrame, stats: Sequence[str], games: str = "games") -> pd.DataFrame:
    """Add `<stat>_per_game` columns; players with zero games get NaN."""
    out = df.copy()
    g = out[games].where(out[games] > 0)
    for s in stats:
        out[f"{s}_per_game"] = out[s] / g
    return out


def sports_report(df: pd.DataFrame, player: str = "player", team: Optional[str] = "team",
                  games: str = "games", stats: Optional[Sequence[str]] = None,
                  min_games: int = 1, n_leaders: int = 10) -> Report:
    player, games = snake_case(player), snake_case(games)
    team = snake_case(team) if team else team
    stats = [snake_case(s) for s in stats] if stats is not None else None
    data = clean_frame(df, required=[player, games], numeric=[games] + list(stats or []))
    if stats is None:
        stats = [c for c in data.select_dtypes(include=[np.number]).columns if c != games]
    stats = list(stats)
    if not stats:
        raise ValueError("No numeric stat columns to analyse")

    data = data[data[games] >= min_games]
    data = per_game(data, stats, games)
    rates = [f"{s}_per_game" for s in stats]

    rep = Report(title="Sports statistics exploration")
    rep.tables["describe"] = describe_numeric(data, [games] + stats + rates)

    for rate in rates:
        leaders = top_n(data, rate, n=n_leaders)
        cols = [player] + ([team] if team and team in data.columns else []) + [games, rate]
        rep.tables[f"leaders_{rate}"] = leaders[cols].reset_index(drop=True)

    if team and team in data.columns:
        totals = data.groupby(team, observed=True)[stats + [games]].sum()
        totals["players"] = data.groupby(team, observed=True)[player].nunique()
        rep.tables["team_totals"] = totals.sort_values(stats[0], ascending=False)
        rep.tables[f"team_{rates[0]}"] = group_summary(data, team, rates[0])
        rep.figures["team_totals"] = plots.plot_bar(
            totals[stats[0]].sort_values(ascending=False),
            title=f"Total {stats[0]} by {team}", ylabel=stats[0])
        rep.figures[f"{rates[0]}_by_team"] = plots.plot_box_by_group(data, rates[0], team)

    rep.figures[f"{rates[0]}_hist"] = plots.plot_histogram(data, rates[0])
    if len(rates) >= 2:
        corr = correlation_table(data, rates)
        rep.tables["correlation"] = corr
        rep.figures["correlation"] = plots.plot_correlation(corr, title="Per-game stat correlation")
        rep.figures[f"{rates[1]}_vs_{rates[0]}"] = plots.plot_scatter_fit(data, rates[0], rates[1])

    logger.info("Sports report built on %d players, %d stats", len(data), len(stats))
    return rep
