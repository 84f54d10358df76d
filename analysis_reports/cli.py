"""
analysis-reports — command line entry point.

    analysis-reports factory --budget 1200 --max-spares 6 --trials 300
    analysis-reports rental listings.csv --group neighbourhood --features bedrooms bathrooms
    analysis-reports sports players.csv --stats points rebounds assists

Notebook-safe: ignores Jupyter's injected args.
"""

from __future__ import annotations

import sys
import json
import logging
import argparse
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from analysis_reports.log import setup_logging
from analysis_reports.data.loading import load_csv
from analysis_reports.simulation.factory_grid import (
    MAX_REPAIRMEN, MAX_SPARES, N_TRIALS, OBJECTIVES, params_from_dict,
)

logger = logging.getLogger("analysis_reports")


def _factory_overrides(args) -> Dict[str, Any]:
    cfg: Dict[str, Any] = {}
    if args.config:
        path = Path(args.config)
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")
        with path.open() as fh:
            cfg.update(json.load(fh))
    flags = dict(
        num_operating=args.machines,
        mean_life=args.mean_life,
        mean_repair=args.mean_repair,
        swap_time=args.swap_time,
        horizon=args.horizon,
        life_dist=args.life_dist,
        spare_cost=args.spare_cost,
        repairman_cost=args.repairman_cost,
        budget=args.budget,
    )
    # flags left unset must not mask values from the config file
    cfg.update({k: v for k, v in flags.items() if v is not None})
    return cfg


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="analysis-reports",
                                     description="Data analysis and simulation reports")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    parser.add_argument("--out", help="directory for CSV tables and PNG charts")
    sub = parser.add_subparsers(dest="command", required=True)

    f = sub.add_parser("factory", help="spares x repairmen reliability sweep")
    f.add_argument("--config", help="JSON file with factory parameters")
    f.add_argument("--machines", type=int, help="machines that must be operating")
    f.add_argument("--mean-life", type=float)
    f.add_argument("--mean-repair", type=float)
    f.add_argument("--swap-time", type=float)
    f.add_argument("--horizon", type=float)
    f.add_argument("--life-dist", choices=["exponential", "weibull"])
    f.add_argument("--spare-cost", type=float)
    f.add_argument("--repairman-cost", type=float)
    f.add_argument("--budget", type=float)
    f.add_argument("--max-spares", type=int, default=MAX_SPARES)
    f.add_argument("--max-repairmen", type=int, default=MAX_REPAIRMEN)
    f.add_argument("--trials", type=int, default=N_TRIALS)
    f.add_argument("--objective", choices=sorted(OBJECTIVES), default="crash_time")
    f.add_argument("--seed", type=int, default=0)

    r = sub.add_parser("rental", help="rental price exploration")
    r.add_argument("source", help="CSV path or URL")
    r.add_argument("--price", default="price")
    r.add_argument("--group", default="neighbourhood")
    r.add_argument("--bedrooms", default="bedrooms")
    r.add_argument("--features", nargs="*", default=None)
    r.add_argument("--seed", type=int, default=0)

    s = sub.add_parser("sports", help="sports statistics exploration")
    s.add_argument("source", help="CSV path or URL")
    s.add_argument("--player", default="player")
    s.add_argument("--team", default="team")
    s.add_argument("--games", default="games")
    s.add_argument("--stats", nargs="*", default=None)
    s.add_argument("--min-games", type=int, default=1)
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args, _unknown = parser.parse_known_args(args=argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    try:
        if args.command == "factory":
            from analysis_reports.reports.factory import factory_report
            params = params_from_dict(_factory_overrides(args))
            rep = factory_report(params, args.max_spares, args.max_repairmen, args.trials,
                                 objective=args.objective, base_seed=args.seed, verbose=True)
        elif args.command == "rental":
            from analysis_reports.reports.rental import rental_report
            rep = rental_report(load_csv(args.source), price=args.price, group=args.group,
                                bedrooms=args.bedrooms, features=args.features, seed=args.seed)
            rep.print()
        else:
            from analysis_reports.reports.sports import sports_report
            rep = sports_report(load_csv(args.source), player=args.player, team=args.team,
                                games=args.games, stats=args.stats, min_games=args.min_games)
            rep.print()
    except (ValueError, KeyError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 2

    if args.out:
        out = rep.save(args.out)
        logger.info("Report written to %s", out)
    rep.close()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> None:
    try:
        sys.exit(run_cli(argv))
    except KeyboardInterrupt:
        print("\nStopped by user.")
        sys.exit(130)


if __name__ == "__main__":
    if "ipykernel" in sys.modules:
        main([])
    else:
        main(None)
