"""
Headless duel runner.

Usage:
    duel-run --rounds 10 --seed 7 --output reports/duel.csv
    duel-run --map my_arena.csv --config overrides.json
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from duel_core.errors import DuelError

from .match import DEFAULT_DT, DEFAULT_MAX_TICKS, DuelArena
from .maps import load_arena
from .report import write_report
from .settings import load_overrides


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run FSM vs FuSM duel rounds")
    parser.add_argument("--rounds", type=int, default=10, help="Number of rounds")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for hit rolls")
    parser.add_argument("--max-ticks", type=int, default=DEFAULT_MAX_TICKS, help="Tick limit per round (draw after)")
    parser.add_argument("--dt", type=float, default=DEFAULT_DT, help="Simulated seconds per tick")
    parser.add_argument("--map", type=str, default=None, help="Arena layout (.csv or text); built-in arena if omitted")
    parser.add_argument("--config", type=str, default=None, help="JSON file with config overrides")
    parser.add_argument("--output", type=str, default=None, help="CSV report path")
    parser.add_argument("--log-level", type=str, default="WARNING", help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.rounds < 1 or args.max_ticks < 1 or args.dt <= 0:
        print("rounds and max-ticks must be at least 1 and dt positive", file=sys.stderr)
        return 2

    try:
        fsm_config, fuzzy_config = load_overrides(args.config).resolve()
        duel = DuelArena(load_arena(args.map), fsm_config, fuzzy_config, seed=args.seed, dt=args.dt)
    except (OSError, ValidationError, DuelError) as e:
        print(f"Cannot set up the duel: {e}", file=sys.stderr)
        return 2

    print("=" * 70)
    print("FSM vs FuSM DUEL")
    print("=" * 70)
    print(f"Rounds:     {args.rounds}")
    print(f"Seed:       {args.seed}")
    print(f"Tick:       {args.dt}s (limit {args.max_ticks})")
    print(f"Map:        {args.map or 'built-in'}")
    print("=" * 70)

    scoreboard = duel.run(args.rounds, max_ticks=args.max_ticks)

    for stats in duel.rounds:
        print(
            f"Round {stats.round_number:>3}: {stats.winner:<5} {stats.time_taken:7.1f}s  "
            f"FSM hits {stats.finite_bullets_hit}/{stats.finite_bullets_fired}  "
            f"FuSM hits {stats.fuzzy_bullets_hit}/{stats.fuzzy_bullets_fired}"
        )

    print("=" * 70)
    print(f"FSM Agent:  {scoreboard.fsm}")
    print(f"FuSM Agent: {scoreboard.fuzzy}")
    print(f"Draws:      {scoreboard.draws}")
    if args.output:
        path = write_report(args.output, duel.rounds)
        print(f"Report:     {path}")
    print("=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
