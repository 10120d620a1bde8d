"""CLI to analyse a goal portfolio stored in a JSON file.

This script drives :class:`beacon.planning.PortfolioEngine` with a
:class:`beacon.planning.JsonGoalProvider` and prints the resulting
:class:`PortfolioAnalysis` as JSON on stdout.

Example::

    python -m beacon.scripts.analyze_portfolio \
        --goals goals.json \
        --capacity 2500 \
        --as-of 2025-01-15
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from beacon.core.config import get_config
from beacon.core.logging import get_logger
from beacon.planning import AnalysisConfig, JsonGoalProvider, PortfolioEngine, SavingsPoolStrategy


logger = get_logger(__name__)


def _parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Analyse a goal portfolio from a JSON file")
    parser.add_argument("--goals", required=True, type=Path, help="Path to the goals JSON file")
    parser.add_argument(
        "--capacity",
        type=float,
        default=None,
        help="Monthly savings capacity (default: DEFAULT_MONTHLY_CAPACITY)",
    )
    parser.add_argument("--as-of", default=None, help="Analysis date YYYY-MM-DD (default: today)")
    parser.add_argument("--owner", default="default", help="Owner id when the file maps owners to goals")
    parser.add_argument(
        "--pool-strategy",
        choices=[s.value for s in SavingsPoolStrategy],
        default=None,
        help="Savings pool strategy for conflict projection (default: SAVINGS_POOL_STRATEGY)",
    )
    parser.add_argument("--indent", type=int, default=2, help="JSON indentation (default: 2)")
    return parser.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    args = _parse_args(argv)
    settings = get_config()

    analysis_config = AnalysisConfig.from_settings(settings)
    if args.pool_strategy is not None:
        analysis_config = analysis_config.model_copy(
            update={"pool_strategy": SavingsPoolStrategy(args.pool_strategy)}
        )

    capacity = args.capacity if args.capacity is not None else settings.default_monthly_capacity
    now = (
        datetime.strptime(args.as_of, "%Y-%m-%d").date()
        if args.as_of
        else datetime.now().date()
    )

    engine = PortfolioEngine(provider=JsonGoalProvider(args.goals), config=analysis_config)
    try:
        analysis = engine.analyze(args.owner, capacity, now)
    except FileNotFoundError:
        logger.error("Goals file not found: %s", args.goals)
        return 1
    except ValueError as exc:
        # json.JSONDecodeError is a ValueError subclass.
        logger.error("Could not read goals from %s: %s", args.goals, exc)
        return 1

    json.dump(analysis.to_dict(), sys.stdout, indent=args.indent)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":  # pragma: no cover - manual CLI entry
    sys.exit(main())
