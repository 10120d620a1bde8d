"""Beacon – Recent contribution load.

Summarises how much was contributed across all goals in each of the last
``history_months`` calendar months (the current month included) and how
that compares to monthly capacity. Months whose contributions exceed
``history_conflict_ratio`` times capacity are flagged: the declared
capacity is probably not what the household really saves.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import List, Sequence

import numpy as np

from beacon.core.time import add_months, calendar_months_between, month_key, month_start

from .config import AnalysisConfig
from .types import ContributionMonth, Goal


def build_contribution_history(
    goals: Sequence[Goal],
    now: date | datetime,
    capacity: float,
    config: AnalysisConfig | None = None,
) -> List[ContributionMonth]:
    """Return per-month contribution totals, oldest month first.

    Contributions without a date, dated in the future, or older than the
    window are ignored.
    """

    config = config or AnalysisConfig()
    window = config.history_months
    current = month_start(now)

    indices: List[int] = []
    amounts: List[float] = []
    for goal in goals:
        for contribution in goal.contributions:
            if contribution.date is None:
                continue
            offset = calendar_months_between(contribution.date, current)
            if 0 <= offset < window:
                amount = float(contribution.amount)
                indices.append(window - 1 - offset)
                amounts.append(amount if math.isfinite(amount) else 0.0)

    totals = np.zeros(window, dtype=float)
    if indices:
        np.add.at(totals, np.asarray(indices, dtype=int), np.asarray(amounts, dtype=float))

    history: List[ContributionMonth] = []
    for i, total in enumerate(totals.tolist()):
        month = add_months(current, i - (window - 1))
        if capacity > 0:
            load = min(100.0, max(0.0, total) / capacity * 100.0)
        else:
            load = 100.0 if total > 0 else 0.0
        history.append(
            ContributionMonth(
                month_key=month_key(month),
                month=month,
                total_contributed=total,
                load_percent=load,
                has_conflict=total > capacity * config.history_conflict_ratio,
            )
        )
    return history
