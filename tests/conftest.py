"""Pytest hooks and shared fixtures.

Disables the log file before any ``beacon`` module configures logging,
and provides builders for goals used across the unit and integration
suites.
"""

from __future__ import annotations

import os
from datetime import date
from typing import Optional, Sequence

import pytest

# Required before beacon.core.logging attaches handlers on first import.
os.environ.setdefault("LOG_FILE", "")

from beacon.planning import Contribution, Goal  # noqa: E402


def make_goal(
    goal_id: str,
    target_amount: float,
    target_date: Optional[date] = None,
    saved: Sequence[float] = (),
    title: Optional[str] = None,
    contributed_on: Optional[date] = None,
) -> Goal:
    """Build a Goal whose contributions are the ``saved`` amounts."""

    return Goal(
        id=goal_id,
        title=title or goal_id.title(),
        target_amount=target_amount,
        target_date=target_date,
        contributions=tuple(Contribution(amount=a, date=contributed_on) for a in saved),
    )


@pytest.fixture
def as_of() -> date:
    """Fixed analysis date shared by scenario tests."""

    return date(2025, 1, 15)


@pytest.fixture
def goal_factory():
    """Return :func:`make_goal` for tests that build their own portfolios."""

    return make_goal
