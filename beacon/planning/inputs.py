"""Beacon – Input normalisation for the planning engine.

Goals usually reach the engine as decoded JSON records from a
data-access layer. This module turns such records into :class:`Goal`
values, correcting malformed fields to neutral defaults instead of
raising:

- non-numeric or non-finite amounts become ``0``;
- negative target amounts become ``0`` (the goal is then non-financial);
- missing or unparseable dates become ``None``.

Both camelCase keys (``targetAmount``, ``targetDate``) and snake_case
keys (``target_amount``, ``target_date``) are accepted. ``Goal``
instances pass through unchanged.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional

from beacon.core.logging import get_logger
from beacon.core.time import parse_date
from beacon.core.types import RawRecord

from .types import Contribution, Goal


logger = get_logger(__name__)

_ID_KEYS = ("id", "goal_id", "goalId")
_TITLE_KEYS = ("title", "name")
_TARGET_AMOUNT_KEYS = ("targetAmount", "target_amount", "budget_amount")
_TARGET_DATE_KEYS = ("targetDate", "target_date")
_CONTRIBUTION_DATE_KEYS = ("date", "created_at", "createdAt")


def _first(record: RawRecord, keys: Iterable[str]) -> Any:
    for key in keys:
        if key in record and record[key] is not None:
            return record[key]
    return None


def coerce_amount(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None`` if it is not one."""

    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(number):
        return None
    return number


def coerce_contribution(raw: Any, goal_id: str = "") -> Optional[Contribution]:
    """Normalise a raw contribution record.

    Returns ``None`` for records that are not mappings at all.
    """

    if isinstance(raw, Contribution):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Dropping non-mapping contribution for goal %s: %r", goal_id, raw)
        return None

    amount = coerce_amount(raw.get("amount"))
    if amount is None:
        logger.warning(
            "Contribution for goal %s has invalid amount %r; using 0",
            goal_id,
            raw.get("amount"),
        )
        amount = 0.0

    category = raw.get("category")
    return Contribution(
        amount=amount,
        date=parse_date(_first(raw, _CONTRIBUTION_DATE_KEYS)),
        category=str(category) if category is not None else None,
    )


def coerce_goal(raw: Any, index: int = 0) -> Optional[Goal]:
    """Normalise a raw goal record into a :class:`Goal`.

    Args:
        raw: A :class:`Goal` or a mapping describing one.
        index: Position of the record in its list, used to derive an id
            when the record has none.

    Returns:
        The normalised goal, or ``None`` when ``raw`` is not a mapping.
    """

    if isinstance(raw, Goal):
        return raw
    if not isinstance(raw, Mapping):
        logger.warning("Dropping non-mapping goal record at index %d: %r", index, raw)
        return None

    raw_id = _first(raw, _ID_KEYS)
    goal_id = str(raw_id) if raw_id is not None else f"goal-{index}"

    raw_title = _first(raw, _TITLE_KEYS)
    title = str(raw_title) if raw_title is not None else ""

    raw_target = _first(raw, _TARGET_AMOUNT_KEYS)
    target_amount = coerce_amount(raw_target)
    if target_amount is None:
        if raw_target is not None:
            logger.warning("Goal %s has invalid target amount %r; using 0", goal_id, raw_target)
        target_amount = 0.0
    elif target_amount < 0:
        logger.warning("Goal %s has negative target amount %r; using 0", goal_id, raw_target)
        target_amount = 0.0

    raw_date = _first(raw, _TARGET_DATE_KEYS)
    target_date = parse_date(raw_date)
    if raw_date is not None and target_date is None:
        logger.warning("Goal %s has unparseable target date %r; ignoring it", goal_id, raw_date)

    raw_contributions = raw.get("contributions") or ()
    if isinstance(raw_contributions, (str, bytes)) or not isinstance(raw_contributions, Iterable):
        logger.warning("Goal %s has malformed contributions %r; ignoring them", goal_id, raw_contributions)
        raw_contributions = ()

    contributions = tuple(
        c
        for c in (coerce_contribution(item, goal_id) for item in raw_contributions)
        if c is not None
    )

    return Goal(
        id=goal_id,
        title=title,
        target_amount=target_amount,
        target_date=target_date,
        contributions=contributions,
    )


def coerce_goals(raw_goals: Iterable[Any]) -> List[Goal]:
    """Normalise a sequence of raw goal records, dropping unusable entries."""

    goals: List[Goal] = []
    for index, raw in enumerate(raw_goals):
        goal = coerce_goal(raw, index)
        if goal is not None:
            goals.append(goal)
    return goals
