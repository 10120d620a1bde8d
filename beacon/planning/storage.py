"""Beacon – Goal data-access providers.

The planning engine never performs I/O during an analysis. Goals (with
their contributions already attached) are fetched up front through a
:class:`GoalProvider`. This module defines that protocol plus two simple
implementations: an in-memory provider for tests and embedding, and a
JSON-file provider used by the CLI.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Protocol, Sequence

from beacon.core.logging import get_logger

from .inputs import coerce_goals
from .types import Goal


logger = get_logger(__name__)


class GoalProvider(Protocol):
    """Protocol for goal data-access layers.

    Implementations must return complete data: every goal with all of its
    contributions. The engine assumes the fetch is consistent and does
    not interleave further reads.
    """

    def load_goals(self, owner_id: str) -> List[Goal]:
        ...  # pragma: no cover - interface


@dataclass
class InMemoryGoalProvider:
    """Provider serving goals from an in-process mapping.

    Attributes:
        goals_by_owner: Mapping from owner id to goal records (``Goal``
            instances or raw mappings).
    """

    goals_by_owner: Dict[str, Sequence[Any]] = field(default_factory=dict)

    def load_goals(self, owner_id: str) -> List[Goal]:
        return coerce_goals(self.goals_by_owner.get(owner_id, ()))


@dataclass
class JsonGoalProvider:
    """Provider reading goals from a JSON document.

    The document is either a list of goal records (served for every
    owner) or an object mapping owner ids to such lists. The file is read
    on every call so edits are always picked up.
    """

    path: Path

    def _read(self) -> Any:
        with self.path.open("r", encoding="utf-8") as fh:
            return json.load(fh)

    def load_goals(self, owner_id: str) -> List[Goal]:
        payload = self._read()
        if isinstance(payload, list):
            records = payload
        elif isinstance(payload, dict):
            records = payload.get(owner_id, [])
            if not isinstance(records, list):
                raise ValueError(f"Goals for owner {owner_id!r} in {self.path} must be a list")
        else:
            raise ValueError(f"Unsupported goals document in {self.path}: expected a list or object")

        goals = coerce_goals(records)
        logger.info("Loaded %d goals for owner=%s from %s", len(goals), owner_id, self.path)
        return goals
