"""Scoring oracle interface and a popularity baseline.

Evaluation only needs two things from a recommender: a preference estimate for
a ``(user, item)`` pair and the full item catalog. Anything implementing
:class:`Recommender` can be evaluated.
"""

from __future__ import annotations

import logging
from typing import Dict, FrozenSet, Protocol, Sequence

import numpy as np
import pandas as pd

__all__ = [
    "Recommender",
    "UnknownUserError",
    "UnknownItemError",
    "PopularityRecommender",
]

logger = logging.getLogger(__name__)


class UnknownUserError(KeyError):
    """Raised when the recommender has never seen the requested user."""


class UnknownItemError(KeyError):
    """Raised when the recommender has never seen the requested item."""


class Recommender(Protocol):
    """Read-only scoring interface used during evaluation.

    Implementations must be safe to call from several threads at once.
    """

    def estimate(self, user_id: int, item_id: int) -> float:
        ...

    def all_item_ids(self) -> Sequence[int]:
        ...


class PopularityRecommender:
    """Scores every item by its total interaction value in the training data.

    The estimate does not depend on the user beyond requiring that the user was
    seen during fitting, which keeps the unknown-user path identical to a
    personalized model.
    """

    def __init__(self, item_scores: Dict[int, float], known_users: FrozenSet[int]) -> None:
        self._item_scores = dict(item_scores)
        self._known_users = frozenset(known_users)
        self._item_ids = np.fromiter(self._item_scores.keys(), dtype=np.int64, count=len(self._item_scores))

    @classmethod
    def fit(cls, frame: pd.DataFrame) -> "PopularityRecommender":
        """Fit from an interaction frame with ``user_id``, ``item_id`` and ``value`` columns."""
        missing = {"user_id", "item_id", "value"} - set(frame.columns)
        if missing:
            raise ValueError(f"Interaction frame missing columns: {sorted(missing)}")
        totals = frame.groupby("item_id", sort=True)["value"].sum()
        item_scores = {int(item_id): float(score) for item_id, score in totals.items()}
        known_users = frozenset(int(user_id) for user_id in frame["user_id"].unique())
        logger.info(f"Fitted popularity baseline on {len(frame)} rows: users={len(known_users)} items={len(item_scores)}")
        return cls(item_scores, known_users)

    def estimate(self, user_id: int, item_id: int) -> float:
        if user_id not in self._known_users:
            raise UnknownUserError(user_id)
        try:
            return self._item_scores[item_id]
        except KeyError:
            raise UnknownItemError(item_id) from None

    def all_item_ids(self) -> Sequence[int]:
        return self._item_ids
