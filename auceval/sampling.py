"""Monte Carlo sampling primitives shared by the AUC worker pool.

Each worker owns a private ``numpy.random.Generator``. The only state shared
between workers is the :class:`WorkCursor` position and the
:class:`SampleCounter` totals; both guard their updates with a short lock.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import AbstractSet, FrozenSet, Iterable, Optional, Sequence, Tuple

import numpy as np

from .models import EvaluationResult
from .recommender import Recommender, UnknownItemError, UnknownUserError

__all__ = [
    "EvaluationError",
    "NoValidSamplesError",
    "CatalogExhaustedError",
    "Catalog",
    "WorkCursor",
    "SampleCounter",
    "draw_sample",
    "sample_user",
]


class EvaluationError(RuntimeError):
    """Raised when an evaluation run cannot produce a score."""


class NoValidSamplesError(EvaluationError):
    """Raised when every sample was discarded, so the AUC ratio is undefined."""


class CatalogExhaustedError(EvaluationError):
    """Raised when a user's held-out items leave no catalog item to compare against."""


@dataclass(frozen=True)
class Catalog:
    """Read-only item catalog shared by every worker."""
    ids: np.ndarray
    members: FrozenSet[int]

    @classmethod
    def from_ids(cls, item_ids: Iterable[int]) -> "Catalog":
        ids = np.asarray(list(item_ids), dtype=np.int64)
        ids.setflags(write=False)
        return cls(ids=ids, members=frozenset(int(item_id) for item_id in ids))

    def __len__(self) -> int:
        return int(self.ids.size)

    def count_outside(self, held_out: AbstractSet[int]) -> int:
        """Number of distinct catalog items not in ``held_out``."""
        overlap = sum(1 for item_id in held_out if item_id in self.members)
        return len(self.members) - overlap


class WorkCursor:
    """Hands out user ids one at a time to any number of concurrent workers."""

    def __init__(self, user_ids: Iterable[int]) -> None:
        self._user_ids: Tuple[int, ...] = tuple(user_ids)
        self._position = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._user_ids)

    @property
    def claimed(self) -> int:
        with self._lock:
            return self._position

    def claim_next(self) -> Optional[int]:
        """Return the next unclaimed user id, or ``None`` once every id was handed out."""
        with self._lock:
            if self._position >= len(self._user_ids):
                return None
            user_id = self._user_ids[self._position]
            self._position += 1
        return user_id


class SampleCounter:
    """Running ``correct``/``total`` tallies updated by every worker."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._correct = 0
        self._total = 0
        self._users = 0

    def record(self, correct: bool) -> None:
        with self._lock:
            self._total += 1
            if correct:
                self._correct += 1

    def finish_user(self) -> int:
        """Mark one user as fully processed and return the running user count."""
        with self._lock:
            self._users += 1
            return self._users

    def snapshot(self) -> Tuple[int, int]:
        """Consistent ``(correct, total)`` pair."""
        with self._lock:
            return self._correct, self._total

    @property
    def users(self) -> int:
        with self._lock:
            return self._users

    def ratio(self) -> Optional[float]:
        correct, total = self.snapshot()
        if total == 0:
            return None
        return correct / total

    def reduce(self) -> EvaluationResult:
        """Turn the final tallies into a result; call only after every worker has stopped."""
        correct, total = self.snapshot()
        if total == 0:
            raise NoValidSamplesError(
                f"No valid samples after processing {self.users} users; AUC is undefined"
            )
        return EvaluationResult(score=correct / total, correct=correct, total=total, users=self.users)


def draw_sample(
    user_id: int,
    held_out: Sequence[int],
    held_out_set: AbstractSet[int],
    catalog: Catalog,
    rng: np.random.Generator,
    recommender: Recommender,
) -> Optional[bool]:
    """Draw one relevant/alternative pair and compare their estimates.

    Returns ``True`` when the relevant item outscores the alternative, ``False``
    otherwise (ties included), and ``None`` when the recommender does not know
    the user or either item. The caller must ensure at least one catalog item
    lies outside ``held_out_set``.
    """
    relevant_id = int(held_out[rng.integers(len(held_out))])
    while True:
        alternative_id = int(catalog.ids[rng.integers(len(catalog))])
        if alternative_id not in held_out_set:
            break

    try:
        relevant_estimate = recommender.estimate(user_id, relevant_id)
        alternative_estimate = recommender.estimate(user_id, alternative_id)
    except (UnknownUserError, UnknownItemError):
        # user or item may only exist in the held-out split
        return None
    return relevant_estimate > alternative_estimate


def sample_user(
    user_id: int,
    held_out_set: AbstractSet[int],
    catalog: Catalog,
    rng: np.random.Generator,
    recommender: Recommender,
    counter: SampleCounter,
) -> int:
    """Run one sample attempt per held-out item of ``user_id``.

    Returns the number of attempts. Users without held-out items contribute
    nothing.
    """
    if not held_out_set:
        return 0
    if catalog.count_outside(held_out_set) == 0:
        raise CatalogExhaustedError(
            f"User {user_id} holds out all {len(catalog.members)} catalog items; "
            "no alternative item can be drawn"
        )

    held_out = sorted(held_out_set)
    for _ in range(len(held_out)):
        outcome = draw_sample(user_id, held_out, held_out_set, catalog, rng, recommender)
        if outcome is not None:
            counter.record(outcome)
    return len(held_out)
