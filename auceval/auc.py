"""Sampled AUC evaluation over a fixed worker pool.

AUC here is the probability that a random held-out item is scored higher than
a random non-held-out catalog item for the same user. It is estimated by
drawing one such pair per held-out item and counting how often the held-out
item wins.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import CancelledError, ThreadPoolExecutor
from typing import Any, Iterable, Mapping

import numpy as np

from .holdout import TestIndex, index_recommendations
from .models import EvaluationResult, RecommendedItem
from .recommender import Recommender
from .sampling import (
    Catalog,
    EvaluationError,
    SampleCounter,
    WorkCursor,
    sample_user,
)

__all__ = [
    "evaluate",
    "evaluate_recommendations",
]

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_EVERY = 1000


def _resolve_workers(requested: int | str | None) -> int:
    """Translate a worker request into a concrete pool size."""
    if isinstance(requested, int):
        return max(1, requested)
    if isinstance(requested, str) and requested.lower() != "auto":
        raise ValueError("worker hint must be 'auto' or a positive integer")
    return max(1, os.cpu_count() or 1)


def _auc_worker(
    recommender: Recommender,
    test_index: TestIndex,
    catalog: Catalog,
    cursor: WorkCursor,
    counter: SampleCounter,
    rng: np.random.Generator,
    progress_every: int,
) -> int:
    attempts = 0
    while True:
        user_id = cursor.claim_next()
        if user_id is None:
            return attempts
        attempts += sample_user(user_id, test_index[user_id], catalog, rng, recommender, counter)
        users_done = counter.finish_user()
        if progress_every > 0 and users_done % progress_every == 0:
            ratio = counter.ratio()
            if ratio is not None:
                logger.info(f"AUC: {ratio:.6f} after {users_done}/{len(cursor)} users")


def evaluate(
    recommender: Recommender,
    test_index: TestIndex,
    *,
    workers: int | str | None = None,
    seed: int | None = None,
    progress_every: int = DEFAULT_PROGRESS_EVERY,
) -> EvaluationResult:
    """Estimate AUC for ``recommender`` against held-out items in ``test_index``.

    Parameters
    ----------
    recommender : Recommender
        Scoring oracle; must tolerate concurrent ``estimate`` calls.
    test_index : TestIndex
        Mapping of user id to that user's held-out item ids.
    workers : int | str | None
        Pool size. ``None`` or ``"auto"`` uses one worker per CPU.
    seed : int | None
        Root seed; each worker gets an independent stream spawned from it.
        With a single worker the run is fully reproducible.
    progress_every : int
        Log the running ratio every N processed users (0 disables).

    Returns
    -------
    EvaluationResult

    Raises
    ------
    EvaluationError
        When any worker failed. Every worker is allowed to finish first, then
        the first failure in submission order is raised.
    NoValidSamplesError
        When no sample produced a comparison.
    CatalogExhaustedError
        When some user's held-out items cover the whole catalog.
    """
    catalog = Catalog.from_ids(recommender.all_item_ids())
    cursor = WorkCursor(test_index.keys())
    counter = SampleCounter()
    n_workers = _resolve_workers(workers)
    streams = np.random.SeedSequence(seed).spawn(n_workers)

    logger.info(
        f"Evaluating AUC: users={len(cursor)} catalog={len(catalog)} workers={n_workers}"
    )

    with ThreadPoolExecutor(max_workers=n_workers, thread_name_prefix="auc-eval") as executor:
        futures = [
            executor.submit(
                _auc_worker,
                recommender,
                test_index,
                catalog,
                cursor,
                counter,
                np.random.default_rng(stream),
                progress_every,
            )
            for stream in streams
        ]
    # leaving the executor block joins every worker before any failure is reported

    for future in futures:
        try:
            future.result()
        except CancelledError as exc:
            raise EvaluationError("AUC worker was cancelled before finishing") from exc
        except EvaluationError:
            raise
        except Exception as exc:
            raise EvaluationError(f"AUC worker failed: {exc!r}") from exc

    result = counter.reduce()
    logger.info(f"AUC: {result.score:.6f} ({result.correct}/{result.total} samples)")
    return result


def evaluate_recommendations(
    recommender: Recommender,
    test_data: Mapping[int, Iterable[RecommendedItem]],
    **kwargs: Any,
) -> EvaluationResult:
    """Evaluate from raw per-user held-out recommendations."""
    return evaluate(recommender, index_recommendations(test_data), **kwargs)
