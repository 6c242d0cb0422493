"""Load interaction files and split them into training data and held-out items."""

from __future__ import annotations

import logging
import math
from pathlib import Path
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd

from .models import RecommendedItem

__all__ = [
    "INTERACTION_COLUMNS",
    "DATA_FILE_PATTERNS",
    "load_interactions",
    "split_holdout",
]

logger = logging.getLogger(__name__)

INTERACTION_COLUMNS = ["user_id", "item_id", "value"]
DATA_FILE_PATTERNS = ("*.csv", "*.csv.gz", "*.txt", "*.txt.gz")


def _data_files(directory: Path) -> List[Path]:
    files = {path for pattern in DATA_FILE_PATTERNS for path in directory.glob(pattern)}
    return sorted(path for path in files if path.is_file())


def load_interactions(directory: Path) -> pd.DataFrame:
    """Read every interaction file under ``directory`` into one frame.

    Files hold headerless ``user_id,item_id[,value]`` rows. A missing value
    counts as 1.0, and repeated ``(user_id, item_id)`` pairs are summed.
    """
    directory = Path(directory)
    if not directory.is_dir():
        raise FileNotFoundError(f"Test data directory not found: {directory}")

    files = _data_files(directory)
    if not files:
        raise FileNotFoundError(
            f"No interaction files matching {', '.join(DATA_FILE_PATTERNS)} in {directory}"
        )

    frames = []
    for path in files:
        if path.stat().st_size == 0:
            logger.warning(f"Skipping empty interaction file {path}")
            continue
        frame = pd.read_csv(path, header=None, names=INTERACTION_COLUMNS, comment="#")
        logger.info(f"Loaded {len(frame)} interactions from {path.name}")
        frames.append(frame)

    if not frames:
        return pd.DataFrame(
            {
                "user_id": pd.Series(dtype=np.int64),
                "item_id": pd.Series(dtype=np.int64),
                "value": pd.Series(dtype=np.float64),
            }
        )

    combined = pd.concat(frames, ignore_index=True)
    if combined[["user_id", "item_id"]].isna().any().any():
        raise ValueError(f"Interaction files in {directory} contain rows without user or item id")
    combined["user_id"] = combined["user_id"].astype(np.int64)
    combined["item_id"] = combined["item_id"].astype(np.int64)
    combined["value"] = combined["value"].fillna(1.0).astype(np.float64)
    return combined.groupby(["user_id", "item_id"], as_index=False, sort=False)["value"].sum()


def split_holdout(
    frame: pd.DataFrame,
    test_fraction: float = 0.1,
    *,
    by_value: bool = True,
    seed: int | None = None,
) -> Tuple[pd.DataFrame, Dict[int, List[RecommendedItem]]]:
    """Hold out a fraction of each user's items for evaluation.

    Users with fewer than two interactions stay entirely in training. Every
    other user holds out ``floor(n * test_fraction)`` items, at least one and
    always leaving one for training. With ``by_value`` the highest-valued items
    are held out; otherwise a random subset drawn with ``seed``.

    Returns
    -------
    Tuple[pd.DataFrame, Dict[int, List[RecommendedItem]]]
        training interactions, and held-out items keyed by user id
    """
    if not 0.0 < test_fraction < 1.0:
        raise ValueError(f"test_fraction must be in (0, 1), got {test_fraction}")

    rng = np.random.default_rng(seed)
    test_rows: List[int] = []
    test_data: Dict[int, List[RecommendedItem]] = {}

    for user_id, group in frame.groupby("user_id", sort=True):
        n_items = len(group)
        if n_items < 2:
            continue
        n_test = max(1, math.floor(n_items * test_fraction))
        if by_value:
            chosen = group.sort_values(["value", "item_id"], ascending=[False, True], kind="stable").head(n_test)
        else:
            chosen = group.iloc[rng.permutation(n_items)[:n_test]]
        test_rows.extend(chosen.index.tolist())
        test_data[int(user_id)] = [
            RecommendedItem(item_id=int(row.item_id), value=float(row.value))
            for row in chosen.itertuples(index=False)
        ]

    train = frame.drop(index=test_rows).reset_index(drop=True)
    logger.info(
        f"Split {len(frame)} interactions: train={len(train)} held_out={len(test_rows)} users={len(test_data)}"
    )
    return train, test_data
