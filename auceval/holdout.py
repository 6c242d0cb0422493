"""Build the per-user index of held-out items that evaluation samples from."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Set, Tuple

from .models import RecommendedItem

__all__ = [
    "TestIndex",
    "build_test_index",
    "index_recommendations",
]

TestIndex = Mapping[int, frozenset]


def build_test_index(pairs: Iterable[Tuple[int, int]]) -> TestIndex:
    """Group ``(user_id, item_id)`` pairs into a read-only user -> item-set mapping.

    Duplicate pairs collapse into a single entry. Empty input yields an empty
    index.
    """
    grouped: Dict[int, Set[int]] = {}
    for user_id, item_id in pairs:
        grouped.setdefault(int(user_id), set()).add(int(item_id))
    return MappingProxyType({user_id: frozenset(items) for user_id, items in grouped.items()})


def index_recommendations(test_data: Mapping[int, Iterable[RecommendedItem]]) -> TestIndex:
    """Reduce raw per-user recommendations to a TestIndex.

    Users present in ``test_data`` with no items are kept with an empty set,
    which evaluation treats as zero work.
    """
    converted = {
        int(user_id): frozenset(int(item.item_id) for item in items)
        for user_id, items in test_data.items()
    }
    return MappingProxyType(converted)
