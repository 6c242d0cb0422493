"""Sampled AUC evaluation for recommenders."""

from .auc import evaluate, evaluate_recommendations
from .holdout import TestIndex, build_test_index, index_recommendations
from .models import EvaluationResult, RecommendedItem
from .recommender import (
    PopularityRecommender,
    Recommender,
    UnknownItemError,
    UnknownUserError,
)
from .sampling import (
    CatalogExhaustedError,
    EvaluationError,
    NoValidSamplesError,
)

__all__ = [
    "evaluate",
    "evaluate_recommendations",
    "TestIndex",
    "build_test_index",
    "index_recommendations",
    "EvaluationResult",
    "RecommendedItem",
    "PopularityRecommender",
    "Recommender",
    "UnknownItemError",
    "UnknownUserError",
    "CatalogExhaustedError",
    "EvaluationError",
    "NoValidSamplesError",
]
