"""Data models for AUC evaluation."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RecommendedItem:
    """Single held-out item for a user, with the preference value it was logged with."""
    item_id: int
    value: float = 1.0


@dataclass(frozen=True)
class EvaluationResult:
    """Final AUC estimate for one evaluation run."""
    score: float
    correct: int
    total: int
    users: int

    def __post_init__(self):
        if self.total <= 0:
            raise ValueError("EvaluationResult requires at least one valid sample")
        if not 0 <= self.correct <= self.total:
            raise ValueError("correct must lie between 0 and total")

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "score": round(self.score, 6),
            "correct": self.correct,
            "total": self.total,
            "users": self.users,
        }

    def __str__(self) -> str:
        return f"AUC: {self.score:.6f} ({self.correct}/{self.total} samples, {self.users} users)"
