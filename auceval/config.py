"""Pydantic model for YAML-driven AUC evaluation runs."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field

CONFIG_SECTION = "auc_eval"


class AUCEvalConfig(BaseModel):
    """Overrides for the AUC evaluation CLI."""

    model_config = ConfigDict(extra="ignore")

    test_fraction: float | None = Field(
        default=None, gt=0.0, lt=1.0, description="Share of each user's items held out for evaluation."
    )
    random_split: bool | None = Field(
        default=None, description="Hold out a random subset instead of the highest-valued items."
    )
    workers: int | None = Field(default=None, ge=1, description="Worker threads; defaults to one per CPU.")
    seed: int | None = None
    progress_every: int | None = Field(
        default=None, ge=0, description="Log the running AUC every N users (0 disables)."
    )
    json_output: bool | None = None


def _load_payload(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file missing at {path}")
    with path.open("r", encoding="utf-8") as handle:
        payload = yaml.safe_load(handle) or {}
    if not isinstance(payload, dict):
        raise ValueError(f"Config payload in {path} must be a mapping")
    return payload


def load_eval_config(path: Path) -> AUCEvalConfig:
    """Load a YAML config describing an AUC evaluation run.

    The settings may sit at the top level or under an ``auc_eval`` section so a
    shared config file can carry them.
    """

    payload = _load_payload(path)
    section = payload.get(CONFIG_SECTION, payload)
    if not isinstance(section, dict):
        raise ValueError(f"{CONFIG_SECTION} section inside config must be a mapping")
    return AUCEvalConfig.model_validate(section)
