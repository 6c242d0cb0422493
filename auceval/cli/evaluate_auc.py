"""Estimate sampled AUC for a popularity baseline over a directory of interaction files.

Example usage:
    python -m auceval.cli.evaluate_auc data/ratings --test-fraction 0.2 --seed 7
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import typer

from auceval.auc import DEFAULT_PROGRESS_EVERY, evaluate_recommendations
from auceval.config import load_eval_config
from auceval.data import load_interactions, split_holdout
from auceval.recommender import PopularityRecommender
from auceval.sampling import EvaluationError

logging.basicConfig(level=logging.INFO, format="%(message)s")

app = typer.Typer(help=__doc__)

# typer may ship its own click, so sources are matched by enum name
_DEFAULT_PARAMETER_SOURCES = {"DEFAULT", "DEFAULT_MAP"}


def _apply_config_overrides(
    ctx: typer.Context,
    cli_params: dict[str, Any],
    config_path: Path | None,
) -> dict[str, Any]:
    """Fill parameters left at their defaults from the YAML config."""

    if config_path is None:
        return cli_params

    config = load_eval_config(config_path)
    overrides = config.model_dump(exclude_unset=True)
    for name, value in overrides.items():
        if name not in cli_params:
            continue
        source = ctx.get_parameter_source(name)
        if source is not None and source.name in _DEFAULT_PARAMETER_SOURCES:
            cli_params[name] = value
    return cli_params


@app.command()
def main(
    ctx: typer.Context,
    data_dir: Path = typer.Argument(..., help="Directory of user_id,item_id[,value] interaction files."),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        help="Optional YAML config describing the evaluation run.",
    ),
    test_fraction: float = typer.Option(
        0.1,
        "--test-fraction",
        help="Share of each user's items held out for evaluation, strictly between 0 and 1.",
    ),
    random_split: bool = typer.Option(
        False,
        "--random-split",
        help="Hold out a random subset instead of each user's highest-valued items.",
    ),
    workers: int | None = typer.Option(None, "--workers", min=1, help="Worker threads (default: one per CPU)."),
    seed: int | None = typer.Option(None, "--seed", help="Seed for the split and for sampling."),
    progress_every: int = typer.Option(
        DEFAULT_PROGRESS_EVERY,
        "--progress-every",
        min=0,
        help="Log the running AUC every N users (0 disables).",
    ),
    json_output: bool = typer.Option(False, "--json", help="Print the result as JSON."),
) -> None:
    cli_params: dict[str, Any] = {
        "test_fraction": test_fraction,
        "random_split": random_split,
        "workers": workers,
        "seed": seed,
        "progress_every": progress_every,
        "json_output": json_output,
    }
    params = _apply_config_overrides(ctx, cli_params, config_path)
    if not 0.0 < params["test_fraction"] < 1.0:
        raise typer.BadParameter(
            f"must be strictly between 0 and 1, got {params['test_fraction']}",
            param_hint="--test-fraction",
        )

    interactions = load_interactions(data_dir)
    train, test_data = split_holdout(
        interactions,
        params["test_fraction"],
        by_value=not params["random_split"],
        seed=params["seed"],
    )
    recommender = PopularityRecommender.fit(train)

    try:
        result = evaluate_recommendations(
            recommender,
            test_data,
            workers=params["workers"],
            seed=params["seed"],
            progress_every=params["progress_every"],
        )
    except EvaluationError as exc:
        typer.echo(f"[auc-eval] {exc}", err=True)
        raise typer.Exit(code=1)

    if params["json_output"]:
        typer.echo(json.dumps(result.to_dict(), indent=2))
    else:
        typer.echo(str(result))


if __name__ == "__main__":
    app()
