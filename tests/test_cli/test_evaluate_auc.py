from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from auceval.cli import evaluate_auc


def _write_interactions(root: Path) -> Path:
    # every user rates items 1-5, loves item == user_id and likes the next item, so
    # held-out items never leave an item missing from training
    lines = []
    for user_id in range(1, 5):
        for item_id in range(1, 6):
            if item_id == user_id:
                value = 10.0
            elif item_id == user_id % 5 + 1:
                value = 5.0
            else:
                value = 1.0
            lines.append(f"{user_id},{item_id},{value}")
    data_dir = root / "ratings"
    data_dir.mkdir()
    (data_dir / "part-0.csv").write_text("\n".join(lines) + "\n", encoding="utf-8")
    return data_dir


def test_cli_prints_json_result(tmp_path: Path) -> None:
    runner = CliRunner()
    data_dir = _write_interactions(tmp_path)

    result = runner.invoke(
        evaluate_auc.app,
        [str(data_dir), "--test-fraction", "0.2", "--workers", "1", "--seed", "3", "--json"],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["total"] == 4
    assert payload["users"] == 4
    assert 0.0 <= payload["score"] <= 1.0


def test_cli_plain_output(tmp_path: Path) -> None:
    runner = CliRunner()
    data_dir = _write_interactions(tmp_path)

    result = runner.invoke(evaluate_auc.app, [str(data_dir), "--test-fraction", "0.2", "--seed", "1"])

    assert result.exit_code == 0, result.output
    assert result.stdout.startswith("AUC: ")


def test_cli_config_fills_defaults(tmp_path: Path) -> None:
    runner = CliRunner()
    data_dir = _write_interactions(tmp_path)
    cfg_path = tmp_path / "eval.yaml"
    cfg_path.write_text("auc_eval:\n  test_fraction: 0.2\n  workers: 2\n  json_output: true\n", encoding="utf-8")

    result = runner.invoke(evaluate_auc.app, [str(data_dir), "--config", str(cfg_path), "--seed", "5"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["total"] == 4


def test_cli_exits_when_nothing_to_evaluate(tmp_path: Path) -> None:
    runner = CliRunner()
    data_dir = tmp_path / "sparse"
    data_dir.mkdir()
    (data_dir / "part-0.csv").write_text("1,1\n2,2\n3,3\n", encoding="utf-8")

    result = runner.invoke(evaluate_auc.app, [str(data_dir)])

    assert result.exit_code == 1


def test_cli_flags_win_over_config(tmp_path: Path) -> None:
    runner = CliRunner()
    data_dir = _write_interactions(tmp_path)
    cfg_path = tmp_path / "eval.yaml"
    cfg_path.write_text("test_fraction: 0.5\nworkers: 1\njson_output: true\n", encoding="utf-8")

    from_config = runner.invoke(evaluate_auc.app, [str(data_dir), "--config", str(cfg_path), "--seed", "2"])
    from_flag = runner.invoke(
        evaluate_auc.app,
        [str(data_dir), "--config", str(cfg_path), "--seed", "2", "--test-fraction", "0.2"],
    )

    assert from_config.exit_code == 0, from_config.output
    assert from_flag.exit_code == 0, from_flag.output
    # two of five items held out per user from the config, one from the flag
    assert json.loads(from_config.stdout)["total"] == 8
    assert json.loads(from_flag.stdout)["total"] == 4


@pytest.mark.parametrize("fraction", ["0.0", "1.0"])
def test_cli_rejects_test_fraction_bounds(tmp_path: Path, fraction: str) -> None:
    runner = CliRunner()
    data_dir = _write_interactions(tmp_path)

    result = runner.invoke(evaluate_auc.app, [str(data_dir), "--test-fraction", fraction])

    assert result.exit_code == 2
    assert not isinstance(result.exception, ValueError)
