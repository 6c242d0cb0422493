from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from auceval.config import load_eval_config


def _write_yaml(path: Path, payload: str) -> Path:
    path.write_text(payload, encoding="utf-8")
    return path


def test_load_top_level_config(tmp_path: Path) -> None:
    cfg_path = _write_yaml(
        tmp_path / "eval.yaml",
        """
        workers: 2
        seed: 17
        test_fraction: 0.25
        unrelated_key: ignored
        """,
    )
    config = load_eval_config(cfg_path)
    assert config.workers == 2
    assert config.seed == 17
    assert config.test_fraction == 0.25
    assert config.model_dump(exclude_unset=True) == {"workers": 2, "seed": 17, "test_fraction": 0.25}


def test_load_nested_section(tmp_path: Path) -> None:
    cfg_path = _write_yaml(
        tmp_path / "shared.yaml",
        """
        auc_eval:
          random_split: true
          progress_every: 0
        other_tool:
          seed: 3
        """,
    )
    config = load_eval_config(cfg_path)
    assert config.random_split is True
    assert config.progress_every == 0
    assert config.seed is None


def test_missing_config_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_eval_config(tmp_path / "absent.yaml")


def test_non_mapping_config(tmp_path: Path) -> None:
    cfg_path = _write_yaml(tmp_path / "list.yaml", "- 1\n- 2\n")
    with pytest.raises(ValueError):
        load_eval_config(cfg_path)


def test_invalid_test_fraction(tmp_path: Path) -> None:
    cfg_path = _write_yaml(tmp_path / "bad.yaml", "test_fraction: 1.5\n")
    with pytest.raises(ValidationError):
        load_eval_config(cfg_path)
