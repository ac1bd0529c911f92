"""Tests for configuration loading and pipeline policies."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from orcid_toolkit.config.policies import PipelinePolicy
from orcid_toolkit.config.settings import DEFAULT_CONFIG_DIR, Settings


def _write_config(directory: Path, name: str, payload: dict) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / name).write_text(yaml.safe_dump(payload), encoding="utf-8")


def test_policy_defaults() -> None:
    policy = PipelinePolicy()

    assert policy.batch_size == 256
    assert policy.queue_capacity == 8
    assert policy.record_suffix == ".xml"
    assert policy.effective_workers >= 1


@pytest.mark.parametrize("field", ["batch_size", "queue_capacity", "workers"])
def test_policy_rejects_non_positive_values(field: str) -> None:
    with pytest.raises(ValidationError):
        PipelinePolicy(**{field: 0})


def test_repository_defaults_load() -> None:
    settings = Settings(config_dir=DEFAULT_CONFIG_DIR, environment="production")

    assert settings.pipeline.batch_size == 256
    assert settings.log_level == "INFO"


def test_environment_file_overrides_default(tmp_path: Path) -> None:
    config_dir = tmp_path / "config"
    _write_config(config_dir, "default.yaml", {"log_level": "INFO", "pipeline": {"batch_size": 100}})
    _write_config(config_dir, "testing.yaml", {"pipeline": {"queue_capacity": 3}})

    settings = Settings(config_dir=config_dir, environment="testing")

    assert settings.pipeline.batch_size == 100
    assert settings.pipeline.queue_capacity == 3
    assert settings.environment == "testing"


def test_nested_environment_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_dir = tmp_path / "config"
    _write_config(config_dir, "default.yaml", {"pipeline": {"batch_size": 100}})
    monkeypatch.setenv("ORCID_TOOLKIT_SETTINGS__PIPELINE__BATCH_SIZE", "32")

    settings = Settings(config_dir=config_dir)

    assert settings.pipeline.batch_size == 32


def test_explicit_values_win(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORCID_TOOLKIT_SETTINGS__PIPELINE__BATCH_SIZE", "32")

    settings = Settings(config_dir=tmp_path, pipeline={"batch_size": 5})

    assert settings.pipeline.batch_size == 5


def test_with_pipeline_returns_updated_copy(test_settings: Settings) -> None:
    updated = test_settings.with_pipeline(batch_size=64, workers=None)

    assert updated.pipeline.batch_size == 64
    assert updated.pipeline.workers == test_settings.pipeline.workers
    assert test_settings.pipeline.batch_size == 2
    assert test_settings.with_pipeline() is test_settings


def test_with_pipeline_validates(test_settings: Settings) -> None:
    with pytest.raises(ValidationError):
        test_settings.with_pipeline(batch_size=-1)


def test_policy_rejects_unknown_keys() -> None:
    with pytest.raises(ValidationError):
        PipelinePolicy(batchsize=5)
