"""Configuration management for the ORCID toolkit."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Literal

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .policies import PipelinePolicy

PROJECT_ROOT = Path(__file__).resolve().parents[3]
DEFAULT_CONFIG_DIR = PROJECT_ROOT / "config"
ENV_OVERRIDE_PREFIX = "ORCID_TOOLKIT_SETTINGS__"


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries."""

    result = dict(base)
    for key, value in override.items():
        if (
            key in result
            and isinstance(result[key], dict)
            and isinstance(value, dict)
        ):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _apply_env_overrides(base: Dict[str, Any]) -> Dict[str, Any]:
    """Apply overrides from ORCID_TOOLKIT_SETTINGS__* environment variables."""

    result = dict(base)
    for key, value in os.environ.items():
        if not key.startswith(ENV_OVERRIDE_PREFIX):
            continue
        path = key[len(ENV_OVERRIDE_PREFIX) :].lower().split("__")
        cursor = result
        for part in path[:-1]:
            nested = cursor.get(part)
            if not isinstance(nested, dict):
                nested = {}
                cursor[part] = nested
            cursor = nested
        cursor[path[-1]] = value
    return result


class Settings(BaseSettings):
    """Primary configuration object for the toolkit.

    Precedence (highest first): explicit kwargs or CLI arguments, environment
    variables prefixed with ``ORCID_TOOLKIT_`` (handled by :class:`BaseSettings`),
    nested overrides via ``ORCID_TOOLKIT_SETTINGS__`` variables, environment-specific
    YAML (e.g. ``production.yaml``), the default YAML file, and finally the
    class defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="ORCID_TOOLKIT_",
        validate_assignment=True,
        extra="ignore",
    )

    environment: Literal["development", "testing", "production"] = Field(
        default="development",
        description="Active runtime environment",
    )
    config_dir: Path = Field(default=DEFAULT_CONFIG_DIR)
    pipeline: PipelinePolicy = Field(default_factory=PipelinePolicy)
    log_level: str = Field(default="INFO")
    log_file: Path | None = Field(
        default=None,
        description="Optional rotating log file in addition to stderr.",
    )

    @model_validator(mode="before")
    @classmethod
    def _bootstrap_from_files(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        """Load YAML files and merge with provided overrides."""

        config_dir = Path(values.get("config_dir") or DEFAULT_CONFIG_DIR)
        environment = values.get("environment") or os.getenv("ORCID_TOOLKIT_ENV", "development")
        base_config = _load_yaml_file(config_dir / "default.yaml")
        env_config = _load_yaml_file(config_dir / f"{environment}.yaml")
        merged = _deep_merge(base_config, env_config)
        hydrated = _apply_env_overrides(merged)
        combined = _deep_merge(hydrated, {k: v for k, v in values.items() if v is not None})
        combined.setdefault("environment", environment)
        return combined

    def with_pipeline(self, **changes: Any) -> "Settings":
        """Return a copy with selected pipeline policy fields replaced."""

        updates = {key: value for key, value in changes.items() if value is not None}
        if not updates:
            return self
        pipeline = PipelinePolicy.model_validate(
            {**self.pipeline.model_dump(), **updates}
        )
        return self.model_copy(update={"pipeline": pipeline})


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a singleton settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings", "PROJECT_ROOT", "DEFAULT_CONFIG_DIR"]
