# src/blockflow/core/config.py
"""Configuration schema and loading for blockflow.

A pipeline file is YAML holding the pipeline definition plus runtime
settings. Loading precedence:
1. Environment variables (BLOCKFLOW_*) - highest priority
2. Config file
3. Defaults from the Pydantic schema - lowest priority

Nested keys use a double underscore: BLOCKFLOW_RUNNER__MAX_CONCURRENCY=8.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field

from blockflow.contracts.pipeline import PipelineDefinition
from blockflow.core.ingestion.http import DEFAULT_TIMEOUT_MS, MAX_TIMEOUT_MS, MIN_TIMEOUT_MS


class RunnerSettings(BaseModel):
    """Scheduling bounds for the pipeline runner."""

    model_config = {"frozen": True, "extra": "forbid"}

    max_concurrency: int = Field(default=4, ge=1, description="Nodes executing at the same time")
    node_timeout_ms: int = Field(default=30_000, ge=1, description="Per-node execution bound")


class OffloadSettings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    enabled: bool = False
    max_workers: int = Field(default=1, ge=1)
    progress_interval: int = Field(default=1000, ge=1, description="Rows between progress messages")


class HttpSettings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    default_timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=MIN_TIMEOUT_MS, le=MAX_TIMEOUT_MS)


class LoggingSettings(BaseModel):
    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_output: bool = False


class BlockflowSettings(BaseModel):
    """Top-level configuration: the pipeline and how to run it.

    Settings sections are frozen; the pipeline definition is not, because
    the runner records node status on it.
    """

    model_config = {"extra": "forbid"}

    pipeline: PipelineDefinition = Field(default_factory=PipelineDefinition)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    offload: OffloadSettings = Field(default_factory=OffloadSettings)
    http: HttpSettings = Field(default_factory=HttpSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


# ${VAR} or ${VAR:-default}
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} in string values.

    Unset variables without a default are left as written.
    """

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        if match.group(2) is not None:
            return match.group(2)
        return match.group(0)

    def expand(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR_PATTERN.sub(replacer, value)
        if isinstance(value, dict):
            return {k: expand(v) for k, v in value.items()}
        if isinstance(value, list):
            return [expand(item) for item in value]
        return value

    return {k: expand(v) for k, v in config.items()}


def load_settings(config_path: Path) -> BlockflowSettings:
    """Load settings from a YAML file with environment variable overrides.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        pydantic.ValidationError: If the configuration is invalid.
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files.
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="BLOCKFLOW",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf upper-cases top-level keys and adds its own bookkeeping keys.
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    return BlockflowSettings(**_expand_env_vars(raw_config))
