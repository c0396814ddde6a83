"""YAML-backed settings for the patcher CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any, List

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .conditions import DEFAULT_FUNCTIONS, normalise_names
from .errors import ConfigError

DEFAULT_CONFIG_NAME = "reqpatch.yaml"
DEFAULT_LUAU_ROOT = "luau"


class PatcherSettings(BaseModel):
    """Validated patcher configuration."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    luau_root: str = DEFAULT_LUAU_ROOT
    functions: List[str] = Field(default_factory=lambda: list(DEFAULT_FUNCTIONS))
    dry_run: bool = False

    @field_validator("functions", mode="before")
    @classmethod
    def _split_functions(cls, value: Any) -> Any:
        if isinstance(value, (str, list, tuple)):
            return list(normalise_names(value))
        return value

    def merged(self, **overrides: Any) -> "PatcherSettings":
        """Return a copy with every non-``None`` override applied and validated."""
        payload = self.model_dump()
        payload.update({key: value for key, value in overrides.items() if value is not None})
        try:
            return PatcherSettings.model_validate(payload)
        except ValidationError as error:
            raise ConfigError(f"Invalid settings: {error}") from error


def load_settings(config_path: Path | None = None, *, explicit: bool = False) -> PatcherSettings:
    """Load settings from ``config_path`` (``reqpatch.yaml`` when omitted).

    A missing file is an error only when the caller named it explicitly.
    """
    path = Path(config_path) if config_path is not None else Path(DEFAULT_CONFIG_NAME)
    if not path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {path}", details={"path": path})
        return PatcherSettings()

    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle) or {}
    except yaml.YAMLError as error:
        raise ConfigError(f"Failed to parse config {path}: {error}", details={"path": path}) from error

    if not isinstance(data, dict):
        raise ConfigError("Configuration must be a mapping at the top level.", details={"path": path})

    try:
        return PatcherSettings.model_validate(data)
    except ValidationError as error:
        raise ConfigError(f"Invalid config {path}: {error}", details={"path": path}) from error
