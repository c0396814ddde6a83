from __future__ import annotations

from pathlib import Path

import pytest

from reqpatch.config import PatcherSettings, load_settings
from reqpatch.errors import ConfigError


def test_missing_implicit_config_uses_defaults(tmp_path: Path) -> None:
    settings = load_settings(tmp_path / "reqpatch.yaml")

    assert settings == PatcherSettings()
    assert settings.luau_root == "luau"
    assert settings.functions == ["sharedRequire"]


def test_functions_string_is_normalised(tmp_path: Path) -> None:
    path = tmp_path / "reqpatch.yaml"
    path.write_text("functions: 'require, a, b, a'\n", encoding="utf-8")

    settings = load_settings(path, explicit=True)

    assert settings.functions == ["a", "b"]


def test_non_mapping_config_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "reqpatch.yaml"
    path.write_text("- luau\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="mapping"):
        load_settings(path, explicit=True)


def test_invalid_yaml_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "reqpatch.yaml"
    path.write_text("functions: [unterminated\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse"):
        load_settings(path, explicit=True)


def test_merged_ignores_none_overrides() -> None:
    base = PatcherSettings(luau_root="vendor/luau", functions=["a"])

    merged = base.merged(luau_root=None, functions="b,c", dry_run=None)

    assert merged.luau_root == "vendor/luau"
    assert merged.functions == ["b", "c"]
    assert merged.dry_run is False


def test_invalid_function_name_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "reqpatch.yaml"
    path.write_text("functions:\n  - 'shared-require'\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Invalid function name"):
        load_settings(path, explicit=True)
