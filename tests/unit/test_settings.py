from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from pydantic import ValidationError

from pdfreshape.exceptions import SettingsError
from pdfreshape.settings import BYTES_PER_MB, Settings, ensure_env_file_exists, get_settings
from pdfreshape.typing.enums import CompressionMode, CompressionPreset

if TYPE_CHECKING:
    from pathlib import Path


def test_defaults() -> None:
    settings = Settings(_env_file=None)

    assert settings.project_name == "pdfreshape"
    assert settings.blank_variance_threshold == 0.01
    assert settings.compression_mode == CompressionMode.BITMAP
    assert settings.compression_preset == CompressionPreset.QUALITY_FIRST
    assert settings.split_target_bytes == BYTES_PER_MB


def test_environment_overrides(monkeypatch) -> None:
    monkeypatch.setenv("SPLIT_TARGET_MB", "2.5")
    monkeypatch.setenv("COMPRESSION_PRESET", "high-strength")
    monkeypatch.setenv("COMPRESSION_MODE", "vector")

    settings = Settings(_env_file=None)

    assert settings.split_target_bytes == int(2.5 * BYTES_PER_MB)
    assert settings.compression_preset == CompressionPreset.HIGH_STRENGTH
    assert settings.compression_mode == CompressionMode.VECTOR


def test_blank_threshold_range_is_enforced(monkeypatch) -> None:
    monkeypatch.setenv("BLANK_VARIANCE_THRESHOLD", "0.5")

    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_get_settings_wraps_validation_errors(monkeypatch) -> None:
    monkeypatch.setenv("SPLIT_TARGET_MB", "0")
    get_settings.cache_clear()
    try:
        with pytest.raises(SettingsError):
            get_settings()
    finally:
        get_settings.cache_clear()


def test_ensure_env_file_exists_copies_template(tmp_path: Path) -> None:
    template = tmp_path / ".env.template"
    template.write_text("LOG_LEVEL=DEBUG\n", encoding="utf-8")
    env = tmp_path / ".env"

    ensure_env_file_exists(env_path=env, template_path=template)

    assert env.read_text(encoding="utf-8") == "LOG_LEVEL=DEBUG\n"


def test_ensure_env_file_exists_keeps_existing_file(tmp_path: Path) -> None:
    template = tmp_path / ".env.template"
    template.write_text("LOG_LEVEL=DEBUG\n", encoding="utf-8")
    env = tmp_path / ".env"
    env.write_text("LOG_LEVEL=INFO\n", encoding="utf-8")

    ensure_env_file_exists(env_path=env, template_path=template)

    assert env.read_text(encoding="utf-8") == "LOG_LEVEL=INFO\n"
