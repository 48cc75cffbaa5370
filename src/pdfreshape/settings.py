"""Runtime settings loaded from `.env` and environment variables."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pdfreshape.exceptions import SettingsError
from pdfreshape.typing.enums import CompressionMode, CompressionPreset

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


class Settings(BaseSettings):
    """Package settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "pdfreshape"
    app_env: str = Field(
        default="dev",
        validation_alias="APP_ENV",
        description="Application environment, e.g. 'dev', 'prod'.",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Logging level, e.g. 'INFO', 'DEBUG'.",
    )
    log_json: bool = Field(
        default=True,
        validation_alias="LOG_JSON",
        description="Enable JSON formatted logs.",
    )
    log_file: str | None = Field(
        default=None,
        validation_alias="LOG_FILE",
        description="File path for log output.",
    )

    results_dir: str = Field(
        default="results",
        validation_alias="RESULTS_DIR",
        description="Directory to store output documents.",
    )
    blank_variance_threshold: float = Field(
        default=0.01,
        ge=0.001,
        le=0.1,
        validation_alias="BLANK_VARIANCE_THRESHOLD",
        description="Blank-page sensitivity; lower is stricter.",
    )
    compression_mode: CompressionMode = Field(
        default=CompressionMode.BITMAP,
        validation_alias="COMPRESSION_MODE",
        description="Default compression strategy.",
    )
    compression_preset: CompressionPreset = Field(
        default=CompressionPreset.QUALITY_FIRST,
        validation_alias="COMPRESSION_PRESET",
        description="Default bitmap compression preset.",
    )
    optimize_objects: bool = Field(
        default=True,
        validation_alias="OPTIMIZE_OBJECTS",
        description="Serialize outputs with shared-object deduplication.",
    )
    split_target_mb: float = Field(
        default=1.0,
        gt=0,
        validation_alias="SPLIT_TARGET_MB",
        description="Default byte budget per part for size splitting, in MiB.",
    )

    @property
    def split_target_bytes(self) -> int:
        """Return the default split budget in bytes."""
        return int(self.split_target_mb * BYTES_PER_MB)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance.

    Raises:
        SettingsError: If settings cannot be loaded or validated.

    Returns:
        Settings: The loaded settings instance.
    """
    try:
        return Settings()
    except Exception as exc:
        if _is_missing_settings_error(exc):
            ensure_env_file_exists()
            try:
                return Settings()
            except Exception as retry_exc:
                raise SettingsError(exc=retry_exc) from retry_exc
        raise SettingsError(exc=exc) from exc


def ensure_env_file_exists(
    *,
    env_path: Path = Path(".env"),
    template_path: Path = Path(".env.template"),
) -> None:
    """Create `.env` from template when missing.

    Args:
        env_path (Path): Target environment file path.
        template_path (Path): Template file path.
    """
    if env_path.exists() or not template_path.exists():
        return
    env_path.write_text(template_path.read_text(encoding="utf-8"), encoding="utf-8")
    logger.info(
        "Created environment file from template",
        extra={"env_path": str(env_path), "template_path": str(template_path)},
    )


def _is_missing_settings_error(exc: Exception) -> bool:
    """Return whether the settings failure is due to missing values.

    Args:
        exc (Exception): Caught settings initialization error.

    Returns:
        bool: True when the error represents missing settings values.
    """
    if not isinstance(exc, ValidationError):
        return False
    return any(error.get("type") == "missing" for error in exc.errors())
