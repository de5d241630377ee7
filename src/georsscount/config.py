"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Constructor arguments  (the CLI passes its flags this way)
  2. Environment variables  (GEORSSCOUNT__JOB__WORKERS=4)
  3. georsscount.yaml       (searched in cwd, then platform config dir)
  4. Hardcoded defaults

The config file is optional; every field has a default.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_CONFIG_DIR = platformdirs.user_config_dir("georsscount")


def _find_config_file() -> str | None:
    """Return the path of the first georsscount.yaml found, or None."""
    candidates = [
        Path("georsscount.yaml"),
        Path(_DEFAULT_CONFIG_DIR) / "georsscount.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ScanSettings(BaseModel):
    # Parse events allowed before giving up on namespace discovery
    namespace_event_limit: int = Field(default=100, ge=1)
    chunk_size: int = Field(default=65536, ge=1)
    geo_marker: str = "georss"


class JobSettings(BaseModel):
    workers: int = Field(default=1, ge=1)


class OutputSettings(BaseModel):
    path: str = "-"  # "-" writes to stdout


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: GEORSSCOUNT__SCAN__CHUNK_SIZE=4096
        env_prefix="GEORSSCOUNT__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    scan: ScanSettings = ScanSettings()
    job: JobSettings = JobSettings()
    output: OutputSettings = OutputSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
            # no dotenv or file secrets
        )
