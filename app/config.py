from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import DEFAULT_COLOR, DEFAULT_FONT_SIZE, normalize_hex_color

DEFAULT_CONFIG_PATH = Path("config/editor.yaml")
CONFIG_PATH_ENV = "OVL_CONFIG_PATH"


class EditorSettings(BaseModel):
    title: str = "Offer Template Editor"
    data_dir: Path = Path("data/templates")
    history_limit: int = Field(default=50, ge=1)
    snap_threshold: float = Field(default=5.0, ge=0)
    duplicate_offset: float = 20.0
    default_font_size: float = Field(default=DEFAULT_FONT_SIZE, gt=0)
    default_color: str = DEFAULT_COLOR
    strict_integrity: bool = True
    measure_text_with_fonts: bool = False
    log_level: str = "INFO"

    @field_validator("default_color", mode="before")
    @classmethod
    def normalize_default_color(cls, value: object) -> str:
        return normalize_hex_color(str(value or DEFAULT_COLOR))

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        level = str(value or "INFO").upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"Unknown log level: {value}"
            raise ValueError(msg)
        return level


class ConfigFileNotFoundError(FileNotFoundError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Config file not found: {path}")


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="OVL_", env_nested_delimiter="__")

    editor: EditorSettings = EditorSettings()

    _config_file: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # YAML has the lowest priority; OVL_ variables override it.
        if cls._config_file is None:
            return init_settings, env_settings, dotenv_settings, file_secret_settings
        yaml_settings = YamlConfigSettingsSource(settings_cls, yaml_file=cls._config_file)
        return init_settings, env_settings, dotenv_settings, file_secret_settings, yaml_settings


def resolve_config_path(config_path: Path | None = None) -> Path | None:
    """Explicit path, then ``OVL_CONFIG_PATH``, then ``config/editor.yaml`` when present."""
    if config_path is None and os.getenv(CONFIG_PATH_ENV):
        config_path = Path(os.environ[CONFIG_PATH_ENV])
    if config_path is None:
        return DEFAULT_CONFIG_PATH if DEFAULT_CONFIG_PATH.exists() else None
    if not config_path.exists():
        raise ConfigFileNotFoundError(config_path)
    return config_path


def load_settings(config_path: Path | None = None) -> AppSettings:
    previous = AppSettings._config_file
    AppSettings._config_file = resolve_config_path(config_path)
    try:
        return AppSettings()
    finally:
        AppSettings._config_file = previous


def configure_logging(settings: AppSettings) -> None:
    logging.basicConfig(
        level=settings.editor.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
