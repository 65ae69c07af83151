"""Configuration management for termrelay.

Loads settings from a YAML configuration file. Environment variables and a
.env file override any field the file sets.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, SecretStr
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/termrelay.yaml")
DEFAULT_SERVER_URL = "https://backdoor-backend.onrender.com"
DEFAULT_API_KEY = "your-api-key-here"


class ServerConfig(BaseModel):
    base_url: str = Field(default=DEFAULT_SERVER_URL, description="Execution server base URL")
    api_key: SecretStr = Field(default=SecretStr(DEFAULT_API_KEY))
    timeout: float = Field(default=30.0, gt=0)


class DeviceConfig(BaseModel):
    device_id: str | None = Field(default=None, description="Fixed session owner identifier")
    id_file: str | None = Field(default=None, description="File holding the generated identifier")
    persist_generated: bool = Field(default=True)


class HistoryConfig(BaseModel):
    file: str | None = Field(default=None)
    max_entries: int = Field(default=500, gt=0)


class PreferencesConfig(BaseModel):
    file: str | None = Field(default=None, description="YAML file backing the preference store")


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for termrelay.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "TERMRELAY_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "yaml_file": DEFAULT_CONFIG_PATH,
        "extra": "ignore",
    }

    server: ServerConfig = Field(default_factory=ServerConfig)
    device: DeviceConfig = Field(default_factory=DeviceConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    preferences: PreferencesConfig = Field(default_factory=PreferencesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Earlier sources win: the YAML file only fills what env and .env leave unset
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: TERMINAL_* vars > TERMRELAY_* env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if path.exists():
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    class FileSettings(Settings):
        model_config = SettingsConfigDict(yaml_file=path)

    return FileSettings(**_env_overrides())


def _env_overrides() -> dict:
    """Collect overrides from the non-prefixed TERMINAL_* variables."""
    server = {}
    server_url = os.environ.get("TERMINAL_SERVER_URL", "")
    api_key = os.environ.get("TERMINAL_API_KEY", "")
    if server_url:
        server["base_url"] = server_url
    if api_key:
        server["api_key"] = api_key
    return {"server": server} if server else {}
