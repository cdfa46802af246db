"""
Benchmark configuration.

Values come from ``INFLUXBENCH_*`` environment variables and from an optional
JSON settings file; the environment wins. Keys in the settings file use the
PascalCase names ``Host``, ``Token``, ``Org``, ``Bucket`` and ``RoundTimeout``.
The file is ``appsettings.json`` in the working directory unless
``INFLUXBENCH_CONFIG`` names another one.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type
from urllib.parse import urlsplit

from pydantic import Field, ValidationError, field_validator
from pydantic.alias_generators import to_snake
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from influxbench.errors import ConfigurationError
from influxbench.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SETTINGS_FILE = "appsettings.json"
CONFIG_PATH_VARIABLE = "INFLUXBENCH_CONFIG"


def read_settings_file(path: Path) -> Dict[str, Any]:
    """Read a JSON settings file, turning its PascalCase keys into field names."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read settings file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings file {path} must contain a JSON object")
    logger.debug("Loaded settings file %s", path)
    return {to_snake(key): value for key, value in data.items()}


class SettingsFileSource(JsonConfigSettingsSource):
    """JSON settings source that accepts the PascalCase keys of appsettings.json."""

    def _read_file(self, file_path: Path) -> Dict[str, Any]:
        return read_settings_file(file_path)


def settings_file_path() -> Optional[Path]:
    explicit = os.environ.get(CONFIG_PATH_VARIABLE)
    if explicit:
        path = Path(explicit)
        if not path.is_file():
            raise ConfigurationError(f"Settings file not found: {path}")
        return path

    default = Path.cwd() / DEFAULT_SETTINGS_FILE
    return default if default.is_file() else None


class BenchmarkSettings(BaseSettings):
    """Connection and target settings for one benchmark run."""

    model_config = SettingsConfigDict(
        env_prefix="INFLUXBENCH_",
        extra="ignore",
        frozen=True,
        str_strip_whitespace=True,
    )

    host: str = Field(..., min_length=1, description="Database endpoint URL")
    token: str = Field(..., min_length=1, description="API token")
    org: str = Field(..., min_length=1, description="Organization name")
    bucket: str = Field(..., min_length=1, description="Target bucket name")
    round_timeout: Optional[float] = Field(
        None, gt=0, description="Seconds a single round may take before it is failed"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Earlier sources win
        return (
            init_settings,
            env_settings,
            SettingsFileSource(settings_cls, json_file=settings_file_path()),
        )

    @field_validator("host")
    @classmethod
    def _check_host(cls, value: str) -> str:
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https"):
            raise ValueError("host must be an http:// or https:// URL")
        if not parts.hostname:
            raise ValueError("host URL has no host name")
        return value.rstrip("/")

    def describe(self) -> str:
        """Settings summary without the token."""
        return f"host={self.host} org={self.org} bucket={self.bucket}"


def load_settings() -> BenchmarkSettings:
    """
    Build validated settings from the environment and the settings file.

    Raises:
        ConfigurationError: if a required value is missing or any value is invalid
    """
    try:
        return BenchmarkSettings()
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'settings'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid configuration: {problems}") from e
