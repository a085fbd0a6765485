"""Environment-driven settings.

Values come from ``PAKS_*`` environment variables (nested fields use
``__``, e.g. ``PAKS_LOGGING__LEVEL=DEBUG``) and an optional ``.env`` file.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from paks.config.logging_config import LoggingConfig


def _default_config_file() -> Path:
    return Path("~/.config/paks/config.yaml").expanduser()


def _default_skills_dir() -> Path:
    return Path("~/.paks/skills").expanduser()


class PaksSettings(BaseSettings):
    """Process-level settings.

    Attributes:
        config_file: Location of the user configuration file.
        skills_dir: Skills directory used when no agent directory applies.
        registry_url: Override for the default registry's URL.
        request_timeout: Registry HTTP timeout in seconds.
        logging: Logging configuration.
    """

    model_config = SettingsConfigDict(
        env_prefix="PAKS_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    config_file: Path = Field(default_factory=_default_config_file)
    skills_dir: Path = Field(default_factory=_default_skills_dir)
    registry_url: str | None = None
    request_timeout: float = Field(default=30.0, gt=0)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("config_file", "skills_dir", mode="after")
    @classmethod
    def _expand_user(cls, value: Path) -> Path:
        return value.expanduser()
