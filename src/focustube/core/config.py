"""Configuration management with Pydantic and YAML support."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from focustube.ai.schemas import ClassifierProvider


class ClassifierConfig(BaseModel):
    """Remote relevance classifier configuration."""

    provider: ClassifierProvider = Field(default=ClassifierProvider.GEMINI)
    model: str | None = Field(default=None, description="Defaults to the provider's model")
    base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    timeout_seconds: float = Field(default=15.0, gt=0)
    cache_policy: str = Field(default="unbounded", pattern="^(unbounded|lru|task)$")
    cache_max_entries: int = Field(default=1000, ge=1, description="Only used by the lru policy")


class TimerConfig(BaseModel):
    """Focus timer defaults."""

    focus_minutes: int = Field(default=25, ge=1, le=240)
    break_minutes: int = Field(default=10, ge=1, le=120)
    tick_seconds: float = Field(default=1.0, gt=0, description="Periodic re-evaluation interval")


class DispatcherConfig(BaseModel):
    """Re-evaluation scheduling configuration."""

    debounce_ms: int = Field(default=250, ge=0, description="Collapse triggers arriving within this window")


class Config(BaseSettings):
    """Main application configuration."""

    model_config = SettingsConfigDict(
        env_prefix="FOCUSTUBE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/focustube")
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".local/state/focustube")
    config_dir: Path = Field(default_factory=lambda: Path.home() / ".config/focustube")

    # Log level
    log_level: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")

    # Credential used when nothing is stored (environment or .env)
    gemini_api_key: str | None = Field(default=None, description="Remote classifier API key")

    # Sub-configurations
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    timer: TimerConfig = Field(default_factory=TimerConfig)
    dispatcher: DispatcherConfig = Field(default_factory=DispatcherConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment outranks the YAML values passed in as init kwargs
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @property
    def db_path(self) -> Path:
        """Path to SQLite database."""
        return self.data_dir / "focustube.db"

    @property
    def config_file(self) -> Path:
        """Path to YAML config file."""
        return self.config_dir / "config.yaml"

    def ensure_directories(self) -> None:
        """Create all required directories."""
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # The database holds the API key
        os.chmod(self.data_dir, 0o700)

    @classmethod
    def load(cls, config_path: Path | None = None) -> Config:
        """Load configuration from YAML file, environment variables, and defaults.

        Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values
        """
        config_path = config_path or Path.home() / ".config/focustube/config.yaml"

        yaml_config: dict[str, Any] = {}
        if config_path.exists():
            with open(config_path) as f:
                yaml_config = yaml.safe_load(f) or {}

        return cls(**yaml_config)

    def save(self, config_path: Path | None = None) -> None:
        """Save current configuration to YAML file."""
        config_path = config_path or self.config_file
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.model_dump(
            mode="json",
            exclude={"gemini_api_key"},
            exclude_none=True,
        )

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        os.chmod(config_path, 0o600)


@lru_cache
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.load()
