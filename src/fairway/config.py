"""
Fairway Configuration System

Loads configuration from:
1. Default config (config/default.yaml in package)
2. User config (~/.fairway/config/fairway.yaml)
3. Environment variables (FAIRWAY_ prefix)

Uses Pydantic for validation and type coercion.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def expand_path(path: str | Path | None) -> Path | None:
    """Expand ~ and environment variables in paths."""
    if path is None:
        return None
    expanded = os.path.expandvars(os.path.expanduser(str(path)))
    return Path(expanded)


class AppMeta(BaseModel):
    """Core application metadata."""

    name: str = "Fairway"
    version: str = "0.1.0"


class LogConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "console"] = "json"
    file: Path | None = None

    @field_validator("file", mode="before")
    @classmethod
    def expand_file_path(cls, v: Any) -> Path | None:
        return expand_path(v)


class DatabaseConfig(BaseModel):
    """Database configuration."""

    driver: Literal["sqlite", "postgresql"] = "sqlite"
    path: Path = Path("~/.fairway/data/fairway.db")
    echo: bool = False

    # PostgreSQL settings
    host: str | None = None
    port: int = 5432
    user: str | None = None
    password: str | None = None
    database: str | None = None

    @field_validator("path", mode="before")
    @classmethod
    def expand_db_path(cls, v: Any) -> Path:
        expanded = expand_path(v)
        return expanded if expanded else Path("~/.fairway/data/fairway.db")

    @property
    def url(self) -> str:
        """Generate SQLAlchemy connection URL."""
        if self.driver == "sqlite":
            # Ensure parent directory exists
            self.path.parent.mkdir(parents=True, exist_ok=True)
            return f"sqlite+aiosqlite:///{self.path}"
        elif self.driver == "postgresql":
            if not all([self.host, self.user, self.database]):
                raise ValueError("PostgreSQL requires host, user, and database")
            auth = f"{self.user}:{self.password}@" if self.password else f"{self.user}@"
            return f"postgresql+asyncpg://{auth}{self.host}:{self.port}/{self.database}"
        else:
            raise ValueError(f"Unsupported database driver: {self.driver}")


class LLMConfig(BaseModel):
    """LLM configuration."""

    provider: str = "claude"  # claude or openai
    fallback_provider: str | None = None
    claude_model: str = "claude-sonnet-4-20250514"
    openai_model: str = "gpt-4o-mini"
    max_tokens: int = 500
    temperature: float = 0.7
    timeout: float = 30.0


class ChatConfig(BaseModel):
    """Chat session lifecycle configuration."""

    idle_timeout: float = 1800.0  # 30 minutes
    sweep_interval: float = 300.0  # 5 minutes
    max_attempts: int = Field(default=3, ge=1)
    backoff_step: float = 1.0
    max_history_turns: int | None = Field(default=40, ge=2)


class APIConfig(BaseModel):
    """HTTP API configuration."""

    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    jwt_secret: str | None = None
    jwt_algorithm: str = "HS256"


class FairwayConfig(BaseSettings):
    """
    Main Fairway configuration.

    Loads from YAML files and environment variables.
    Environment variables use FAIRWAY_ prefix and __ for nesting.
    Example: FAIRWAY_CHAT__IDLE_TIMEOUT=600
    """

    model_config = SettingsConfigDict(
        env_prefix="FAIRWAY_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    app: AppMeta = Field(default_factory=AppMeta)
    log: LogConfig = Field(default_factory=LogConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)
    api: APIConfig = Field(default_factory=APIConfig)


def find_config_file() -> Path | None:
    """
    Find the configuration file.

    Search order:
    1. ~/.fairway/config/fairway.yaml (user config)
    2. ./config/default.yaml (development default)
    3. Package default (installed)
    """
    user_config = Path.home() / ".fairway" / "config" / "fairway.yaml"
    if user_config.exists():
        return user_config

    dev_config = Path.cwd() / "config" / "default.yaml"
    if dev_config.exists():
        return dev_config

    package_config = Path(__file__).parent.parent.parent / "config" / "default.yaml"
    if package_config.exists():
        return package_config

    return None


def load_yaml_config(path: Path | None) -> dict[str, Any]:
    """Load configuration from YAML file."""
    if path is None or not path.exists():
        return {}

    with open(path) as f:
        data = yaml.safe_load(f)

    return data if data else {}


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_config() -> FairwayConfig:
    """
    Load complete configuration.

    Merges:
    1. Pydantic defaults
    2. YAML file configuration
    3. Environment variables (highest priority)
    """
    yaml_config = load_yaml_config(find_config_file())

    # pydantic-settings gives init kwargs priority over env vars, so drop
    # YAML sections the environment overrides
    env_config = FairwayConfig().model_dump(exclude_unset=True)
    config = FairwayConfig(**deep_merge(yaml_config, env_config))

    if config.database.driver == "sqlite":
        config.database.path.parent.mkdir(parents=True, exist_ok=True)

    return config


# Global config instance (lazy-loaded)
_config: FairwayConfig | None = None


def get_config() -> FairwayConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
