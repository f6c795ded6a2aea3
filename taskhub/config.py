"""Application settings.

Values come from (lowest to highest precedence): field defaults, an optional
YAML file at ``config_path``, and ``TASKHUB_*`` environment variables.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="TASKHUB_", extra="ignore")

    app_name: str = "taskhub"
    app_env: str = "dev"
    log_level: str = "INFO"
    config_path: str = "config.yaml"
    host: str = "0.0.0.0"
    port: int = 3000
    api_prefix: str = "/api"

    database_url: str = "sqlite+aiosqlite:///./taskhub.db"
    sql_echo: bool = False
    db_pool_size: int = 10
    db_max_overflow: int = 20

    jwt_secret: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expiration_minutes: int = 60 * 24

    seed_on_startup: bool = True
    seed_demo_data: bool = False
    demo_password: str = "Password123!"

    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:4200", "http://localhost:4201"])


def _resolve_env_token(value: Any) -> Any:
    if isinstance(value, str) and value.startswith("os.environ/"):
        env_name = value.split("/", 1)[1]
        return os.getenv(env_name)
    if isinstance(value, dict):
        return {k: _resolve_env_token(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_resolve_env_token(v) for v in value]
    return value


def load_yaml_overrides(path: str | Path) -> dict[str, Any]:
    """Read settings overrides from a YAML file, if it exists."""
    cfg_path = Path(path)
    if not cfg_path.exists():
        return {}

    data = yaml.safe_load(cfg_path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {cfg_path} must contain a mapping")
    return _resolve_env_token(data)


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Build settings, layering YAML values under environment variables."""
    path = config_path or os.getenv("TASKHUB_CONFIG_PATH") or Settings.model_fields["config_path"].default
    overrides = load_yaml_overrides(path)

    env_settings = Settings()
    # Environment wins over the file for every field explicitly set there.
    explicit = env_settings.model_dump(exclude_unset=True)
    merged = {**overrides, **explicit, "config_path": str(path)}
    return Settings.model_validate(merged)


@lru_cache
def get_settings() -> Settings:
    return load_settings()
