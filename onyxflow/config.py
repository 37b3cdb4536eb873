"""Configuration management for the dashboard core.

Loads from YAML config file with environment variable overrides.
Pattern: CONFIG__{SECTION}__{KEY} overrides nested YAML keys.
Example: CONFIG__SETTINGS__DEBOUNCE_MS=250
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field


# --- Backend ---


DEFAULT_DB_URL = "sqlite+aiosqlite:///data/onyxflow.db"


class BackendConfig(BaseModel):
    kind: Literal["sql", "rest"] = "sql"
    database_url: str = DEFAULT_DB_URL
    echo: bool = False
    rest_url: str = ""  # e.g. https://<project>.supabase.co
    api_key: str = ""  # from env: ONYXFLOW_API_KEY
    timeout_s: float = 10.0


# --- Settings persistence ---


class SettingsStoreConfig(BaseModel):
    storage_dir: str = "data/local_storage"
    storage_key: str = "onyxflow-settings"
    debounce_ms: int = Field(default=500, ge=0, description="Quiet period before a write")
    export_dir: str = "."
    prefers_dark: bool = False  # OS color scheme used when theme is "auto"


# --- Projects ---


class ProjectsConfig(BaseModel):
    deadline_days: int = Field(default=14, ge=0)


# --- Service Config ---


class ServiceConfig(BaseModel):
    backend: BackendConfig = BackendConfig()
    settings: SettingsStoreConfig = SettingsStoreConfig()
    projects: ProjectsConfig = ProjectsConfig()
    log_level: str = "INFO"


def get_database_url(config: BackendConfig) -> str:
    """Database URL from env, falling back to the configured one."""
    url = os.getenv("DATABASE_URL", config.database_url)
    # Common Heroku/Cloud SQL pattern: postgres:// → postgresql://
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql+asyncpg://", 1)
    return url


def _coerce_env_value(value: str):
    """Booleans, ints and floats (``timeout_s``); anything else stays a string."""
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    if any(ch.isdigit() for ch in value):
        try:
            return float(value)
        except ValueError:
            pass
    return value


def _apply_env_overrides(config_dict: dict, prefix: str = "CONFIG") -> dict:
    """Overlay CONFIG__SECTION__KEY variables onto the loaded YAML.

    A section given as a scalar in YAML is replaced by a dict.
    """
    for key, value in os.environ.items():
        if not key.startswith(f"{prefix}__"):
            continue
        section, *rest = key[len(prefix) + 2 :].lower().split("__")
        if not rest:
            config_dict[section] = _coerce_env_value(value)
            continue
        target = config_dict
        for part in [section, *rest[:-1]]:
            if not isinstance(target.get(part), dict):
                target[part] = {}
            target = target[part]
        target[rest[-1]] = _coerce_env_value(value)
    return config_dict


def load_config(
    config_path: Optional[str] = None,
) -> ServiceConfig:
    """Load configuration from YAML file with env overrides.

    Priority: env vars > YAML file > defaults
    """
    config_dict = {}

    # 1. Load YAML if exists
    if config_path is None:
        config_path = os.getenv("CONFIG_PATH", "config/onyxflow.yml")
    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            config_dict = yaml.safe_load(f) or {}

    # 2. Apply env overrides
    config_dict = _apply_env_overrides(config_dict)

    # 3. REST key from dedicated env var
    backend = config_dict.setdefault("backend", {})
    if not backend.get("api_key"):
        backend["api_key"] = os.getenv("ONYXFLOW_API_KEY", "")

    if os.getenv("LOG_LEVEL") and "log_level" not in config_dict:
        config_dict["log_level"] = os.environ["LOG_LEVEL"]

    return ServiceConfig(**config_dict)
