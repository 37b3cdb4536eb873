"""Settings categories and their compiled-in defaults.

Each category is a pydantic model that ignores unknown keys and fills
missing ones from its defaults, so validating a stored category *is* the
merge against defaults.
"""

import time
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    return int(time.time() * 1000)


class Category(BaseModel):
    """Base for one settings category (camelCase keys on disk)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        validate_assignment=True,
    )

    @classmethod
    def resolve_key(cls, key: str) -> str:
        """Field name for ``key`` given as field name or camelCase alias."""
        if key in cls.model_fields:
            return key
        for name, field in cls.model_fields.items():
            if field.alias == key:
                return name
        raise KeyError(f"Unknown setting '{key}' in {cls.__name__}")


class GeneralSettings(Category):
    project_location: str = "D:/Creative/Projects"
    startup_behavior: Literal["dashboard", "lastProject", "minimized"] = "dashboard"
    language: str = "en"
    date_format: str = "yyyy-MM-dd"
    currency: str = "USD"
    timezone: str = "UTC"
    auto_detect_timezone: bool = True


class AppearanceSettings(Category):
    theme: Literal["light", "dark", "auto", "custom"] = "dark"
    accent_color: str = Field(default="#4f46e5", pattern=r"^#?[0-9a-fA-F]{6}$")
    font_size: Literal["small", "medium", "large", "xl"] = "medium"
    sidebar_position: Literal["left", "right"] = "left"
    view_density: Literal["compact", "comfortable"] = "comfortable"
    dashboard_layout: Literal["grid", "list", "kanban"] = "grid"
    color_coding: bool = True


class ProjectSettings(Category):
    default_status: str = "Not Started"
    auto_archive: bool = False
    auto_archive_days: int = 30
    default_type: str = "Brand Identity"
    naming_convention: str = "{Date}_{Client}_{Project}"
    file_versioning: bool = True
    versioning_format: str = "v1"
    auto_project_ids: bool = False
    id_prefix: str = "PRJ-"
    id_start: int = 1
    id_padding: int = 3


class StorageSettings(Category):
    storage_location: str = "D:/Creative"
    enable_backups: bool = True
    backup_frequency: Literal["daily", "weekly", "monthly", "custom"] = "daily"
    backup_location: str = "D:/Backups"
    retention_count: int = 5
    cloud_provider: Literal["none", "google", "dropbox", "onedrive"] = "none"
    storage_warning_threshold: int = Field(default=90, ge=0, le=100)
    auto_cleanup: bool = False
    cleanup_days: int = 30
    compress_backups: bool = True


class PerformanceSettings(Category):
    cache_size: int = 500
    thumbnail_generation: bool = True
    thumbnail_quality: Literal["low", "medium", "high"] = "medium"
    sync_frequency: Literal["realtime", "5s", "30s", "1m", "manual"] = "30s"
    recent_projects_count: int = 10
    search_indexing: bool = True


class SecuritySettings(Category):
    password_protection: bool = False
    auto_lock: bool = False
    auto_lock_minutes: int = 15
    data_encryption: bool = False
    activity_logging: bool = True
    analytics_opt_in: bool = False


CATEGORIES: dict[str, type[Category]] = {
    "general": GeneralSettings,
    "appearance": AppearanceSettings,
    "project": ProjectSettings,
    "storage": StorageSettings,
    "performance": PerformanceSettings,
    "security": SecuritySettings,
}


class SettingsState(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    general: GeneralSettings = GeneralSettings()
    appearance: AppearanceSettings = AppearanceSettings()
    project: ProjectSettings = ProjectSettings()
    storage: StorageSettings = StorageSettings()
    performance: PerformanceSettings = PerformanceSettings()
    security: SecuritySettings = SecuritySettings()
    last_updated: int = Field(default_factory=now_ms)

    def to_blob(self) -> dict:
        """camelCase dict as written to storage and exports."""
        return self.model_dump(mode="json", by_alias=True)


def default_settings() -> SettingsState:
    return SettingsState()


def merge_with_defaults(raw: dict) -> tuple[SettingsState, list[str]]:
    """Merge a stored/imported blob onto the defaults, category by category.

    Unknown keys are dropped at both levels, missing keys come from the
    defaults. A category that fails validation falls back to its defaults.

    Returns:
        (merged state, names of categories that were reset)
    """
    merged = {}
    rejected = []
    for name, model in CATEGORIES.items():
        stored = raw.get(name)
        if not isinstance(stored, dict):
            merged[name] = model()
            continue
        try:
            merged[name] = model.model_validate(stored)
        except ValidationError:
            merged[name] = model()
            rejected.append(name)

    last_updated = raw.get("lastUpdated", raw.get("last_updated"))
    if not isinstance(last_updated, int) or isinstance(last_updated, bool):
        last_updated = now_ms()
    return SettingsState(**merged, last_updated=last_updated), rejected
