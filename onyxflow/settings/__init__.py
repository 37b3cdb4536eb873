"""Settings persistence: schema, durable storage, live effects and the manager."""

from onyxflow.settings.effects import DocumentScope, adjust_brightness
from onyxflow.settings.manager import SettingsManager
from onyxflow.settings.schema import CATEGORIES, SettingsState, default_settings
from onyxflow.settings.storage import FileStorage, MemoryStorage

__all__ = [
    "CATEGORIES",
    "DocumentScope",
    "FileStorage",
    "MemoryStorage",
    "SettingsManager",
    "SettingsState",
    "adjust_brightness",
    "default_settings",
]
