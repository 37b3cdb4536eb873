"""Settings manager — versioned, category-partitioned configuration.

Handles:
- Load from durable storage with merge against compiled-in defaults
- Leaf updates, per-category and full resets
- Debounced persistence (one pending write, rescheduled on every change)
- Live appearance side effects on the document scope
- JSON export/import

Constructed once at startup and passed to its consumers.
"""

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from onyxflow.prompts import Prompter
from onyxflow.settings.effects import DocumentScope
from onyxflow.settings.schema import (
    CATEGORIES,
    Category,
    SettingsState,
    default_settings,
    merge_with_defaults,
    now_ms,
)
from onyxflow.settings.storage import KeyValueStorage

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "onyxflow-settings"


class SettingsManager:
    """Owns the live ``SettingsState`` and its persistence."""

    def __init__(
        self,
        storage: KeyValueStorage,
        prompter: Prompter,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        debounce_ms: int = 500,
        document: Optional[DocumentScope] = None,
    ):
        self.storage = storage
        self.prompter = prompter
        self.storage_key = storage_key
        self.debounce_s = debounce_ms / 1000
        self.document = document or DocumentScope()

        self.settings: SettingsState = default_settings()
        self.is_saving = False
        self._save_timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

        self.document.apply_appearance(self.settings.appearance)

    # --- Loading ---

    def load(self) -> SettingsState:
        """Load the stored blob; absent or malformed input keeps the defaults."""
        raw_text = self.storage.get_item(self.storage_key)
        if raw_text is None:
            logger.info("No saved settings, using defaults")
            return self.settings

        try:
            raw = json.loads(raw_text)
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to load settings: {e}, using defaults")
            return self.settings
        if not isinstance(raw, dict):
            logger.warning("Saved settings are not an object, using defaults")
            return self.settings

        merged, rejected = merge_with_defaults(raw)
        if rejected:
            logger.warning(f"Invalid saved values, categories reset to defaults: {rejected}")
        self.settings = merged
        self.document.apply_appearance(self.settings.appearance)
        logger.info("Settings loaded")
        return self.settings

    # --- Mutation ---

    @staticmethod
    def _category_model(category: str) -> type[Category]:
        try:
            return CATEGORIES[category]
        except KeyError:
            raise KeyError(f"Unknown settings category '{category}'") from None

    def get(self, category: str, key: str) -> Any:
        model = self._category_model(category)
        return getattr(getattr(self.settings, category), model.resolve_key(key))

    def update(self, category: str, key: str, value: Any) -> SettingsState:
        """Replace one leaf value and bump ``last_updated``.

        Raises:
            KeyError: unknown category or key.
            ValueError: the value does not validate for that key.
        """
        model = self._category_model(category)
        field = model.resolve_key(key)
        current = getattr(self.settings, category)
        updated = model.model_validate({**current.model_dump(), field: value})
        self._replace(category, updated)
        return self.settings

    def reset_category(self, category: str) -> SettingsState:
        """Restore one category to its compiled-in defaults."""
        model = self._category_model(category)
        self._replace(category, model())
        logger.info(f"Settings category '{category}' reset")
        return self.settings

    def reset_all(self, prompter: Optional[Prompter] = None) -> bool:
        """Restore all defaults after confirmation and undo live effects."""
        prompter = prompter or self.prompter
        if not prompter.confirm(
            "Are you sure you want to reset all settings to default? This cannot be undone."
        ):
            return False

        with self._lock:
            self._cancel_save()
            self.settings = default_settings()
            self.storage.remove_item(self.storage_key)
            self.is_saving = False

        self.document.clear()
        self.document.apply_appearance(self.settings.appearance)
        logger.info("All settings reset to defaults")
        return True

    def _replace(self, category: str, value: Category) -> None:
        last_updated = max(now_ms(), self.settings.last_updated)
        self._commit(
            self.settings.model_copy(update={category: value, "last_updated": last_updated}),
            appearance_changed=category == "appearance",
        )

    def _commit(self, settings: SettingsState, appearance_changed: bool) -> None:
        self.settings = settings
        if appearance_changed:
            self.document.apply_appearance(settings.appearance)
        self._schedule_save()

    # --- Debounced persistence ---

    def _schedule_save(self) -> None:
        """(Re)start the quiet-period timer; only the last change gets written."""
        with self._lock:
            self._cancel_save()
            self.is_saving = True
            timer = threading.Timer(self.debounce_s, lambda: self._timer_fired(timer))
            timer.daemon = True
            self._save_timer = timer
            timer.start()

    def _cancel_save(self) -> None:
        if self._save_timer is not None:
            self._save_timer.cancel()
        self._save_timer = None

    def _timer_fired(self, timer: threading.Timer) -> None:
        with self._lock:
            # Superseded by a newer change while waiting for the lock
            if self._save_timer is not timer:
                return
            self._write()

    def _write(self) -> None:
        try:
            self.storage.set_item(self.storage_key, json.dumps(self.settings.to_blob()))
            logger.debug("Settings persisted")
        except OSError as e:
            logger.error(f"Failed to persist settings: {e}")
        finally:
            self._save_timer = None
            self.is_saving = False

    def flush(self) -> None:
        """Write a pending change now instead of after the quiet period."""
        with self._lock:
            if self._save_timer is None:
                return
            self._save_timer.cancel()
            self._write()

    # --- Export / import ---

    def export_json(self) -> str:
        return json.dumps(self.settings.to_blob(), indent=2)

    @staticmethod
    def export_filename() -> str:
        return f"onyxflow_settings_{datetime.now(timezone.utc).date().isoformat()}.json"

    def export_settings(self, directory: str | Path = ".") -> Path:
        """Write the settings as ``onyxflow_settings_<date>.json`` and return the path."""
        path = Path(directory) / self.export_filename()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.export_json(), encoding="utf-8")
        logger.info(f"Settings exported to {path}")
        return path

    def import_settings(self, text: str) -> bool:
        """Replace the settings from exported JSON. Never raises."""
        try:
            parsed = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            logger.error(f"Settings import failed: {e}")
            return False
        if (
            not isinstance(parsed, dict)
            or not isinstance(parsed.get("general"), dict)
            or not isinstance(parsed.get("appearance"), dict)
        ):
            logger.error("Settings import failed: invalid settings format")
            return False

        merged, rejected = merge_with_defaults(parsed)
        if rejected:
            logger.warning(f"Imported values rejected, categories reset to defaults: {rejected}")
        # An old export must not move the timestamp backwards
        merged = merged.model_copy(
            update={"last_updated": max(now_ms(), self.settings.last_updated)}
        )
        self._commit(merged, appearance_changed=True)
        logger.info("Settings imported")
        return True
