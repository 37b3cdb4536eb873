"""In-memory notification feed driven by synchronizer outcomes.

Handles:
- Newest-first feed (no persistence, no retention policy)
- Read tracking (single / all)
- Filtering for the notification center (all, unread, critical)
"""

import logging
from typing import Literal, Optional

from onyxflow.models import Notification, NotificationCategory, Priority

logger = logging.getLogger(__name__)

FilterKind = Literal["all", "unread", "critical"]


class NotificationLog:
    """Append-only feed; only ``clear_all`` removes entries."""

    def __init__(self, initial: Optional[list[Notification]] = None):
        self._items: list[Notification] = list(initial or [])

    def push(
        self,
        category: NotificationCategory,
        title: str,
        message: str,
        priority: Priority = Priority.NORMAL,
    ) -> Notification:
        notification = Notification(
            category=category, title=title, message=message, priority=priority
        )
        self._items.insert(0, notification)
        log = logger.warning if priority is Priority.CRITICAL else logger.info
        log(f"[{category.value}/{priority.value}] {title}: {message}")
        return notification

    @property
    def items(self) -> list[Notification]:
        return list(self._items)

    @property
    def unread_count(self) -> int:
        return sum(1 for n in self._items if not n.read)

    def filter(self, kind: FilterKind = "all") -> list[Notification]:
        if kind == "unread":
            return [n for n in self._items if not n.read]
        if kind == "critical":
            return [n for n in self._items if n.priority is Priority.CRITICAL]
        return self.items

    def mark_read(self, notification_id: str) -> bool:
        """Mark one notification read. Returns False for unknown ids."""
        for i, n in enumerate(self._items):
            if n.id == notification_id:
                self._items[i] = n.model_copy(update={"read": True})
                return True
        return False

    def mark_all_read(self) -> None:
        self._items = [n.model_copy(update={"read": True}) for n in self._items]

    def clear_all(self) -> None:
        self._items = []

    def __len__(self) -> int:
        return len(self._items)
