"""Composition root: builds each component once and wires them together.

Pattern:
    dashboard = build_dashboard(config, prompter)
    await dashboard.startup()    # tables, settings, first sync
    ...
    await dashboard.shutdown()   # flush pending settings, close the store
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from onyxflow.config import ServiceConfig, get_database_url
from onyxflow.errors import RemoteStoreError
from onyxflow.notifications import NotificationLog
from onyxflow.prompts import Prompter
from onyxflow.settings import DocumentScope, FileStorage, SettingsManager
from onyxflow.store import RemoteStore
from onyxflow.store.connection import build_engine, init_db
from onyxflow.store.rest_store import RestStore
from onyxflow.store.sql_store import SqlStore
from onyxflow.suggestions import NameSuggester
from onyxflow.sync import EntitySynchronizer
from onyxflow.timer import TimeTracker

logger = logging.getLogger(__name__)


@dataclass
class Dashboard:
    config: ServiceConfig
    store: RemoteStore
    notifications: NotificationLog
    settings: SettingsManager
    sync: EntitySynchronizer
    suggester: Optional[NameSuggester] = None
    timer_clock: Callable[[], float] = time.monotonic
    timers: dict[str, TimeTracker] = field(default_factory=dict)

    async def startup(self, load: bool = True) -> None:
        if isinstance(self.store, SqlStore):
            try:
                await init_db(self.store.engine)
            except SQLAlchemyError as e:
                raise RemoteStoreError(f"Database setup failed: {e}") from e
        self.settings.load()
        if load:
            await self.sync.load_all()
        logger.info(
            f"Dashboard started: {len(self.sync.clients)} clients, "
            f"{len(self.sync.projects)} projects"
        )

    def timer_for(self, project_id: str) -> Optional[TimeTracker]:
        """Session tracker of a project, seeded from its stored time on first use.

        Trackers of projects that left the mirror are dropped.
        """
        project = self.sync.get_project(project_id)
        if project is None:
            self.timers.pop(project_id, None)
            return None
        tracker = self.timers.get(project_id)
        if tracker is None:
            tracker = TimeTracker(project.time_spent_seconds, clock=self.timer_clock)
            self.timers[project_id] = tracker
        return tracker

    async def shutdown(self) -> None:
        self.settings.flush()
        await self.store.close()
        logger.info("Dashboard shutdown.")


def build_store(config: ServiceConfig) -> RemoteStore:
    backend = config.backend
    if backend.kind == "rest":
        if not backend.rest_url:
            raise ValueError("backend.rest_url is required for the REST backend")
        return RestStore(backend.rest_url, backend.api_key, timeout_s=backend.timeout_s)
    return SqlStore(build_engine(get_database_url(backend), echo=backend.echo))


def build_dashboard(config: ServiceConfig, prompter: Prompter) -> Dashboard:
    store = build_store(config)
    notifications = NotificationLog()
    settings = SettingsManager(
        FileStorage(config.settings.storage_dir),
        prompter,
        storage_key=config.settings.storage_key,
        debounce_ms=config.settings.debounce_ms,
        document=DocumentScope(prefers_dark=lambda: config.settings.prefers_dark),
    )
    sync = EntitySynchronizer(
        store,
        notifications,
        prompter,
        deadline_days=config.projects.deadline_days,
    )
    return Dashboard(
        config=config,
        store=store,
        notifications=notifications,
        settings=settings,
        sync=sync,
    )
