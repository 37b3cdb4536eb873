"""
OnyxFlow Test Configuration

Shared fixtures for all tests.
"""
import itertools
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List

import pytest

from onyxflow.errors import RemoteStoreError
from onyxflow.notifications import NotificationLog
from onyxflow.prompts import StaticPrompter
from onyxflow.store import CLIENTS, PROJECTS
from onyxflow.sync import EntitySynchronizer

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


# =============================================================================
# FAKE REMOTE STORE
# =============================================================================

class FakeStore:
    """In-memory remote store with the hosted backend's rules.

    - ids and ``created_at`` are assigned on insert
    - project rows come back with the owning client embedded
    - deleting a client that still owns projects is refused
    - ``fail_on`` holds ``(method, table)`` pairs that raise RemoteStoreError
    """

    def __init__(self):
        self.tables: Dict[str, List[dict]] = {CLIENTS: [], PROJECTS: []}
        self.calls: List[tuple] = []
        self.fail_on: set = set()
        self.closed = False
        self._tick = itertools.count()

    def _check(self, method: str, table: str):
        self.calls.append((method, table))
        if (method, table) in self.fail_on:
            raise RemoteStoreError(f"{method} on {table} refused", table=table)

    def _created_at(self) -> datetime:
        return datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=next(self._tick))

    def _with_join(self, table: str, row: dict) -> dict:
        data = dict(row)
        if table == PROJECTS:
            client = next(c for c in self.tables[CLIENTS] if c["id"] == row["client_id"])
            data["client"] = dict(client)
        return data

    def seed_client(self, name: str, **fields) -> str:
        row = {"id": uuid.uuid4().hex, "created_at": self._created_at(), "name": name, **fields}
        self.tables[CLIENTS].append(row)
        return row["id"]

    def seed_project(self, name: str, client_id: str, **fields) -> str:
        row = {
            "id": uuid.uuid4().hex,
            "created_at": self._created_at(),
            "name": name,
            "client_id": client_id,
            **fields,
        }
        self.tables[PROJECTS].append(row)
        return row["id"]

    async def select(self, table, *, order_by="created_at", descending=True):
        self._check("select", table)
        rows = sorted(self.tables[table], key=lambda r: r[order_by], reverse=descending)
        return [self._with_join(table, r) for r in rows]

    async def insert(self, table, row):
        self._check("insert", table)
        if table == PROJECTS and not any(c["id"] == row["client_id"] for c in self.tables[CLIENTS]):
            raise RemoteStoreError("insert or update on table \"projects\" violates foreign key")
        stored = {"id": uuid.uuid4().hex, "created_at": self._created_at(), **row}
        self.tables[table].append(stored)
        return self._with_join(table, stored)

    async def update(self, table, row_id, values):
        self._check("update", table)
        for row in self.tables[table]:
            if row["id"] == row_id:
                row.update(values)

    async def delete(self, table, *, column, value):
        self._check("delete", table)
        if table == CLIENTS and any(p["client_id"] == value for p in self.tables[PROJECTS]):
            raise RemoteStoreError("update or delete on table \"clients\" violates foreign key")
        self.tables[table] = [r for r in self.tables[table] if r.get(column) != value]

    async def close(self):
        self.closed = True


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def store() -> FakeStore:
    """Store seeded with two clients; Nova Studio owns two projects."""
    s = FakeStore()
    nova = s.seed_client("Nova Studio", company="Nova GmbH", status="Active", type="Agency")
    s.seed_client("Pixel Bakery", company="Pixel Bakery LLC", status="Prospective")
    s.seed_project(
        "Spring Rebrand", nova, status="In Progress", type="Brand Identity",
        deadline="2026-04-01", time_spent_seconds=3725,
    )
    s.seed_project("Launch Teaser", nova, status="Review", type="Video Edit")
    return s


@pytest.fixture
def notifications() -> NotificationLog:
    return NotificationLog()


@pytest.fixture
def prompter() -> StaticPrompter:
    return StaticPrompter(answer=True)


@pytest.fixture
def sync(store, notifications, prompter) -> EntitySynchronizer:
    return EntitySynchronizer(store, notifications, prompter, clock=lambda: FIXED_NOW)
