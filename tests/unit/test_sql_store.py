"""Tests for the SQLAlchemy store against a fresh SQLite database.

Covers:
1. Schema creation
2. Insert with server-assigned ids and the project → client join
3. Ordering
4. Foreign key enforcement (no implicit cascade)
5. Partial updates
6. The synchronizer running on top of the real store
"""

import pytest
import pytest_asyncio

from onyxflow.errors import RemoteStoreError
from onyxflow.models import Client, ProjectDraft, ProjectStatus
from onyxflow.notifications import NotificationLog
from onyxflow.prompts import StaticPrompter
from onyxflow.store import CLIENTS, PROJECTS
from onyxflow.store.connection import build_engine, init_db
from onyxflow.store.sql_store import SqlStore
from onyxflow.sync import EntitySynchronizer


@pytest_asyncio.fixture
async def sql_store(tmp_path):
    """Fresh SQLite database for each test."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    await init_db(engine)
    s = SqlStore(engine)
    yield s
    await s.close()


async def _client(store, name="Nova Studio", **fields) -> dict:
    return await store.insert(CLIENTS, {"name": name, **fields})


class TestInsert:
    @pytest.mark.asyncio
    async def test_client_gets_id_and_timestamp(self, sql_store):
        row = await _client(sql_store, email="hi@nova.io", tags=["vip"])
        assert len(row["id"]) == 36
        assert row["created_at"] is not None
        assert row["tags"] == ["vip"]
        assert row["status"] == "Active"

    @pytest.mark.asyncio
    async def test_project_row_embeds_client(self, sql_store):
        client = await _client(sql_store)
        row = await sql_store.insert(PROJECTS, {
            "name": "Spring Rebrand",
            "client_id": client["id"],
            "deadline": "2026-04-01",
            "folder_structure": [{"id": "f1", "name": "01_Discovery", "type": "folder"}],
        })
        assert row["client"]["id"] == client["id"]
        assert row["client"]["name"] == "Nova Studio"
        assert row["deadline"].isoformat() == "2026-04-01"
        assert row["folder_structure"][0]["name"] == "01_Discovery"

    @pytest.mark.asyncio
    async def test_unknown_client_violates_foreign_key(self, sql_store):
        with pytest.raises(RemoteStoreError):
            await sql_store.insert(PROJECTS, {"name": "Orphan", "client_id": "nope"})

    @pytest.mark.asyncio
    async def test_unknown_column_rejected(self, sql_store):
        with pytest.raises(RemoteStoreError):
            await _client(sql_store, favourite_color="teal")

    @pytest.mark.asyncio
    async def test_unknown_table_rejected(self, sql_store):
        with pytest.raises(RemoteStoreError):
            await sql_store.insert("invoices", {"name": "x"})


class TestSelect:
    @pytest.mark.asyncio
    async def test_newest_first(self, sql_store):
        await _client(sql_store, "Old", created_at="2026-01-01T00:00:00+00:00")
        await _client(sql_store, "Newest", created_at="2026-03-01T00:00:00+00:00")
        await _client(sql_store, "Middle", created_at="2026-02-01T00:00:00+00:00")

        rows = await sql_store.select(CLIENTS)
        assert [r["name"] for r in rows] == ["Newest", "Middle", "Old"]

        rows = await sql_store.select(CLIENTS, descending=False)
        assert [r["name"] for r in rows] == ["Old", "Middle", "Newest"]

    @pytest.mark.asyncio
    async def test_projects_joined(self, sql_store):
        client = await _client(sql_store)
        await sql_store.insert(PROJECTS, {"name": "A", "client_id": client["id"]})

        rows = await sql_store.select(PROJECTS)
        assert rows[0]["client"]["name"] == "Nova Studio"

    @pytest.mark.asyncio
    async def test_unknown_order_column(self, sql_store):
        with pytest.raises(RemoteStoreError):
            await sql_store.select(CLIENTS, order_by="bogus")


class TestUpdateDelete:
    @pytest.mark.asyncio
    async def test_partial_update(self, sql_store):
        client = await _client(sql_store)
        project = await sql_store.insert(PROJECTS, {
            "name": "A", "client_id": client["id"], "progress": 40,
        })
        await sql_store.update(PROJECTS, project["id"], {"status": "Review"})

        row = (await sql_store.select(PROJECTS))[0]
        assert row["status"] == "Review"
        assert row["progress"] == 40

    @pytest.mark.asyncio
    async def test_delete_client_with_projects_refused(self, sql_store):
        client = await _client(sql_store)
        await sql_store.insert(PROJECTS, {"name": "A", "client_id": client["id"]})

        with pytest.raises(RemoteStoreError):
            await sql_store.delete(CLIENTS, column="id", value=client["id"])
        assert len(await sql_store.select(CLIENTS)) == 1

    @pytest.mark.asyncio
    async def test_delete_projects_then_client(self, sql_store):
        client = await _client(sql_store)
        other = await _client(sql_store, "Pixel Bakery")
        await sql_store.insert(PROJECTS, {"name": "A", "client_id": client["id"]})
        await sql_store.insert(PROJECTS, {"name": "B", "client_id": client["id"]})
        await sql_store.insert(PROJECTS, {"name": "C", "client_id": other["id"]})

        await sql_store.delete(PROJECTS, column="client_id", value=client["id"])
        await sql_store.delete(CLIENTS, column="id", value=client["id"])

        assert [r["name"] for r in await sql_store.select(PROJECTS)] == ["C"]
        assert [r["name"] for r in await sql_store.select(CLIENTS)] == ["Pixel Bakery"]


class TestSynchronizerOnSql:
    @pytest.mark.asyncio
    async def test_full_lifecycle(self, sql_store):
        notifications = NotificationLog()
        sync = EntitySynchronizer(sql_store, notifications, StaticPrompter(answer=True))
        assert await sync.load_all() is True

        client = await sync.add_client(Client(name="Nova Studio", phone=4930123))
        assert client.phone == "4930123"
        project = await sync.create_project(
            ProjectDraft(name="Spring Rebrand", client_id=client.id, type="Brand Identity")
        )
        assert await sync.update_project_status(project.id, ProjectStatus.IN_PROGRESS)

        fresh = EntitySynchronizer(sql_store, NotificationLog(), StaticPrompter())
        await fresh.load_all()
        loaded = fresh.get_project(project.id)
        assert loaded.status is ProjectStatus.IN_PROGRESS
        assert loaded.client.name == "Nova Studio"
        assert [n.name for n in loaded.folder_structure[1].children] == ["Drafts", "Vector"]

        assert await sync.delete_client(client.id) is True
        assert await sql_store.select(PROJECTS) == []
        assert await sql_store.select(CLIENTS) == []
