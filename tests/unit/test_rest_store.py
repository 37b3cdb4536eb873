"""Tests for the PostgREST store adapter (httpx mock transport)."""

import json

import httpx
import pytest

from onyxflow.errors import RemoteStoreError
from onyxflow.store import CLIENTS, PROJECTS
from onyxflow.store.rest_store import PROJECT_SELECT, RestStore

BASE = "https://demo.supabase.co"


def _store(handler) -> tuple[RestStore, list]:
    seen = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    return RestStore(BASE, "anon-key", transport=httpx.MockTransport(record)), seen


class TestRequests:
    @pytest.mark.asyncio
    async def test_select_projects_with_join(self):
        rows = [{"id": "p1", "name": "A", "client": {"id": "c1", "name": "Nova"}}]
        store, seen = _store(lambda r: httpx.Response(200, json=rows))

        assert await store.select(PROJECTS) == rows

        req = seen[0]
        assert req.method == "GET"
        assert req.url.path == "/rest/v1/projects"
        assert req.url.params["select"] == PROJECT_SELECT
        assert req.url.params["order"] == "created_at.desc"
        assert req.headers["apikey"] == "anon-key"
        assert req.headers["authorization"] == "Bearer anon-key"
        await store.close()

    @pytest.mark.asyncio
    async def test_select_clients_ascending(self):
        store, seen = _store(lambda r: httpx.Response(200, json=[]))
        await store.select(CLIENTS, descending=False)

        assert seen[0].url.params["select"] == "*"
        assert seen[0].url.params["order"] == "created_at.asc"
        await store.close()

    @pytest.mark.asyncio
    async def test_insert_returns_representation(self):
        store, seen = _store(lambda r: httpx.Response(201, json=[{"id": "c9", "name": "Orbit"}]))

        row = await store.insert(CLIENTS, {"name": "Orbit"})

        assert row == {"id": "c9", "name": "Orbit"}
        assert seen[0].method == "POST"
        assert seen[0].headers["prefer"] == "return=representation"
        assert json.loads(seen[0].content) == {"name": "Orbit"}
        await store.close()

    @pytest.mark.asyncio
    async def test_insert_without_row_back(self):
        store, _ = _store(lambda r: httpx.Response(201, json=[]))
        with pytest.raises(RemoteStoreError):
            await store.insert(CLIENTS, {"name": "Orbit"})
        await store.close()

    @pytest.mark.asyncio
    async def test_update_and_delete_filters(self):
        store, seen = _store(lambda r: httpx.Response(204))

        await store.update(PROJECTS, "p1", {"status": "Review"})
        await store.delete(PROJECTS, column="client_id", value="c1")

        assert seen[0].method == "PATCH"
        assert seen[0].url.params["id"] == "eq.p1"
        assert json.loads(seen[0].content) == {"status": "Review"}
        assert seen[1].method == "DELETE"
        assert seen[1].url.params["client_id"] == "eq.c1"
        await store.close()


class TestErrors:
    @pytest.mark.asyncio
    async def test_error_message_from_body(self):
        body = {"code": "23503", "message": "violates foreign key constraint"}
        store, _ = _store(lambda r: httpx.Response(409, json=body))

        with pytest.raises(RemoteStoreError, match="violates foreign key") as exc:
            await store.delete(CLIENTS, column="id", value="c1")
        assert exc.value.table == CLIENTS
        await store.close()

    @pytest.mark.asyncio
    async def test_missing_table(self):
        store, _ = _store(lambda r: httpx.Response(404, text="relation does not exist"))
        with pytest.raises(RemoteStoreError, match="404"):
            await store.select(CLIENTS)
        await store.close()

    @pytest.mark.asyncio
    async def test_transport_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        store, _ = _store(refuse)
        with pytest.raises(RemoteStoreError, match="connection refused"):
            await store.select(CLIENTS)
        await store.close()
