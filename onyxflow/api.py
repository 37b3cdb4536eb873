"""OnyxFlow dashboard API.

FastAPI application providing REST API for:
- Clients and projects (backed by the entity synchronizer)
- Cascade delete with explicit confirmation (``?confirm=true``)
- Per-project session timers
- Notification feed
- Settings (leaf updates, resets, export/import, theme stylesheet)

Usage (local):
  uvicorn onyxflow.api:app --reload
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel

from onyxflow import __version__
from onyxflow.config import ServiceConfig, load_config
from onyxflow.dashboard import Dashboard, build_dashboard
from onyxflow.errors import InvalidReferenceError, RemoteStoreError
from onyxflow.models import (
    Client,
    ClientStatus,
    Notification,
    Project,
    ProjectDraft,
    ProjectStatus,
    ProjectTemplate,
)
from onyxflow.notifications import FilterKind
from onyxflow.prompts import StaticPrompter
from onyxflow.suggestions import suggest_project_names
from onyxflow.templates import BUILTIN_TEMPLATES
from onyxflow.timer import TimeTracker

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO"),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


class StatusUpdate(BaseModel):
    status: ProjectStatus


class SettingValue(BaseModel):
    value: Any


def get_dashboard(request: Request) -> Dashboard:
    dashboard = getattr(request.app.state, "dashboard", None)
    if dashboard is None:
        raise HTTPException(503, "Service not initialized")
    return dashboard


def _timer_state(tracker: TimeTracker) -> dict:
    return {"running": tracker.running, "elapsed": tracker.elapsed, "formatted": tracker.format()}


router = APIRouter(prefix="/api/v1")


# --- Sync ---


@router.post("/sync")
async def sync_all(dashboard: Dashboard = Depends(get_dashboard)):
    """Reload clients and projects from the backend."""
    success = await dashboard.sync.load_all()
    return {"success": success, "stats": dashboard.sync.stats()}


@router.get("/stats")
async def stats(dashboard: Dashboard = Depends(get_dashboard)):
    return dashboard.sync.stats()


# --- Clients ---


@router.get("/clients", response_model=list[Client])
async def list_clients(
    q: str = "",
    status: Optional[ClientStatus] = None,
    dashboard: Dashboard = Depends(get_dashboard),
):
    return dashboard.sync.search_clients(q, status)


@router.post("/clients", response_model=Client, status_code=201)
async def add_client(client: Client, dashboard: Dashboard = Depends(get_dashboard)):
    prompter = StaticPrompter(answer=False)
    added = await dashboard.sync.add_client(client, prompter=prompter)
    if added is None:
        raise HTTPException(502, prompter.alerts[-1] if prompter.alerts else "Failed to add client")
    return added


@router.get("/clients/{client_id}", response_model=Client)
async def get_client(client_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    client = dashboard.sync.get_client(client_id)
    if client is None:
        raise HTTPException(404, f"Client '{client_id}' not found")
    return client


@router.get("/clients/{client_id}/projects", response_model=list[Project])
async def client_projects(client_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    if dashboard.sync.get_client(client_id) is None:
        raise HTTPException(404, f"Client '{client_id}' not found")
    return dashboard.sync.projects_for_client(client_id)


@router.put("/clients/{client_id}", response_model=Client)
async def update_client(
    client_id: str,
    client: Client,
    dashboard: Dashboard = Depends(get_dashboard),
):
    if dashboard.sync.get_client(client_id) is None:
        raise HTTPException(404, f"Client '{client_id}' not found")
    updated = client.model_copy(update={"id": client_id})
    prompter = StaticPrompter(answer=False)
    if not await dashboard.sync.update_client(updated, prompter=prompter):
        raise HTTPException(502, prompter.alerts[-1] if prompter.alerts else "Failed to update client")
    return updated


@router.delete("/clients/{client_id}")
async def delete_client(
    client_id: str,
    confirm: bool = False,
    dashboard: Dashboard = Depends(get_dashboard),
):
    """Delete a client; with projects this cascades and needs ``confirm=true``."""
    if dashboard.sync.get_client(client_id) is None:
        raise HTTPException(404, f"Client '{client_id}' not found")

    prompter = StaticPrompter(answer=confirm)
    deleted = await dashboard.sync.delete_client(client_id, prompter=prompter)
    if prompter.alerts:
        raise HTTPException(502, prompter.alerts[-1])
    return {
        "deleted": deleted,
        "confirmation": prompter.questions[-1] if prompter.questions and not deleted else None,
    }


# --- Projects ---


@router.get("/projects", response_model=list[Project])
async def list_projects(q: str = "", dashboard: Dashboard = Depends(get_dashboard)):
    return dashboard.sync.search_projects(q)


@router.post("/projects", response_model=Project, status_code=201)
async def create_project(draft: ProjectDraft, dashboard: Dashboard = Depends(get_dashboard)):
    try:
        return await dashboard.sync.create_project(draft, prompter=StaticPrompter(answer=False))
    except InvalidReferenceError as e:
        raise HTTPException(422, str(e))
    except RemoteStoreError as e:
        raise HTTPException(502, f"Failed to create project: {e}")
    except ValueError as e:
        raise HTTPException(422, str(e))


@router.get("/projects/{project_id}", response_model=Project)
async def get_project(project_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    project = dashboard.sync.get_project(project_id)
    if project is None:
        raise HTTPException(404, f"Project '{project_id}' not found")
    return project


@router.patch("/projects/{project_id}/status")
async def update_project_status(
    project_id: str, update: StatusUpdate, dashboard: Dashboard = Depends(get_dashboard)
):
    if dashboard.sync.get_project(project_id) is None:
        raise HTTPException(404, f"Project '{project_id}' not found")
    success = await dashboard.sync.update_project_status(project_id, update.status)
    return {"success": success, "status": update.status}


@router.get("/projects/{project_id}/timer")
async def project_timer(project_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    tracker = dashboard.timer_for(project_id)
    if tracker is None:
        raise HTTPException(404, f"Project '{project_id}' not found")
    return _timer_state(tracker)


@router.post("/projects/{project_id}/timer/toggle")
async def toggle_project_timer(project_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    """Start or pause the session timer of a project (never written back)."""
    tracker = dashboard.timer_for(project_id)
    if tracker is None:
        raise HTTPException(404, f"Project '{project_id}' not found")
    tracker.toggle()
    return _timer_state(tracker)


@router.get("/templates", response_model=list[ProjectTemplate])
async def list_templates():
    return BUILTIN_TEMPLATES


@router.get("/suggestions")
async def project_name_suggestions(
    client_name: str, project_type: str, dashboard: Dashboard = Depends(get_dashboard)
):
    names = await suggest_project_names(client_name, project_type, dashboard.suggester)
    return {"names": names}


# --- Notifications ---


@router.get("/notifications", response_model=list[Notification])
async def list_notifications(
    kind: FilterKind = Query("all", alias="filter"),
    dashboard: Dashboard = Depends(get_dashboard),
):
    return dashboard.notifications.filter(kind)


@router.post("/notifications/read-all")
async def mark_all_read(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.notifications.mark_all_read()
    return {"unread": 0}


@router.post("/notifications/{notification_id}/read")
async def mark_read(notification_id: str, dashboard: Dashboard = Depends(get_dashboard)):
    if not dashboard.notifications.mark_read(notification_id):
        raise HTTPException(404, f"Notification '{notification_id}' not found")
    return {"unread": dashboard.notifications.unread_count}


@router.delete("/notifications")
async def clear_notifications(dashboard: Dashboard = Depends(get_dashboard)):
    dashboard.notifications.clear_all()
    return {"cleared": True}


# --- Settings ---


@router.get("/settings")
async def get_settings(dashboard: Dashboard = Depends(get_dashboard)):
    return {
        "settings": dashboard.settings.settings.to_blob(),
        "isSaving": dashboard.settings.is_saving,
    }


@router.put("/settings/{category}/{key}")
async def update_setting(
    category: str,
    key: str,
    body: SettingValue,
    dashboard: Dashboard = Depends(get_dashboard),
):
    try:
        settings = dashboard.settings.update(category, key, body.value)
    except KeyError as e:
        raise HTTPException(404, str(e.args[0]) if e.args else "Unknown setting")
    except ValueError as e:
        raise HTTPException(422, str(e))
    return {"settings": settings.to_blob(), "isSaving": dashboard.settings.is_saving}


@router.post("/settings/reset")
async def reset_all_settings(confirm: bool = False, dashboard: Dashboard = Depends(get_dashboard)):
    reset = dashboard.settings.reset_all(prompter=StaticPrompter(answer=confirm))
    return {"reset": reset, "settings": dashboard.settings.settings.to_blob()}


@router.post("/settings/{category}/reset")
async def reset_settings_category(category: str, dashboard: Dashboard = Depends(get_dashboard)):
    try:
        settings = dashboard.settings.reset_category(category)
    except KeyError as e:
        raise HTTPException(404, str(e.args[0]) if e.args else "Unknown category")
    return {"settings": settings.to_blob()}


@router.get("/settings/export", response_class=PlainTextResponse)
async def export_settings(dashboard: Dashboard = Depends(get_dashboard)):
    filename = dashboard.settings.export_filename()
    return PlainTextResponse(
        dashboard.settings.export_json(),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/settings/import")
async def import_settings(request: Request, dashboard: Dashboard = Depends(get_dashboard)):
    text = (await request.body()).decode("utf-8", errors="replace")
    if not dashboard.settings.import_settings(text):
        raise HTTPException(400, "Invalid settings file")
    return {"imported": True, "settings": dashboard.settings.settings.to_blob()}


@router.get("/settings/theme.css", response_class=PlainTextResponse)
async def theme_css(dashboard: Dashboard = Depends(get_dashboard)):
    return PlainTextResponse(dashboard.settings.document.to_css(), media_type="text/css")


# --- App ---


def create_app(config: Optional[ServiceConfig] = None) -> FastAPI:
    """Build the app; the dashboard is created once in the lifespan."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = config or load_config()
        logging.getLogger().setLevel(cfg.log_level.upper())
        prompter = StaticPrompter(answer=False)
        dashboard = build_dashboard(cfg, prompter)
        await dashboard.startup()
        app.state.dashboard = dashboard
        app.state.prompter = prompter
        logger.info(f"OnyxFlow API v{__version__} started (backend: {cfg.backend.kind})")
        yield
        await dashboard.shutdown()

    app = FastAPI(
        title="OnyxFlow",
        description="Client & project management dashboard core",
        version=__version__,
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health(request: Request):
        dashboard: Optional[Dashboard] = getattr(request.app.state, "dashboard", None)
        return {
            "status": "ok",
            "version": __version__,
            "backend": dashboard.config.backend.kind if dashboard else None,
            "clients": len(dashboard.sync.clients) if dashboard else 0,
            "projects": len(dashboard.sync.projects) if dashboard else 0,
        }

    app.include_router(router)
    return app


app = create_app()
