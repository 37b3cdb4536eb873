"""Entity synchronizer — in-memory mirrors of clients and projects.

Handles:
- Full reload from the remote store (clients, then projects with the client join)
- Mutations through the remote store, applied locally only after confirmation
- Cascade delete of a client together with its projects
- Read-side views (client-scoped projects, search, dashboard stats)

The embedded client inside each project is a materialized view: it is
rebuilt on every ``load_all``, patched field-by-field only by targeted
project updates, and left as-is after a client update until the next
reload.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from pydantic import ValidationError

from onyxflow.errors import InvalidReferenceError, RemoteStoreError
from onyxflow.models import (
    Client,
    ClientStatus,
    DashboardStats,
    NotificationCategory,
    Priority,
    Project,
    ProjectDraft,
    ProjectStatus,
    ProjectTemplate,
)
from onyxflow.notifications import NotificationLog
from onyxflow.prompts import Prompter
from onyxflow.store import CLIENTS, PROJECTS, RemoteStore
from onyxflow.templates import BUILTIN_TEMPLATES, find_template, snapshot_structure

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EntitySynchronizer:
    """Single source of truth for clients and projects during a session."""

    def __init__(
        self,
        store: RemoteStore,
        notifications: NotificationLog,
        prompter: Prompter,
        *,
        deadline_days: int = 14,
        templates: Optional[list[ProjectTemplate]] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store
        self.notifications = notifications
        self.prompter = prompter
        self.deadline_days = deadline_days
        self.templates = templates or BUILTIN_TEMPLATES
        self.clock = clock

        self.clients: list[Client] = []
        self.projects: list[Project] = []
        self.focused_project: Optional[Project] = None
        self.loading = False

    # --- Loading ---

    async def load_all(self) -> bool:
        """Replace both mirrors from the remote store.

        Returns False (and leaves local state untouched) on failure.
        """
        self.loading = True
        try:
            client_rows = await self.store.select(CLIENTS)
            project_rows = await self.store.select(PROJECTS)
            clients = [Client.model_validate(row) for row in client_rows]
            projects = [Project.model_validate(row) for row in project_rows]
        except (RemoteStoreError, ValidationError) as e:
            logger.error(f"Error fetching data: {e}")
            self.notifications.push(
                NotificationCategory.SYSTEM,
                "Sync Error",
                "Failed to fetch data from the backend. Tables might be missing.",
                Priority.CRITICAL,
            )
            return False
        finally:
            self.loading = False

        self.clients = clients
        self.projects = projects
        if self.focused_project is not None:
            self.focused_project = self.get_project(self.focused_project.id)
        logger.info(f"Loaded {len(clients)} clients and {len(projects)} projects")
        return True

    # --- Projects ---

    async def create_project(
        self, draft: ProjectDraft, prompter: Optional[Prompter] = None
    ) -> Project:
        """Persist a new project and prepend it to the local list.

        Raises:
            InvalidReferenceError: the draft's client is not in the mirror.
            ValueError: the name is empty.
            RemoteStoreError: the insert was rejected (after alerting).
        """
        client = self.get_client(draft.client_id)
        if client is None:
            raise InvalidReferenceError(
                f"Client '{draft.client_id}' does not exist; load clients first"
            )
        name = draft.name.strip()
        if not name:
            raise ValueError("Project name must not be empty")

        template = find_template(draft.template or draft.type, self.templates)
        deadline = draft.deadline or (self.clock() + timedelta(days=self.deadline_days)).date()
        if draft.tags is not None:
            tags = draft.tags
        else:
            tags = [draft.type] if draft.type else []

        row = {
            "name": name,
            "client_id": client.id,
            "status": draft.status.value,
            "deadline": deadline.isoformat(),
            "progress": 0,
            "type": draft.type,
            "tags": tags,
            "thumbnail": draft.thumbnail,
            "folder_structure": [
                node.model_dump(mode="json") for node in snapshot_structure(template)
            ],
            "time_spent_seconds": 0,
        }

        try:
            data = await self.store.insert(PROJECTS, row)
        except RemoteStoreError as e:
            logger.error(f"Create Project Error: {e}")
            (prompter or self.prompter).alert(f"Failed to create project: {e}")
            raise

        project = Project.model_validate(data)
        self.projects.insert(0, project)
        self.notifications.push(
            NotificationCategory.PROJECT,
            "Project Created",
            f'New project "{project.name}" has been synced to the backend.',
        )
        return project

    async def update_project_status(self, project_id: str, status: ProjectStatus) -> bool:
        """Update only the status column; failures are logged, not alerted."""
        status = ProjectStatus(status)
        current = self.get_project(project_id)
        if current is not None and status is not current.status:
            if status not in current.status.suggested_next():
                logger.debug(
                    f"Off-path transition for {project_id}: "
                    f"{current.status.value} → {status.value}"
                )

        try:
            await self.store.update(PROJECTS, project_id, {"status": status.value})
        except RemoteStoreError as e:
            logger.error(f"Update Status Error for {project_id}: {e}")
            return False

        self.projects = [
            p.model_copy(update={"status": status}) if p.id == project_id else p
            for p in self.projects
        ]
        if self.focused_project is not None and self.focused_project.id == project_id:
            self.focused_project = self.focused_project.model_copy(update={"status": status})
        return True

    def focus_project(self, project_id: Optional[str]) -> Optional[Project]:
        """Set (or clear with None) the project shown in the detail view."""
        self.focused_project = self.get_project(project_id) if project_id else None
        return self.focused_project

    # --- Clients ---

    async def add_client(
        self, client: Client, prompter: Optional[Prompter] = None
    ) -> Optional[Client]:
        """Insert a client; the server assigns the id. None on failure."""
        row = client.model_dump(mode="json", exclude={"id"})
        try:
            data = await self.store.insert(CLIENTS, row)
        except RemoteStoreError as e:
            (prompter or self.prompter).alert(f"Failed to add client: {e}")
            return None

        added = Client.model_validate(data)
        self.clients.insert(0, added)
        self.notifications.push(
            NotificationCategory.CLIENT,
            "New Client Added",
            f'"{added.name}" has been added to the directory.',
        )
        return added

    async def update_client(self, client: Client, prompter: Optional[Prompter] = None) -> bool:
        """Full-row update keyed by id."""
        if not client.id:
            raise ValueError("Client id is required for an update")
        row = client.model_dump(mode="json", exclude={"id"})
        try:
            await self.store.update(CLIENTS, client.id, row)
        except RemoteStoreError as e:
            (prompter or self.prompter).alert(f"Failed to update client: {e}")
            return False

        self.clients = [client if c.id == client.id else c for c in self.clients]
        self.notifications.push(
            NotificationCategory.CLIENT,
            "Client Updated",
            f'Profile for "{client.name}" has been updated.',
        )
        return True

    async def delete_client(self, client_id: str, prompter: Optional[Prompter] = None) -> bool:
        """Delete a client, cascading to its projects after confirmation.

        Returns True only if the deletion happened. A declined confirmation
        and a remote failure both return False; only the failure alerts.
        """
        prompter = prompter or self.prompter
        client = self.get_client(client_id)
        if client is None:
            return False

        client_projects = self.projects_for_client(client_id)

        if client_projects:
            confirmed = prompter.confirm(
                f"WARNING: {client.name} has {len(client_projects)} existing projects.\n\n"
                f"Deleting this client will also PERMANENTLY DELETE all their projects.\n\n"
                f"Are you sure you want to proceed?"
            )
            if not confirmed:
                return False
            # Projects first: the client row is still referenced until they are gone
            try:
                await self.store.delete(PROJECTS, column="client_id", value=client_id)
            except RemoteStoreError as e:
                prompter.alert(f"Failed to clean up client projects: {e}")
                return False
        elif not prompter.confirm(
            f"Are you sure you want to delete {client.name}? This cannot be undone."
        ):
            return False

        try:
            await self.store.delete(CLIENTS, column="id", value=client_id)
        except RemoteStoreError as e:
            # Projects may already be gone remotely; nothing compensates for that
            prompter.alert(f"Failed to delete client: {e}")
            return False

        self.clients = [c for c in self.clients if c.id != client_id]
        self.projects = [p for p in self.projects if p.client.id != client_id]
        if self.focused_project is not None and self.focused_project.client.id == client_id:
            self.focused_project = None

        self.notifications.push(
            NotificationCategory.SYSTEM,
            "Client Deleted",
            f'Client "{client.name}" and their data have been removed.',
            Priority.HIGH,
        )
        return True

    # --- Views ---

    def get_client(self, client_id: str) -> Optional[Client]:
        return next((c for c in self.clients if c.id == client_id), None)

    def get_project(self, project_id: str) -> Optional[Project]:
        return next((p for p in self.projects if p.id == project_id), None)

    def projects_for_client(self, client_id: str) -> list[Project]:
        """Projects of a client present in the mirror; empty for unknown clients."""
        if self.get_client(client_id) is None:
            return []
        return [p for p in self.projects if p.client.id == client_id]

    def client_project_count(self, client_id: str) -> int:
        return len(self.projects_for_client(client_id))

    def orphaned_projects(self) -> list[Project]:
        """Projects whose embedded client is not in the client mirror."""
        known = {c.id for c in self.clients}
        return [p for p in self.projects if p.client.id not in known]

    def search_projects(self, query: str = "") -> list[Project]:
        q = query.strip().lower()
        if not q:
            return list(self.projects)
        return [
            p for p in self.projects
            if q in p.name.lower() or q in p.client.name.lower()
        ]

    def search_clients(
        self, query: str = "", status: Optional[ClientStatus] = None
    ) -> list[Client]:
        q = query.strip().lower()
        return [
            c for c in self.clients
            if (not q or q in c.name.lower() or q in c.company.lower())
            and (status is None or c.status is status)
        ]

    def stats(self) -> DashboardStats:
        return DashboardStats(
            total_projects=len(self.projects),
            in_progress=sum(1 for p in self.projects if p.status is ProjectStatus.IN_PROGRESS),
            completed=sum(1 for p in self.projects if p.status is ProjectStatus.COMPLETED),
            clients=len(self.clients),
        )
