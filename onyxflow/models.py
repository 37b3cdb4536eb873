"""Pydantic models for clients, projects, folder templates and notifications.

Attribute names are snake_case; the JSON wire form uses camelCase aliases
(``folderStructure``, ``createdAt``, ...). Both are accepted on input, so
rows coming back from the store validate by field name while API payloads
validate by alias.
"""

import uuid
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class WireModel(BaseModel):
    """Base model with camelCase aliases on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )


# --- Enums ---


class ProjectStatus(str, Enum):
    """Project lifecycle states.

    The lifecycle is advisory: any transition is accepted.
    """

    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    REVIEW = "Review"
    COMPLETED = "Completed"
    ON_HOLD = "On Hold"

    @property
    def is_terminal(self) -> bool:
        return self is ProjectStatus.COMPLETED

    def suggested_next(self) -> set["ProjectStatus"]:
        """States the dashboard offers from this one."""
        path = {
            ProjectStatus.NOT_STARTED: ProjectStatus.IN_PROGRESS,
            ProjectStatus.IN_PROGRESS: ProjectStatus.REVIEW,
            ProjectStatus.REVIEW: ProjectStatus.COMPLETED,
        }
        if self.is_terminal:
            return set()
        if self is ProjectStatus.ON_HOLD:
            # The state before the hold is not tracked
            return {
                ProjectStatus.NOT_STARTED,
                ProjectStatus.IN_PROGRESS,
                ProjectStatus.REVIEW,
            }
        return {path[self], ProjectStatus.ON_HOLD}


class ClientStatus(str, Enum):
    ACTIVE = "Active"
    PROSPECTIVE = "Prospective"
    ON_HOLD = "On Hold"
    PAST = "Past"
    ARCHIVED = "Archived"


class ClientType(str, Enum):
    INDIVIDUAL = "Individual"
    SMALL_BUSINESS = "Small Business"
    AGENCY = "Agency"
    CORPORATION = "Corporation"


class NodeType(str, Enum):
    FOLDER = "folder"
    FILE = "file"


class TemplateCategory(str, Enum):
    DESIGN = "Design"
    VIDEO = "Video"
    SOCIAL = "Social"
    OTHER = "Other"


class NotificationCategory(str, Enum):
    PROJECT = "project"
    CLIENT = "client"
    SYSTEM = "system"
    TIME = "time"
    COLLAB = "collab"


class Priority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    NORMAL = "normal"
    LOW = "low"


# --- Entities ---


class Client(WireModel):
    """A studio client. Owned by the synchronizer's client mirror."""

    id: str = ""  # server-assigned
    name: str
    company: str = ""
    email: str = ""
    phone: str = ""
    avatar: str = ""
    type: ClientType = ClientType.INDIVIDUAL
    status: ClientStatus = ClientStatus.ACTIVE
    rating: float = 0
    tags: list[str] = []
    address: str = ""
    city: str = ""
    country: str = ""
    total_revenue: float = 0
    currency: str = "USD"
    joined_date: Optional[date] = None
    industry: str = ""
    website: str = ""
    notes: str = ""

    def __repr__(self) -> str:
        return f"<Client(id={self.id!r}, name={self.name!r}, status={self.status.value!r})>"


class FolderNode(WireModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:8])
    name: str
    type: NodeType = NodeType.FOLDER
    children: list["FolderNode"] = []

    def walk(self):
        """Yield this node and all descendants, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


class ProjectTemplate(WireModel):
    id: str
    name: str
    category: TemplateCategory = TemplateCategory.OTHER
    structure: list[FolderNode] = []


class Project(WireModel):
    """A project with its client embedded by value (denormalized join)."""

    id: str
    name: str
    client: Client
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    deadline: Optional[date] = None
    progress: int = Field(default=0, ge=0, le=100)
    type: str = ""
    tags: list[str] = []
    thumbnail: str = ""
    folder_structure: list[FolderNode] = []
    created_at: datetime = Field(default_factory=_utcnow)
    time_spent_seconds: int = Field(default=0, ge=0)

    @property
    def client_id(self) -> str:
        return self.client.id

    def __repr__(self) -> str:
        return (
            f"<Project(id={self.id!r}, name={self.name!r}, "
            f"client={self.client.id!r}, status={self.status.value!r})>"
        )


class ProjectDraft(WireModel):
    """Caller-side partial project, resolved by ``create_project``."""

    name: str
    client_id: str
    type: str = ""
    template: Optional[str] = None  # template name, defaults to ``type``
    status: ProjectStatus = ProjectStatus.NOT_STARTED
    tags: Optional[list[str]] = None
    thumbnail: str = ""
    deadline: Optional[date] = None


class Notification(WireModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    category: NotificationCategory = NotificationCategory.SYSTEM
    title: str
    message: str
    timestamp: datetime = Field(default_factory=_utcnow)
    read: bool = False
    priority: Priority = Priority.NORMAL


class DashboardStats(WireModel):
    total_projects: int = 0
    in_progress: int = 0
    completed: int = 0
    clients: int = 0
