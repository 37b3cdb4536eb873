"""Database tables for the dashboard backend.

Uses SQLAlchemy 2.0 with async support.
Backend-agnostic: works with SQLite (dev/tests) and PostgreSQL.
"""

import uuid
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy import (
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    """Base class for all tables."""
    pass


class ClientRow(Base):
    __tablename__ = "clients"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    # --- Identity ---
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    company: Mapped[str] = mapped_column(String(200), default="")
    email: Mapped[str] = mapped_column(String(200), default="")
    phone: Mapped[str] = mapped_column(String(50), default="")
    avatar: Mapped[str] = mapped_column(String(1000), default="")
    type: Mapped[str] = mapped_column(String(50), default="Individual")
    status: Mapped[str] = mapped_column(String(50), default="Active", nullable=False)
    rating: Mapped[float] = mapped_column(Float, default=0.0)
    tags: Mapped[list] = mapped_column(JSON, default=list)

    # --- Address ---
    address: Mapped[str] = mapped_column(String(300), default="")
    city: Mapped[str] = mapped_column(String(100), default="")
    country: Mapped[str] = mapped_column(String(100), default="")

    # --- Financials ---
    total_revenue: Mapped[float] = mapped_column(Float, default=0.0)
    currency: Mapped[str] = mapped_column(String(10), default="USD")

    joined_date: Mapped[Optional[date]] = mapped_column(Date)
    industry: Mapped[str] = mapped_column(String(100), default="")
    website: Mapped[str] = mapped_column(String(300), default="")
    notes: Mapped[str] = mapped_column(Text, default="")

    projects: Mapped[list["ProjectRow"]] = relationship(back_populates="client")

    def __repr__(self) -> str:
        return f"<ClientRow(id={self.id}, name='{self.name}')>"


class ProjectRow(Base):
    __tablename__ = "projects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, nullable=False
    )

    name: Mapped[str] = mapped_column(String(300), nullable=False)
    # No ON DELETE CASCADE: deleting a client with projects must fail
    client_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clients.id"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(50), default="Not Started", nullable=False)
    deadline: Mapped[Optional[date]] = mapped_column(Date)
    progress: Mapped[int] = mapped_column(Integer, default=0)
    type: Mapped[str] = mapped_column(String(100), default="")
    tags: Mapped[list] = mapped_column(JSON, default=list)
    thumbnail: Mapped[str] = mapped_column(String(1000), default="")
    folder_structure: Mapped[list] = mapped_column(JSON, default=list)
    time_spent_seconds: Mapped[int] = mapped_column(Integer, default=0)

    client: Mapped["ClientRow"] = relationship(back_populates="projects")

    def __repr__(self) -> str:
        return (
            f"<ProjectRow(id={self.id}, client={self.client_id}, "
            f"status='{self.status}', name='{self.name[:40]}')>"
        )


TABLE_MODELS: dict[str, type[Base]] = {
    ClientRow.__tablename__: ClientRow,
    ProjectRow.__tablename__: ProjectRow,
}
