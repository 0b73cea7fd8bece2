"""
db/models/project.py

Project model: the ingestion target a developer uploads price lists into.
A project is identified per owner by its slug; re-uploading a file that
resolves to the same slug replaces the project's property records.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Index, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.property_record import PropertyRecord


class Project(Base, TimestampMixin):
    """
    One developer investment (housing estate, building) holding property records.
    """

    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        comment="Developer account that owns the project",
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    slug: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="URL-safe name; unique per owner",
    )

    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    properties: Mapped[list["PropertyRecord"]] = relationship(
        "PropertyRecord",
        back_populates="project",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        UniqueConstraint("owner_id", "slug", name="uq_projects_owner_id_slug"),
        Index("ix_projects_owner_id", "owner_id"),
    )

    def __repr__(self) -> str:
        return f"<Project id={self.id} owner_id={self.owner_id!r} slug={self.slug!r}>"
