"""
app/repositories/project_repository.py

Persistence helpers for ingestion targets (projects).
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.project import Project


class ProjectRepository:
    """
    Repository for looking up and creating projects.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get_by_id(self, project_id: uuid.UUID, *, for_update: bool = False) -> Project | None:
        """
        Load one project by primary key, optionally row-locking it.
        """

        stmt = select(Project).where(Project.id == project_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.execute(stmt).scalars().first()

    def get_by_owner_and_slug(self, *, owner_id: str, slug: str) -> Project | None:
        stmt = select(Project).where(
            Project.owner_id == owner_id,
            Project.slug == slug,
        )
        return self._session.execute(stmt).scalars().first()

    def create(
        self,
        *,
        owner_id: str,
        name: str,
        slug: str,
        description: str | None = None,
    ) -> Project:
        """
        Insert a project and flush so its id is available.
        """

        project = Project(
            owner_id=owner_id,
            name=name[:255],
            slug=slug,
            description=description[:500] if description else None,
        )
        self._session.add(project)
        self._session.flush()
        return project

    def list_for_owner(self, owner_id: str) -> list[Project]:
        stmt = select(Project).where(Project.owner_id == owner_id).order_by(Project.created_at.desc())
        return list(self._session.execute(stmt).scalars().all())
