"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.project import Project
from db.models.property_record import PropertyRecord

__all__ = [
    "Project",
    "PropertyRecord",
]
