"""
app/repositories package marker.
"""

from app.repositories.project_repository import ProjectRepository
from app.repositories.property_repository import PropertyRecordRepository

__all__ = [
    "ProjectRepository",
    "PropertyRecordRepository",
]
