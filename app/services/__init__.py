"""
app/services package marker.
"""

from app.services.price_ingestion_service import (
    PriceIngestionService,
    ResolvedTarget,
    get_price_ingestion_service,
)
from app.services.target_locks import TargetLockRegistry
from app.services.target_naming import choose_project_name, extract_project_name, slugify

__all__ = [
    "PriceIngestionService",
    "ResolvedTarget",
    "TargetLockRegistry",
    "choose_project_name",
    "extract_project_name",
    "get_price_ingestion_service",
    "slugify",
]
