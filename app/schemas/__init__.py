"""
app/schemas package marker.
"""

from app.schemas.price_upload import (
    PriceUploadResponse,
    PropertyPreviewResponse,
    RejectedRowResponse,
)

__all__ = [
    "PriceUploadResponse",
    "PropertyPreviewResponse",
    "RejectedRowResponse",
]
