"""
app/api/routers package marker.
"""

from app.api.routers.price_upload import router as price_upload_router

__all__ = [
    "price_upload_router",
]
